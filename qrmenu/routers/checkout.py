from fastapi import APIRouter, Depends, HTTPException, Response

from qrmenu.deps import require_cart, require_notifier, require_repo
from qrmenu.errors import AttemptNotFound
from qrmenu.services.payments import load_available_methods
from qrmenu.schemas.orders import AttemptOut, CheckoutIn, OrderOut, OutcomeOut
from qrmenu.services.cart import SessionCartStore
from qrmenu.services.checkout import CheckoutAttempt, checkout_attempts
from qrmenu.services.notify import Notifier
from qrmenu.services.repository import SqlMenuRepository
from qrmenu.services.tenant import TenantResolver
from qrmenu.util.logger import MenuLogger

logger = MenuLogger(__name__)

router = APIRouter(prefix="/checkout", tags=["checkout"])


def _own_attempt(attempt_id: str, cart: SessionCartStore) -> CheckoutAttempt:
    attempt = checkout_attempts.get(attempt_id)
    if attempt.session_id != cart.get_or_create_session_id():
        raise AttemptNotFound(attempt_id)
    return attempt


@router.post("/{slug}/review", response_model=AttemptOut)
def review(
    slug: str,
    body: CheckoutIn,
    repo: SqlMenuRepository = Depends(require_repo),
    cart: SessionCartStore = Depends(require_cart),
):
    """
    Validate the form against the current cart and the business' payment
    methods. On success the attempt waits for an explicit confirm call.
    """
    business = TenantResolver(repo).resolve(slug)
    available = load_available_methods(repo, business)
    attempt = CheckoutAttempt(business, cart.get_or_create_session_id())
    out = attempt.request_confirmation(body, cart.list(), available)
    checkout_attempts.add(attempt)
    logger.info(f"checkout {attempt.id} awaiting confirmation ({business.slug})")
    return out


@router.post("/attempts/{attempt_id}/confirm", response_model=OutcomeOut)
def confirm(
    attempt_id: str,
    response: Response,
    repo: SqlMenuRepository = Depends(require_repo),
    cart: SessionCartStore = Depends(require_cart),
    notifier: Notifier = Depends(require_notifier),
):
    attempt = _own_attempt(attempt_id, cart)
    outcome = attempt.confirm(repo, notifier, cart)
    if outcome.succeeded:
        checkout_attempts.discard(attempt_id)
    else:
        response.status_code = 502
    return outcome.out()


@router.post("/attempts/{attempt_id}/retry", response_model=AttemptOut)
def retry(attempt_id: str, cart: SessionCartStore = Depends(require_cart)):
    """Back to the confirmation prompt after a failure; the order id is kept."""
    attempt = _own_attempt(attempt_id, cart)
    attempt.retry()
    return AttemptOut(attempt_id=attempt.id, state=attempt.state.value, payment_method=attempt.payment_method)


@router.post("/attempts/{attempt_id}/cancel", response_model=AttemptOut)
def cancel(attempt_id: str, cart: SessionCartStore = Depends(require_cart)):
    attempt = _own_attempt(attempt_id, cart)
    attempt.cancel()
    checkout_attempts.discard(attempt_id)
    return AttemptOut(attempt_id=attempt.id, state=attempt.state.value)


@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    repo: SqlMenuRepository = Depends(require_repo),
    cart: SessionCartStore = Depends(require_cart),
):
    """Receipt for the session that placed the order."""
    order = repo.get_order(order_id)
    if not order or order.session_id != cart.get_or_create_session_id():
        raise HTTPException(404, "order not found")
    return order
