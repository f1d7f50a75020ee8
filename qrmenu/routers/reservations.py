from fastapi import APIRouter, Depends, Response

from qrmenu.deps import require_notifier, require_repo, require_session
from qrmenu.errors import AttemptNotFound
from qrmenu.schemas.orders import AttemptOut, OutcomeOut, ReservationIn
from qrmenu.services.notify import Notifier
from qrmenu.services.payments import load_available_methods
from qrmenu.services.repository import SqlMenuRepository
from qrmenu.services.reservations import ReservationAttempt, reservation_attempts, time_slots
from qrmenu.services.tenant import TenantResolver
from qrmenu.session import SessionContext
from qrmenu.util.logger import MenuLogger

logger = MenuLogger(__name__)

router = APIRouter(prefix="/reservations", tags=["reservations"])


def _own_attempt(attempt_id: str, session: SessionContext) -> ReservationAttempt:
    attempt = reservation_attempts.get(attempt_id)
    if attempt.session_id != session.session_id:
        raise AttemptNotFound(attempt_id)
    return attempt


@router.get("/time-slots", response_model=list[str])
def list_time_slots():
    return time_slots()


@router.post("/{slug}/review", response_model=AttemptOut)
def review(
    slug: str,
    body: ReservationIn,
    repo: SqlMenuRepository = Depends(require_repo),
    session: SessionContext = Depends(require_session),
):
    business = TenantResolver(repo).resolve(slug)
    available = load_available_methods(repo, business)
    attempt = ReservationAttempt(business, session.session_id)
    out = attempt.request_confirmation(body, available)
    reservation_attempts.add(attempt)
    logger.info(f"reservation {attempt.id} awaiting confirmation ({business.slug})")
    return out


@router.post("/attempts/{attempt_id}/confirm", response_model=OutcomeOut)
def confirm(
    attempt_id: str,
    response: Response,
    repo: SqlMenuRepository = Depends(require_repo),
    notifier: Notifier = Depends(require_notifier),
    session: SessionContext = Depends(require_session),
):
    attempt = _own_attempt(attempt_id, session)
    outcome = attempt.confirm(repo, notifier)
    if outcome.succeeded:
        reservation_attempts.discard(attempt_id)
    else:
        response.status_code = 502
    return outcome.out()


@router.post("/attempts/{attempt_id}/retry", response_model=AttemptOut)
def retry(attempt_id: str, session: SessionContext = Depends(require_session)):
    attempt = _own_attempt(attempt_id, session)
    attempt.retry()
    return AttemptOut(attempt_id=attempt.id, state=attempt.state.value,
                      payment_method=attempt.draft.payment_method if attempt.draft else None)


@router.post("/attempts/{attempt_id}/cancel", response_model=AttemptOut)
def cancel(attempt_id: str, session: SessionContext = Depends(require_session)):
    attempt = _own_attempt(attempt_id, session)
    attempt.cancel()
    reservation_attempts.discard(attempt_id)
    return AttemptOut(attempt_id=attempt.id, state=attempt.state.value)
