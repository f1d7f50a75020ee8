from decimal import Decimal

from qrmenu.errors import TransientLoadError, ValidationError
from qrmenu.models.core import PaymentCode
from qrmenu.schemas.cart import CartLineOut
from qrmenu.schemas.menu import BusinessOut
from qrmenu.schemas.orders import AttemptOut, CheckoutIn, OrderDraft, OrderItemDraft, SummaryLine
from qrmenu.services.cart import SessionCartStore
from qrmenu.services.messages import money, order_message
from qrmenu.services.notify import Notifier
from qrmenu.services.payments import AvailableMethods, default_selection, display_name
from qrmenu.services.repository import MenuRepository
from qrmenu.services.submission import AttemptRegistry, AttemptState, Failure, Outcome, SubmissionAttempt
from qrmenu.util.logger import MenuLogger

logger = MenuLogger(__name__)


def _clean(text: str | None) -> str | None:
    text = (text or "").strip()
    return text or None


def build_order_draft(order_id: str, business_id: str, session_id: str | None, form: CheckoutIn,
                      payment_method: PaymentCode, lines: list[CartLineOut]) -> OrderDraft:
    """Snapshot the cart: unit price and line total are frozen at this point."""
    items = []
    for line in lines:
        unit_price = Decimal(line.product.price)
        items.append(OrderItemDraft(
            product_id=line.product_id,
            product_name=line.product.name,
            quantity=line.quantity,
            unit_price=unit_price,
            line_total=unit_price * line.quantity,
            special_instructions=line.special_instructions,
        ))
    return OrderDraft(
        id=order_id,
        business_id=business_id,
        session_id=session_id,
        customer_name=form.customer_name.strip(),
        customer_phone=form.customer_phone.strip(),
        customer_email=_clean(form.customer_email),
        notes=_clean(form.special_instructions),
        payment_method=payment_method,
        items=items,
        total_amount=sum((i.line_total for i in items), Decimal("0")),
    )


class CheckoutAttempt(SubmissionAttempt):
    noun = "order"
    success_message = "Your order was sent to the restaurant."
    persist_failed_message = "We could not record your order. Nothing was sent, please try again."
    notify_failed_message = (
        "Your order was saved, but we couldn't notify the restaurant. Please contact them directly."
    )

    def __init__(self, business: BusinessOut, session_id: str):
        super().__init__(business)
        self.session_id = session_id
        self.form: CheckoutIn | None = None
        self.payment_method: PaymentCode | None = None
        self.draft: OrderDraft | None = None
        self.line_ids: list[str] = []

    def _own_lines(self, lines: list[CartLineOut]) -> list[CartLineOut]:
        """Only lines from this business' catalog belong in its order."""
        return [l for l in lines if l.product.business_id == self.business.id]

    def request_confirmation(self, form: CheckoutIn, lines: list[CartLineOut],
                             available: AvailableMethods) -> AttemptOut:
        """
        Editing -> AwaitingConfirmation. Nothing leaves the process on a
        validation failure and the attempt stays editable.
        """
        if not form.customer_name.strip():
            raise ValidationError("Please enter your name.", field="customer_name")
        if not form.customer_phone.strip():
            raise ValidationError("Please enter your phone number.", field="customer_phone")
        lines = self._own_lines(lines)
        if not lines:
            raise ValidationError("Your cart is empty.", field="cart")
        if not available.configured:
            raise ValidationError(
                "This restaurant has no payment methods configured yet.", field="payment_method"
            )

        code = default_selection(available, form.payment_method)
        if form.payment_method is not None and code != form.payment_method:
            raise ValidationError("That payment method is not available.", field="payment_method")

        self._await_confirmation()
        self.form = form
        self.payment_method = code
        preview = build_order_draft(self.record_id, self.business.id, self.session_id, form, code, lines)
        return self.summary(preview)

    def summary(self, draft: OrderDraft) -> AttemptOut:
        rows = [SummaryLine(label=f"{i.quantity}x {i.product_name}", value=money(i.line_total)) for i in draft.items]
        rows.append(SummaryLine(label="Payment method", value=display_name(draft.payment_method)))
        return AttemptOut(
            attempt_id=self.id,
            state=self.state.value,
            summary=rows,
            total_amount=draft.total_amount,
            payment_method=draft.payment_method,
        )

    def confirm(self, repo: MenuRepository, notifier: Notifier, cart: SessionCartStore) -> Outcome:
        self._begin_submit()

        if not self.persisted:
            try:
                lines = self._own_lines(cart.list())
            except TransientLoadError as e:
                logger.error(f"order {self.record_id}: cart unreadable at submit: {e.message}")
                return self._finish(AttemptState.FAILED, self.persist_failed_message, Failure.PERSISTENCE)
            if not lines:
                self._back_to_editing()
                raise ValidationError("Your cart is empty.", field="cart")
            self.line_ids = [l.id for l in lines]
            self.draft = build_order_draft(
                self.record_id, self.business.id, self.session_id, self.form, self.payment_method, lines,
            )

        draft = self.draft
        outcome = self._run(lambda: repo.insert_order_with_items(draft), notifier, order_message(draft))

        if outcome.succeeded:
            try:
                cart.discard(self.line_ids)
            except TransientLoadError:
                # the order is recorded and staff know about it; a stale cart is the lesser problem
                logger.warning(f"order {self.record_id} sent but its lines in cart {self.session_id} were not removed")
        return outcome


checkout_attempts: AttemptRegistry[CheckoutAttempt] = AttemptRegistry()
