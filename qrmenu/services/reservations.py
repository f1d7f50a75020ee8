from datetime import date, datetime, time, timedelta

from qrmenu.config import settings
from qrmenu.errors import ValidationError
from qrmenu.schemas.menu import BusinessOut
from qrmenu.schemas.orders import AttemptOut, ReservationDraft, ReservationIn, SummaryLine
from qrmenu.services.messages import reservation_message
from qrmenu.services.notify import Notifier
from qrmenu.services.payments import AvailableMethods, default_selection, display_name
from qrmenu.services.repository import MenuRepository
from qrmenu.services.submission import AttemptRegistry, Outcome, SubmissionAttempt


def _parse_hhmm(value: str) -> time:
    return datetime.strptime(value, "%H:%M").time()


def time_slots(first: str | None = None, last: str | None = None) -> list[str]:
    """Half-hour grid, both ends included: 12:00, 12:30, ..., 22:30."""
    start = datetime.combine(date.min, _parse_hhmm(first or settings.RESERVATION_FIRST_SLOT))
    end = datetime.combine(date.min, _parse_hhmm(last or settings.RESERVATION_LAST_SLOT))
    slots = []
    while start <= end:
        slots.append(start.strftime("%H:%M"))
        start += timedelta(minutes=30)
    return slots


class ReservationAttempt(SubmissionAttempt):
    noun = "reservation"
    success_message = "Your reservation was sent to the restaurant."
    persist_failed_message = "We could not create your reservation. Nothing was sent, please try again."
    notify_failed_message = (
        "Your reservation was saved, but we couldn't notify the restaurant. Please contact them directly."
    )

    def __init__(self, business: BusinessOut, session_id: str):
        super().__init__(business)
        self.session_id = session_id
        self.draft: ReservationDraft | None = None

    def request_confirmation(self, form: ReservationIn, available: AvailableMethods,
                             today: date | None = None) -> AttemptOut:
        today = today or date.today()
        if not form.customer_name.strip():
            raise ValidationError("Please enter your name.", field="customer_name")
        if not form.customer_phone.strip():
            raise ValidationError("Please enter your phone number.", field="customer_phone")
        if form.party_size is None or form.party_size < 1:
            raise ValidationError("Party size must be at least 1.", field="party_size")
        if form.party_size > settings.MAX_PARTY_SIZE:
            raise ValidationError(
                f"For groups larger than {settings.MAX_PARTY_SIZE} please call the restaurant.",
                field="party_size",
            )
        if form.reservation_date is None:
            raise ValidationError("Please choose a date.", field="reservation_date")
        if form.reservation_date < today:
            raise ValidationError("Please choose a date from today onwards.", field="reservation_date")
        if not form.reservation_time or form.reservation_time not in time_slots():
            raise ValidationError("Please choose one of the available times.", field="reservation_time")
        if not available.configured:
            raise ValidationError(
                "This restaurant has no payment methods configured yet.", field="payment_method"
            )
        code = default_selection(available, form.payment_method)
        if form.payment_method is not None and code != form.payment_method:
            raise ValidationError("That payment method is not available.", field="payment_method")

        self._await_confirmation()
        self.draft = ReservationDraft(
            id=self.record_id,
            business_id=self.business.id,
            customer_name=form.customer_name.strip(),
            customer_phone=form.customer_phone.strip(),
            customer_email=(form.customer_email or "").strip() or None,
            party_size=form.party_size,
            reservation_date=form.reservation_date,
            reservation_time=form.reservation_time,
            special_requests=(form.special_requests or "").strip() or None,
            payment_method=code,
        )
        return AttemptOut(
            attempt_id=self.id,
            state=self.state.value,
            summary=[
                SummaryLine(label="Party size", value=str(self.draft.party_size)),
                SummaryLine(label="Date", value=self.draft.reservation_date.isoformat()),
                SummaryLine(label="Time", value=self.draft.reservation_time),
                SummaryLine(label="Payment method", value=display_name(code)),
            ],
            payment_method=code,
        )

    def confirm(self, repo: MenuRepository, notifier: Notifier) -> Outcome:
        self._begin_submit()
        draft = self.draft
        return self._run(lambda: repo.insert_reservation(draft), notifier, reservation_message(draft))


reservation_attempts: AttemptRegistry[ReservationAttempt] = AttemptRegistry()
