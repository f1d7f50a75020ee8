"""
Persist-then-notify state machine shared by checkout and reservations.

    EDITING -> AWAITING_CONFIRMATION -> SUBMITTING -> SUCCEEDED | FAILED

While SUBMITTING, a second confirm is rejected, not queued. The record is
written first and staff are only told about records that exist. A notify
failure after a successful write is its own outcome: the record id stays on
the attempt, so a retry only re-sends the message.
"""
import threading
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, TypeVar

from qrmenu.errors import (
    AttemptNotFound, InvalidTransition, NotificationError, PersistenceError, StoreError,
    SubmissionInProgress, TransientLoadError,
)
from qrmenu.models.common import new_id
from qrmenu.schemas.menu import BusinessOut
from qrmenu.schemas.orders import OutcomeOut
from qrmenu.services.notify import Notifier, NotifyReceipt, staff_number
from qrmenu.util.logger import MenuLogger

logger = MenuLogger(__name__)


class AttemptState(Enum):
    EDITING = "editing"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Failure(Enum):
    PERSISTENCE = "persistence"
    NOTIFICATION = "notification"


@dataclass(frozen=True)
class Outcome:
    attempt_id: str
    state: AttemptState
    message: str
    record_id: str | None = None
    failure: Failure | None = None
    notify_url: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.state == AttemptState.SUCCEEDED

    def out(self) -> OutcomeOut:
        return OutcomeOut(
            attempt_id=self.attempt_id,
            state=self.state.value,
            message=self.message,
            record_id=self.record_id,
            failure=self.failure.value if self.failure else None,
            notify_url=self.notify_url,
        )


class SubmissionAttempt:
    """One customer attempt at sending a record to the restaurant."""

    noun = "request"
    success_message = "Your request was sent to the restaurant."
    persist_failed_message = "We could not record your request. Nothing was sent, please try again."
    notify_failed_message = (
        "Your request was saved, but we couldn't notify the restaurant. Please contact them directly."
    )

    def __init__(self, business: BusinessOut):
        self.id = new_id()
        self.record_id = new_id()  # reused by every retry of this attempt
        self.business = business
        self.state = AttemptState.EDITING
        self.persisted = False
        self.last_outcome: Outcome | None = None
        self._lock = threading.Lock()

    # ---------- transitions ----------

    def _await_confirmation(self):
        with self._lock:
            if self.state not in (AttemptState.EDITING, AttemptState.AWAITING_CONFIRMATION):
                raise InvalidTransition(f"This {self.noun} can't be edited any more.")
            self.state = AttemptState.AWAITING_CONFIRMATION

    def cancel(self):
        """Back from the confirmation prompt to the form."""
        with self._lock:
            if self.state == AttemptState.SUBMITTING:
                raise SubmissionInProgress()
            if self.state != AttemptState.AWAITING_CONFIRMATION:
                raise InvalidTransition(f"This {self.noun} is not waiting for confirmation.")
            self.state = AttemptState.EDITING

    def retry(self):
        """A failed attempt goes back to the confirmation prompt; retries are always user-initiated."""
        with self._lock:
            if self.state != AttemptState.FAILED:
                raise InvalidTransition(f"Only a failed {self.noun} can be retried.")
            self.state = AttemptState.AWAITING_CONFIRMATION

    def _begin_submit(self):
        with self._lock:
            if self.state == AttemptState.SUBMITTING:
                raise SubmissionInProgress()
            if self.state != AttemptState.AWAITING_CONFIRMATION:
                raise InvalidTransition(f"Please review your {self.noun} before confirming.")
            self.state = AttemptState.SUBMITTING

    def _back_to_editing(self):
        with self._lock:
            self.state = AttemptState.EDITING

    def _finish(self, state: AttemptState, message: str, failure: Failure | None = None,
                receipt: NotifyReceipt | None = None) -> Outcome:
        outcome = Outcome(
            attempt_id=self.id,
            state=state,
            message=message,
            record_id=self.record_id if self.persisted else None,
            failure=failure,
            notify_url=receipt.url if receipt else None,
        )
        with self._lock:
            self.state = state
            self.last_outcome = outcome
        return outcome

    # ---------- the two phases ----------

    def _run(self, persist: Callable[[], object], notifier: Notifier, text: str) -> Outcome:
        """Caller must already hold SUBMITTING."""
        try:
            if not self.persisted:
                persist()
                self.persisted = True
                logger.info(f"{self.noun} {self.record_id} recorded for business {self.business.id}")
            else:
                logger.info(f"{self.noun} {self.record_id} already recorded, re-sending notification only")
        except (StoreError, PersistenceError, TransientLoadError) as e:
            logger.error(f"{self.noun} {self.record_id} not recorded: {e}")
            return self._finish(AttemptState.FAILED, self.persist_failed_message, Failure.PERSISTENCE)
        except Exception:
            self._finish(AttemptState.FAILED, self.persist_failed_message, Failure.PERSISTENCE)
            raise

        try:
            receipt = notifier.send_text(staff_number(self.business), text)
        except NotificationError as e:
            logger.warning(f"{self.noun} {self.record_id} recorded but staff not notified: {e.message}")
            return self._finish(AttemptState.FAILED, self.notify_failed_message, Failure.NOTIFICATION)
        except Exception:
            self._finish(AttemptState.FAILED, self.notify_failed_message, Failure.NOTIFICATION)
            raise

        return self._finish(AttemptState.SUCCEEDED, self.success_message, receipt=receipt)


A = TypeVar("A", bound=SubmissionAttempt)


class AttemptRegistry(Generic[A]):
    """
    Attempts live here between the review call and the confirm call.
    Bounded; the oldest attempts are dropped first.
    """

    def __init__(self, max_size: int = 1000):
        self.max_size = max_size
        self._items: "OrderedDict[str, A]" = OrderedDict()
        self._lock = threading.Lock()

    def add(self, attempt: A) -> A:
        with self._lock:
            self._items[attempt.id] = attempt
            while len(self._items) > self.max_size:
                self._items.popitem(last=False)
        return attempt

    def get(self, attempt_id: str) -> A:
        with self._lock:
            attempt = self._items.get(attempt_id)
        if attempt is None:
            raise AttemptNotFound(attempt_id)
        return attempt

    def discard(self, attempt_id: str):
        with self._lock:
            self._items.pop(attempt_id, None)

    def __len__(self):
        return len(self._items)
