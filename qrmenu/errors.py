"""
Error kinds surfaced by the public ordering pipeline.

Every error carries a plain-language ``message`` that is safe to show to the
customer, and a ``kind`` the client can switch on (e.g. to offer "retry" only
for transient load failures).
"""


class MenuError(Exception):
    kind = "error"
    status_code = 400
    retry = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ── Resolution ──────────────────────────────────────────────────────────────
class ResolutionError(MenuError):
    kind = "not_available"
    status_code = 404


class BusinessNotFound(ResolutionError):
    def __init__(self, slug: str | None = None):
        super().__init__("This menu is not available.")
        self.slug = slug


class MenuNotAvailable(ResolutionError):
    def __init__(self, business_id: str):
        super().__init__("This menu is not available right now.")
        self.business_id = business_id


# ── Loading ─────────────────────────────────────────────────────────────────
class TransientLoadError(MenuError):
    kind = "load_failed"
    status_code = 503
    retry = True


class StoreError(Exception):
    """Raised by the repository when the database call itself fails."""


class StorageUnavailable(Exception):
    """The session key/value store refused a read or write."""


# ── Input ───────────────────────────────────────────────────────────────────
class ValidationError(MenuError):
    kind = "validation"
    status_code = 422

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class CartLineNotFound(MenuError):
    kind = "cart_line_not_found"
    status_code = 404

    def __init__(self, line_id: str):
        super().__init__("That item is no longer in your cart.")
        self.line_id = line_id


class ConfirmationRequired(MenuError):
    """Removing a cart line always needs an explicit second confirmation."""
    kind = "confirmation_required"
    status_code = 409

    def __init__(self, line_id: str, product_name: str, quantity: int):
        super().__init__(f"Remove {quantity}x {product_name} from your cart?")
        self.line_id = line_id
        self.product_name = product_name
        self.quantity = quantity


# ── Submission ──────────────────────────────────────────────────────────────
class InvalidTransition(MenuError):
    kind = "invalid_state"
    status_code = 409


class SubmissionInProgress(InvalidTransition):
    kind = "submission_in_progress"

    def __init__(self):
        super().__init__("Your request is already being sent, please wait.")


class AttemptNotFound(MenuError):
    kind = "attempt_not_found"
    status_code = 404

    def __init__(self, attempt_id: str):
        super().__init__("This checkout has expired, please start again.")
        self.attempt_id = attempt_id


class PersistenceError(MenuError):
    kind = "persistence"
    status_code = 502
    retry = True


class NotificationError(MenuError):
    kind = "notification"
    status_code = 502
    retry = True
