"""Error taxonomy for the rewards service.

Every rule violation a caller can trigger is a ``RewardsError``. Each subclass
carries the HTTP status and a stable machine-readable code, so the API layer
can answer with a structured failure without knowing the individual rules.
"""


class RewardsError(Exception):
    """Base class for recoverable, caller-facing errors."""

    status_code: int = 400
    code: str = "rewards_error"
    title: str = "Request failed"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class RequestValidationFailed(RewardsError):
    """Malformed or missing input."""

    code = "validation_error"
    title = "Invalid request"


class UnauthorizedError(RewardsError):
    """No session credential was presented."""

    status_code = 401
    code = "unauthorized"
    title = "Sign in required"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class InvalidCredentialError(RewardsError):
    """The session credential is forged, expired, or names a missing account."""

    status_code = 401
    code = "invalid_credential"
    title = "Session expired"

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class NotFoundError(RewardsError):
    """A referenced entity does not exist."""

    status_code = 404
    code = "not_found"
    title = "Not found"


class UniquenessViolationError(RewardsError):
    """An identity field collides with an existing account."""

    status_code = 409
    code = "uniqueness_violation"
    title = "Already taken"

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"An account with this {field} already exists")


class QuotaExceededError(RewardsError):
    """The daily spin allowance is used up."""

    code = "quota_exceeded"
    title = "Spin failed"

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__("No spins left today")


class BelowMinimumError(RewardsError):
    """Withdrawal amount is under the configured minimum."""

    code = "below_minimum"
    title = "Withdrawal Failed"

    def __init__(self, amount: int, minimum: int):
        self.amount = amount
        self.minimum = minimum
        super().__init__(f"Minimum withdrawal amount is {minimum} points")


class InsufficientBalanceError(RewardsError):
    """Raised when an account has fewer points than an operation needs."""

    code = "insufficient_balance"
    title = "Insufficient Points"

    def __init__(self, required: int, available: int | None = None):
        self.required = required
        self.available = available
        super().__init__("Insufficient points")
