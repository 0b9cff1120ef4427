"""Error taxonomy shared by the ledger core and the HTTP layer."""


class HouseholdError(Exception):
    """Base exception for all ledger errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(HouseholdError):
    """Raised when a request is malformed or violates a split rule."""

    status_code = 400


class AuthorizationError(HouseholdError):
    """Raised when the session is invalid or a resource belongs to another group."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized", status_code: int = 401):
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(HouseholdError):
    """Raised when a referenced expense does not exist (or is already deleted)."""

    status_code = 404


class PersistenceError(HouseholdError):
    """Raised when a write to storage fails. The unit of work has been rolled back."""

    status_code = 503
