class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a trainer or student document does not exist."""


class BackendUnreachableError(DomainError):
    """Raised when the hosted backend cannot be reached."""


class PermissionDeniedError(DomainError):
    """Raised when the hosted backend refuses a read or write."""


class LocationPermissionDeniedError(DomainError):
    """Raised when the device refuses access to its location."""


class LocationUnavailableError(DomainError):
    """Raised when the device location cannot be obtained."""


class OutOfRangeError(DomainError):
    """Raised when the device is outside the trainer's fence."""

    def __init__(self, message: str, distance_meters: float | None = None):
        super().__init__(message)
        self.distance_meters = distance_meters


class AlreadyMarkedTodayError(DomainError):
    """Raised when attendance for today already exists."""


class IncompleteTasksError(DomainError):
    """Raised when progress is saved while tasks remain open."""
