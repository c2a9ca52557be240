"""Error hierarchy for the immersion convention service.

Error layers:
- ImmersionError: Base class for all service errors
- DomainError: Business rule violations, validation failures (4xx responses)
- InfrastructureError: System-level failures like storage issues (503 responses)

Every error carries a stable snake_case ``code`` so callers can branch on it.
These errors are mapped to HTTP responses by the global exception handler in app.py.
"""


class ImmersionError(Exception):
    """Base class for all service errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (business logic violations - typically 4xx)
# =============================================================================


class DomainError(ImmersionError):
    """Base class for domain/business errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(
        self, message: str, field: str | None = None, code: str = "validation_error"
    ) -> None:
        super().__init__(message, code=code)
        self.field = field


class InvalidStateError(DomainError):
    """Operation not allowed in current state."""


class ConflictError(DomainError):
    """Resource already exists or version conflict."""


class AuthorizationError(DomainError):
    """Caller not authorized for this operation."""


class ThrottledError(DomainError):
    """The same reminder was sent too recently."""

    def __init__(
        self,
        message: str,
        time_remaining: str,
        min_hours_between_reminder: int,
        code: str = "reminder_sent_too_recently",
    ) -> None:
        super().__init__(message, code=code)
        self.time_remaining = time_remaining
        self.min_hours_between_reminder = min_hours_between_reminder


# =============================================================================
# Infrastructure Errors (system-level failures - typically 503)
# =============================================================================


class InfrastructureError(ImmersionError):
    """Base class for infrastructure/system errors."""


class StorageUnavailableError(InfrastructureError):
    """Storage backend (database) is unavailable."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""
