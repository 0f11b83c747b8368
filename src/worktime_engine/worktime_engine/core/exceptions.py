class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data or settings are invalid."""


class InvalidStateTransition(DomainError):
    """Raised when a tracking command is not allowed in the current status."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class LockedDayError(DomainError):
    """Raised when an edit targets a work day frozen by a closed period."""
