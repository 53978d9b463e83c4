class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidRangeError(ValidationError):
    """Raised when a date range ends before it starts."""


class ConflictError(DomainError):
    """Raised when the requested state change has already happened."""


class AlreadySignedInError(ConflictError):
    pass


class AlreadySignedOutError(ConflictError):
    pass


class AlreadyProcessedError(ConflictError):
    pass


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class NoActiveSignInError(NotFoundError):
    pass


class QuotaExceededError(DomainError):
    """Raised when a leave balance cannot cover the requested days."""


class AuthenticationError(DomainError):
    """Raised when a bearer credential is missing or invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class StorageError(DomainError):
    """Raised when the relational store fails."""
