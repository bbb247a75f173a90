class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when a viewer lacks permission for an action."""


class TimestampFormatError(ValidationError):
    """Raised when a timestamp is not in one of the accepted formats."""


class FetchError(DomainError):
    """Raised when the bulk load of apologies fails."""


class DecisionError(DomainError):
    """Raised when the backing service refuses or fails to record a decision."""


class DecisionConflictError(DecisionError):
    """Raised when the apology was no longer pending (decided elsewhere)."""


class IllegalTransitionError(DomainError):
    """Raised when a review action is not allowed in the current state."""
