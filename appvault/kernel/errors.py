"""
Engine error taxonomy.

Only precondition failures are raised to callers. Collaborator failures
degrade to empty / failed results and persistence failures are logged, so
neither appears here.
"""

from typing import Optional


class EngineError(Exception):
    """Base class for all engine errors."""

    code: str = "engine_error"

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationFailed(EngineError, ValueError):
    """An operation's precondition is unmet. State is left unchanged."""

    code = "validation_failed"


class NotAuthenticated(ValidationFailed):
    """The operation needs a signed-in Current User."""

    code = "not_authenticated"


class PermissionDenied(ValidationFailed):
    """The operation is restricted to administrators."""

    code = "permission_denied"


class NotFound(ValidationFailed):
    """No entity with the given id."""

    code = "not_found"


class InsufficientPoints(ValidationFailed):
    """A redemption exceeds the user's balance."""

    code = "insufficient_points"

    def __init__(self, requested: int, balance: int):
        super().__init__(
            f"Cannot redeem {requested} points from a balance of {balance}",
            field="points",
        )
        self.requested = requested
        self.balance = balance


class AlreadyPremium(ValidationFailed):
    """The user already holds an active premium subscription."""

    code = "already_premium"
