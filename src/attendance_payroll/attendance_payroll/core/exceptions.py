class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist (or is not visible to the caller)."""


class InvalidTransitionError(ValidationError):
    """Raised when a leave application cannot move from its current state."""

    def __init__(self, current, action):
        self.current = current
        self.action = action
        current_value = getattr(current, "value", current)
        action_value = getattr(action, "value", action)
        super().__init__(f"Cannot {action_value} a leave application that is '{current_value}'")
