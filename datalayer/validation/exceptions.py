"""
Validation Exceptions
"""

from typing import Dict, List, Optional


VALIDATION_FAILED_MESSAGE = "notifications.validation_failed"


class ValidationError(Exception):
    """
    Raised when a payload fails validation.

    Controllers passing data to a repository should catch this error and
    turn it into a response: ``status`` is the HTTP status to answer with and
    ``meta`` maps each failing field to its ordered list of messages.
    """

    def __init__(
        self,
        message: str = VALIDATION_FAILED_MESSAGE,
        status: int = 422,
        meta: Optional[Dict[str, List[str]]] = None
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.meta = meta or {}

    def to_dict(self) -> Dict[str, object]:
        return {"message": self.message, "status": self.status, "meta": self.meta}


class RuleViolation(Exception):
    """Raised by a rule handler to fail with a specific message."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class RuleNotFoundError(Exception):
    """Raised when a rule set names a rule that is not registered."""

    def __init__(self, rule: str, field: str = None):
        message = f"Validation rule '{rule}' is not registered"
        if field:
            message += f" (field '{field}')"
        super().__init__(message)
        self.rule = rule
        self.field = field


class ValidationInfrastructureError(Exception):
    """Raised when a rule could not be evaluated, e.g. its lookup query failed."""

    def __init__(self, message: str, rule: str = None, field: str = None):
        super().__init__(message)
        self.message = message
        self.rule = rule
        self.field = field
