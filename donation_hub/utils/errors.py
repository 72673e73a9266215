from dataclasses import dataclass, field
from typing import Any, Optional


class WorkflowError(Exception):
    """Base class for failures the marketplace reports back to the caller."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(WorkflowError):
    kind = "validation_error"

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []


class NotFound(WorkflowError):
    kind = "not_found"


class Forbidden(WorkflowError):
    kind = "forbidden"


class InvalidState(WorkflowError):
    kind = "invalid_state"


class InternalError(WorkflowError):
    kind = "internal_error"

    def __init__(self, message: str = "Internal server error."):
        super().__init__(message)


@dataclass
class OperationResult:
    success: bool
    message: str
    kind: Optional[str] = None

    donation: Any = None
    request: Any = None
    match: Any = None
    user: Any = None
    token: Optional[str] = None
    items: list = field(default_factory=list)
    data: Any = None

    @classmethod
    def ok(cls, message: str, **payload) -> "OperationResult":
        return cls(success=True, message=message, **payload)

    @classmethod
    def failure(cls, error: WorkflowError) -> "OperationResult":
        return cls(success=False, message=error.message, kind=error.kind)
