"""
Service Error Taxonomy

Hard failures raised by the workflow engine, the order store and the
catalog repository. Expected engine outcomes (denied, requires reason,
requires confirmation) are *not* errors; they are returned as
``TransitionDecision`` values and only become exceptions when a caller
tries to apply them anyway.

Hierarchy:
    WorkflowError
    ├── ConfigError               invalid board config, lists every problem
    ├── UnknownStatusError        status id not in the board config
    ├── UnknownColumnError        column id not on the board
    ├── NotFoundError             unknown order / entity id
    ├── DuplicateError            unique field already taken
    ├── ConflictError             stale version, re-fetch and retry
    └── TransitionError
        ├── TransitionDenied          no legal path to the target
        ├── MissingReasonError        rejecting without a reason
        └── ConfirmationRequiredError backward move without force
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ConfigProblem:
    """
    One problem found while validating a board config.

    Attributes:
        code: Machine-readable problem code (e.g. "unknown_status")
        message: Human readable description
        path: Location inside the config (e.g. "columns[1].statusIds[0]")
    """
    code: str
    message: str
    path: str = ""

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "path": self.path}


class WorkflowError(Exception):
    """Base class for all service errors."""


class ConfigError(WorkflowError):
    """A board config failed validation; carries every problem found."""

    def __init__(self, problems: list[ConfigProblem]):
        self.problems = list(problems)
        summary = "; ".join(p.message for p in self.problems) or "invalid config"
        super().__init__(f"Invalid board config: {summary}")


class UnknownStatusError(WorkflowError):
    def __init__(self, status_id: str):
        self.status_id = status_id
        super().__init__(f"Unknown status '{status_id}'")


class UnknownColumnError(WorkflowError):
    def __init__(self, column_id: str):
        self.column_id = column_id
        super().__init__(f"Unknown column '{column_id}'")


class NotFoundError(WorkflowError):
    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} '{entity_id}' not found")


class DuplicateError(WorkflowError):
    def __init__(self, entity: str, field: str, value: str):
        self.entity = entity
        self.field = field
        self.value = value
        super().__init__(f"{entity} with {field} '{value}' already exists")


class ConflictError(WorkflowError):
    """The order changed since the caller last read it."""

    def __init__(
        self,
        order_id: str,
        expected_version: Optional[int] = None,
        actual_version: Optional[int] = None,
    ):
        self.order_id = order_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        super().__init__(
            f"Order '{order_id}' was modified concurrently "
            f"(expected version {expected_version}, found {actual_version})"
        )


class TransitionError(WorkflowError):
    """A status change could not be applied."""

    def __init__(
        self,
        message: str,
        order_id: Optional[str] = None,
        from_status: Optional[str] = None,
        target_status: Optional[str] = None,
    ):
        self.order_id = order_id
        self.from_status = from_status
        self.target_status = target_status
        super().__init__(message)


class TransitionDenied(TransitionError):
    pass


class MissingReasonError(TransitionError):
    pass


class ConfirmationRequiredError(TransitionError):
    pass
