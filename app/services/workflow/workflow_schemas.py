"""
Workflow Config Schemas

Pydantic models for a restaurant's order board (a board template's config).

Field names are snake_case in Python; JSON uses the camelCase aliases
(``statusIds``, ``statusTransitions`` ...) and both spellings are accepted
on input.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# BUILT-IN STATUSES
# =============================================================================

PENDING = "pending"
COMPLETED = "completed"
REJECTED = "rejected"

# Always terminal, whatever the transition table says
BUILTIN_FINAL_STATUSES = frozenset({COMPLETED, REJECTED})

COMPLETED_COLUMN_ID = "col-completed"
REJECTED_COLUMN_ID = "col-rejected"


def _unique(values: List[str]) -> List[str]:
    """Drop repeats, keep first-seen order."""
    return list(dict.fromkeys(values))


class WorkflowModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class OrderStatusConfig(WorkflowModel):
    """A status orders can be in. Identity is ``id``."""
    id: str = Field(..., min_length=1, examples=["in-progress"])
    label: str = Field(default="", examples=["In Progress"])
    color: str = Field(default="#CCCCCC", examples=["#a855f7"])
    terminal: bool = Field(
        default=False,
        description="Final status: no transitions out, not even backward",
    )


class KanbanColumn(WorkflowModel):
    """A visual grouping of statuses on the board."""
    id: str = Field(..., min_length=1, examples=["col-2"])
    title: str = Field(default="", examples=["In Progress"])
    status_ids: List[str] = Field(default_factory=list, alias="statusIds")
    icon: Optional[str] = None
    title_color: Optional[str] = Field(default=None, alias="titleColor")
    column_color: Optional[str] = Field(default=None, alias="columnColor")

    @field_validator("status_ids")
    @classmethod
    def ordered_set(cls, v: List[str]) -> List[str]:
        return _unique(v)


class RejectionReason(WorkflowModel):
    id: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1, examples=["One or more items are out of stock."])


class WorkflowConfig(WorkflowModel):
    """
    Statuses, columns, rejection reasons and forward transitions of one board.

    Lookups here are read-only helpers for the engine; integrity checks
    (unknown ids, duplicates) live in ``validation.validate_workflow_config``.
    """
    statuses: List[OrderStatusConfig] = Field(default_factory=list)
    columns: List[KanbanColumn] = Field(default_factory=list)
    rejection_reasons: List[RejectionReason] = Field(default_factory=list, alias="rejectionReasons")
    status_transitions: Dict[str, List[str]] = Field(default_factory=dict, alias="statusTransitions")

    @field_validator("status_transitions")
    @classmethod
    def unique_destinations(cls, v: Dict[str, List[str]]) -> Dict[str, List[str]]:
        return {source: _unique(targets) for source, targets in v.items()}

    # -------------------------------------------------------------------------
    # Status lookups
    # -------------------------------------------------------------------------

    def status_ids(self) -> List[str]:
        return [s.id for s in self.statuses]

    def get_status(self, status_id: str) -> Optional[OrderStatusConfig]:
        for status in self.statuses:
            if status.id == status_id:
                return status
        return None

    def knows_status(self, status_id: str) -> bool:
        """Configured statuses plus the implicit built-in final ones."""
        return status_id in BUILTIN_FINAL_STATUSES or self.get_status(status_id) is not None

    def forward_targets(self, status_id: str) -> List[str]:
        return list(self.status_transitions.get(status_id, []))

    # -------------------------------------------------------------------------
    # Column lookups
    # -------------------------------------------------------------------------

    def get_column(self, column_id: str) -> Optional[KanbanColumn]:
        for column in self.columns:
            if column.id == column_id:
                return column
        return None

    def column_index(self, column_id: str) -> Optional[int]:
        for index, column in enumerate(self.columns):
            if column.id == column_id:
                return index
        return None

    def column_index_of_status(self, status_id: str) -> Optional[int]:
        """Index of the first configured column listing the status."""
        for index, column in enumerate(self.columns):
            if status_id in column.status_ids:
                return index
        return None

    # -------------------------------------------------------------------------
    # Rejection reasons
    # -------------------------------------------------------------------------

    def get_rejection_reason(self, reason_id: str) -> Optional[RejectionReason]:
        for reason in self.rejection_reasons:
            if reason.id == reason_id:
                return reason
        return None

    def to_document(self) -> dict:
        """JSON-ready dict with camelCase keys, as stored on the template."""
        return self.model_dump(by_alias=True, mode="json")


# Synthetic columns shown only when toggled visible; never part of ``columns``
COMPLETED_COLUMN = KanbanColumn(
    id=COMPLETED_COLUMN_ID,
    title="Completed",
    status_ids=[COMPLETED],
    icon="FlagCheckeredIcon",
    title_color="#16A34A",
    column_color="#F0FDF4",
)
REJECTED_COLUMN = KanbanColumn(
    id=REJECTED_COLUMN_ID,
    title="Rejected",
    status_ids=[REJECTED],
    icon="XCircleIcon",
    title_color="#DC2626",
    column_color="#FEF2F2",
)
SYNTHETIC_COLUMNS = {
    COMPLETED_COLUMN_ID: COMPLETED_COLUMN,
    REJECTED_COLUMN_ID: REJECTED_COLUMN,
}
