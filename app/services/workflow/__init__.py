"""
Order Workflow

Board configs, their validation, the transition engine and the board view.
Everything here is pure: no I/O, no persistence.

Usage:
    from app.services.workflow import parse_workflow_config, request_transition

    config = parse_workflow_config(template.config)
    decision = request_transition(order, "accepted", config)
"""

from app.services.workflow.board import (
    BoardAction,
    BoardCard,
    BoardColumnView,
    available_actions,
    build_board,
)
from app.services.workflow.engine import (
    DecisionKind,
    DropTarget,
    StatusChange,
    TransitionDecision,
    confirm_rejection,
    is_final,
    is_terminal,
    plan_column_drop,
    plan_transition,
    request_column_drop,
    request_transition,
    resolve_drop_target,
    resolve_rejection_reason,
)
from app.services.workflow.validation import (
    ValidationResult,
    parse_workflow_config,
    validate_workflow_config,
)
from app.services.workflow.workflow_schemas import (
    COMPLETED,
    PENDING,
    REJECTED,
    KanbanColumn,
    OrderStatusConfig,
    RejectionReason,
    WorkflowConfig,
)

__all__ = [
    "BoardAction",
    "BoardCard",
    "BoardColumnView",
    "available_actions",
    "build_board",
    "DecisionKind",
    "DropTarget",
    "StatusChange",
    "TransitionDecision",
    "confirm_rejection",
    "is_final",
    "is_terminal",
    "plan_column_drop",
    "plan_transition",
    "request_column_drop",
    "request_transition",
    "resolve_drop_target",
    "resolve_rejection_reason",
    "ValidationResult",
    "parse_workflow_config",
    "validate_workflow_config",
    "COMPLETED",
    "PENDING",
    "REJECTED",
    "KanbanColumn",
    "OrderStatusConfig",
    "RejectionReason",
    "WorkflowConfig",
]
