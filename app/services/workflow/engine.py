"""
Order Transition Engine

Pure functions of ``(config, order, request) -> decision``. Nothing here
touches storage; the order service turns an approved plan into exactly one
store call.

Two request shapes:
    - Button: a target *status* (``request_transition``)
    - Drag and drop: a target *column* (``request_column_drop``), resolved to a
      status by ``resolve_drop_target``

Each request yields a ``TransitionDecision``:

    ALLOWED                 target is a forward edge in the transition table
    REQUIRES_REASON         target is ``rejected``; a reason must be supplied
    REQUIRES_CONFIRMATION   no forward edge, but the target column is earlier
                            than the current one (manual "move back")
    DENIED                  anything else, including "already there"

``plan_transition`` / ``plan_column_drop`` are the apply-side checks: they
return a ``StatusChange`` or raise when the decision is not satisfied
(denied, no reason, no confirmation).
"""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Protocol

from app.services.errors import (
    ConfirmationRequiredError,
    MissingReasonError,
    NotFoundError,
    TransitionDenied,
    UnknownColumnError,
    UnknownStatusError,
)
from app.services.workflow.workflow_schemas import (
    BUILTIN_FINAL_STATUSES,
    REJECTED,
    REJECTED_COLUMN_ID,
    SYNTHETIC_COLUMNS,
    KanbanColumn,
    WorkflowConfig,
)


class OrderLike(Protocol):
    id: str
    status: str


class DecisionKind(str, Enum):
    ALLOWED = "allowed"
    REQUIRES_REASON = "requires_reason"
    REQUIRES_CONFIRMATION = "requires_confirmation"
    DENIED = "denied"


@dataclass(frozen=True)
class TransitionDecision:
    """What the engine thinks of a requested move."""
    kind: DecisionKind
    order_id: str
    from_status: str
    target_status: Optional[str] = None
    message: str = ""

    @property
    def is_allowed(self) -> bool:
        return self.kind == DecisionKind.ALLOWED

    @property
    def is_denied(self) -> bool:
        return self.kind == DecisionKind.DENIED

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "order_id": self.order_id,
            "from_status": self.from_status,
            "target_status": self.target_status,
            "message": self.message,
        }


@dataclass(frozen=True)
class StatusChange:
    """
    An approved status change, ready for the order store.

    The store stamps ``last_update_time`` and, for ``completed``,
    ``completion_time``.
    """
    status: str
    rejection_reason: Optional[str] = None
    actor_id: Optional[str] = None
    backward: bool = False


@dataclass(frozen=True)
class DropTarget:
    """A column drop resolved to a single status."""
    status_id: str
    backward: bool = False


# =============================================================================
# TERMINAL DETECTION
# =============================================================================

def is_final(config: WorkflowConfig, status_id: str) -> bool:
    """Built-in ``completed``/``rejected`` or a status flagged terminal."""
    if status_id in BUILTIN_FINAL_STATUSES:
        return True
    status = config.get_status(status_id)
    return bool(status and status.terminal)


def is_terminal(config: WorkflowConfig, status_id: str) -> bool:
    """
    True if no forward transition leaves the status.

    Non-final terminal statuses (an empty or missing table entry) can still
    be moved back with confirmation.
    """
    return is_final(config, status_id) or not config.forward_targets(status_id)


# =============================================================================
# HELPERS
# =============================================================================

def completion_minutes(order_time: datetime, now: datetime) -> int:
    """Whole minutes between order and completion, halves rounded up."""
    minutes = (now - order_time).total_seconds() / 60
    return math.floor(minutes + 0.5)


def resolve_rejection_reason(
    config: WorkflowConfig,
    reason_id: Optional[str] = None,
    reason: Optional[str] = None,
) -> Optional[str]:
    """
    Turn a catalog reason id or a free-text reason into the stored message.

    A free-text reason wins over an id; an unknown id raises NotFoundError.
    """
    if reason and reason.strip():
        return reason.strip()
    if reason_id:
        catalog_entry = config.get_rejection_reason(reason_id)
        if catalog_entry is None:
            raise NotFoundError("Rejection reason", reason_id)
        return catalog_entry.message
    return None


def _lookup_column(config: WorkflowConfig, column_id: str) -> KanbanColumn:
    column = config.get_column(column_id) or SYNTHETIC_COLUMNS.get(column_id)
    if column is None:
        raise UnknownColumnError(column_id)
    return column


def _precheck(order: OrderLike, config: WorkflowConfig) -> Optional[TransitionDecision]:
    """Deny moves out of final or unknown statuses."""
    current = order.status
    if is_final(config, current):
        return TransitionDecision(
            DecisionKind.DENIED, order.id, current,
            message=f"Order is already '{current}' and cannot change status",
        )
    if not config.knows_status(current):
        return TransitionDecision(
            DecisionKind.DENIED, order.id, current,
            message=f"Order status '{current}' is not part of this board",
        )
    return None


def _is_backward(config: WorkflowConfig, current: str, target_column_index: Optional[int]) -> bool:
    from_index = config.column_index_of_status(current)
    if from_index is None or target_column_index is None:
        return False
    return target_column_index < from_index


# =============================================================================
# REQUESTS
# =============================================================================

def request_transition(
    order: OrderLike,
    target_status_id: str,
    config: WorkflowConfig,
) -> TransitionDecision:
    """
    Classify a button-driven request to move ``order`` to a status.

    Raises:
        UnknownStatusError: If the target is not on the board
    """
    if not config.knows_status(target_status_id):
        raise UnknownStatusError(target_status_id)

    current = order.status
    if current == target_status_id:
        return TransitionDecision(
            DecisionKind.DENIED, order.id, current, target_status_id,
            message=f"Order is already '{current}'",
        )

    denied = _precheck(order, config)
    if denied:
        return TransitionDecision(denied.kind, order.id, current, target_status_id, denied.message)

    if target_status_id == REJECTED:
        return TransitionDecision(
            DecisionKind.REQUIRES_REASON, order.id, current, target_status_id,
            message="A rejection reason is required",
        )

    if target_status_id in config.forward_targets(current):
        return TransitionDecision(DecisionKind.ALLOWED, order.id, current, target_status_id)

    if _is_backward(config, current, config.column_index_of_status(target_status_id)):
        return TransitionDecision(
            DecisionKind.REQUIRES_CONFIRMATION, order.id, current, target_status_id,
            message=f"Moving back from '{current}' to '{target_status_id}' must be confirmed",
        )

    return TransitionDecision(
        DecisionKind.DENIED, order.id, current, target_status_id,
        message=f"No transition from '{current}' to '{target_status_id}'",
    )


def resolve_drop_target(
    config: WorkflowConfig,
    current_status: str,
    column_id: str,
) -> Optional[DropTarget]:
    """
    Pick the status an order lands in when dropped on a column.

    1. The first of the column's statuses (in column order) that is a
       forward edge from ``current_status``.
    2. Otherwise, if the column sits before the order's current column, the
       column's first status, as a backward move.
    3. Otherwise nothing (sideways, or forward without a rule).

    Any column holding ``rejected`` resolves to ``rejected`` when no forward
    edge matches, since rejection is reachable from every non-final status.
    Synthetic columns are never "earlier" than a configured one.

    Raises:
        UnknownColumnError: If the column is neither configured nor synthetic
    """
    column = _lookup_column(config, column_id)

    if column_id == REJECTED_COLUMN_ID:
        return DropTarget(REJECTED)

    forward = set(config.forward_targets(current_status))
    for status_id in column.status_ids:
        if status_id in forward:
            return DropTarget(status_id)

    if REJECTED in column.status_ids:
        return DropTarget(REJECTED)

    if column_id in SYNTHETIC_COLUMNS or not column.status_ids:
        return None

    if _is_backward(config, current_status, config.column_index(column_id)):
        return DropTarget(column.status_ids[0], backward=True)

    return None


def request_column_drop(
    order: OrderLike,
    column_id: str,
    config: WorkflowConfig,
) -> TransitionDecision:
    """Classify a drag-and-drop of ``order`` onto a board column."""
    current = order.status
    column = _lookup_column(config, column_id)

    denied = _precheck(order, config)
    if denied:
        return denied

    target = resolve_drop_target(config, current, column_id)
    if target is None:
        return TransitionDecision(
            DecisionKind.DENIED, order.id, current,
            message=f"No transition from '{current}' into column '{column.title or column.id}'",
        )

    if target.status_id == current:
        return TransitionDecision(
            DecisionKind.DENIED, order.id, current, current,
            message=f"Order is already '{current}'",
        )

    if target.status_id == REJECTED:
        return TransitionDecision(
            DecisionKind.REQUIRES_REASON, order.id, current, REJECTED,
            message="A rejection reason is required",
        )

    if target.backward:
        return TransitionDecision(
            DecisionKind.REQUIRES_CONFIRMATION, order.id, current, target.status_id,
            message=f"Moving back from '{current}' to '{target.status_id}' must be confirmed",
        )

    return TransitionDecision(DecisionKind.ALLOWED, order.id, current, target.status_id)


# =============================================================================
# APPLY-SIDE CHECKS
# =============================================================================

def plan_from_decision(
    decision: TransitionDecision,
    *,
    force: bool = False,
    reason: Optional[str] = None,
    actor_id: Optional[str] = None,
) -> StatusChange:
    """
    Turn a decision into a ``StatusChange`` if the caller satisfied it.

    Raises:
        TransitionDenied: Decision was DENIED
        MissingReasonError: REQUIRES_REASON without a non-empty reason
        ConfirmationRequiredError: REQUIRES_CONFIRMATION without ``force``
    """
    context = dict(
        order_id=decision.order_id,
        from_status=decision.from_status,
        target_status=decision.target_status,
    )

    if decision.kind == DecisionKind.DENIED:
        raise TransitionDenied(decision.message, **context)

    reason = reason.strip() if reason else None

    if decision.kind == DecisionKind.REQUIRES_REASON and not reason:
        raise MissingReasonError("A rejection reason is required", **context)

    if decision.kind == DecisionKind.REQUIRES_CONFIRMATION and not force:
        raise ConfirmationRequiredError(decision.message, **context)

    return StatusChange(
        status=decision.target_status,
        rejection_reason=reason if decision.target_status == REJECTED else None,
        actor_id=actor_id,
        backward=decision.kind == DecisionKind.REQUIRES_CONFIRMATION,
    )


def plan_transition(
    order: OrderLike,
    target_status_id: str,
    config: WorkflowConfig,
    *,
    force: bool = False,
    reason: Optional[str] = None,
    actor_id: Optional[str] = None,
) -> StatusChange:
    decision = request_transition(order, target_status_id, config)
    return plan_from_decision(decision, force=force, reason=reason, actor_id=actor_id)


def plan_column_drop(
    order: OrderLike,
    column_id: str,
    config: WorkflowConfig,
    *,
    force: bool = False,
    reason: Optional[str] = None,
    actor_id: Optional[str] = None,
) -> StatusChange:
    decision = request_column_drop(order, column_id, config)
    return plan_from_decision(decision, force=force, reason=reason, actor_id=actor_id)


def confirm_rejection(
    order: OrderLike,
    reason_message: str,
    config: WorkflowConfig,
    actor_id: Optional[str] = None,
) -> StatusChange:
    """The reason-gated path into ``rejected``."""
    return plan_transition(order, REJECTED, config, reason=reason_message, actor_id=actor_id)
