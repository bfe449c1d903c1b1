"""
Board View

Builds what the order board renders for one restaurant: the configured
columns (plus the synthetic Completed / Rejected columns when toggled on),
the orders in each column and the buttons each order offers.

Read-only; moves go through the transition engine.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Protocol

from app.services.workflow.engine import OrderLike, is_final
from app.services.workflow.workflow_schemas import (
    COMPLETED_COLUMN,
    REJECTED,
    REJECTED_COLUMN,
    KanbanColumn,
    WorkflowConfig,
)


class BoardOrder(OrderLike, Protocol):
    order_time: datetime


@dataclass(frozen=True)
class BoardAction:
    """One button on an order card."""
    target_status_id: str
    label: str
    color: Optional[str] = None
    requires_reason: bool = False

    def to_dict(self) -> dict:
        return {
            "targetStatusId": self.target_status_id,
            "label": self.label,
            "color": self.color,
            "requiresReason": self.requires_reason,
        }


@dataclass
class BoardCard:
    order: BoardOrder
    actions: List[BoardAction] = field(default_factory=list)


@dataclass
class BoardColumnView:
    column: KanbanColumn
    cards: List[BoardCard] = field(default_factory=list)
    synthetic: bool = False


def _label(config: WorkflowConfig, status_id: str) -> str:
    status = config.get_status(status_id)
    if status and status.label:
        return status.label
    return status_id.replace("-", " ").title()


def _color(config: WorkflowConfig, status_id: str) -> Optional[str]:
    status = config.get_status(status_id)
    return status.color if status else None


def available_actions(order: OrderLike, config: WorkflowConfig) -> List[BoardAction]:
    """
    Buttons for an order: its forward transitions in table order, then
    Reject (reason required) for any order not yet final.

    Orders in a final or unknown status get no buttons.
    """
    if is_final(config, order.status) or not config.knows_status(order.status):
        return []

    actions = [
        BoardAction(
            target_status_id=target,
            label=_label(config, target),
            color=_color(config, target),
            requires_reason=target == REJECTED,
        )
        for target in config.forward_targets(order.status)
    ]

    if not any(a.target_status_id == REJECTED for a in actions):
        actions.append(BoardAction(
            target_status_id=REJECTED,
            label=_label(config, REJECTED),
            color=_color(config, REJECTED),
            requires_reason=True,
        ))
    return actions


def build_board(
    orders: Iterable[BoardOrder],
    config: WorkflowConfig,
    show_completed: bool = False,
    show_rejected: bool = False,
) -> List[BoardColumnView]:
    """
    Group orders into board columns.

    An order sits in the first column listing its status, the same column
    the engine measures backward moves from. Orders whose status is on no
    visible column are left off the board. Within a column the oldest order
    comes first.
    """
    views = [BoardColumnView(column) for column in config.columns]
    if show_completed:
        views.append(BoardColumnView(COMPLETED_COLUMN, synthetic=True))
    if show_rejected:
        views.append(BoardColumnView(REJECTED_COLUMN, synthetic=True))

    ordered = sorted(orders, key=lambda o: o.order_time)

    for order in ordered:
        actions = available_actions(order, config)
        for view in views:
            if order.status in view.column.status_ids:
                view.cards.append(BoardCard(order, actions))
                break

    return views
