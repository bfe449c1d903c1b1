"""
Wait Time Estimator

Consumer-facing queue position and wait estimate. Read-only and
recomputed on every call, since the order set keeps changing.

The active set is fixed rather than taken from the board: queue position
is about kitchen load, not about how a restaurant lays out its columns.
"""

from dataclasses import dataclass
from typing import Iterable

from app.services.orders.base import OrderRecord

ACTIVE_STATUSES = frozenset({"pending", "accepted", "in-progress"})
AVERAGE_PREP_MINUTES = 7


@dataclass(frozen=True)
class WaitTimeEstimate:
    orders_ahead: int
    estimated_minutes: int

    def to_dict(self) -> dict:
        return {
            "orders_ahead": self.orders_ahead,
            "estimated_minutes": self.estimated_minutes,
        }


def is_active(order: OrderRecord) -> bool:
    return order.status in ACTIVE_STATUSES


def estimate(order: OrderRecord, orders: Iterable[OrderRecord]) -> WaitTimeEstimate:
    """
    Count active orders of the same restaurant placed strictly earlier.

    Args:
        order: The order being tracked
        orders: Orders to compare against (other restaurants are ignored)

    Returns:
        WaitTimeEstimate: ``(ahead + 1) * AVERAGE_PREP_MINUTES`` minutes
    """
    ahead = sum(
        1
        for other in orders
        if other.restaurant_id == order.restaurant_id
        and is_active(other)
        and other.order_time < order.order_time
    )
    return WaitTimeEstimate(
        orders_ahead=ahead,
        estimated_minutes=(ahead + 1) * AVERAGE_PREP_MINUTES,
    )
