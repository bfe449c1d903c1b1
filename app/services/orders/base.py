"""
Order Store Abstract Base Class

Defines the interface contract for order persistence. Both
InMemoryOrderStore and SqlOrderStore implement these methods, so the
workflow service behaves identically whichever backend is active.

Design Pattern: Strategy Pattern
    - ORDER_STORE_BACKEND picks the implementation at runtime
    - ``apply_status_change`` is the only way an order's status changes

Concurrency:
    Every order carries a ``version``. A status change names the version
    it was planned against; if the stored version moved on, the store raises
    ConflictError and writes nothing.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from app.services.workflow.engine import StatusChange, completion_minutes
from app.services.workflow.workflow_schemas import COMPLETED, PENDING

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_order_id() -> str:
    return f"ORD-{uuid.uuid4().hex[:12].upper()}"


@dataclass
class OrderDraft:
    """
    Everything checkout knows about a new order.

    Attributes:
        restaurant_id: Restaurant the order belongs to
        items: Ordered items (menu item snapshot + quantity)
        subtotal: Sum of item prices
        taxes: Tax amount
        delivery_fee: Delivery charge
        total: Amount charged
    """
    restaurant_id: str
    items: list[dict[str, Any]]
    subtotal: float
    taxes: float
    delivery_fee: float
    total: float


@dataclass
class OrderRecord:
    """
    Standardized order returned by every store implementation.

    ``completion_time`` (minutes) is stamped when the order reaches
    ``completed``, which is final, and is None for every other status;
    ``rejection_reason`` is always set on rejected orders.
    """
    id: str
    restaurant_id: str
    items: list[dict[str, Any]]
    subtotal: float
    taxes: float
    delivery_fee: float
    total: float
    status: str
    order_time: datetime
    last_update_time: datetime
    version: int = 1
    completion_time: Optional[int] = None
    rejection_reason: Optional[str] = None
    processed_by_user_id: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "restaurant_id": self.restaurant_id,
            "items": self.items,
            "subtotal": self.subtotal,
            "taxes": self.taxes,
            "delivery_fee": self.delivery_fee,
            "total": self.total,
            "status": self.status,
            "order_time": self.order_time.isoformat(),
            "last_update_time": self.last_update_time.isoformat(),
            "version": self.version,
            "completion_time": self.completion_time,
            "rejection_reason": self.rejection_reason,
            "processed_by_user_id": self.processed_by_user_id,
        }


def new_record(draft: OrderDraft, now: datetime) -> OrderRecord:
    """Build the initial ``pending`` record for a draft."""
    return OrderRecord(
        id=generate_order_id(),
        restaurant_id=draft.restaurant_id,
        items=list(draft.items),
        subtotal=draft.subtotal,
        taxes=draft.taxes,
        delivery_fee=draft.delivery_fee,
        total=draft.total,
        status=PENDING,
        order_time=now,
        last_update_time=now,
    )


def changed_record(order: OrderRecord, change: StatusChange, now: datetime) -> OrderRecord:
    """Apply a status change to a record, stamping time, actor and version."""
    updated = replace(
        order,
        status=change.status,
        last_update_time=now,
        version=order.version + 1,
        completion_time=(
            completion_minutes(order.order_time, now) if change.status == COMPLETED else None
        ),
    )
    if change.rejection_reason:
        updated.rejection_reason = change.rejection_reason
    if change.actor_id:
        updated.processed_by_user_id = change.actor_id
    return updated


class BaseOrderStore(ABC):
    """
    Abstract base class for order stores.

    Implementations must never change ``status`` outside
    ``apply_status_change``.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or utcnow

    def now(self) -> datetime:
        return self._clock()

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend name (e.g. "memory", "sql")."""
        pass

    @abstractmethod
    async def create(self, draft: OrderDraft) -> OrderRecord:
        """Persist a new order in ``pending`` with order/update time = now."""
        pass

    @abstractmethod
    async def import_orders(self, records: Iterable[OrderRecord]) -> None:
        """Store existing orders as-is (seed data, migrations)."""
        pass

    @abstractmethod
    async def get(self, order_id: str) -> OrderRecord:
        """
        Fetch one order.

        Raises:
            NotFoundError: If the id is unknown
        """
        pass

    @abstractmethod
    async def list_by_restaurant(self, restaurant_id: str) -> list[OrderRecord]:
        """All orders of a restaurant, newest first."""
        pass

    @abstractmethod
    async def list_all(self) -> list[OrderRecord]:
        """All orders, newest first."""
        pass

    @abstractmethod
    async def apply_status_change(
        self,
        order_id: str,
        change: StatusChange,
        expected_version: int,
    ) -> OrderRecord:
        """
        Write an engine-approved status change.

        Args:
            order_id: Order to update
            change: Approved change from the transition engine
            expected_version: Version the change was planned against

        Returns:
            OrderRecord: The updated order

        Raises:
            NotFoundError: If the id is unknown
            ConflictError: If the stored version differs from expected_version
        """
        pass

    async def health_check(self) -> bool:
        """Verify the backend is reachable."""
        return True
