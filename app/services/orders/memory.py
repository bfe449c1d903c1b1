"""
In-Memory Order Store

Keeps orders in process memory. Used with ORDER_STORE_BACKEND=memory to:
    - Run the board locally without a database
    - Drive engine tests without I/O

Behavior:
    - One asyncio.Lock per order serializes status changes
    - Records are copied on the way in and out, so callers can't mutate
      stored state behind the store's back
"""

import asyncio
import copy
import logging
from typing import Iterable, Optional

from app.services.errors import ConflictError, NotFoundError
from app.services.orders.base import (
    BaseOrderStore,
    Clock,
    OrderDraft,
    OrderRecord,
    changed_record,
    new_record,
)
from app.services.workflow.engine import StatusChange

logger = logging.getLogger(__name__)


class InMemoryOrderStore(BaseOrderStore):
    """
    Dictionary-backed order store.

    Example:
        >>> store = InMemoryOrderStore()
        >>> order = await store.create(draft)
        >>> order.status
        'pending'
    """

    def __init__(self, clock: Optional[Clock] = None):
        super().__init__(clock)
        self._orders: dict[str, OrderRecord] = {}
        self._locks: dict[str, asyncio.Lock] = {}

        logger.info("InMemoryOrderStore initialized")

    @property
    def backend_name(self) -> str:
        return "memory"

    def _lock_for(self, order_id: str) -> asyncio.Lock:
        return self._locks.setdefault(order_id, asyncio.Lock())

    async def import_orders(self, records: Iterable[OrderRecord]) -> None:
        for record in records:
            self._orders[record.id] = copy.deepcopy(record)

    def _sorted(self, records: Iterable[OrderRecord]) -> list[OrderRecord]:
        return [
            copy.deepcopy(r)
            for r in sorted(records, key=lambda r: r.order_time, reverse=True)
        ]

    async def create(self, draft: OrderDraft) -> OrderRecord:
        record = new_record(draft, self.now())
        self._orders[record.id] = record
        logger.info(f"Order {record.id} created for restaurant {record.restaurant_id}")
        return copy.deepcopy(record)

    async def get(self, order_id: str) -> OrderRecord:
        record = self._orders.get(order_id)
        if record is None:
            raise NotFoundError("Order", order_id)
        return copy.deepcopy(record)

    async def list_by_restaurant(self, restaurant_id: str) -> list[OrderRecord]:
        return self._sorted(r for r in self._orders.values() if r.restaurant_id == restaurant_id)

    async def list_all(self) -> list[OrderRecord]:
        return self._sorted(self._orders.values())

    async def apply_status_change(
        self,
        order_id: str,
        change: StatusChange,
        expected_version: int,
    ) -> OrderRecord:
        async with self._lock_for(order_id):
            current = self._orders.get(order_id)
            if current is None:
                raise NotFoundError("Order", order_id)

            if current.version != expected_version:
                raise ConflictError(order_id, expected_version, current.version)

            updated = changed_record(current, change, self.now())
            self._orders[order_id] = updated

        return copy.deepcopy(updated)
