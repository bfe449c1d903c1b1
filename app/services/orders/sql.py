"""
SQL Order Store

Persists orders through the SQLAlchemy async session factory
(PostgreSQL in deployments, SQLite in tests).

Status changes use an optimistic check: the UPDATE only matches when the
row still has the version the change was planned against, so of two
concurrent writers exactly one wins and the other gets ConflictError.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import get_session_maker
from app.models import Order
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


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite drops tzinfo; stored values are always UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_record(row: Order) -> OrderRecord:
    return OrderRecord(
        id=row.id,
        restaurant_id=row.restaurant_id,
        items=list(row.items or []),
        subtotal=row.subtotal,
        taxes=row.taxes,
        delivery_fee=row.delivery_fee,
        total=row.total,
        status=row.status,
        order_time=_aware(row.order_time),
        last_update_time=_aware(row.last_update_time),
        version=row.version,
        completion_time=row.completion_time,
        rejection_reason=row.rejection_reason,
        processed_by_user_id=row.processed_by_user_id,
    )


def to_row(record: OrderRecord) -> Order:
    return Order(
        id=record.id,
        restaurant_id=record.restaurant_id,
        items=record.items,
        subtotal=record.subtotal,
        taxes=record.taxes,
        delivery_fee=record.delivery_fee,
        total=record.total,
        status=record.status,
        order_time=record.order_time,
        last_update_time=record.last_update_time,
        version=record.version,
        completion_time=record.completion_time,
        rejection_reason=record.rejection_reason,
        processed_by_user_id=record.processed_by_user_id,
    )


class SqlOrderStore(BaseOrderStore):
    """
    Order store on top of the application database.

    Args:
        session_factory: Returns the async session maker to use; defaults to
            the app's current one (follows ``configure_database``)
        clock: Time source, injectable for tests
    """

    def __init__(
        self,
        session_factory: Optional[Callable[[], async_sessionmaker[AsyncSession]]] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(clock)
        self._session_factory = session_factory or get_session_maker

        logger.info("SqlOrderStore initialized")

    @property
    def backend_name(self) -> str:
        return "sql"

    def _session(self) -> AsyncSession:
        return self._session_factory()()

    async def create(self, draft: OrderDraft) -> OrderRecord:
        record = new_record(draft, self.now())
        async with self._session() as session:
            session.add(to_row(record))
            await session.commit()

        logger.info(f"Order {record.id} created for restaurant {record.restaurant_id}")
        return record

    async def import_orders(self, records: Iterable[OrderRecord]) -> None:
        async with self._session() as session:
            session.add_all(to_row(record) for record in records)
            await session.commit()

    async def get(self, order_id: str) -> OrderRecord:
        async with self._session() as session:
            row = await session.get(Order, order_id)
            if row is None:
                raise NotFoundError("Order", order_id)
            return to_record(row)

    async def list_by_restaurant(self, restaurant_id: str) -> list[OrderRecord]:
        async with self._session() as session:
            result = await session.execute(
                select(Order)
                .where(Order.restaurant_id == restaurant_id)
                .order_by(Order.order_time.desc())
            )
            return [to_record(row) for row in result.scalars().all()]

    async def list_all(self) -> list[OrderRecord]:
        async with self._session() as session:
            result = await session.execute(select(Order).order_by(Order.order_time.desc()))
            return [to_record(row) for row in result.scalars().all()]

    async def apply_status_change(
        self,
        order_id: str,
        change: StatusChange,
        expected_version: int,
    ) -> OrderRecord:
        async with self._session() as session:
            row = await session.get(Order, order_id)
            if row is None:
                raise NotFoundError("Order", order_id)

            current = to_record(row)
            if current.version != expected_version:
                raise ConflictError(order_id, expected_version, current.version)

            updated = changed_record(current, change, self.now())

            result = await session.execute(
                update(Order)
                .where(Order.id == order_id, Order.version == expected_version)
                .values(
                    status=updated.status,
                    last_update_time=updated.last_update_time,
                    version=updated.version,
                    completion_time=updated.completion_time,
                    rejection_reason=updated.rejection_reason,
                    processed_by_user_id=updated.processed_by_user_id,
                )
                .execution_options(synchronize_session=False)
            )

            if result.rowcount == 0:
                await session.rollback()
                logger.warning(f"Order {order_id}: lost update race at version {expected_version}")
                raise ConflictError(order_id, expected_version)

            await session.commit()

        return updated

    async def health_check(self) -> bool:
        try:
            async with self._session() as session:
                await session.execute(select(Order.id).limit(1))
            return True
        except Exception as e:
            logger.error(f"Order store health check failed: {e}")
            return False
