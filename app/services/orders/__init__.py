"""
Order Store Factory

Single entry point for obtaining the order store, so endpoints and the
workflow service never care which backend is active.

Usage:
    from app.services.orders import get_order_store

    store = get_order_store()
    order = await store.get("ORD-123")

Backend Switching:
    - ORDER_STORE_BACKEND=sql    → SqlOrderStore (default)
    - ORDER_STORE_BACKEND=memory → InMemoryOrderStore (process memory)
"""

import logging
from functools import lru_cache

from app.core.config import get_settings
from app.services.orders.base import (
    BaseOrderStore,
    OrderDraft,
    OrderRecord,
    generate_order_id,
)
from app.services.orders.memory import InMemoryOrderStore
from app.services.orders.sql import SqlOrderStore
from app.services.orders.transitions import OrderWorkflowService
from app.services.orders.wait_time import WaitTimeEstimate, estimate

logger = logging.getLogger(__name__)


@lru_cache()
def get_order_store() -> BaseOrderStore:
    """
    Get the configured order store instance.

    The instance is cached; the in-memory backend would otherwise lose
    its orders between requests.

    Returns:
        BaseOrderStore: Configured order store
    """
    settings = get_settings()

    if settings.use_memory_store:
        logger.info("Order Store: Using InMemoryOrderStore")
        return InMemoryOrderStore()

    logger.info("Order Store: Using SqlOrderStore")
    return SqlOrderStore()


def reset_order_store() -> None:
    """Clear the cached store; the next call builds a new one."""
    get_order_store.cache_clear()
    logger.debug("Order store cache cleared")


__all__ = [
    "get_order_store",
    "reset_order_store",
    "BaseOrderStore",
    "OrderDraft",
    "OrderRecord",
    "generate_order_id",
    "InMemoryOrderStore",
    "SqlOrderStore",
    "OrderWorkflowService",
    "WaitTimeEstimate",
    "estimate",
]
