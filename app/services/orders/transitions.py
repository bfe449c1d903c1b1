"""
Order Workflow Service

Glue between the pure transition engine and an order store:

    1. Load the order and its restaurant's board config
    2. Ask the engine for a decision / plan
    3. Write the approved change with ONE store call, guarded by the
       order's version

Callers that show the board pass the version they rendered as
``expected_version``; a stale version fails fast with ConflictError
instead of silently applying a move the user did not see.
"""

import logging
from typing import Awaitable, Callable, Optional

from app.services.errors import ConflictError, TransitionError
from app.services.orders.base import BaseOrderStore, OrderRecord
from app.services.workflow import engine
from app.services.workflow.engine import StatusChange, TransitionDecision
from app.services.workflow.workflow_schemas import REJECTED, WorkflowConfig

logger = logging.getLogger(__name__)

ConfigLoader = Callable[[str], Awaitable[WorkflowConfig]]
FinishedHook = Callable[[OrderRecord], None]


class OrderWorkflowService:
    """
    Applies board moves to stored orders.

    Args:
        store: Order store to read from and write to
        config_loader: ``async (restaurant_id) -> WorkflowConfig``
        on_finished: Called with the updated order whenever it reaches a
            final status (used to queue the history export)
    """

    def __init__(
        self,
        store: BaseOrderStore,
        config_loader: ConfigLoader,
        on_finished: Optional[FinishedHook] = None,
    ):
        self.store = store
        self._load_config = config_loader
        self._on_finished = on_finished

    async def _context(self, order_id: str) -> tuple[OrderRecord, WorkflowConfig]:
        order = await self.store.get(order_id)
        config = await self._load_config(order.restaurant_id)
        return order, config

    @staticmethod
    def _check_version(order: OrderRecord, expected_version: Optional[int]) -> None:
        if expected_version is not None and expected_version != order.version:
            raise ConflictError(order.id, expected_version, order.version)

    # =========================================================================
    # DECISIONS (read-only)
    # =========================================================================

    async def request_transition(self, order_id: str, target_status_id: str) -> TransitionDecision:
        order, config = await self._context(order_id)
        return engine.request_transition(order, target_status_id, config)

    async def request_drop(self, order_id: str, column_id: str) -> TransitionDecision:
        order, config = await self._context(order_id)
        return engine.request_column_drop(order, column_id, config)

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    async def apply_transition(
        self,
        order_id: str,
        target_status_id: str,
        *,
        force: bool = False,
        reason: Optional[str] = None,
        reason_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> OrderRecord:
        """
        Move an order to a status (button flow).

        Raises:
            NotFoundError: Unknown order, or unknown rejection reason id
            UnknownStatusError: Target not on the board
            TransitionError: Denied / missing reason / needs confirmation
            ConflictError: Order changed since ``expected_version``
        """
        order, config = await self._context(order_id)
        self._check_version(order, expected_version)

        message = None
        if target_status_id == REJECTED:
            message = engine.resolve_rejection_reason(config, reason_id, reason)
        change = self._plan(
            lambda: engine.plan_transition(
                order, target_status_id, config,
                force=force, reason=message, actor_id=actor_id,
            ),
        )
        return await self._write(order, change, config)

    async def apply_drop(
        self,
        order_id: str,
        column_id: str,
        *,
        force: bool = False,
        reason: Optional[str] = None,
        reason_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> OrderRecord:
        """Move an order by dropping it on a board column."""
        order, config = await self._context(order_id)
        self._check_version(order, expected_version)

        def plan() -> StatusChange:
            target = engine.resolve_drop_target(config, order.status, column_id)
            message = None
            if target and target.status_id == REJECTED:
                message = engine.resolve_rejection_reason(config, reason_id, reason)
            return engine.plan_column_drop(
                order, column_id, config,
                force=force, reason=message, actor_id=actor_id,
            )

        change = self._plan(plan)
        return await self._write(order, change, config)

    async def confirm_rejection(
        self,
        order_id: str,
        *,
        reason: Optional[str] = None,
        reason_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        expected_version: Optional[int] = None,
    ) -> OrderRecord:
        """Reject an order with a catalog reason id or free text."""
        order, config = await self._context(order_id)
        self._check_version(order, expected_version)

        message = engine.resolve_rejection_reason(config, reason_id, reason)
        change = self._plan(
            lambda: engine.confirm_rejection(order, message or "", config, actor_id=actor_id),
        )
        return await self._write(order, change, config)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    @staticmethod
    def _plan(planner: Callable[[], StatusChange]) -> StatusChange:
        try:
            return planner()
        except TransitionError as e:
            logger.warning(
                f"Order {e.order_id}: {type(e).__name__} "
                f"'{e.from_status}' -> '{e.target_status}': {e}"
            )
            raise

    async def _write(
        self,
        order: OrderRecord,
        change: StatusChange,
        config: WorkflowConfig,
    ) -> OrderRecord:
        try:
            updated = await self.store.apply_status_change(order.id, change, order.version)
        except ConflictError:
            logger.warning(f"Order {order.id}: concurrent update, version {order.version} is stale")
            raise

        direction = " (backward)" if change.backward else ""
        logger.info(
            f"Order {order.id}: '{order.status}' -> '{updated.status}'{direction}"
            f" by {change.actor_id or 'unknown'}"
        )

        if self._on_finished and engine.is_final(config, updated.status):
            self._on_finished(updated)

        return updated
