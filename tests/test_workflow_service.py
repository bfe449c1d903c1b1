import asyncio

import pytest

from app.services.errors import (
    ConfirmationRequiredError,
    ConflictError,
    MissingReasonError,
    NotFoundError,
    TransitionDenied,
)
from app.services.orders import OrderDraft, OrderWorkflowService
from app.services.workflow import DecisionKind


@pytest.fixture
def finished():
    return []


@pytest.fixture
def service(memory_store, board_config, finished):
    async def load_config(restaurant_id):
        if restaurant_id != "r-1":
            raise NotFoundError("Board template for restaurant", restaurant_id)
        return board_config

    return OrderWorkflowService(memory_store, load_config, on_finished=finished.append)


async def place(service) -> str:
    order = await service.store.create(OrderDraft(
        restaurant_id="r-1",
        items=[{"name": "Crispy Fries", "price": 3.5, "quantity": 1}],
        subtotal=3.5,
        taxes=0.28,
        delivery_fee=5.0,
        total=8.78,
    ))
    return order.id


@pytest.mark.anyio
async def test_request_does_not_mutate(service):
    order_id = await place(service)

    decision = await service.request_transition(order_id, "accepted")

    assert decision.kind == DecisionKind.ALLOWED
    assert (await service.store.get(order_id)).status == "pending"


@pytest.mark.anyio
async def test_happy_path_reaches_completed(service, clock, finished):
    order_id = await place(service)

    for target in ("accepted", "in-progress", "ready-for-pickup"):
        clock.advance(minutes=5)
        await service.apply_transition(order_id, target, actor_id="u-5")
    assert finished == []

    clock.advance(minutes=4)
    done = await service.apply_transition(order_id, "completed", actor_id="u-5")

    assert done.status == "completed"
    assert done.version == 5
    assert done.completion_time == 19
    assert done.processed_by_user_id == "u-5"
    assert finished == [done]


@pytest.mark.anyio
async def test_backward_move_requires_force(service):
    order_id = await place(service)
    await service.apply_transition(order_id, "accepted")

    with pytest.raises(ConfirmationRequiredError):
        await service.apply_transition(order_id, "pending")
    assert (await service.store.get(order_id)).version == 2

    moved = await service.apply_transition(order_id, "pending", force=True)
    assert moved.status == "pending"
    assert moved.version == 3


@pytest.mark.anyio
async def test_repeating_a_transition_is_denied(service, clock):
    order_id = await place(service)
    first = await service.apply_transition(order_id, "accepted")
    clock.advance(minutes=1)

    with pytest.raises(TransitionDenied):
        await service.apply_transition(order_id, "accepted")

    again = await service.store.get(order_id)
    assert again.last_update_time == first.last_update_time
    assert again.version == first.version


@pytest.mark.anyio
async def test_rejection_with_catalog_reason(service, finished):
    order_id = await place(service)

    with pytest.raises(MissingReasonError):
        await service.apply_transition(order_id, "rejected")

    rejected = await service.confirm_rejection(order_id, reason_id="reason-1", actor_id="u-5")

    assert rejected.status == "rejected"
    assert rejected.rejection_reason == "Restaurant is too busy to accept new orders."
    assert finished == [rejected]


@pytest.mark.anyio
async def test_unknown_reason_id(service):
    order_id = await place(service)

    with pytest.raises(NotFoundError):
        await service.confirm_rejection(order_id, reason_id="reason-404")


@pytest.mark.anyio
async def test_reason_is_ignored_outside_rejection(service):
    order_id = await place(service)

    accepted = await service.apply_transition(order_id, "accepted", reason_id="reason-404")
    assert accepted.status == "accepted"
    assert accepted.rejection_reason is None

    moved = await service.apply_drop(order_id, "col-2", reason_id="reason-404")
    assert moved.status == "in-progress"

    with pytest.raises(NotFoundError):
        await service.apply_drop(order_id, "col-rejected", reason_id="reason-404")


@pytest.mark.anyio
async def test_drop_flow(service):
    order_id = await place(service)

    decision = await service.request_drop(order_id, "col-2")
    accepted = await service.apply_drop(order_id, "col-2", actor_id="u-5")

    assert decision.target_status == "accepted"
    assert accepted.status == "accepted"

    rejected = await service.apply_drop(order_id, "col-rejected", reason="Oven broke")
    assert rejected.rejection_reason == "Oven broke"


@pytest.mark.anyio
async def test_stale_expected_version_fails_fast(service):
    order_id = await place(service)
    await service.apply_transition(order_id, "accepted")

    with pytest.raises(ConflictError):
        await service.apply_transition(order_id, "in-progress", expected_version=1)
    assert (await service.store.get(order_id)).status == "accepted"


@pytest.mark.anyio
async def test_concurrent_moves_one_conflicts(service):
    order_id = await place(service)

    results = await asyncio.gather(
        service.apply_transition(order_id, "accepted", expected_version=1),
        service.confirm_rejection(order_id, reason="Too busy", expected_version=1),
        return_exceptions=True,
    )

    assert sum(1 for r in results if isinstance(r, ConflictError)) == 1
    assert sum(1 for r in results if not isinstance(r, Exception)) == 1


@pytest.mark.anyio
async def test_restaurant_without_board(service, memory_store):
    order = await memory_store.create(OrderDraft("r-2", [], 0, 0, 0, 0))

    with pytest.raises(NotFoundError):
        await service.apply_transition(order.id, "accepted")
