import asyncio

import pytest

from app.services.errors import ConflictError, NotFoundError
from app.services.orders import InMemoryOrderStore, OrderDraft, SqlOrderStore
from app.services.workflow import StatusChange


def draft(restaurant_id: str = "r-1") -> OrderDraft:
    return OrderDraft(
        restaurant_id=restaurant_id,
        items=[{"menuItemId": "mit-102", "name": "Bacon Deluxe", "price": 10.99, "quantity": 2}],
        subtotal=21.98,
        taxes=1.76,
        delivery_fee=5.0,
        total=28.74,
    )


@pytest.fixture(params=["memory", "sql"])
def store(request, clock):
    if request.param == "memory":
        return InMemoryOrderStore(clock=clock)
    request.getfixturevalue("database")
    return SqlOrderStore(clock=clock)


@pytest.mark.anyio
async def test_create_starts_pending(store, clock):
    order = await store.create(draft())

    assert order.id.startswith("ORD-")
    assert order.status == "pending"
    assert order.version == 1
    assert order.order_time == clock.current
    assert order.last_update_time == clock.current
    assert order.completion_time is None
    assert await store.get(order.id) == order


@pytest.mark.anyio
async def test_unknown_order(store):
    with pytest.raises(NotFoundError):
        await store.get("ORD-MISSING")
    with pytest.raises(NotFoundError):
        await store.apply_status_change("ORD-MISSING", StatusChange("accepted"), 1)


@pytest.mark.anyio
async def test_status_change_stamps_time_actor_and_version(store, clock):
    order = await store.create(draft())
    clock.advance(minutes=3)

    updated = await store.apply_status_change(
        order.id, StatusChange("accepted", actor_id="u-5"), expected_version=1
    )

    assert updated.status == "accepted"
    assert updated.version == 2
    assert updated.last_update_time == clock.current
    assert updated.order_time == order.order_time
    assert updated.processed_by_user_id == "u-5"
    assert await store.get(order.id) == updated


@pytest.mark.anyio
async def test_stale_version_conflicts_and_writes_nothing(store, clock):
    order = await store.create(draft())
    await store.apply_status_change(order.id, StatusChange("accepted"), expected_version=1)

    with pytest.raises(ConflictError) as exc_info:
        await store.apply_status_change(order.id, StatusChange("rejected", "Too busy"), expected_version=1)

    assert exc_info.value.actual_version == 2
    current = await store.get(order.id)
    assert current.status == "accepted"
    assert current.rejection_reason is None


@pytest.mark.anyio
async def test_completion_time_stamped_on_completion(store, clock):
    order = await store.create(draft())
    clock.advance(minutes=12)

    ready = await store.apply_status_change(order.id, StatusChange("ready-for-pickup"), 1)
    assert ready.completion_time is None

    clock.advance(minutes=8, seconds=40)
    completed = await store.apply_status_change(order.id, StatusChange("completed"), 2)
    assert completed.completion_time == 21
    assert (await store.get(order.id)).completion_time == 21


@pytest.mark.anyio
async def test_rejection_keeps_reason(store):
    order = await store.create(draft())

    rejected = await store.apply_status_change(
        order.id, StatusChange("rejected", rejection_reason="Out of stock", actor_id="u-5"), 1
    )

    assert rejected.rejection_reason == "Out of stock"
    assert (await store.get(order.id)).rejection_reason == "Out of stock"


@pytest.mark.anyio
async def test_listing_is_per_restaurant_newest_first(store, clock):
    first = await store.create(draft("r-1"))
    clock.advance(minutes=1)
    second = await store.create(draft("r-1"))
    clock.advance(minutes=1)
    other = await store.create(draft("r-2"))

    assert [o.id for o in await store.list_by_restaurant("r-1")] == [second.id, first.id]
    assert [o.id for o in await store.list_all()] == [other.id, second.id, first.id]
    assert await store.list_by_restaurant("r-404") == []


@pytest.mark.anyio
async def test_import_keeps_records_as_given(store, make_order):
    record = make_order("ORD-IMPORTED", "in-progress", minutes_ago=12, version=4)

    await store.import_orders([record])

    assert await store.get("ORD-IMPORTED") == record


@pytest.mark.anyio
async def test_concurrent_changes_have_one_winner(store):
    order = await store.create(draft())

    results = await asyncio.gather(
        store.apply_status_change(order.id, StatusChange("accepted"), 1),
        store.apply_status_change(order.id, StatusChange("rejected", "Too busy"), 1),
        return_exceptions=True,
    )

    winners = [r for r in results if not isinstance(r, Exception)]
    conflicts = [r for r in results if isinstance(r, ConflictError)]
    assert len(winners) == 1
    assert len(conflicts) == 1

    stored = await store.get(order.id)
    assert stored.version == 2
    assert stored.status == winners[0].status


@pytest.mark.anyio
async def test_memory_store_returns_copies(memory_store):
    order = await memory_store.create(draft())

    order.items.append({"name": "Smuggled"})
    fetched = await memory_store.get(order.id)

    assert len(fetched.items) == 1


@pytest.mark.anyio
async def test_sql_store_health_check(database):
    assert await SqlOrderStore().health_check()
