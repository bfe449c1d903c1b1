import asyncio
import os
from datetime import datetime, timedelta, timezone

# Must be set before the app modules read their settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test_bootstrap.db"
os.environ["ENV_MODE"] = "development"
os.environ["ORDER_STORE_BACKEND"] = "sql"
os.environ["EXPORT_FINISHED_ORDERS"] = "false"

import pytest
from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.database import configure_database, get_session_maker, init_db
from app.demo_data import seed_catalog, seed_orders, standard_board_config
from app.services.orders import InMemoryOrderStore, SqlOrderStore, reset_order_store
from app.services.orders.base import OrderRecord, utcnow
from app.services.workflow import WorkflowConfig

get_settings.cache_clear()

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable time source for the order stores."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


def build_order(
    order_id: str,
    status: str = "pending",
    minutes_ago: float = 0,
    restaurant_id: str = "r-1",
    now: datetime = T0,
    version: int = 1,
) -> OrderRecord:
    placed = now - timedelta(minutes=minutes_ago)
    return OrderRecord(
        id=order_id,
        restaurant_id=restaurant_id,
        items=[{"menuItemId": "mit-101", "name": "Classic Cheeseburger", "price": 8.99, "quantity": 1}],
        subtotal=8.99,
        taxes=0.72,
        delivery_fee=5.0,
        total=14.71,
        status=status,
        order_time=placed,
        last_update_time=placed,
        version=version,
    )


async def _seed_database(now: datetime) -> None:
    await init_db()
    async with get_session_maker()() as session:
        await seed_catalog(session)
    await seed_orders(SqlOrderStore(), now)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def board_config() -> WorkflowConfig:
    return WorkflowConfig.model_validate(standard_board_config())


@pytest.fixture
def mini_config() -> WorkflowConfig:
    """pending -> accepted | rejected, with accepted left without forward edges."""
    return WorkflowConfig.model_validate({
        "statuses": [
            {"id": "pending", "label": "Pending"},
            {"id": "accepted", "label": "Accepted"},
            {"id": "rejected", "label": "Rejected"},
        ],
        "columns": [
            {"id": "col-a", "title": "New", "statusIds": ["pending"]},
            {"id": "col-b", "title": "Accepted", "statusIds": ["accepted"]},
        ],
        "rejectionReasons": [{"id": "oos", "message": "Out of stock"}],
        "statusTransitions": {"pending": ["accepted", "rejected"]},
    })


@pytest.fixture
def make_order():
    return build_order


@pytest.fixture
def memory_store(clock):
    return InMemoryOrderStore(clock=clock)


@pytest.fixture
def database(tmp_path):
    """Empty SQLite database in a temp dir, with tables created."""
    configure_database(f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}")
    reset_order_store()
    asyncio.run(init_db())
    yield
    reset_order_store()


@pytest.fixture
def seeded_database(database):
    """Demo vendors, restaurants, boards, users and orders (timed from now)."""
    asyncio.run(_seed_database(utcnow()))


@pytest.fixture
def client(seeded_database):
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def staff():
    return {"X-User-Id": "u-5"}
