"""
Demo Data Seeder

Creates the tables and loads the demo vendors, restaurants, boards, menus,
users and orders into the configured database.

Run from project root: python scripts/seed.py
"""

import asyncio
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.core.config import get_settings, setup_logging
from app.database import get_session_maker, init_db
from app.demo_data import seed_catalog, seed_orders
from app.services.orders import SqlOrderStore
from app.services.orders.base import utcnow


async def main() -> None:
    settings = get_settings()
    setup_logging()

    print(f"Seeding {settings.database_url.split('@')[-1]} ...")
    await init_db()

    async with get_session_maker()() as session:
        await seed_catalog(session)

    await seed_orders(SqlOrderStore(), utcnow())
    print("Done. Staff user for the board: X-User-Id: u-5 (restaurant r-1)")


if __name__ == "__main__":
    asyncio.run(main())
