"""
Concurrency Simulation Script

Places orders, then has several "staff members" race to move the same
orders along the board. Every race should end with exactly one winner per
step and the rest reported as 409 conflicts.

Run from project root (server running, demo data seeded):
    python scripts/simulate.py --orders 20 --staff 3
"""

import argparse
import asyncio
import random
import sys
import time
from typing import Any, Optional

import httpx

API_BASE_URL = "http://localhost:8001"
RESTAURANT_ID = "r-1"
STAFF_USER_ID = "u-5"

MENU_ITEMS = [
    {"menuItemId": "mit-101", "name": "Classic Cheeseburger", "price": 8.99},
    {"menuItemId": "mit-102", "name": "Bacon Deluxe", "price": 10.99},
    {"menuItemId": "mit-103", "name": "Spicy Jalapeño Burger", "price": 9.99},
    {"menuItemId": "mit-104", "name": "Crispy Fries", "price": 3.50},
]

# Forward path through the standard board
HAPPY_PATH = ["accepted", "in-progress", "ready-for-pickup", "completed"]


def generate_random_items() -> list[dict]:
    items = []
    for _ in range(random.randint(1, 3)):
        item = random.choice(MENU_ITEMS).copy()
        item["quantity"] = random.randint(1, 3)
        items.append(item)
    return items


async def place_order(client: httpx.AsyncClient) -> Optional[dict[str, Any]]:
    response = await client.post(
        f"{API_BASE_URL}/api/restaurants/{RESTAURANT_ID}/checkout",
        json={"items": generate_random_items()},
        timeout=30.0,
    )
    if response.status_code != 201:
        print(f"   ❌ Checkout failed: {response.text[:100]}")
        return None
    return response.json()["order"]


async def attempt_transition(
    client: httpx.AsyncClient,
    order_id: str,
    target: str,
    version: int,
) -> int:
    response = await client.post(
        f"{API_BASE_URL}/api/orders/{order_id}/transition",
        json={"targetStatusId": target, "expectedVersion": version},
        headers={"X-User-Id": STAFF_USER_ID},
        timeout=30.0,
    )
    return response.status_code


async def race_order(client: httpx.AsyncClient, order: dict, staff: int) -> dict[str, int]:
    """Walk one order to completion with ``staff`` concurrent clicks per step."""
    tally = {"applied": 0, "conflicts": 0, "other": 0}
    version = order["version"]

    for target in HAPPY_PATH:
        codes = await asyncio.gather(*[
            attempt_transition(client, order["id"], target, version)
            for _ in range(staff)
        ])
        for code in codes:
            if code == 200:
                tally["applied"] += 1
            elif code == 409:
                tally["conflicts"] += 1
            else:
                tally["other"] += 1

        if codes.count(200) != 1:
            print(f"   ⚠️ {order['id']} -> {target}: {codes.count(200)} winners")
        version += 1

    return tally


async def run_simulation(num_orders: int, staff: int) -> dict[str, Any]:
    print("=" * 70)
    print("CONCURRENCY SIMULATION")
    print(f"   Orders: {num_orders} | Concurrent staff per step: {staff}")
    print("=" * 70)

    start = time.time()
    async with httpx.AsyncClient() as client:
        orders = [o for o in await asyncio.gather(*[place_order(client) for _ in range(num_orders)]) if o]
        print(f"\n✅ {len(orders)}/{num_orders} orders placed")

        tallies = await asyncio.gather(*[race_order(client, o, staff) for o in orders])

    totals = {key: sum(t[key] for t in tallies) for key in ("applied", "conflicts", "other")}
    expected = len(orders) * len(HAPPY_PATH)
    elapsed = round(time.time() - start, 2)

    print("\n" + "=" * 70)
    print("RESULTS")
    print("=" * 70)
    print(f"   Transitions applied: {totals['applied']} (expected {expected})")
    print(f"   Conflicts (409):     {totals['conflicts']}")
    print(f"   Other responses:     {totals['other']}")
    print(f"   Total time:          {elapsed}s")
    print("\nNext: check the Celery worker, then run python scripts/verify.py")

    return {"orders": len(orders), "expected": expected, "elapsed": elapsed, **totals}


async def preflight() -> bool:
    async with httpx.AsyncClient() as client:
        try:
            response = await client.get(f"{API_BASE_URL}/health", timeout=10.0)
        except httpx.HTTPError as e:
            print(f"❌ Server not reachable: {e}")
            return False
        data = response.json()
        print(f"Health: {data.get('status')} (db: {data.get('database')}, redis: {data.get('redis')})")
        return response.status_code == 200


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Concurrency Simulation Script")
    parser.add_argument("--orders", type=int, default=20, help="Number of orders")
    parser.add_argument("--staff", type=int, default=3, help="Concurrent clicks per step")
    parser.add_argument("--url", default=API_BASE_URL, help="API base URL")
    args = parser.parse_args()

    API_BASE_URL = args.url

    if not asyncio.run(preflight()):
        sys.exit(1)

    result = asyncio.run(run_simulation(args.orders, args.staff))
    sys.exit(0 if result["applied"] == result["expected"] and result["other"] == 0 else 1)
