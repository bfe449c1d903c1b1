"""
Demo Data

Two vendors (burgers, pizza), one restaurant each on the standard
six-status board, their menus, staff accounts and a handful of orders in
every stage. Loaded by ``scripts/seed.py``; tests build on the board
config.
"""

import copy
import logging
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.models import (
    BoardTemplate,
    MenuItemTemplate,
    MenuTemplate,
    Restaurant,
    User,
    UserRole,
    Vendor,
)
from app.services.orders.base import BaseOrderStore, OrderRecord

logger = logging.getLogger(__name__)

TAX_RATE = 0.08
DELIVERY_FEE = 5.00


STANDARD_BOARD_CONFIG: dict[str, Any] = {
    "statuses": [
        {"id": "pending", "label": "Pending", "color": "#fb923c"},
        {"id": "accepted", "label": "Accepted", "color": "#3b82f6"},
        {"id": "in-progress", "label": "In Progress", "color": "#a855f7"},
        {"id": "ready-for-pickup", "label": "Ready for Pickup", "color": "#facc15"},
        {"id": "completed", "label": "Completed", "color": "#22c55e"},
        {"id": "rejected", "label": "Rejected", "color": "#ef4444"},
    ],
    "columns": [
        {"id": "col-1", "title": "New Orders", "statusIds": ["pending"],
         "icon": "ClipboardListIcon", "titleColor": "#374151", "columnColor": "#F3F4F6"},
        {"id": "col-2", "title": "In Progress", "statusIds": ["accepted", "in-progress"],
         "icon": "ChefHatIcon", "titleColor": "#374151", "columnColor": "#F3F4F6"},
        {"id": "col-3", "title": "Ready for Pickup", "statusIds": ["ready-for-pickup"],
         "icon": "ShoppingBagIcon", "titleColor": "#374151", "columnColor": "#F3F4F6"},
    ],
    "rejectionReasons": [
        {"id": "reason-1", "message": "Restaurant is too busy to accept new orders."},
        {"id": "reason-2", "message": "One or more items are out of stock."},
        {"id": "reason-3", "message": "Closing soon and cannot fulfill the order in time."},
    ],
    "statusTransitions": {
        "pending": ["accepted", "rejected"],
        "accepted": ["in-progress"],
        "in-progress": ["ready-for-pickup"],
        "ready-for-pickup": ["completed"],
        "completed": [],
        "rejected": [],
    },
}


def standard_board_config() -> dict[str, Any]:
    return copy.deepcopy(STANDARD_BOARD_CONFIG)


# =============================================================================
# TENANTS
# =============================================================================

VENDORS = [
    {"id": "v-1", "name": "Burger Queen Group"},
    {"id": "v-2", "name": "Pizza Palace Inc."},
]

USERS = [
    {"id": "u-2", "name": "Burger Queen Admin", "username": "vendor1",
     "role": UserRole.VENDOR, "vendor_id": "v-1"},
    {"id": "u-3", "name": "Pizza Palace Admin", "username": "vendor2",
     "role": UserRole.VENDOR, "vendor_id": "v-2"},
    {"id": "u-4", "name": "Super Admin", "username": "superadmin",
     "role": UserRole.SUPER_ADMIN},
    {"id": "u-5", "name": "Burger Restaurant Manager", "username": "restadmin1",
     "role": UserRole.RESTAURANT_ADMIN, "vendor_id": "v-1", "restaurant_id": "r-1",
     "linked_restaurant_ids": ["r-1"],
     "permissions": {"canViewAnalytics": True, "canManageMenu": True,
                     "canManageSettings": False, "canManageOrders": True}},
    {"id": "u-6", "name": "Guest", "username": "guest", "role": UserRole.CONSUMER},
]

MENU_ITEM_TEMPLATES = [
    {"id": "mit-101", "vendor_id": "v-1", "name": "Classic Cheeseburger", "price": 8.99,
     "composition": ["Beef Patty (1/3 lb)", "Cheddar Cheese Slice", "Dill Pickles", "White Onion"]},
    {"id": "mit-102", "vendor_id": "v-1", "name": "Bacon Deluxe", "price": 10.99,
     "composition": ["Beef Patty (1/3 lb)", "Crispy Bacon (2 strips)", "Deluxe Sauce"],
     "discount": {"percentage": 10, "showToConsumer": True}},
    {"id": "mit-103", "vendor_id": "v-1", "name": "Spicy Jalapeño Burger", "price": 9.99,
     "composition": ["Beef Patty (1/3 lb)", "Pepper Jack Cheese", "Fresh Jalapeños"]},
    {"id": "mit-104", "vendor_id": "v-1", "name": "Crispy Fries", "price": 3.50,
     "composition": ["Potatoes", "Canola Oil", "Salt"]},
    {"id": "mit-201", "vendor_id": "v-2", "name": "Margherita Pizza", "price": 14.00,
     "composition": ["Fresh Mozzarella", "San Marzano Tomato Sauce", "Fresh Basil"]},
    {"id": "mit-202", "vendor_id": "v-2", "name": "Pepperoni Passion", "price": 16.50,
     "composition": ["Spicy Pepperoni", "Mozzarella", "Tomato Sauce"]},
    {"id": "mit-203", "vendor_id": "v-2", "name": "Veggie Supreme", "price": 15.50,
     "composition": ["Bell Peppers", "Red Onions", "Black Olives", "Mushrooms"]},
    {"id": "mit-204", "vendor_id": "v-2", "name": "Garlic Knots", "price": 5.00,
     "composition": ["Dough", "Garlic Butter", "Parsley"]},
]

MENU_TEMPLATES = [
    {"id": "mt-1", "vendor_id": "v-1", "name": "Main Menu (Burgers)", "sections": [
        {"id": "sec-1-1", "title": "Signature Burgers", "itemIds": ["mit-101", "mit-102", "mit-103"]},
        {"id": "sec-1-2", "title": "Sides", "itemIds": ["mit-104"]},
    ]},
    {"id": "mt-2", "vendor_id": "v-2", "name": "Main Menu (Pizza)", "sections": [
        {"id": "sec-2-1", "title": "Pizzas", "itemIds": ["mit-201", "mit-202", "mit-203"]},
        {"id": "sec-2-2", "title": "Starters", "itemIds": ["mit-204"]},
    ]},
]

BOARD_TEMPLATES = [
    {"id": "bt-1", "vendor_id": "v-1", "name": "Standard Burger Workflow"},
    {"id": "bt-2", "vendor_id": "v-2", "name": "Standard Pizza Workflow"},
]

RESTAURANTS = [
    {"id": "r-1", "vendor_id": "v-1", "name": "Burger Queen",
     "description": "Home of the Flame-Grilled Masterpiece.",
     "contact": {"phone": "555-1234", "email": "contact@burgerqueen.com",
                 "address": "123 Burger Lane, Foodville"},
     "payment_methods": ["Credit Card", "Cash"],
     "branding": {"primaryColor": "#D97706"},
     "board_template_id": "bt-1", "assigned_menu_template_ids": ["mt-1"]},
    {"id": "r-2", "vendor_id": "v-2", "name": "Pizza Palace",
     "description": "Authentic Italian pizza with the freshest ingredients.",
     "contact": {"phone": "555-5678", "email": "ciao@pizzapalace.com",
                 "address": "456 Pizza Plaza, Foodville"},
     "payment_methods": ["Credit Card", "PayPal", "Cash"],
     "branding": {"primaryColor": "#DC2626"},
     "board_template_id": "bt-2", "assigned_menu_template_ids": ["mt-2"]},
]


# =============================================================================
# ORDERS
# =============================================================================

def _line(item_id: str, quantity: int) -> dict[str, Any]:
    item = next(i for i in MENU_ITEM_TEMPLATES if i["id"] == item_id)
    return {"menuItemId": item_id, "name": item["name"], "price": item["price"], "quantity": quantity}


def order_totals(items: list[dict[str, Any]]) -> dict[str, float]:
    subtotal = round(sum(i["price"] * i["quantity"] for i in items), 2)
    taxes = round(subtotal * TAX_RATE, 2)
    return {
        "subtotal": subtotal,
        "taxes": taxes,
        "delivery_fee": DELIVERY_FEE,
        "total": round(subtotal + taxes + DELIVERY_FEE, 2),
    }


# (id, restaurant, lines, status, placed minutes ago, updated minutes ago, extra)
_ORDERS = [
    ("ORD-123", "r-1", [("mit-101", 1), ("mit-104", 1)], "pending", 5, 5, {}),
    ("ORD-124", "r-1", [("mit-102", 2)], "in-progress", 10, 2, {"processed_by_user_id": "u-5"}),
    ("ORD-125", "r-2", [("mit-202", 1)], "ready-for-pickup", 15, 1, {}),
    ("ORD-126", "r-1", [("mit-103", 1)], "accepted", 8, 4, {"processed_by_user_id": "u-5"}),
    ("ORD-127", "r-1", [("mit-101", 1)], "completed", 30, 10,
     {"completion_time": 20, "processed_by_user_id": "u-5"}),
    ("ORD-128", "r-2", [("mit-201", 2)], "completed", 45, 25, {"completion_time": 20}),
    ("ORD-129", "r-1", [("mit-104", 3)], "completed", 60, 48,
     {"completion_time": 12, "processed_by_user_id": "u-5"}),
    ("ORD-130", "r-1", [("mit-102", 1)], "rejected", 5, 3,
     {"rejection_reason": "Restaurant is too busy to accept new orders.",
      "processed_by_user_id": "u-5"}),
]


def demo_orders(now: datetime) -> list[OrderRecord]:
    """The demo orders, timed relative to ``now``."""
    records = []
    for order_id, restaurant_id, lines, status, placed, updated, extra in _ORDERS:
        items = [_line(item_id, quantity) for item_id, quantity in lines]
        records.append(OrderRecord(
            id=order_id,
            restaurant_id=restaurant_id,
            items=items,
            status=status,
            order_time=now - timedelta(minutes=placed),
            last_update_time=now - timedelta(minutes=updated),
            **order_totals(items),
            **extra,
        ))
    return records


async def seed_catalog(session: AsyncSession) -> None:
    """Insert vendors, users, templates and restaurants."""
    session.add_all(Vendor(**v) for v in VENDORS)
    session.add_all(User(**{"linked_restaurant_ids": [], **u}) for u in USERS)
    session.add_all(MenuItemTemplate(**i) for i in MENU_ITEM_TEMPLATES)
    session.add_all(MenuTemplate(**copy.deepcopy(m)) for m in MENU_TEMPLATES)
    session.add_all(
        BoardTemplate(config=standard_board_config(), **b) for b in BOARD_TEMPLATES
    )
    session.add_all(Restaurant(**copy.deepcopy(r)) for r in RESTAURANTS)
    await session.commit()
    logger.info(
        f"Seeded {len(VENDORS)} vendors, {len(USERS)} users, "
        f"{len(RESTAURANTS)} restaurants"
    )


async def seed_orders(store: BaseOrderStore, now: datetime) -> list[OrderRecord]:
    """Insert the demo orders through the store's import path."""
    records = demo_orders(now)
    await store.import_orders(records)
    logger.info(f"Seeded {len(records)} orders")
    return records
