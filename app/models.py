"""
SQLAlchemy Database Models

Tables for the multi-tenant ordering platform:
- Vendors own restaurants and templates (boards, menus, menu items)
- Restaurants reference one board template and any number of menu templates
- Orders are permanent history; only the workflow engine changes their status

Nested documents (board config, order items, menu sections) are stored as JSON.
"""

import enum

from sqlalchemy import JSON, Column, DateTime, Enum, Float, Integer, String, Text

from app.database import Base


class UserRole(str, enum.Enum):
    """Roles known to the session layer."""
    CONSUMER = "Consumer"
    VENDOR = "Vendor"
    SUPER_ADMIN = "SuperAdmin"
    RESTAURANT_ADMIN = "RestaurantAdmin"


class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False)

    def __repr__(self):
        return f"<Vendor {self.id} - {self.name}>"


class User(Base):
    """
    Platform user.

    No credentials are stored here; identity is supplied by the session layer.
    """
    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    name = Column(String(100), nullable=False)
    username = Column(String(100), nullable=False, unique=True, index=True)
    role = Column(Enum(UserRole), nullable=False, index=True)

    vendor_id = Column(String(64), nullable=True, index=True)
    restaurant_id = Column(String(64), nullable=True)  # RestaurantAdmin only
    linked_restaurant_ids = Column(JSON, nullable=False, default=list)

    permissions = Column(JSON, nullable=True)
    permission_schedule = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<User {self.id} - {self.username} - {self.role.value}>"


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(String(64), primary_key=True)
    vendor_id = Column(String(64), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    banner_url = Column(String(500), nullable=False, default="")

    # =========================================================================
    # PROFILE DOCUMENTS
    # =========================================================================
    contact = Column(JSON, nullable=False, default=dict)
    opening_hours = Column(JSON, nullable=False, default=dict)
    payment_methods = Column(JSON, nullable=False, default=list)
    branding = Column(JSON, nullable=False, default=dict)
    media = Column(JSON, nullable=False, default=list)

    # =========================================================================
    # TEMPLATE REFERENCES
    # =========================================================================
    board_template_id = Column(String(64), nullable=True, index=True)
    assigned_menu_template_ids = Column(JSON, nullable=False, default=list)

    def __repr__(self):
        return f"<Restaurant {self.id} - {self.name}>"


class BoardTemplate(Base):
    """Named, reusable workflow config owned by a vendor."""
    __tablename__ = "board_templates"

    id = Column(String(64), primary_key=True)
    vendor_id = Column(String(64), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    config = Column(JSON, nullable=False)

    def __repr__(self):
        return f"<BoardTemplate {self.id} - {self.name}>"


class MenuTemplate(Base):
    __tablename__ = "menu_templates"

    id = Column(String(64), primary_key=True)
    vendor_id = Column(String(64), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    sections = Column(JSON, nullable=False, default=list)  # [{id, title, itemIds}]

    def __repr__(self):
        return f"<MenuTemplate {self.id} - {self.name}>"


class MenuItemTemplate(Base):
    __tablename__ = "menu_item_templates"

    id = Column(String(64), primary_key=True)
    vendor_id = Column(String(64), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False)
    image_url = Column(String(500), nullable=False, default="")
    allergens = Column(JSON, nullable=False, default=list)
    intolerances = Column(JSON, nullable=False, default=list)
    discount = Column(JSON, nullable=True)
    composition = Column(JSON, nullable=False, default=list)

    def __repr__(self):
        return f"<MenuItemTemplate {self.id} - {self.name}>"


class Order(Base):
    """
    Consumer order.

    Created in ``pending`` at checkout and never deleted. ``status`` is a
    board-configured id (not an enum) and is only written through the
    order store's status-change path, guarded by ``version``.
    """
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True)
    restaurant_id = Column(String(64), nullable=False, index=True)

    # =========================================================================
    # ORDER DETAILS
    # =========================================================================
    items = Column(JSON, nullable=False, default=list)

    # =========================================================================
    # PRICING
    # =========================================================================
    subtotal = Column(Float, nullable=False)
    taxes = Column(Float, nullable=False)
    delivery_fee = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False)

    # =========================================================================
    # WORKFLOW STATE
    # =========================================================================
    status = Column(String(64), nullable=False, default="pending", index=True)
    version = Column(Integer, nullable=False, default=1)
    rejection_reason = Column(Text, nullable=True)
    processed_by_user_id = Column(String(64), nullable=True)

    # =========================================================================
    # TIMESTAMPS
    # =========================================================================
    order_time = Column(DateTime(timezone=True), nullable=False)
    last_update_time = Column(DateTime(timezone=True), nullable=False)
    completion_time = Column(Integer, nullable=True)  # minutes

    def __repr__(self):
        return f"<Order {self.id} - {self.restaurant_id} - {self.status}>"
