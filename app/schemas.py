"""
Pydantic Schemas for Request/Response Validation

JSON is camelCase on the wire (``targetStatusId``, ``statusIds``...) to
match the board configs the front end already produces; snake_case field
names are accepted on input as well.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from app.models import UserRole


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# CHECKOUT & ORDERS
# =============================================================================

class CartItem(ApiModel):
    """One line of the consumer's cart (a menu item snapshot)."""
    menu_item_id: Optional[str] = Field(None, examples=["mit-1"])
    name: str = Field(..., min_length=1, max_length=100, examples=["Margherita Pizza"])
    price: float = Field(..., ge=0, examples=[12.5])
    quantity: int = Field(..., ge=1, le=99, examples=[2])

    @property
    def line_total(self) -> float:
        return round(self.price * self.quantity, 2)


class CheckoutRequest(ApiModel):
    items: List[CartItem] = Field(..., min_length=1)


class OrderResponse(ApiModel):
    id: str
    restaurant_id: str
    items: List[dict[str, Any]]
    subtotal: float
    taxes: float
    delivery_fee: float
    total: float
    status: str
    version: int
    order_time: datetime
    last_update_time: datetime
    completion_time: Optional[int] = None
    rejection_reason: Optional[str] = None
    processed_by_user_id: Optional[str] = None


class CheckoutResponse(ApiModel):
    success: bool
    message: str
    order: OrderResponse


class OrderListResponse(ApiModel):
    total: int
    orders: List[OrderResponse]


class TrackerResponse(ApiModel):
    """What the consumer sees while waiting for an order."""
    order_id: str
    status: str
    status_label: str
    status_color: Optional[str] = None
    finished: bool
    orders_ahead: Optional[int] = None
    estimated_minutes: Optional[int] = None
    rejection_reason: Optional[str] = None
    completion_time: Optional[int] = None
    dismiss_after_seconds: Optional[int] = Field(
        None,
        description="Seconds the UI keeps a finished order on screen",
    )


# =============================================================================
# WORKFLOW REQUESTS
# =============================================================================

class TransitionRequest(ApiModel):
    target_status_id: str = Field(..., min_length=1, examples=["accepted"])
    reason: Optional[str] = Field(None, max_length=500)
    reason_id: Optional[str] = None
    force: bool = Field(default=False, description="Confirm a backward move")
    expected_version: Optional[int] = Field(None, ge=1)


class DropRequest(ApiModel):
    column_id: str = Field(..., min_length=1, examples=["col-2"])
    reason: Optional[str] = Field(None, max_length=500)
    reason_id: Optional[str] = None
    force: bool = False
    expected_version: Optional[int] = Field(None, ge=1)


class RejectRequest(ApiModel):
    reason_id: Optional[str] = Field(None, examples=["reason-1"])
    reason: Optional[str] = Field(None, max_length=500)
    expected_version: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def reason_given(self) -> "RejectRequest":
        if not self.reason_id and not (self.reason and self.reason.strip()):
            raise ValueError("Either reasonId or a non-empty reason is required")
        return self


class DecisionResponse(ApiModel):
    kind: str
    order_id: str
    from_status: str
    target_status: Optional[str] = None
    message: str = ""


class TransitionResponse(ApiModel):
    decision: DecisionResponse
    applied: bool
    order: OrderResponse


# =============================================================================
# BOARD
# =============================================================================

class BoardActionResponse(ApiModel):
    target_status_id: str
    label: str
    color: Optional[str] = None
    requires_reason: bool = False


class BoardCardResponse(ApiModel):
    order: OrderResponse
    actions: List[BoardActionResponse]


class BoardColumnResponse(ApiModel):
    id: str
    title: str
    status_ids: List[str]
    icon: Optional[str] = None
    title_color: Optional[str] = None
    column_color: Optional[str] = None
    synthetic: bool = False
    orders: List[BoardCardResponse]


class RejectionReasonResponse(ApiModel):
    id: str
    message: str


class BoardResponse(ApiModel):
    restaurant_id: str
    columns: List[BoardColumnResponse]
    rejection_reasons: List[RejectionReasonResponse]


# =============================================================================
# BOARD TEMPLATES
# =============================================================================

class BoardTemplateCreate(ApiModel):
    vendor_id: str
    name: str = Field(..., min_length=1, max_length=100)
    config: dict[str, Any]


class BoardTemplateUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    config: Optional[dict[str, Any]] = None


class BoardTemplateResponse(ApiModel):
    id: str
    vendor_id: str
    name: str
    config: dict[str, Any]


class ConfigProblemResponse(ApiModel):
    code: str
    message: str
    path: str = ""


class ValidationResponse(ApiModel):
    valid: bool
    errors: List[ConfigProblemResponse]
    warnings: List[ConfigProblemResponse]


# =============================================================================
# CATALOG
# =============================================================================

class UserCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    username: str = Field(..., min_length=1, max_length=100)
    role: UserRole
    vendor_id: Optional[str] = None
    restaurant_id: Optional[str] = None
    linked_restaurant_ids: List[str] = Field(default_factory=list)
    permissions: Optional[dict[str, bool]] = None
    permission_schedule: Optional[dict[str, Any]] = None


class UserUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    username: Optional[str] = Field(None, min_length=1, max_length=100)
    vendor_id: Optional[str] = None
    restaurant_id: Optional[str] = None
    linked_restaurant_ids: Optional[List[str]] = None
    permissions: Optional[dict[str, bool]] = None
    permission_schedule: Optional[dict[str, Any]] = None


class UserResponse(ApiModel):
    id: str
    name: str
    username: str
    role: UserRole
    vendor_id: Optional[str] = None
    restaurant_id: Optional[str] = None
    linked_restaurant_ids: Optional[List[str]] = None
    permissions: Optional[dict[str, bool]] = None
    permission_schedule: Optional[dict[str, Any]] = None


class RestaurantAdminCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    username: str = Field(..., min_length=1, max_length=100)
    vendor_id: Optional[str] = None


class VendorCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=100, examples=["Pizza Palace Inc."])
    admin_username: str = Field(..., min_length=1, max_length=100, examples=["vendor1"])


class VendorUpdate(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)


class VendorResponse(ApiModel):
    id: str
    name: str


class VendorCreateResponse(ApiModel):
    vendor: VendorResponse
    admin: UserResponse


class RestaurantCreate(ApiModel):
    vendor_id: str
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    banner_url: str = ""
    contact: dict[str, Any] = Field(default_factory=dict)
    opening_hours: dict[str, Any] = Field(default_factory=dict)
    payment_methods: List[str] = Field(default_factory=list)
    branding: dict[str, Any] = Field(default_factory=dict)
    media: List[dict[str, Any]] = Field(default_factory=list)
    board_template_id: Optional[str] = None
    assigned_menu_template_ids: List[str] = Field(default_factory=list)


class RestaurantUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    banner_url: Optional[str] = None
    contact: Optional[dict[str, Any]] = None
    opening_hours: Optional[dict[str, Any]] = None
    payment_methods: Optional[List[str]] = None
    branding: Optional[dict[str, Any]] = None
    media: Optional[List[dict[str, Any]]] = None
    board_template_id: Optional[str] = None
    assigned_menu_template_ids: Optional[List[str]] = None


class RestaurantResponse(RestaurantCreate):
    id: str


class MenuSection(ApiModel):
    id: str
    title: str
    item_ids: List[str] = Field(default_factory=list)


class MenuTemplateCreate(ApiModel):
    vendor_id: str
    name: str = Field(..., min_length=1, max_length=100)
    sections: List[MenuSection] = Field(default_factory=list)


class MenuTemplateUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    sections: Optional[List[MenuSection]] = None


class MenuTemplateResponse(MenuTemplateCreate):
    id: str


class MenuItemTemplateCreate(ApiModel):
    vendor_id: str
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    price: float = Field(..., ge=0)
    image_url: str = ""
    allergens: List[dict[str, Any]] = Field(default_factory=list)
    intolerances: List[dict[str, Any]] = Field(default_factory=list)
    discount: Optional[dict[str, Any]] = None
    composition: List[str] = Field(default_factory=list)


class MenuItemTemplateUpdate(ApiModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = None
    allergens: Optional[List[dict[str, Any]]] = None
    intolerances: Optional[List[dict[str, Any]]] = None
    discount: Optional[dict[str, Any]] = None
    composition: Optional[List[str]] = None


class MenuItemTemplateResponse(MenuItemTemplateCreate):
    id: str


# =============================================================================
# SYSTEM
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    detail: Optional[Any] = None


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    database: str
    redis: str
    order_store: str
    timestamp: datetime
