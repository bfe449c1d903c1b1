"""
FastAPI Application Entry Point

Restaurant Order Board - multi-tenant ordering with a configurable
per-restaurant workflow board.

Endpoints:
    - POST /api/restaurants/{id}/checkout: Place an order (stub payment)
    - GET  /api/orders/{id}/tracker: Consumer order tracker
    - GET  /api/restaurants/{id}/board: Kanban board for staff
    - POST /api/orders/{id}/transition | /drop | /reject: Move orders
    - /api/board-templates: Board configs (validated on save)
    - /api/vendors, /api/users, /api/restaurants, /api/menu-templates,
      /api/menu-item-templates: Catalog CRUD
    - GET /health: System health check
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

import redis
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app import database
from app.core.config import get_settings, setup_logging
from app.database import get_db, init_db
from app.schemas import (
    BoardActionResponse,
    BoardCardResponse,
    BoardColumnResponse,
    BoardResponse,
    BoardTemplateCreate,
    BoardTemplateResponse,
    BoardTemplateUpdate,
    CheckoutRequest,
    CheckoutResponse,
    DecisionResponse,
    DropRequest,
    ErrorResponse,
    HealthResponse,
    MenuItemTemplateCreate,
    MenuItemTemplateResponse,
    MenuItemTemplateUpdate,
    MenuTemplateCreate,
    MenuTemplateResponse,
    MenuTemplateUpdate,
    OrderListResponse,
    OrderResponse,
    RejectionReasonResponse,
    RejectRequest,
    RestaurantAdminCreate,
    RestaurantCreate,
    RestaurantResponse,
    RestaurantUpdate,
    TrackerResponse,
    TransitionRequest,
    TransitionResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
    ValidationResponse,
    VendorCreate,
    VendorCreateResponse,
    VendorResponse,
    VendorUpdate,
)
from app.services.catalog import CatalogRepository, load_restaurant_config
from app.services.errors import (
    ConfigError,
    ConflictError,
    DuplicateError,
    NotFoundError,
    TransitionError,
    UnknownColumnError,
    UnknownStatusError,
)
from app.services.orders import (
    BaseOrderStore,
    OrderDraft,
    OrderRecord,
    OrderWorkflowService,
    estimate,
    get_order_store,
)
from app.services.orders.wait_time import is_active
from app.services.session import Actor, get_staff_actor
from app.services.workflow import (
    DecisionKind,
    TransitionDecision,
    WorkflowConfig,
    build_board,
    is_final,
    validate_workflow_config,
)
from app.tasks import queue_order_export

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()
    logger.info("Database initialized")

    store = get_order_store()
    logger.info(f"Order store: {store.backend_name}")

    problems = get_settings().validate_production_config()
    if problems:
        logger.warning(f"Unsafe configuration: {problems}")

    logger.info("Application ready")

    yield

    logger.info("Shutting down...")
    await database.engine.dispose()
    logger.info("Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Multi-tenant restaurant ordering with a configurable order workflow "
        "board per restaurant."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# DEPENDENCIES & HELPERS
# =============================================================================

def get_catalog(db: AsyncSession = Depends(get_db)) -> CatalogRepository:
    return CatalogRepository(db)


def get_workflow_service(
    store: BaseOrderStore = Depends(get_order_store),
) -> OrderWorkflowService:
    on_finished = queue_order_export if get_settings().export_finished_orders else None
    return OrderWorkflowService(store, load_restaurant_config, on_finished=on_finished)


def calculate_order_totals(items: list) -> dict[str, float]:
    """Calculate order subtotal, taxes, delivery fee and total."""
    current = get_settings()
    subtotal = round(sum(item.line_total for item in items), 2)
    taxes = round(subtotal * current.tax_rate, 2)
    total = round(subtotal + taxes + current.delivery_fee, 2)

    return {
        "subtotal": subtotal,
        "taxes": taxes,
        "delivery_fee": current.delivery_fee,
        "total": total,
    }


def _order(record: OrderRecord) -> OrderResponse:
    return OrderResponse.model_validate(record)


def _decision(decision: TransitionDecision) -> DecisionResponse:
    return DecisionResponse.model_validate(decision.to_dict())


def _error(status_code: int, error: str, detail: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
    )


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    store: BaseOrderStore = Depends(get_order_store),
) -> HealthResponse:
    """Verify database, broker and order store."""

    db_status = "healthy"
    try:
        await db.execute(select(func.now()))
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    redis_status = "healthy"
    try:
        r = redis.Redis.from_url(get_settings().redis_url, socket_timeout=2)
        r.ping()
        r.close()
    except Exception as e:
        redis_status = f"unhealthy: {str(e)}"
        logger.error(f"Redis health check failed: {e}")

    store_status = "healthy" if await store.health_check() else "unhealthy"

    overall = "operational" if all(
        s == "healthy" for s in [db_status, redis_status, store_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        redis=redis_status,
        order_store=f"{store.backend_name}: {store_status}",
        timestamp=datetime.now(timezone.utc),
    )


# =============================================================================
# CHECKOUT & ORDER ENDPOINTS
# =============================================================================

@app.post(
    "/api/restaurants/{restaurant_id}/checkout",
    response_model=CheckoutResponse,
    status_code=201,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Place Order",
)
async def checkout(
    restaurant_id: str,
    body: CheckoutRequest,
    catalog: CatalogRepository = Depends(get_catalog),
    store: BaseOrderStore = Depends(get_order_store),
) -> CheckoutResponse:
    """
    Place an order from the consumer's cart.

    Payment is not processed: checkout always succeeds and the order
    starts in ``pending``.
    """
    await catalog.get_restaurant(restaurant_id)

    totals = calculate_order_totals(body.items)
    draft = OrderDraft(
        restaurant_id=restaurant_id,
        items=[item.model_dump(by_alias=True) for item in body.items],
        **totals,
    )
    record = await store.create(draft)

    return CheckoutResponse(
        success=True,
        message="Order placed successfully!",
        order=_order(record),
    )


@app.get(
    "/api/orders",
    response_model=OrderListResponse,
    tags=["Orders"],
    summary="List Orders",
)
async def list_orders(
    restaurant_id: Optional[str] = Query(None, alias="restaurantId"),
    status: Optional[str] = Query(None),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    store: BaseOrderStore = Depends(get_order_store),
) -> OrderListResponse:
    """Newest first, optionally for one restaurant and/or status."""
    if restaurant_id:
        records = await store.list_by_restaurant(restaurant_id)
    else:
        records = await store.list_all()

    if status:
        records = [r for r in records if r.status == status]

    return OrderListResponse(
        total=len(records),
        orders=[_order(r) for r in records[skip:skip + limit]],
    )


@app.get(
    "/api/orders/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def get_order(
    order_id: str,
    store: BaseOrderStore = Depends(get_order_store),
) -> OrderResponse:
    return _order(await store.get(order_id))


@app.get(
    "/api/orders/{order_id}/tracker",
    response_model=TrackerResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Consumer Order Tracker",
)
async def order_tracker(
    order_id: str,
    store: BaseOrderStore = Depends(get_order_store),
) -> TrackerResponse:
    """
    Status, queue position and wait estimate for one order.

    Finished orders carry ``dismissAfterSeconds``; the client hides them
    after that long.
    """
    order = await store.get(order_id)

    try:
        config = await load_restaurant_config(order.restaurant_id)
    except NotFoundError:
        config = WorkflowConfig()

    status = config.get_status(order.status)
    finished = is_final(config, order.status)

    response = TrackerResponse(
        order_id=order.id,
        status=order.status,
        status_label=status.label if status and status.label else order.status,
        status_color=status.color if status else None,
        finished=finished,
        rejection_reason=order.rejection_reason,
        completion_time=order.completion_time,
    )

    if finished:
        response.dismiss_after_seconds = get_settings().tracker_dismiss_seconds
    elif is_active(order):
        wait = estimate(order, await store.list_by_restaurant(order.restaurant_id))
        response.orders_ahead = wait.orders_ahead
        response.estimated_minutes = wait.estimated_minutes

    return response


# =============================================================================
# BOARD ENDPOINTS
# =============================================================================

@app.get(
    "/api/restaurants/{restaurant_id}/board",
    response_model=BoardResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Board"],
    summary="Order Board",
)
async def get_board(
    restaurant_id: str,
    show_completed: bool = Query(False, alias="showCompleted"),
    show_rejected: bool = Query(False, alias="showRejected"),
    actor: Actor = Depends(get_staff_actor),
    catalog: CatalogRepository = Depends(get_catalog),
    store: BaseOrderStore = Depends(get_order_store),
) -> BoardResponse:
    """Columns with their orders and the actions each order offers."""
    config = await catalog.get_restaurant_config(restaurant_id)
    orders = await store.list_by_restaurant(restaurant_id)

    views = build_board(orders, config, show_completed, show_rejected)

    return BoardResponse(
        restaurant_id=restaurant_id,
        columns=[
            BoardColumnResponse(
                id=view.column.id,
                title=view.column.title,
                status_ids=view.column.status_ids,
                icon=view.column.icon,
                title_color=view.column.title_color,
                column_color=view.column.column_color,
                synthetic=view.synthetic,
                orders=[
                    BoardCardResponse(
                        order=_order(card.order),
                        actions=[BoardActionResponse.model_validate(a) for a in card.actions],
                    )
                    for card in view.cards
                ],
            )
            for view in views
        ],
        rejection_reasons=[
            RejectionReasonResponse(id=r.id, message=r.message)
            for r in config.rejection_reasons
        ],
    )


@app.post(
    "/api/orders/{order_id}/transition",
    response_model=TransitionResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    tags=["Board"],
    summary="Move Order to Status",
)
async def transition_order(
    order_id: str,
    body: TransitionRequest,
    actor: Actor = Depends(get_staff_actor),
    service: OrderWorkflowService = Depends(get_workflow_service),
) -> TransitionResponse:
    """
    Button flow. Backward moves need ``force``; ``rejected`` needs a
    reason. Unsatisfied decisions return 422, stale versions 409.
    """
    decision = await service.request_transition(order_id, body.target_status_id)
    order = await service.apply_transition(
        order_id,
        body.target_status_id,
        force=body.force,
        reason=body.reason,
        reason_id=body.reason_id,
        actor_id=actor.id,
        expected_version=body.expected_version,
    )
    return TransitionResponse(decision=_decision(decision), applied=True, order=_order(order))


@app.post(
    "/api/orders/{order_id}/drop",
    response_model=TransitionResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    tags=["Board"],
    summary="Drop Order on Column",
)
async def drop_order(
    order_id: str,
    body: DropRequest,
    actor: Actor = Depends(get_staff_actor),
    service: OrderWorkflowService = Depends(get_workflow_service),
) -> TransitionResponse:
    """
    Drag-and-drop flow.

    The move is applied when the decision is satisfied (allowed, confirmed
    with ``force``, or a rejection with a reason). Otherwise the decision is
    returned with ``applied: false`` so the board can ask the user.
    """
    decision = await service.request_drop(order_id, body.column_id)

    satisfied = (
        decision.kind == DecisionKind.ALLOWED
        or (decision.kind == DecisionKind.REQUIRES_CONFIRMATION and body.force)
        or (decision.kind == DecisionKind.REQUIRES_REASON and bool(body.reason_id or body.reason))
    )
    if not satisfied:
        order = await service.store.get(order_id)
        return TransitionResponse(decision=_decision(decision), applied=False, order=_order(order))

    order = await service.apply_drop(
        order_id,
        body.column_id,
        force=body.force,
        reason=body.reason,
        reason_id=body.reason_id,
        actor_id=actor.id,
        expected_version=body.expected_version,
    )
    return TransitionResponse(decision=_decision(decision), applied=True, order=_order(order))


@app.post(
    "/api/orders/{order_id}/reject",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    tags=["Board"],
    summary="Reject Order",
)
async def reject_order(
    order_id: str,
    body: RejectRequest,
    actor: Actor = Depends(get_staff_actor),
    service: OrderWorkflowService = Depends(get_workflow_service),
) -> OrderResponse:
    """Reject with a catalog reason id or free text."""
    order = await service.confirm_rejection(
        order_id,
        reason=body.reason,
        reason_id=body.reason_id,
        actor_id=actor.id,
        expected_version=body.expected_version,
    )
    return _order(order)


# =============================================================================
# BOARD TEMPLATE ENDPOINTS
# =============================================================================

@app.get("/api/board-templates", response_model=list[BoardTemplateResponse], tags=["Board Templates"])
async def list_board_templates(
    vendor_id: Optional[str] = Query(None, alias="vendorId"),
    catalog: CatalogRepository = Depends(get_catalog),
) -> list[BoardTemplateResponse]:
    templates = await catalog.list_board_templates(vendor_id)
    return [BoardTemplateResponse.model_validate(t) for t in templates]


@app.post(
    "/api/board-templates/validate",
    response_model=ValidationResponse,
    tags=["Board Templates"],
    summary="Validate Board Config",
)
async def validate_board_config(config: WorkflowConfig) -> ValidationResponse:
    """Errors and warnings for a config, without saving anything."""
    return ValidationResponse.model_validate(validate_workflow_config(config).to_dict())


@app.get("/api/board-templates/{template_id}", response_model=BoardTemplateResponse, tags=["Board Templates"])
async def get_board_template(
    template_id: str,
    catalog: CatalogRepository = Depends(get_catalog),
) -> BoardTemplateResponse:
    return BoardTemplateResponse.model_validate(await catalog.get_board_template(template_id))


@app.post(
    "/api/board-templates",
    response_model=BoardTemplateResponse,
    status_code=201,
    responses={422: {"model": ErrorResponse}},
    tags=["Board Templates"],
)
async def create_board_template(
    body: BoardTemplateCreate,
    catalog: CatalogRepository = Depends(get_catalog),
) -> BoardTemplateResponse:
    template = await catalog.create_board_template(body.model_dump())
    return BoardTemplateResponse.model_validate(template)


@app.put(
    "/api/board-templates/{template_id}",
    response_model=BoardTemplateResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    tags=["Board Templates"],
)
async def update_board_template(
    template_id: str,
    body: BoardTemplateUpdate,
    catalog: CatalogRepository = Depends(get_catalog),
) -> BoardTemplateResponse:
    template = await catalog.update_board_template(template_id, body.model_dump(exclude_unset=True))
    return BoardTemplateResponse.model_validate(template)


@app.delete("/api/board-templates/{template_id}", status_code=204, tags=["Board Templates"])
async def delete_board_template(
    template_id: str,
    catalog: CatalogRepository = Depends(get_catalog),
) -> None:
    await catalog.delete_board_template(template_id)


# =============================================================================
# CATALOG ENDPOINTS
# =============================================================================

@app.get("/api/vendors", response_model=list[VendorResponse], tags=["Catalog"])
async def list_vendors(catalog: CatalogRepository = Depends(get_catalog)) -> list[VendorResponse]:
    return [VendorResponse.model_validate(v) for v in await catalog.list_vendors()]


@app.post("/api/vendors", response_model=VendorCreateResponse, status_code=201, tags=["Catalog"])
async def create_vendor(
    body: VendorCreate,
    catalog: CatalogRepository = Depends(get_catalog),
) -> VendorCreateResponse:
    """Create a vendor and its admin account."""
    vendor, admin = await catalog.create_vendor(body.name, body.admin_username)
    return VendorCreateResponse(
        vendor=VendorResponse.model_validate(vendor),
        admin=UserResponse.model_validate(admin),
    )


@app.put("/api/vendors/{vendor_id}", response_model=VendorResponse, tags=["Catalog"])
async def update_vendor(
    vendor_id: str,
    body: VendorUpdate,
    catalog: CatalogRepository = Depends(get_catalog),
) -> VendorResponse:
    return VendorResponse.model_validate(await catalog.update_vendor(vendor_id, body.model_dump()))


@app.delete("/api/vendors/{vendor_id}", status_code=204, tags=["Catalog"])
async def delete_vendor(vendor_id: str, catalog: CatalogRepository = Depends(get_catalog)) -> None:
    """Deletes the vendor's restaurants, users and templates as well."""
    await catalog.delete_vendor(vendor_id)


@app.get("/api/users", response_model=list[UserResponse], tags=["Catalog"])
async def list_users(
    vendor_id: Optional[str] = Query(None, alias="vendorId"),
    catalog: CatalogRepository = Depends(get_catalog),
) -> list[UserResponse]:
    return [UserResponse.model_validate(u) for u in await catalog.list_users(vendor_id)]


@app.post("/api/users", response_model=UserResponse, status_code=201, tags=["Catalog"])
async def create_user(body: UserCreate, catalog: CatalogRepository = Depends(get_catalog)) -> UserResponse:
    return UserResponse.model_validate(await catalog.create_user(body.model_dump()))


@app.put("/api/users/{user_id}", response_model=UserResponse, tags=["Catalog"])
async def update_user(
    user_id: str,
    body: UserUpdate,
    catalog: CatalogRepository = Depends(get_catalog),
) -> UserResponse:
    user = await catalog.update_user(user_id, body.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)


@app.delete("/api/users/{user_id}", status_code=204, tags=["Catalog"])
async def delete_user(user_id: str, catalog: CatalogRepository = Depends(get_catalog)) -> None:
    await catalog.delete_user(user_id)


@app.get("/api/restaurants", response_model=list[RestaurantResponse], tags=["Catalog"])
async def list_restaurants(
    vendor_id: Optional[str] = Query(None, alias="vendorId"),
    catalog: CatalogRepository = Depends(get_catalog),
) -> list[RestaurantResponse]:
    return [RestaurantResponse.model_validate(r) for r in await catalog.list_restaurants(vendor_id)]


@app.get("/api/restaurants/{restaurant_id}", response_model=RestaurantResponse, tags=["Catalog"])
async def get_restaurant(
    restaurant_id: str,
    catalog: CatalogRepository = Depends(get_catalog),
) -> RestaurantResponse:
    return RestaurantResponse.model_validate(await catalog.get_restaurant(restaurant_id))


@app.post("/api/restaurants", response_model=RestaurantResponse, status_code=201, tags=["Catalog"])
async def create_restaurant(
    body: RestaurantCreate,
    catalog: CatalogRepository = Depends(get_catalog),
) -> RestaurantResponse:
    return RestaurantResponse.model_validate(await catalog.create_restaurant(body.model_dump()))


@app.put("/api/restaurants/{restaurant_id}", response_model=RestaurantResponse, tags=["Catalog"])
async def update_restaurant(
    restaurant_id: str,
    body: RestaurantUpdate,
    catalog: CatalogRepository = Depends(get_catalog),
) -> RestaurantResponse:
    restaurant = await catalog.update_restaurant(restaurant_id, body.model_dump(exclude_unset=True))
    return RestaurantResponse.model_validate(restaurant)


@app.delete("/api/restaurants/{restaurant_id}", status_code=204, tags=["Catalog"])
async def delete_restaurant(restaurant_id: str, catalog: CatalogRepository = Depends(get_catalog)) -> None:
    """Orders of the restaurant are kept as history."""
    await catalog.delete_restaurant(restaurant_id)


@app.post(
    "/api/restaurants/{restaurant_id}/admins",
    response_model=UserResponse,
    status_code=201,
    tags=["Catalog"],
)
async def create_restaurant_admin(
    restaurant_id: str,
    body: RestaurantAdminCreate,
    catalog: CatalogRepository = Depends(get_catalog),
) -> UserResponse:
    user = await catalog.create_restaurant_admin(body.name, body.username, restaurant_id, body.vendor_id)
    return UserResponse.model_validate(user)


def _menu_data(body: Any, exclude_unset: bool = False) -> dict[str, Any]:
    # Sections are stored with the same camelCase keys the board configs use
    data = body.model_dump(exclude_unset=exclude_unset)
    if body.sections is not None and "sections" in data:
        data["sections"] = [s.model_dump(by_alias=True) for s in body.sections]
    return data


@app.get("/api/menu-templates", response_model=list[MenuTemplateResponse], tags=["Catalog"])
async def list_menu_templates(
    vendor_id: Optional[str] = Query(None, alias="vendorId"),
    catalog: CatalogRepository = Depends(get_catalog),
) -> list[MenuTemplateResponse]:
    return [MenuTemplateResponse.model_validate(m) for m in await catalog.list_menu_templates(vendor_id)]


@app.post("/api/menu-templates", response_model=MenuTemplateResponse, status_code=201, tags=["Catalog"])
async def create_menu_template(
    body: MenuTemplateCreate,
    catalog: CatalogRepository = Depends(get_catalog),
) -> MenuTemplateResponse:
    return MenuTemplateResponse.model_validate(await catalog.create_menu_template(_menu_data(body)))


@app.put("/api/menu-templates/{template_id}", response_model=MenuTemplateResponse, tags=["Catalog"])
async def update_menu_template(
    template_id: str,
    body: MenuTemplateUpdate,
    catalog: CatalogRepository = Depends(get_catalog),
) -> MenuTemplateResponse:
    template = await catalog.update_menu_template(template_id, _menu_data(body, exclude_unset=True))
    return MenuTemplateResponse.model_validate(template)


@app.delete("/api/menu-templates/{template_id}", status_code=204, tags=["Catalog"])
async def delete_menu_template(template_id: str, catalog: CatalogRepository = Depends(get_catalog)) -> None:
    await catalog.delete_menu_template(template_id)


@app.get("/api/menu-item-templates", response_model=list[MenuItemTemplateResponse], tags=["Catalog"])
async def list_menu_item_templates(
    vendor_id: Optional[str] = Query(None, alias="vendorId"),
    catalog: CatalogRepository = Depends(get_catalog),
) -> list[MenuItemTemplateResponse]:
    items = await catalog.list_menu_item_templates(vendor_id)
    return [MenuItemTemplateResponse.model_validate(i) for i in items]


@app.post(
    "/api/menu-item-templates",
    response_model=MenuItemTemplateResponse,
    status_code=201,
    tags=["Catalog"],
)
async def create_menu_item_template(
    body: MenuItemTemplateCreate,
    catalog: CatalogRepository = Depends(get_catalog),
) -> MenuItemTemplateResponse:
    item = await catalog.create_menu_item_template(body.model_dump())
    return MenuItemTemplateResponse.model_validate(item)


@app.put("/api/menu-item-templates/{item_id}", response_model=MenuItemTemplateResponse, tags=["Catalog"])
async def update_menu_item_template(
    item_id: str,
    body: MenuItemTemplateUpdate,
    catalog: CatalogRepository = Depends(get_catalog),
) -> MenuItemTemplateResponse:
    item = await catalog.update_menu_item_template(item_id, body.model_dump(exclude_unset=True))
    return MenuItemTemplateResponse.model_validate(item)


@app.delete("/api/menu-item-templates/{item_id}", status_code=204, tags=["Catalog"])
async def delete_menu_item_template(item_id: str, catalog: CatalogRepository = Depends(get_catalog)) -> None:
    """Also removes the item from every menu section."""
    await catalog.delete_menu_item_template(item_id)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(ConfigError)
async def config_error_handler(request: Request, exc: ConfigError) -> JSONResponse:
    return _error(422, "Invalid board config", [p.to_dict() for p in exc.problems])


@app.exception_handler(TransitionError)
async def transition_error_handler(request: Request, exc: TransitionError) -> JSONResponse:
    return _error(422, type(exc).__name__, {
        "message": str(exc),
        "orderId": exc.order_id,
        "fromStatus": exc.from_status,
        "targetStatus": exc.target_status,
    })


@app.exception_handler(UnknownStatusError)
@app.exception_handler(UnknownColumnError)
async def unknown_id_handler(request: Request, exc: Exception) -> JSONResponse:
    return _error(422, type(exc).__name__, str(exc))


@app.exception_handler(ConflictError)
async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
    return _error(409, "Conflict", {
        "message": str(exc),
        "orderId": exc.order_id,
        "expectedVersion": exc.expected_version,
        "actualVersion": exc.actual_version,
    })


@app.exception_handler(DuplicateError)
async def duplicate_handler(request: Request, exc: DuplicateError) -> JSONResponse:
    return _error(409, "Duplicate", str(exc))


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, "Not Found", str(exc))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error(exc.status_code, "HTTP Error", exc.detail)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return _error(
        500,
        "Internal Server Error",
        str(exc) if settings.debug else "An unexpected error occurred",
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
