"""
Catalog Repository

List / get / create / update / delete for the tenant entities (vendors,
users, restaurants, board templates, menu templates, menu item templates),
with the referential clean-up each delete implies:

    delete vendor             → its restaurants, users and templates go too
    delete restaurant         → unlinked from users' linked_restaurant_ids
                                (its orders are history and stay)
    delete board template     → restaurants using it lose their board
    delete menu template      → removed from restaurants' assignments
    delete menu item template → removed from every menu section

Board templates are validated before every save; a config with errors
never reaches the database.
"""

import logging
import uuid
from typing import Any, Optional, Type, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import Base, get_session_maker
from app.models import (
    BoardTemplate,
    MenuItemTemplate,
    MenuTemplate,
    Restaurant,
    User,
    UserRole,
    Vendor,
)
from app.services.errors import ConfigError, DuplicateError, NotFoundError
from app.services.workflow.validation import parse_workflow_config
from app.services.workflow.workflow_schemas import WorkflowConfig

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)

DEFAULT_RESTAURANT_PERMISSIONS = {
    "canViewAnalytics": True,
    "canManageMenu": True,
    "canManageSettings": True,
    "canManageOrders": True,
}

ID_PREFIXES = {
    Vendor: "v",
    User: "u",
    Restaurant: "r",
    BoardTemplate: "bt",
    MenuTemplate: "mt",
    MenuItemTemplate: "mit",
}

ENTITY_NAMES = {
    Vendor: "Vendor",
    User: "User",
    Restaurant: "Restaurant",
    BoardTemplate: "Board template",
    MenuTemplate: "Menu template",
    MenuItemTemplate: "Menu item template",
}


def new_id(model: Type[Base]) -> str:
    return f"{ID_PREFIXES[model]}-{uuid.uuid4().hex[:10]}"


class CatalogRepository:
    """
    Entity store for one database session.

    The repository commits after every mutation; cascades run in the same
    transaction as the delete that triggers them.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # =========================================================================
    # GENERIC HELPERS
    # =========================================================================

    async def _get(self, model: Type[ModelT], entity_id: str) -> ModelT:
        entity = await self.session.get(model, entity_id)
        if entity is None:
            raise NotFoundError(ENTITY_NAMES[model], entity_id)
        return entity

    async def _list(self, model: Type[ModelT], vendor_id: Optional[str] = None) -> list[ModelT]:
        query = select(model).order_by(model.id)
        if vendor_id is not None:
            query = query.where(model.vendor_id == vendor_id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def _create(self, model: Type[ModelT], data: dict[str, Any]) -> ModelT:
        entity = model(id=data.pop("id", None) or new_id(model), **data)
        self.session.add(entity)
        await self.session.commit()
        logger.info(f"{ENTITY_NAMES[model]} {entity.id} created")
        return entity

    async def _update(self, model: Type[ModelT], entity_id: str, data: dict[str, Any]) -> ModelT:
        entity = await self._get(model, entity_id)
        for key, value in data.items():
            setattr(entity, key, value)
        await self.session.commit()
        logger.info(f"{ENTITY_NAMES[model]} {entity_id} updated")
        return entity

    async def _ensure_username_free(self, username: str, user_id: Optional[str] = None) -> None:
        result = await self.session.execute(select(User).where(User.username == username))
        existing = result.scalar_one_or_none()
        if existing is not None and existing.id != user_id:
            raise DuplicateError("User", "username", username)

    # =========================================================================
    # VENDORS
    # =========================================================================

    async def list_vendors(self) -> list[Vendor]:
        return await self._list(Vendor)

    async def get_vendor(self, vendor_id: str) -> Vendor:
        return await self._get(Vendor, vendor_id)

    async def create_vendor(self, name: str, admin_username: str) -> tuple[Vendor, User]:
        """Create a vendor together with its admin user."""
        await self._ensure_username_free(admin_username)

        vendor = Vendor(id=new_id(Vendor), name=name)
        admin = User(
            id=new_id(User),
            name=f"{name} Admin",
            username=admin_username,
            role=UserRole.VENDOR,
            vendor_id=vendor.id,
            linked_restaurant_ids=[],
        )
        self.session.add_all([vendor, admin])
        await self.session.commit()

        logger.info(f"Vendor {vendor.id} created with admin {admin.username}")
        return vendor, admin

    async def update_vendor(self, vendor_id: str, data: dict[str, Any]) -> Vendor:
        return await self._update(Vendor, vendor_id, data)

    async def delete_vendor(self, vendor_id: str) -> None:
        vendor = await self._get(Vendor, vendor_id)

        for model in (Restaurant, User, BoardTemplate, MenuTemplate, MenuItemTemplate):
            await self.session.execute(delete(model).where(model.vendor_id == vendor_id))
        await self.session.delete(vendor)
        await self.session.commit()

        logger.info(f"Vendor {vendor_id} deleted with its restaurants, users and templates")

    # =========================================================================
    # USERS
    # =========================================================================

    async def list_users(self, vendor_id: Optional[str] = None) -> list[User]:
        return await self._list(User, vendor_id)

    async def get_user(self, user_id: str) -> User:
        return await self._get(User, user_id)

    async def create_user(self, data: dict[str, Any]) -> User:
        await self._ensure_username_free(data["username"])
        data.setdefault("linked_restaurant_ids", [])
        return await self._create(User, data)

    async def create_restaurant_admin(
        self,
        name: str,
        username: str,
        restaurant_id: str,
        vendor_id: Optional[str] = None,
    ) -> User:
        """Create a restaurant admin with every restaurant permission granted."""
        await self._get(Restaurant, restaurant_id)
        return await self.create_user({
            "name": name,
            "username": username,
            "role": UserRole.RESTAURANT_ADMIN,
            "vendor_id": vendor_id,
            "restaurant_id": restaurant_id,
            "permissions": dict(DEFAULT_RESTAURANT_PERMISSIONS),
        })

    async def update_user(self, user_id: str, data: dict[str, Any]) -> User:
        if "username" in data:
            await self._ensure_username_free(data["username"], user_id)
        return await self._update(User, user_id, data)

    async def delete_user(self, user_id: str) -> None:
        user = await self._get(User, user_id)
        await self.session.delete(user)
        await self.session.commit()
        logger.info(f"User {user_id} deleted")

    # =========================================================================
    # RESTAURANTS
    # =========================================================================

    async def list_restaurants(self, vendor_id: Optional[str] = None) -> list[Restaurant]:
        return await self._list(Restaurant, vendor_id)

    async def get_restaurant(self, restaurant_id: str) -> Restaurant:
        return await self._get(Restaurant, restaurant_id)

    async def create_restaurant(self, data: dict[str, Any]) -> Restaurant:
        await self._get(Vendor, data["vendor_id"])
        return await self._create(Restaurant, data)

    async def update_restaurant(self, restaurant_id: str, data: dict[str, Any]) -> Restaurant:
        if data.get("board_template_id"):
            await self._get(BoardTemplate, data["board_template_id"])
        return await self._update(Restaurant, restaurant_id, data)

    async def delete_restaurant(self, restaurant_id: str) -> None:
        restaurant = await self._get(Restaurant, restaurant_id)

        for user in await self._list(User):
            linked = user.linked_restaurant_ids or []
            if restaurant_id in linked:
                user.linked_restaurant_ids = [rid for rid in linked if rid != restaurant_id]

        await self.session.delete(restaurant)
        await self.session.commit()
        logger.info(f"Restaurant {restaurant_id} deleted")

    async def get_restaurant_config(self, restaurant_id: str) -> WorkflowConfig:
        """
        The board config a restaurant's orders move through.

        Raises:
            NotFoundError: Unknown restaurant, or no board template assigned
        """
        restaurant = await self._get(Restaurant, restaurant_id)
        if not restaurant.board_template_id:
            raise NotFoundError("Board template for restaurant", restaurant_id)

        template = await self._get(BoardTemplate, restaurant.board_template_id)
        return WorkflowConfig.model_validate(template.config)

    # =========================================================================
    # BOARD TEMPLATES
    # =========================================================================

    async def list_board_templates(self, vendor_id: Optional[str] = None) -> list[BoardTemplate]:
        return await self._list(BoardTemplate, vendor_id)

    async def get_board_template(self, template_id: str) -> BoardTemplate:
        return await self._get(BoardTemplate, template_id)

    @staticmethod
    def _checked_config(config: Any) -> dict:
        try:
            return parse_workflow_config(config).to_document()
        except ConfigError as e:
            logger.warning(f"Board config rejected with {len(e.problems)} problem(s)")
            raise

    async def create_board_template(self, data: dict[str, Any]) -> BoardTemplate:
        data["config"] = self._checked_config(data["config"])
        return await self._create(BoardTemplate, data)

    async def update_board_template(self, template_id: str, data: dict[str, Any]) -> BoardTemplate:
        if "config" in data:
            data["config"] = self._checked_config(data["config"])
        return await self._update(BoardTemplate, template_id, data)

    async def delete_board_template(self, template_id: str) -> None:
        template = await self._get(BoardTemplate, template_id)

        result = await self.session.execute(
            select(Restaurant).where(Restaurant.board_template_id == template_id)
        )
        for restaurant in result.scalars().all():
            restaurant.board_template_id = None

        await self.session.delete(template)
        await self.session.commit()
        logger.info(f"Board template {template_id} deleted")

    # =========================================================================
    # MENU TEMPLATES
    # =========================================================================

    async def list_menu_templates(self, vendor_id: Optional[str] = None) -> list[MenuTemplate]:
        return await self._list(MenuTemplate, vendor_id)

    async def get_menu_template(self, template_id: str) -> MenuTemplate:
        return await self._get(MenuTemplate, template_id)

    async def create_menu_template(self, data: dict[str, Any]) -> MenuTemplate:
        return await self._create(MenuTemplate, data)

    async def update_menu_template(self, template_id: str, data: dict[str, Any]) -> MenuTemplate:
        return await self._update(MenuTemplate, template_id, data)

    async def delete_menu_template(self, template_id: str) -> None:
        template = await self._get(MenuTemplate, template_id)

        for restaurant in await self._list(Restaurant):
            assigned = restaurant.assigned_menu_template_ids or []
            if template_id in assigned:
                restaurant.assigned_menu_template_ids = [t for t in assigned if t != template_id]

        await self.session.delete(template)
        await self.session.commit()
        logger.info(f"Menu template {template_id} deleted")

    # =========================================================================
    # MENU ITEM TEMPLATES
    # =========================================================================

    async def list_menu_item_templates(self, vendor_id: Optional[str] = None) -> list[MenuItemTemplate]:
        return await self._list(MenuItemTemplate, vendor_id)

    async def get_menu_item_template(self, item_id: str) -> MenuItemTemplate:
        return await self._get(MenuItemTemplate, item_id)

    async def create_menu_item_template(self, data: dict[str, Any]) -> MenuItemTemplate:
        return await self._create(MenuItemTemplate, data)

    async def update_menu_item_template(self, item_id: str, data: dict[str, Any]) -> MenuItemTemplate:
        return await self._update(MenuItemTemplate, item_id, data)

    async def delete_menu_item_template(self, item_id: str) -> None:
        item = await self._get(MenuItemTemplate, item_id)

        for menu in await self._list(MenuTemplate):
            sections = menu.sections or []
            if any(item_id in section.get("itemIds", []) for section in sections):
                menu.sections = [
                    {**section, "itemIds": [i for i in section.get("itemIds", []) if i != item_id]}
                    for section in sections
                ]

        await self.session.delete(item)
        await self.session.commit()
        logger.info(f"Menu item template {item_id} deleted")


async def load_restaurant_config(restaurant_id: str) -> WorkflowConfig:
    """Config loader for the order workflow service (own session per call)."""
    async with get_session_maker()() as session:
        return await CatalogRepository(session).get_restaurant_config(restaurant_id)
