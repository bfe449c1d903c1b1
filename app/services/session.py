"""
Session / Identity

Resolves the ``X-User-Id`` request header to the acting user. There is no
login flow: whoever fronts this API decides who the user is, and the
workflow engine only records the id as ``processed_by_user_id``.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models import User, UserRole
from app.services.errors import NotFoundError

logger = logging.getLogger(__name__)

STAFF_ROLES = frozenset({UserRole.VENDOR, UserRole.SUPER_ADMIN, UserRole.RESTAURANT_ADMIN})


@dataclass(frozen=True)
class Actor:
    id: str
    role: UserRole
    vendor_id: Optional[str] = None
    restaurant_id: Optional[str] = None

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(
            id=user.id,
            role=user.role,
            vendor_id=user.vendor_id,
            restaurant_id=user.restaurant_id,
        )


async def get_actor(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    """
    Dependency: the current user.

    Raises:
        HTTPException: 401 without a header or for an unknown user id
    """
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header is required")

    user = await db.get(User, x_user_id)
    if user is None:
        logger.warning(f"Rejected request for unknown user id {x_user_id}")
        raise HTTPException(status_code=401, detail=str(NotFoundError("User", x_user_id)))

    return Actor.from_user(user)


async def get_staff_actor(actor: Actor = Depends(get_actor)) -> Actor:
    """Dependency: the current user, who must be allowed to work the board."""
    if not actor.is_staff:
        raise HTTPException(status_code=403, detail="Only restaurant staff can change orders")
    return actor
