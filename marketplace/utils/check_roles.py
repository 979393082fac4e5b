# marketplace/utils/check_roles.py
from fastapi import Depends, HTTPException
from typing import Callable
from functools import wraps
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from marketplace.core.db import get_db
from marketplace.models.seller_models import Seller, SellerStatus
from marketplace.models.user_models import User
from marketplace.utils.get_user import get_current_user

SELLER_BLOCKED_MESSAGE = "Your seller account is suspended or banned"


def require_role(roles: list[str]):
    """Decorator to validate user role; expects user to be passed by route."""
    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, _user, **kwargs):
            if _user is None:
                raise HTTPException(status_code=401, detail="Authentication required")
            if _user.role.lower() not in [r.lower() for r in roles]:
                raise HTTPException(status_code=403, detail="Insufficient permissions")
            return await func(*args, _user=_user, **kwargs)
        return wrapper
    return decorator


def can_act(seller: Seller) -> bool:
    return seller.status == SellerStatus.active.value


def seller_blocked(status: str | None) -> HTTPException:
    return HTTPException(
        status_code=403,
        detail={"error": SELLER_BLOCKED_MESSAGE, "reason": status},
    )


async def get_current_seller(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Seller:
    """
    Resolve the seller behind the authenticated user and enforce the status gate.
    The row is re-read on every request; admins may change it between calls.
    """
    if _user.role != "seller":
        raise HTTPException(status_code=403, detail="Insufficient permissions")

    result = await db.execute(
        select(Seller)
        .where(Seller.user_id == _user.id)
        .execution_options(populate_existing=True)
    )
    seller = result.scalars().first()
    if not seller:
        raise seller_blocked(None)
    if not can_act(seller):
        raise seller_blocked(seller.status)
    return seller
