# marketplace/services/seller_service.py
import logging
from decimal import Decimal

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from marketplace.models.order_models import Order, OrderStatus
from marketplace.models.product_models import Product
from marketplace.models.seller_models import Seller
from marketplace.schemas.seller_schemas import SellerOut, SellerUpdate
from marketplace.utils.activity_helpers import log_user_activity

logger = logging.getLogger(__name__)


async def get_seller_profile(seller: Seller) -> dict:
    return {"message": "Seller profile fetched successfully", "data": SellerOut.model_validate(seller)}


# ---------------------------
# UPDATE PROFILE
# ---------------------------
async def update_seller_profile(db: AsyncSession, seller: Seller, data: SellerUpdate, current_user) -> dict:
    update_data = data.model_dump(exclude_unset=True)
    if not update_data:
        raise HTTPException(status_code=400, detail="No fields to update")

    try:
        for key, value in update_data.items():
            setattr(seller, key, value)

        await log_user_activity(
            db,
            user_id=current_user.id,
            username=current_user.email,
            message=f"Seller {seller.id} updated store profile: {', '.join(sorted(update_data))}"
        )
        await db.commit()
        await db.refresh(seller)

    except Exception:
        await db.rollback()
        logger.exception("Error updating profile of seller %s", seller.id)
        raise HTTPException(status_code=500, detail="Error updating seller profile")

    return {"message": "Seller profile updated successfully", "data": SellerOut.model_validate(seller)}


# ---------------------------
# STATS
# ---------------------------
async def get_seller_stats(db: AsyncSession, seller: Seller) -> dict:
    product_count = await db.execute(
        select(func.count(Product.id)).where(Product.seller_id == seller.id)
    )
    order_count = await db.execute(
        select(func.count(Order.id)).where(Order.seller_id == seller.id)
    )
    revenue = await db.execute(
        select(func.coalesce(func.sum(Order.total_amount), 0))
        .where(Order.seller_id == seller.id, Order.status != OrderStatus.cancelled.value)
    )

    return {
        "message": "Seller stats fetched successfully",
        "data": {
            "products": product_count.scalar() or 0,
            "orders": order_count.scalar() or 0,
            "revenue": Decimal(str(revenue.scalar() or 0)),
            "commission_owed": seller.commission_owed,
        },
    }
