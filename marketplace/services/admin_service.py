# marketplace/services/admin_service.py
import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from fastapi import HTTPException
from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from marketplace.models.order_models import Order, OrderStatus
from marketplace.models.product_models import Product
from marketplace.models.seller_models import Seller, SellerStatus
from marketplace.models.user_models import User
from marketplace.schemas.seller_schemas import SellerOut
from marketplace.services.pricing import to_money
from marketplace.utils.activity_helpers import log_user_activity

logger = logging.getLogger(__name__)

COMMISSION_OVERDUE_DAYS = 30


async def _get_seller(db: AsyncSession, seller_id: int) -> Seller:
    result = await db.execute(
        select(Seller).where(Seller.id == seller_id).execution_options(populate_existing=True)
    )
    seller = result.scalars().first()
    if not seller:
        raise HTTPException(status_code=404, detail="Seller not found")
    return seller


def _as_aware(value: datetime) -> datetime:
    # SQLite hands back naive UTC timestamps
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


# ---------------------------
# PLATFORM STATS
# ---------------------------
async def get_platform_stats(db: AsyncSession) -> dict:
    revenue = await db.execute(
        select(func.coalesce(func.sum(Order.total_amount), 0))
        .where(Order.status != OrderStatus.cancelled.value)
    )
    active_sellers = await db.execute(
        select(func.count(Seller.id)).where(Seller.status == SellerStatus.active.value)
    )
    suspended_sellers = await db.execute(
        select(func.count(Seller.id)).where(Seller.status == SellerStatus.suspended.value)
    )
    products = await db.execute(select(func.count(Product.id)).where(Product.is_active == True))
    customers = await db.execute(select(func.count(User.id)).where(User.role == "customer"))

    return {
        "message": "Platform stats fetched successfully",
        "data": {
            "total_revenue": Decimal(str(revenue.scalar() or 0)),
            "active_sellers": active_sellers.scalar() or 0,
            "total_products": products.scalar() or 0,
            "total_customers": customers.scalar() or 0,
            "suspended_sellers": suspended_sellers.scalar() or 0,
        },
    }


# ---------------------------
# LIST SELLERS
# ---------------------------
async def list_sellers(db: AsyncSession, status: str | None = None) -> dict:
    stmt = select(Seller)
    if status:
        stmt = stmt.where(Seller.status == status)
    result = await db.execute(stmt.order_by(Seller.created_at.desc(), Seller.id.desc()))
    sellers = result.scalars().all()
    return {"message": f"{len(sellers)} sellers fetched successfully", "data": [SellerOut.model_validate(s) for s in sellers]}


# ---------------------------
# UPDATE SELLER STATUS
# ---------------------------
async def update_seller_status(db: AsyncSession, seller_id: int, status: SellerStatus, current_user) -> dict:
    try:
        seller = await _get_seller(db, seller_id)
        old_status = seller.status
        seller.status = status.value

        await log_user_activity(
            db,
            user_id=current_user.id,
            username=current_user.email,
            message=f"Admin changed seller {seller.id} status: {old_status} → {status.value}"
        )
        await db.commit()
        await db.refresh(seller)

    except HTTPException:
        await db.rollback()
        raise
    except Exception:
        await db.rollback()
        logger.exception("Error updating status of seller %s", seller_id)
        raise HTTPException(status_code=500, detail="Error updating seller status")

    logger.info("Seller %s status changed %s -> %s", seller_id, old_status, status.value)
    return {"message": "Seller status updated successfully", "data": SellerOut.model_validate(seller)}


# ---------------------------
# SUSPEND FOR UNPAID COMMISSION
# ---------------------------
async def suspend_unpaid(db: AsyncSession, seller_id: int, current_user) -> dict:
    """
    Suspend the seller when commission is owed and nothing has been paid for
    more than COMMISSION_OVERDUE_DAYS (counted from sign-up if never paid).
    """
    try:
        seller = await _get_seller(db, seller_id)

        last_payment = _as_aware(seller.last_payment_date or seller.created_at)
        overdue = datetime.now(timezone.utc) - last_payment > timedelta(days=COMMISSION_OVERDUE_DAYS)

        if not (seller.commission_owed > 0 and overdue):
            return {
                "message": "Seller is not overdue",
                "data": SellerOut.model_validate(seller),
                "suspended": False,
                "reason": None,
            }

        seller.status = SellerStatus.suspended.value
        await log_user_activity(
            db,
            user_id=current_user.id,
            username=current_user.email,
            message=f"Admin suspended seller {seller.id} for unpaid commission ({seller.commission_owed})"
        )
        await db.commit()
        await db.refresh(seller)

    except HTTPException:
        await db.rollback()
        raise
    except Exception:
        await db.rollback()
        logger.exception("Error checking unpaid commission for seller %s", seller_id)
        raise HTTPException(status_code=500, detail="Error suspending seller")

    return {
        "message": "Seller suspended",
        "data": SellerOut.model_validate(seller),
        "suspended": True,
        "reason": "Unpaid commission",
    }


# ---------------------------
# RECORD COMMISSION PAYMENT
# ---------------------------
async def record_commission_payment(db: AsyncSession, seller_id: int, amount: Decimal, current_user, note: str | None = None) -> dict:
    amount = to_money(amount)
    try:
        seller = await _get_seller(db, seller_id)
        if amount > seller.commission_owed:
            raise HTTPException(
                status_code=400,
                detail=f"Payment exceeds commission owed ({to_money(seller.commission_owed)})",
            )

        paid = await db.execute(
            update(Seller)
            .where(Seller.id == seller.id, Seller.commission_owed >= amount)
            .values(
                commission_owed=Seller.commission_owed - amount,
                last_payment_date=datetime.now(timezone.utc),
                updated_at=func.now(),
            )
            .execution_options(synchronize_session=False)
        )
        if paid.rowcount != 1:
            raise HTTPException(status_code=409, detail="Commission balance changed, retry the payment")

        await log_user_activity(
            db,
            user_id=current_user.id,
            username=current_user.email,
            message=f"Admin recorded commission payment of {amount} from seller {seller.id}"
                    + (f": {note}" if note else "")
        )
        await db.commit()

    except HTTPException:
        await db.rollback()
        raise
    except Exception:
        await db.rollback()
        logger.exception("Error recording payment for seller %s", seller_id)
        raise HTTPException(status_code=500, detail="Error recording commission payment")

    seller = await _get_seller(db, seller_id)
    return {"message": "Commission payment recorded", "data": SellerOut.model_validate(seller)}
