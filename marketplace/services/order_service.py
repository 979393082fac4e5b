# marketplace/services/order_service.py
import logging
from decimal import Decimal
from typing import Optional, Tuple

from fastapi import HTTPException
from sqlalchemy import update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from marketplace.models.bargain_models import BargainOffer, OfferStatus
from marketplace.models.order_models import Order, OrderStatus
from marketplace.models.product_models import Product
from marketplace.models.seller_models import Seller, SellerStatus
from marketplace.schemas.order_schemas import OrderCreate, OrderOut
from marketplace.services.pricing import (
    can_transition_order,
    compute_commission,
    order_total,
    to_money,
)
from marketplace.services.settings_service import get_commission_rate
from marketplace.utils.activity_helpers import log_user_activity

logger = logging.getLogger(__name__)


async def _get_by_idempotency_key(db: AsyncSession, customer_id: int, key: str) -> Optional[Order]:
    result = await db.execute(
        select(Order).where(Order.customer_id == customer_id, Order.idempotency_key == key)
    )
    return result.scalars().first()


async def _price_items(db: AsyncSession, data: OrderCreate, customer_id: int):
    """
    Validate every line and return (lines, seller_ids). Reads only.
    """
    lines = []
    seller_ids = set()

    for item in data.items:
        result = await db.execute(
            select(Product)
            .join(Seller, Product.seller_id == Seller.id)
            .where(
                Product.id == item.product_id,
                Product.is_active == True,
                Seller.status == SellerStatus.active.value,
            )
        )
        product = result.scalars().first()
        if not product:
            raise HTTPException(status_code=404, detail=f"Product {item.product_id} not found")

        if product.stock < item.quantity:
            raise HTTPException(status_code=400, detail=f"Insufficient stock for product {product.name}")

        unit_price = item.price
        if item.bargain_offer_id is not None:
            offer = await db.get(BargainOffer, item.bargain_offer_id)
            if (
                not offer
                or offer.status != OfferStatus.accepted.value
                or offer.customer_id != customer_id
                or offer.product_id != product.id
            ):
                raise HTTPException(status_code=400, detail="Invalid bargain offer")
            unit_price = offer.agreed_price

        lines.append((product, item, Decimal(unit_price)))
        seller_ids.add(product.seller_id)

    return lines, seller_ids


# =====================================================
# 🔹 CREATE ORDER
# =====================================================
async def create_order(
    db: AsyncSession,
    data: OrderCreate,
    current_user,
    idempotency_key: Optional[str] = None,
) -> Tuple[dict, bool]:
    """
    Place a single-seller order. Returns (response, created).

    Stock decrements, the order row and the seller's commission are written in
    one transaction; any failure leaves none of them behind. A repeated
    idempotency key returns the first order untouched.
    """
    if idempotency_key:
        existing = await _get_by_idempotency_key(db, current_user.id, idempotency_key)
        if existing:
            return {"message": "Order already placed", "data": OrderOut.model_validate(existing)}, False

    try:
        lines, seller_ids = await _price_items(db, data, current_user.id)

        if len(seller_ids) > 1:
            raise HTTPException(status_code=400, detail="Multi-seller orders not yet supported")
        seller_id = next(iter(seller_ids))

        total_amount = to_money(order_total((price, item.quantity) for _, item, price in lines))

        order = Order(
            customer_id=current_user.id,
            seller_id=seller_id,
            total_amount=total_amount,
            status=OrderStatus.pending.value,
            payment_method=data.payment_method.value,
            items=[{
                "product_id": item.product_id,
                "quantity": item.quantity,
                "price": str(to_money(price)),
                "bargain_offer_id": item.bargain_offer_id,
            } for _, item, price in lines],
            idempotency_key=idempotency_key,
        )
        db.add(order)
        await db.flush()

        for product, item, _ in lines:
            decremented = await db.execute(
                update(Product)
                .where(
                    Product.id == product.id,
                    Product.is_active == True,
                    Product.stock >= item.quantity,
                )
                .values(stock=Product.stock - item.quantity, updated_at=func.now())
                .execution_options(synchronize_session=False)
            )
            if decremented.rowcount != 1:
                raise HTTPException(status_code=400, detail=f"Insufficient stock for product {product.name}")

        rate = await get_commission_rate(db)
        commission = compute_commission(total_amount, rate)
        await db.execute(
            update(Seller)
            .where(Seller.id == seller_id)
            .values(commission_owed=Seller.commission_owed + commission)
            .execution_options(synchronize_session=False)
        )

        await log_user_activity(
            db,
            user_id=current_user.id,
            username=current_user.email,
            message=f"Customer {current_user.id} placed order {order.id} with seller {seller_id} for {total_amount}"
        )

        await db.commit()
        await db.refresh(order)

    except HTTPException:
        await db.rollback()
        raise
    except IntegrityError:
        await db.rollback()
        if idempotency_key:
            # Lost a race against a concurrent request with the same key
            existing = await _get_by_idempotency_key(db, current_user.id, idempotency_key)
            if existing:
                return {"message": "Order already placed", "data": OrderOut.model_validate(existing)}, False
        raise
    except Exception:
        await db.rollback()
        logger.exception("Error creating order for customer %s", current_user.id)
        raise HTTPException(status_code=500, detail="Error creating order")

    logger.info(
        "Order %s placed: seller=%s total=%s commission=%s (rate %s%%)",
        order.id, seller_id, total_amount, commission, rate,
    )
    return {"message": "Order placed successfully", "data": OrderOut.model_validate(order)}, True


# =====================================================
# 🔹 LISTINGS
# =====================================================
async def get_customer_orders(db: AsyncSession, customer_id: int) -> dict:
    result = await db.execute(
        select(Order)
        .where(Order.customer_id == customer_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    orders = result.scalars().all()
    return {"message": f"{len(orders)} orders fetched successfully", "data": [OrderOut.model_validate(o) for o in orders]}


async def get_seller_orders(db: AsyncSession, seller: Seller) -> dict:
    result = await db.execute(
        select(Order)
        .where(Order.seller_id == seller.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
    )
    orders = result.scalars().all()
    return {"message": f"{len(orders)} orders fetched successfully", "data": [OrderOut.model_validate(o) for o in orders]}


# =====================================================
# 🔹 UPDATE ORDER STATUS
# =====================================================
async def update_order_status(db: AsyncSession, seller: Seller, order_id: int, new_status: OrderStatus, current_user) -> dict:
    """
    Forward-only moves: pending → confirmed → shipped → delivered, with
    cancellation allowed before shipping. Re-sending the current status is a no-op.
    """
    try:
        result = await db.execute(
            select(Order)
            .where(Order.id == order_id, Order.seller_id == seller.id)
            .execution_options(populate_existing=True)
        )
        order = result.scalars().first()
        if not order:
            raise HTTPException(status_code=404, detail="Order not found")

        current = order.status
        target = new_status.value
        if current == target:
            return {"message": f"Order already {current}", "data": OrderOut.model_validate(order)}

        if not can_transition_order(current, target):
            raise HTTPException(status_code=409, detail=f"Cannot change order status from {current} to {target}")

        moved = await db.execute(
            update(Order)
            .where(Order.id == order.id, Order.seller_id == seller.id, Order.status == current)
            .values(status=target, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        if moved.rowcount != 1:
            raise HTTPException(status_code=409, detail="Order was modified concurrently")

        await log_user_activity(
            db,
            user_id=current_user.id,
            username=current_user.email,
            message=f"Seller {seller.id} moved order {order.id} from {current} to {target}"
        )
        await db.commit()
        await db.refresh(order)

    except HTTPException:
        await db.rollback()
        raise
    except Exception:
        await db.rollback()
        logger.exception("Error updating status of order %s by seller %s", order_id, seller.id)
        raise HTTPException(status_code=500, detail="Error updating order status")

    return {"message": "Order status updated successfully", "data": OrderOut.model_validate(order)}
