# marketplace/services/bargain_service.py
import logging
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from marketplace.models.bargain_models import BargainOffer, OfferStatus
from marketplace.models.product_models import Product
from marketplace.models.seller_models import Seller, SellerStatus
from marketplace.schemas.bargain_schemas import OfferCreate, OfferOut
from marketplace.services.pricing import validate_offer_price, validate_counter_price
from marketplace.services.settings_service import get_allow_bargain
from marketplace.utils.activity_helpers import log_user_activity

logger = logging.getLogger(__name__)

SELLER_ACTIONS = {
    "accept": OfferStatus.accepted.value,
    "reject": OfferStatus.rejected.value,
    "counter": OfferStatus.countered.value,
}
CUSTOMER_ACTIONS = {
    "accept": OfferStatus.accepted.value,
    "reject": OfferStatus.rejected.value,
}


async def _load_offer(db: AsyncSession, offer_id: int) -> Optional[BargainOffer]:
    result = await db.execute(
        select(BargainOffer)
        .where(BargainOffer.id == offer_id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def _transition(db: AsyncSession, offer: BargainOffer, owner_clause, from_status: str, values: dict) -> None:
    """
    Move the offer out of `from_status` with a single conditional UPDATE.
    Zero affected rows means another request already moved it.
    """
    result = await db.execute(
        update(BargainOffer)
        .where(BargainOffer.id == offer.id, owner_clause, BargainOffer.status == from_status)
        .values(updated_at=func.now(), **values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise HTTPException(status_code=409, detail="Offer already processed")


# --------------------------
# CREATE OFFER (customer)
# --------------------------
async def create_offer(db: AsyncSession, data: OfferCreate, current_user) -> dict:
    try:
        result = await db.execute(
            select(Product)
            .join(Seller, Product.seller_id == Seller.id)
            .where(
                Product.id == data.product_id,
                Product.is_active == True,
                Seller.status == SellerStatus.active.value,
            )
        )
        product = result.scalars().first()
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")

        if not await get_allow_bargain(db):
            raise HTTPException(status_code=400, detail="Bargaining is disabled on this platform")

        if not product.allow_bargain:
            raise HTTPException(status_code=400, detail="Bargaining not allowed for this product")

        validate_offer_price(product, data.offer_price)

        offer = BargainOffer(
            product_id=product.id,
            customer_id=current_user.id,
            seller_id=product.seller_id,
            offer_price=data.offer_price,
            status=OfferStatus.pending.value,
        )
        offer.product = product
        db.add(offer)
        await db.flush()

        await log_user_activity(
            db,
            user_id=current_user.id,
            username=current_user.email,
            message=f"Customer {current_user.id} offered {data.offer_price} for product {product.id} (offer {offer.id})"
        )

        await db.commit()
        await db.refresh(offer)

    except HTTPException:
        await db.rollback()
        raise
    except IntegrityError:
        await db.rollback()
        raise
    except Exception:
        await db.rollback()
        logger.exception("Error creating offer for product %s by customer %s", data.product_id, current_user.id)
        raise HTTPException(status_code=500, detail="Error creating offer")

    logger.info("Offer %s created for product %s at %s", offer.id, offer.product_id, offer.offer_price)
    return {"message": "Offer created successfully", "data": OfferOut.model_validate(offer)}


# --------------------------
# LISTINGS
# --------------------------
async def get_customer_offers(db: AsyncSession, customer_id: int) -> dict:
    result = await db.execute(
        select(BargainOffer)
        .where(BargainOffer.customer_id == customer_id)
        .order_by(BargainOffer.created_at.desc(), BargainOffer.id.desc())
    )
    offers = result.scalars().all()
    return {"message": f"{len(offers)} offers fetched successfully", "data": [OfferOut.model_validate(o) for o in offers]}


async def get_seller_requests(db: AsyncSession, seller: Seller) -> dict:
    """Pending offers awaiting the seller's response."""
    result = await db.execute(
        select(BargainOffer)
        .where(BargainOffer.seller_id == seller.id, BargainOffer.status == OfferStatus.pending.value)
        .order_by(BargainOffer.created_at.desc(), BargainOffer.id.desc())
    )
    offers = result.scalars().all()
    return {"message": f"{len(offers)} pending offers fetched successfully", "data": [OfferOut.model_validate(o) for o in offers]}


# --------------------------
# RESPOND TO OFFER (seller)
# --------------------------
async def respond_to_offer(
    db: AsyncSession,
    seller: Seller,
    offer_id: int,
    action: str,
    current_user,
    counter_price: Optional[Decimal] = None,
) -> dict:
    """
    accept / reject / counter a pending offer the seller owns.
    """
    if action not in SELLER_ACTIONS:
        raise HTTPException(status_code=400, detail=f"Unknown action '{action}'")

    try:
        offer = await _load_offer(db, offer_id)
        if not offer or offer.seller_id != seller.id:
            raise HTTPException(status_code=404, detail="Offer not found")

        if offer.status != OfferStatus.pending.value:
            raise HTTPException(status_code=409, detail="Offer already processed")

        values = {"status": SELLER_ACTIONS[action]}
        if action == "counter":
            if counter_price is None:
                raise HTTPException(status_code=400, detail="Counter price is required")
            validate_counter_price(offer, offer.product, counter_price)
            values["counter_price"] = counter_price

        await _transition(
            db, offer, BargainOffer.seller_id == seller.id, OfferStatus.pending.value, values
        )

        await log_user_activity(
            db,
            user_id=current_user.id,
            username=current_user.email,
            message=(
                f"Seller {seller.id} {values['status']} offer {offer.id}"
                + (f" with counter price {counter_price}" if action == "counter" else "")
            )
        )
        await db.commit()

    except HTTPException:
        await db.rollback()
        raise
    except IntegrityError:
        await db.rollback()
        raise
    except Exception:
        await db.rollback()
        logger.exception("Error responding (%s) to offer %s by seller %s", action, offer_id, seller.id)
        raise HTTPException(status_code=500, detail="Error responding to offer")

    offer = await _load_offer(db, offer_id)
    logger.info("Offer %s moved to %s by seller %s", offer_id, offer.status, seller.id)
    return {"message": f"Offer {offer.status} successfully", "data": OfferOut.model_validate(offer)}


# --------------------------
# RESPOND TO COUNTER (customer)
# --------------------------
async def respond_to_counter(db: AsyncSession, offer_id: int, action: str, current_user) -> dict:
    """
    Buyer's answer to a seller's counter. Accepting fixes the agreed price at
    the counter price.
    """
    if action not in CUSTOMER_ACTIONS:
        raise HTTPException(status_code=400, detail=f"Unknown action '{action}'")

    try:
        offer = await _load_offer(db, offer_id)
        if not offer or offer.customer_id != current_user.id:
            raise HTTPException(status_code=404, detail="Offer not found")

        if offer.status != OfferStatus.countered.value:
            raise HTTPException(status_code=409, detail="Offer has no open counter")

        await _transition(
            db,
            offer,
            BargainOffer.customer_id == current_user.id,
            OfferStatus.countered.value,
            {"status": CUSTOMER_ACTIONS[action]},
        )

        await log_user_activity(
            db,
            user_id=current_user.id,
            username=current_user.email,
            message=f"Customer {current_user.id} {CUSTOMER_ACTIONS[action]} counter on offer {offer.id}"
        )
        await db.commit()

    except HTTPException:
        await db.rollback()
        raise
    except Exception:
        await db.rollback()
        logger.exception("Error responding (%s) to counter on offer %s", action, offer_id)
        raise HTTPException(status_code=500, detail="Error responding to counter offer")

    offer = await _load_offer(db, offer_id)
    return {"message": f"Counter offer {offer.status} successfully", "data": OfferOut.model_validate(offer)}
