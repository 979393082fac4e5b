# marketplace/routers/bargains.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.db import get_db
from marketplace.schemas.bargain_schemas import (
    OfferCreate, CounterOfferCreate, OfferResponse, OfferListResponse
)
from marketplace.services.bargain_service import (
    create_offer,
    get_customer_offers,
    get_seller_requests,
    respond_to_offer,
    respond_to_counter,
)
from marketplace.utils.check_roles import require_role, get_current_seller
from marketplace.utils.get_user import get_current_user

router = APIRouter(prefix="/bargains", tags=["Bargains"])


# ---------------------------
# CUSTOMER
# ---------------------------
@router.post("/offer", response_model=OfferResponse, status_code=status.HTTP_201_CREATED)
@require_role(["customer"])
async def create_offer_route(data: OfferCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_offer(db, data, _user)


@router.get("/my-offers", response_model=OfferListResponse)
@require_role(["customer"])
async def my_offers(db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_customer_offers(db, _user.id)


@router.post("/{offer_id}/counter/accept", response_model=OfferResponse)
@require_role(["customer"])
async def accept_counter_route(offer_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await respond_to_counter(db, offer_id, "accept", _user)


@router.post("/{offer_id}/counter/reject", response_model=OfferResponse)
@require_role(["customer"])
async def reject_counter_route(offer_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await respond_to_counter(db, offer_id, "reject", _user)


# ---------------------------
# SELLER
# ---------------------------
@router.get("/seller/requests", response_model=OfferListResponse)
async def seller_requests(db: AsyncSession = Depends(get_db), seller=Depends(get_current_seller)):
    return await get_seller_requests(db, seller)


@router.post("/{offer_id}/accept", response_model=OfferResponse)
async def accept_offer_route(
    offer_id: int,
    db: AsyncSession = Depends(get_db),
    seller=Depends(get_current_seller),
    current_user=Depends(get_current_user),
):
    return await respond_to_offer(db, seller, offer_id, "accept", current_user)


@router.post("/{offer_id}/reject", response_model=OfferResponse)
async def reject_offer_route(
    offer_id: int,
    db: AsyncSession = Depends(get_db),
    seller=Depends(get_current_seller),
    current_user=Depends(get_current_user),
):
    return await respond_to_offer(db, seller, offer_id, "reject", current_user)


@router.post("/{offer_id}/counter", response_model=OfferResponse)
async def counter_offer_route(
    offer_id: int,
    data: CounterOfferCreate,
    db: AsyncSession = Depends(get_db),
    seller=Depends(get_current_seller),
    current_user=Depends(get_current_user),
):
    return await respond_to_offer(db, seller, offer_id, "counter", current_user, counter_price=data.counter_price)
