# marketplace/routers/sellers.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.db import get_db
from marketplace.schemas.seller_schemas import SellerResponse, SellerUpdate, SellerStatsResponse
from marketplace.services.seller_service import get_seller_profile, update_seller_profile, get_seller_stats
from marketplace.utils.check_roles import get_current_seller
from marketplace.utils.get_user import get_current_user

router = APIRouter(prefix="/sellers", tags=["Sellers"])


# ---------------------------
# PROFILE
# ---------------------------
@router.get("/profile", response_model=SellerResponse)
async def get_profile(seller=Depends(get_current_seller)):
    return await get_seller_profile(seller)


@router.put("/profile", response_model=SellerResponse)
async def update_profile(
    data: SellerUpdate,
    db: AsyncSession = Depends(get_db),
    seller=Depends(get_current_seller),
    current_user=Depends(get_current_user),
):
    return await update_seller_profile(db, seller, data, current_user)


# ---------------------------
# STATS
# ---------------------------
@router.get("/stats", response_model=SellerStatsResponse)
async def stats(db: AsyncSession = Depends(get_db), seller=Depends(get_current_seller)):
    return await get_seller_stats(db, seller)
