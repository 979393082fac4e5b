# marketplace/routers/admin.py
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Any, Dict, Optional

from marketplace.core.db import get_db
from marketplace.models.seller_models import SellerStatus
from marketplace.schemas.admin_schemas import PlatformStatsResponse, ActivityListResponse
from marketplace.schemas.seller_schemas import (
    SellerListResponse, SellerResponse, SellerStatusUpdate, SuspendUnpaidResponse, CommissionPaymentCreate
)
from marketplace.schemas.settings_schemas import SettingsResponse
from marketplace.services.activity_service import get_user_activities
from marketplace.services.admin_service import (
    get_platform_stats,
    list_sellers,
    update_seller_status,
    suspend_unpaid,
    record_commission_payment,
)
from marketplace.services.settings_service import get_all_settings, update_settings
from marketplace.utils.check_roles import require_role
from marketplace.utils.get_user import get_current_user

router = APIRouter(prefix="/admin", tags=["Admin"])


# ---------------------------
# STATS
# ---------------------------
@router.get("/stats", response_model=PlatformStatsResponse)
@require_role(["super_admin"])
async def stats(db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_platform_stats(db)


# ---------------------------
# SELLERS
# ---------------------------
@router.get("/sellers", response_model=SellerListResponse)
@require_role(["super_admin"])
async def sellers(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    status: Optional[SellerStatus] = Query(None),
):
    return await list_sellers(db, status.value if status else None)


@router.put("/sellers/{seller_id}/status", response_model=SellerResponse)
@require_role(["super_admin"])
async def change_seller_status(
    seller_id: int,
    data: SellerStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await update_seller_status(db, seller_id, data.status, _user)


@router.post("/sellers/{seller_id}/suspend-unpaid", response_model=SuspendUnpaidResponse)
@require_role(["super_admin"])
async def suspend_unpaid_route(seller_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await suspend_unpaid(db, seller_id, _user)


@router.post("/sellers/{seller_id}/payments", response_model=SellerResponse)
@require_role(["super_admin"])
async def record_payment_route(
    seller_id: int,
    data: CommissionPaymentCreate,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    """Settle part or all of a seller's commission balance."""
    return await record_commission_payment(db, seller_id, data.amount, _user, note=data.note)


# ---------------------------
# SETTINGS
# ---------------------------
@router.get("/settings", response_model=SettingsResponse)
@require_role(["super_admin"])
async def get_settings(db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return {"message": "Settings fetched successfully", "data": await get_all_settings(db)}


@router.put("/settings", response_model=SettingsResponse)
@require_role(["super_admin"])
async def put_settings(
    updates: Dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    return await update_settings(db, updates, _user)


# ---------------------------
# ACTIVITY LOG
# ---------------------------
@router.get("/activity", response_model=ActivityListResponse)
@require_role(["super_admin"])
async def activity(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    user_id: Optional[int] = Query(None),
    username: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    sort_by: str = Query("created_at"),
    order: str = Query("desc"),
):
    total, activities = await get_user_activities(db, user_id, username, page, page_size, sort_by, order)
    return {
        "message": f"{len(activities)} activities fetched successfully",
        "total": total,
        "page": page,
        "page_size": page_size,
        "data": activities,
    }
