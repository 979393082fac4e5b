from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from marketplace.models.seller_models import SellerStatus
from marketplace.schemas.common_schemas import Money


class SellerOut(BaseModel):
    id: int
    user_id: int
    email: Optional[str] = None
    store_name: str
    store_description: Optional[str] = None
    status: str
    commission_owed: Decimal
    last_payment_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SellerUpdate(BaseModel):
    store_name: Optional[str] = Field(None, min_length=1)
    store_description: Optional[str] = None


class SellerStatusUpdate(BaseModel):
    status: SellerStatus


class CommissionPaymentCreate(BaseModel):
    amount: Money
    note: Optional[str] = None


class SellerResponse(BaseModel):
    message: str
    data: Optional[SellerOut] = None


class SellerListResponse(BaseModel):
    message: str
    data: List[SellerOut]


class SuspendUnpaidResponse(BaseModel):
    message: str
    data: SellerOut
    suspended: bool
    reason: Optional[str] = None


class SellerStats(BaseModel):
    products: int
    orders: int
    revenue: Decimal
    commission_owed: Decimal


class SellerStatsResponse(BaseModel):
    message: str
    data: SellerStats
