from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal


class PlatformStats(BaseModel):
    total_revenue: Decimal
    active_sellers: int
    total_products: int
    total_customers: int
    suspended_sellers: int


class PlatformStatsResponse(BaseModel):
    message: str
    data: PlatformStats


class ActivityOut(BaseModel):
    id: int
    user_id: Optional[int]
    username: str
    message: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ActivityListResponse(BaseModel):
    message: str
    total: int
    page: int
    page_size: int
    data: List[ActivityOut]
