from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from marketplace.schemas.common_schemas import Money


class OfferCreate(BaseModel):
    product_id: int
    offer_price: Money


class CounterOfferCreate(BaseModel):
    counter_price: Money


class OfferOut(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    product_price: Optional[Decimal] = None
    customer_id: int
    seller_id: int
    offer_price: Decimal
    status: str
    counter_price: Optional[Decimal] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OfferResponse(BaseModel):
    message: str
    data: Optional[OfferOut] = None


class OfferListResponse(BaseModel):
    message: str
    data: List[OfferOut]
