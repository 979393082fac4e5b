from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from marketplace.models.order_models import OrderStatus, PaymentMethod
from marketplace.schemas.common_schemas import Money


class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    price: Money
    bargain_offer_id: Optional[int] = None


class OrderCreate(BaseModel):
    items: List[OrderItemCreate] = Field(..., min_length=1)
    payment_method: PaymentMethod


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemOut(BaseModel):
    product_id: int
    quantity: int
    price: Decimal
    bargain_offer_id: Optional[int] = None


class OrderOut(BaseModel):
    id: int
    customer_id: int
    seller_id: int
    total_amount: Decimal
    status: str
    payment_method: str
    items: List[OrderItemOut]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    message: str
    data: Optional[OrderOut] = None


class OrderListResponse(BaseModel):
    message: str
    data: List[OrderOut]
