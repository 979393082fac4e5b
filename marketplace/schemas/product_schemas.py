from pydantic import BaseModel, Field, model_validator
from typing import Any, Dict, List, Optional
from datetime import datetime
from decimal import Decimal

from marketplace.schemas.common_schemas import Money


# --------------------------
# Product Schemas
# --------------------------
class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    price: Money
    discount_price: Optional[Money] = None
    images: List[str] = Field(default_factory=list)
    category: str = Field(..., min_length=1)
    stock: int = Field(0, ge=0)
    allow_bargain: bool = False
    min_bargain_price: Optional[Money] = None
    customization: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def min_bargain_below_price(self):
        if self.min_bargain_price is not None and self.min_bargain_price >= self.price:
            raise ValueError("Minimum bargain price must be less than price")
        return self


class ProductUpdate(BaseModel):
    """All fields optional for partial updates."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[Money] = None
    discount_price: Optional[Money] = None
    images: Optional[List[str]] = None
    category: Optional[str] = Field(None, min_length=1)
    stock: Optional[int] = Field(None, ge=0)
    allow_bargain: Optional[bool] = None
    min_bargain_price: Optional[Money] = None
    is_active: Optional[bool] = None
    customization: Optional[Dict[str, Any]] = None


class ProductOut(BaseModel):
    id: int
    seller_id: int
    store_name: Optional[str] = None
    name: str
    description: str
    price: Decimal
    discount_price: Optional[Decimal] = None
    images: List[str] = Field(default_factory=list)
    category: str
    stock: int
    allow_bargain: bool
    min_bargain_price: Optional[Decimal] = None
    is_active: bool
    customization: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductResponse(BaseModel):
    message: str
    data: Optional[ProductOut] = None


class ProductListResponse(BaseModel):
    message: str
    data: List[ProductOut]
