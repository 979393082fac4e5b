# marketplace/routers/products.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from marketplace.core.db import get_db
from marketplace.schemas.common_schemas import MessageResponse
from marketplace.schemas.product_schemas import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
)
from marketplace.services.product_service import (
    create_product,
    get_all_products,
    get_product,
    get_seller_products,
    update_product,
    deactivate_product,
)
from marketplace.utils.check_roles import get_current_seller
from marketplace.utils.get_user import get_current_user

router = APIRouter(prefix="/products", tags=["Products"])


# -----------------------------------------------------------
# LIST ACTIVE PRODUCTS (public)
# -----------------------------------------------------------
@router.get("", response_model=ProductListResponse)
async def list_products(
    db: AsyncSession = Depends(get_db),
    category: Optional[str] = Query(None),
    seller_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None, description="Matches name or description"),
):
    return await get_all_products(db, category=category, seller_id=seller_id, search=search)


# -----------------------------------------------------------
# SELLER'S OWN PRODUCTS
# -----------------------------------------------------------
@router.get("/seller/my-products", response_model=ProductListResponse)
async def my_products(db: AsyncSession = Depends(get_db), seller=Depends(get_current_seller)):
    return await get_seller_products(db, seller)


# -----------------------------------------------------------
# GET PRODUCT BY ID (public)
# -----------------------------------------------------------
@router.get("/{product_id}", response_model=ProductResponse)
async def get_product_route(product_id: int, db: AsyncSession = Depends(get_db)):
    return await get_product(db, product_id)


# -----------------------------------------------------------
# CREATE PRODUCT
# -----------------------------------------------------------
@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product_route(
    data: ProductCreate,
    db: AsyncSession = Depends(get_db),
    seller=Depends(get_current_seller),
    current_user=Depends(get_current_user),
):
    return await create_product(db, data, seller, current_user)


# -----------------------------------------------------------
# UPDATE PRODUCT
# -----------------------------------------------------------
@router.put("/{product_id}", response_model=ProductResponse)
async def update_product_route(
    product_id: int,
    data: ProductUpdate,
    db: AsyncSession = Depends(get_db),
    seller=Depends(get_current_seller),
    current_user=Depends(get_current_user),
):
    return await update_product(db, product_id, data, seller, current_user)


# -----------------------------------------------------------
# DEACTIVATE PRODUCT
# -----------------------------------------------------------
@router.delete("/{product_id}", response_model=MessageResponse)
async def deactivate_product_route(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    seller=Depends(get_current_seller),
    current_user=Depends(get_current_user),
):
    return await deactivate_product(db, product_id, seller, current_user)
