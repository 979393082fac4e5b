# marketplace/routers/orders.py
from fastapi import APIRouter, Depends, Header, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.db import get_db
from marketplace.schemas.order_schemas import OrderCreate, OrderStatusUpdate, OrderResponse, OrderListResponse
from marketplace.services.order_service import (
    create_order,
    get_customer_orders,
    get_seller_orders,
    update_order_status,
)
from marketplace.utils.check_roles import require_role, get_current_seller
from marketplace.utils.get_user import get_current_user

router = APIRouter(prefix="/orders", tags=["Orders"])


# POST create order
@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@require_role(["customer"])
async def create_order_route(
    data: OrderCreate,
    response: Response,
    idempotency_key: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    """
    Place an order with a single seller. Send an `Idempotency-Key` header to
    make retries safe: a repeated key returns the first order with 200.
    """
    result, created = await create_order(db, data, _user, idempotency_key=idempotency_key)
    if not created:
        response.status_code = status.HTTP_200_OK
    return result


# GET customer's orders
@router.get("/my-orders", response_model=OrderListResponse)
@require_role(["customer"])
async def my_orders(db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_customer_orders(db, _user.id)


# GET seller's orders
@router.get("/seller/orders", response_model=OrderListResponse)
async def seller_orders(db: AsyncSession = Depends(get_db), seller=Depends(get_current_seller)):
    return await get_seller_orders(db, seller)


# PUT update order status
@router.put("/{order_id}/status", response_model=OrderResponse)
async def update_status_route(
    order_id: int,
    data: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    seller=Depends(get_current_seller),
    current_user=Depends(get_current_user),
):
    return await update_order_status(db, seller, order_id, data.status, current_user)
