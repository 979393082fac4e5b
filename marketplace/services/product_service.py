# marketplace/services/product_service.py
import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from marketplace.models.product_models import Product
from marketplace.models.seller_models import Seller, SellerStatus
from marketplace.schemas.product_schemas import ProductCreate, ProductUpdate, ProductOut
from marketplace.utils.activity_helpers import log_user_activity

logger = logging.getLogger(__name__)


def _public_products():
    """Active products of active sellers."""
    return (
        select(Product)
        .join(Seller, Product.seller_id == Seller.id)
        .where(Product.is_active == True, Seller.status == SellerStatus.active.value)
    )


# ---------------------------------------------------
# CREATE PRODUCT
# ---------------------------------------------------
async def create_product(db: AsyncSession, data: ProductCreate, seller: Seller, current_user) -> dict:
    """
    Create a listing owned by the seller and log it.
    """
    try:
        product = Product(seller_id=seller.id, **data.model_dump())
        product.seller = seller
        db.add(product)
        await db.flush()

        await log_user_activity(
            db,
            user_id=current_user.id,
            username=current_user.email,
            message=f"Seller {seller.id} created product '{product.name}' (ID: {product.id})"
        )

        await db.commit()
        await db.refresh(product)

    except IntegrityError:
        await db.rollback()
        raise
    except Exception:
        await db.rollback()
        logger.exception("Error creating product for seller %s", seller.id)
        raise HTTPException(status_code=500, detail="Error creating product")

    return {"message": "Product created successfully", "data": ProductOut.model_validate(product)}


# ---------------------------------------------------
# LIST PUBLIC PRODUCTS
# ---------------------------------------------------
async def get_all_products(
    db: AsyncSession,
    category: Optional[str] = None,
    seller_id: Optional[int] = None,
    search: Optional[str] = None,
) -> dict:
    stmt = _public_products()
    if category:
        stmt = stmt.where(Product.category == category)
    if seller_id:
        stmt = stmt.where(Product.seller_id == seller_id)
    if search:
        term = f"%{search}%"
        stmt = stmt.where(or_(Product.name.ilike(term), Product.description.ilike(term)))

    result = await db.execute(stmt.order_by(Product.created_at.desc(), Product.id.desc()))
    products = result.scalars().all()
    return {
        "message": "Products fetched successfully",
        "data": [ProductOut.model_validate(p) for p in products],
    }


# ---------------------------------------------------
# GET SINGLE PUBLIC PRODUCT
# ---------------------------------------------------
async def get_product(db: AsyncSession, product_id: int) -> dict:
    result = await db.execute(_public_products().where(Product.id == product_id))
    product = result.scalars().first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"message": "Product fetched successfully", "data": ProductOut.model_validate(product)}


# ---------------------------------------------------
# SELLER'S OWN PRODUCTS
# ---------------------------------------------------
async def get_seller_products(db: AsyncSession, seller: Seller) -> dict:
    result = await db.execute(
        select(Product)
        .where(Product.seller_id == seller.id)
        .order_by(Product.created_at.desc(), Product.id.desc())
    )
    products = result.scalars().all()
    return {
        "message": f"{len(products)} products fetched successfully",
        "data": [ProductOut.model_validate(p) for p in products],
    }


async def _get_owned_product(db: AsyncSession, product_id: int, seller: Seller) -> Product:
    result = await db.execute(
        select(Product).where(Product.id == product_id, Product.seller_id == seller.id)
    )
    product = result.scalars().first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# ---------------------------------------------------
# UPDATE PRODUCT
# ---------------------------------------------------
async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate, seller: Seller, current_user) -> dict:
    """
    Update a listing owned by the seller and log the changes.
    """
    try:
        product = await _get_owned_product(db, product_id, seller)

        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")

        price = update_data.get("price") or product.price
        min_bargain_price = update_data.get("min_bargain_price", product.min_bargain_price)
        if min_bargain_price is not None and min_bargain_price >= price:
            raise HTTPException(status_code=400, detail="Minimum bargain price must be less than price")

        changes = []
        for key, value in update_data.items():
            old_val = getattr(product, key)
            if old_val != value:
                changes.append(f"{key}: {old_val} → {value}")
                setattr(product, key, value)

        if changes:
            await log_user_activity(
                db,
                user_id=current_user.id,
                username=current_user.email,
                message=f"Seller {seller.id} updated product '{product.name}' "
                        f"(ID: {product.id}): {', '.join(changes)}"
            )

        await db.commit()
        await db.refresh(product)

    except HTTPException:
        await db.rollback()
        raise
    except IntegrityError:
        await db.rollback()
        raise
    except Exception:
        await db.rollback()
        logger.exception("Error updating product %s", product_id)
        raise HTTPException(status_code=500, detail="Error updating product")

    return {"message": "Product updated successfully", "data": ProductOut.model_validate(product)}


# ---------------------------------------------------
# DEACTIVATE PRODUCT (Soft Delete)
# ---------------------------------------------------
async def deactivate_product(db: AsyncSession, product_id: int, seller: Seller, current_user) -> dict:
    """
    Listings referenced by orders and offers are never removed, only hidden.
    """
    try:
        product = await _get_owned_product(db, product_id, seller)
        product.is_active = False

        await log_user_activity(
            db,
            user_id=current_user.id,
            username=current_user.email,
            message=f"Seller {seller.id} deactivated product '{product.name}' (ID: {product.id})"
        )
        await db.commit()

    except HTTPException:
        await db.rollback()
        raise
    except Exception:
        await db.rollback()
        logger.exception("Error deactivating product %s", product_id)
        raise HTTPException(status_code=500, detail="Error deactivating product")

    return {"message": "Product deactivated successfully"}
