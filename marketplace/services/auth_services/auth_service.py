# marketplace/services/auth_services/auth_service.py
import logging
from datetime import timedelta
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from marketplace.core import config
from marketplace.core.security import verify_password, create_access_token, generate_otp
from marketplace.models.seller_models import Seller, SellerStatus
from marketplace.models.user_models import User
from marketplace.services.auth_services.otp_service import (
    store_otp,
    verify_and_consume_otp,
    send_otp_email,
)
from marketplace.utils.activity_helpers import log_user_activity
from marketplace.utils.check_roles import can_act, seller_blocked

logger = logging.getLogger(__name__)


async def _get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalars().first()


def _ensure_seller_allowed(user: User) -> None:
    if user.role == "seller" and user.seller is not None and not can_act(user.seller):
        raise seller_blocked(user.seller.status)


def create_token(user: User) -> str:
    """
    Issue an access token. token_version lets logout invalidate it at once.
    """
    expire_minutes = (
        config.ADMIN_ACCESS_TOKEN_EXPIRE_MINUTES
        if user.role == "super_admin"
        else config.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    return create_access_token(
        {"sub": user.email, "user_id": user.id, "role": user.role},
        token_version=user.token_version,
        expires_delta=timedelta(minutes=expire_minutes),
    )


def token_response(user: User) -> dict:
    return {
        "success": True,
        "token": create_token(user),
        "token_type": "bearer",
        "user": user,
    }


# ---------------------------
# SEND OTP
# ---------------------------
async def send_otp(db: AsyncSession, email: str) -> dict:
    user = await _get_user_by_email(db, email)
    if user:
        _ensure_seller_allowed(user)

    code = generate_otp()
    try:
        await store_otp(db, email, code)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("Error storing OTP for %s", email)
        raise HTTPException(status_code=500, detail="Error sending OTP")

    # Delivery never blocks the flow
    try:
        await send_otp_email(email, code)
    except Exception:
        logger.warning("OTP delivery failed for %s", email, exc_info=True)

    response = {"success": True, "message": "OTP sent"}
    if config.ENVIRONMENT == "development":
        response["otp"] = code
    return response


# ---------------------------
# VERIFY OTP
# ---------------------------
async def verify_otp(db: AsyncSession, email: str, code: str, role: str | None) -> dict:
    try:
        if not await verify_and_consume_otp(db, email, code):
            raise HTTPException(status_code=400, detail="OTP verification failed")

        user = await _get_user_by_email(db, email)
        if user is None:
            user = User(email=email, password_hash=None, role=role or "customer", is_verified=True)
            db.add(user)
            await db.flush()

            if user.role == "seller":
                db.add(Seller(
                    user_id=user.id,
                    store_name=f"Store {email.split('@')[0]}",
                    status=SellerStatus.active.value,
                ))

            await log_user_activity(
                db,
                user_id=user.id,
                username=user.email,
                message=f"Registered {user.role} account {user.email} via OTP"
            )
        else:
            _ensure_seller_allowed(user)
            user.is_verified = True

        await db.commit()
        await db.refresh(user)

    except HTTPException:
        await db.rollback()
        raise
    except IntegrityError:
        await db.rollback()
        raise
    except Exception:
        await db.rollback()
        logger.exception("Error verifying OTP for %s", email)
        raise HTTPException(status_code=500, detail="Error verifying OTP")

    return token_response(user)


# ---------------------------
# PASSWORD LOGIN
# ---------------------------
async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    user = await _get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password"
        )
    if not user.is_active:
        raise HTTPException(status_code=403, detail="User account is inactive.")
    _ensure_seller_allowed(user)
    return user


# ---------------------------
# LOGOUT
# ---------------------------
async def logout_user(db: AsyncSession, user: User) -> dict:
    user.token_version += 1
    db.add(user)
    await db.commit()
    return {"message": "Logged out successfully"}
