# marketplace/routers/auth.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.config import OTP_RATE_LIMIT, LOGIN_RATE_LIMIT
from marketplace.core.db import get_db
from marketplace.core.rate_limit import limiter, OTP_LIMIT_MESSAGE, LOGIN_LIMIT_MESSAGE
from marketplace.schemas.auth_schemas import (
    SendOtpRequest, SendOtpResponse, VerifyOtpRequest, PasswordLogin, TokenResponse, AuthUserOut
)
from marketplace.schemas.common_schemas import MessageResponse
from marketplace.services.auth_services.auth_service import (
    send_otp, verify_otp, authenticate_user, token_response, logout_user
)
from marketplace.utils.get_user import get_current_user

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/send-otp", response_model=SendOtpResponse)
@limiter.limit(OTP_RATE_LIMIT, error_message=OTP_LIMIT_MESSAGE)
async def send_otp_route(request: Request, data: SendOtpRequest, db: AsyncSession = Depends(get_db)):
    return await send_otp(db, data.email)


@router.post("/verify-otp", response_model=TokenResponse)
@limiter.limit(OTP_RATE_LIMIT, error_message=OTP_LIMIT_MESSAGE)
async def verify_otp_route(request: Request, data: VerifyOtpRequest, db: AsyncSession = Depends(get_db)):
    """
    Exchange a one-time code for an access token. Unknown emails are
    registered with the requested role (customer by default).
    """
    return await verify_otp(db, data.email, data.otp, data.role)


@router.post("/login", response_model=TokenResponse)
@limiter.limit(LOGIN_RATE_LIMIT, error_message=LOGIN_LIMIT_MESSAGE)
async def login(request: Request, data: PasswordLogin, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, data.email, data.password)
    return token_response(user)


@router.post("/logout", response_model=MessageResponse)
async def logout(db: AsyncSession = Depends(get_db), current_user=Depends(get_current_user)):
    """
    Invalidates every token issued to the user so far.
    """
    return await logout_user(db, current_user)


@router.get("/me", response_model=AuthUserOut)
async def me(current_user=Depends(get_current_user)):
    return current_user
