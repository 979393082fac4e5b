# marketplace/services/auth_services/otp_service.py
import logging
from datetime import datetime, timedelta, timezone

import httpx
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from marketplace.core import config
from marketplace.core.config import OTP_EXPIRY_MINUTES
from marketplace.core.security import hash_password, verify_password
from marketplace.models.user_models import Otp

logger = logging.getLogger(__name__)


async def store_otp(db: AsyncSession, email: str, code: str) -> Otp:
    """
    Hash and persist a fresh code, retiring any unused code for the email.
    The caller commits.
    """
    await db.execute(
        update(Otp)
        .where(Otp.email == email, Otp.used == False)
        .values(used=True)
    )
    otp = Otp(
        email=email,
        code_hash=hash_password(code),
        expires_at=datetime.now(timezone.utc) + timedelta(minutes=OTP_EXPIRY_MINUTES),
    )
    db.add(otp)
    await db.flush()
    return otp


async def verify_and_consume_otp(db: AsyncSession, email: str, code: str) -> bool:
    result = await db.execute(
        select(Otp)
        .where(
            Otp.email == email,
            Otp.used == False,
            Otp.expires_at > datetime.now(timezone.utc),
        )
        .order_by(Otp.id.desc())
        .limit(1)
    )
    otp = result.scalars().first()
    if not otp or not verify_password(code, otp.code_hash):
        return False

    # Conditional consume so a code can be redeemed once
    consumed = await db.execute(
        update(Otp).where(Otp.id == otp.id, Otp.used == False).values(used=True)
    )
    return consumed.rowcount == 1


def email_configured() -> bool:
    return all((config.EMAILJS_SERVICE_ID, config.EMAILJS_TEMPLATE_ID, config.EMAILJS_PUBLIC_KEY))


async def send_otp_email(email: str, code: str) -> bool:
    """
    Deliver the code through the EmailJS REST API. Returns False when no
    provider is configured; HTTP failures raise httpx errors for the caller
    to log.
    """
    if not email_configured():
        logger.warning("EmailJS is not configured; OTP for %s was not delivered", email)
        return False

    payload = {
        "service_id": config.EMAILJS_SERVICE_ID,
        "template_id": config.EMAILJS_TEMPLATE_ID,
        "user_id": config.EMAILJS_PUBLIC_KEY,
        "template_params": {
            "name": email.split("@")[0] or "User",
            "otp": code,
            "email": email,
        },
    }
    if config.EMAILJS_ACCESS_TOKEN:
        payload["accessToken"] = config.EMAILJS_ACCESS_TOKEN

    async with httpx.AsyncClient(timeout=config.EMAIL_TIMEOUT_SECONDS) as client:
        response = await client.post(config.EMAILJS_API_URL, json=payload)
        response.raise_for_status()

    logger.info("OTP email sent to %s", email)
    return True
