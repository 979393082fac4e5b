# marketplace/services/settings_service.py
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from marketplace.core.config import SITE_NAME
from marketplace.models.settings_models import PlatformSetting
from marketplace.services.pricing import DEFAULT_COMMISSION_RATE
from marketplace.utils.activity_helpers import log_user_activity

logger = logging.getLogger(__name__)

# Fallback for every key that has never been stored.
DEFAULT_SETTINGS: Dict[str, Any] = {
    "siteName": SITE_NAME,
    "logo": "",
    "favicon": "",
    "primaryColor": "32 95% 44%",
    "secondaryColor": "35 20% 94%",
    "accentColor": "15 75% 55%",
    "fontDisplay": "Playfair Display",
    "fontBody": "DM Sans",
    "commissionRate": 10,
    "subscriptionFee": 0,
    "allowBargain": True,
    "allowCOD": True,
    "heroTitle": "Discover Unique Products from Trusted Sellers",
    "heroSubtitle": "A curated marketplace where quality meets authenticity. Shop directly from verified vendors worldwide.",
    "heroImage": "",
    "metaDescription": "A multi-vendor marketplace",
    "ogImage": "",
    "twitterHandle": "",
}

BOOLEAN_KEYS = {"allowBargain", "allowCOD"}
PERCENT_KEYS = {"commissionRate"}
NON_NEGATIVE_KEYS = {"subscriptionFee"}


# --------------------------
# Typed accessors
# --------------------------
async def get_setting(db: AsyncSession, key: str, default: Any = None) -> Any:
    result = await db.execute(select(PlatformSetting.value).where(PlatformSetting.key == key))
    row = result.first()
    if row is None or row[0] is None:
        return default if default is not None else DEFAULT_SETTINGS.get(key)
    return row[0]


async def get_commission_rate(db: AsyncSession) -> Decimal:
    raw = await get_setting(db, "commissionRate", DEFAULT_COMMISSION_RATE)
    try:
        rate = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        logger.warning("Stored commissionRate %r is not numeric; using %s", raw, DEFAULT_COMMISSION_RATE)
        return DEFAULT_COMMISSION_RATE
    if rate < 0 or rate > 100:
        logger.warning("Stored commissionRate %s out of range; using %s", rate, DEFAULT_COMMISSION_RATE)
        return DEFAULT_COMMISSION_RATE
    return rate


async def get_allow_bargain(db: AsyncSession) -> bool:
    raw = await get_setting(db, "allowBargain", True)
    return raw if isinstance(raw, bool) else True


async def get_all_settings(db: AsyncSession) -> Dict[str, Any]:
    result = await db.execute(select(PlatformSetting))
    stored = {s.key: s.value for s in result.scalars().all()}
    return {**DEFAULT_SETTINGS, **stored}


# --------------------------
# Validation
# --------------------------
def _validate_setting(key: str, value: Any) -> None:
    if key in BOOLEAN_KEYS and not isinstance(value, bool):
        raise HTTPException(status_code=400, detail=f"Setting '{key}' must be true or false")
    if key in PERCENT_KEYS or key in NON_NEGATIVE_KEYS:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise HTTPException(status_code=400, detail=f"Setting '{key}' must be a number")
        if value < 0:
            raise HTTPException(status_code=400, detail=f"Setting '{key}' must be non-negative")
        if key in PERCENT_KEYS and value > 100:
            raise HTTPException(status_code=400, detail=f"Setting '{key}' must be between 0 and 100")


# --------------------------
# UPDATE SETTINGS
# --------------------------
async def update_settings(db: AsyncSession, updates: Dict[str, Any], current_user) -> dict:
    if not updates:
        raise HTTPException(status_code=400, detail="No settings to update")

    for key, value in updates.items():
        _validate_setting(key, value)

    try:
        result = await db.execute(select(PlatformSetting).where(PlatformSetting.key.in_(list(updates))))
        existing = {s.key: s for s in result.scalars().all()}

        for key, value in updates.items():
            if key in existing:
                existing[key].value = value
            else:
                db.add(PlatformSetting(key=key, value=value))

        await log_user_activity(
            db,
            user_id=current_user.id,
            username=current_user.email,
            message=f"Admin updated platform settings: {', '.join(sorted(updates))}"
        )
        await db.commit()

    except IntegrityError:
        await db.rollback()
        raise
    except Exception:
        await db.rollback()
        logger.exception("Error updating platform settings %s", sorted(updates))
        raise HTTPException(status_code=500, detail="Error updating platform settings")

    logger.info("Platform settings updated by user %s: %s", current_user.id, sorted(updates))
    return {"message": "Settings updated successfully", "data": await get_all_settings(db)}


# --------------------------
# SEED DEFAULTS
# --------------------------
async def seed_default_settings(db: AsyncSession) -> int:
    """Insert any default key that is missing. Returns the number inserted."""
    result = await db.execute(select(PlatformSetting.key))
    present = set(result.scalars().all())
    missing = [k for k in DEFAULT_SETTINGS if k not in present]
    for key in missing:
        db.add(PlatformSetting(key=key, value=DEFAULT_SETTINGS[key]))
    await db.commit()
    if missing:
        logger.info("Seeded %d default platform settings", len(missing))
    return len(missing)
