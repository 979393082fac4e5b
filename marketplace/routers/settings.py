# marketplace/routers/settings.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.db import get_db
from marketplace.schemas.settings_schemas import SettingsResponse
from marketplace.services.settings_service import get_all_settings

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=SettingsResponse)
async def public_settings(db: AsyncSession = Depends(get_db)):
    """Branding and feature toggles for the storefront."""
    return {"message": "Settings fetched successfully", "data": await get_all_settings(db)}
