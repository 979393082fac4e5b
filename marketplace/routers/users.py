# marketplace/routers/users.py
from fastapi import APIRouter, Depends

from marketplace.schemas.user_schemas import UserResponse
from marketplace.services.user_service import get_user_profile
from marketplace.utils.get_user import get_current_user

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/profile", response_model=UserResponse)
async def profile(current_user=Depends(get_current_user)):
    return await get_user_profile(current_user)
