# marketplace/services/user_service.py
from marketplace.schemas.user_schemas import UserOut


async def get_user_profile(current_user) -> dict:
    return {"message": "Profile fetched successfully", "data": UserOut.model_validate(current_user)}
