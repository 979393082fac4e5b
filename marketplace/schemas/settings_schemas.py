from pydantic import BaseModel
from typing import Any, Dict


class SettingsResponse(BaseModel):
    message: str
    data: Dict[str, Any]
