# marketplace/schemas/common_schemas.py
from decimal import Decimal
from pydantic import BaseModel, Field
from typing_extensions import Annotated

Money = Annotated[Decimal, Field(gt=0, max_digits=12, decimal_places=2)]
NonNegativeMoney = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]


class MessageResponse(BaseModel):
    message: str
