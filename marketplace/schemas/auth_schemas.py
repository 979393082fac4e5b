from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal


class SendOtpRequest(BaseModel):
    email: EmailStr
    role: Optional[Literal["customer", "seller"]] = None


class SendOtpResponse(BaseModel):
    success: bool = True
    message: str
    otp: Optional[str] = None  # echoed in development only


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=6, max_length=6)
    role: Optional[Literal["customer", "seller"]] = None


class PasswordLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: Optional[Literal["customer", "seller", "super_admin"]] = None


class AuthUserOut(BaseModel):
    id: int
    email: str
    role: str
    is_verified: bool

    class Config:
        from_attributes = True


class TokenResponse(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    user: AuthUserOut
