# marketplace/core/rate_limit.py
from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from marketplace.core.config import RATE_LIMIT_ENABLED

OTP_LIMIT_MESSAGE = "Too many OTP requests. Please try again later."
LOGIN_LIMIT_MESSAGE = "Too many login attempts. Please try again later."

# In-process counters, keyed by client address and route
limiter = Limiter(key_func=get_remote_address, storage_uri="memory://", enabled=RATE_LIMIT_ENABLED)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(status_code=429, content={"detail": exc.detail})
