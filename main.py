# main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError

from marketplace.core.config import FRONTEND_URL, LOG_LEVEL, ENVIRONMENT
from marketplace.core.db import AsyncSessionLocal, init_models
from marketplace.core.rate_limit import limiter, rate_limit_exceeded_handler
from marketplace.middleware.activity_logger import ActivityLoggerMiddleware
from marketplace.routers import router as api_router
from marketplace.services.settings_service import seed_default_settings

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("marketplace")

app = FastAPI(
    title="Marketplace API",
    description="FastAPI backend for a multi-vendor marketplace with bargaining",
    version="0.1.0"
)
# CORS setup
allowed_origins = ["*"] if ENVIRONMENT == "development" else [FRONTEND_URL]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ActivityLoggerMiddleware)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Constraint violation on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=409, content={"detail": "Database constraint violation"})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Health check endpoint
@app.get("/", tags=["Health"])
async def health_check():
    return {"status": "ok", "message": "Backend is running"}

# Register routers
app.include_router(api_router)


@app.on_event("startup")
async def on_startup():
    await init_models()
    async with AsyncSessionLocal() as db:
        await seed_default_settings(db)
    logger.info("Marketplace API started (%s)", ENVIRONMENT)
