# marketplace/routers/__init__.py
from fastapi import APIRouter

from .auth import router as auth_router
from .users import router as users_router
from .sellers import router as sellers_router
from .products import router as products_router
from .bargains import router as bargains_router
from .orders import router as orders_router
from .admin import router as admin_router
from .settings import router as settings_router

router = APIRouter(prefix="/api")

router.include_router(auth_router)
router.include_router(users_router)
router.include_router(sellers_router)
router.include_router(products_router)
router.include_router(bargains_router)
router.include_router(orders_router)
router.include_router(admin_router)
router.include_router(settings_router)
