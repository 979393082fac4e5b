# marketplace/scripts/create_admin.py
"""
Bootstrap the super admin account:

    SUPER_ADMIN_EMAIL=... SUPER_ADMIN_PASSWORD=... python -m marketplace.scripts.create_admin
"""
import asyncio
import logging

from sqlalchemy.future import select

from marketplace.core.config import SUPER_ADMIN_EMAIL, SUPER_ADMIN_PASSWORD
from marketplace.core.db import AsyncSessionLocal, init_models
from marketplace.core.security import hash_password
from marketplace.models.user_models import User

logger = logging.getLogger(__name__)


async def create_admin(email: str, password: str) -> bool:
    """Returns False when the account already exists."""
    async with AsyncSessionLocal() as session:
        result = await session.execute(select(User).where(User.email == email))
        if result.scalars().first():
            logger.info("Admin %s already exists, skipping", email)
            return False

        admin = User(
            email=email,
            password_hash=hash_password(password),
            role="super_admin",
            is_verified=True,
            is_active=True
        )
        session.add(admin)
        await session.commit()
        logger.info("Admin user %s created", email)
        return True


async def main():
    if not SUPER_ADMIN_EMAIL or not SUPER_ADMIN_PASSWORD:
        raise SystemExit("SUPER_ADMIN_EMAIL and SUPER_ADMIN_PASSWORD must be set")
    await init_models()
    await create_admin(SUPER_ADMIN_EMAIL, SUPER_ADMIN_PASSWORD)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
