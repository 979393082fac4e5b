import os

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["DB_TYPE"] = "sqlite"
os.environ.setdefault("ENVIRONMENT", "test")

from decimal import Decimal

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.future import select
from sqlalchemy.orm import sessionmaker

from main import app
from marketplace.core.db import Base, get_db, enable_sqlite_foreign_keys
from marketplace.core.rate_limit import limiter
from marketplace.core.security import hash_password
from marketplace.models.product_models import Product
from marketplace.models.seller_models import Seller, SellerStatus
from marketplace.models.user_models import User
from marketplace.services.auth_services.auth_service import create_token

PASSWORD = "correct-horse-battery"


# ---------------------------
# DATABASE
# ---------------------------
@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    event.listen(engine.sync_engine, "connect", enable_sqlite_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    limiter.reset()
    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------
# FACTORIES
# ---------------------------
async def create_user(db, email, role="customer", password=PASSWORD, seller_status=SellerStatus.active):
    user = User(email=email, role=role, password_hash=hash_password(password), is_verified=True)
    db.add(user)
    await db.flush()
    if role == "seller":
        db.add(Seller(user_id=user.id, store_name=f"{email.split('@')[0]} store", status=seller_status.value))
    await db.commit()
    return user


async def seller_of(db, user):
    result = await db.execute(
        select(Seller).where(Seller.user_id == user.id).execution_options(populate_existing=True)
    )
    return result.scalars().first()


async def create_product(db, seller, **fields):
    values = {
        "name": "Walnut Desk",
        "description": "Hand finished walnut desk",
        "price": Decimal("100.00"),
        "category": "furniture",
        "stock": 5,
        "allow_bargain": True,
        "min_bargain_price": Decimal("40.00"),
    }
    values.update(fields)
    product = Product(seller_id=seller.id, **values)
    db.add(product)
    await db.commit()
    return product


def auth(user):
    return {"Authorization": f"Bearer {create_token(user)}"}


# ---------------------------
# FIXTURES
# ---------------------------
@pytest.fixture
async def customer(db):
    return await create_user(db, "buyer@market.dev")


@pytest.fixture
async def other_customer(db):
    return await create_user(db, "second.buyer@market.dev")


@pytest.fixture
async def seller_user(db):
    return await create_user(db, "maker@market.dev", role="seller")


@pytest.fixture
async def seller(db, seller_user):
    return await seller_of(db, seller_user)


@pytest.fixture
async def admin(db):
    return await create_user(db, "admin@market.dev", role="super_admin")


@pytest.fixture
async def product(db, seller):
    return await create_product(db, seller)
