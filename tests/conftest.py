import os

# Point the app at SQLite before app.config builds its settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("ENABLE_PROVIDER_NL_TO_RULES", "false")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.main import app
from app.database import Base, get_db
from app.api.deps import get_rule_inferencer
from app.models.customer import Customer
from app.services.audience_rules import RuleInferenceConfig, RuleInferencer
from tests.factories import CustomerFactory

# Test database URL (SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"


@pytest_asyncio.fixture
async def test_db():
    """Create test database and tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(test_db: AsyncSession):
    """Create test client with overridden database and a local-only inferencer."""

    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_rule_inferencer] = lambda: RuleInferencer(RuleInferenceConfig())

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def make_customers(test_db: AsyncSession):
    """Insert customers built by CustomerFactory; keyword overrides per customer."""

    async def _make(*overrides: dict) -> list[Customer]:
        customers = [Customer(**CustomerFactory(**data)) for data in overrides]
        test_db.add_all(customers)
        await test_db.commit()
        for customer in customers:
            await test_db.refresh(customer)
        return customers

    return _make
