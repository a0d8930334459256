import os

# Must be set before commerce_discounts.core.config is imported
os.environ["APP_ENV"] = "development"
os.environ["DB_TYPE"] = "sqlite"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import pytest
import pytest_asyncio
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from commerce_discounts.core.db import Base
from commerce_discounts.models import Channel, CustomerGroup
from commerce_discounts.services.discounts.discount_manager import DiscountManager

from helpers import NOW


@pytest.fixture
def manager():
    """Manager pinned to a fixed evaluation instant."""
    return DiscountManager(now=NOW)


# ============================================================================
# DATABASE FIXTURES
# ============================================================================


@pytest_asyncio.fixture
async def async_engine():
    """In-memory SQLite DB for fast testing."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine):
    session_factory = async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def web_channel(db_session):
    channel = Channel(name="Webstore", handle="webstore", default=True)
    db_session.add(channel)
    await db_session.commit()
    return channel


@pytest_asyncio.fixture
async def pos_channel(db_session):
    channel = Channel(name="Point of sale", handle="pos")
    db_session.add(channel)
    await db_session.commit()
    return channel


@pytest_asyncio.fixture
async def retail_group(db_session):
    group = CustomerGroup(name="Retail", handle="retail", default=True)
    db_session.add(group)
    await db_session.commit()
    return group


@pytest_asyncio.fixture
async def trade_group(db_session):
    group = CustomerGroup(name="Trade", handle="trade")
    db_session.add(group)
    await db_session.commit()
    return group
