import os
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker


sys.path.append(str(Path(__file__).resolve().parent.parent))

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["TAGS_CACHE_TTL"] = "0"
os.environ["STORES_PAGE_SIZE"] = "4"

from storefinder.core.database import Base, configure_sqlite
from storefinder.repositories.store_repository import StoreRepository
from storefinder.repositories.user_repository import UserRepository
import storefinder.models  # noqa: F401


@pytest_asyncio.fixture
async def engine():
    engine = configure_sqlite(
        create_async_engine("sqlite+aiosqlite:///:memory:", echo=False, future=True)
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    async_session = sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    async with async_session() as session:
        yield session


@pytest_asyncio.fixture
async def author(session):
    return await UserRepository(session).create("Alice", chat_id=1001)


@pytest_asyncio.fixture
async def other_user(session):
    return await UserRepository(session).create("Bob", chat_id=1002)


@pytest.fixture
def store_data():
    def _store_data(name="Test Store", lng=30.52, lat=50.45, **extra):
        data = {
            "name": name,
            "location": {"coordinates": [lng, lat], "address": "Khreshchatyk 1"},
        }
        data.update(extra)
        return data

    return _store_data


@pytest.fixture
def make_store(session, author, store_data):
    async def _make_store(name="Test Store", owner=None, **kwargs):
        owner = owner or author
        return await StoreRepository(session).create(owner.id, store_data(name, **kwargs))

    return _make_store
