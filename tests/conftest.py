"""
Pytest fixtures - test DB, client, auth and catalog data.
Isolated tests: fresh SQLite schema per test, in-memory token blacklist,
power computed in-process unless a test wires a calculation client.
"""

import os

# Set test env BEFORE any imports that read settings
os.environ["CALCULATION_SERVICE_URL"] = ""
os.environ["CALCULATION_SERVICE_TOKEN"] = "test-service-token"
os.environ["SECRET_KEY"] = "test-secret-key"
# The app engine shares the test database, for tests that run the real get_db
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"

import time
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from solarpanels.cache.redis_client import TokenBlacklist, get_token_blacklist
from solarpanels.clients.calculation_client import get_calculation_client
from solarpanels.core.security import create_access_token, hash_password
from solarpanels.db.base import Base
from solarpanels.db.models import SolarPanel, User
from solarpanels.db.session import get_db
from solarpanels.main import app

TEST_DATABASE_URL = os.environ["DATABASE_URL"]
PASSWORD = "password123"
PASSWORD_HASH = hash_password(PASSWORD)


class InMemoryRedis:
    """The three Redis commands the app uses, with TTLs, for tests."""

    def __init__(self):
        self._data: dict[str, tuple[str, float]] = {}

    async def setex(self, key: str, ttl_seconds: int, value: str) -> bool:
        self._data[key] = (value, time.monotonic() + ttl_seconds)
        return True

    async def exists(self, key: str) -> int:
        entry = self._data.get(key)
        if entry is None:
            return 0
        if entry[1] <= time.monotonic():
            del self._data[key]
            return 0
        return 1

    async def ping(self) -> bool:
        return True


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine) -> AsyncGenerator[AsyncSession, None]:
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as s:
        yield s


@pytest.fixture
def redis_client() -> InMemoryRedis:
    return InMemoryRedis()


@pytest_asyncio.fixture
async def client(session: AsyncSession, redis_client: InMemoryRedis):
    async def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_blacklist] = lambda: TokenBlacklist(redis_client)
    app.dependency_overrides[get_calculation_client] = lambda: None
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


async def create_user(session: AsyncSession, login: str, is_moderator: bool = False) -> User:
    user = User(login=login, hashed_password=PASSWORD_HASH, is_moderator=is_moderator)
    session.add(user)
    await session.flush()
    await session.refresh(user)
    return user


def headers_for(user: User) -> dict:
    token = create_access_token(user.id, user.role.value)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_user(session: AsyncSession) -> User:
    return await create_user(session, "alice")


@pytest_asyncio.fixture
async def other_user(session: AsyncSession) -> User:
    return await create_user(session, "bob")


@pytest_asyncio.fixture
async def moderator(session: AsyncSession) -> User:
    return await create_user(session, "moderator", is_moderator=True)


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    return headers_for(test_user)


@pytest.fixture
def other_headers(other_user: User) -> dict:
    return headers_for(other_user)


@pytest.fixture
def moderator_headers(moderator: User) -> dict:
    return headers_for(moderator)


@pytest_asyncio.fixture
async def panels(session: AsyncSession) -> dict[str, SolarPanel]:
    """`reference`: 300 W on 1000x2000 mm (2 m2); `square`: 400 W on 1 m2; `retired`: soft-deleted."""
    catalog = {
        "reference": SolarPanel(title="Reference 300", type="monocrystalline", power=300, width=1000, height=2000),
        "square": SolarPanel(title="Square 400", type="polycrystalline", power=400, width=1000, height=1000),
        "retired": SolarPanel(
            title="Retired 250", type="thin-film", power=250, width=1000, height=1000, is_deleted=True
        ),
    }
    session.add_all(catalog.values())
    await session.flush()
    return catalog


@pytest.fixture
def password() -> str:
    """Plain password of every fixture user."""
    return PASSWORD
