"""Pytest fixtures for the auth service backend."""

import math
from collections.abc import AsyncIterator, Iterator, Mapping
from pathlib import Path

from alembic import command
from alembic.config import Config
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from api.deps import get_db
from app import create_app
from core.config import settings
from services.auth import RedisCacheStore

TEST_BCRYPT_ROUNDS = 4


def _run_alembic_migrations(database_url: str) -> None:
    """Apply Alembic migrations to the given database URL."""
    backend_dir = Path(__file__).resolve().parents[1]
    alembic_cfg = Config(str(backend_dir / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(backend_dir / "alembic"))

    original_database_url = settings.database_url
    try:
        settings.database_url = database_url
        command.upgrade(alembic_cfg, "head")
    finally:
        settings.database_url = original_database_url


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryRedis:
    """Subset of the async Redis client used by ``RedisCacheStore``."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self.strings: dict[str, str] = {}
        self.zsets: dict[str, dict[str, float]] = {}
        self.expiry: dict[str, float] = {}

    def _purge(self, name: str) -> None:
        deadline = self.expiry.get(name)
        if deadline is not None and deadline <= self.clock():
            self.strings.pop(name, None)
            self.zsets.pop(name, None)
            self.expiry.pop(name, None)

    def _exists(self, name: str) -> bool:
        self._purge(name)
        return name in self.strings or name in self.zsets

    async def set(self, name: str, value: str, ex: int | None = None) -> bool:
        self.zsets.pop(name, None)
        self.strings[name] = value
        if ex is None:
            self.expiry.pop(name, None)
        else:
            self.expiry[name] = self.clock() + ex
        return True

    async def get(self, name: str) -> str | None:
        self._purge(name)
        return self.strings.get(name)

    async def delete(self, *names: str) -> int:
        removed = 0
        for name in names:
            if self._exists(name):
                removed += 1
            self.strings.pop(name, None)
            self.zsets.pop(name, None)
            self.expiry.pop(name, None)
        return removed

    async def zadd(self, name: str, mapping: Mapping[str, float]) -> int:
        self._purge(name)
        members = self.zsets.setdefault(name, {})
        added = sum(1 for member in mapping if member not in members)
        members.update(mapping)
        return added

    async def zscore(self, name: str, value: str) -> float | None:
        self._purge(name)
        return self.zsets.get(name, {}).get(value)

    async def zremrangebyscore(self, name: str, min: float | str, max: float | str) -> int:
        self._purge(name)
        members = self.zsets.get(name, {})
        low, high = float(min), float(max)
        doomed = [member for member, score in members.items() if low <= score <= high]
        for member in doomed:
            del members[member]
        return len(doomed)

    async def ttl(self, name: str) -> int:
        if not self._exists(name):
            return -2
        deadline = self.expiry.get(name)
        if deadline is None:
            return -1
        return math.ceil(deadline - self.clock())

    async def expire(self, name: str, time: int) -> bool:
        if not self._exists(name):
            return False
        self.expiry[name] = self.clock() + time
        return True


@pytest.fixture(scope="session", autouse=True)
def _fast_password_hashing() -> Iterator[None]:
    original = settings.bcrypt_rounds
    settings.bcrypt_rounds = TEST_BCRYPT_ROUNDS
    yield
    settings.bcrypt_rounds = original


@pytest.fixture(scope="session")
def test_database_url(tmp_path_factory) -> str:
    """Create and migrate a file-backed SQLite database for tests."""
    db_dir = tmp_path_factory.mktemp("sqlite")
    db_path = db_dir / "backend-test.db"
    database_url = f"sqlite+aiosqlite:///{db_path}"
    _run_alembic_migrations(database_url)
    return database_url


@pytest_asyncio.fixture()
async def test_engine(test_database_url: str) -> AsyncIterator:
    """Create an async engine bound to the migrated SQLite test database."""
    engine = create_async_engine(
        test_database_url,
        connect_args={"check_same_thread": False},
    )
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_maker(test_engine) -> async_sessionmaker[AsyncSession]:
    """Return a session factory bound to the test engine."""
    return async_sessionmaker(test_engine, expire_on_commit=False)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def fake_redis(clock: FakeClock) -> InMemoryRedis:
    return InMemoryRedis(clock)


@pytest.fixture()
def cache_store(fake_redis: InMemoryRedis, clock: FakeClock) -> RedisCacheStore:
    return RedisCacheStore(fake_redis, clock=clock)


@pytest.fixture()
def app(session_maker, cache_store: RedisCacheStore) -> Iterator[FastAPI]:
    """Create the FastAPI app with test database and cache overrides."""
    application = create_app(cache_store=cache_store)

    async def override_get_db() -> AsyncIterator[AsyncSession]:
        async with session_maker() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    yield application


@pytest_asyncio.fixture()
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Return an HTTPX async client bound to the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest_asyncio.fixture(autouse=True)
async def clean_database(session_maker) -> AsyncIterator[None]:
    """Clear tables before each test to guarantee isolation."""
    async with session_maker() as session:
        for table in reversed(SQLModel.metadata.sorted_tables):
            await session.execute(table.delete())
        await session.commit()
    yield


@pytest_asyncio.fixture()
async def db_session(session_maker) -> AsyncIterator[AsyncSession]:
    """Provide a raw database session to tests."""
    async with session_maker() as session:
        yield session
