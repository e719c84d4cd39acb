"""
Test infrastructure for the Conduit API.

Strategy
--------
- SQLite in-memory via aiosqlite removes the need for a running Postgres
  instance, keeping the suite fast and self-contained.
- StaticPool forces all async tasks to share the same in-memory database
  connection; SQLite in-memory databases are connection-scoped, so a new
  connection would see an empty database.
- The app's get_db dependency is overridden so every test-time request uses
  the test session factory rather than the production one.
- All tables are created fresh before each test and dropped after.
- Redis is disabled by setting cache._redis = None; the CacheManager treats
  that as a permanent miss, so the tag list is always read from the database.
- bcrypt runs at its minimum cost so registration/login stay fast.
"""
import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from conduit.cache import cache
from conduit.database import Base, commit, get_db, rollback
from conduit.main import app
from conduit.middleware import install_query_counter

# ---------------------------------------------------------------------------
# Test database engine: SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

install_query_counter(engine_test)

async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency override: replace production get_db with the test session factory
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await commit(session)
        except Exception:
            await rollback(session)
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """
    Yield a live AsyncSession for tests that call services directly or
    assert on stored rows.
    """
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """Yield an httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    cache._redis = None
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def register_and_login(async_client: AsyncClient):
    """
    Return a coroutine that registers *username*, logs in and returns the
    ``Authorization`` header for the new session.
    """

    async def _register_and_login(username: str, password: str = "secret-pw") -> dict:
        email = f"{username}@test.com"
        resp = await async_client.post("/api/users", json={
            "user": {"email": email, "password": password, "username": username},
        })
        assert resp.status_code == 201, resp.text
        resp = await async_client.post("/api/users/login", json={
            "user": {"email": email, "password": password},
        })
        assert resp.status_code == 201, resp.text
        return {"Authorization": f"Bearer {resp.json()['user']['token']}"}

    return _register_and_login
