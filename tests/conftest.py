import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import fnmatch

import httpx
import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.main import app
from app.models.models import User
from app.services.repository import Repository


class InMemoryRedis:
    """The subset of the redis.asyncio client the API uses, backed by a dict."""

    def __init__(self):
        self.store = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self.store[key] = value
        return True

    async def delete(self, *keys):
        return sum(1 for k in keys if self.store.pop(k, None) is not None)

    async def exists(self, key):
        return int(key in self.store)

    async def ping(self):
        return True

    async def scan_iter(self, match="*"):
        for key in list(self.store):
            if fnmatch.fnmatch(key, match):
                yield key

    async def aclose(self):
        pass


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


async def make_user(db, email, display_name):
    return await Repository(db, User).create(
        email=email, password_hash="not-a-real-hash", display_name=display_name
    )


@pytest.fixture
async def alice(db):
    return await make_user(db, "alice@acme-sec.io", "Alice")


@pytest.fixture
async def bob(db):
    return await make_user(db, "bob@acme-sec.io", "Bob")


@pytest.fixture
def fake_redis(monkeypatch):
    fake = InMemoryRedis()
    monkeypatch.setattr("app.core.redis.redis_client", fake)
    monkeypatch.setattr("app.services.auth.redis_client", fake)
    monkeypatch.setattr("app.routes.health.redis_client", fake)
    return fake


@pytest.fixture
async def client(session_factory, fake_redis):
    async def _get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test/api") as ac:
        yield ac
    app.dependency_overrides.clear()


async def register(client, email, display_name="Analyst", password="s3cret-pass"):
    """Register an account and return its bearer headers and user payload."""
    resp = await client.post(
        "/auth/register",
        json={"email": email, "password": password, "display_name": display_name},
    )
    assert resp.status_code == 201, resp.text
    body = resp.json()
    return {"Authorization": f"Bearer {body['access_token']}"}, body["user"]


@pytest.fixture
async def alice_auth(client):
    return await register(client, "alice@acme-sec.io", "Alice")


@pytest.fixture
async def bob_auth(client):
    return await register(client, "bob@acme-sec.io", "Bob")
