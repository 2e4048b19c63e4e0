"""Integration test fixtures — in-memory app, async client, seeded reader account."""

import os
import tempfile

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

# Force test config BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-integration-tests"
os.environ["REGISTER_ENABLED"] = "true"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="refshelf-logs-")

import refshelf.database as db_mod
import refshelf.dependencies as dep_mod
from refshelf.auth.clock import utcnow

from fakes import TEST_PASSWORD

READER_EMAIL = "reader@example.com"


def _reset_singletons():
    """Reset all module-level singletons so each test starts clean."""
    db_mod._engine = None
    db_mod._session_factory = None
    dep_mod._config_instance = None
    dep_mod._auth_settings = None
    dep_mod._clock = utcnow
    dep_mod._token_store = None
    dep_mod._session_lifecycle = None
    dep_mod._token_sweeper = None


@pytest_asyncio.fixture
async def test_app(clock):
    """Create test app with in-memory database (shared via StaticPool)."""
    _reset_singletons()

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db_mod.enable_sqlite_foreign_keys(engine)

    # Inject into database module BEFORE app import
    db_mod._engine = engine
    factory = async_sessionmaker(engine, expire_on_commit=False)
    db_mod._session_factory = factory
    dep_mod._clock = clock

    dep_mod.get_app_config()

    from refshelf.main import app
    from refshelf.models.base import Base
    from refshelf.models.user import User
    from refshelf.utils.security import hash_password

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with factory() as session:
        session.add(
            User(
                email=READER_EMAIL,
                username="reader",
                password_hash=hash_password(TEST_PASSWORD),
                verified=True,
            )
        )
        await session.commit()

    yield app

    await engine.dispose()
    _reset_singletons()


@pytest_asyncio.fixture
async def client(test_app):
    """Async HTTP client for testing."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def reader_token(client):
    resp = await client.post("/log-in", json={"email": READER_EMAIL, "password": TEST_PASSWORD})
    assert resp.status_code == 200, f"Login failed: {resp.text}"
    return resp.json()["data"]["token"]


@pytest_asyncio.fixture
async def shelf_files(test_app):
    """Seed two catalogs of reference files; returns ids keyed by file name."""
    from refshelf.models.reference_file import ReferenceFile

    rows = [
        ("pose-01.jpg", "figures/poses"),
        ("pose-02.jpg", "figures/poses"),
        ("hands-01.jpg", "figures/hands"),
        ("oak.jpg", "nature/trees"),
    ]
    ids = {}
    async with db_mod._session_factory() as session:
        for name, directory in rows:
            rf = ReferenceFile(
                name=name,
                directory=directory,
                src=f"/media/{directory}/{name}",
                thumbnail=f"/thumbs/{directory}/{name}",
            )
            session.add(rf)
            await session.flush()
            ids[name] = rf.id
        await session.commit()
    return ids
