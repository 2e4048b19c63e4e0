"""Shared test fixtures."""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from refshelf.auth.credentials import CredentialVerifier
from refshelf.auth.issuer import TokenIssuer
from refshelf.auth.lifecycle import SessionLifecycle
from refshelf.auth.settings import AuthSettings
from refshelf.auth.store import TokenStore
from refshelf.auth.validator import TokenValidator
from refshelf.database import enable_sqlite_foreign_keys
from refshelf.models.base import Base
from refshelf.models.user import User
from refshelf.utils.rate_limiter import RateLimiter
from refshelf.utils.security import hash_password

from fakes import TEST_PASSWORD, TEST_SECRET, FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine shared across sessions via StaticPool."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def auth_settings():
    return AuthSettings(
        secret_key=TEST_SECRET,
        expiry_seconds=3600,
        issuer="TestIssuer",
        audience="TestAudience",
    )


@pytest.fixture
def store(session_factory, clock):
    return TokenStore(session_factory, clock=clock)


@pytest.fixture
def issuer(auth_settings, clock):
    return TokenIssuer(auth_settings, clock=clock)


@pytest.fixture
def validator(auth_settings, store, clock):
    return TokenValidator(auth_settings, store, clock=clock)


@pytest.fixture
def credentials(session_factory, clock):
    return CredentialVerifier(
        session_factory,
        limiter=RateLimiter(max_attempts=5, window_seconds=300),
        min_password_length=8,
        clock=clock,
    )


@pytest.fixture
def lifecycle(credentials, issuer, store, validator):
    return SessionLifecycle(
        credentials=credentials,
        issuer=issuer,
        store=store,
        validator=validator,
        registration_enabled=True,
    )


@pytest.fixture
def make_user(session_factory):
    """Factory fixture: insert a user and return its id."""

    async def _make_user(
        email: str = "reader@example.com",
        password: str = TEST_PASSWORD,
        username: str | None = None,
        verified: bool = True,
    ) -> int:
        async with session_factory() as session:
            user = User(
                email=email,
                username=username or email.split("@")[0],
                password_hash=hash_password(password),
                verified=verified,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user.id

    return _make_user
