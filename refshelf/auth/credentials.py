"""Email/password credential checks backed by the ``users`` table.

The session layer only depends on ``verify`` and ``register`` and on the
outcome exceptions defined here, so another identity backend can be dropped
in as long as it raises the same ones.
"""

from typing import Optional

from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models.user import User
from ..utils.logging import get_logger
from ..utils.rate_limiter import RateLimiter
from ..utils.security import hash_password, validate_password_strength, verify_password
from .clock import Clock, utcnow

logger = get_logger("auth.credentials")

_email_adapter = TypeAdapter(EmailStr)


class CredentialOutcome(Exception):
    """Base for every non-success outcome of a credential operation."""


class InvalidEmailError(CredentialOutcome):
    pass


class InvalidPasswordError(CredentialOutcome):
    pass


class EmailNotVerifiedError(CredentialOutcome):
    pass


class TooManyRequestsError(CredentialOutcome):
    pass


class UserAlreadyExistsError(CredentialOutcome):
    pass


class DuplicateUsernameError(CredentialOutcome):
    pass


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    try:
        _email_adapter.validate_python(email)
    except ValidationError:
        return False
    return True


class CredentialVerifier:
    """Checks and creates email/password credentials, throttling repeated failures."""

    def __init__(
        self,
        db_session_factory: async_sessionmaker[AsyncSession],
        limiter: Optional[RateLimiter] = None,
        min_password_length: int = 8,
        clock: Clock = utcnow,
    ):
        self._session_factory = db_session_factory
        self._limiter = limiter or RateLimiter()
        self._min_password_length = min_password_length
        self._clock = clock

    async def verify(self, email: str, password: str) -> int:
        """Return the user id for a valid, verified email/password pair."""
        email = _normalize_email(email)
        throttle_key = f"login:{email}"
        if self._limiter.is_rate_limited(throttle_key):
            raise TooManyRequestsError("Too many login requests")

        if not is_valid_email(email):
            self._limiter.record_attempt(throttle_key)
            raise InvalidEmailError("Invalid email address")

        async with self._session_factory() as session:
            result = await session.execute(select(User).where(User.email == email))
            user = result.scalar_one_or_none()

            if user is None:
                self._limiter.record_attempt(throttle_key)
                raise InvalidEmailError("Wrong email address")

            if not verify_password(password, user.password_hash):
                self._limiter.record_attempt(throttle_key)
                raise InvalidPasswordError("Wrong password")

            if not user.verified:
                raise EmailNotVerifiedError("Email not verified")

            self._limiter.reset(throttle_key)
            user.last_login = self._clock()
            await session.commit()
            return user.id

    async def register(self, email: str, password: str, username: str) -> int:
        """Create a verified user and return its id."""
        email = _normalize_email(email)
        throttle_key = f"register:{email}"
        if self._limiter.is_rate_limited(throttle_key):
            raise TooManyRequestsError("Too many registration requests")
        self._limiter.record_attempt(throttle_key)

        if not is_valid_email(email):
            raise InvalidEmailError("Invalid email address")

        try:
            validate_password_strength(password, min_length=self._min_password_length)
        except ValueError as e:
            raise InvalidPasswordError(str(e)) from e

        async with self._session_factory() as session:
            existing = await session.execute(select(User.id).where(User.email == email))
            if existing.first() is not None:
                raise UserAlreadyExistsError("Email address already exists")

            existing = await session.execute(select(User.id).where(User.username == username))
            if existing.first() is not None:
                raise DuplicateUsernameError("Username already exists")

            user = User(
                email=email,
                username=username,
                password_hash=hash_password(password),
                verified=True,
            )
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as e:
                # Lost a race with a concurrent registration
                await session.rollback()
                raise UserAlreadyExistsError("Email address or username already exists") from e
            await session.refresh(user)

        logger.info("user_registered", user_id=user.id)
        return user.id
