"""Durable token store: the authority on whether an issued token is still honoured."""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..models.jwt_token import ACCESS_TOKEN_TYPE, JWTToken
from ..utils.logging import get_logger
from .clock import Clock, utcnow
from .errors import StorageError

logger = get_logger("auth.store")


class TokenStore:
    """Maps token strings to their issuance records in the ``jwt_tokens`` table.

    Each operation opens its own short-lived session. "Now" comes from the
    injected clock rather than the database server so that the store and
    the validator always agree on time.
    """

    def __init__(
        self,
        db_session_factory: async_sessionmaker[AsyncSession],
        clock: Clock = utcnow,
    ):
        self._session_factory = db_session_factory
        self._clock = clock

    async def persist(
        self,
        user_id: int,
        token: str,
        expires_at: datetime,
        user_agent: Optional[str] = None,
    ) -> None:
        """Insert a record for a freshly issued token. Raises StorageError on failure."""
        try:
            async with self._session_factory() as session:
                session.add(
                    JWTToken(
                        user_id=user_id,
                        token=token,
                        token_type=ACCESS_TOKEN_TYPE,
                        user_agent=user_agent,
                        expires_at=expires_at,
                        created_at=self._clock(),
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("token_persist_failed", user_id=user_id, error=str(e))
            raise StorageError("Failed to store JWT token due to database error.") from e
        logger.debug("token_persisted", user_id=user_id, expires_at=expires_at.isoformat())

    async def is_live_and_stored(self, token: str) -> bool:
        """True iff a record for ``token`` exists and has not reached its expiry."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(JWTToken.id).where(
                        JWTToken.token == token,
                        JWTToken.expires_at > self._clock(),
                    )
                )
                return result.first() is not None
        except SQLAlchemyError as e:
            logger.warning("token_lookup_failed", error=str(e))
            return False

    async def touch(self, token: str) -> None:
        """Best-effort update of ``last_used_at``. Never raises."""
        try:
            async with self._session_factory() as session:
                await session.execute(
                    update(JWTToken)
                    .where(JWTToken.token == token)
                    .values(last_used_at=self._clock())
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.warning("token_touch_failed", error=str(e))

    async def delete(self, token: str) -> int:
        """Delete the record for ``token`` if present.

        Returns the number of rows removed; zero is not an error. Database
        errors propagate to the caller.
        """
        async with self._session_factory() as session:
            result = await session.execute(delete(JWTToken).where(JWTToken.token == token))
            await session.commit()
        return result.rowcount

    async def delete_for_user(self, user_id: int) -> int:
        """Delete every session belonging to ``user_id``. Database errors propagate."""
        async with self._session_factory() as session:
            result = await session.execute(delete(JWTToken).where(JWTToken.user_id == user_id))
            await session.commit()
        logger.info("user_tokens_deleted", user_id=user_id, deleted=result.rowcount)
        return result.rowcount

    async def sweep_expired(self) -> int:
        """Delete every record whose expiry is at or before now.

        Returns the count deleted. Failures are logged and reported as zero;
        cleanup must never get in the way of authentication.
        """
        now = self._clock()
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    delete(JWTToken).where(JWTToken.expires_at <= now)
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("token_sweep_failed", error=str(e))
            return 0

        if result.rowcount:
            logger.info("token_sweep_complete", deleted=result.rowcount)
        return result.rowcount
