"""Bearer token validation: signature and claims, then the store."""

from typing import Optional

from ..utils.logging import get_logger
from ..utils.security import decode_access_token
from .clock import Clock, utcnow
from .settings import AuthSettings
from .store import TokenStore

logger = get_logger("auth.validator")


class TokenValidator:
    """Resolves a bearer token to a user id, or None when it is not honoured.

    A token passes only if its signature and claims verify AND a live record
    for it exists in the store. The signature proves the token was minted
    here; the store record proves it has not been revoked by logout or
    removed by the sweep. Neither check is trusted alone.
    """

    def __init__(self, settings: AuthSettings, store: TokenStore, clock: Clock = utcnow):
        self._settings = settings
        self._store = store
        self._clock = clock

    async def validate(self, token: Optional[str]) -> Optional[int]:
        """User id for an honoured token, None otherwise. Never raises."""
        if not token:
            return None

        payload = decode_access_token(
            token,
            self._settings.secret_key,
            self._settings.algorithm,
            audience=self._settings.audience,
            issuer=self._settings.issuer,
            now=self._clock(),
        )
        if payload is None:
            logger.debug("token_rejected", reason="claims")
            return None

        try:
            stored = await self._store.is_live_and_stored(token)
        except Exception as e:
            logger.warning("token_store_unavailable", error=str(e))
            return None
        if not stored:
            logger.debug("token_rejected", reason="not_stored")
            return None

        sub = payload.get("sub")
        if not isinstance(sub, str) or not (sub.isascii() and sub.isdigit()):
            logger.debug("token_rejected", reason="subject")
            return None

        try:
            await self._store.touch(token)
        except Exception as e:
            logger.warning("token_touch_failed", error=str(e))
        return int(sub)
