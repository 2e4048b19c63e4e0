"""Access token issuance."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..utils.security import create_access_token
from .clock import Clock, utcnow
from .settings import AuthSettings


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


class TokenIssuer:
    """Mints signed access tokens. Persisting them is the caller's job."""

    def __init__(self, settings: AuthSettings, clock: Clock = utcnow):
        self._settings = settings
        self._clock = clock

    def issue(self, user_id: int) -> IssuedToken:
        # Whole seconds so the exp claim and the stored expiry agree exactly
        now = self._clock().replace(microsecond=0)
        expires_at = now + timedelta(seconds=self._settings.expiry_seconds)
        issued_at = int(now.timestamp())

        claims = {
            "iss": self._settings.issuer,
            "aud": self._settings.audience,
            "iat": issued_at,
            "nbf": issued_at,
            "exp": int(expires_at.timestamp()),
            "sub": str(user_id),
            # Two logins in the same second must still yield distinct tokens
            "jti": uuid.uuid4().hex,
        }
        token = create_access_token(claims, self._settings.secret_key, self._settings.algorithm)
        return IssuedToken(token=token, expires_at=expires_at)
