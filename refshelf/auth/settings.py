"""Immutable auth settings, built once from the process config."""

from dataclasses import dataclass

from ..config import RefshelfConfig
from .errors import ConfigurationError

JWT_ALGORITHM = "HS256"


@dataclass(frozen=True)
class AuthSettings:
    secret_key: str
    expiry_seconds: int = 3600
    issuer: str = "DefaultIssuer"
    audience: str = "DefaultAudience"
    algorithm: str = JWT_ALGORITHM

    def __post_init__(self):
        if not self.secret_key:
            raise ConfigurationError("JWT_SECRET_KEY is not configured")
        if self.algorithm != JWT_ALGORITHM:
            raise ConfigurationError(f"Unsupported JWT algorithm {self.algorithm!r}")
        if self.expiry_seconds <= 0:
            raise ConfigurationError("JWT_EXPIRY_SECONDS must be positive")

    @classmethod
    def from_config(cls, config: RefshelfConfig) -> "AuthSettings":
        return cls(
            secret_key=config.jwt_secret_key or "",
            expiry_seconds=config.jwt_expiry_seconds,
            issuer=config.jwt_issuer,
            audience=config.jwt_audience,
        )

    def __repr__(self) -> str:
        return (
            f"AuthSettings(expiry_seconds={self.expiry_seconds}, issuer={self.issuer!r}, "
            f"audience={self.audience!r}, algorithm={self.algorithm!r})"
        )
