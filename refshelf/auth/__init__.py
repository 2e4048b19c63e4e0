"""JWT session layer: issuance, storage, validation and lifecycle."""

from .credentials import CredentialVerifier
from .errors import (
    AuthError,
    ConfigurationError,
    ConflictError,
    CredentialError,
    InvalidRegistrationError,
    MissingTokenError,
    RegistrationDisabledError,
    StorageError,
    ThrottleError,
)
from .issuer import IssuedToken, TokenIssuer
from .lifecycle import SessionLifecycle
from .settings import JWT_ALGORITHM, AuthSettings
from .store import TokenStore
from .sweeper import TokenSweeper
from .validator import TokenValidator

__all__ = [
    "AuthError",
    "AuthSettings",
    "ConfigurationError",
    "ConflictError",
    "CredentialError",
    "CredentialVerifier",
    "InvalidRegistrationError",
    "IssuedToken",
    "JWT_ALGORITHM",
    "MissingTokenError",
    "RegistrationDisabledError",
    "SessionLifecycle",
    "StorageError",
    "ThrottleError",
    "TokenIssuer",
    "TokenStore",
    "TokenSweeper",
    "TokenValidator",
]
