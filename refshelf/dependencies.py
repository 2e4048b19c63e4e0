"""FastAPI dependency injection providers."""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .auth.clock import Clock, utcnow
from .auth.credentials import CredentialVerifier
from .auth.errors import CredentialError
from .auth.issuer import TokenIssuer
from .auth.lifecycle import SessionLifecycle
from .auth.settings import AuthSettings
from .auth.store import TokenStore
from .auth.sweeper import TokenSweeper
from .auth.validator import TokenValidator
from .config import RefshelfConfig, get_config
from .database import get_session, get_session_factory
from .utils.rate_limiter import RateLimiter

_config_instance: RefshelfConfig | None = None
_auth_settings: AuthSettings | None = None
_clock: Clock = utcnow
_token_store: TokenStore | None = None
_session_lifecycle: SessionLifecycle | None = None
_token_sweeper: TokenSweeper | None = None

security_scheme = HTTPBearer(auto_error=False)


def get_app_config() -> RefshelfConfig:
    """Get the application config singleton."""
    global _config_instance
    if _config_instance is None:
        _config_instance = get_config()
    return _config_instance


async def get_db(config: RefshelfConfig = Depends(get_app_config)):
    """Get an async database session."""
    async for session in get_session(config):
        yield session


def get_auth_settings() -> AuthSettings:
    """Get the immutable auth settings. Raises ConfigurationError without a secret."""
    global _auth_settings
    if _auth_settings is None:
        _auth_settings = AuthSettings.from_config(get_app_config())
    return _auth_settings


def get_token_store() -> TokenStore:
    global _token_store
    if _token_store is None:
        factory = get_session_factory(get_app_config())
        _token_store = TokenStore(factory, clock=_clock)
    return _token_store


def get_session_lifecycle() -> SessionLifecycle:
    """Get the session lifecycle singleton, wiring its collaborators on first use."""
    global _session_lifecycle
    if _session_lifecycle is None:
        config = get_app_config()
        settings = get_auth_settings()
        store = get_token_store()
        credentials = CredentialVerifier(
            get_session_factory(config),
            limiter=RateLimiter(
                max_attempts=config.login_max_attempts,
                window_seconds=config.login_window_seconds,
            ),
            min_password_length=config.min_password_length,
            clock=_clock,
        )
        _session_lifecycle = SessionLifecycle(
            credentials=credentials,
            issuer=TokenIssuer(settings, clock=_clock),
            store=store,
            validator=TokenValidator(settings, store, clock=_clock),
            registration_enabled=config.register_enabled,
        )
    return _session_lifecycle


def get_token_sweeper() -> TokenSweeper:
    global _token_sweeper
    if _token_sweeper is None:
        _token_sweeper = TokenSweeper(
            get_token_store(),
            interval_seconds=get_app_config().token_sweep_interval_seconds,
        )
    return _token_sweeper


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
) -> Optional[str]:
    """Read the bearer token from the Authorization header, or None."""
    if credentials is None:
        return None
    return credentials.credentials.strip() or None


async def get_current_user_id(
    token: Optional[str] = Depends(get_bearer_token),
    lifecycle: SessionLifecycle = Depends(get_session_lifecycle),
) -> int:
    """Resolve the authenticated user id or reject the request with 401."""
    user_id = await lifecycle.get_user_id(token)
    if user_id is None:
        raise CredentialError("Unauthorized")
    return user_id
