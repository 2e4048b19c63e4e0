"""Login, logout and registration on top of the token components."""

import re
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from ..utils.logging import get_logger
from .credentials import (
    CredentialVerifier,
    DuplicateUsernameError,
    EmailNotVerifiedError,
    InvalidEmailError,
    InvalidPasswordError,
    TooManyRequestsError,
    UserAlreadyExistsError,
)
from .errors import (
    AuthError,
    ConflictError,
    CredentialError,
    InvalidRegistrationError,
    MissingTokenError,
    RegistrationDisabledError,
    StorageError,
    ThrottleError,
)
from .issuer import TokenIssuer
from .store import TokenStore
from .validator import TokenValidator

logger = get_logger("auth.lifecycle")

# Control characters, slash, colon and backslash
INVALID_USERNAME_PATTERN = re.compile(r"[\x00-\x1f\x7f/:\\]")


class SessionLifecycle:
    """Orchestrates the token components for the HTTP layer.

    ``login`` and ``logout`` raise typed AuthErrors carrying an HTTP status.
    ``is_authenticated`` and ``get_user_id`` are predicates and never raise.
    """

    def __init__(
        self,
        credentials: CredentialVerifier,
        issuer: TokenIssuer,
        store: TokenStore,
        validator: TokenValidator,
        registration_enabled: bool = False,
    ):
        self._credentials = credentials
        self._issuer = issuer
        self._store = store
        self._validator = validator
        self.registration_enabled = registration_enabled

    async def login(self, email: str, password: str, user_agent: Optional[str] = None) -> str:
        """Verify credentials and return a freshly issued, persisted token."""
        try:
            user_id = await self._credentials.verify(email, password)
        except (InvalidEmailError, InvalidPasswordError, EmailNotVerifiedError) as e:
            logger.info("login_failed", reason=type(e).__name__)
            raise CredentialError(str(e)) from e
        except TooManyRequestsError as e:
            logger.warning("login_throttled")
            raise ThrottleError("Too many login requests") from e
        except Exception as e:
            logger.error("login_error", error=str(e), exc_info=True)
            raise AuthError("Login failed due to an unexpected error.") from e

        issued = self._issuer.issue(user_id)
        # A token the store does not know about could never be revoked
        await self._store.persist(user_id, issued.token, issued.expires_at, user_agent)

        logger.info("login_succeeded", user_id=user_id)
        return issued.token

    async def logout(self, token: Optional[str]) -> None:
        """Delete the record for ``token``. Unknown tokens are a no-op."""
        if not token:
            raise MissingTokenError()
        try:
            deleted = await self._store.delete(token)
        except SQLAlchemyError as e:
            logger.error("logout_failed", error=str(e))
            raise StorageError("Logout failed due to a database error.") from e
        logger.info("logout", deleted=deleted)

    async def get_user_id(self, token: Optional[str]) -> Optional[int]:
        try:
            return await self._validator.validate(token)
        except Exception as e:
            logger.warning("token_validation_error", error=str(e))
            return None

    async def is_authenticated(self, token: Optional[str]) -> bool:
        return await self.get_user_id(token) is not None

    async def register(self, email: str, password: str, username: str) -> str:
        if not self.registration_enabled:
            raise RegistrationDisabledError()
        if not username or INVALID_USERNAME_PATTERN.search(username):
            raise InvalidRegistrationError("Invalid characters in username or username empty.")

        try:
            user_id = await self._credentials.register(email, password, username)
        except InvalidEmailError as e:
            raise InvalidRegistrationError("Invalid email address!") from e
        except InvalidPasswordError as e:
            raise InvalidRegistrationError(f"Invalid password! {e}") from e
        except UserAlreadyExistsError as e:
            raise ConflictError("Email address already exists!") from e
        except DuplicateUsernameError as e:
            raise ConflictError("Username already exists!") from e
        except TooManyRequestsError as e:
            raise ThrottleError("Too many registration requests!") from e
        except Exception as e:
            logger.error("registration_error", error=str(e), exc_info=True)
            raise AuthError("Registration failed due to an unexpected error.") from e

        return f"We have signed up a new user with the ID {user_id}"
