"""Auth error taxonomy. Each error carries the HTTP status the API renders it with."""

from typing import Optional


class AuthError(Exception):
    """Base class for auth failures surfaced to the HTTP layer."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ConfigurationError(AuthError):
    """Required auth configuration is missing. Fatal at startup."""

    default_message = "JWT_SECRET_KEY is not configured"


class CredentialError(AuthError):
    status_code = 401
    default_message = "Unauthorized"


class ThrottleError(AuthError):
    status_code = 429
    default_message = "Too Many Requests"


class StorageError(AuthError):
    default_message = "Token storage failed"


class MissingTokenError(AuthError):
    status_code = 400
    default_message = "No token provided for logout."


class InvalidRegistrationError(AuthError):
    status_code = 400
    default_message = "Bad Request"


class ConflictError(AuthError):
    status_code = 409
    default_message = "Conflict"


class RegistrationDisabledError(AuthError):
    status_code = 503
    default_message = "Registration is disabled."
