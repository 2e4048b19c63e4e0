"""Security utilities: password hashing, JWT encode/decode, and password validation."""

import re
from datetime import datetime
from typing import Any, Optional

import bcrypt
import jwt
from jwt.exceptions import PyJWTError

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

REQUIRED_CLAIMS = ["iss", "aud", "iat", "nbf", "exp", "sub"]


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(
            plain_password.encode("utf-8"), hashed_password.encode("utf-8")
        )
    except ValueError:
        # Malformed stored hash or an over-long candidate never matches
        return False


def create_access_token(claims: dict[str, Any], secret_key: str, algorithm: str = "HS256") -> str:
    """Sign ``claims`` into a compact JWT."""
    return jwt.encode(claims, secret_key, algorithm=algorithm)


def decode_access_token(
    token: str,
    secret_key: str,
    algorithm: str,
    audience: str,
    issuer: str,
    now: datetime,
) -> Optional[dict[str, Any]]:
    """Decode and validate a JWT. Returns None on any failure.

    PyJWT checks the signature, algorithm, issuer, audience and claim
    presence. ``exp`` and ``nbf`` are checked here against ``now`` so the
    caller's clock decides token lifetime.
    """
    try:
        payload = jwt.decode(
            token,
            secret_key,
            algorithms=[algorithm],
            audience=audience,
            issuer=issuer,
            options={
                "require": REQUIRED_CLAIMS,
                "verify_exp": False,
                "verify_nbf": False,
                "verify_iat": False,
            },
        )
    except PyJWTError:
        return None

    exp = payload.get("exp")
    nbf = payload.get("nbf")
    if not isinstance(exp, (int, float)) or not isinstance(nbf, (int, float)):
        return None

    now_ts = now.timestamp()
    if now_ts >= exp or now_ts < nbf:
        return None
    return payload


def validate_password_strength(password: str, min_length: int = 8) -> None:
    """Validate password meets strength requirements. Raises ValueError on failure."""
    errors = []
    if len(password) < min_length:
        errors.append(f"at least {min_length} characters")
    if not re.search(r"[A-Z]", password):
        errors.append("an uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("a lowercase letter")
    if not re.search(r"\d", password):
        errors.append("a digit")
    if not re.search(r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?`~]", password):
        errors.append("a special character")

    if errors:
        raise ValueError(f"Password must contain {', '.join(errors)}")

    if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes long")
