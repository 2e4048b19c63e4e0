"""SQLAlchemy ORM models for Refshelf."""

from .base import Base
from .user import User
from .jwt_token import ACCESS_TOKEN_TYPE, JWTToken
from .reference_file import ReferenceFile
from .favorite import Favorite

__all__ = [
    "Base",
    "User",
    "JWTToken",
    "ACCESS_TOKEN_TYPE",
    "ReferenceFile",
    "Favorite",
]
