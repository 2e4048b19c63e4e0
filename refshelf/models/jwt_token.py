"""Issued JWT model. A row exists for every token that is still honoured."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base

ACCESS_TOKEN_TYPE = "access"

# Unique-indexable on MySQL utf8mb4 (4 bytes per char, 3072-byte key limit)
TOKEN_MAX_LENGTH = 512


class JWTToken(Base):
    __tablename__ = "jwt_tokens"
    __table_args__ = (
        Index("ix_jwt_tokens_token", "token", unique=True),
        Index("ix_jwt_tokens_user_id", "user_id"),
        Index("ix_jwt_tokens_expires_at", "expires_at"),
        Index("ix_jwt_tokens_user_token_type", "user_id", "token_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    token: Mapped[str] = mapped_column(String(TOKEN_MAX_LENGTH), nullable=False)
    token_type: Mapped[str] = mapped_column(
        String(50), default=ACCESS_TOKEN_TYPE, nullable=False
    )
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    last_used_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
