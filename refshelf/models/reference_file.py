"""Reference file model. One row per image on the shelf, grouped by directory."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ReferenceFile(Base):
    __tablename__ = "reference_files"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(600), nullable=False)
    directory: Mapped[str] = mapped_column(String(600), nullable=False, index=True)
    src: Mapped[str] = mapped_column(String(600), unique=True, nullable=False)
    thumbnail: Mapped[Optional[str]] = mapped_column(String(600), nullable=True)
    corrupted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now(), nullable=True
    )
