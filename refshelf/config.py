"""Refshelf configuration system using Pydantic Settings."""

from __future__ import annotations

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RefshelfConfig(BaseSettings):
    """Main configuration class. Loads from .env file and environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "REFSHELF"
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 8000

    # Database
    database_url: str = "sqlite+aiosqlite:///./refshelf.db"
    db_timeout: int = 30

    # JWT
    jwt_secret_key: Optional[str] = None
    jwt_expiry_seconds: int = 3600
    jwt_issuer: str = "DefaultIssuer"
    jwt_audience: str = "DefaultAudience"
    token_sweep_interval_seconds: int = 300

    # Credentials
    register_enabled: bool = False
    login_max_attempts: int = 5
    login_window_seconds: int = 300
    min_password_length: int = 8

    # CORS
    cors_allowed_origin: str = "*"
    cors_allowed_headers: str = "Content-Type, Authorization, X-Requested-With"
    cors_max_age: int = 86400

    # Logging
    log_dir: str = "logs"
    log_max_bytes: int = 10_000_000
    log_backup_count: int = 5

    @field_validator("jwt_expiry_seconds", "token_sweep_interval_seconds")
    @classmethod
    def validate_positive_seconds(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive number of seconds")
        return v


def get_config() -> RefshelfConfig:
    """Factory function to create config instance."""
    return RefshelfConfig()
