"""Application settings using Pydantic BaseSettings."""

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_default_db_path() -> str:
    """Get absolute path to default SQLite database."""
    # member_api/config/ -> member_api/
    config_dir = os.path.dirname(os.path.abspath(__file__))
    package_dir = os.path.dirname(config_dir)
    db_path = os.path.join(package_dir, "data", "members.db")
    return f"sqlite:///{db_path}"


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    environment: str = Field(default="development")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=9876)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)

    # Security
    cors_origins: str = Field(default="http://localhost:3000")
    max_request_bytes: int = Field(default=1048576)
    # Comma-separated peer addresses allowed to set X-Forwarded-For
    trusted_proxies: str = Field(default="")
    session_ttl_seconds: int = Field(default=86400)

    # Login protection: per-client sliding window
    login_max_attempts: int = Field(default=10)
    login_window_seconds: int = Field(default=300)
    login_block_seconds: int = Field(default=900)
    login_sweep_interval_seconds: int = Field(default=60)

    # Login protection: per-account lockout
    account_max_failed_attempts: int = Field(default=5)
    account_lock_seconds: int = Field(default=1800)

    # Bootstrap admin (created at startup if the email is not registered)
    bootstrap_admin_enabled: bool = Field(default=False)
    bootstrap_admin_name: str = Field(default="Administrator")
    bootstrap_admin_email: str = Field(default="")
    bootstrap_admin_password: str = Field(default="")

    # Database
    database_url: str = Field(default_factory=_get_default_db_path)

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if not self.cors_origins:
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def trusted_proxies_set(self) -> frozenset[str]:
        """Parse trusted proxy addresses from comma-separated string."""
        return frozenset(p.strip() for p in self.trusted_proxies.split(",") if p.strip())

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment.lower() == "production"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        vv = (v or "").strip().lower()
        if vv not in {"development", "staging", "production"}:
            raise ValueError("ENVIRONMENT must be one of: development, staging, production")
        return vv

    @field_validator(
        "login_max_attempts",
        "login_window_seconds",
        "login_block_seconds",
        "login_sweep_interval_seconds",
        "account_max_failed_attempts",
        "account_lock_seconds",
        "session_ttl_seconds",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: str, info):  # type: ignore[override]
        env = (info.data.get("environment") or "development").strip().lower()
        origins = [o.strip() for o in (v or "").split(",") if o.strip()]
        if env == "production":
            # Fail closed: require https origins only.
            bad = [o for o in origins if o.startswith("http://")]
            if bad:
                raise ValueError(f"In production, CORS_ORIGINS must be https-only; got: {bad}")
        return v

    @model_validator(mode="after")
    def validate_cross_field_constraints(self) -> "Settings":
        # Expired blocks must be swept within one block period.
        if self.login_sweep_interval_seconds > self.login_block_seconds:
            raise ValueError(
                "LOGIN_SWEEP_INTERVAL_SECONDS must not exceed LOGIN_BLOCK_SECONDS"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
