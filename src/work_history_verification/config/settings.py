"""
Configuration management for Work History Verification.

This module provides environment-based configuration using Pydantic BaseSettings,
so the gateway location, per-step timeouts, batch throttle and retry bound are
injected rather than hard-coded.

Environment variables are loaded with the WHV_ prefix, e.g.
WHV_GATEWAY_PROXY_URL overrides ``gateway_proxy_url``.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

import structlog
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from work_history_verification import __version__

logger = structlog.get_logger(__name__)

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("WHV_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Unprefixed fields (ENVIRONMENT, LOG_LEVEL) follow the deployment
    convention shared with the rest of the platform; everything else
    uses the WHV_ prefix.
    """

    ENVIRONMENT: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        validation_alias="ENVIRONMENT",
        description="Deployment environment",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )

    app_name: str = Field(
        default="WorkHistoryVerification", description="Application name"
    )

    # RecordStore
    database_uri: str = Field(
        default="sqlite:///work_history_verification.db",
        description="SQLAlchemy URL of the verification record store",
    )

    # Verification gateway
    gateway_proxy_url: str = Field(
        default="",
        description="Base URL of the company/employee verification proxy",
    )
    gateway_timeout: float = Field(
        default=30.0, description="Read timeout in seconds for each gateway step"
    )
    gateway_connect_timeout: float = Field(
        default=10.0, description="Connect timeout in seconds for each gateway step"
    )
    gateway_user_agent: str = Field(
        default=f"WorkHistoryVerification/{__version__}",
        description="User-Agent header sent to the gateway",
    )

    # Workflow
    batch_inter_entry_delay: float = Field(
        default=1.0,
        description="Pause in seconds between two entries of a verify-all run",
    )
    employee_token_refresh_max: int = Field(
        default=1,
        description="How many times a stale company token may be regenerated",
    )
    audit_api_calls: bool = Field(
        default=True, description="Record one audit row per gateway step"
    )

    @field_validator(
        "gateway_timeout", "gateway_connect_timeout", "batch_inter_entry_delay"
    )
    @classmethod
    def _non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("employee_token_refresh_max")
    @classmethod
    def _non_negative_int(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    def get_database_connection_string(self) -> str:
        """
        Get the record store connection string.

        Automatically corrects 'postgres://' scheme to 'postgresql://' for
        SQLAlchemy compatibility.
        """
        uri = self.database_uri
        if uri.startswith("postgres://"):
            uri = uri.replace("postgres://", "postgresql://", 1)
        return uri

    @model_validator(mode="after")
    def validate_production_database_url(self) -> "Settings":
        """Validate that production environment uses PostgreSQL.

        Raises:
            ValueError: If ENVIRONMENT is 'prod' and database URL is not PostgreSQL
        """
        db_url = self.get_database_connection_string()

        if self.ENVIRONMENT == "prod" and not db_url.startswith("postgresql"):
            raise ValueError(
                "Production environment requires PostgreSQL database. "
                f"Database URL must start with 'postgresql', got: {db_url[:20]}..."
            )

        return self

    model_config = SettingsConfigDict(
        env_prefix="WHV_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()
