"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
"""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        description="PostgreSQL async connection string",
    )
    database_schema: str | None = Field(
        default=None,
        description="PostgreSQL schema for isolated environments (e.g., pr_42)",
    )

    @field_validator("database_schema")
    @classmethod
    def validate_database_schema(cls, v: str | None) -> str | None:
        if v is None:
            return None
        if not re.match(r"^[a-z_][a-z0-9_]{0,62}$", v):
            msg = "Invalid database_schema: must match ^[a-z_][a-z0-9_]{0,62}$"
            raise ValueError(msg)
        return v

    # Represent (OpenNorth) postal code lookup
    represent_base_url: str = Field(
        default="https://represent.opennorth.ca",
        description="Base URL of the Represent postal code API",
    )
    represent_timeout: float = Field(
        default=5.0,
        description="Upper bound in seconds for a single upstream postal code lookup",
        gt=0,
    )

    @field_validator("represent_base_url")
    @classmethod
    def validate_represent_base_url(cls, v: str) -> str:
        return v.rstrip("/")

    # Postal code cache
    postal_code_cache_ttl_days: int = Field(
        default=30,
        description="Days a postal code to district mapping stays valid",
        gt=0,
    )
    postal_code_cache_source: str = Field(
        default="represent",
        description="Source tag written on cached postal code mappings",
    )

    # Voting record and categorization
    voting_record_limit: int = Field(
        default=5000,
        description="Maximum votes loaded for a single representative",
        gt=0,
    )
    categorize_display_limit: int = Field(
        default=20,
        description="Number of most recent votes whose bills are categorized before responding",
        gt=0,
    )
    background_categorization_enabled: bool = Field(
        default=True,
        description="Categorize every bill a representative voted on after serving their stats",
    )

    # Bill classifier
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key; keyword classification is used when unset",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="Chat completion model used for bill classification",
    )
    openai_timeout: float = Field(
        default=15.0,
        description="OpenAI request timeout in seconds",
        gt=0,
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )

    # CORS
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins (must be explicitly configured)",
    )
    cors_origin_regex: str = Field(
        default="",
        description="Regex pattern for allowed CORS origins",
    )

    # Environment
    environment: str = Field(
        default="production",
        description="Deployment environment name (e.g. production, dev, staging)",
    )

    # API
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API version prefix",
    )
    rate_limit_per_minute: int = Field(
        default=200,
        description="Maximum API requests per minute per IP address",
        gt=0,
    )
    trusted_proxy_headers: str = Field(
        default="CF-Connecting-IP,X-Forwarded-For,X-Real-IP",
        description="Comma-separated list of HTTP headers to check for real client IP, in priority order",
    )

    @property
    def trusted_proxy_header_list(self) -> list[str]:
        """Parse trusted proxy headers string into a list."""
        if not self.trusted_proxy_headers.strip():
            return []
        return [h.strip() for h in self.trusted_proxy_headers.split(",") if h.strip()]

    @property
    def cors_origin_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        if not self.cors_origins.strip():
            return []
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()  # type: ignore[call-arg]
