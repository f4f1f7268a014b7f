"""Application configuration using pydantic-settings."""
from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = "local"
    app_name: str = "lesmateriaal-api"
    database_url: str = Field(
        "sqlite:///./dev.db",
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
    )
    allowed_origins: str = "*"
    log_level: str = "INFO"

    # Admin (import endpoints)
    admin_api_key: Optional[str] = Field(None, validation_alias="ADMIN_API_KEY")
    rate_limit_per_minute: int = Field(120, validation_alias="RATE_LIMIT_PER_MINUTE")

    # Explorer
    default_locale: str = Field("nl", validation_alias="DEFAULT_LOCALE")  # nl | de
    explorer_page_size: int = Field(30, validation_alias="EXPLORER_PAGE_SIZE")
    explorer_show_more_factor: int = Field(5, validation_alias="EXPLORER_SHOW_MORE_FACTOR")
    history_push_delay_seconds: float = Field(5.0, validation_alias="HISTORY_PUSH_DELAY_SECONDS")
    catalog_cache_ttl_seconds: int = Field(300, validation_alias="CATALOG_CACHE_TTL_SECONDS")

    # PDF proxy
    pdf_proxy_timeout_seconds: int = Field(30, validation_alias="PDF_PROXY_TIMEOUT_SECONDS")
    pdf_proxy_user_agent: str = Field("EDL/1.0", validation_alias="PDF_PROXY_USER_AGENT")

    @field_validator("database_url")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """Normalize DATABASE_URL and ensure SSL is required for PostgreSQL."""
        # Skip normalization for sqlite URLs
        if v.startswith("sqlite"):
            return v

        if v.startswith("postgres://"):
            v = v.replace("postgres://", "postgresql+psycopg://", 1)
        if v.startswith("postgresql://") and not v.startswith("postgresql+psycopg://"):
            v = v.replace("postgresql://", "postgresql+psycopg://", 1)

        if not v.startswith("postgresql+psycopg://"):
            raise ValueError("DATABASE_URL must start with postgresql://, postgresql+psycopg://, or sqlite")

        if "sslmode=" not in v:
            separator = "&" if "?" in v else "?"
            v = f"{v}{separator}sslmode=require"
        elif "sslmode=require" not in v:
            import re
            v = re.sub(r"sslmode=[^&]+", "sslmode=require", v)

        return v

    @field_validator("default_locale")
    @classmethod
    def validate_locale(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("nl", "de"):
            raise ValueError("DEFAULT_LOCALE must be 'nl' or 'de'")
        return v

    @property
    def allowed_origins_list(self) -> list[str]:
        """Get allowed origins as a list."""
        if self.allowed_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",")]


settings = Settings()
