"""
API configuration using Pydantic Settings.

Loads configuration from environment variables with sensible defaults.
Account rules (lockout, code lifetimes, JWT keys) live in shared.config.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class APISettings(BaseSettings):
    """API configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ONLYSWAP_",
        case_sensitive=False,
        extra="ignore",
    )

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Direct Postgres connection, used only by run_migrations.py
    supabase_db_url: str = ""


def get_settings() -> APISettings:
    """Get settings instance."""
    return APISettings()
