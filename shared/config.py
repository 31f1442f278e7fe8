"""
Centralized configuration for the OnlySwap backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., JWT_*, SMTP_*, SUPABASE_*).
"""

from functools import lru_cache
from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "OnlySwap Accounts API"
    app_version: str = "0.1.0"
    debug: bool = False

    # Token issuance. The two scopes use independent keys; both are required.
    jwt_secret: str = ""
    jwt_remember_me_secret: str = ""
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 7
    jwt_remember_me_expires_days: int = 30

    # Signup
    admin_signup_code: str = ""  # empty disables admin signup
    password_policy: Literal["basic", "strict"] = "basic"
    allowed_email_domain: Optional[str] = None  # e.g. ".edu"
    bcrypt_rounds: int = 12

    # Lockout
    max_login_attempts: int = 5
    lockout_minutes: int = 120

    # One-time codes
    verification_code_minutes: int = 30
    reset_code_minutes: int = 10
    reset_reveals_unknown_email: bool = False

    # Activity log
    activity_retention: int = 500  # entries per account, 0 = unbounded

    # Storage
    account_store_backend: Literal["supabase", "memory"] = "supabase"

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    # Outbound mail
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    email_from: str = "no-reply@onlyswap.local"
    email_from_name: str = "OnlySwap Support"
    support_contact: str = "support@onlyswap.local"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
