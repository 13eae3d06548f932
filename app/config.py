# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # The portal talks to Supabase with the public anon key so that the
    # signed-in user's JWT (and therefore the table access rules) applies
    # to every profile read and role write. Callers prove who they are
    # with the same access token, verified against the JWT secret or the
    # project's JWKS.

    SUPABASE_URL: str = Field(
        ...,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_JWT_SECRET: str = Field(
        ...,
        description="Supabase JWT secret for verifying legacy HS256 access tokens"
    )

    PROFILES_TABLE: str = Field(
        default="users",
        description="Table holding one profile row per identity"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------
    # Navigation targets used by the session manager and the access guards.

    LOGIN_PATH: str = Field(
        default="/auth/login",
        description="Login view"
    )

    HOME_PATH: str = Field(
        default="/",
        description="Public home view"
    )

    LANDING_PATH: str = Field(
        default="/dashboard",
        description="Default view after a successful sign-in"
    )

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    SESSION_HINT_PATH: str = Field(
        default=".diuec/session_hint.json",
        description="File holding the non-authoritative 'has a session' marker"
    )

    SESSION_HINT_TTL_DAYS: int = Field(
        default=7,
        ge=1,
        le=365,
        description="Days before the session hint expires on its own"
    )

    AUTH_INIT_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        description="Give up waiting for the first identity notification after this long"
    )

    GUARD_REDIRECT_DELAY_MS: int = Field(
        default=100,
        ge=0,
        le=5000,
        description="Delay before a denied view is redirected"
    )

    ADMIN_BOOTSTRAP_ENABLED: bool = Field(
        default=True,
        description="Allow the first signed-in user to promote themselves while no admin exists"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://diuec.app" -> ["http://localhost:3000", "https://diuec.app"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def session_hint_file(self) -> Path:
        return Path(self.SESSION_HINT_PATH).expanduser()

    @property
    def session_hint_ttl(self) -> timedelta:
        return timedelta(days=self.SESSION_HINT_TTL_DAYS)

    @property
    def guard_redirect_delay(self) -> float:
        """Redirect delay in seconds."""
        return self.GUARD_REDIRECT_DELAY_MS / 1000

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
