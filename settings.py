# settings.py
"""
Taste Palette API Settings.

Pydantic settings management with environment variable support.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional
from urllib.parse import urlparse, urlunparse


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # MongoDB - REQUIRED from environment
    DATABASE_URL: str = Field(..., description="MongoDB connection string (required)")
    DATABASE_NAME: str = Field(default="taste_palette")

    # JWT - REQUIRED from environment
    SECRET_KEY: str = Field(..., description="JWT signing secret (required)")
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default=30)
    VERIFICATION_TOKEN_EXPIRE_HOURS: int = 24
    RESET_TOKEN_EXPIRE_MINUTES: int = 60

    # Environment
    ENV: str = Field(default="development")
    DEBUG: bool = Field(default=True)

    # Gemini AI (menu reading and recommendations)
    GEMINI_API_KEY: str = Field(..., description="Google Gemini API key (required)")
    GEMINI_VISION_MODEL: str = "gemini-2.0-flash"
    GEMINI_TEXT_MODEL: str = "gemini-2.0-flash"
    GEMINI_TEMPERATURE: float = 0.7

    # Email Service (Resend)
    RESEND_API_KEY: Optional[str] = None
    EMAIL_FROM: str = "Taste Palette <noreply@tastepalette.app>"
    APP_URL: str = "http://localhost:3000"

    # Google OAuth
    GOOGLE_CLIENT_ID: Optional[str] = None

    # Menu scans
    MAX_MENU_IMAGE_BYTES: int = 5 * 1024 * 1024
    FREE_SCAN_SIGNUP_BONUS: int = 0
    ONBOARDING_COMPLETE_BONUS: int = 2
    ONBOARDING_SKIP_BONUS: int = 1

    # Scheduled maintenance
    UPLOAD_RESET_BATCH_SIZE: int = 100
    MARKETING_BATCH_SIZE: int = 10
    MARKETING_BATCH_DELAY_SECONDS: float = 1.0

    # Redis Configuration (rate limit storage)
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL (redis://[:password@]host:port/db)"
    )
    REDIS_PASSWORD: Optional[str] = Field(
        default=None,
        description="Redis password for authentication"
    )

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Sentry Error Tracking
    SENTRY_DSN: Optional[str] = None
    SENTRY_ENVIRONMENT: str = "production"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    @property
    def redis_url_with_auth(self) -> str:
        """Build Redis URL with authentication if password is provided."""
        if self.REDIS_PASSWORD:
            parsed = urlparse(self.REDIS_URL)
            netloc_with_auth = f":{self.REDIS_PASSWORD}@{parsed.netloc}"
            return urlunparse((
                parsed.scheme,
                netloc_with_auth,
                parsed.path,
                parsed.params,
                parsed.query,
                parsed.fragment
            ))
        return self.REDIS_URL

    def validate_required_settings(self) -> None:
        """Validate that required settings are configured."""
        if not self.DATABASE_URL:
            raise ValueError("DATABASE_URL must be set")
        if not self.SECRET_KEY:
            raise ValueError("SECRET_KEY must be changed from default in production")
        if not self.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY must be set")
        if not self.RESEND_API_KEY:
            raise ValueError("RESEND_API_KEY must be set")


settings = Settings()

# Validate in production
if settings.ENV == "production":
    settings.validate_required_settings()
