"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, bot token, external APIs)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import Optional, Literal, List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="storefront",
        description="MongoDB database name"
    )

    # Telegram Bot API
    TELEGRAM_BOT_TOKEN: Optional[str] = Field(
        default=None,
        description="Bot token used for order notifications and OTP delivery"
    )
    TELEGRAM_OPERATOR_CHAT_ID: Optional[str] = Field(
        default=None,
        description="Chat that receives new order notifications"
    )
    TELEGRAM_BOT_USERNAME: str = Field(
        default="elbekdizaynerbot",
        description="Bot username users must start before receiving codes"
    )
    TELEGRAM_API_BASE: str = Field(
        default="https://api.telegram.org",
        description="Telegram Bot API base URL"
    )

    # Location verification
    NOMINATIM_URL: str = Field(
        default="https://nominatim.openstreetmap.org/reverse",
        description="Reverse geocoding endpoint"
    )
    COUNTRIES_API_URL: str = Field(
        default="https://restcountries.com/v3.1/all?fields=name,cca2,flags",
        description="Country reference list endpoint"
    )
    GEOLOCATION_TIMEOUT_MS: int = Field(
        default=20000,
        description="Device geolocation timeout advertised to clients"
    )
    MAX_BAN_STRIKES: int = Field(
        default=3,
        description="Location mismatches before an automatic ban"
    )

    # Google identity
    GOOGLE_CLIENT_ID: Optional[str] = Field(
        default=None,
        description="OAuth client id expected in the ID token audience"
    )
    GOOGLE_TOKENINFO_URL: str = Field(
        default="https://oauth2.googleapis.com/tokeninfo",
        description="Google ID token verification endpoint"
    )
    ADMIN_EMAILS: List[str] = Field(
        default=[],
        description="Allow-listed operator accounts"
    )

    # Orders
    ORDERS_WINDOW: int = Field(
        default=200,
        description="How many recent orders the order views load"
    )

    # Sessions
    SESSION_COOKIE_NAME: str = Field(
        default="storefront_session",
        description="Cookie holding the session id"
    )
    SESSION_TTL_DAYS: int = Field(
        default=30,
        description="Session lifetime in days"
    )
    OTP_SESSION_PRUNE_MINUTES: int = Field(
        default=60,
        description="Abandoned Telegram verifications are dropped after this long"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api/v1",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )
    HTTP_TIMEOUT_SECONDS: float = Field(
        default=15.0,
        description="Timeout for outbound HTTP calls"
    )

    # Security
    SECRET_KEY: str = Field(
        default="change-me-in-production",
        description="Application secret key"
    )

    @validator("SECRET_KEY")
    def validate_secret_key(cls, v, values):
        """Ensure secret key is changed in production."""
        if values.get("ENVIRONMENT") == "production" and v == "change-me-in-production":
            raise ValueError("SECRET_KEY must be changed in production environment")
        return v

    @validator("TELEGRAM_BOT_TOKEN")
    def validate_bot_token(cls, v, values):
        """Ensure the bot token is set in production."""
        if values.get("ENVIRONMENT") == "production" and not v:
            raise ValueError("TELEGRAM_BOT_TOKEN is required in production environment")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    def is_admin_email(self, email: Optional[str]) -> bool:
        if not email:
            return False
        return email.lower() in {e.lower() for e in self.ADMIN_EMAILS}

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if settings.MAX_BAN_STRIKES < 1:
        errors.append("MAX_BAN_STRIKES must be at least 1")

    # Production-specific validations
    if settings.is_production:
        if not settings.TELEGRAM_OPERATOR_CHAT_ID:
            errors.append("TELEGRAM_OPERATOR_CHAT_ID is required in production")
        if not settings.GOOGLE_CLIENT_ID:
            errors.append("GOOGLE_CLIENT_ID is required in production")
        if not settings.ADMIN_EMAILS:
            errors.append("ADMIN_EMAILS is required in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
