"""
Application settings with validation using pydantic-settings.
Validates all required environment variables at startup.
"""
from decimal import Decimal
from pathlib import Path
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.app.core.constants import MONEY_QUANTUM


# Used only when ENVIRONMENT=development and JWT_SECRET is unset
DEV_JWT_SECRET = "devsecret"

_DEFAULT_STATIC_DIR = Path(__file__).resolve().parents[3] / "public"


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    HOST: str = Field(default="0.0.0.0", description="Listen address")
    PORT: int = Field(default=10000, description="Listen port")

    # Security configuration
    JWT_SECRET: Optional[str] = Field(default=None, description="Session token signing key (required in production)")
    BCRYPT_ROUNDS: int = Field(default=12, description="bcrypt cost factor")

    # Storage
    DATA_DIR: str = Field(default="db", description="Directory holding the JSON collection files")
    STATIC_DIR: str = Field(default=str(_DEFAULT_STATIC_DIR), description="Directory with the web client")

    # Referral program
    REFERRAL_BONUS: Decimal = Field(default=Decimal("10"), description="Bonus credited to a referrer per signup")
    LEADERBOARD_SIZE: int = Field(default=20, description="Entries per leaderboard list")
    PUBLIC_BASE_URL: Optional[str] = Field(default=None, description="Origin used in referral links (optional)")

    # CORS configuration
    ALLOWED_ORIGINS: str = Field(default="", description="Comma-separated list of allowed CORS origins")

    # Rate limiting on register/login
    RATE_LIMIT_ENABLED: bool = Field(default=True, description="Enable per-IP rate limiting")
    AUTH_RATE_LIMIT: str = Field(default="10/minute", description="Limit for register/login endpoints")

    # Environment
    ENVIRONMENT: str = Field(default="production", description="Environment: development or production")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        if v not in ("development", "production"):
            raise ValueError("ENVIRONMENT must be 'development' or 'production'")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        if not 4 <= v <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return v

    @field_validator("REFERRAL_BONUS")
    @classmethod
    def validate_referral_bonus(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("REFERRAL_BONUS must be positive")
        if v != v.quantize(MONEY_QUANTUM):
            raise ValueError("REFERRAL_BONUS must be a whole number of cents")
        return v

    def validate_production_settings(self) -> list[str]:
        """
        Validate that all required settings are present in production.
        Returns list of missing settings.
        """
        errors = []

        if self.ENVIRONMENT == "production":
            if not self.JWT_SECRET:
                errors.append("JWT_SECRET is required in production")

        return errors

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"

    @property
    def jwt_secret(self) -> str:
        """Signing key; the development fallback never applies in production."""
        return self.JWT_SECRET or DEV_JWT_SECRET

    @property
    def allowed_origins_list(self) -> list[str]:
        """Get list of allowed CORS origins."""
        if not self.ALLOWED_ORIGINS:
            return []
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get application settings (singleton)."""
    global _settings
    if _settings is None:
        settings = Settings()
        # Validate production settings
        errors = settings.validate_production_settings()
        if errors:
            error_msg = "Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors)
            raise ValueError(error_msg)
        _settings = settings
    return _settings
