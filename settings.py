# settings.py
"""
MealPass API Settings.

Pydantic settings management with environment variable support.
"""

from pydantic import Field
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # MongoDB - REQUIRED from environment
    DATABASE_URL: str = Field(..., description="MongoDB connection string (required)")
    DATABASE_NAME: str = Field(default="mealpass_prod")

    # JWT - REQUIRED from environment
    SECRET_KEY: str = Field(..., description="JWT signing secret (required)")
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60)
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default=7)

    # Environment
    ENV: str = Field(default="development")
    DEBUG: bool = Field(default=True)

    # Ordering rules
    CURRENCY: str = Field(default="INR", description="ISO currency code for charges")
    PURCHASE_WINDOW_DAYS: int = Field(
        default=7,
        ge=1,
        description="Students may place one order per rolling window of this many days"
    )

    # Stripe (simulated gateway is used when the secret key is empty)
    STRIPE_SECRET_KEY: str = ""
    STRIPE_TEST_PAYMENT_METHOD: str = "pm_card_visa"

    # Email Service (Resend)
    RESEND_API_KEY: Optional[str] = None
    EMAIL_FROM: str = "MealPass <orders@mealpass.app>"

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:9002"

    # Sentry Error Tracking
    SENTRY_DSN: Optional[str] = None
    SENTRY_ENVIRONMENT: str = "production"
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    @property
    def payments_live(self) -> bool:
        """Check if a real Stripe account is configured."""
        return bool(self.STRIPE_SECRET_KEY)

    def get_cors_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        if self.CORS_ORIGINS == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    def validate_required_settings(self) -> None:
        """Validate that required settings are configured."""
        if not self.DATABASE_URL:
            raise ValueError("DATABASE_URL must be set")
        if not self.SECRET_KEY or self.SECRET_KEY == "dev-secret-change-me":
            raise ValueError("SECRET_KEY must be changed from default in production")
        if not self.STRIPE_SECRET_KEY:
            raise ValueError("STRIPE_SECRET_KEY must be set in production")

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()

# Validate in production
if settings.ENV == "production":
    settings.validate_required_settings()
