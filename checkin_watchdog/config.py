"""Configuration management for the check-in watchdog."""

from typing import Optional

from pydantic import Field, validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with validation."""

    # Application
    APP_NAME: str = "Check-in Watchdog"
    VERSION: str = "0.1.0"
    DEBUG: bool = Field(default=False, description="Enable debug mode")
    ENVIRONMENT: str = Field(default="development", description="Environment")

    # API Configuration
    HOST: str = Field(default="0.0.0.0", description="Host to bind")
    PORT: int = Field(default=8000, description="Port to bind")

    # Database
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./checkin_watchdog.db",
        description="Database connection URL"
    )

    # Twilio SMS
    TWILIO_ACCOUNT_SID: str = Field(default="", description="Twilio Account SID")
    TWILIO_AUTH_TOKEN: str = Field(default="", description="Twilio Auth Token")
    TWILIO_FROM_NUMBER: str = Field(default="", description="Twilio phone number")
    SMS_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        description="Upper bound for a single outbound SMS request"
    )

    # Watchdog
    CHECK_INTERVAL_MINUTES: int = Field(
        default=60,
        description="How often the scheduler runs the overdue check (minutes)"
    )
    MAX_CONCURRENT_ESCALATIONS: int = Field(
        default=10,
        description="Maximum subjects escalated concurrently in one run"
    )
    ENABLE_SCHEDULER: bool = Field(
        default=False,
        description="Run the overdue check in-process on a fixed interval"
    )
    DEFAULT_SUBJECT_NAME: str = Field(
        default="A user",
        description="Name used in alerts when a profile has no name or email"
    )

    # Monitoring & Observability
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    @property
    def twilio_enabled(self) -> bool:
        """Whether real SMS delivery is configured."""
        return bool(
            self.TWILIO_ACCOUNT_SID and self.TWILIO_AUTH_TOKEN and self.TWILIO_FROM_NUMBER
        )

    @validator("SMS_TIMEOUT_SECONDS")
    def validate_sms_timeout(cls, v: float) -> float:
        """SMS timeout must be positive."""
        if v <= 0:
            raise ValueError("SMS_TIMEOUT_SECONDS must be positive")
        return v

    @validator("MAX_CONCURRENT_ESCALATIONS", "CHECK_INTERVAL_MINUTES")
    def validate_positive_int(cls, v: int) -> int:
        """Worker pool size and scheduler cadence must be positive."""
        if v < 1:
            raise ValueError("must be at least 1")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# Global settings instance
settings = Settings()
