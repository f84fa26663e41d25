"""
Configuration management for DoseTrack
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    APP_NAME: str = "DoseTrack"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENV: str = "development"

    # API
    API_PREFIX: str = "/api/v1"
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite:///./dosetrack.db"
    DATABASE_ECHO: bool = False
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20

    # CORS
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:8081"]

    # Adherence engine
    DEFAULT_TIMEZONE: str = "UTC"
    INTAKE_TOLERANCE_MINUTES: int = 30
    MAX_OCCURRENCES_PER_SCHEDULE: int = 10000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


class EngineConfig:
    """Constants for recurrence expansion and adherence reporting"""

    # Weekday vocabulary, indexed like date.weekday() (Monday == 0)
    WEEKDAYS: tuple = ("mon", "tue", "wed", "thu", "fri", "sat", "sun")

    # Strict HH:MM, 00:00 - 23:59
    TIME_PATTERN: str = r"^(?:[01]\d|2[0-3]):[0-5]\d$"

    MIN_INTERVAL_HOURS: int = 1
    RATE_PRECISION: int = 4

    REPORT_PERIODS: tuple = ("daily", "weekly", "monthly")


# Database table names
class TableNames:
    USERS = "users"
    MEDICATIONS = "medications"
    SCHEDULES = "schedules"
    INTAKES = "intakes"


settings = get_settings()
engine_config = EngineConfig()
