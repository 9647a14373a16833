"""
Centralized configuration management.
All environment variables and settings are defined here.
"""
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="eBay FreeAgent Sync Service", alias="APP_NAME")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Backend collaborators (eBay, FreeAgent, auto-sync)
    api_base_url: str = Field(default="http://localhost:5000/api", alias="API_BASE_URL")
    api_token: Optional[str] = Field(default=None, alias="API_TOKEN")
    request_timeout: int = Field(default=30, alias="REQUEST_TIMEOUT")

    # Processing
    max_date_range_days: int = Field(default=90, alias="MAX_DATE_RANGE_DAYS")

    # Storage
    export_path: str = Field(default="exports", alias="EXPORT_PATH")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level is one of the standard levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v_upper

    @field_validator("port")
    @classmethod
    def validate_port(cls, v):
        """Validate port is in valid range."""
        if not (1 <= v <= 65535):
            raise ValueError("Port must be between 1 and 65535")
        return v

    @field_validator("max_date_range_days")
    @classmethod
    def validate_date_range_limit(cls, v):
        """eBay Finances API rejects windows longer than a year."""
        if v < 1:
            raise ValueError("Max date range must be at least 1 day")
        if v > 366:
            raise ValueError("Max date range should not exceed 366 days")
        return v

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        Path(self.export_path).mkdir(parents=True, exist_ok=True)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns:
        Settings instance

    Raises:
        ConfigurationError: If an environment variable holds an invalid value
    """
    global _settings
    if _settings is None:
        try:
            settings = Settings()
        except PydanticValidationError as e:
            raise ConfigurationError(
                "Invalid configuration",
                details={"errors": [err["msg"] for err in e.errors()]}
            )
        settings.ensure_directories()
        _settings = settings
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
