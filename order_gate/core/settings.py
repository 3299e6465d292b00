"""
Centralized application settings using Pydantic.

All environment variables are read once at startup and validated.
Use this instead of scattered os.getenv() calls throughout the codebase.
"""

from pydantic_settings import BaseSettings

from order_gate.core.config import (
    API_CALL_TIMEOUT_SECONDS,
    CACHE_TTL_SECONDS,
    GEOLOCATION_TIMEOUT_SECONDS,
)


class BackendSettings(BaseSettings):
    """Backend HTTP API configuration."""

    BACKEND_BASE_URL: str = "http://localhost:8000/api"
    BACKEND_TIMEOUT_SECONDS: float = API_CALL_TIMEOUT_SECONDS
    BACKEND_VERIFY_SSL: bool = True

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


class ValidationSettings(BaseSettings):
    """Validation pipeline defaults."""

    VALIDATION_CACHE_TTL_SECONDS: float = CACHE_TTL_SECONDS
    GEOLOCATION_TIMEOUT_SECONDS: float = GEOLOCATION_TIMEOUT_SECONDS
    GEOLOCATION_HIGH_ACCURACY: bool = True

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


class AppSettings(BaseSettings):
    """General application settings."""

    APP_NAME: str = "order-gate"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}


# Singleton instances - loaded once at module import
backend_settings = BackendSettings()
validation_settings = ValidationSettings()
app_settings = AppSettings()
