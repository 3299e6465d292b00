"""Application startup validation checks.

Validates critical settings and configuration before application starts.
Settings classes define data, this module validates behavior.
"""

import logging
import re

logger = logging.getLogger(__name__)


def validate_all_settings() -> None:
    """Validate all critical settings at application startup.

    Raises:
        RuntimeError: If any critical setting is missing or invalid
    """
    from order_gate.core.settings import (
        app_settings,
        backend_settings,
        validation_settings,
    )

    base_url = backend_settings.BACKEND_BASE_URL
    if not base_url or not base_url.strip():
        error_msg = (
            "Missing critical environment variable BACKEND_BASE_URL "
            "(required for the backend API client)"
        )
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    if not re.match(r"^https?://.+", base_url):
        error_msg = (
            f"Invalid URL format: BACKEND_BASE_URL={base_url} "
            "(must start with http:// or https://)"
        )
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    positive_checks = [
        (backend_settings.BACKEND_TIMEOUT_SECONDS, "BACKEND_TIMEOUT_SECONDS"),
        (
            validation_settings.VALIDATION_CACHE_TTL_SECONDS,
            "VALIDATION_CACHE_TTL_SECONDS",
        ),
        (
            validation_settings.GEOLOCATION_TIMEOUT_SECONDS,
            "GEOLOCATION_TIMEOUT_SECONDS",
        ),
    ]
    invalid = [
        f"  - {name}={value} (must be > 0)"
        for value, name in positive_checks
        if value <= 0
    ]
    if invalid:
        error_msg = "Invalid numeric settings:\n" + "\n".join(invalid)
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    logger.info("All critical settings validated successfully")
    logger.info(f"  - Service: {app_settings.APP_NAME} {app_settings.APP_VERSION}")
    logger.info(f"  - Backend: {base_url}")
    logger.info(
        f"  - Cache TTL: {validation_settings.VALIDATION_CACHE_TTL_SECONDS}s"
    )
