import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from order_gate.clients.backend_client import BackendClient
from order_gate.core.settings import backend_settings, validation_settings
from order_gate.domain.cache import TTLCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown tasks."""

    logger.info("Initializing backend client...")
    backend_client = BackendClient()
    await backend_client.start()
    app.state.backend_client = backend_client
    logger.info(f"Backend client ready ({backend_settings.BACKEND_BASE_URL})")

    app.state.validation_cache = TTLCache(
        default_ttl_seconds=validation_settings.VALIDATION_CACHE_TTL_SECONDS
    )
    logger.info(
        f"Validation cache ready (ttl={validation_settings.VALIDATION_CACHE_TTL_SECONDS}s)"
    )

    yield

    logger.info("Closing backend client...")
    await backend_client.aclose()
    logger.info("Backend client closed")
