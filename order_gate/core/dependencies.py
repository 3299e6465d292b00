"""FastAPI dependency injection functions.

Routes receive the process-wide collaborators created in the lifespan hook;
tests swap them through ``app.dependency_overrides``.
"""

from fastapi import HTTPException, Request, status

from order_gate.domain.cache import TTLCache
from order_gate.ports.backend_port import BackendPort


async def get_backend_client(request: Request) -> BackendPort:
    """Get backend client from app state.

    Raises:
        HTTPException: 503 if the backend client is unavailable
    """
    backend_client = getattr(request.app.state, "backend_client", None)

    if backend_client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Backend client unavailable",
        )

    return backend_client


async def get_validation_cache(request: Request) -> TTLCache:
    """Get the process-wide validation cache from app state."""
    cache = getattr(request.app.state, "validation_cache", None)

    if cache is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Validation cache unavailable",
        )

    return cache
