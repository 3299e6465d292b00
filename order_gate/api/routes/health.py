from fastapi import APIRouter

from order_gate.api.schemas import HealthResponse
from order_gate.core.settings import app_settings

router = APIRouter()


@router.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    return HealthResponse(
        status="healthy",
        service=app_settings.APP_NAME,
        version=app_settings.APP_VERSION,
    )
