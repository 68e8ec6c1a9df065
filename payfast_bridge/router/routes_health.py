from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from payfast_bridge.dto.health import HealthResponse, ServiceInfo
from payfast_bridge.router.dependencies import get_settings
from payfast_bridge.utils.config import Settings

router = APIRouter()

SERVICE_VERSION = "1.0.0"


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(status="OK", current_time=datetime.now(timezone.utc), environment=settings.environment)


@router.get("/", response_model=ServiceInfo)
async def service_info() -> ServiceInfo:
    return ServiceInfo(
        message="PayFast payment bridge",
        version=SERVICE_VERSION,
        endpoints=["POST /api/create-payment", "POST /api/payfast/notify", "GET /health"],
    )
