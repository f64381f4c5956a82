from datetime import datetime, timezone

from fastapi import APIRouter

from snapcook.app.core.config import get_settings
from snapcook.app.schemas.recipe import EnvironmentStatus, ServiceStatus

router = APIRouter(tags=["status"])


@router.get("/", response_model=ServiceStatus)
async def service_status() -> ServiceStatus:
    settings = get_settings()
    return ServiceStatus(
        status="OK",
        message="SnapCook Backend is running!",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        environment=EnvironmentStatus(
            azure_key_set=bool(settings.azure_vision_key),
            gemini_key_set=bool(settings.gemini_api_key),
        ),
    )


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
