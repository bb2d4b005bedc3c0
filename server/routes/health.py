"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from config.config import Config
from server.dependencies import get_config
from server.schemas.responses import HealthResponseDTO

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponseDTO)
async def health_check(config: Config = Depends(get_config)):
    """Liveness plus which providers have credentials configured."""
    providers = config.providers_status()
    active = [p for p in config.SEARCH_PROVIDERS if providers.get(p) == "configured"]
    return HealthResponseDTO(
        status="healthy" if active else "degraded",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        version=config.APP_VERSION,
        providers=providers,
    )
