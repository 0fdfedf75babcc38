"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from codetrain import __version__
from codetrain.config.app_config import AppConfig
from codetrain.web.dependencies import get_config
from codetrain.web.schemas import HealthResponse

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(config: AppConfig = Depends(get_config)) -> HealthResponse:
    """Check API health status."""
    return HealthResponse(
        status="ok",
        environment=config.environment,
        public_url=config.public_url,
        version=__version__,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
