"""Health check endpoint for Docker / load balancer probes."""

from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from streamtoshelf.api.dependencies import get_app_settings
from streamtoshelf.config import Settings
from streamtoshelf.infrastructure.integrations.http_pool import HttpClientPool

router = APIRouter(tags=["Health"])


class HealthStatus(BaseModel):
    """Health response."""

    status: str = Field(description="healthy")
    service: str = Field(description="Application name")
    timestamp: str = Field(description="ISO timestamp of the check")
    uptime_seconds: float | None = Field(default=None, description="Seconds since startup")
    checks: dict[str, Any] = Field(default_factory=dict, description="Component details")


# No upstream calls here on purpose: Spotify being down must not get the container restarted.
@router.get("/health", response_model=HealthStatus)
async def health_check(
    request: Request, settings: Settings = Depends(get_app_settings)
) -> HealthStatus:
    """Liveness plus a summary of what is configured."""
    now = datetime.now(UTC)
    startup_time: datetime | None = getattr(request.app.state, "startup_time", None)
    return HealthStatus(
        status="healthy",
        service=settings.app_name,
        timestamp=now.isoformat(),
        uptime_seconds=(now - startup_time).total_seconds() if startup_time else None,
        checks={
            "http_pool": HttpClientPool.get_pool_stats(),
            "spotify_configured": settings.spotify.is_configured,
            "discogs_configured": settings.discogs.is_configured,
        },
    )
