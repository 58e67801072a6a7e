"""Root endpoint describing the gateway."""

import time

from fastapi import APIRouter, Depends

from .. import __version__
from ..core.platforms import all_platforms
from ..dependencies import get_gateway_state
from ..state import GatewayState

router = APIRouter()

ENDPOINTS = {
    "download": "/api/download",
    "platforms": "/platforms",
    "health": "/health",
    "metrics": "/metrics",
    "rate_limit": "/rate-limit/info",
}


@router.get("/")
async def root(state: GatewayState = Depends(get_gateway_state)):
    settings = state.settings
    return {
        "name": "Social Media Download Gateway",
        "version": __version__,
        "status": "running",
        "timestamp": time.time(),
        "uptime": time.time() - state.start_time,
        "endpoints": ENDPOINTS,
        "platforms": sorted(platform.value for platform in all_platforms()),
        "rate_limit": {
            "max_requests": settings.rate_limit_max,
            "window_ms": settings.rate_limit_window_ms,
        },
        "features": {
            "persistent_rate_limiting": state.rate_limiter is not None,
            "metrics": settings.enable_metrics,
        },
    }
