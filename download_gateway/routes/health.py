"""Health and monitoring endpoints."""

import time

from fastapi import APIRouter, Depends, Response

from ..dependencies import get_gateway_state
from ..metrics import CONTENT_TYPE_LATEST, latest_metrics
from ..schemas import HealthResponse
from ..state import GatewayState

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(state: GatewayState = Depends(get_gateway_state)):
    """Gateway status together with a probe of the extraction backend."""
    backend = await state.extraction_client.check_health()
    overall_status = "healthy" if backend["status"] == "healthy" else "degraded"

    persistent = state.rate_limiter is not None
    limiter = state.rate_limiter if persistent else state.fallback_limiter

    return HealthResponse(
        status=overall_status,
        timestamp=time.time(),
        services={"extraction-backend": backend},
        uptime=time.time() - state.start_time,
        rate_limiter={"persistent": persistent, "entries": len(limiter)},
    )


@router.get("/health/simple")
async def simple_health_check():
    """Liveness probe that never touches the backend."""
    return {"status": "ok", "timestamp": time.time()}


@router.get("/metrics")
async def metrics():
    return Response(content=latest_metrics(), media_type=CONTENT_TYPE_LATEST)
