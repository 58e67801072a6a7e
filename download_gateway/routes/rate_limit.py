"""Rate limiting endpoints."""

import structlog
from fastapi import APIRouter, Depends, Request

from ..dependencies import get_gateway_state, require_admin_key
from ..schemas import RateLimitInfo, RateLimitResetRequest
from ..state import GatewayState

logger = structlog.get_logger()
router = APIRouter()


@router.get("/rate-limit/info", response_model=RateLimitInfo)
async def get_rate_limit_info(
    request: Request, state: GatewayState = Depends(get_gateway_state)
):
    """Get current rate limit status without consuming a request."""
    gatekeeper = state.gatekeeper
    client_id = gatekeeper.get_client_id(request.headers)
    entry = gatekeeper.get_rate_limit_status(client_id)
    limit = gatekeeper.rate_limit_max
    count = entry.count if entry else 0

    return RateLimitInfo(
        client_id=client_id,
        limit=limit,
        count=count,
        remaining=max(0, limit - count),
        reset_time=entry.reset_time if entry else None,
        persistent=state.rate_limiter is not None,
    )


@router.post("/admin/rate-limit/reset", dependencies=[Depends(require_admin_key)])
async def reset_rate_limit(
    body: RateLimitResetRequest, state: GatewayState = Depends(get_gateway_state)
):
    """Drop the rate limit window of a client (admin only)."""
    removed = False
    if state.rate_limiter is not None:
        removed = state.rate_limiter.reset(body.client_id)
    removed = state.fallback_limiter.reset(body.client_id) or removed

    logger.info("Rate limit reset", client_id=body.client_id, removed=removed)
    return {"client_id": body.client_id, "reset": removed}
