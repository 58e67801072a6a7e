"""Application state helpers for the download gateway."""

import time
from dataclasses import dataclass, field
from typing import List, Optional

import structlog

from .core import (
    ExtractionClient,
    InMemoryRateLimiter,
    RateLimiter,
    RequestGatekeeper,
    Settings,
)

logger = structlog.get_logger()


@dataclass
class GatewayState:
    """Container for runtime components attached to the FastAPI app."""

    settings: Settings
    rate_limiter: Optional[RateLimiter]
    fallback_limiter: InMemoryRateLimiter
    gatekeeper: RequestGatekeeper
    extraction_client: ExtractionClient
    start_time: float = field(default_factory=time.time)
    background_tasks: List = field(default_factory=list)


def initialize_state(settings: Optional[Settings] = None) -> GatewayState:
    """Construct the gateway state using provided or default settings."""
    resolved_settings = settings or Settings()

    fallback_limiter = InMemoryRateLimiter(
        max_requests=resolved_settings.rate_limit_max,
        window_ms=resolved_settings.rate_limit_window_ms,
    )

    rate_limiter: Optional[RateLimiter]
    try:
        rate_limiter = RateLimiter(
            db_path=resolved_settings.rate_limit_db_path,
            max_requests=resolved_settings.rate_limit_max,
            window_ms=resolved_settings.rate_limit_window_ms,
            save_debounce=resolved_settings.rate_limit_save_debounce,
            cleanup_interval=resolved_settings.rate_limit_cleanup_interval,
        )
    except Exception as exc:
        logger.error(
            "Persistent rate limiter unavailable, using in-memory fallback",
            error=str(exc),
        )
        rate_limiter = None

    gatekeeper = RequestGatekeeper(
        rate_limiter=rate_limiter,
        fallback_limiter=fallback_limiter,
    )
    extraction_client = ExtractionClient(
        base_url=resolved_settings.extraction_base_url,
        timeout=resolved_settings.extraction_timeout,
        health_timeout=resolved_settings.health_check_timeout,
    )

    return GatewayState(
        settings=resolved_settings,
        rate_limiter=rate_limiter,
        fallback_limiter=fallback_limiter,
        gatekeeper=gatekeeper,
        extraction_client=extraction_client,
    )
