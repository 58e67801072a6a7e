"""HTTP middleware for request metrics and access logging."""

import time
from typing import Awaitable, Callable

import structlog
from fastapi import Request, Response

from .metrics import observe_request

logger = structlog.get_logger()

# Metric label for requests no route matched
UNMATCHED_ROUTE = "unmatched"


def _route_label(request: Request) -> str:
    """Route template such as ``/api/download``, never the raw path."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or UNMATCHED_ROUTE


async def request_metrics_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Time every request, export it to Prometheus and write one log line.

    Client addresses are left out of the log entirely; the download route logs
    the hashed client identifier where it matters.
    """
    started = time.perf_counter()
    response = await call_next(request)
    duration = time.perf_counter() - started

    state = getattr(request.app.state, "gateway_state", None)
    route = _route_label(request)
    if state is None or state.settings.enable_metrics:
        observe_request(request.method, route, response.status_code, duration)

    log = logger.warning if response.status_code >= 400 else logger.info
    log(
        "Request processed",
        method=request.method,
        route=route,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(duration * 1000, 2),
    )
    return response
