"""Download request endpoint."""

import json
import math
import uuid
from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from ..core import (
    BackendUnavailableError,
    ExtractionFailedError,
    FormatError,
    SecurityError,
    URLSanitizer,
)
from ..core.rate_limiter import RateLimitResult, now_ms
from ..dependencies import get_gateway_state
from ..metrics import record_decision
from ..schemas import DownloadResponse
from ..state import GatewayState

logger = structlog.get_logger()
router = APIRouter()

INVALID_JSON = "Invalid JSON in request body"
DISALLOWED_CONTENT = "URL contains disallowed content"
INVALID_URL_FORMAT = "Invalid URL format"
BACKEND_UNAVAILABLE = "Download service unavailable. Please ensure the backend is running."
UNEXPECTED_ERROR = "An unexpected error occurred. Please try again later."


def _error_response(
    status_code: int,
    error: str,
    headers: Optional[Dict[str, str]] = None,
    platform: Optional[str] = None,
) -> JSONResponse:
    content = DownloadResponse(success=False, error=error, platform=platform)
    return JSONResponse(
        status_code=status_code,
        content=content.model_dump(exclude_none=True),
        headers=headers,
    )


def _rate_limit_headers(result: RateLimitResult) -> Dict[str, str]:
    return {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(result.reset_time) if result.reset_time else "",
    }


def _rate_limited_response(result: RateLimitResult) -> JSONResponse:
    reset_time = result.reset_time or now_ms() + 60_000
    wait_ms = max(0, reset_time - now_ms())
    retry_after = max(1, math.ceil(wait_ms / 1000))
    minutes = max(1, math.ceil(wait_ms / 60_000))

    headers = _rate_limit_headers(result)
    headers["X-RateLimit-Remaining"] = "0"
    headers["X-RateLimit-Reset"] = str(reset_time)
    headers["Retry-After"] = str(retry_after)

    return _error_response(
        429,
        f"Rate limit exceeded. Please try again in {minutes} "
        f"minute{'s' if minutes > 1 else ''}.",
        headers=headers,
    )


def _declared_length(request: Request) -> Optional[int]:
    value = request.headers.get("content-length")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


async def _read_limited_body(request: Request, limit: int) -> Optional[bytes]:
    """Read the body, returning None as soon as it grows past ``limit`` bytes."""
    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            return None
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/api/download")
async def download(request: Request, state: GatewayState = Depends(get_gateway_state)):
    """Validate a social media URL and return its downloadable formats."""
    try:
        return await _process_download(request, state)
    except Exception as exc:
        error_id = uuid.uuid4().hex[:12]
        logger.error(
            "Download API error",
            error_id=error_id,
            client_id=state.gatekeeper.get_client_id(request.headers),
            error=str(exc),
            exc_info=state.settings.is_development,
        )
        return _error_response(500, UNEXPECTED_ERROR, headers={"X-Error-ID": error_id})


async def _process_download(request: Request, state: GatewayState) -> JSONResponse:
    settings = state.settings
    max_kb = settings.max_body_size // 1024
    too_large = f"Request body too large. Maximum size is {max_kb}KB."

    declared = _declared_length(request)
    if declared is not None and declared > settings.max_body_size:
        return _error_response(413, too_large)

    # Chunked bodies carry no content-length
    body = await _read_limited_body(request, settings.max_body_size)
    if body is None:
        return _error_response(413, too_large)

    try:
        payload: Any = json.loads(body)
    except ValueError:
        return _error_response(400, INVALID_JSON)

    url = payload.get("url") if isinstance(payload, dict) else None

    decision = state.gatekeeper.handle(url, request.headers)
    if decision.rate_limited:
        record_decision("rate_limited")
        return _rate_limited_response(decision.rate_limit)

    if not decision.valid:
        record_decision("invalid")
        return _error_response(400, decision.error or "Invalid request")

    try:
        sanitized_url = URLSanitizer.sanitize(url)
    except SecurityError as exc:
        record_decision("rejected_security")
        logger.warning(
            "URL rejected by sanitizer",
            client_id=decision.client_id,
            reason=str(exc),
        )
        return _error_response(400, DISALLOWED_CONTENT)
    except FormatError:
        record_decision("invalid")
        return _error_response(400, INVALID_URL_FORMAT)

    try:
        data = await state.extraction_client.extract(sanitized_url)
    except BackendUnavailableError:
        record_decision("backend_unavailable")
        return _error_response(503, BACKEND_UNAVAILABLE)
    except ExtractionFailedError as exc:
        record_decision("backend_failed")
        return _error_response(exc.status_code, str(exc), platform=exc.platform)

    record_decision("accepted")
    results = state.extraction_client.transform_response(data, sanitized_url)
    content = DownloadResponse(success=True, results=results, platform=data.platform)

    return JSONResponse(
        status_code=200,
        content=content.model_dump(by_alias=True, exclude_none=True),
        headers=_rate_limit_headers(decision.rate_limit),
    )
