"""Shared Pydantic models used by API routes."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from .core.extraction import DownloadResult


class DownloadResponse(BaseModel):
    success: bool
    results: Optional[List[DownloadResult]] = None
    error: Optional[str] = None
    platform: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    timestamp: float
    services: Dict[str, Dict[str, Any]]
    uptime: float
    rate_limiter: Dict[str, Any]


class PlatformEntry(BaseModel):
    id: str
    name: str
    domain: str
    description: str
    supported_media: List[str]


class RateLimitInfo(BaseModel):
    client_id: str
    limit: int
    count: int
    remaining: int
    reset_time: Optional[int] = None
    persistent: bool


class RateLimitResetRequest(BaseModel):
    client_id: str
