"""Core building blocks for the download gateway."""

from .config import Settings
from .errors import (
    BackendTimeoutError,
    BackendUnavailableError,
    ExtractionError,
    ExtractionFailedError,
    FormatError,
    GatewayError,
    SecurityError,
    URLRejectedError,
)
from .extraction import DownloadResult, ExtractionClient
from .gatekeeper import GateDecision, RequestGatekeeper
from .logging import setup_logging
from .platforms import Platform
from .rate_limiter import InMemoryRateLimiter, RateLimiter
from .sanitizer import URLSanitizer
from .validation import URLValidator, ValidationOutcome

__all__ = [
    "Settings",
    "setup_logging",
    "Platform",
    "URLValidator",
    "ValidationOutcome",
    "URLSanitizer",
    "RateLimiter",
    "InMemoryRateLimiter",
    "RequestGatekeeper",
    "GateDecision",
    "ExtractionClient",
    "DownloadResult",
    "GatewayError",
    "URLRejectedError",
    "FormatError",
    "SecurityError",
    "ExtractionError",
    "BackendUnavailableError",
    "BackendTimeoutError",
    "ExtractionFailedError",
]
