"""Exception hierarchy for URL handling and extraction backend failures.

Validation problems (unsupported platform, missing content ID) are reported as
values on :class:`~download_gateway.core.validation.ValidationOutcome`. The
exceptions here cover the cases a caller must branch on: a URL that cannot be
parsed, a URL that looks hostile, and a backend that is down or refuses the
request.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "GatewayError",
    "URLRejectedError",
    "FormatError",
    "SecurityError",
    "ExtractionError",
    "BackendUnavailableError",
    "BackendTimeoutError",
    "ExtractionFailedError",
]


class GatewayError(RuntimeError):
    """Base exception for download gateway failures."""


class URLRejectedError(GatewayError):
    """Raised when a URL is refused by the sanitizer."""


class FormatError(URLRejectedError):
    """Raised when the input is not a parseable URL."""


class SecurityError(URLRejectedError):
    """Raised when the input carries a dangerous protocol or injection marker."""


class ExtractionError(GatewayError):
    """Base class for extraction backend failures."""


class BackendUnavailableError(ExtractionError):
    """Raised when the extraction backend cannot be reached."""


class BackendTimeoutError(BackendUnavailableError):
    """Raised when the extraction backend does not answer in time."""


class ExtractionFailedError(ExtractionError):
    """Raised when the backend answered but produced no usable formats."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 500,
        platform: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.platform = platform
