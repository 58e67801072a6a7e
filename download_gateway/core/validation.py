"""URL validation and platform detection."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional
from urllib.parse import SplitResult, urlsplit

from .platforms import PLATFORM_PATTERNS, Platform, id_patterns_for

ALLOWED_SCHEMES = ("http", "https")

URL_REQUIRED = "URL is required"
INVALID_FORMAT = "Invalid URL format"
INVALID_PROTOCOL = "URL must use HTTP or HTTPS protocol"
UNSUPPORTED_PLATFORM = (
    "Unsupported platform. Please use Instagram, X (Twitter), or TikTok URL"
)


@dataclass
class ValidationOutcome:
    """Result of validating a candidate URL."""

    is_valid: bool
    errors: List[str] = field(default_factory=list)
    platform: Optional[Platform] = None
    content_id: Optional[str] = None


def parse_url(url: str) -> Optional[SplitResult]:
    """Parse ``url`` and return it only if it has a scheme and a usable host.

    ``;params`` stay part of ``path``.
    """
    try:
        parsed = urlsplit(url)
        # Accessing ``port`` validates it.
        parsed.port
    except ValueError:
        return None

    if not parsed.scheme or not parsed.netloc:
        return None

    hostname = parsed.hostname
    if not hostname or any(char.isspace() for char in parsed.netloc):
        return None
    return parsed


class URLValidator:
    """Classify user-supplied URLs against the supported platforms."""

    @classmethod
    def validate(cls, url: Any) -> ValidationOutcome:
        """Run every check in order, keeping as much diagnostic detail as possible."""
        errors: List[str] = []

        if not url or not isinstance(url, str) or not url.strip():
            errors.append(URL_REQUIRED)
            return ValidationOutcome(is_valid=False, errors=errors)

        trimmed = url.strip()
        parsed = parse_url(trimmed)
        if parsed is None:
            errors.append(INVALID_FORMAT)
            return ValidationOutcome(is_valid=False, errors=errors)

        if parsed.scheme.lower() not in ALLOWED_SCHEMES:
            errors.append(INVALID_PROTOCOL)

        platform = cls.detect_platform(trimmed)
        if platform is None:
            errors.append(UNSUPPORTED_PLATFORM)
            return ValidationOutcome(is_valid=False, errors=errors)

        content_id = cls.extract_content_id(trimmed, platform)
        if not content_id:
            errors.append(f"Could not extract content ID from {platform.value} URL")
            return ValidationOutcome(is_valid=False, errors=errors, platform=platform)

        return ValidationOutcome(
            is_valid=not errors,
            errors=errors,
            platform=platform,
            content_id=content_id,
        )

    @classmethod
    def detect_platform(cls, url: str) -> Optional[Platform]:
        """Return the first platform whose domain rule matches the URL."""
        normalized = url.lower().strip()

        for entry in PLATFORM_PATTERNS:
            if entry.domain.search(normalized):
                return entry.platform

        # x.com is the current Twitter domain
        if "x.com" in normalized:
            return Platform.TWITTER

        return None

    @classmethod
    def extract_content_id(cls, url: str, platform: Platform) -> Optional[str]:
        """Return the first non-empty content ID captured from the URL path."""
        parsed = parse_url(url.strip())
        if parsed is None:
            return None

        for pattern in id_patterns_for(platform):
            match = pattern.search(parsed.path)
            if match and match.group(1):
                return match.group(1)
        return None


__all__ = [
    "ValidationOutcome",
    "URLValidator",
    "parse_url",
    "URL_REQUIRED",
    "INVALID_FORMAT",
    "INVALID_PROTOCOL",
    "UNSUPPORTED_PLATFORM",
]
