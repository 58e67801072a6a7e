"""Supported platforms and their URL patterns."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Pattern, Tuple


class Platform(str, Enum):
    """Platforms the gateway accepts URLs for."""

    INSTAGRAM = "instagram"
    TWITTER = "twitter"
    TIKTOK = "tiktok"


@dataclass(frozen=True)
class PlatformPattern:
    """Domain rule and ordered content-ID rules for a platform."""

    platform: Platform
    domain: Pattern[str]
    id_patterns: Tuple[Pattern[str], ...]


@dataclass(frozen=True)
class PlatformInfo:
    """Display metadata for a platform."""

    name: str
    domain: str
    description: str
    supported_media: Tuple[str, ...]


# Registry order is detection order.
PLATFORM_PATTERNS: Tuple[PlatformPattern, ...] = (
    PlatformPattern(
        platform=Platform.INSTAGRAM,
        domain=re.compile(r"instagram\.com", re.IGNORECASE),
        id_patterns=(
            re.compile(r"/reel/([A-Za-z0-9_-]+)", re.IGNORECASE),
            re.compile(r"/p/([A-Za-z0-9_-]+)", re.IGNORECASE),
            re.compile(r"/tv/([A-Za-z0-9_-]+)", re.IGNORECASE),
        ),
    ),
    PlatformPattern(
        platform=Platform.TWITTER,
        domain=re.compile(r"(?:x\.com|twitter\.com)", re.IGNORECASE),
        id_patterns=(re.compile(r"/status/(\d+)", re.IGNORECASE),),
    ),
    PlatformPattern(
        platform=Platform.TIKTOK,
        domain=re.compile(r"tiktok\.com", re.IGNORECASE),
        id_patterns=(
            re.compile(r"/video/(\d+)", re.IGNORECASE),
            re.compile(r"/@[^/]+/video/(\d+)", re.IGNORECASE),
        ),
    ),
)

PLATFORM_INFO: Dict[Platform, PlatformInfo] = {
    Platform.INSTAGRAM: PlatformInfo(
        name="Instagram",
        domain="instagram.com",
        description="Reels, Videos, Photos",
        supported_media=("video", "image"),
    ),
    Platform.TWITTER: PlatformInfo(
        name="X (Twitter)",
        domain="twitter.com",
        description="Videos, GIFs",
        supported_media=("video",),
    ),
    Platform.TIKTOK: PlatformInfo(
        name="TikTok",
        domain="tiktok.com",
        description="No Watermark Videos",
        supported_media=("video",),
    ),
}

_PATTERNS_BY_PLATFORM: Dict[Platform, PlatformPattern] = {
    entry.platform: entry for entry in PLATFORM_PATTERNS
}


def domain_pattern_for(platform: Platform) -> Pattern[str]:
    """Return the domain-matching pattern for a platform."""
    return _PATTERNS_BY_PLATFORM[Platform(platform)].domain


def id_patterns_for(platform: Platform) -> Tuple[Pattern[str], ...]:
    """Return the ordered content-ID patterns for a platform."""
    return _PATTERNS_BY_PLATFORM[Platform(platform)].id_patterns


def all_platforms() -> FrozenSet[Platform]:
    """Return every supported platform."""
    return frozenset(_PATTERNS_BY_PLATFORM)


def platform_info(platform: Platform) -> PlatformInfo:
    """Return display metadata for a platform."""
    return PLATFORM_INFO[Platform(platform)]


__all__ = [
    "Platform",
    "PlatformPattern",
    "PlatformInfo",
    "PLATFORM_PATTERNS",
    "PLATFORM_INFO",
    "domain_pattern_for",
    "id_patterns_for",
    "all_platforms",
    "platform_info",
]
