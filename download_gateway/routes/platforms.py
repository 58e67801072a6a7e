"""Supported platform listing."""

from typing import List

from fastapi import APIRouter

from ..core.platforms import PLATFORM_PATTERNS, platform_info
from ..schemas import PlatformEntry

router = APIRouter()


@router.get("/platforms", response_model=List[PlatformEntry])
async def list_platforms():
    """List supported platforms in detection order."""
    entries = []
    for pattern in PLATFORM_PATTERNS:
        info = platform_info(pattern.platform)
        entries.append(
            PlatformEntry(
                id=pattern.platform.value,
                name=info.name,
                domain=info.domain,
                description=info.description,
                supported_media=list(info.supported_media),
            )
        )
    return entries
