"""Client for the external extraction backend."""

import time
from typing import Any, Dict, List, Literal, Optional
from urllib.parse import quote

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field

from .errors import BackendTimeoutError, BackendUnavailableError, ExtractionFailedError
from .rate_limiter import now_ms

logger = structlog.get_logger()

Quality = Literal["hd", "sd", "audio"]

DEFAULT_FAILURE_MESSAGE = "Failed to extract download links"

# Marks left literal when percent-encoding the forwarded URL
URI_COMPONENT_SAFE = "!*'()"


class ExtractFormat(BaseModel):
    quality: str
    url: str
    ext: str
    filesize: Optional[float] = None


class ExtractResponse(BaseModel):
    """Payload returned by the backend extract endpoint."""

    success: bool
    platform: Optional[str] = None
    title: str = ""
    thumbnail: Optional[str] = None
    formats: List[ExtractFormat] = Field(default_factory=list)
    error: Optional[str] = None


class DownloadResult(BaseModel):
    """One downloadable format as exposed to clients."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: Literal["video", "image"] = "video"
    url: str
    thumbnail: Optional[str] = None
    download_url: str = Field(alias="downloadUrl")
    title: str
    size: str = "Unknown"
    platform: Optional[str] = None
    quality: Quality = "sd"
    is_mock: bool = Field(default=False, alias="isMock")


def parse_quality(quality: str) -> Quality:
    """Map a backend quality label onto hd/sd/audio."""
    q = quality.lower()
    if any(marker in q for marker in ("1080", "720", "best", "hd")):
        return "hd"
    if "audio" in q:
        return "audio"
    return "sd"


def format_file_size(size: float) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


class ExtractionClient:
    """Forwards validated URLs to the extraction backend."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 35.0,
        health_timeout: float = 5.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.health_timeout = health_timeout
        self.http_client = http_client

    def _client(self) -> httpx.AsyncClient:
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(timeout=self.timeout)
        return self.http_client

    async def extract(self, url: str) -> ExtractResponse:
        """Ask the backend for the formats available at ``url``.

        Raises:
            BackendTimeoutError: no answer within ``timeout`` seconds.
            BackendUnavailableError: the backend could not be reached.
            ExtractionFailedError: the backend answered without usable formats.
        """
        try:
            response = await self._client().post(
                f"{self.base_url}/api/extract",
                json={"url": url},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as exc:
            logger.error("Extraction backend timeout", timeout=self.timeout)
            raise BackendTimeoutError("Extraction backend timed out") from exc
        except httpx.TransportError as exc:
            logger.error("Extraction backend connection error", error=str(exc))
            raise BackendUnavailableError("Cannot connect to extraction backend") from exc

        status_code = 500 if response.is_success else response.status_code

        try:
            data = ExtractResponse.model_validate(response.json())
        except ValueError as exc:
            logger.error(
                "Invalid extraction backend response",
                status_code=response.status_code,
                error=str(exc),
            )
            raise ExtractionFailedError(
                DEFAULT_FAILURE_MESSAGE, status_code=status_code
            ) from exc

        if not data.success or not data.formats:
            logger.warning(
                "Extraction failed",
                status_code=response.status_code,
                platform=data.platform,
                error=data.error,
            )
            raise ExtractionFailedError(
                data.error or DEFAULT_FAILURE_MESSAGE,
                status_code=status_code,
                platform=data.platform,
            )

        return data

    def build_download_url(self, url: str) -> str:
        """Route downloads through the backend instead of exposing media URLs."""
        encoded = quote(url, safe=URI_COMPONENT_SAFE)
        return f"{self.base_url}/api/download?url={encoded}"

    def transform_response(self, data: ExtractResponse, url: str) -> List[DownloadResult]:
        timestamp = now_ms()
        download_url = self.build_download_url(url)
        return [
            DownloadResult(
                id=f"{data.platform}-{timestamp}-{index}",
                type="video",
                url=url,
                thumbnail=data.thumbnail,
                download_url=download_url,
                title=data.title,
                size=format_file_size(fmt.filesize) if fmt.filesize else "Unknown",
                platform=data.platform,
                quality=parse_quality(fmt.quality),
                is_mock=False,
            )
            for index, fmt in enumerate(data.formats)
        ]

    async def check_health(self) -> Dict[str, Any]:
        """Probe the backend health endpoint."""
        start_time = time.time()
        error: Optional[str] = None

        try:
            response = await self._client().get(
                f"{self.base_url}/health", timeout=self.health_timeout
            )
            if response.status_code == 200:
                status = "healthy"
            else:
                status = "unhealthy"
                error = f"HTTP {response.status_code}"
        except httpx.TimeoutException:
            status = "timeout"
            error = "Request timeout"
        except httpx.TransportError:
            status = "unreachable"
            error = "Connection failed"

        return {
            "status": status,
            "response_time": time.time() - start_time,
            "last_check": time.time(),
            "error": error,
            "url": self.base_url,
        }

    async def close(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()
            self.http_client = None
            logger.info("Extraction client closed")


__all__ = [
    "ExtractFormat",
    "ExtractResponse",
    "DownloadResult",
    "ExtractionClient",
    "parse_quality",
    "format_file_size",
]
