"""Request admission: client identification, rate limiting and URL validation."""

import hashlib
import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Type

import structlog

from .platforms import Platform
from .rate_limiter import InMemoryRateLimiter, RateLimitResult
from .validation import URLValidator

logger = structlog.get_logger()

UNKNOWN_CLIENT = "unknown"

SUSPICIOUS_USER_AGENTS = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (r"bot", r"crawler", r"spider", r"scraper")
)


@dataclass
class GateDecision:
    """Accept/reject decision for a download request."""

    valid: bool
    client_id: str
    error: Optional[str] = None
    platform: Optional[Platform] = None
    content_id: Optional[str] = None
    rate_limited: bool = False
    rate_limit: Optional[RateLimitResult] = None


def hash_client_ip(ip: str) -> str:
    """One-way digest of an IP string used as the rate limit key.

    Truncated SHA-256 keeps raw addresses out of the store and the logs. The
    IPv4 space is small enough to enumerate, so this is log hygiene rather
    than anonymization.
    """
    return hashlib.sha256(ip.encode("utf-8")).hexdigest()[:16]


class RequestGatekeeper:
    """Runs the rate limiter and the URL validator in request order."""

    def __init__(
        self,
        rate_limiter: Optional[InMemoryRateLimiter],
        fallback_limiter: InMemoryRateLimiter,
        validator: Type[URLValidator] = URLValidator,
    ):
        self.rate_limiter = rate_limiter
        self.fallback_limiter = fallback_limiter
        self.validator = validator

    @staticmethod
    def get_client_id(headers: Mapping[str, str]) -> str:
        """Derive the hashed client identifier from proxy headers."""
        client_ip = UNKNOWN_CLIENT

        forwarded_for = headers.get("x-forwarded-for")
        real_ip = headers.get("x-real-ip")
        cf_connecting_ip = headers.get("cf-connecting-ip")

        if forwarded_for and forwarded_for.split(",")[0].strip():
            client_ip = forwarded_for.split(",")[0].strip()
        elif real_ip and real_ip.strip():
            client_ip = real_ip.strip()
        elif cf_connecting_ip and cf_connecting_ip.strip():
            client_ip = cf_connecting_ip.strip()

        return hash_client_ip(client_ip)

    def check_rate_limit(self, client_id: str) -> RateLimitResult:
        """Check the persistent limiter, falling back to memory when it fails."""
        if self.rate_limiter is not None:
            try:
                return self.rate_limiter.check(client_id)
            except Exception as exc:
                logger.error(
                    "Rate limiter error, using fallback",
                    client_id=client_id,
                    error=str(exc),
                )
        return self.fallback_limiter.check(client_id)

    def get_rate_limit_status(self, client_id: str):
        limiter = self.rate_limiter if self.rate_limiter is not None else self.fallback_limiter
        return limiter.get_status(client_id)

    @property
    def rate_limit_max(self) -> int:
        limiter = self.rate_limiter if self.rate_limiter is not None else self.fallback_limiter
        return limiter.max_requests

    def validate_download_request(
        self, url: Any, user_agent: Optional[str] = None, client_id: Optional[str] = None
    ) -> GateDecision:
        """Validate the URL and inspect the user agent (log only)."""
        outcome = self.validator.validate(url)
        if not outcome.is_valid:
            return GateDecision(
                valid=False,
                client_id=client_id or UNKNOWN_CLIENT,
                error=", ".join(outcome.errors),
                platform=outcome.platform,
            )

        if user_agent and any(p.search(user_agent) for p in SUSPICIOUS_USER_AGENTS):
            # Monitoring signal only, never a rejection
            logger.info(
                "Suspicious user agent detected",
                client_id=client_id,
                user_agent=user_agent,
            )

        return GateDecision(
            valid=True,
            client_id=client_id or UNKNOWN_CLIENT,
            platform=outcome.platform,
            content_id=outcome.content_id,
        )

    def handle(self, url: Any, headers: Mapping[str, str]) -> GateDecision:
        """Admit or reject a download request."""
        client_id = self.get_client_id(headers)

        rate_limit = self.check_rate_limit(client_id)
        if not rate_limit.allowed:
            logger.info(
                "Client rate limited",
                client_id=client_id,
                reset_time=rate_limit.reset_time,
            )
            return GateDecision(
                valid=False,
                client_id=client_id,
                error="Rate limit exceeded",
                rate_limited=True,
                rate_limit=rate_limit,
            )

        decision = self.validate_download_request(
            url, headers.get("user-agent"), client_id=client_id
        )
        decision.rate_limit = rate_limit
        return decision


__all__ = [
    "GateDecision",
    "RequestGatekeeper",
    "hash_client_ip",
    "SUSPICIOUS_USER_AGENTS",
    "UNKNOWN_CLIENT",
]
