"""Defense-in-depth sanitization for URLs that already passed validation."""

from __future__ import annotations

import re
from typing import List, Pattern, Tuple
from urllib.parse import parse_qsl, urlencode

from .errors import FormatError, SecurityError
from .validation import parse_url

DEFAULT_PORTS = {"http": 80, "https": 443}


class URLSanitizer:
    """Strip dangerous protocols, script markers and redirect parameters."""

    DANGEROUS_PROTOCOLS: Tuple[str, ...] = (
        "javascript:",
        "data:",
        "vbscript:",
        "file:",
        "ftp:",
    )

    XSS_PATTERNS: Tuple[Pattern[str], ...] = tuple(
        re.compile(pattern, re.IGNORECASE)
        for pattern in (
            r"<script",
            r"<iframe",
            r"<embed",
            r"<object",
            r"onload=",
            r"onerror=",
            r"onclick=",
            r"onmouseover=",
            r"javascript:",
            r".fromCharCode",
            r".innerHTML",
            r".outerHTML",
            r"eval\(",
            r"expression\(",
        )
    )

    # Open-redirect, SSRF and callback-injection vectors
    DANGEROUS_PARAMS = frozenset(
        {
            "callback",
            "jsonp",
            "redirect",
            "return",
            "next",
            "url",
            "dest",
            "destination",
            "redirect_uri",
            "redirect_url",
            "return_to",
            "load",
            "src",
            "eval",
            "exec",
            "cmd",
            "command",
        }
    )

    @classmethod
    def sanitize(cls, url: str) -> str:
        """Return a rebuilt URL with only scheme, host, path and safe parameters.

        Raises:
            SecurityError: a dangerous protocol or XSS marker is present.
            FormatError: the input is not a parseable URL.
        """
        if not isinstance(url, str):
            raise FormatError("Invalid URL format")

        trimmed = url.strip()
        lowered = trimmed.lower()

        if lowered.startswith(cls.DANGEROUS_PROTOCOLS):
            raise SecurityError("Dangerous protocol detected")

        for pattern in cls.XSS_PATTERNS:
            if pattern.search(trimmed):
                raise SecurityError("XSS pattern detected")

        try:
            return cls._rebuild(trimmed)
        except SecurityError:
            raise
        except Exception as exc:
            raise FormatError("Invalid URL format") from exc

    @classmethod
    def _rebuild(cls, url: str) -> str:
        parsed = parse_url(url)
        if parsed is None:
            raise FormatError("Invalid URL format")

        scheme = parsed.scheme.lower()
        hostname = parsed.hostname or ""
        host = f"[{hostname}]" if ":" in hostname else hostname
        port = parsed.port
        if port is not None and port != DEFAULT_PORTS.get(scheme):
            host = f"{host}:{port}"

        path = parsed.path or "/"
        safe_url = f"{scheme}://{host}{path}"

        safe_params: List[Tuple[str, str]] = [
            (key, value)
            for key, value in parse_qsl(parsed.query, keep_blank_values=True)
            if key.lower() not in cls.DANGEROUS_PARAMS
        ]
        query = urlencode(safe_params)
        return f"{safe_url}?{query}" if query else safe_url


def sanitize(url: str) -> str:
    """Module-level shortcut for :meth:`URLSanitizer.sanitize`."""
    return URLSanitizer.sanitize(url)


__all__ = ["URLSanitizer", "sanitize"]
