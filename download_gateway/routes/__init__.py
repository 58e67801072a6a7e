"""Collection of APIRouters that make up the download gateway."""

from . import download, health, platforms, rate_limit, status

ROUTERS = [
    status.router,
    health.router,
    platforms.router,
    rate_limit.router,
    download.router,
]

__all__ = ["ROUTERS"]
