"""Application factory for the download gateway."""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .core import Settings, setup_logging
from .middleware import request_metrics_middleware
from .routes import ROUTERS
from .state import GatewayState, initialize_state

logger = structlog.get_logger()


async def _sweep_fallback_limiter(state: GatewayState) -> None:
    """Periodically evict closed windows from the in-memory fallback limiter."""
    interval = state.settings.fallback_cleanup_interval
    while True:
        try:
            await asyncio.sleep(interval)
            state.fallback_limiter.cleanup()
        except asyncio.CancelledError:
            break
        except Exception as exc:  # pragma: no cover
            logger.error("Fallback limiter sweep failed", error=str(exc))


def _start_background_tasks(state: GatewayState) -> None:
    if state.rate_limiter is not None:
        state.rate_limiter.start()
    state.background_tasks.append(asyncio.create_task(_sweep_fallback_limiter(state)))


async def _shutdown(state: GatewayState) -> None:
    for task in state.background_tasks:
        task.cancel()
    await asyncio.gather(*state.background_tasks, return_exceptions=True)

    # Persistent limiter performs its final flush here
    if state.rate_limiter is not None:
        await state.rate_limiter.close()
    await state.extraction_client.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create a configured FastAPI application instance."""

    resolved_settings = settings or Settings()
    setup_logging(resolved_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting download gateway",
            environment=resolved_settings.environment,
            backend=resolved_settings.extraction_base_url,
        )
        state = initialize_state(resolved_settings)
        app.state.gateway_state = state

        if resolved_settings.enable_background_tasks:
            _start_background_tasks(state)

        try:
            yield
        finally:
            logger.info("Shutting down download gateway")
            await _shutdown(state)
            logger.info("Download gateway shutdown complete")

    app = FastAPI(
        title="Social Media Download Gateway",
        description=(
            "Validates, sanitizes and rate limits download requests "
            "before they reach the extraction backend"
        ),
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
            "Retry-After",
            "X-Error-ID",
        ],
    )
    app.middleware("http")(request_metrics_middleware)

    for router in ROUTERS:
        app.include_router(router)

    return app
