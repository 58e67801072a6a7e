"""ASGI entrypoint exposing the download gateway application."""

from fastapi import FastAPI

from download_gateway import create_app
from download_gateway.core import Settings
from download_gateway.state import GatewayState

__all__ = [
    "app",
    "create_app",
    "Settings",
    "GatewayState",
    "get_app_state",
]

app = create_app()


def get_app_state(app_instance: FastAPI = app) -> GatewayState:
    """Return the current gateway state for the provided FastAPI app."""
    state = getattr(app_instance.state, "gateway_state", None)
    if not state:
        raise RuntimeError("Gateway state has not been initialized")
    return state


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080)
