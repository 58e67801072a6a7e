"""FastAPI dependency helpers."""

import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from .core import ExtractionClient, RequestGatekeeper, Settings
from .state import GatewayState


def get_gateway_state(request: Request) -> GatewayState:
    """Return the gateway state stored on the FastAPI application."""
    state = getattr(request.app.state, "gateway_state", None)
    if not state:
        raise HTTPException(status_code=503, detail="Gateway not initialized")
    return state


def get_settings(state: GatewayState = Depends(get_gateway_state)) -> Settings:
    return state.settings


def get_gatekeeper(
    state: GatewayState = Depends(get_gateway_state),
) -> RequestGatekeeper:
    return state.gatekeeper


def get_extraction_client(
    state: GatewayState = Depends(get_gateway_state),
) -> ExtractionClient:
    return state.extraction_client


async def require_admin_key(
    x_api_key: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Allow the request only when it carries the configured admin API key."""
    expected = settings.admin_api_key
    if not expected or not x_api_key or not secrets.compare_digest(x_api_key, expected):
        raise HTTPException(status_code=403, detail="Admin access required")
