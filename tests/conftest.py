"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from download_gateway import create_app  # noqa: E402
from download_gateway.core import Settings  # noqa: E402
from download_gateway.state import GatewayState  # noqa: E402


class FakeClock:
    """Controllable epoch-millisecond clock."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "data" / "rate-limits.json"


@pytest.fixture
def settings(tmp_path, db_path):
    """Settings isolated to a temporary directory, background tasks disabled."""
    return Settings(
        environment="test",
        log_dir=str(tmp_path / "logs"),
        rate_limit_db_path=str(db_path),
        rate_limit_max=10,
        rate_limit_window_ms=60_000,
        extraction_api_url="http://extraction-backend:3001",
        admin_api_key="test-admin-key",
        enable_background_tasks=False,
    )


@pytest.fixture
def client(settings):
    """Provide a TestClient running the full application lifespan."""
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def state(client) -> GatewayState:
    return client.app.state.gateway_state
