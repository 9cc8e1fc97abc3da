"""Test fixtures for the relay service tests."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from relay_service.config import RelaySettings
from relay_service.server import app, get_settings


@pytest.fixture
def settings():
    """Create fake relay settings.

    Returns:
        RelaySettings: Settings pointing at a fake downstream endpoint.
    """
    return RelaySettings(
        signing_key="test-signing-key",
        endpoint_url="https://downstream.example.com/exec",
        asset_id="asset-001",
        key_id="kid-2025",
    )


@pytest.fixture
def test_client(settings):
    """Create a test client with the fake settings injected."""
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def mock_requests(mocker):
    """Mock requests for the downstream endpoint."""
    return mocker.patch("relay_service.relay.requests")


@pytest.fixture
def downstream_response():
    """Build a fake downstream response.

    Returns:
        Callable: Factory taking a status code and response text.
    """

    def _build(status_code=200, text='{"result":"success"}'):
        response = MagicMock()
        response.status_code = status_code
        response.text = text
        return response

    return _build


@pytest.fixture
def coffee_row():
    """A single valid raw row."""
    return {"timestamp": "t1", "item": "Coffee", "qty": "2", "subtotal": "3", "vat": "0.45", "total": "3.45"}
