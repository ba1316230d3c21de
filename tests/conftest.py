"""Shared fixtures: keep Keyveve in CLI mode with a clean configuration."""

import pytest

from keyveve import Keyveve, DEFAULT_API_URL, DEFAULT_POLL_INTERVAL


@pytest.fixture(autouse=True)
def reset_keyveve():
    """Every test starts (and ends) without a TUI app or client."""
    Keyveve._app = None
    Keyveve.client = None
    Keyveve.project_id = None
    Keyveve.api_url = DEFAULT_API_URL
    Keyveve.poll_interval = DEFAULT_POLL_INTERVAL
    yield
    Keyveve._app = None
    Keyveve.client = None
