"""Shared test configuration and pytest markers."""

import pytest

from api.dependencies import get_orchestrator, get_store


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: drives the FastAPI app through TestClient"
    )


@pytest.fixture(autouse=True)
def _fresh_dependencies():
    """Drop the process-wide store and orchestrator between tests."""
    get_store.cache_clear()
    get_orchestrator.cache_clear()
    yield
    get_store.cache_clear()
    get_orchestrator.cache_clear()
