"""Pytest fixtures for webapp tests."""

import pytest

from concentration.webapp import create_app
from concentration.webapp.config import TestConfig


@pytest.fixture
def app():
    """Create test application backed by the offline memory suggester."""
    return create_app(TestConfig)


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def registry(app):
    """The app's match registry."""
    return app.extensions["match_registry"]


@pytest.fixture
def new_game(client):
    """Start a match and return its JSON payload."""

    def _new_game(rows=2, cols=2, **extra):
        response = client.post("/api/new", json={"rows": rows, "cols": cols, **extra})
        assert response.status_code == 200
        return response.get_json()

    return _new_game
