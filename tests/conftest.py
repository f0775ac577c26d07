"""Shared pytest fixtures and markers for all tests."""

from contextlib import asynccontextmanager

import pytest

from concentration.models.board import Board, Card
from concentration.models.state import GameState
from concentration.opponents.base import MoveSuggester


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "llm_integration: marks tests requiring LLM API calls"
    )
    config.addinivalue_line(
        "markers", "webapp: marks webapp-specific tests"
    )


class ScriptedSuggester(MoveSuggester):
    """Suggester that replays canned responses, then returns nothing.

    A response that is an exception instance is raised instead of returned.
    """

    def __init__(self, responses=None, name="Scripted"):
        super().__init__(name=name)
        self.responses = list(responses or [])
        self.requests = []
        self.turns_entered = 0
        self.turns_exited = 0
        self.closed = False

    async def suggest(self, request):
        self.requests.append(request)
        if not self.responses:
            return []
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @asynccontextmanager
    async def turn(self, state, difficulty):
        self.turns_entered += 1
        try:
            yield
        finally:
            self.turns_exited += 1

    def close(self):
        self.closed = True


def build_state(*rows: str) -> GameState:
    """Build a state from a layout such as ``build_state("AB", "AB")``.

    Each character is one card's color.
    """
    return GameState(board=Board(cards=[[Card(color=ch) for ch in row] for row in rows]))


@pytest.fixture
def make_state():
    """Provide the layout-based state builder."""
    return build_state


@pytest.fixture
def scripted():
    """Provide the ScriptedSuggester class."""
    return ScriptedSuggester
