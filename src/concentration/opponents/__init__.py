"""Move suggesters for the Concentration AI player.

This module provides the collaborators the arbitration loop consults:

1. Deterministic suggesters - Random picks or rule-based memory
2. Claude suggester - LLM-driven, one conversation per AI turn

All suggesters implement the MoveSuggester base class interface.
"""

from concentration.opponents.base import (
    SUGGESTER_TYPES,
    Difficulty,
    MoveSuggester,
    SuggesterUnavailableError,
    SuggestionRequest,
    get_suggester,
)
from concentration.opponents.claude import ClaudeSuggester
from concentration.opponents.deterministic import MemorySuggester, RandomSuggester

__all__ = [
    # Base classes and types
    "Difficulty",
    "MoveSuggester",
    "SuggestionRequest",
    "SuggesterUnavailableError",
    "SUGGESTER_TYPES",
    # Factory functions
    "get_suggester",
    # Implementations
    "ClaudeSuggester",
    "MemorySuggester",
    "RandomSuggester",
]
