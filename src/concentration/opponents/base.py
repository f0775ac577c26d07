"""Base move-suggester interface for Concentration.

A suggester is the AI collaborator consulted by the arbitration loop. It
proposes coordinates to flip; the engine decides which of them are applied.
Suggesters are therefore free to be wrong, stale or malformed, and callers
must treat whatever they return as untrusted input.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from concentration.models.state import Actor, GameState, MoveRecord

if TYPE_CHECKING:
    from concentration.models.board import Coordinate


class Difficulty(str, Enum):
    """Difficulty label passed to the suggester."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SuggesterUnavailableError(RuntimeError):
    """Raised when a suggester cannot produce suggestions (service down, crash)."""


@dataclass
class SuggestionRequest:
    """Everything a suggester is allowed to see.

    Attributes:
        rows: Board height
        cols: Board width
        grid: Colors of matched or face-up cards, ``None`` for hidden ones
        difficulty: Difficulty label
        user_moves: Human flip log
        ai_moves: AI flip log
        pending_flips: Coordinates currently awaiting pair resolution
    """

    rows: int
    cols: int
    grid: list[list[str | None]]
    difficulty: Difficulty
    user_moves: list[MoveRecord] = field(default_factory=list)
    ai_moves: list[MoveRecord] = field(default_factory=list)
    pending_flips: list[Coordinate] = field(default_factory=list)

    @classmethod
    def from_state(cls, state: GameState, difficulty: Difficulty) -> SuggestionRequest:
        return cls(
            rows=state.board.rows,
            cols=state.board.cols,
            grid=state.board.masked_grid(),
            difficulty=difficulty,
            user_moves=list(state.moves_for(Actor.USER)),
            ai_moves=list(state.moves_for(Actor.AI)),
            pending_flips=list(state.pending_flips),
        )

    def hidden_cells(self) -> list[Coordinate]:
        """Coordinates whose card is neither matched nor face up."""
        return [
            (r, c)
            for r, row in enumerate(self.grid)
            for c, color in enumerate(row)
            if color is None
        ]


class MoveSuggester(ABC):
    """Abstract base class for all AI move suggesters.

    Subclasses:
        - ClaudeSuggester: LLM-backed, one conversation per AI turn
        - RandomSuggester / MemorySuggester: offline, deterministic rules
    """

    def __init__(self, name: str = "Suggester"):
        self.name = name

    @abstractmethod
    async def suggest(self, request: SuggestionRequest) -> list[Any]:
        """Propose up to two coordinates to flip.

        Entries are expected to look like ``{"row": int, "col": int}``, but
        the arbitration loop tolerates anything.

        Raises:
            SuggesterUnavailableError: If the collaborator cannot answer
        """

    @asynccontextmanager
    async def turn(self, state: GameState, difficulty: Difficulty) -> AsyncIterator[None]:
        """Scope one AI turn. Subclasses holding a connection override this."""
        yield

    def close(self) -> None:
        """Release any per-match session state."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


SUGGESTER_TYPES = ["claude", "memory", "random"]


def get_suggester(kind: str, **kwargs: Any) -> MoveSuggester:
    """Create a suggester by type name.

    Args:
        kind: One of ``SUGGESTER_TYPES``
        **kwargs: Passed to the suggester constructor

    Raises:
        ValueError: If the type is unknown
    """
    # Import here to avoid circular imports
    from concentration.opponents.claude import ClaudeSuggester
    from concentration.opponents.deterministic import MemorySuggester, RandomSuggester

    type_name = kind.lower().replace("-", "_").strip()
    suggester_map: dict[str, type[MoveSuggester]] = {
        "claude": ClaudeSuggester,
        "memory": MemorySuggester,
        "random": RandomSuggester,
    }
    if type_name not in suggester_map:
        raise ValueError(f"Unknown suggester type: {kind}. Valid types: {SUGGESTER_TYPES}")
    return suggester_map[type_name](**kwargs)
