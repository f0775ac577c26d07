"""Rule-based move suggesters for Concentration.

These suggesters need no LLM: they are used for offline play, simulations
and tests. ``MemorySuggester`` approximates a player with imperfect recall,
where difficulty controls how often remembered cards are actually used.
"""

from __future__ import annotations

import random
from typing import TYPE_CHECKING, ClassVar

from concentration.opponents.base import Difficulty, MoveSuggester, SuggestionRequest

if TYPE_CHECKING:
    from concentration.models.board import Coordinate


def _as_move(pos: Coordinate) -> dict[str, int]:
    return {"row": pos[0], "col": pos[1]}


class RandomSuggester(MoveSuggester):
    """Suggests random hidden cards and ignores history."""

    def __init__(self, name: str = "Random", seed: int | None = None):
        super().__init__(name=name)
        self._rng = random.Random(seed)

    async def suggest(self, request: SuggestionRequest) -> list[dict[str, int]]:
        hidden = request.hidden_cells()
        picks = self._rng.sample(hidden, k=min(2, len(hidden)))
        return [_as_move(pos) for pos in picks]


class MemorySuggester(MoveSuggester):
    """Suggests moves from the colors revealed in both move logs.

    With probability ``recall`` (by difficulty) the suggester uses what it
    has seen: it completes a pending card whose mate is known, or plays a
    known pair. Otherwise, or when memory offers nothing, it explores
    hidden cards it has not seen yet.
    """

    recall_by_difficulty: ClassVar[dict[Difficulty, float]] = {
        Difficulty.EASY: 0.35,
        Difficulty.MEDIUM: 0.7,
        Difficulty.HARD: 1.0,
    }

    def __init__(self, name: str = "Memory", seed: int | None = None):
        super().__init__(name=name)
        self._rng = random.Random(seed)

    def _remembered(self, request: SuggestionRequest) -> dict[Coordinate, str]:
        """Colors of hidden cards seen in either log, latest record winning."""
        hidden = set(request.hidden_cells())
        seen: dict[Coordinate, str] = {}
        for move in [*request.user_moves, *request.ai_moves]:
            pos = (move.row, move.col)
            if pos in hidden:
                seen[pos] = move.color
        return seen

    def _known_pair(self, seen: dict[Coordinate, str]) -> list[Coordinate] | None:
        by_color: dict[str, list[Coordinate]] = {}
        for pos, color in sorted(seen.items()):
            by_color.setdefault(color, []).append(pos)
            if len(by_color[color]) == 2:
                return by_color[color]
        return None

    def _explore(self, request: SuggestionRequest, seen: dict[Coordinate, str], k: int) -> list[Coordinate]:
        hidden = request.hidden_cells()
        unseen = [pos for pos in hidden if pos not in seen]
        pool = unseen if len(unseen) >= k else hidden
        return self._rng.sample(pool, k=min(k, len(pool)))

    async def suggest(self, request: SuggestionRequest) -> list[dict[str, int]]:
        seen = self._remembered(request)
        uses_memory = self._rng.random() < self.recall_by_difficulty[request.difficulty]

        if len(request.pending_flips) == 1:
            row, col = request.pending_flips[0]
            color = request.grid[row][col]
            if uses_memory:
                mates = [pos for pos, c in seen.items() if c == color]
                if mates:
                    return [_as_move(mates[0])]
            return [_as_move(pos) for pos in self._explore(request, seen, 1)]

        if uses_memory:
            pair = self._known_pair(seen)
            if pair:
                return [_as_move(pos) for pos in pair]

        return [_as_move(pos) for pos in self._explore(request, seen, 2)]

