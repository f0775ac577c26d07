"""Match lifecycle and registry for Concentration.

A Match owns one GameState, the suggester session consulted for its AI
turns, and a lock that serializes every operation on it (including a whole
AI turn). The MatchRegistry maps match ids to matches so that concurrent
matches never share state. It evicts matches that go unused past a TTL,
and the least recently used ones beyond a size limit, closing their
suggester sessions.

Transport layers such as the Flask API talk to these classes and never touch
GameState directly.
"""

from __future__ import annotations

import asyncio
import logging
import random
import threading
import time
import uuid
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from concentration.engine.arbitration import TurnResult, run_ai_turn
from concentration.engine.game_engine import (
    FlipRejection,
    check_flip,
    flip,
    new_game,
    reset_unmatched_cards,
)
from concentration.models.state import Actor, GameState
from concentration.opponents.base import Difficulty, MoveSuggester

logger = logging.getLogger(__name__)


class MatchNotFoundError(KeyError):
    """Raised for unknown, ended or evicted match ids."""

    def __init__(self, match_id: str):
        self.match_id = match_id
        super().__init__(match_id)

    def __str__(self) -> str:
        return f"No active match with id {self.match_id!r}"


@dataclass
class FlipOutcome:
    """Result of a flip request: whether it applied, and why not if it didn't."""

    applied: bool
    reason: FlipRejection | None = None


class Match:
    """One match: its state, its suggester session and its lock.

    Attributes:
        match_id: Registry key
        state: Authoritative game state
        suggester: Collaborator consulted on AI turns
        created_at: Clock reading at creation
        touched_at: Clock reading at last access
    """

    def __init__(
        self,
        match_id: str,
        state: GameState,
        suggester: MoveSuggester,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.match_id = match_id
        self.state = state
        self.suggester = suggester
        self.lock = threading.Lock()
        self._clock = clock
        self.created_at = clock()
        self.touched_at = self.created_at

    def touch(self) -> None:
        self.touched_at = self._clock()

    def flip(self, row: int, col: int, actor: Actor = Actor.USER) -> FlipOutcome:
        """Apply a flip, reporting why it was ignored if it was."""
        with self.lock:
            rejection = check_flip(self.state, row, col)
            if rejection is not None:
                return FlipOutcome(applied=False, reason=rejection)
            flip(self.state, row, col, actor)
            return FlipOutcome(applied=True)

    def play_ai_turn(
        self,
        difficulty: Difficulty = Difficulty.EASY,
        timeout: float | None = None,
    ) -> TurnResult:
        """Run a full AI turn synchronously.

        Since Flask is sync, the async arbitration loop runs under
        asyncio.run(). The match lock is held for the entire turn.
        """
        with self.lock:
            return asyncio.run(run_ai_turn(self.state, self.suggester, difficulty, timeout))

    def clear_unmatched(self) -> None:
        with self.lock:
            reset_unmatched_cards(self.state)

    def snapshot(self) -> dict[str, Any]:
        with self.lock:
            return self.state.snapshot()

    def close(self) -> None:
        """Destroy the suggester session. The match must not be used afterwards."""
        self.suggester.close()


class MatchRegistry:
    """Thread-safe map of match id to Match with TTL and size eviction.

    Usage:
        registry = MatchRegistry(lambda: get_suggester("memory"))
        match = registry.create(4, 4)
        match.flip(0, 0)
        registry.get(match.match_id).play_ai_turn(Difficulty.HARD)
    """

    def __init__(
        self,
        suggester_factory: Callable[[], MoveSuggester],
        max_matches: int = 100,
        ttl_seconds: float = 3600.0,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
    ):
        if max_matches < 1:
            raise ValueError(f"max_matches must be at least 1, got {max_matches}")
        self._suggester_factory = suggester_factory
        self.max_matches = max_matches
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._rng = rng
        self._matches: OrderedDict[str, Match] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._matches)

    def __contains__(self, match_id: object) -> bool:
        with self._lock:
            return match_id in self._matches

    def create(self, rows: int, cols: int, replace_id: str | None = None) -> Match:
        """Start a new match, optionally ending the one it replaces.

        Raises:
            InvalidDimensionsError: If the board size is invalid; no match
                is created and ``replace_id`` is left untouched
        """
        state = new_game(rows, cols, rng=self._rng)
        match = Match(uuid.uuid4().hex, state, self._suggester_factory(), clock=self._clock)

        evicted: list[Match] = []
        with self._lock:
            if replace_id is not None and replace_id in self._matches:
                evicted.append(self._matches.pop(replace_id))
            self._matches[match.match_id] = match
            evicted.extend(self._evict_locked())

        for old in evicted:
            old.close()
        logger.info(f"Created match {match.match_id} ({rows}x{cols}); {len(self)} active")
        return match

    def get(self, match_id: str) -> Match:
        """Look up a live match and mark it recently used.

        Raises:
            MatchNotFoundError: If the id is unknown or has been evicted
        """
        with self._lock:
            evicted = self._evict_locked()
            match = self._matches.get(match_id)
            if match is not None:
                match.touch()
                self._matches.move_to_end(match_id)

        for old in evicted:
            old.close()
        if match is None:
            raise MatchNotFoundError(match_id)
        return match

    def end(self, match_id: str) -> None:
        """End a match and destroy its suggester session.

        Raises:
            MatchNotFoundError: If the id is unknown
        """
        with self._lock:
            match = self._matches.pop(match_id, None)
        if match is None:
            raise MatchNotFoundError(match_id)
        match.close()
        logger.info(f"Ended match {match_id}")

    def _evict_locked(self) -> list[Match]:
        """Drop expired and over-capacity matches. Caller holds ``_lock``."""
        now = self._clock()
        evicted = [
            self._matches.pop(match_id)
            for match_id, match in list(self._matches.items())
            if now - match.touched_at > self.ttl_seconds
        ]
        while len(self._matches) > self.max_matches:
            _, match = self._matches.popitem(last=False)
            evicted.append(match)
        for match in evicted:
            logger.warning(f"Evicting idle match {match.match_id}")
        return evicted
