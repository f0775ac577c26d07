"""Game engine module for Concentration.

This module contains the core game logic including:
- game_engine: State transitions (flip, pair resolution, reset, new game)
- arbitration: The AI turn loop that filters untrusted suggestions
- match: Per-match ownership and the match registry

Usage:
    from concentration.engine import MatchRegistry
    from concentration.opponents import Difficulty, get_suggester

    registry = MatchRegistry(lambda: get_suggester("memory"))
    match = registry.create(4, 4)

    # Human flips a pair
    match.flip(0, 0)
    match.flip(0, 1)
    match.clear_unmatched()

    # AI plays until it misses
    result = match.play_ai_turn(Difficulty.MEDIUM)
    print(result.ended_by, match.snapshot()["aiScore"])
"""

from concentration.engine.arbitration import (
    TurnResult,
    TurnEnd,
    apply_suggestions,
    coerce_suggestion,
    request_suggestions,
    run_ai_turn,
    run_turn,
)
from concentration.engine.game_engine import (
    FlipRejection,
    check_flip,
    flip,
    new_game,
    reset_unmatched_cards,
    resolve_pending_pair,
)
from concentration.engine.match import (
    FlipOutcome,
    Match,
    MatchNotFoundError,
    MatchRegistry,
)

__all__ = [
    # State transitions
    "FlipRejection",
    "check_flip",
    "flip",
    "new_game",
    "reset_unmatched_cards",
    "resolve_pending_pair",
    # Arbitration
    "TurnResult",
    "TurnEnd",
    "apply_suggestions",
    "coerce_suggestion",
    "request_suggestions",
    "run_ai_turn",
    "run_turn",
    # Matches
    "FlipOutcome",
    "Match",
    "MatchNotFoundError",
    "MatchRegistry",
]
