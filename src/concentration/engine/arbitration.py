"""AI turn orchestration for Concentration.

The arbitration loop drives one AI turn to completion. It asks the suggester
for coordinates, keeps only those that are legal against the live board,
applies them through ``flip`` with ``actor=AI``, and decides after each step
whether the AI keeps the turn.

Turn state machine:
    AWAITING_FIRST_FLIP -> ONE_FLIPPED -> PAIR_RESOLVED{match | no-match}

A match returns the machine to AWAITING_FIRST_FLIP under the AI; a mismatch,
an empty step or a win ends the turn. Suggester failures and timeouts count
as a step with zero suggestions and never propagate.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from concentration.engine.game_engine import check_flip, flip
from concentration.models.board import Coordinate
from concentration.models.state import Actor, GameState
from concentration.opponents.base import (
    Difficulty,
    MoveSuggester,
    SuggesterUnavailableError,
    SuggestionRequest,
)

logger = logging.getLogger(__name__)


class TurnEnd(str, Enum):
    """Why a suggester-driven turn stopped."""

    WON = "won"
    MISMATCH = "mismatch"
    NO_VALID_SUGGESTIONS = "no_valid_suggestions"
    BLOCKED = "blocked"  # A mismatched pair is still face up


@dataclass
class TurnResult:
    """Outcome of one suggester-driven turn.

    Attributes:
        applied: Coordinates actually flipped, in order
        requests: Number of suggester calls made
        ended_by: Termination reason
        pairs_matched: Pairs matched during the turn
    """

    applied: list[Coordinate] = field(default_factory=list)
    requests: int = 0
    ended_by: TurnEnd = TurnEnd.NO_VALID_SUGGESTIONS
    pairs_matched: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "moves": [{"row": r, "col": c} for r, c in self.applied],
            "requests": self.requests,
            "endedBy": self.ended_by.value,
            "pairsMatched": self.pairs_matched,
        }


def coerce_suggestion(item: Any) -> Coordinate | None:
    """Turn one raw suggestion into a coordinate, or None if malformed.

    Accepts ``{"row": int, "col": int}`` mappings and two-element
    lists/tuples of ints. Booleans and floats are rejected.
    """
    if isinstance(item, dict):
        row, col = item.get("row"), item.get("col")
    elif isinstance(item, (list, tuple)) and len(item) == 2:
        row, col = item
    else:
        return None
    if type(row) is not int or type(col) is not int:
        return None
    return (row, col)


def apply_suggestions(
    state: GameState,
    suggestions: Iterable[Any],
    limit: int,
    actor: Actor = Actor.AI,
) -> list[Coordinate]:
    """Apply up to ``limit`` valid suggestions as flips by ``actor``, in order received.

    Every candidate is checked against the live state immediately before it
    is applied, so duplicates and cards flipped earlier in the same batch
    are dropped along with out-of-bounds and resolved targets.

    Returns:
        The coordinates that were flipped
    """
    applied: list[Coordinate] = []
    for item in suggestions:
        if len(applied) >= limit:
            break
        pos = coerce_suggestion(item)
        if pos is None:
            logger.debug(f"Dropping malformed suggestion {item!r}")
            continue
        rejection = check_flip(state, *pos)
        if rejection is not None:
            logger.debug(f"Dropping suggestion {pos}: {rejection.value}")
            continue
        flip(state, pos[0], pos[1], actor)
        applied.append(pos)
    return applied


async def request_suggestions(
    suggester: MoveSuggester,
    state: GameState,
    difficulty: Difficulty,
    timeout: float | None = None,
) -> list[Any]:
    """Ask the suggester for moves, degrading every failure to ``[]``."""
    request = SuggestionRequest.from_state(state, difficulty)
    try:
        suggestions = await asyncio.wait_for(suggester.suggest(request), timeout)
    except asyncio.TimeoutError:
        logger.warning(f"{suggester.name} timed out after {timeout}s; no suggestions this step")
        return []
    except SuggesterUnavailableError as e:
        logger.warning(f"{suggester.name} unavailable: {e}")
        return []
    if not isinstance(suggestions, list):
        logger.warning(f"{suggester.name} returned {type(suggestions).__name__}, expected list")
        return []
    return suggestions


async def run_turn(
    state: GameState,
    suggester: MoveSuggester,
    actor: Actor,
    difficulty: Difficulty = Difficulty.EASY,
    timeout: float | None = None,
) -> TurnResult:
    """Play a turn for ``actor`` from suggestions until it mismatches, stalls or wins.

    Steps, repeated while the game is not won:
      1. No card face up: request suggestions and apply up to two.
         One card face up: request suggestions and apply at most one.
         Two or more face up (an uncleared mismatch): end the turn.
      2. A step that applies nothing ends the turn.
      3. A resolved pair matched by the actor continues the turn; a mismatch
         ends it. A step that leaves one card pending loops to complete it.

    The loop owns ``state`` for the whole turn; callers must not mutate it
    concurrently. Mismatched cards are left face up for the caller to show
    and then clear with ``reset_unmatched_cards``.

    Args:
        state: Match state, mutated in place
        suggester: Collaborator to consult
        actor: Party credited with the flips
        difficulty: Difficulty label forwarded to the suggester
        timeout: Per-request timeout in seconds (None waits forever)

    Returns:
        TurnResult describing what happened
    """
    result = TurnResult()

    async with suggester.turn(state, difficulty):
        while not state.is_win:
            face_up = state.board.face_up_unmatched()
            if len(face_up) >= 2:
                logger.warning(f"{actor.value} turn blocked: {len(face_up)} unmatched cards still face up")
                result.ended_by = TurnEnd.BLOCKED
                break

            limit = 2 if not face_up else 1
            resolved_before = state.move_count
            suggestions = await request_suggestions(suggester, state, difficulty, timeout)
            result.requests += 1

            applied = apply_suggestions(state, suggestions, limit, actor)
            result.applied.extend(applied)
            if not applied:
                result.ended_by = TurnEnd.NO_VALID_SUGGESTIONS
                break

            if state.move_count == resolved_before:
                # Half a pair is face up; ask for the second card
                continue

            resolution = state.last_resolution
            if resolution is not None and resolution.matched and resolution.actor is actor:
                result.pairs_matched += 1
                continue

            result.ended_by = TurnEnd.MISMATCH
            break
        else:
            result.ended_by = TurnEnd.WON

    logger.info(
        f"{actor.value} turn ({suggester.name}, {difficulty.value}) ended by {result.ended_by.value}: "
        f"{len(result.applied)} flips, {result.pairs_matched} pairs, {result.requests} requests"
    )
    return result


async def run_ai_turn(
    state: GameState,
    suggester: MoveSuggester,
    difficulty: Difficulty = Difficulty.EASY,
    timeout: float | None = None,
) -> TurnResult:
    """Drive one AI turn to completion. See ``run_turn``."""
    return await run_turn(state, suggester, Actor.AI, difficulty, timeout)
