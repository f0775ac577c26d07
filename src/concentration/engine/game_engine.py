"""Core state transitions for Concentration.

``flip`` is the single authoritative transition: every higher-level behavior
(turn taking, AI orchestration, the HTTP API) is built by sequencing calls to
it. Each function mutates the given state in place and returns it, so calls
can be chained.

Invalid flips (out of bounds, already face up or matched, a pair already
pending) are silent no-ops. Clients routinely send stale or duplicate
requests, and rejecting them must not disturb the match. ``check_flip``
exposes the reason for callers that want to report it.
"""

from __future__ import annotations

import logging
import random
from enum import Enum

from concentration.models.board import generate_board
from concentration.models.state import (
    Actor,
    GameState,
    MoveRecord,
    PairResolution,
)

logger = logging.getLogger(__name__)


class FlipRejection(str, Enum):
    """Why a flip request leaves the state unchanged."""

    OUT_OF_BOUNDS = "out_of_bounds"
    ALREADY_RESOLVED = "already_resolved"
    PAIR_PENDING = "pair_pending"


def new_game(rows: int, cols: int, rng: random.Random | None = None) -> GameState:
    """Create a fresh match state wrapping a newly shuffled board.

    Raises:
        InvalidDimensionsError: If the board cannot be built
    """
    return GameState(board=generate_board(rows, cols, rng=rng))


def check_flip(state: GameState, row: int, col: int) -> FlipRejection | None:
    """Return the reason ``flip`` would ignore this coordinate, or None."""
    if not state.board.in_bounds(row, col):
        return FlipRejection.OUT_OF_BOUNDS
    card = state.board.card_at(row, col)
    if card.flipped or card.matched or (row, col) in state.pending_flips:
        return FlipRejection.ALREADY_RESOLVED
    if len(state.pending_flips) >= 2:
        return FlipRejection.PAIR_PENDING
    return None


def flip(state: GameState, row: int, col: int, actor: Actor) -> GameState:
    """Turn a card face up on behalf of ``actor``.

    The flip is logged to the actor's move history and pushed onto the
    pending buffer. The second pending flip triggers pair resolution. Win
    status is recomputed after every applied flip.

    Args:
        state: Match state, mutated in place
        row: Target row
        col: Target column
        actor: Party credited with the flip

    Returns:
        The same state object
    """
    rejection = check_flip(state, row, col)
    if rejection is not None:
        logger.debug(f"Ignoring flip ({row}, {col}) by {actor.value}: {rejection.value}")
        return state

    card = state.board.card_at(row, col)
    card.flipped = True
    state.moves_for(actor).append(
        MoveRecord(row=row, col=col, color=card.color, matched=card.matched)
    )
    state.pending_flips.append((row, col))

    if len(state.pending_flips) == 2:
        resolve_pending_pair(state, actor)

    _update_win(state)
    return state


def resolve_pending_pair(state: GameState, actor: Actor) -> GameState:
    """Resolve the two pending flips as a pair attempt by ``actor``.

    On a match both cards are marked matched and the actor scores a point;
    the actor keeps the turn. On a mismatch the turn passes to the other
    actor, and the cards stay face up until ``reset_unmatched_cards``.
    Does nothing unless exactly two flips are pending.
    """
    if len(state.pending_flips) != 2:
        return state

    first, second = state.pending_flips
    card_a = state.board.card_at(*first)
    card_b = state.board.card_at(*second)
    matched = card_a.color == card_b.color

    state.move_count += 1
    if matched:
        card_a.matched = True
        card_b.matched = True
        state.add_point(actor)
        state.current_actor = actor
    else:
        state.current_actor = actor.other

    state.last_resolution = PairResolution(
        first=first, second=second, matched=matched, actor=actor
    )
    state.pending_flips.clear()
    logger.debug(
        f"Pair {first}/{second} by {actor.value}: {'match' if matched else 'no match'} "
        f"(score user={state.user_score} ai={state.ai_score})"
    )
    return state


def reset_unmatched_cards(state: GameState) -> GameState:
    """Turn face down every flipped card that is not matched.

    Leaves matched cards, the pending buffer, scores and logs untouched.
    """
    for _, card in state.board.iter_cards():
        if card.flipped and not card.matched:
            card.flipped = False
    return state


def _update_win(state: GameState) -> None:
    state.is_win = state.board.all_matched()
    if state.is_win and state.winner is None:
        state.winner = state.decide_winner()
        logger.info(
            f"Game won after {state.move_count} pair attempts: winner={state.winner.value} "
            f"(user={state.user_score}, ai={state.ai_score})"
        )
