"""Game state models for Concentration.

The GameState aggregate holds everything about one match: the board, the
pending flip buffer, per-actor move logs, scores and the winner. It is
mutated only through the functions in ``concentration.engine.game_engine``.

Wire names follow the JSON API (``moves``, ``win``, ``lastFlipped``, ...);
``GameState.snapshot()`` produces that representation.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from concentration.models.board import Board, Coordinate


class Actor(str, Enum):
    """Party credited with a flip."""

    USER = "user"
    AI = "ai"

    @property
    def other(self) -> Actor:
        return Actor.AI if self is Actor.USER else Actor.USER


class Winner(str, Enum):
    """Final outcome, decided when the last pair is matched."""

    USER = "user"
    AI = "ai"
    DRAW = "draw"


class MoveRecord(BaseModel):
    """Snapshot of a card taken at the moment it was flipped.

    ``matched`` is the card's status at flip time and is never updated
    afterwards, even when the flip completes a pair.
    """

    row: int
    col: int
    color: str
    matched: bool


class PairResolution(BaseModel):
    """Outcome of the most recent pair resolution."""

    first: Coordinate
    second: Coordinate
    matched: bool
    actor: Actor


class GameState(BaseModel):
    """Complete state of a single match.

    Attributes:
        board: The card grid
        move_count: Number of completed pair resolutions
        is_win: True once every card is matched
        pending_flips: Face-up coordinates awaiting pair resolution (0-2)
        user_moves: Flip log of the human player
        ai_moves: Flip log of the AI player
        user_score: Pairs matched by the human player
        ai_score: Pairs matched by the AI player
        winner: Set once, when ``is_win`` first becomes true
        current_actor: Who holds the turn (informational)
        last_resolution: Most recent pair resolution, if any
    """

    model_config = ConfigDict(populate_by_name=True)

    board: Board
    move_count: int = Field(default=0, ge=0, alias="moves")
    is_win: bool = Field(default=False, alias="win")
    pending_flips: list[Coordinate] = Field(default_factory=list, max_length=2, alias="lastFlipped")
    user_moves: list[MoveRecord] = Field(default_factory=list, alias="userMoves")
    ai_moves: list[MoveRecord] = Field(default_factory=list, alias="aiMoves")
    user_score: int = Field(default=0, ge=0, alias="userScore")
    ai_score: int = Field(default=0, ge=0, alias="aiScore")
    winner: Winner | None = Field(default=None)
    current_actor: Actor = Field(default=Actor.USER, alias="currentActor")
    last_resolution: PairResolution | None = Field(default=None, alias="lastResolution")

    def moves_for(self, actor: Actor) -> list[MoveRecord]:
        """Return the (mutable) move log for ``actor``."""
        return self.ai_moves if actor is Actor.AI else self.user_moves

    def score_for(self, actor: Actor) -> int:
        return self.ai_score if actor is Actor.AI else self.user_score

    def add_point(self, actor: Actor) -> None:
        if actor is Actor.AI:
            self.ai_score += 1
        else:
            self.user_score += 1

    def decide_winner(self) -> Winner:
        """Compare scores: strictly greater wins, equal is a draw."""
        if self.user_score > self.ai_score:
            return Winner.USER
        if self.ai_score > self.user_score:
            return Winner.AI
        return Winner.DRAW

    def snapshot(self) -> dict[str, Any]:
        """Serializable view of the match as exchanged with callers."""
        data = self.model_dump(mode="json", by_alias=True, exclude={"board"})
        data["grid"] = self.board.model_dump(mode="json")["cards"]
        return data
