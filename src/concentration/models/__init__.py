"""Concentration game models.

This module exports the board and state data structures for the game.
"""

from .board import (
    PALETTE,
    Board,
    Card,
    Coordinate,
    InvalidDimensionsError,
    generate_board,
    generate_colors,
)
from .state import (
    Actor,
    GameState,
    MoveRecord,
    PairResolution,
    Winner,
)

__all__ = [
    # Board
    "Board",
    "Card",
    "Coordinate",
    "InvalidDimensionsError",
    "PALETTE",
    "generate_board",
    "generate_colors",
    # State
    "Actor",
    "GameState",
    "MoveRecord",
    "PairResolution",
    "Winner",
]
