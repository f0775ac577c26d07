"""Board model for Concentration.

A board is a rectangular grid of cards in which every color token appears on
exactly two cards. Boards are created once per game by ``generate_board`` and
mutated in place as cards are flipped and matched.
"""

from __future__ import annotations

import random
from collections import Counter
from collections.abc import Iterator

from pydantic import BaseModel, Field, model_validator

Coordinate = tuple[int, int]  # (row, col)

# Visually distinct colors used before falling back to generated hues
PALETTE: tuple[str, ...] = (
    "#FF5733",  # Red
    "#33C1FF",  # Blue
    "#33FF57",  # Green
    "#FF33A8",  # Pink
    "#FFD133",  # Yellow
    "#8D33FF",  # Purple
    "#FF8633",  # Orange
    "#33FFF6",  # Cyan
    "#FF3333",  # Bright Red
    "#33FFB5",  # Mint
    "#FFB533",  # Gold
    "#335BFF",  # Deep Blue
    "#A833FF",  # Violet
    "#FF33F6",  # Magenta
    "#33FF8D",  # Lime
    "#FF3380",  # Hot Pink
)


class InvalidDimensionsError(ValueError):
    """Raised when a board cannot be built for the requested size."""

    def __init__(self, rows: int, cols: int):
        self.rows = rows
        self.cols = cols
        super().__init__(
            f"Grid must have positive dimensions and an even number of cards, "
            f"got {rows}x{cols}"
        )


class Card(BaseModel):
    """A single card on the board.

    Attributes:
        color: Color token shared with exactly one other card
        flipped: Whether the card is currently face up
        matched: Whether the card has been permanently paired
    """

    color: str
    flipped: bool = False
    matched: bool = False


class Board(BaseModel):
    """Grid of cards, stored as an ordered sequence of rows.

    Validation on construction enforces the rectangular shape, the even card
    count and the exactly-twice color pairing. A violation is a defect in
    whoever built the board and surfaces as a ``ValidationError``.
    """

    cards: list[list[Card]] = Field(min_length=1)

    @model_validator(mode="after")
    def check_pairing(self) -> Board:
        """Every color must appear on exactly two cards of a rectangular grid."""
        width = len(self.cards[0])
        if width == 0 or any(len(row) != width for row in self.cards):
            raise ValueError("board rows must be non-empty and of equal length")
        counts = Counter(card.color for row in self.cards for card in row)
        unpaired = sorted(color for color, n in counts.items() if n != 2)
        if unpaired:
            raise ValueError(f"colors not paired exactly twice: {unpaired}")
        return self

    @property
    def rows(self) -> int:
        return len(self.cards)

    @property
    def cols(self) -> int:
        return len(self.cards[0])

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def card_at(self, row: int, col: int) -> Card:
        """Return the card at ``(row, col)``.

        Raises:
            IndexError: If the coordinate is outside the grid. Negative
                indices are rejected rather than wrapped.
        """
        if not self.in_bounds(row, col):
            raise IndexError(f"({row}, {col}) is outside a {self.rows}x{self.cols} board")
        return self.cards[row][col]

    def iter_cards(self) -> Iterator[tuple[Coordinate, Card]]:
        """Yield ``((row, col), card)`` in row-major order."""
        for r, row in enumerate(self.cards):
            for c, card in enumerate(row):
                yield (r, c), card

    def face_up_unmatched(self) -> list[Coordinate]:
        return [pos for pos, card in self.iter_cards() if card.flipped and not card.matched]

    def all_matched(self) -> bool:
        return all(card.matched for _, card in self.iter_cards())

    def masked_grid(self) -> list[list[str | None]]:
        """Grid of colors as seen by a player: hidden cards are ``None``."""
        return [
            [card.color if (card.matched or card.flipped) else None for card in row]
            for row in self.cards
        ]


def generate_colors(count: int) -> list[str]:
    """Return ``count`` pairwise-distinct color tokens.

    Uses the fixed palette when it is large enough, otherwise evenly spaced
    HSL hues.
    """
    if count <= len(PALETTE):
        return list(PALETTE[:count])
    return [f"hsl({(360 / count) * i:g}, 90%, 55%)" for i in range(count)]


def shuffle_in_place(items: list, rng: random.Random) -> None:
    """Fisher-Yates shuffle."""
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]


def generate_board(rows: int, cols: int, rng: random.Random | None = None) -> Board:
    """Create a freshly shuffled board with every card face down.

    Args:
        rows: Number of rows (positive)
        cols: Number of columns (positive)
        rng: Random source, injectable for reproducible boards

    Returns:
        A new Board

    Raises:
        InvalidDimensionsError: If either dimension is non-positive or the
            card count is odd
    """
    if rows <= 0 or cols <= 0 or (rows * cols) % 2 != 0:
        raise InvalidDimensionsError(rows, cols)

    rng = rng or random.Random()
    tokens = [color for color in generate_colors(rows * cols // 2) for _ in range(2)]
    shuffle_in_place(tokens, rng)

    cards = [
        [Card(color=tokens[r * cols + c]) for c in range(cols)]
        for r in range(rows)
    ]
    return Board(cards=cards)
