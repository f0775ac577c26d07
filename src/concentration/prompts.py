"""LLM prompts for the Concentration AI player.

All prompts use clear template variable naming with curly braces: {variable_name}
"""

import json

from concentration.models.state import MoveRecord

# =============================================================================
# SUGGESTER PROMPTS
# =============================================================================

SUGGESTER_SYSTEM_PROMPT = """You are the AI player in a two-player card matching game (Concentration).

Reply with a JSON array only, no commentary. Each element is an object with
integer "row" and "col" keys, zero-indexed from the top-left card."""

CONVERSATION_PRIMER_PROMPT = """You are playing a card matching game. The grid is {rows}x{cols}.
Each card has a color, and every card has exactly one matching pair somewhere on the grid.
The goal is to find and match more pairs than your opponent.
At the end, all cards should be matched and open.
Your difficulty is {difficulty}.

Grid notation: one line per row, cards separated by commas. A color means the
card is matched or currently face up; "?" means the card is hidden.

Remember all previously revealed cards and their positions, including the
user's moves. Use this memory to make optimal moves."""

MOVE_REQUEST_PROMPT = """The user's last flips were: {last_flipped} (row, col positions).
Here is the current grid:
{grid}
History of cards revealed by the user: {user_moves}
History of cards revealed by you: {ai_moves}

{instruction}
Only pick cards shown as "?". Answer as a JSON array, for example: {example}"""

PAIR_INSTRUCTION = (
    "If you know a matching pair, select those cards. If you do not know any "
    "matches, pick any two hidden cards. Give me two moves."
)

COMPLETE_PAIR_INSTRUCTION = (
    "One of your cards is already face up at {pending}. Pick the single hidden "
    "card you believe matches it. Give me one move."
)

HISTORY_PROMPT = """Earlier in this match you were shown these grids and replied as follows:

{exchanges}"""

HISTORY_EXCHANGE = """Grid:
{grid}
Your reply: {reply}"""

# Replies are truncated to this many characters when replayed
MAX_REPLAYED_REPLY = 300


def format_grid(grid: list[list[str | None]]) -> str:
    """Render a masked grid, one comma-separated line per row."""
    return "\n".join(",".join(color or "?" for color in row) for row in grid)


def format_moves(moves: list[MoveRecord]) -> str:
    return json.dumps([move.model_dump() for move in moves])


def format_history(history: list[tuple[str, str]]) -> str:
    """Render earlier (grid, reply) exchanges for replay in a new conversation."""
    exchanges = "\n\n".join(
        HISTORY_EXCHANGE.format(grid=grid, reply=reply.strip()[:MAX_REPLAYED_REPLY])
        for grid, reply in history
    )
    return HISTORY_PROMPT.format(exchanges=exchanges)


def format_primer(
    rows: int,
    cols: int,
    difficulty: str,
    history: list[tuple[str, str]] | None = None,
) -> str:
    """Build the opening message of a conversation.

    Earlier exchanges of the match, if any, are appended after the rules.
    """
    primer = CONVERSATION_PRIMER_PROMPT.format(rows=rows, cols=cols, difficulty=difficulty)
    if history:
        primer = f"{primer}\n\n{format_history(history)}"
    return primer


def format_move_request(
    grid: list[list[str | None]],
    user_moves: list[MoveRecord],
    ai_moves: list[MoveRecord],
    last_flipped: list[tuple[int, int]],
    pending: list[tuple[int, int]],
) -> str:
    """Build the per-request prompt.

    A single pending card asks for its mate; otherwise a full pair is requested.
    """
    if len(pending) == 1:
        instruction = COMPLETE_PAIR_INSTRUCTION.format(pending=list(pending[0]))
        example = '[{"row":2,"col":3}]'
    else:
        instruction = PAIR_INSTRUCTION
        example = '[{"row":0,"col":1},{"row":2,"col":3}]'
    return MOVE_REQUEST_PROMPT.format(
        last_flipped=json.dumps([list(pos) for pos in last_flipped]),
        grid=format_grid(grid),
        user_moves=format_moves(user_moves),
        ai_moves=format_moves(ai_moves),
        instruction=instruction,
        example=example,
    )
