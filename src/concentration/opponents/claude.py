"""Claude-backed move suggester for Concentration.

Each match owns one ClaudeSuggester. During an AI turn the suggester keeps a
single ClaudeSDKClient conversation open, so follow-up requests within the
turn (e.g. completing a half-flipped pair) share context with the first.
The first message of every conversation re-primes the rules and replays a
bounded summary of the earlier exchanges of the match (the grid shown and
the reply given), so memory carries from one turn to the next alongside the
move logs.

Replies are untrusted: anything that does not parse as a JSON array yields
no suggestions, and any failure while talking to the SDK (connect, query or
the response stream) surfaces as SuggesterUnavailableError.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from claude_agent_sdk import ClaudeSDKClient

from concentration.llm import build_options, collect_text, extract_json_array
from concentration.models.state import GameState
from concentration.opponents.base import (
    Difficulty,
    MoveSuggester,
    SuggesterUnavailableError,
    SuggestionRequest,
)
from concentration.prompts import (
    SUGGESTER_SYSTEM_PROMPT,
    format_grid,
    format_move_request,
    format_primer,
)

logger = logging.getLogger(__name__)


class ClaudeSuggester(MoveSuggester):
    """Asks Claude where to flip next.

    Attributes:
        model: Optional model override passed to the SDK
        requests_sent: Number of suggestion requests answered this match
        transcript: Most recent (grid, reply) exchanges of the match, bounded.
            Replayed in the primer of every new conversation.
    """

    def __init__(
        self,
        name: str = "Claude",
        model: str | None = None,
        max_transcript: int = 10,
    ):
        super().__init__(name=name)
        self.model = model
        self.requests_sent = 0
        self.transcript: deque[tuple[str, str]] = deque(maxlen=max_transcript)
        self._client: ClaudeSDKClient | None = None
        self._connected = False
        self._primed = False

    def _new_client(self) -> ClaudeSDKClient:
        options = build_options(system_prompt=SUGGESTER_SYSTEM_PROMPT, model=self.model)
        return ClaudeSDKClient(options=options)

    @asynccontextmanager
    async def turn(self, state: GameState, difficulty: Difficulty) -> AsyncIterator[None]:
        """Hold one conversation open for the duration of an AI turn."""
        self._client = self._new_client()
        self._connected = False
        self._primed = False
        try:
            yield
        finally:
            client, self._client = self._client, None
            if client is not None and self._connected:
                try:
                    await client.disconnect()
                except Exception as e:
                    logger.warning(f"Error closing Claude conversation: {e}")
            self._connected = False

    async def _connected_client(self) -> ClaudeSDKClient:
        if not self._connected:
            await self._client.connect()
            self._connected = True
        return self._client

    async def suggest(self, request: SuggestionRequest) -> list[Any]:
        """Request up to two moves from Claude.

        Raises:
            SuggesterUnavailableError: If the SDK fails or no turn is open
        """
        if self._client is None:
            raise SuggesterUnavailableError("ClaudeSuggester.suggest called outside of a turn")

        last_user_flips = [(m.row, m.col) for m in request.user_moves[-2:]]
        prompt = format_move_request(
            grid=request.grid,
            user_moves=request.user_moves,
            ai_moves=request.ai_moves,
            last_flipped=last_user_flips,
            pending=request.pending_flips,
        )
        if not self._primed:
            primer = format_primer(
                request.rows, request.cols, request.difficulty.value, history=list(self.transcript)
            )
            prompt = f"{primer}\n\n{prompt}"

        # The SDK raises bare Exception for control timeouts and stream errors
        try:
            client = await self._connected_client()
            await client.query(prompt)
            text = await collect_text(client.receive_response())
        except Exception as e:
            raise SuggesterUnavailableError(f"Claude suggester failed: {e}") from e

        self._primed = True
        self.requests_sent += 1
        self.transcript.append((format_grid(request.grid), text))

        moves = extract_json_array(text)
        if moves is None:
            logger.warning(f"Unparseable suggestion from {self.name}: {text[:200]!r}")
            return []
        logger.debug(f"{self.name} suggested {moves}")
        return moves[:2]

    def close(self) -> None:
        """Forget this match's conversation history."""
        self.transcript.clear()
        self.requests_sent = 0
        self._primed = False
