"""Unit tests for ClaudeSuggester with the Agent SDK client mocked out.

Tests cover:
- one conversation per turn, primed once and disconnected on exit
- unparseable replies degrade to no suggestions
- SDK failures, including bare exceptions from connect and the
  response stream, surface as SuggesterUnavailableError
- earlier exchanges replayed when a new turn is primed
- session cleanup via close()
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from claude_agent_sdk import ClaudeSDKError

from concentration.engine.arbitration import TurnEnd, run_ai_turn
from concentration.engine.game_engine import flip
from concentration.models.state import Actor
from concentration.opponents.base import Difficulty, SuggesterUnavailableError, SuggestionRequest
from concentration.opponents.claude import ClaudeSuggester
from concentration.prompts import CONVERSATION_PRIMER_PROMPT, HISTORY_PROMPT

HISTORY_HEADER = HISTORY_PROMPT.splitlines()[0]


@pytest.fixture
def sdk_client():
    """Patch ClaudeSDKClient so every turn gets the same mock conversation."""
    client = MagicMock()
    client.connect = AsyncMock()
    client.query = AsyncMock()
    client.disconnect = AsyncMock()
    with patch("concentration.opponents.claude.ClaudeSDKClient", return_value=client) as cls:
        client.factory = cls
        yield client


def replies(*texts):
    """Patch collect_text to return the given replies in order."""
    return patch("concentration.opponents.claude.collect_text", AsyncMock(side_effect=list(texts)))


def primer_marker():
    return CONVERSATION_PRIMER_PROMPT.strip().splitlines()[0][:30]


@pytest.mark.asyncio
class TestClaudeSuggester:
    """Tests for the per-turn conversation."""

    async def test_primes_once_per_turn(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        suggester = ClaudeSuggester()
        request = SuggestionRequest.from_state(state, Difficulty.MEDIUM)

        with replies('[{"row": 0, "col": 0}]', '[{"row": 1, "col": 0}]'):
            async with suggester.turn(state, Difficulty.MEDIUM):
                first = await suggester.suggest(request)
                second = await suggester.suggest(request)

        assert first == [{"row": 0, "col": 0}]
        assert second == [{"row": 1, "col": 0}]
        prompts = [call.args[0] for call in sdk_client.query.await_args_list]
        assert primer_marker() in prompts[0]
        assert primer_marker() not in prompts[1]
        sdk_client.connect.assert_awaited_once()
        sdk_client.disconnect.assert_awaited_once()
        assert suggester.requests_sent == 2

    async def test_new_turn_reprimes(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        suggester = ClaudeSuggester()
        request = SuggestionRequest.from_state(state, Difficulty.EASY)

        with replies("[]", "[]"):
            for _ in range(2):
                async with suggester.turn(state, Difficulty.EASY):
                    await suggester.suggest(request)

        prompts = [call.args[0] for call in sdk_client.query.await_args_list]
        assert all(primer_marker() in p for p in prompts)
        assert sdk_client.factory.call_count == 2
        assert sdk_client.disconnect.await_count == 2

    async def test_unused_turn_never_connects(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        suggester = ClaudeSuggester()

        async with suggester.turn(state, Difficulty.EASY):
            pass

        sdk_client.connect.assert_not_awaited()
        sdk_client.disconnect.assert_not_awaited()

    async def test_unparseable_reply_yields_nothing(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        suggester = ClaudeSuggester()
        request = SuggestionRequest.from_state(state, Difficulty.EASY)

        with replies("I would flip the top-left card."):
            async with suggester.turn(state, Difficulty.EASY):
                assert await suggester.suggest(request) == []

    async def test_extra_suggestions_truncated(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        suggester = ClaudeSuggester()
        request = SuggestionRequest.from_state(state, Difficulty.EASY)

        with replies("[[0, 0], [0, 1], [1, 0]]"):
            async with suggester.turn(state, Difficulty.EASY):
                assert await suggester.suggest(request) == [[0, 0], [0, 1]]

    async def test_sdk_error_raises_unavailable(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        suggester = ClaudeSuggester()
        request = SuggestionRequest.from_state(state, Difficulty.EASY)
        sdk_client.query.side_effect = ClaudeSDKError("CLI not found")

        async with suggester.turn(state, Difficulty.EASY):
            with pytest.raises(SuggesterUnavailableError):
                await suggester.suggest(request)

        sdk_client.disconnect.assert_awaited_once()

    async def test_connect_failure_raises_unavailable(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        suggester = ClaudeSuggester()
        request = SuggestionRequest.from_state(state, Difficulty.EASY)
        sdk_client.connect.side_effect = Exception("Control request timeout: initialize")

        async with suggester.turn(state, Difficulty.EASY):
            with pytest.raises(SuggesterUnavailableError, match="Control request timeout"):
                await suggester.suggest(request)

        sdk_client.disconnect.assert_not_awaited()
        assert suggester.requests_sent == 0

    async def test_stream_failure_raises_unavailable(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        suggester = ClaudeSuggester()
        request = SuggestionRequest.from_state(state, Difficulty.EASY)

        with patch("concentration.opponents.claude.collect_text", AsyncMock(side_effect=Exception("Unknown error"))):
            async with suggester.turn(state, Difficulty.EASY):
                with pytest.raises(SuggesterUnavailableError, match="Unknown error"):
                    await suggester.suggest(request)

        sdk_client.disconnect.assert_awaited_once()
        assert len(suggester.transcript) == 0

    async def test_suggest_outside_turn_raises(self, make_state):
        suggester = ClaudeSuggester()
        request = SuggestionRequest.from_state(make_state("AB", "AB"), Difficulty.EASY)
        with pytest.raises(SuggesterUnavailableError):
            await suggester.suggest(request)

    async def test_disconnect_error_is_logged_not_raised(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        suggester = ClaudeSuggester()
        request = SuggestionRequest.from_state(state, Difficulty.EASY)
        sdk_client.disconnect.side_effect = ClaudeSDKError("already closed")

        with replies("[]"):
            async with suggester.turn(state, Difficulty.EASY):
                await suggester.suggest(request)

    async def test_plain_disconnect_error_is_logged_not_raised(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        suggester = ClaudeSuggester()
        request = SuggestionRequest.from_state(state, Difficulty.EASY)
        sdk_client.disconnect.side_effect = Exception("transport closed")

        with replies("[]"):
            async with suggester.turn(state, Difficulty.EASY):
                await suggester.suggest(request)

        assert suggester.requests_sent == 1

    async def test_next_turn_replays_earlier_exchanges(self, make_state, sdk_client):
        state = make_state("AB", "BA")
        flip(state, 0, 0, Actor.USER)
        flip(state, 0, 1, Actor.USER)
        suggester = ClaudeSuggester()
        request = SuggestionRequest.from_state(state, Difficulty.MEDIUM)

        with replies('[{"row": 1, "col": 0}, {"row": 1, "col": 1}]', "[]"):
            async with suggester.turn(state, Difficulty.MEDIUM):
                await suggester.suggest(request)
            async with suggester.turn(state, Difficulty.MEDIUM):
                await suggester.suggest(request)

        first, second = [call.args[0] for call in sdk_client.query.await_args_list]
        assert HISTORY_HEADER not in first
        assert HISTORY_HEADER in second
        assert '[{"row": 1, "col": 0}, {"row": 1, "col": 1}]' in second
        assert "A,B\n?,?" in second

    async def test_close_forgets_replayed_exchanges(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        suggester = ClaudeSuggester()
        request = SuggestionRequest.from_state(state, Difficulty.EASY)

        with replies("[[0, 0], [1, 0]]", "[]"):
            async with suggester.turn(state, Difficulty.EASY):
                await suggester.suggest(request)
            suggester.close()
            async with suggester.turn(state, Difficulty.EASY):
                await suggester.suggest(request)

        assert HISTORY_HEADER not in sdk_client.query.await_args.args[0]

    async def test_replayed_history_is_bounded(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        suggester = ClaudeSuggester(max_transcript=2)
        request = SuggestionRequest.from_state(state, Difficulty.EASY)

        with replies("[[0, 0]] first-reply", "[[0, 0]] second-reply", "[[0, 0]] third-reply", "[]"):
            for _ in range(4):
                async with suggester.turn(state, Difficulty.EASY):
                    await suggester.suggest(request)

        last = sdk_client.query.await_args.args[0]
        assert "first-reply" not in last
        assert "second-reply" in last and "third-reply" in last

    async def test_close_clears_session(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        suggester = ClaudeSuggester(max_transcript=1)
        request = SuggestionRequest.from_state(state, Difficulty.EASY)

        with replies("[]", "[]"):
            async with suggester.turn(state, Difficulty.EASY):
                await suggester.suggest(request)
                await suggester.suggest(request)

        assert len(suggester.transcript) == 1
        suggester.close()
        assert len(suggester.transcript) == 0
        assert suggester.requests_sent == 0

    async def test_prompt_includes_board_and_history(self, make_state, sdk_client):
        state = make_state("AB", "BA")
        flip(state, 0, 0, Actor.USER)
        flip(state, 0, 1, Actor.USER)
        suggester = ClaudeSuggester()
        request = SuggestionRequest.from_state(state, Difficulty.HARD)

        with replies("[]"):
            async with suggester.turn(state, Difficulty.HARD):
                await suggester.suggest(request)

        prompt = sdk_client.query.await_args.args[0]
        assert "hard" in prompt
        assert "A" in prompt and "B" in prompt
        assert "?" in prompt


@pytest.mark.asyncio
class TestClaudeTurn:
    """Tests for a full AI turn against a mocked conversation."""

    async def test_garbage_reply_leaves_state_unchanged(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        before = state.model_dump()

        with replies("no idea, sorry"):
            result = await run_ai_turn(state, ClaudeSuggester())

        assert result.applied == []
        assert result.ended_by is TurnEnd.NO_VALID_SUGGESTIONS
        assert state.model_dump() == before

    async def test_claude_turn_scores(self, make_state, sdk_client):
        state = make_state("AB", "AB")

        with replies('[{"row": 0, "col": 0}, {"row": 1, "col": 0}]', '```json\n[[0, 1], [1, 1]]\n```'):
            result = await run_ai_turn(state, ClaudeSuggester(), Difficulty.HARD)

        assert result.ended_by is TurnEnd.WON
        assert state.ai_score == 2
        sdk_client.disconnect.assert_awaited_once()

    async def test_connect_timeout_ends_turn_quietly(self, make_state, sdk_client):
        state = make_state("AB", "AB")
        before = state.model_dump()
        sdk_client.connect.side_effect = Exception("Control request timeout: initialize")

        result = await run_ai_turn(state, ClaudeSuggester())

        assert result.applied == []
        assert result.ended_by is TurnEnd.NO_VALID_SUGGESTIONS
        assert state.model_dump() == before

    async def test_stream_error_mid_turn_keeps_earlier_flips(self, make_state, sdk_client):
        state = make_state("AAB", "BCC")
        stream = AsyncMock(side_effect=['[{"row": 0, "col": 0}, {"row": 0, "col": 1}]', Exception("Unknown error")])

        with patch("concentration.opponents.claude.collect_text", stream):
            result = await run_ai_turn(state, ClaudeSuggester())

        assert result.applied == [(0, 0), (0, 1)]
        assert result.ended_by is TurnEnd.NO_VALID_SUGGESTIONS
        assert state.ai_score == 1
        sdk_client.disconnect.assert_awaited_once()
