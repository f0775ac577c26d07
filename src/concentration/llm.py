"""LLM utilities using Claude Agent SDK.

This module provides helper functions for interacting with Claude via the
Agent SDK. All LLM calls in this project should use these utilities.

The Agent SDK shells out to Claude Code CLI, which means:
- Authentication uses your existing Claude Code auth (Max plan, API key, etc.)
- No separate API key configuration needed
"""

import json
import logging
import os
import re
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

from claude_agent_sdk import (
    AssistantMessage,
    ClaudeAgentOptions,
    ResultMessage,
    TextBlock,
)

logger = logging.getLogger(__name__)


def has_claude_credentials() -> bool:
    """Check whether Claude Code credentials are configured.

    Claude Code checks for credentials in this order:
    1. CLAUDE_CODE_OAUTH_TOKEN environment variable (for server/CI deployments)
    2. ~/.claude/.credentials.json file (from 'claude login' or 'claude setup-token')
    """
    if os.environ.get("CLAUDE_CODE_OAUTH_TOKEN"):
        return True
    return (Path.home() / ".claude" / ".credentials.json").exists()


def build_options(
    system_prompt: str | None = None,
    model: str | None = None,
    max_turns: int = 1,
) -> ClaudeAgentOptions:
    """Options for a plain text conversation with no tool access."""
    options_kwargs: dict[str, Any] = {"max_turns": max_turns, "allowed_tools": []}
    if system_prompt is not None:
        options_kwargs["system_prompt"] = system_prompt
    if model is not None:
        options_kwargs["model"] = model
    return ClaudeAgentOptions(**options_kwargs)


async def collect_text(messages: AsyncIterator[Any]) -> str:
    """Join the text of one response stream.

    A non-empty ``ResultMessage.result`` replaces the accumulated text, since
    it holds the final answer.
    """
    response_text = ""
    async for message in messages:
        if isinstance(message, AssistantMessage):
            for block in message.content:
                if isinstance(block, TextBlock):
                    response_text += block.text
        elif isinstance(message, ResultMessage):
            if message.result:
                response_text = str(message.result)
    return response_text


def extract_json_array(text: str) -> list[Any] | None:
    """Pull the first JSON array out of a free-text reply.

    Looks inside ```json fences first, then at the outermost ``[...]`` span.

    Returns:
        The parsed list, or None when nothing parseable is found.
    """
    if not text:
        return None

    # Pattern 1: ```json ... ``` or generic ``` ... ``` block
    block_match = re.search(r"```(?:json)?\s*\n(.*?)\n```", text, re.DOTALL)
    candidate = block_match.group(1).strip() if block_match else text

    # Pattern 2: outermost array
    array_match = re.search(r"\[.*\]", candidate, re.DOTALL)
    if not array_match:
        return None

    try:
        parsed = json.loads(array_match.group(0))
    except json.JSONDecodeError as e:
        logger.warning(f"Failed to parse JSON array: {e}\nRaw response: {text[:500]}")
        return None
    return parsed if isinstance(parsed, list) else None
