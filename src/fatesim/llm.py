"""LLM utilities using Claude Agent SDK.

This module provides helper functions for interacting with Claude via the
Agent SDK. All generator calls in this project go through these helpers.

The Agent SDK shells out to the Claude CLI, which means:
- Authentication uses the CLI's existing auth unless an API key is passed
  through ``env`` (the key rotator does this)
- Calls are async and may take several seconds; callers impose timeouts
"""

import json
import logging
import re
from typing import Any

from claude_agent_sdk import (
    AssistantMessage,
    ClaudeAgentOptions,
    ResultMessage,
    TextBlock,
    query,
)

logger = logging.getLogger(__name__)


def _build_options(
    system_prompt: str | None,
    max_turns: int,
    env: dict[str, str] | None,
    schema: dict[str, Any] | None = None,
) -> ClaudeAgentOptions:
    options_kwargs: dict[str, Any] = {"max_turns": max_turns, "allowed_tools": []}
    if system_prompt is not None:
        options_kwargs["system_prompt"] = system_prompt
    if env:
        options_kwargs["env"] = env
    if schema is not None:
        options_kwargs["output_format"] = {"type": "json_schema", "schema": schema}
    return ClaudeAgentOptions(**options_kwargs)


async def generate_text(
    prompt: str,
    system_prompt: str | None = None,
    max_turns: int = 1,
    env: dict[str, str] | None = None,
) -> str:
    """Generate text from Claude.

    Args:
        prompt: The user prompt to send to Claude.
        system_prompt: Optional system prompt to set context.
        max_turns: Maximum number of turns (default 1 for single response).
        env: Extra environment for the CLI process (e.g. ANTHROPIC_API_KEY).

    Returns:
        The generated text response.
    """
    options = _build_options(system_prompt, max_turns, env)

    response_text = ""
    async for message in query(prompt=prompt, options=options):
        if isinstance(message, AssistantMessage):
            for block in message.content:
                if isinstance(block, TextBlock):
                    response_text += block.text
        elif isinstance(message, ResultMessage):
            if message.result:
                response_text = str(message.result)

    return response_text


def extract_json(text: str) -> Any:
    """Parse JSON from a model response.

    Handles ```json fenced blocks, generic fenced blocks, and a bare JSON
    object or array embedded in prose.

    Raises:
        ValueError: If no valid JSON can be parsed.
    """
    text = text.strip()

    json_block_match = re.search(r"```json\s*\n(.*?)\n```", text, re.DOTALL)
    if json_block_match:
        text = json_block_match.group(1).strip()
    else:
        code_block_match = re.search(r"```\s*\n(.*?)\n```", text, re.DOTALL)
        if code_block_match:
            text = code_block_match.group(1).strip()
        elif not text.startswith(("{", "[")):
            # Outermost object in surrounding prose
            start, end = text.find("{"), text.rfind("}")
            if start != -1 and end > start:
                text = text[start : end + 1]

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse JSON response: {e}") from e


async def generate_json(
    prompt: str,
    system_prompt: str | None = None,
    schema: dict[str, Any] | None = None,
    env: dict[str, str] | None = None,
) -> Any:
    """Generate structured JSON from Claude.

    When a schema is provided, uses the Agent SDK's structured output feature.
    Without a schema, or if structured output is not returned, parses the text
    response as JSON.

    Args:
        prompt: The user prompt to send to Claude.
        system_prompt: Optional system prompt to set context.
        schema: Optional JSON schema for structured output.
        env: Extra environment for the CLI process.

    Returns:
        The parsed JSON response.

    Raises:
        ValueError: If the response cannot be parsed as JSON.
    """
    logger.debug(f"generate_json: prompt={len(prompt)} chars, schema={schema is not None}")

    # Structured output runs through a tool call, so allow a few turns
    options = _build_options(system_prompt, 5 if schema is not None else 1, env, schema)

    response_text = ""
    structured_output = None

    async for message in query(prompt=prompt, options=options):
        if isinstance(message, AssistantMessage):
            for block in message.content:
                if isinstance(block, TextBlock):
                    response_text += block.text
        elif isinstance(message, ResultMessage):
            if getattr(message, "structured_output", None):
                structured_output = message.structured_output
            elif message.result:
                response_text = str(message.result)

    if structured_output is not None:
        return structured_output

    if schema is not None:
        logger.warning("Schema provided but structured_output not returned - falling back to text parsing")

    try:
        return extract_json(response_text)
    except ValueError:
        logger.error(f"Failed to parse JSON. Raw response: {response_text[:500]}")
        raise
