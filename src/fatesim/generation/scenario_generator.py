"""LLM-based content generation for the month flow.

This module implements LLMScenarioGenerator, which uses the Claude Agent SDK
to produce the month's scenario batch, the month-end reflection and the
strategy questions. It does no validation of its own beyond failing loudly:
every failure is raised as GeneratorFailure and the month flow decides what
to substitute.
"""

from __future__ import annotations

import logging
from typing import Any

from claude_agent_sdk import ClaudeSDKError

from fatesim.errors import GeneratorFailure
from fatesim.generation.key_rotation import ApiKeyRotator, KeyPurpose
from fatesim.llm import generate_json, generate_text
from fatesim.models.state import FinancialState
from fatesim.parameters import SCENARIOS_PER_MONTH
from fatesim.prompts import (
    DECISION_QUESTIONS_SYSTEM_PROMPT,
    MONTHLY_BATCH_JSON_SCHEMA,
    REFLECTION_SYSTEM_PROMPT,
    SCENARIO_SYSTEM_PROMPT,
    format_decision_questions_prompt,
    format_monthly_scenarios_prompt,
    format_reflection_prompt,
)

logger = logging.getLogger(__name__)


class LLMScenarioGenerator:
    """Generates monthly content with Claude.

    Example:
        >>> generator = LLMScenarioGenerator(rotator=ApiKeyRotator.from_env())
        >>> batch = await generator.generate_monthly_scenarios(state)
    """

    def __init__(
        self,
        rotator: ApiKeyRotator | None = None,
        scenario_count: int = SCENARIOS_PER_MONTH,
    ):
        """Initialize the generator.

        Args:
            rotator: Key rotator; when None the CLI's own auth is used
            scenario_count: Scenarios to request per month
        """
        self.rotator = rotator
        self.scenario_count = scenario_count

    def _env(self, purpose: KeyPurpose) -> dict[str, str] | None:
        if self.rotator is None:
            return None
        key = self.rotator.next_key(purpose)
        return {"ANTHROPIC_API_KEY": key} if key else None

    async def generate_monthly_scenarios(self, state: FinancialState) -> dict[str, Any]:
        """Request the month's scenarios as raw JSON.

        Raises:
            GeneratorFailure: If the call fails or the response is not JSON
        """
        prompt = format_monthly_scenarios_prompt(state, self.scenario_count)
        try:
            data = await generate_json(
                prompt=prompt,
                system_prompt=SCENARIO_SYSTEM_PROMPT,
                schema=MONTHLY_BATCH_JSON_SCHEMA,
                env=self._env(KeyPurpose.SCENARIO),
            )
        except (ClaudeSDKError, ValueError) as e:
            raise GeneratorFailure(f"Scenario generation failed for month {state.month}: {e}") from e

        if isinstance(data, list):
            data = {"scenarios": data}
        if not isinstance(data, dict):
            raise GeneratorFailure(f"Scenario response is {type(data).__name__}, expected an object")
        logger.debug(f"Generated {len(data.get('scenarios') or [])} scenarios for month {state.month}")
        return data

    async def generate_reflection(self, state: FinancialState) -> str:
        """Request the month-end reflection.

        Raises:
            GeneratorFailure: If the call fails or returns no text
        """
        try:
            text = await generate_text(
                prompt=format_reflection_prompt(state),
                system_prompt=REFLECTION_SYSTEM_PROMPT,
                env=self._env(KeyPurpose.REFLECTION),
            )
        except ClaudeSDKError as e:
            raise GeneratorFailure(f"Reflection generation failed: {e}") from e
        if not text.strip():
            raise GeneratorFailure("Reflection response was empty")
        return text.strip()

    async def generate_decision_questions(self, state: FinancialState, reflection: str) -> str:
        """Request next month's strategy questions.

        Raises:
            GeneratorFailure: If the call fails or returns no text
        """
        try:
            text = await generate_text(
                prompt=format_decision_questions_prompt(state, reflection),
                system_prompt=DECISION_QUESTIONS_SYSTEM_PROMPT,
                env=self._env(KeyPurpose.QUESTIONS),
            )
        except ClaudeSDKError as e:
            raise GeneratorFailure(f"Decision question generation failed: {e}") from e
        if not text.strip():
            raise GeneratorFailure("Decision question response was empty")
        return text.strip()
