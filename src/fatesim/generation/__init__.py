"""Content generation for the simulation.

This module contains:
- protocols: The ScenarioGenerator interface the month flow depends on
- validation: Structural checks on generated scenarios
- fallbacks: Deterministic content used when generation fails
- decisions: Parsing of month-end strategy questions
- key_rotation: API key rotation for the generator adapter
- scenario_generator: Claude-backed generator
"""

from fatesim.generation.decisions import (
    DecisionQuestion,
    has_complete_questions,
    parse_decision_questions,
)
from fatesim.generation.fallbacks import (
    FALLBACK_DECISION_QUESTIONS,
    FALLBACK_SCENARIOS,
    fallback_batch,
    fallback_reflection,
    fallback_scenario,
    inject_insurance_choice,
    should_offer_insurance,
)
from fatesim.generation.key_rotation import (
    ApiKeyRotator,
    KeyPurpose,
    KeyRotationState,
    load_keys_from_env,
    select_key,
)
from fatesim.generation.protocols import ScenarioGenerator
from fatesim.generation.scenario_generator import LLMScenarioGenerator
from fatesim.generation.validation import validate_batch, validate_scenario

__all__ = [
    "ScenarioGenerator",
    "LLMScenarioGenerator",
    "validate_scenario",
    "validate_batch",
    "FALLBACK_SCENARIOS",
    "FALLBACK_DECISION_QUESTIONS",
    "fallback_scenario",
    "fallback_batch",
    "fallback_reflection",
    "inject_insurance_choice",
    "should_offer_insurance",
    "DecisionQuestion",
    "parse_decision_questions",
    "has_complete_questions",
    "ApiKeyRotator",
    "KeyPurpose",
    "KeyRotationState",
    "load_keys_from_env",
    "select_key",
]
