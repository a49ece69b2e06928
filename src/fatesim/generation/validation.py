"""Structural validation of generated scenarios.

Generated content is untrusted. A scenario is valid when it has a non-blank
situation and exactly three choices, each with a distinct id, a label and
finite numeric balanceChange/riskChange. Invalid scenarios are replaced slot
by slot with fallback scenarios; only a response with no recognisable batch
shape at all is rejected outright.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from fatesim.errors import InvalidScenarioShape
from fatesim.models.scenario import Scenario, ScenarioBatch

logger = logging.getLogger(__name__)


def validate_scenario(raw: Any, default_id: str | None = None) -> Scenario:
    """Validate one generated scenario.

    Args:
        raw: Scenario instance or mapping in generator output format
        default_id: Id assigned when the mapping has none

    Raises:
        InvalidScenarioShape: If the scenario does not validate
    """
    if isinstance(raw, Scenario):
        return raw
    if not isinstance(raw, Mapping):
        raise InvalidScenarioShape(f"scenario must be an object, got {type(raw).__name__}")

    data = dict(raw)
    if not data.get("id") and default_id is not None:
        data["id"] = default_id
    try:
        return Scenario.model_validate(data)
    except ValidationError as e:
        raise InvalidScenarioShape(f"invalid scenario: {e.error_count()} error(s): {e}") from e


def extract_scenarios(raw: Any) -> Sequence[Any]:
    """Pull the scenario list out of a generator response.

    Accepts a ScenarioBatch, a mapping with a "scenarios" list, or a bare list.

    Raises:
        InvalidScenarioShape: If no scenario list can be found
    """
    if isinstance(raw, ScenarioBatch):
        return raw.scenarios
    if isinstance(raw, Mapping):
        scenarios = raw.get("scenarios")
        if isinstance(scenarios, (list, tuple)):
            return scenarios
        raise InvalidScenarioShape("batch response has no 'scenarios' list")
    if isinstance(raw, (list, tuple)):
        return raw
    raise InvalidScenarioShape(f"batch response must be an object or list, got {type(raw).__name__}")


def validate_batch(
    raw: Any,
    month: int,
    count: int,
    fallback: Callable[[int, int], Scenario],
) -> tuple[ScenarioBatch, int]:
    """Validate a generated batch, substituting fallbacks for bad scenarios.

    Args:
        raw: Generator response
        month: Month the batch is for (overrides anything in the response)
        count: Number of scenarios the batch must contain
        fallback: fallback(month, slot) -> Scenario

    Returns:
        Tuple of (batch with exactly count scenarios, number of slots filled by fallback)

    Raises:
        InvalidScenarioShape: If the response has no scenario list at all
    """
    candidates = list(extract_scenarios(raw))[:count]
    scenarios: list[Scenario] = []
    seen_ids: set[str] = set()
    replaced = 0

    for slot in range(count):
        default_id = f"m{month}_s{slot + 1}"
        scenario: Scenario | None = None
        if slot < len(candidates):
            try:
                scenario = validate_scenario(candidates[slot], default_id=default_id)
            except InvalidScenarioShape as e:
                logger.warning(f"Replacing invalid scenario in slot {slot + 1} for month {month}: {e}")
        if scenario is None:
            scenario = fallback(month, slot)
            replaced += 1
        if scenario.id in seen_ids:
            scenario = scenario.model_copy(update={"id": default_id})
        seen_ids.add(scenario.id)
        scenarios.append(scenario)

    return ScenarioBatch(month=month, scenarios=tuple(scenarios), current_index=0), replaced
