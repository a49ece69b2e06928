"""Monthly scenario batch controller.

A batch is the ordered set of scenarios for one month. The controller only
tracks position within it; scenario content comes from the generator.
"""

from __future__ import annotations

from fatesim.models.scenario import Scenario, ScenarioBatch
from fatesim.models.state import FinancialState


def initialize_monthly_batch(month: int) -> ScenarioBatch:
    """Create an empty batch for a month; scenarios are filled in afterwards."""
    return ScenarioBatch(month=month, scenarios=(), current_index=0)


def get_current_scenario(batch: ScenarioBatch | None) -> Scenario | None:
    """Return the scenario awaiting a choice, or None if there is none."""
    if batch is None or batch.current_index >= len(batch.scenarios):
        return None
    return batch.scenarios[batch.current_index]


def advance_scenario_index(batch: ScenarioBatch | None) -> ScenarioBatch | None:
    """Move past the current scenario.

    Clamped at len(scenarios), so advancing a complete batch returns it
    unchanged.
    """
    if batch is None:
        return None
    next_index = min(batch.current_index + 1, len(batch.scenarios))
    if next_index == batch.current_index:
        return batch
    return batch.model_copy(update={"current_index": next_index})


def is_month_complete(batch: ScenarioBatch | None) -> bool:
    """True when there is no batch or every scenario has been resolved."""
    if batch is None:
        return True
    return batch.current_index >= len(batch.scenarios)


def attach_batch(state: FinancialState, batch: ScenarioBatch) -> FinancialState:
    """Make batch the state's active batch."""
    return state.model_copy(update={"current_batch": batch})


def clear_batch(state: FinancialState) -> FinancialState:
    """Drop the active batch at month finalization."""
    return state.model_copy(update={"current_batch": None})
