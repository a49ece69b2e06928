"""Interface the month flow expects from a content generator."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from fatesim.models.scenario import ScenarioBatch
from fatesim.models.state import FinancialState


class ScenarioGenerator(Protocol):
    """External content generator.

    Implementations may raise anything; the month flow catches failures and
    substitutes fallback content. Batch responses are validated by the
    caller, so a generator may return raw generator output.
    """

    async def generate_monthly_scenarios(
        self, state: FinancialState
    ) -> ScenarioBatch | Mapping[str, Any]: ...

    async def generate_reflection(self, state: FinancialState) -> str: ...

    async def generate_decision_questions(self, state: FinancialState, reflection: str) -> str: ...
