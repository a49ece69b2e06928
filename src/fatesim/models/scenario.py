"""Scenario, choice and monthly batch models.

A month is played as an ordered batch of scenarios. Each scenario offers
exactly three choices, and each choice carries the money and risk deltas
the engine applies when the player picks it.
"""

from __future__ import annotations

from pydantic import ConfigDict, Field, ValidationInfo, field_validator

from fatesim.models.base import FrozenModel, finite_number, strict_ranges
from fatesim.parameters import CHOICES_PER_SCENARIO


def _coerce_money(value: object) -> int:
    """Accept finite real numbers only and round them to whole rupees."""
    return int(round(finite_number(value)))


class Choice(FrozenModel):
    """One selectable option within a scenario.

    Attributes:
        id: Identifier unique within the scenario
        label: Short text shown to the player
        balance_change: Added to balance (negative = spending)
        risk_change: Added to risk score before clamping
        savings_change: Added to savings (floored at zero)
        is_insurance: Picking this choice opts the player into insurance
        description: Longer text recorded in history (defaults to label)
        concept: Financial concept the choice teaches, if any
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    label: str = Field(min_length=1)
    balance_change: int
    risk_change: int
    savings_change: int = 0
    is_insurance: bool = False
    description: str | None = None
    concept: str | None = None

    @field_validator("balance_change", "risk_change", "savings_change", mode="before")
    @classmethod
    def require_number(cls, v: object) -> int:
        return _coerce_money(v)


class Scenario(FrozenModel):
    """A situation with exactly three choices."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    situation: str = Field(min_length=1)
    choices: tuple[Choice, ...]

    @field_validator("situation")
    @classmethod
    def situation_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("situation must not be blank")
        return v

    @field_validator("choices")
    @classmethod
    def three_distinct_choices(cls, v: tuple[Choice, ...]) -> tuple[Choice, ...]:
        if len(v) != CHOICES_PER_SCENARIO:
            raise ValueError(
                f"scenario must have exactly {CHOICES_PER_SCENARIO} choices, got {len(v)}"
            )
        ids = [choice.id for choice in v]
        if len(set(ids)) != len(ids):
            raise ValueError(f"choice ids must be unique within a scenario, got {ids}")
        return v

    def get_choice(self, choice_id: str) -> Choice | None:
        """Look up a choice by id."""
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None


class ScenarioBatch(FrozenModel):
    """The ordered scenarios for one month and the position within them.

    Attributes:
        month: Month this batch belongs to
        scenarios: Scenarios in play order
        current_index: Index of the next unresolved scenario, in [0, len(scenarios)]
    """

    month: int = Field(ge=0)
    scenarios: tuple[Scenario, ...] = ()
    current_index: int = 0

    @field_validator("current_index")
    @classmethod
    def clamp_index(cls, v: int, info: ValidationInfo) -> int:
        """Keep the index within [0, len(scenarios)]."""
        count = len(info.data.get("scenarios", ()))
        if strict_ranges(info) and not 0 <= v <= count:
            raise ValueError(f"current index must be between 0 and {count}, got {v}")
        return max(0, min(v, count))

    @property
    def remaining(self) -> int:
        """Number of scenarios not yet resolved."""
        return len(self.scenarios) - self.current_index
