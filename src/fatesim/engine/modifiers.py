"""Behavioral modifier calibration.

Modifiers are set once from the player's initial preferences and then nudged
every month by their answers to the "strategy for next month" questions. The
engine only applies deltas and clamps; the scenario generator decides what
the values mean.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from fatesim.models.state import FinancialState, Modifiers
from fatesim.parameters import (
    BEHAVIORAL_DECISION_DELTAS,
    PRIMARY_DRIVE_BASELINES,
    RISK_LEVEL_ADJUSTMENTS,
)


class PrimaryDrive(str, Enum):
    """What the player says motivates them."""

    SECURITY = "security"
    GROWTH = "growth"
    EXPERIENCE = "experience"


class RiskLevel(str, Enum):
    """Self-reported risk appetite."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class DecisionAnswer(str, Enum):
    """Answer to a two-option strategy question."""

    A = "A"
    B = "B"


def calibrate_modifiers(primary_drive: PrimaryDrive | str, risk_level: RiskLevel | str) -> Modifiers:
    """Build the modifier floor/ceiling for a preference pair.

    Raises:
        ValueError: If either preference is unknown
    """
    drive = PrimaryDrive(primary_drive)
    level = RiskLevel(risk_level)

    values = Modifiers().model_dump()
    values.update(PRIMARY_DRIVE_BASELINES[drive.value])
    for name, delta in RISK_LEVEL_ADJUSTMENTS[level.value].items():
        values[name] += delta
    # Validation clamps every field into range
    return Modifiers(**values)


def initialize_modifiers(
    state: FinancialState,
    primary_drive: PrimaryDrive | str,
    risk_level: RiskLevel | str,
) -> FinancialState:
    """Calibrate modifiers from initial preferences.

    Repeat calls overwrite: calling twice with the same preferences yields the
    same modifiers, and any monthly momentum is discarded.
    """
    return state.model_copy(update={"modifiers": calibrate_modifiers(primary_drive, risk_level)})


def apply_behavioral_decisions(
    state: FinancialState,
    answers: Sequence[DecisionAnswer | str | None],
) -> FinancialState:
    """Nudge modifiers by this month's strategy answers.

    Answers are positional: answers[i] answers question i. None skips a
    question. Effects accumulate across months.

    Raises:
        ValueError: If there are more answers than questions or an answer is not A/B
    """
    if len(answers) > len(BEHAVIORAL_DECISION_DELTAS):
        raise ValueError(
            f"Expected at most {len(BEHAVIORAL_DECISION_DELTAS)} answers, got {len(answers)}"
        )

    values = state.modifiers.model_dump()
    for question_deltas, answer in zip(BEHAVIORAL_DECISION_DELTAS, answers):
        if answer is None:
            continue
        if isinstance(answer, DecisionAnswer):
            choice = answer
        else:
            choice = DecisionAnswer(str(answer).strip().upper())
        for name, delta in question_deltas[choice.value].items():
            values[name] += delta

    return state.model_copy(update={"modifiers": Modifiers(**values)})


@dataclass(frozen=True)
class StrategyStatus:
    """Human-readable summary of where modifiers are trending."""

    label: str
    description: str


def aggression_score(modifiers: Modifiers) -> float:
    """Weighted distance of modifiers from neutral; positive = aggressive."""
    return (
        (modifiers.risk_sensitivity - 1.0) * 2
        + (modifiers.difficulty_modifier - 1.0) * 1.5
        + (modifiers.market_volatility - 1.0) * 1.5
        + modifiers.strategy_momentum
    )


def strategy_status(modifiers: Modifiers) -> StrategyStatus:
    """Classify modifiers into a strategy label."""
    score = aggression_score(modifiers)
    if score > 0.8:
        return StrategyStatus("Aggressive", "High risk, high reward")
    elif score > 0.3:
        return StrategyStatus("Growth-focused", "Moderate risk appetite")
    elif score < -0.8:
        return StrategyStatus("Conservative", "Safety first")
    elif score < -0.3:
        return StrategyStatus("Cautious", "Measured approach")
    else:
        return StrategyStatus("Balanced", "Steady progression")
