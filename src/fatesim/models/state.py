"""Financial state models.

This module defines the immutable snapshot of a player's financial life.
Every engine operation takes a FinancialState and returns a new one; nothing
here is ever mutated in place.

Serialized form uses camelCase keys (userId, riskScore, currentBatch, ...)
so exported files match the format players already have on disk.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import Field, ValidationInfo, field_validator

from fatesim.models.base import FrozenModel, bounded, finite_number
from fatesim.models.scenario import ScenarioBatch
from fatesim.parameters import (
    MODIFIER_MAX,
    MODIFIER_MIN,
    MOMENTUM_MAX,
    MOMENTUM_MIN,
    RISK_SCORE_MAX,
    RISK_SCORE_MIN,
    STARTING_BALANCE,
    STARTING_RISK_SCORE,
    STARTING_SAVINGS,
)


def utc_now() -> datetime:
    """Timestamp used for history entries."""
    return datetime.now(timezone.utc)


class FundSource(str, Enum):
    """Account an investment is paid from.

    Inherits from str for proper JSON serialization.
    """

    BALANCE = "balance"
    SAVINGS = "savings"


class FundType(str, Enum):
    """Mutual fund categories with different return ranges."""

    EQUITY = "equity"
    DEBT = "debt"
    HYBRID = "hybrid"


class HistoryType(str, Enum):
    """Kinds of history entries."""

    INCOME = "income"
    CHOICE = "choice"
    INVESTMENT = "investment"
    SYSTEM = "system"


class InsurancePolicy(FrozenModel):
    """Active insurance cover, if any."""

    active: bool = False
    monthly_premium: int = Field(default=0, ge=0)
    coverage: int = Field(default=0, ge=0)


class FixedDeposit(FrozenModel):
    """A fixed deposit that pays out its maturity amount when it matures.

    Attributes:
        amount: Principal locked in the deposit
        interest_rate: Annual simple interest in percent (7.5 = 7.5%)
        tenure_months: Original tenure
        remaining_months: Months until maturity
        maturity_amount: Amount credited to balance at maturity
        start_month: Month the deposit was opened
        source: Account the principal came from
    """

    amount: int = Field(gt=0)
    interest_rate: float = Field(ge=0.0)
    tenure_months: int = Field(gt=0)
    remaining_months: int = Field(ge=0)
    maturity_amount: int = Field(ge=0)
    start_month: int = Field(default=0, ge=0)
    source: FundSource = FundSource.BALANCE


class MutualFund(FrozenModel):
    """A mutual fund holding whose value moves every month."""

    fund_type: FundType = Field(alias="type")
    amount: int = Field(gt=0)
    current_value: int = Field(ge=0)
    start_month: int = Field(default=0, ge=0)
    source: FundSource = FundSource.BALANCE


class Investments(FrozenModel):
    """Insurance, fixed deposits and mutual funds held by the player."""

    insurance: InsurancePolicy = Field(default_factory=InsurancePolicy)
    fixed_deposits: tuple[FixedDeposit, ...] = ()
    mutual_funds: tuple[MutualFund, ...] = ()


class Modifiers(FrozenModel):
    """Behavioral biases read by the scenario generator.

    The engine stores and nudges these values but never interprets them;
    the generator uses them to bias content.

    Attributes:
        risk_sensitivity: Magnitude of risk/reward swings (0.5-2.5)
        insurance_likelihood: Weight for offering insurance (0.5-2.5)
        difficulty_modifier: Frequency of complex scenarios (0.5-2.5)
        market_volatility: Economic volatility (0.5-2.5)
        strategy_momentum: Cumulative direction of monthly strategy answers (-1.0 to 1.0)
    """

    risk_sensitivity: float = 1.0
    insurance_likelihood: float = 1.0
    difficulty_modifier: float = 1.0
    market_volatility: float = 1.0
    strategy_momentum: float = 0.0

    @field_validator(
        "risk_sensitivity",
        "insurance_likelihood",
        "difficulty_modifier",
        "market_volatility",
        mode="before",
    )
    @classmethod
    def clamp_bias(cls, v: object, info: ValidationInfo) -> float:
        """Clamp bias modifiers to [0.5, 2.5]."""
        return bounded(finite_number(v), MODIFIER_MIN, MODIFIER_MAX, info)

    @field_validator("strategy_momentum", mode="before")
    @classmethod
    def clamp_momentum(cls, v: object, info: ValidationInfo) -> float:
        """Clamp momentum to [-1.0, 1.0]."""
        return bounded(finite_number(v), MOMENTUM_MIN, MOMENTUM_MAX, info)


class MonthSnapshot(FrozenModel):
    """Account totals captured when a month closes."""

    balance: int
    savings: int
    risk_score: int
    net_worth: int


class HistoryEntry(FrozenModel):
    """One record in the append-only history.

    Attributes:
        entry_type: income, choice, investment or system
        month: Month the entry happened in
        balance_change: Change applied to balance (0 if none)
        savings_change: Change applied to savings, if any
        risk_change: Change applied to risk score, if any
        description: Human-readable text
        concept: Financial concept taught by a choice
        snapshot: Totals at month close (system entries only)
        timestamp: When the entry was recorded
    """

    entry_type: HistoryType = Field(alias="type")
    month: int = Field(ge=0)
    balance_change: int = 0
    savings_change: int | None = None
    risk_change: int | None = None
    description: str = ""
    concept: str | None = None
    snapshot: MonthSnapshot | None = None
    timestamp: datetime = Field(default_factory=utc_now)


class FinancialState(FrozenModel):
    """Complete financial state of one player.

    Attributes:
        user_id: Opaque player identifier, never changes
        month: Current month, 0 before the first month starts
        balance: Spendable money; may go negative (debt)
        savings: Money held apart from balance, never negative
        risk_score: Behavioral risk exposure, clamped to [0, 100]
        insurance_opted: True while the player holds insurance
        investments: Insurance, FDs and mutual funds
        modifiers: Behavioral biases for the scenario generator
        current_batch: The month's scenarios while they are being played
        history: Append-only record of every change
        is_loaded: Set once hydrated or initialized; never serialized
    """

    user_id: str = Field(min_length=1)
    month: int = Field(default=0, ge=0)
    balance: int = STARTING_BALANCE
    savings: int = Field(default=STARTING_SAVINGS, ge=0)
    risk_score: int = STARTING_RISK_SCORE
    insurance_opted: bool = False
    investments: Investments = Field(default_factory=Investments)
    modifiers: Modifiers = Field(default_factory=Modifiers)
    current_batch: ScenarioBatch | None = None
    history: tuple[HistoryEntry, ...] = ()
    is_loaded: bool = Field(default=False, exclude=True)

    @field_validator("risk_score", mode="before")
    @classmethod
    def clamp_risk(cls, v: object, info: ValidationInfo) -> int:
        """Clamp risk score to [0, 100]."""
        return int(bounded(round(finite_number(v)), RISK_SCORE_MIN, RISK_SCORE_MAX, info))

    def entries_for_month(self, month: int | None = None) -> tuple[HistoryEntry, ...]:
        """History entries recorded during a month (default: current month)."""
        target = self.month if month is None else month
        return tuple(entry for entry in self.history if entry.month == target)


def net_worth(state: FinancialState) -> int:
    """Balance plus savings plus everything held in FDs and mutual funds."""
    fd_total = sum(fd.amount for fd in state.investments.fixed_deposits)
    mf_total = sum(mf.current_value for mf in state.investments.mutual_funds)
    return state.balance + state.savings + fd_total + mf_total
