"""Pure state transitions for the financial simulation.

Every function here takes a FinancialState plus a payload and returns a new
FinancialState. None of them mutate their input or perform I/O.

Overspending policy:
- apply_choice, apply_income and deduct_insurance_premium never check
  balance; narrative shocks are allowed to push the player into debt.
- deposit/withdraw and FD/MF purchases check the source account and raise
  InsufficientFunds, leaving the caller's state untouched.
"""

from __future__ import annotations

import logging
import math
import random

from fatesim.errors import InsufficientFunds, InvalidAmount
from fatesim.models.actions import (
    Action,
    CancelInsuranceAction,
    ChoiceAction,
    DepositAction,
    IncomeAction,
    StartFixedDepositAction,
    StartInsuranceAction,
    StartMutualFundAction,
    WithdrawAction,
)
from fatesim.models.base import clamp
from fatesim.models.scenario import Choice
from fatesim.models.state import (
    FinancialState,
    FixedDeposit,
    FundSource,
    FundType,
    HistoryEntry,
    HistoryType,
    InsurancePolicy,
    MonthSnapshot,
    MutualFund,
    net_worth,
)
from fatesim.parameters import (
    DEFAULT_MONTHLY_INCOME,
    MUTUAL_FUND_ANNUAL_RETURNS,
    RISK_SCORE_MAX,
    RISK_SCORE_MIN,
    TAX_RATE,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================


def _require_amount(amount: object, name: str = "amount", allow_zero: bool = False) -> int:
    """Validate a money amount and return it as int."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise InvalidAmount(f"{name} must be a number, got {type(amount).__name__}")
    if not math.isfinite(amount):
        raise InvalidAmount(f"{name} must be a finite number, got {amount}")
    if amount < 0 or (amount == 0 and not allow_zero):
        qualifier = "non-negative" if allow_zero else "positive"
        raise InvalidAmount(f"{name} must be {qualifier}, got {amount}")
    return int(round(amount))


def _append(state: FinancialState, entry: HistoryEntry, **updates) -> FinancialState:
    """Return a copy of state with updates applied and entry appended to history."""
    return state.model_copy(update={**updates, "history": state.history + (entry,)})


def _debit_source(state: FinancialState, amount: int, source: FundSource) -> dict[str, int]:
    """Compute the account update for paying amount out of source.

    Raises:
        InsufficientFunds: If the source holds less than amount
    """
    source = FundSource(source)
    available = state.savings if source == FundSource.SAVINGS else state.balance
    if amount > available:
        raise InsufficientFunds(required=amount, available=available, source=source.value)
    if source == FundSource.SAVINGS:
        return {"savings": state.savings - amount}
    return {"balance": state.balance - amount}


def _source_changes(amount: int, source: FundSource) -> dict[str, int]:
    """History deltas for a debit from source."""
    if FundSource(source) == FundSource.SAVINGS:
        return {"balance_change": 0, "savings_change": -amount}
    return {"balance_change": -amount}


# =============================================================================
# Initialization
# =============================================================================


def initialize_state(user_id: str) -> FinancialState:
    """Create a fresh state for a new player.

    Deterministic: only user_id varies the output (history is empty, so no
    timestamps are involved).
    """
    return FinancialState(user_id=user_id, is_loaded=True)


def reset_state(state: FinancialState) -> FinancialState:
    """Discard all progress and start over for the same user."""
    return initialize_state(state.user_id)


# =============================================================================
# Income and choices
# =============================================================================


def calculate_net_income(gross: int) -> int:
    """Gross income minus the flat tax deduction."""
    return gross - int(round(gross * TAX_RATE))


def apply_income(state: FinancialState, amount: int | None = None) -> FinancialState:
    """Credit monthly income after tax.

    Args:
        state: Current state
        amount: Gross income (default DEFAULT_MONTHLY_INCOME)

    Raises:
        InvalidAmount: If amount is negative
    """
    gross = DEFAULT_MONTHLY_INCOME if amount is None else _require_amount(amount, "income", allow_zero=True)
    net = calculate_net_income(gross)
    entry = HistoryEntry(
        entry_type=HistoryType.INCOME,
        month=state.month,
        balance_change=net,
        description=f"Monthly income: ₹{gross} gross, ₹{gross - net} tax, ₹{net} credited",
    )
    return _append(state, entry, balance=state.balance + net)


def apply_choice(state: FinancialState, choice: Choice) -> FinancialState:
    """Apply a scenario choice.

    Balance may go negative. Savings are floored at zero and risk score is
    clamped to [0, 100]; the history entry records the effective changes.
    """
    new_balance = state.balance + choice.balance_change
    new_savings = max(0, state.savings + choice.savings_change)
    new_risk = int(clamp(state.risk_score + choice.risk_change, RISK_SCORE_MIN, RISK_SCORE_MAX))

    entry = HistoryEntry(
        entry_type=HistoryType.CHOICE,
        month=state.month,
        balance_change=choice.balance_change,
        savings_change=new_savings - state.savings,
        risk_change=new_risk - state.risk_score,
        description=choice.description or choice.label,
        concept=choice.concept,
    )
    return _append(
        state,
        entry,
        balance=new_balance,
        savings=new_savings,
        risk_score=new_risk,
        insurance_opted=state.insurance_opted or choice.is_insurance,
    )


# =============================================================================
# Savings
# =============================================================================


def deposit_to_savings(state: FinancialState, amount: int) -> FinancialState:
    """Move money from balance into savings.

    Raises:
        InvalidAmount: If amount is not positive
        InsufficientFunds: If balance is lower than amount
    """
    amount = _require_amount(amount)
    updates = _debit_source(state, amount, FundSource.BALANCE)
    entry = HistoryEntry(
        entry_type=HistoryType.INVESTMENT,
        month=state.month,
        balance_change=-amount,
        savings_change=amount,
        description=f"Deposited ₹{amount} to savings",
    )
    return _append(state, entry, savings=state.savings + amount, **updates)


def withdraw_from_savings(state: FinancialState, amount: int) -> FinancialState:
    """Move money from savings back into balance.

    Raises:
        InvalidAmount: If amount is not positive
        InsufficientFunds: If savings are lower than amount
    """
    amount = _require_amount(amount)
    updates = _debit_source(state, amount, FundSource.SAVINGS)
    entry = HistoryEntry(
        entry_type=HistoryType.INVESTMENT,
        month=state.month,
        balance_change=amount,
        savings_change=-amount,
        description=f"Withdrew ₹{amount} from savings",
    )
    return _append(state, entry, balance=state.balance + amount, **updates)


# =============================================================================
# Insurance
# =============================================================================


def start_insurance(state: FinancialState, monthly_premium: int, coverage: int) -> FinancialState:
    """Open (or replace) an insurance policy.

    The premium is not charged here; deduct_insurance_premium charges it at
    the start of every month.
    """
    premium = _require_amount(monthly_premium, "monthly_premium")
    coverage = _require_amount(coverage, "coverage", allow_zero=True)
    policy = InsurancePolicy(active=True, monthly_premium=premium, coverage=coverage)
    entry = HistoryEntry(
        entry_type=HistoryType.INVESTMENT,
        month=state.month,
        description=f"Started insurance: ₹{premium}/month premium, ₹{coverage} coverage",
    )
    return _append(
        state,
        entry,
        insurance_opted=True,
        investments=state.investments.model_copy(update={"insurance": policy}),
    )


def cancel_insurance(state: FinancialState) -> FinancialState:
    """Cancel the active policy. No-op when no policy is active."""
    if not state.investments.insurance.active:
        return state
    entry = HistoryEntry(
        entry_type=HistoryType.INVESTMENT,
        month=state.month,
        description="Cancelled insurance",
    )
    return _append(
        state,
        entry,
        insurance_opted=False,
        investments=state.investments.model_copy(update={"insurance": InsurancePolicy()}),
    )


def deduct_insurance_premium(state: FinancialState) -> FinancialState:
    """Charge the monthly premium. May drive balance negative."""
    policy = state.investments.insurance
    if not policy.active or policy.monthly_premium == 0:
        return state
    entry = HistoryEntry(
        entry_type=HistoryType.INVESTMENT,
        month=state.month,
        balance_change=-policy.monthly_premium,
        description=f"Insurance premium deducted: ₹{policy.monthly_premium}",
    )
    return _append(state, entry, balance=state.balance - policy.monthly_premium)


# =============================================================================
# Fixed deposits and mutual funds
# =============================================================================


def calculate_maturity_amount(amount: int, interest_rate: float, tenure: int) -> int:
    """Simple-interest maturity value: amount * (1 + rate/100 * tenure/12)."""
    return int(round(amount * (1 + interest_rate / 100 * tenure / 12)))


def start_fixed_deposit(
    state: FinancialState,
    amount: int,
    tenure: int,
    source: FundSource | str = FundSource.BALANCE,
    interest_rate: float = 0.0,
) -> FinancialState:
    """Lock money in a fixed deposit.

    Args:
        state: Current state
        amount: Principal
        tenure: Months until maturity
        source: "balance" or "savings"
        interest_rate: Annual simple interest in percent

    Raises:
        InvalidAmount: If amount or tenure is not positive, or rate is negative
        InsufficientFunds: If the source holds less than amount
    """
    amount = _require_amount(amount)
    if isinstance(tenure, bool) or not isinstance(tenure, int) or tenure <= 0:
        raise InvalidAmount(f"tenure must be a positive number of months, got {tenure}")
    if (
        isinstance(interest_rate, bool)
        or not isinstance(interest_rate, (int, float))
        or not math.isfinite(interest_rate)
        or interest_rate < 0
    ):
        raise InvalidAmount(f"interest_rate must be a non-negative finite number, got {interest_rate}")
    source = FundSource(source)

    updates = _debit_source(state, amount, source)
    deposit = FixedDeposit(
        amount=amount,
        interest_rate=interest_rate,
        tenure_months=tenure,
        remaining_months=tenure,
        maturity_amount=calculate_maturity_amount(amount, interest_rate, tenure),
        start_month=state.month,
        source=source,
    )
    entry = HistoryEntry(
        entry_type=HistoryType.INVESTMENT,
        month=state.month,
        description=f"Started FD: ₹{amount} for {tenure} months at {interest_rate}%",
        **_source_changes(amount, source),
    )
    investments = state.investments.model_copy(
        update={"fixed_deposits": state.investments.fixed_deposits + (deposit,)}
    )
    return _append(state, entry, investments=investments, **updates)


def start_mutual_fund(
    state: FinancialState,
    amount: int,
    fund_type: FundType | str,
    source: FundSource | str = FundSource.BALANCE,
) -> FinancialState:
    """Invest in a mutual fund.

    Raises:
        InvalidAmount: If amount is not positive
        InsufficientFunds: If the source holds less than amount
        ValueError: If fund_type is unknown
    """
    amount = _require_amount(amount)
    fund_type = FundType(fund_type)
    source = FundSource(source)

    updates = _debit_source(state, amount, source)
    fund = MutualFund(
        fund_type=fund_type,
        amount=amount,
        current_value=amount,
        start_month=state.month,
        source=source,
    )
    entry = HistoryEntry(
        entry_type=HistoryType.INVESTMENT,
        month=state.month,
        description=f"Invested ₹{amount} in {fund_type.value} mutual fund",
        **_source_changes(amount, source),
    )
    investments = state.investments.model_copy(
        update={"mutual_funds": state.investments.mutual_funds + (fund,)}
    )
    return _append(state, entry, investments=investments, **updates)


def monthly_return_rate(fund_type: FundType, rng: random.Random | None = None) -> float:
    """Draw this month's return for a fund type.

    An annual rate is drawn uniformly from the type's range and converted to
    a monthly compounding step.
    """
    low, high = MUTUAL_FUND_ANNUAL_RETURNS[FundType(fund_type).value]
    annual = (rng or random).uniform(low, high)
    return (1 + annual) ** (1 / 12) - 1


def update_investments(state: FinancialState, rng: random.Random | None = None) -> FinancialState:
    """Advance every investment by one month.

    Fixed deposits count down and, on reaching zero, pay their maturity
    amount into balance (one history entry each) and are removed. Mutual
    funds grow by a monthly return drawn per fund.
    """
    balance = state.balance
    history = list(state.history)
    remaining_fds: list[FixedDeposit] = []

    for fd in state.investments.fixed_deposits:
        months_left = fd.remaining_months - 1
        if months_left <= 0:
            balance += fd.maturity_amount
            history.append(
                HistoryEntry(
                    entry_type=HistoryType.INVESTMENT,
                    month=state.month,
                    balance_change=fd.maturity_amount,
                    description=f"FD matured: ₹{fd.maturity_amount} credited",
                )
            )
            logger.debug(f"FD of {fd.amount} matured for user {state.user_id}")
        else:
            remaining_fds.append(fd.model_copy(update={"remaining_months": months_left}))

    updated_mfs = tuple(
        mf.model_copy(
            update={
                "current_value": int(round(mf.current_value * (1 + monthly_return_rate(mf.fund_type, rng))))
            }
        )
        for mf in state.investments.mutual_funds
    )

    investments = state.investments.model_copy(
        update={"fixed_deposits": tuple(remaining_fds), "mutual_funds": updated_mfs}
    )
    return state.model_copy(
        update={"balance": balance, "history": tuple(history), "investments": investments}
    )


# =============================================================================
# Month close
# =============================================================================


def finalize_month(state: FinancialState) -> FinancialState:
    """Record the month's net effect as a system entry.

    Does not change month and leaves current_batch alone; clearing the batch
    is the month flow's job.
    """
    entries = [e for e in state.entries_for_month() if e.entry_type != HistoryType.SYSTEM]
    balance_net = sum(e.balance_change for e in entries)
    savings_net = sum(e.savings_change or 0 for e in entries)
    risk_net = sum(e.risk_change or 0 for e in entries)

    entry = HistoryEntry(
        entry_type=HistoryType.SYSTEM,
        month=state.month,
        balance_change=balance_net,
        savings_change=savings_net,
        risk_change=risk_net,
        description=f"Month {state.month} closed",
        snapshot=MonthSnapshot(
            balance=state.balance,
            savings=state.savings,
            risk_score=state.risk_score,
            net_worth=net_worth(state),
        ),
    )
    return _append(state, entry)


# =============================================================================
# Action dispatch
# =============================================================================


def apply_action(state: FinancialState, action: Action) -> FinancialState:
    """Apply a tagged action payload.

    Raises:
        TypeError: If action is not one of the known action types
    """
    if isinstance(action, IncomeAction):
        return apply_income(state, action.amount)
    if isinstance(action, ChoiceAction):
        return apply_choice(state, action.choice)
    if isinstance(action, DepositAction):
        return deposit_to_savings(state, action.amount)
    if isinstance(action, WithdrawAction):
        return withdraw_from_savings(state, action.amount)
    if isinstance(action, StartInsuranceAction):
        return start_insurance(state, action.monthly_premium, action.coverage)
    if isinstance(action, CancelInsuranceAction):
        return cancel_insurance(state)
    if isinstance(action, StartFixedDepositAction):
        return start_fixed_deposit(
            state,
            amount=action.amount,
            tenure=action.tenure,
            source=action.source,
            interest_rate=action.interest_rate,
        )
    if isinstance(action, StartMutualFundAction):
        return start_mutual_fund(state, action.amount, action.fund_type, action.source)
    raise TypeError(f"Unknown action type: {type(action).__name__}")
