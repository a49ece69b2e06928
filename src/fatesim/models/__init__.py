"""Simulation models.

This module exports the core data structures for the game.
"""

from .actions import (
    Action,
    PLAYER_ACTIONS,
    CancelInsuranceAction,
    ChoiceAction,
    DepositAction,
    IncomeAction,
    StartFixedDepositAction,
    StartInsuranceAction,
    StartMutualFundAction,
    WithdrawAction,
    parse_action,
)
from .base import FrozenModel, clamp
from .scenario import Choice, Scenario, ScenarioBatch
from .state import (
    FinancialState,
    FixedDeposit,
    FundSource,
    FundType,
    HistoryEntry,
    HistoryType,
    InsurancePolicy,
    Investments,
    Modifiers,
    MonthSnapshot,
    MutualFund,
    net_worth,
)

__all__ = [
    # Base
    "FrozenModel",
    "clamp",
    # Scenario types
    "Choice",
    "Scenario",
    "ScenarioBatch",
    # State types
    "FinancialState",
    "FixedDeposit",
    "FundSource",
    "FundType",
    "HistoryEntry",
    "HistoryType",
    "InsurancePolicy",
    "Investments",
    "Modifiers",
    "MonthSnapshot",
    "MutualFund",
    "net_worth",
    # Actions
    "Action",
    "IncomeAction",
    "ChoiceAction",
    "DepositAction",
    "WithdrawAction",
    "StartInsuranceAction",
    "CancelInsuranceAction",
    "StartFixedDepositAction",
    "StartMutualFundAction",
    "PLAYER_ACTIONS",
    "parse_action",
]
