"""Simulation engine for FateSim.

This module contains the core game logic including:
- transitions: Pure state transitions (income, choices, savings, insurance, FD/MF)
- modifiers: Behavioral modifier calibration and strategy status
- batch: Monthly scenario batch controller
- month_flow: Orchestrator composing the engine with generator and persistence

month_flow is imported directly (``from fatesim.engine.month_flow import
MonthFlow``) because it depends on the generation package.

Usage:
    from fatesim.engine import apply_choice, initialize_state

    state = initialize_state("u1")
    state = apply_income(state)
    state = deposit_to_savings(state, 1000)
"""

from fatesim.engine.batch import (
    advance_scenario_index,
    attach_batch,
    clear_batch,
    get_current_scenario,
    initialize_monthly_batch,
    is_month_complete,
)
from fatesim.engine.modifiers import (
    DecisionAnswer,
    PrimaryDrive,
    RiskLevel,
    StrategyStatus,
    aggression_score,
    apply_behavioral_decisions,
    calibrate_modifiers,
    initialize_modifiers,
    strategy_status,
)
from fatesim.engine.transitions import (
    apply_action,
    apply_choice,
    apply_income,
    calculate_maturity_amount,
    calculate_net_income,
    cancel_insurance,
    deduct_insurance_premium,
    deposit_to_savings,
    finalize_month,
    initialize_state,
    monthly_return_rate,
    reset_state,
    start_fixed_deposit,
    start_insurance,
    start_mutual_fund,
    update_investments,
    withdraw_from_savings,
)

__all__ = [
    # Transitions
    "initialize_state",
    "reset_state",
    "calculate_net_income",
    "apply_income",
    "apply_choice",
    "deposit_to_savings",
    "withdraw_from_savings",
    "start_insurance",
    "cancel_insurance",
    "deduct_insurance_premium",
    "calculate_maturity_amount",
    "start_fixed_deposit",
    "start_mutual_fund",
    "monthly_return_rate",
    "update_investments",
    "finalize_month",
    "apply_action",
    # Modifiers
    "PrimaryDrive",
    "RiskLevel",
    "DecisionAnswer",
    "StrategyStatus",
    "calibrate_modifiers",
    "initialize_modifiers",
    "apply_behavioral_decisions",
    "aggression_score",
    "strategy_status",
    # Batch controller
    "initialize_monthly_batch",
    "get_current_scenario",
    "advance_scenario_index",
    "is_month_complete",
    "attach_batch",
    "clear_batch",
]
