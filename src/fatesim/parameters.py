"""Game balance parameters for the financial life simulation.

This module is the SINGLE SOURCE OF TRUTH for tunable game constants.
Money values are whole rupees.

Parameter Categories:
- Starting State: What a freshly initialized player owns
- Income: Monthly stipend and tax
- Scenario Batches: How many scenarios a month holds
- Investments: Mutual fund return ranges
- Modifiers: Behavioral bias ranges, calibration tables and monthly deltas

Usage:
    from fatesim.parameters import DEFAULT_MONTHLY_INCOME, TAX_RATE
"""

# =============================================================================
# STARTING STATE
# =============================================================================

STARTING_BALANCE = 1000
"""Spendable balance for a new player."""

STARTING_SAVINGS = 0
"""Savings for a new player. Savings only move via deposit/withdraw."""

STARTING_RISK_SCORE = 50
"""Midpoint of the [0, 100] risk scale."""

RISK_SCORE_MIN = 0
RISK_SCORE_MAX = 100

# =============================================================================
# INCOME
# =============================================================================

DEFAULT_MONTHLY_INCOME = 5000
"""Gross monthly income credited at the start of every month."""

TAX_RATE = 0.20
"""Flat deduction applied to gross income before crediting.

With the default income the player nets 4000 per month.
"""

# =============================================================================
# SCENARIO BATCHES
# =============================================================================

SCENARIOS_PER_MONTH = 5
"""Fixed number of scenarios generated for each month."""

CHOICES_PER_SCENARIO = 3
"""Every scenario offers exactly this many choices."""

INSURANCE_OFFER_LAST_MONTH = 2
"""Insurance choices are injected into batches up to and including this month."""

# =============================================================================
# INVESTMENTS
# =============================================================================

MUTUAL_FUND_ANNUAL_RETURNS: dict[str, tuple[float, float]] = {
    "equity": (0.12, 0.15),
    "debt": (0.06, 0.08),
    "hybrid": (0.09, 0.11),
}
"""Annual return range per fund type.

Each month an annual rate is drawn uniformly from the range and converted
to a monthly compounding step: (1 + annual) ** (1 / 12) - 1.
"""

# =============================================================================
# MODIFIERS
# =============================================================================

MODIFIER_MIN = 0.5
MODIFIER_MAX = 2.5
MOMENTUM_MIN = -1.0
MOMENTUM_MAX = 1.0

PRIMARY_DRIVE_BASELINES: dict[str, dict[str, float]] = {
    "security": {
        "risk_sensitivity": 0.7,
        "insurance_likelihood": 1.5,
        "market_volatility": 0.8,
        "difficulty_modifier": 0.8,
    },
    "growth": {
        "risk_sensitivity": 1.3,
        "insurance_likelihood": 0.8,
        "market_volatility": 1.2,
        "difficulty_modifier": 1.2,
    },
    "experience": {},
}
"""Baseline modifier values per primary drive. Missing keys stay neutral."""

RISK_LEVEL_ADJUSTMENTS: dict[str, dict[str, float]] = {
    "low": {
        "risk_sensitivity": -0.2,
        "market_volatility": -0.2,
        "difficulty_modifier": -0.1,
    },
    "medium": {},
    "high": {
        "risk_sensitivity": 0.3,
        "market_volatility": 0.3,
        "difficulty_modifier": 0.2,
    },
}
"""Offsets applied on top of the primary drive baseline."""

BEHAVIORAL_DECISION_DELTAS: tuple[dict[str, dict[str, float]], ...] = (
    # Q1: Stability (A) vs Flexibility (B)
    {
        "A": {"risk_sensitivity": -0.03, "market_volatility": -0.02, "strategy_momentum": -0.1},
        "B": {"risk_sensitivity": 0.03, "market_volatility": 0.02, "strategy_momentum": 0.1},
    },
    # Q2: Self-reliance (A) vs Safety nets (B)
    {
        "A": {"insurance_likelihood": -0.05, "difficulty_modifier": 0.03},
        "B": {"insurance_likelihood": 0.08, "difficulty_modifier": -0.02},
    },
    # Q3: Steady growth (A) vs High stakes (B)
    {
        "A": {"difficulty_modifier": -0.03, "market_volatility": -0.02, "strategy_momentum": -0.05},
        "B": {
            "difficulty_modifier": 0.08,
            "market_volatility": 0.05,
            "risk_sensitivity": 0.05,
            "strategy_momentum": 0.15,
        },
    },
)
"""Monthly strategy answer effects, indexed by question position.

Deltas are small so strategy builds momentum over several months rather
than flipping the game in one answer.
"""
