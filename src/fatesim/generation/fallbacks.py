"""Pre-authored fallback content.

Used whenever the generator fails or returns something that does not
validate, so a player is never blocked. Everything here is deterministic:
the same month always gets the same fallback scenarios and questions.
"""

from __future__ import annotations

from fatesim.models.scenario import Choice, Scenario, ScenarioBatch
from fatesim.models.state import FinancialState, HistoryType
from fatesim.parameters import INSURANCE_OFFER_LAST_MONTH, SCENARIOS_PER_MONTH

FALLBACK_SCENARIOS: tuple[dict, ...] = (
    {
        "situation": "Your phone screen cracked and you need to decide what to do.",
        "choices": [
            {"id": "choice_1", "label": "Get it repaired at the local shop", "balanceChange": -800, "riskChange": 5},
            {"id": "choice_2", "label": "Use a screen protector and ignore it", "balanceChange": -100, "riskChange": 0},
            {"id": "choice_3", "label": "Ask parents for help with repair cost", "balanceChange": 0, "riskChange": -10},
        ],
    },
    {
        "situation": "Your friends are planning a weekend trip to a nearby hill station.",
        "choices": [
            {"id": "choice_1", "label": "Join the trip and split costs", "balanceChange": -1500, "riskChange": 10},
            {"id": "choice_2", "label": "Skip the trip and study instead", "balanceChange": 0, "riskChange": -5},
            {"id": "choice_3", "label": "Go for just one day to save money", "balanceChange": -600, "riskChange": 5},
        ],
    },
    {
        "situation": "The semester books list is out and you need study materials.",
        "choices": [
            {"id": "choice_1", "label": "Buy new books from the store", "balanceChange": -2000, "riskChange": -5},
            {"id": "choice_2", "label": "Get second-hand books from seniors", "balanceChange": -500, "riskChange": 0},
            {"id": "choice_3", "label": "Use library copies and photocopies", "balanceChange": -200, "riskChange": 5},
        ],
    },
    {
        "situation": "A senior offers you a part-time tutoring job for school students.",
        "choices": [
            {"id": "choice_1", "label": "Accept the job for extra income", "balanceChange": 1500, "riskChange": 10},
            {"id": "choice_2", "label": "Decline to focus on studies", "balanceChange": 0, "riskChange": -5},
            {"id": "choice_3", "label": "Try it for one month first", "balanceChange": 800, "riskChange": 5},
        ],
    },
    {
        "situation": "Your laptop is running slow and affecting your assignments.",
        "choices": [
            {"id": "choice_1", "label": "Buy a new budget laptop", "balanceChange": -25000, "riskChange": 5},
            {"id": "choice_2", "label": "Get RAM upgrade from local shop", "balanceChange": -2000, "riskChange": 0},
            {"id": "choice_3", "label": "Use college computer lab instead", "balanceChange": 0, "riskChange": -5},
        ],
    },
    {
        "situation": "The canteen raised its prices and your food budget is stretched.",
        "choices": [
            {"id": "choice_1", "label": "Keep eating at the canteen", "balanceChange": -1200, "riskChange": 5},
            {"id": "choice_2", "label": "Cook simple meals with roommates", "balanceChange": -600, "riskChange": -5},
            {"id": "choice_3", "label": "Order food online on busy days", "balanceChange": -1800, "riskChange": 10},
        ],
    },
    {
        "situation": "A classmate invites you to put money into a chit fund run by a local group.",
        "choices": [
            {
                "id": "choice_1",
                "label": "Put in a small monthly amount",
                "balanceChange": -500,
                "savingsChange": 500,
                "riskChange": 5,
                "concept": "Informal savings schemes",
            },
            {"id": "choice_2", "label": "Open a recurring deposit at the bank instead", "balanceChange": -500, "savingsChange": 500, "riskChange": -5},
            {"id": "choice_3", "label": "Keep the money in your account", "balanceChange": 0, "riskChange": 0},
        ],
    },
    {
        "situation": "You wake up with a high fever the week before exams.",
        "choices": [
            {"id": "choice_1", "label": "Visit a private clinic right away", "balanceChange": -1500, "riskChange": -5},
            {"id": "choice_2", "label": "Go to the campus health centre", "balanceChange": -200, "riskChange": 0},
            {"id": "choice_3", "label": "Rest and buy medicine from the chemist", "balanceChange": -300, "riskChange": 10},
        ],
    },
)
"""Fallback scenarios in generator output format (camelCase keys)."""

INSURANCE_OPTIONS: tuple[dict, ...] = (
    {"label": "Pay small fee for campus security fund", "balanceChange": -500, "riskChange": -5},
    {"label": "Join student welfare scheme", "balanceChange": -500, "riskChange": 0},
    {"label": "Subscribe to health emergency fund", "balanceChange": -500, "riskChange": -2},
)

FALLBACK_DECISION_QUESTIONS = """1. How do you want to handle next month's money?
A) Keep a steady routine and stick to a fixed budget
B) Stay flexible and adapt to opportunities as they come
2. How will you protect yourself against surprises?
A) Rely on my own savings and judgement
B) Pay for safety nets like insurance and emergency funds
3. What is your ambition for next month?
A) Slow, steady growth with few surprises
B) Take bigger swings for bigger rewards"""
"""Decision questions used when generation fails. Aligned with the three
behavioral questions the modifiers expect."""


def fallback_scenario(month: int, slot: int) -> Scenario:
    """Deterministic fallback scenario for a batch slot."""
    index = (max(month - 1, 0) * SCENARIOS_PER_MONTH + slot) % len(FALLBACK_SCENARIOS)
    raw = FALLBACK_SCENARIOS[index]
    return Scenario.model_validate({**raw, "id": f"fallback_m{month}_s{slot + 1}"})


def fallback_batch(month: int, count: int = SCENARIOS_PER_MONTH) -> ScenarioBatch:
    """A full batch made entirely of fallback scenarios."""
    return ScenarioBatch(
        month=month,
        scenarios=tuple(fallback_scenario(month, slot) for slot in range(count)),
        current_index=0,
    )


def should_offer_insurance(state: FinancialState) -> bool:
    """Insurance is offered in the first months until the player opts in."""
    return state.month <= INSURANCE_OFFER_LAST_MONTH and not state.insurance_opted


def inject_insurance_choice(scenario: Scenario, month: int) -> Scenario:
    """Replace the third choice of a scenario with an insurance offer."""
    option = INSURANCE_OPTIONS[month % len(INSURANCE_OPTIONS)]
    kept = scenario.choices[:2]
    choice_id = f"choice_insurance_m{month}"
    while any(choice.id == choice_id for choice in kept):
        choice_id += "_offer"
    insurance = Choice.model_validate(
        {**option, "id": choice_id, "isInsurance": True, "concept": "Insurance"}
    )
    return scenario.model_copy(update={"choices": kept + (insurance,)})


def fallback_reflection(state: FinancialState) -> str:
    """Compose a short month summary from history when generation fails."""
    entries = [e for e in state.entries_for_month() if e.entry_type != HistoryType.SYSTEM]
    choices = [e for e in entries if e.entry_type == HistoryType.CHOICE]
    balance_net = sum(e.balance_change for e in entries)
    risk_net = sum(e.risk_change or 0 for e in choices)

    if balance_net >= 0:
        money_line = f"You ended month {state.month} ₹{balance_net} ahead."
    else:
        money_line = f"You ended month {state.month} ₹{-balance_net} behind."

    if risk_net > 0:
        risk_line = f"Your choices added {risk_net} points of risk; consider building a cushion before taking on more."
    elif risk_net < 0:
        risk_line = f"Your choices lowered your risk by {-risk_net} points. Careful decisions are paying off."
    else:
        risk_line = "Your risk level held steady this month."

    debt_line = ""
    if state.balance < 0:
        debt_line = f" Your balance is negative (₹{state.balance}); paying this down should come first."

    return f"{money_line} You made {len(choices)} decisions. {risk_line}{debt_line}"
