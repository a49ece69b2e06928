"""LLM prompts for scenario, reflection and decision-question generation.

Prompts are organized by function:

1. Monthly Scenarios - The batch of situations for one month
2. Reflection - Month-end analysis of the player's choices
3. Decision Questions - "Strategy for next month" questions

All templates use curly-brace variables: {variable_name}
"""

from __future__ import annotations

from fatesim.engine.modifiers import strategy_status
from fatesim.models.state import FinancialState, HistoryEntry, HistoryType, net_worth
from fatesim.parameters import CHOICES_PER_SCENARIO

# =============================================================================
# MONTHLY SCENARIO PROMPTS
# =============================================================================

SCENARIO_SYSTEM_PROMPT = """You are a scenario generator for a financial life simulation game aimed at Indian college students.

Your task is to create realistic financial situations that Indian students commonly face.

RULES:
- Every scenario has exactly 3 choices
- Use simple, clear language
- Keep monetary values realistic for Indian students (in INR, values between 100-5000)
- Risk changes should be between -20 and +20
- Do NOT give financial advice
- Do NOT use emojis or markdown
- Return ONLY valid JSON, nothing else

SCENARIO THEMES (rotate between these):
- Food choices (canteen vs cooking vs ordering)
- Transport decisions (bus vs auto vs walk)
- Study materials (new books vs second-hand vs library)
- Entertainment (movies, subscriptions, outings)
- Part-time work opportunities
- Unexpected expenses (phone repair, medical, fees)
- Peer pressure spending (treats, gifts, group activities)
- Savings opportunities (FD, recurring deposit, chit fund)

Use the player's behavioral profile to bias content:
- Higher risk sensitivity: larger swings in balanceChange and riskChange
- Higher insurance likelihood: more situations where protection matters
- Higher difficulty: more multi-step or ambiguous trade-offs
- Higher market volatility: more unexpected shocks, good and bad
"""

MONTHLY_SCENARIOS_PROMPT_TEMPLATE = """Generate {count} distinct financial scenarios for month {month}.

Current game state:
- Month: {month}
- Balance: ₹{balance}
- Savings: ₹{savings}
- Net worth: ₹{net_worth}
- Risk Score: {risk_score}/100
- Insurance: {insurance}

Behavioral profile ({strategy_label}: {strategy_description}):
- Risk sensitivity: {risk_sensitivity:.2f}
- Insurance likelihood: {insurance_likelihood:.2f}
- Difficulty: {difficulty_modifier:.2f}
- Market volatility: {market_volatility:.2f}
- Strategy momentum: {strategy_momentum:+.2f}

Recent decisions:
{recent_history}

OUTPUT FORMAT (strict JSON only):
{{
  "scenarios": [
    {{
      "id": "s1",
      "situation": "A brief description of the scenario the student faces",
      "choices": [
        {{"id": "choice_1", "label": "First option", "balanceChange": -500, "riskChange": 5, "concept": "Budgeting"}},
        {{"id": "choice_2", "label": "Second option", "balanceChange": -200, "riskChange": 0}},
        {{"id": "choice_3", "label": "Third option", "balanceChange": 0, "riskChange": -5}}
      ]
    }}
  ]
}}"""

CHOICE_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "string"},
        "label": {"type": "string"},
        "balanceChange": {"type": "number"},
        "riskChange": {"type": "number"},
        "savingsChange": {"type": "number"},
        "concept": {"type": "string"},
    },
    "required": ["id", "label", "balanceChange", "riskChange"],
}

MONTHLY_BATCH_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "scenarios": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "situation": {"type": "string"},
                    "choices": {
                        "type": "array",
                        "items": CHOICE_JSON_SCHEMA,
                        "minItems": CHOICES_PER_SCENARIO,
                        "maxItems": CHOICES_PER_SCENARIO,
                    },
                },
                "required": ["situation", "choices"],
            },
        }
    },
    "required": ["scenarios"],
}

# =============================================================================
# REFLECTION PROMPTS
# =============================================================================

REFLECTION_SYSTEM_PROMPT = """You are a friendly financial mentor for Indian college students playing a money simulation.

Write a short reflection (4-6 sentences) on the month that just ended:
- Name one thing the player did well and one thing to watch
- Refer to specific decisions from the month
- Tie at least one observation to a financial concept (budgeting, emergency funds, insurance, debt, compounding)
- Plain text only, no markdown, no emojis, no bullet points
"""

REFLECTION_PROMPT_TEMPLATE = """Month {month} has ended.

End-of-month position:
- Balance: ₹{balance}
- Savings: ₹{savings}
- Net worth: ₹{net_worth}
- Risk Score: {risk_score}/100

This month's activity:
{month_history}

Write the reflection."""

# =============================================================================
# DECISION QUESTION PROMPTS
# =============================================================================

DECISION_QUESTIONS_SYSTEM_PROMPT = """You write "strategy for next month" questions for a financial life simulation.

Write exactly 3 questions. Each question is one line starting with its number and a period,
followed by exactly two option lines starting with "A)" and "B)".

The questions must cover, in this order:
1. Stability (A) versus flexibility (B) in day-to-day money
2. Self-reliance (A) versus paying for safety nets (B)
3. Steady growth (A) versus high-stakes ambition (B)

Output only the questions and options. No headings, no markdown.
"""

DECISION_QUESTIONS_PROMPT_TEMPLATE = """The player just finished month {month}.

Month analysis:
{reflection}

Current profile: {strategy_label} ({strategy_description}), risk score {risk_score}/100.

Write the three questions for next month, phrased around what happened this month."""


# =============================================================================
# FORMATTERS
# =============================================================================


def format_history_entry(entry: HistoryEntry) -> str:
    """One history entry as a prompt line."""
    parts = [f"₹{entry.balance_change:+d}"]
    if entry.savings_change:
        parts.append(f"savings ₹{entry.savings_change:+d}")
    if entry.risk_change:
        parts.append(f"risk {entry.risk_change:+d}")
    line = f"- [{entry.entry_type.value}] {entry.description} ({', '.join(parts)})"
    if entry.concept:
        line += f" [concept: {entry.concept}]"
    return line


def format_history(entries: list[HistoryEntry] | tuple[HistoryEntry, ...], limit: int | None = None) -> str:
    """Format history entries for a prompt, most recent last."""
    relevant = [e for e in entries if e.entry_type != HistoryType.SYSTEM]
    if limit is not None:
        relevant = relevant[-limit:]
    if not relevant:
        return "- (none yet)"
    return "\n".join(format_history_entry(e) for e in relevant)


def format_monthly_scenarios_prompt(state: FinancialState, count: int) -> str:
    """Build the batch generation prompt for the state's current month."""
    modifiers = state.modifiers
    status = strategy_status(modifiers)
    policy = state.investments.insurance
    insurance = (
        f"active, ₹{policy.monthly_premium}/month for ₹{policy.coverage} cover"
        if policy.active
        else ("opted in" if state.insurance_opted else "none")
    )
    return MONTHLY_SCENARIOS_PROMPT_TEMPLATE.format(
        count=count,
        month=state.month,
        balance=state.balance,
        savings=state.savings,
        net_worth=net_worth(state),
        risk_score=state.risk_score,
        insurance=insurance,
        strategy_label=status.label,
        strategy_description=status.description,
        risk_sensitivity=modifiers.risk_sensitivity,
        insurance_likelihood=modifiers.insurance_likelihood,
        difficulty_modifier=modifiers.difficulty_modifier,
        market_volatility=modifiers.market_volatility,
        strategy_momentum=modifiers.strategy_momentum,
        recent_history=format_history(state.history, limit=10),
    )


def format_reflection_prompt(state: FinancialState) -> str:
    """Build the month-end reflection prompt."""
    return REFLECTION_PROMPT_TEMPLATE.format(
        month=state.month,
        balance=state.balance,
        savings=state.savings,
        net_worth=net_worth(state),
        risk_score=state.risk_score,
        month_history=format_history(state.entries_for_month()),
    )


def format_decision_questions_prompt(state: FinancialState, reflection: str) -> str:
    """Build the strategy-questions prompt."""
    status = strategy_status(state.modifiers)
    return DECISION_QUESTIONS_PROMPT_TEMPLATE.format(
        month=state.month,
        reflection=reflection,
        strategy_label=status.label,
        strategy_description=status.description,
        risk_score=state.risk_score,
    )
