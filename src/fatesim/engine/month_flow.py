"""Month flow orchestrator.

This module implements the MonthFlow class, which composes the pure engine,
the batch controller, the scenario generator and persistence into the
start-month / make-choice / end-month protocol.

Month start pipeline:
1. ADVANCE - Increment month, credit income, charge premium, age investments
2. GENERATE - Ask the generator for the month's scenarios
3. VALIDATE - Replace invalid scenarios with fallbacks, pad to a full batch
4. COMMIT - Attach the batch and persist

Month end:
1. REFLECT - Reflection and strategy questions from the generator
2. FINALIZE - Record the month summary and clear the batch
3. COMMIT - Persist

Generator and persistence failures never reach the caller. They are logged
and replaced with fallback content (or, for persistence, an in-memory state
that is simply not saved). Only caller-actionable errors propagate.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from fatesim.engine.batch import (
    advance_scenario_index,
    attach_batch,
    clear_batch,
    get_current_scenario,
    is_month_complete,
)
from fatesim.engine.modifiers import (
    DecisionAnswer,
    PrimaryDrive,
    RiskLevel,
    apply_behavioral_decisions,
    initialize_modifiers,
)
from fatesim.engine.transitions import (
    apply_action,
    apply_choice,
    apply_income,
    deduct_insurance_premium,
    finalize_month,
    initialize_state,
    reset_state,
    update_investments,
)
from fatesim.errors import InvalidChoice, InvalidScenarioShape, NoActiveScenario
from fatesim.generation.decisions import (
    DecisionQuestion,
    has_complete_questions,
    parse_decision_questions,
)
from fatesim.generation.fallbacks import (
    FALLBACK_DECISION_QUESTIONS,
    fallback_batch,
    fallback_reflection,
    fallback_scenario,
    inject_insurance_choice,
    should_offer_insurance,
)
from fatesim.generation.validation import validate_batch
from fatesim.models.actions import PLAYER_ACTIONS, Action
from fatesim.models.scenario import Choice, Scenario, ScenarioBatch
from fatesim.models.state import FinancialState
from fatesim.parameters import SCENARIOS_PER_MONTH

if TYPE_CHECKING:
    from fatesim.generation.protocols import ScenarioGenerator
    from fatesim.storage.persistence import StatePersistence

logger = logging.getLogger(__name__)


@dataclass
class StartMonthResult:
    """Result of start_month().

    Attributes:
        state: State with the month's batch attached
        scenario: First unresolved scenario
        resumed: True if an in-progress batch was resumed instead of starting a month
    """

    state: FinancialState
    scenario: Scenario | None
    resumed: bool = False


@dataclass
class ChoiceResult:
    """Result of handle_choice().

    Attributes:
        state: State after the choice (and month finalization, at month end)
        scenario: Next scenario, or None at month end
        is_month_end: True when this choice completed the month
        reflection: Month-end reflection text (month end only)
        decision_questions: Raw strategy question text (month end only)
        questions: Parsed strategy questions (month end only)
    """

    state: FinancialState
    scenario: Scenario | None
    is_month_end: bool = False
    reflection: str | None = None
    decision_questions: str | None = None
    questions: list[DecisionQuestion] = field(default_factory=list)


def resolve_batch(raw: Any, month: int, count: int = SCENARIOS_PER_MONTH) -> ScenarioBatch:
    """Turn a generator response into a playable batch.

    None (generation failed) or a response with no recognisable batch shape
    yields a complete fallback batch; otherwise invalid scenarios are
    replaced one by one.
    """
    if raw is None:
        return fallback_batch(month, count)
    try:
        batch, replaced = validate_batch(raw, month, count, fallback_scenario)
    except InvalidScenarioShape as e:
        logger.warning(f"Generated batch for month {month} unusable, using fallback batch: {e}")
        return fallback_batch(month, count)
    if replaced:
        logger.warning(f"Replaced {replaced}/{count} generated scenarios with fallbacks for month {month}")
    return batch


def offer_insurance(batch: ScenarioBatch, state: FinancialState) -> ScenarioBatch:
    """Swap an insurance offer into the first scenario during the early months."""
    if not batch.scenarios or not should_offer_insurance(state):
        return batch
    first = inject_insurance_choice(batch.scenarios[0], state.month)
    return batch.model_copy(update={"scenarios": (first,) + batch.scenarios[1:]})


class MonthFlow:
    """Drives one player's months.

    Example:
        >>> flow = MonthFlow(LLMScenarioGenerator(), StatePersistence(get_state_repository()))
        >>> state = await flow.hydrate("u1")
        >>> started = await flow.start_month(state)
        >>> result = await flow.handle_choice(started.state, started.scenario.choices[0])

    Attributes:
        generator: Source of scenarios, reflections and strategy questions
        persistence: Async save/load collaborator (None disables saving)
        scenario_count: Scenarios per month
    """

    def __init__(
        self,
        generator: ScenarioGenerator,
        persistence: StatePersistence | None = None,
        scenario_count: int = SCENARIOS_PER_MONTH,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the month flow.

        Args:
            generator: Scenario generator
            persistence: Persistence adapter; None keeps state in memory only
            scenario_count: Scenarios per month
            rng: Random source for mutual fund returns (for reproducibility)
        """
        self.generator = generator
        self.persistence = persistence
        self.scenario_count = scenario_count
        self._rng = rng or random.Random()

    # =========================================================================
    # Persistence
    # =========================================================================

    async def hydrate(self, user_id: str) -> FinancialState:
        """Load a player's state, or initialize a fresh one."""
        state = None
        if self.persistence is not None:
            try:
                state = await self.persistence.load_user_data(user_id)
            except Exception:
                logger.exception(f"Loading state for user {user_id} failed, starting fresh")
        if state is None:
            logger.info(f"No saved state for user {user_id}, initializing")
            return initialize_state(user_id)
        return state.model_copy(update={"is_loaded": True})

    async def _persist(self, state: FinancialState) -> bool:
        """Save state if it is loaded. Failures are logged, never raised."""
        if self.persistence is None or not state.is_loaded:
            return False
        try:
            saved = await self.persistence.save_user_data(state.user_id, state)
        except Exception:
            logger.exception(f"Saving state for user {state.user_id} failed")
            return False
        if not saved:
            logger.error(f"State for user {state.user_id} was not saved (month {state.month})")
        return bool(saved)

    async def reset(self, state: FinancialState) -> FinancialState:
        """Discard all progress, including the saved copy."""
        if self.persistence is not None:
            try:
                await self.persistence.clear_user_data(state.user_id)
            except Exception:
                logger.exception(f"Clearing saved state for user {state.user_id} failed")
        fresh = reset_state(state)
        await self._persist(fresh)
        return fresh

    # =========================================================================
    # Month start
    # =========================================================================

    async def start_month(self, state: FinancialState) -> StartMonthResult:
        """Start the next month, or resume the current one if it is unfinished.

        Resuming returns the same scenario with no income applied and no new
        batch generated. A leftover batch that was completed but never
        cleared is finalized before the next month starts.
        """
        batch = state.current_batch
        if batch is not None and batch.month == state.month and not is_month_complete(batch):
            logger.debug(f"Resuming month {state.month} at scenario {batch.current_index + 1}")
            return StartMonthResult(state=state, scenario=get_current_scenario(batch), resumed=True)
        if batch is not None:
            logger.info(f"Finalizing leftover batch for month {batch.month}")
            state = clear_batch(finalize_month(state))

        state = self.advance_month(state)
        raw = await self.generate_scenarios(state)
        batch = offer_insurance(resolve_batch(raw, state.month, self.scenario_count), state)
        state = attach_batch(state, batch)
        await self._persist(state)
        return StartMonthResult(state=state, scenario=get_current_scenario(batch))

    def advance_month(self, state: FinancialState) -> FinancialState:
        """Move to the next month: income, insurance premium, investments."""
        state = state.model_copy(update={"month": state.month + 1})
        state = apply_income(state)
        state = deduct_insurance_premium(state)
        return update_investments(state, self._rng)

    async def generate_scenarios(self, state: FinancialState) -> Any:
        """Raw generator response, or None if generation failed."""
        try:
            return await self.generator.generate_monthly_scenarios(state)
        except Exception as e:
            logger.warning(f"Scenario generation failed for month {state.month}, using fallbacks: {e}")
            return None

    # =========================================================================
    # Choices and month end
    # =========================================================================

    async def handle_choice(self, state: FinancialState, choice: Choice | str) -> ChoiceResult:
        """Apply a choice for the current scenario.

        Args:
            state: Current state with an active batch
            choice: A Choice from the current scenario, or its id

        Raises:
            NoActiveScenario: If no scenario is awaiting a choice
            InvalidChoice: If the choice does not belong to the current scenario
        """
        scenario = get_current_scenario(state.current_batch)
        if scenario is None:
            raise NoActiveScenario(f"No scenario awaiting a choice for user {state.user_id}")
        choice_id = choice if isinstance(choice, str) else choice.id
        selected = scenario.get_choice(choice_id)
        if selected is None:
            raise InvalidChoice(f"Choice {choice_id!r} is not part of scenario {scenario.id!r}")

        state = apply_choice(state, selected)
        state = attach_batch(state, advance_scenario_index(state.current_batch))

        if not is_month_complete(state.current_batch):
            await self._persist(state)
            return ChoiceResult(state=state, scenario=get_current_scenario(state.current_batch))
        return await self.end_month(state)

    async def end_month(self, state: FinancialState) -> ChoiceResult:
        """Reflect on the finished month, finalize it and persist."""
        reflection = await self.generate_reflection(state)
        question_text = await self.generate_decision_questions(state, reflection)

        state = clear_batch(finalize_month(state))
        await self._persist(state)
        logger.info(f"Month {state.month} finished for user {state.user_id}")
        return ChoiceResult(
            state=state,
            scenario=None,
            is_month_end=True,
            reflection=reflection,
            decision_questions=question_text,
            questions=parse_decision_questions(question_text),
        )

    async def generate_reflection(self, state: FinancialState) -> str:
        """Generated reflection, or one composed from history on failure."""
        try:
            text = await self.generator.generate_reflection(state)
        except Exception as e:
            logger.warning(f"Reflection generation failed for month {state.month}: {e}")
            return fallback_reflection(state)
        if not isinstance(text, str) or not text.strip():
            logger.warning(f"Empty reflection for month {state.month}, using fallback")
            return fallback_reflection(state)
        return text.strip()

    async def generate_decision_questions(self, state: FinancialState, reflection: str) -> str:
        """Generated strategy questions, or the fallback set if unusable."""
        try:
            text = await self.generator.generate_decision_questions(state, reflection)
        except Exception as e:
            logger.warning(f"Decision question generation failed for month {state.month}: {e}")
            return FALLBACK_DECISION_QUESTIONS
        if not isinstance(text, str) or not has_complete_questions(text):
            logger.warning(f"Decision questions for month {state.month} unparseable, using fallback")
            return FALLBACK_DECISION_QUESTIONS
        return text

    # =========================================================================
    # Player settings and money movement
    # =========================================================================

    async def apply_decisions(
        self,
        state: FinancialState,
        answers: Sequence[DecisionAnswer | str | None],
    ) -> FinancialState:
        """Apply strategy answers to modifiers and persist.

        Raises:
            ValueError: If answers are malformed
        """
        state = apply_behavioral_decisions(state, answers)
        await self._persist(state)
        return state

    async def calibrate(
        self,
        state: FinancialState,
        primary_drive: PrimaryDrive | str,
        risk_level: RiskLevel | str,
    ) -> FinancialState:
        """Set modifiers from initial preferences and persist.

        Raises:
            ValueError: If a preference is unknown
        """
        state = initialize_modifiers(state, primary_drive, risk_level)
        await self._persist(state)
        return state

    async def perform(self, state: FinancialState, action: Action) -> FinancialState:
        """Apply a savings, insurance or investment action and persist.

        Raises:
            TypeError: For income and choice actions, which only the month
                flow applies
            InvalidAmount: If the action's amount is unusable
            InsufficientFunds: If the source account cannot cover it
        """
        if not isinstance(action, PLAYER_ACTIONS):
            raise TypeError(
                f"{type(action).__name__} cannot be performed directly; "
                "income and choices are applied by start_month and handle_choice"
            )
        state = apply_action(state, action)
        await self._persist(state)
        return state
