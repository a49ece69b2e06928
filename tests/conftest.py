"""Shared pytest fixtures and markers for all tests."""

import pytest

from fatesim.errors import GeneratorFailure
from fatesim.generation.fallbacks import FALLBACK_DECISION_QUESTIONS


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "llm_integration: marks tests requiring LLM API calls"
    )


def make_raw_scenario(number: int) -> dict:
    """A valid scenario in generator output format."""
    return {
        "id": f"s{number}",
        "situation": f"Situation number {number}",
        "choices": [
            {"id": "choice_1", "label": "Spend", "balanceChange": -100, "riskChange": 5},
            {"id": "choice_2", "label": "Save", "balanceChange": 0, "riskChange": -5, "savingsChange": 0},
            {"id": "choice_3", "label": "Invest", "balanceChange": -50, "riskChange": 0},
        ],
    }


def make_raw_batch(count: int = 5) -> dict:
    """A valid batch response in generator output format."""
    return {"scenarios": [make_raw_scenario(i + 1) for i in range(count)]}


class FakeGenerator:
    """Scripted ScenarioGenerator that records every call."""

    def __init__(
        self,
        batch=None,
        reflection: str = "A solid month of careful spending.",
        questions: str = FALLBACK_DECISION_QUESTIONS,
        fail_scenarios: bool = False,
        fail_reflection: bool = False,
        fail_questions: bool = False,
    ):
        self.batch = batch
        self.reflection = reflection
        self.questions = questions
        self.fail_scenarios = fail_scenarios
        self.fail_reflection = fail_reflection
        self.fail_questions = fail_questions
        self.calls: list[tuple[str, int]] = []

    async def generate_monthly_scenarios(self, state):
        self.calls.append(("scenarios", state.month))
        if self.fail_scenarios:
            raise GeneratorFailure("scenario service unavailable")
        return self.batch if self.batch is not None else make_raw_batch()

    async def generate_reflection(self, state):
        self.calls.append(("reflection", state.month))
        if self.fail_reflection:
            raise GeneratorFailure("reflection service unavailable")
        return self.reflection

    async def generate_decision_questions(self, state, reflection):
        self.calls.append(("questions", state.month))
        if self.fail_questions:
            raise TimeoutError("questions timed out")
        return self.questions


class FakePersistence:
    """In-memory persistence collaborator."""

    def __init__(self, fail_saves: bool = False, raise_on_save: bool = False):
        self.fail_saves = fail_saves
        self.raise_on_save = raise_on_save
        self.saved: dict = {}
        self.save_count = 0

    async def save_user_data(self, user_id, state):
        self.save_count += 1
        if self.raise_on_save:
            raise OSError("disk full")
        if self.fail_saves:
            return False
        self.saved[user_id] = state
        return True

    async def load_user_data(self, user_id):
        return self.saved.get(user_id)

    async def clear_user_data(self, user_id):
        return self.saved.pop(user_id, None) is not None


@pytest.fixture
def sample_state():
    """Provide a freshly initialized state for testing."""
    from fatesim.engine.transitions import initialize_state
    return initialize_state("u1")


@pytest.fixture
def sample_choice():
    """Provide a simple spending choice."""
    from fatesim.models.scenario import Choice
    return Choice(id="choice_1", label="Buy lunch", balance_change=-200, risk_change=5)


@pytest.fixture
def fake_generator():
    """Provide a generator that returns a valid batch."""
    return FakeGenerator()


@pytest.fixture
def fake_persistence():
    """Provide an in-memory persistence collaborator."""
    return FakePersistence()


@pytest.fixture
def generator_factory():
    """Provide the FakeGenerator class for tests that need custom behavior."""
    return FakeGenerator


@pytest.fixture
def persistence_factory():
    """Provide the FakePersistence class for tests that need custom behavior."""
    return FakePersistence


@pytest.fixture
def raw_batch():
    """Provide a valid five-scenario batch in generator output format."""
    return make_raw_batch()
