"""Tests for state export and import.

Tests cover:
- Export/import round-trip equality for states built through engine operations
- Rejection of malformed JSON, wrong shapes and another user's file
- File-based export/import
"""

import json
import random

import pytest

from fatesim.engine.batch import advance_scenario_index, attach_batch
from fatesim.engine.modifiers import apply_behavioral_decisions, initialize_modifiers
from fatesim.engine.transitions import (
    apply_choice,
    apply_income,
    deposit_to_savings,
    finalize_month,
    start_fixed_deposit,
    start_insurance,
    start_mutual_fund,
    update_investments,
)
from fatesim.errors import ImportValidationError
from fatesim.generation.fallbacks import fallback_batch
from fatesim.storage.transfer import (
    export_state,
    export_state_to_file,
    import_state,
    import_state_from_file,
)


@pytest.fixture
def played_state(sample_state):
    """A state that has been through every kind of engine operation."""
    state = initialize_modifiers(sample_state, "growth", "medium")
    state = apply_income(state.model_copy(update={"month": 1}))
    batch = fallback_batch(1, 5)
    state = attach_batch(state, batch)
    state = apply_choice(state, batch.scenarios[0].choices[0])
    state = attach_batch(state, advance_scenario_index(state.current_batch))
    state = deposit_to_savings(state, 1000)
    state = start_insurance(state, 200, 25000)
    state = start_fixed_deposit(state, amount=500, tenure=3, source="savings", interest_rate=7.5)
    state = start_mutual_fund(state, 800, "equity")
    state = update_investments(state, random.Random(11))
    state = apply_behavioral_decisions(state, ["B", None, "A"])
    return finalize_month(state)


class TestRoundTrip:
    """Tests for export/import round-trip."""

    def test_fresh_state(self, sample_state):
        assert import_state(export_state(sample_state)) == sample_state

    def test_played_state(self, played_state):
        restored = import_state(export_state(played_state))
        assert restored == played_state
        assert restored.current_batch.current_index == 1

    def test_export_is_camel_case_json(self, played_state):
        data = json.loads(export_state(played_state))
        assert data["userId"] == "u1"
        assert "currentBatch" in data
        assert "fixedDeposits" in data["investments"]
        assert data["investments"]["mutualFunds"][0]["type"] == "equity"
        assert "isLoaded" not in data

    def test_file_roundtrip(self, played_state, tmp_path):
        path = export_state_to_file(played_state, tmp_path / "exports" / "u1.json")
        assert path.exists()
        assert import_state_from_file(path, user_id="u1") == played_state

    def test_import_marks_loaded(self, sample_state):
        data = json.loads(export_state(sample_state))
        assert import_state(json.dumps(data)).is_loaded is True


class TestImportRejection:
    """Tests for malformed import files."""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "not json",
            "[1, 2, 3]",
            '"a string"',
            "{}",
            '{"userId": "u1", "savings": -10}',
            '{"userId": "u1", "history": [{"type": "lottery", "month": 1}]}',
            '{"userId": "u1", "unknownField": true}',
            '{"userId": "u1", "riskScore": null}',
            '{"userId": "u1", "riskScore": NaN}',
            '{"userId": "u1", "riskScore": 500}',
            '{"userId": "u1", "balance": Infinity}',
            '{"userId": "u1", "modifiers": {"riskSensitivity": null}}',
            '{"userId": "u1", "modifiers": {"strategyMomentum": 3.0}}',
            '{"userId": "u1", "currentBatch": {"month": 1, "scenarios": [], "currentIndex": 9}}',
            b"\xff\xfe{",
        ],
    )
    def test_malformed(self, text):
        with pytest.raises(ImportValidationError):
            import_state(text)

    def test_other_users_file(self, sample_state):
        with pytest.raises(ImportValidationError, match="belongs to user 'u1'"):
            import_state(export_state(sample_state), user_id="u2")

    def test_missing_file(self, tmp_path):
        with pytest.raises(ImportValidationError, match="Cannot read"):
            import_state_from_file(tmp_path / "nope.json")

    def test_rejection_leaves_live_state_untouched(self, played_state):
        live = played_state
        with pytest.raises(ImportValidationError):
            live = import_state("{broken")
        assert live is played_state
