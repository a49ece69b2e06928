"""Tests for behavioral modifier calibration.

Tests cover:
- Calibration from primary drive and risk level
- Repeat calibration overwrites rather than compounds
- Monthly strategy answers accumulate and stay clamped
- Strategy status classification
"""

import pytest

from fatesim.engine.modifiers import (
    DecisionAnswer,
    PrimaryDrive,
    RiskLevel,
    apply_behavioral_decisions,
    calibrate_modifiers,
    initialize_modifiers,
    strategy_status,
)
from fatesim.models.state import Modifiers


class TestCalibration:
    """Tests for calibrate_modifiers and initialize_modifiers."""

    def test_experience_medium_is_neutral(self):
        assert calibrate_modifiers("experience", "medium") == Modifiers()

    def test_security_low(self):
        modifiers = calibrate_modifiers(PrimaryDrive.SECURITY, RiskLevel.LOW)
        assert modifiers.risk_sensitivity == pytest.approx(0.5)
        assert modifiers.insurance_likelihood == pytest.approx(1.5)
        assert modifiers.market_volatility == pytest.approx(0.6)
        assert modifiers.difficulty_modifier == pytest.approx(0.7)

    def test_growth_high(self):
        modifiers = calibrate_modifiers("growth", "high")
        assert modifiers.risk_sensitivity == pytest.approx(1.6)
        assert modifiers.insurance_likelihood == pytest.approx(0.8)
        assert modifiers.market_volatility == pytest.approx(1.5)
        assert modifiers.difficulty_modifier == pytest.approx(1.4)

    def test_unknown_preference(self):
        with pytest.raises(ValueError):
            calibrate_modifiers("fame", "medium")
        with pytest.raises(ValueError):
            calibrate_modifiers("growth", "extreme")

    def test_repeat_calibration_overwrites(self, sample_state):
        """Calibrating twice with the same inputs gives the same modifiers."""
        once = initialize_modifiers(sample_state, "growth", "high")
        twice = initialize_modifiers(once, "growth", "high")
        assert once.modifiers == twice.modifiers

    def test_calibration_discards_momentum(self, sample_state):
        state = apply_behavioral_decisions(sample_state, ["B", "B", "B"])
        assert state.modifiers.strategy_momentum != 0
        state = initialize_modifiers(state, "experience", "medium")
        assert state.modifiers == Modifiers()


class TestBehavioralDecisions:
    """Tests for apply_behavioral_decisions."""

    def test_all_a(self, sample_state):
        state = apply_behavioral_decisions(sample_state, ["A", "A", "A"])
        modifiers = state.modifiers
        assert modifiers.risk_sensitivity == pytest.approx(0.97)
        assert modifiers.insurance_likelihood == pytest.approx(0.95)
        assert modifiers.difficulty_modifier == pytest.approx(1.0)
        assert modifiers.market_volatility == pytest.approx(0.96)
        assert modifiers.strategy_momentum == pytest.approx(-0.15)

    def test_all_b(self, sample_state):
        state = apply_behavioral_decisions(sample_state, [DecisionAnswer.B] * 3)
        modifiers = state.modifiers
        assert modifiers.risk_sensitivity == pytest.approx(1.08)
        assert modifiers.insurance_likelihood == pytest.approx(1.08)
        assert modifiers.difficulty_modifier == pytest.approx(1.06)
        assert modifiers.market_volatility == pytest.approx(1.07)
        assert modifiers.strategy_momentum == pytest.approx(0.25)

    def test_enum_and_letters_mixed(self, sample_state):
        """Enum members and letters are interchangeable."""
        from_enum = apply_behavioral_decisions(sample_state, [DecisionAnswer.A, DecisionAnswer.B, None])
        from_text = apply_behavioral_decisions(sample_state, ["A", "b", None])
        assert from_enum.modifiers == from_text.modifiers

    def test_answers_accumulate(self, sample_state):
        state = sample_state
        for _ in range(3):
            state = apply_behavioral_decisions(state, ["B", None, None])
        assert state.modifiers.strategy_momentum == pytest.approx(0.3)

    def test_none_skips_question(self, sample_state):
        state = apply_behavioral_decisions(sample_state, [None, None, None])
        assert state.modifiers == sample_state.modifiers

    def test_lowercase_accepted(self, sample_state):
        state = apply_behavioral_decisions(sample_state, ["b"])
        assert state.modifiers.strategy_momentum == pytest.approx(0.1)

    def test_momentum_stays_clamped(self, sample_state):
        state = sample_state
        for _ in range(20):
            state = apply_behavioral_decisions(state, ["B", "B", "B"])
        assert state.modifiers.strategy_momentum == 1.0
        assert state.modifiers.risk_sensitivity <= 2.5

    def test_too_many_answers(self, sample_state):
        with pytest.raises(ValueError, match="at most 3"):
            apply_behavioral_decisions(sample_state, ["A", "A", "A", "A"])

    def test_invalid_letter(self, sample_state):
        with pytest.raises(ValueError):
            apply_behavioral_decisions(sample_state, ["C"])

    def test_other_fields_untouched(self, sample_state):
        state = apply_behavioral_decisions(sample_state, ["A", "B", "A"])
        assert state.balance == sample_state.balance
        assert state.history == sample_state.history


class TestStrategyStatus:
    """Tests for strategy_status classification."""

    @pytest.mark.parametrize(
        "modifiers,label",
        [
            (Modifiers(), "Balanced"),
            (Modifiers(risk_sensitivity=1.3), "Growth-focused"),
            (Modifiers(risk_sensitivity=1.5, market_volatility=1.2), "Aggressive"),
            (Modifiers(risk_sensitivity=0.8), "Cautious"),
            (Modifiers(risk_sensitivity=0.6, difficulty_modifier=0.8), "Conservative"),
        ],
    )
    def test_labels(self, modifiers, label):
        assert strategy_status(modifiers).label == label
