"""Tests for API key rotation.

Tests cover:
- Pure select_key: single key, round-robin, cooldown, least-recently-used fallback
- Per-purpose key pools when five or more keys are configured
- ApiKeyRotator with an injected clock
- Loading keys from the environment
"""

import pytest

from fatesim.generation.key_rotation import (
    ApiKeyRotator,
    KeyPurpose,
    KeyRotationState,
    load_keys_from_env,
    select_key,
)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestSelectKey:
    """Tests for the pure select_key function."""

    def test_no_keys(self):
        with pytest.raises(ValueError, match="No API keys"):
            select_key(0, KeyRotationState.fresh(0), now=0.0)

    def test_single_key_ignores_cooldown(self):
        state = KeyRotationState.fresh(1)
        for _ in range(3):
            index, state = select_key(1, state, now=0.0)
            assert index == 0
        assert state.request_counts == (3,)

    def test_round_robin(self):
        state = KeyRotationState.fresh(3)
        picked = []
        for _ in range(3):
            index, state = select_key(3, state, now=0.0)
            picked.append(index)
        assert picked == [0, 1, 2]
        assert state.index == 0

    def test_does_not_mutate_input(self):
        state = KeyRotationState.fresh(2)
        select_key(2, state, now=0.0)
        assert state == KeyRotationState.fresh(2)

    def test_skips_cooling_key(self):
        state = KeyRotationState(index=0, last_used=(100.0, 0.0), request_counts=(1, 1))
        index, _ = select_key(2, state, now=120.0)
        assert index == 1

    def test_all_cooling_uses_least_recently_used(self):
        state = KeyRotationState(index=0, last_used=(50.0, 30.0, 40.0), request_counts=(1, 1, 1))
        index, new_state = select_key(3, state, now=60.0)
        assert index == 1
        assert new_state.last_used[1] == 60.0
        assert new_state.request_counts[1] == 2

    def test_key_available_after_cooldown(self):
        state = KeyRotationState(index=0, last_used=(0.0, 59.0), request_counts=(1, 1))
        index, _ = select_key(2, state, now=60.0)
        assert index == 0

    def test_purpose_pools(self):
        state = KeyRotationState.fresh(5)
        index, state = select_key(5, state, now=0.0, purpose=KeyPurpose.REFLECTION)
        assert index == 3
        index, state = select_key(5, state, now=0.0, purpose=KeyPurpose.QUESTIONS)
        assert index == 4
        scenario_keys = []
        for _ in range(3):
            index, state = select_key(5, state, now=0.0, purpose=KeyPurpose.SCENARIO)
            scenario_keys.append(index)
        assert scenario_keys == [0, 1, 2]

    def test_exhausted_pool_stays_in_pool(self):
        state = KeyRotationState.fresh(5)
        for _ in range(4):
            index, state = select_key(5, state, now=0.0, purpose=KeyPurpose.REFLECTION)
            assert index == 3

    def test_purpose_ignored_below_threshold(self):
        state = KeyRotationState.fresh(3)
        index, _ = select_key(3, state, now=0.0, purpose=KeyPurpose.QUESTIONS)
        assert index == 0


class TestApiKeyRotator:
    """Tests for the ApiKeyRotator component."""

    def test_rotates_with_clock(self):
        clock = FakeClock()
        rotator = ApiKeyRotator(["k1", "k2"], clock=clock)
        assert rotator.next_key() == "k1"
        assert rotator.next_key() == "k2"
        # Both cooling down: least recently used
        assert rotator.next_key() == "k1"
        clock.now += 61
        assert rotator.next_key() == "k2"

    def test_no_keys(self):
        assert ApiKeyRotator([]).next_key() is None

    def test_stats(self):
        clock = FakeClock()
        rotator = ApiKeyRotator(["k1", "k2"], clock=clock)
        rotator.next_key()
        stats = rotator.stats()
        assert stats[0] == {"key_number": 1, "request_count": 1, "available": False}
        assert stats[1] == {"key_number": 2, "request_count": 0, "available": True}
        assert all("k1" not in str(s) for s in stats)

    def test_reset(self):
        rotator = ApiKeyRotator(["k1", "k2"], clock=FakeClock())
        rotator.next_key()
        rotator.reset()
        assert rotator.state == KeyRotationState.fresh(2)

    def test_resume_from_state(self):
        state = KeyRotationState(index=1, last_used=(0.0, 0.0), request_counts=(4, 4))
        rotator = ApiKeyRotator(["k1", "k2"], clock=FakeClock(500.0), state=state)
        assert rotator.next_key() == "k2"

    def test_state_size_mismatch(self):
        with pytest.raises(ValueError):
            ApiKeyRotator(["k1"], state=KeyRotationState.fresh(3))


class TestLoadKeys:
    """Tests for loading keys from the environment."""

    def test_numbered_keys(self):
        env = {"FATESIM_API_KEY_1": "a", "FATESIM_API_KEY_3": "c", "FATESIM_API_KEY_9": "z"}
        assert load_keys_from_env(env) == ["a", "c"]

    def test_anthropic_key_as_first(self):
        env = {"ANTHROPIC_API_KEY": "main", "FATESIM_API_KEY_2": "b"}
        assert load_keys_from_env(env) == ["main", "b"]

    def test_numbered_key_wins(self):
        env = {"ANTHROPIC_API_KEY": "main", "FATESIM_API_KEY_1": "one"}
        assert load_keys_from_env(env) == ["one"]

    def test_from_env(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        for i in range(1, 6):
            monkeypatch.delenv(f"FATESIM_API_KEY_{i}", raising=False)
        monkeypatch.setenv("FATESIM_API_KEY_2", "two")
        rotator = ApiKeyRotator.from_env()
        assert rotator.keys == ["two"]
