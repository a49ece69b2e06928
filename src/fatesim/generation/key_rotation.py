"""API key rotation for the generator adapter.

Spreads generator requests over several API keys so no single key is
exhausted. Rotation state (round-robin index, per-key last-used time and
request counts) lives in an explicit KeyRotationState value, and the clock
is injected, so selection is deterministic under test.

Selection rules:
- One key: always that key.
- Round-robin from the current index, skipping keys used within the cooldown.
- If every key is cooling down, use the least recently used one.
- With 5 or more keys, requests are split by purpose: scenarios use keys
  1-3, reflections key 4, decision questions key 5.
"""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import Enum

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 60.0
MAX_ENV_KEYS = 5
NEVER_USED = float("-inf")


class KeyPurpose(str, Enum):
    """What a generator request is for."""

    SCENARIO = "scenario"
    REFLECTION = "reflection"
    QUESTIONS = "questions"


PURPOSE_POOLS: dict[KeyPurpose, tuple[int, ...]] = {
    KeyPurpose.SCENARIO: (0, 1, 2),
    KeyPurpose.REFLECTION: (3,),
    KeyPurpose.QUESTIONS: (4,),
}
"""Key indices reserved per purpose when at least POOL_THRESHOLD keys exist."""

POOL_THRESHOLD = 5


@dataclass(frozen=True)
class KeyRotationState:
    """Rotation bookkeeping for a fixed list of keys.

    Attributes:
        index: Next key to try in round-robin order
        last_used: Clock reading of each key's last use (NEVER_USED if unused)
        request_counts: Number of requests served by each key
    """

    index: int = 0
    last_used: tuple[float, ...] = field(default_factory=tuple)
    request_counts: tuple[int, ...] = field(default_factory=tuple)

    @classmethod
    def fresh(cls, key_count: int) -> KeyRotationState:
        return cls(
            index=0,
            last_used=(NEVER_USED,) * key_count,
            request_counts=(0,) * key_count,
        )


def _is_available(state: KeyRotationState, key_index: int, now: float, cooldown: float) -> bool:
    return now - state.last_used[key_index] >= cooldown


def _mark_used(state: KeyRotationState, key_index: int, now: float, next_index: int) -> KeyRotationState:
    last_used = list(state.last_used)
    counts = list(state.request_counts)
    last_used[key_index] = now
    counts[key_index] += 1
    return replace(state, index=next_index, last_used=tuple(last_used), request_counts=tuple(counts))


def _least_recently_used(state: KeyRotationState, candidates: Sequence[int]) -> int:
    return min(candidates, key=lambda i: state.last_used[i])


def select_key(
    key_count: int,
    state: KeyRotationState,
    now: float,
    purpose: KeyPurpose | None = None,
    cooldown: float = DEFAULT_COOLDOWN_SECONDS,
) -> tuple[int, KeyRotationState]:
    """Pick the key index for the next request.

    Pure function: returns the chosen index and the updated state.

    Raises:
        ValueError: If there are no keys
    """
    if key_count == 0:
        raise ValueError("No API keys configured")

    if key_count == 1:
        return 0, _mark_used(state, 0, now, next_index=0)

    if purpose is not None and key_count >= POOL_THRESHOLD:
        pool = PURPOSE_POOLS[KeyPurpose(purpose)]
        for key_index in pool:
            if _is_available(state, key_index, now, cooldown):
                return key_index, _mark_used(state, key_index, now, next_index=state.index)
        key_index = _least_recently_used(state, pool)
        return key_index, _mark_used(state, key_index, now, next_index=state.index)

    for offset in range(key_count):
        key_index = (state.index + offset) % key_count
        if _is_available(state, key_index, now, cooldown):
            return key_index, _mark_used(state, key_index, now, next_index=(key_index + 1) % key_count)

    key_index = _least_recently_used(state, range(key_count))
    logger.warning(f"All {key_count} API keys cooling down, using least recently used #{key_index + 1}")
    return key_index, _mark_used(state, key_index, now, next_index=(key_index + 1) % key_count)


def load_keys_from_env(environ: Mapping[str, str] | None = None) -> list[str]:
    """Collect API keys from the environment.

    Reads FATESIM_API_KEY_1 .. FATESIM_API_KEY_5; ANTHROPIC_API_KEY stands in
    for key 1 when FATESIM_API_KEY_1 is unset.
    """
    env = os.environ if environ is None else environ
    keys = []
    for i in range(1, MAX_ENV_KEYS + 1):
        key = env.get(f"FATESIM_API_KEY_{i}")
        if not key and i == 1:
            key = env.get("ANTHROPIC_API_KEY")
        if key:
            keys.append(key)
    return keys


class ApiKeyRotator:
    """Injectable key rotator.

    Example:
        >>> rotator = ApiKeyRotator(["k1", "k2"], clock=lambda: 0.0)
        >>> rotator.next_key()
        'k1'
        >>> rotator.next_key()
        'k2'
    """

    def __init__(
        self,
        keys: Sequence[str],
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        state: KeyRotationState | None = None,
    ):
        """Initialize the rotator.

        Args:
            keys: API keys in priority order
            cooldown_seconds: Minimum time between uses of one key
            clock: Returns the current time in seconds
            state: Rotation state to resume from (default: fresh)
        """
        self.keys = list(keys)
        self.cooldown_seconds = cooldown_seconds
        self.clock = clock
        self.state = state or KeyRotationState.fresh(len(self.keys))
        if len(self.state.last_used) != len(self.keys):
            raise ValueError("Rotation state does not match number of keys")

    @classmethod
    def from_env(cls, **kwargs) -> ApiKeyRotator:
        """Build a rotator from FATESIM_API_KEY_* environment variables."""
        keys = load_keys_from_env()
        if not keys:
            logger.warning("No API keys found in environment")
        return cls(keys, **kwargs)

    def next_key(self, purpose: KeyPurpose | None = None) -> str | None:
        """Return the key for the next request, or None if no keys are configured."""
        if not self.keys:
            return None
        key_index, self.state = select_key(
            len(self.keys), self.state, self.clock(), purpose, self.cooldown_seconds
        )
        logger.debug(
            f"Using API key #{key_index + 1} (used {self.state.request_counts[key_index]} times)"
        )
        return self.keys[key_index]

    def stats(self) -> list[dict]:
        """Usage statistics per key (key values are not included)."""
        now = self.clock()
        return [
            {
                "key_number": i + 1,
                "request_count": self.state.request_counts[i],
                "available": _is_available(self.state, i, now, self.cooldown_seconds),
            }
            for i in range(len(self.keys))
        ]

    def reset(self) -> None:
        """Forget all usage history."""
        self.state = KeyRotationState.fresh(len(self.keys))
