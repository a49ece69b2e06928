"""Async persistence adapter used by the month flow.

Wraps a synchronous GameStateRepository, running its calls in a worker
thread, and converts between FinancialState and the stored dict form.
Failures never propagate: they are logged and reported as False / None so
a broken disk or a corrupt save cannot block play.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3

from pydantic import ValidationError

from fatesim.errors import PersistenceFailure
from fatesim.models.state import FinancialState
from fatesim.storage.repository import GameStateRepository

logger = logging.getLogger(__name__)

METADATA_KEYS = ("lastUpdated",)


def state_to_record(state: FinancialState) -> dict:
    """Serialize a state to the JSON-compatible dict repositories store."""
    return state.model_dump(mode="json", by_alias=True)


def record_to_state(data: dict) -> FinancialState:
    """Rebuild a state from a stored dict.

    Stored documents are validated with strict ranges: an out-of-range risk
    score, modifier or batch index is rejected rather than clamped.

    Raises:
        TypeError: If data is not a dict
        ValidationError: If the stored data does not match the state model
    """
    if not isinstance(data, dict):
        raise TypeError(f"stored state must be an object, got {type(data).__name__}")
    payload = {k: v for k, v in data.items() if k not in METADATA_KEYS}
    state = FinancialState.model_validate(payload, context={"strict_ranges": True})
    return state.model_copy(update={"is_loaded": True})


class StatePersistence:
    """Save and load FinancialState through a repository.

    Example:
        >>> persistence = StatePersistence(get_state_repository())
        >>> await persistence.save_user_data("u1", state)
        True
    """

    def __init__(self, repository: GameStateRepository):
        self.repository = repository

    async def save_user_data(self, user_id: str, state: FinancialState) -> bool:
        """Persist state. Returns False (and logs) on failure."""
        try:
            await asyncio.to_thread(self._save, user_id, state)
        except PersistenceFailure as e:
            logger.error(str(e))
            return False
        return True

    async def load_user_data(self, user_id: str) -> FinancialState | None:
        """Load state, or None if nothing is saved or the save is unreadable."""
        try:
            return await asyncio.to_thread(self._load, user_id)
        except PersistenceFailure as e:
            logger.error(str(e))
            return None

    async def clear_user_data(self, user_id: str) -> bool:
        """Delete a user's save. Returns True if something was deleted."""
        try:
            return await asyncio.to_thread(self._delete, user_id)
        except PersistenceFailure as e:
            logger.error(str(e))
            return False

    def _save(self, user_id: str, state: FinancialState) -> None:
        try:
            self.repository.save_user_data(user_id, state_to_record(state))
        except (OSError, sqlite3.Error, TypeError, ValueError) as e:
            raise PersistenceFailure(f"Failed to save state for user {user_id}: {e}") from e

    def _load(self, user_id: str) -> FinancialState | None:
        try:
            data = self.repository.load_user_data(user_id)
        except (OSError, sqlite3.Error, ValueError) as e:
            raise PersistenceFailure(f"Failed to load state for user {user_id}: {e}") from e
        if data is None:
            return None
        try:
            return record_to_state(data)
        except (ValidationError, TypeError) as e:
            raise PersistenceFailure(f"Saved state for user {user_id} is corrupt: {e}") from e

    def _delete(self, user_id: str) -> bool:
        try:
            return self.repository.delete_user_data(user_id)
        except (OSError, sqlite3.Error, ValueError) as e:
            raise PersistenceFailure(f"Failed to delete state for user {user_id}: {e}") from e
