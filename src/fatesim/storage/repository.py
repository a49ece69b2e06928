"""Abstract repository interface for game state storage.

Both file-based (JSON) and SQLite backends implement this interface, so the
month flow can persist state without knowing which backend is active.
Repositories deal in plain JSON-compatible dicts; conversion to and from
FinancialState happens in StatePersistence.
"""

from abc import ABC, abstractmethod
from typing import Optional


class GameStateRepository(ABC):
    """Abstract base class for per-user game state storage."""

    @abstractmethod
    def save_user_data(self, user_id: str, data: dict) -> None:
        """Persist a user's complete state, replacing any previous save.

        Args:
            user_id: Unique identifier for the user
            data: Serialized FinancialState
        """
        pass

    @abstractmethod
    def load_user_data(self, user_id: str) -> Optional[dict]:
        """Load a user's saved state.

        Args:
            user_id: Unique identifier for the user

        Returns:
            Serialized state dict, or None if nothing is saved
        """
        pass

    @abstractmethod
    def delete_user_data(self, user_id: str) -> bool:
        """Delete a user's saved state.

        Returns:
            True if deleted, False if not found
        """
        pass

    @abstractmethod
    def list_users(self) -> list[dict]:
        """List saved users.

        Returns:
            List of dicts containing: {user_id, month, updated_at}
        """
        pass
