"""Storage configuration for FateSim.

This module provides configuration for storage backends and a factory
function to create the appropriate repository based on configuration.
"""

import os
from enum import Enum

from .file_repo import FileGameStateRepository
from .repository import GameStateRepository
from .sqlite_repo import SQLiteGameStateRepository


class StorageBackend(Enum):
    """Available storage backends."""

    FILE = "file"
    SQLITE = "sqlite"


# Default configuration (can be overridden via environment variables)
DEFAULT_STORAGE_BACKEND = StorageBackend.FILE
DEFAULT_DATA_PATH = "data/users"
DEFAULT_DATABASE_URI = "instance/fatesim.db"


def get_storage_backend() -> StorageBackend:
    """Get configured storage backend from environment.

    Returns:
        StorageBackend enum value
    """
    backend_str = os.environ.get("FATESIM_STORAGE_BACKEND", DEFAULT_STORAGE_BACKEND.value).lower()
    if backend_str == "sqlite":
        return StorageBackend.SQLITE
    return StorageBackend.FILE


def get_data_path() -> str:
    """Get configured per-user data directory from environment."""
    return os.environ.get("FATESIM_DATA_PATH", DEFAULT_DATA_PATH)


def get_database_uri() -> str:
    """Get configured database URI from environment."""
    return os.environ.get("FATESIM_DATABASE_URI", DEFAULT_DATABASE_URI)


def get_state_repository(
    backend: StorageBackend | None = None,
) -> GameStateRepository:
    """Factory function to create the game state repository.

    Args:
        backend: Storage backend to use. If None, uses environment config.

    Returns:
        GameStateRepository instance
    """
    if backend is None:
        backend = get_storage_backend()

    if backend == StorageBackend.SQLITE:
        return SQLiteGameStateRepository(get_database_uri())
    return FileGameStateRepository(get_data_path())
