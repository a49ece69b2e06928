"""Storage module for FateSim.

This module provides the repository interface and implementations for
persisting each player's FinancialState, plus the async adapter the month
flow uses and JSON export/import.

Usage:
    from fatesim.storage import StatePersistence, get_state_repository

    # Get repository using configured backend (from environment)
    persistence = StatePersistence(get_state_repository())

    # Or specify backend explicitly
    from fatesim.storage import StorageBackend
    persistence = StatePersistence(get_state_repository(StorageBackend.SQLITE))

Configuration via environment variables:
    FATESIM_STORAGE_BACKEND: "file" or "sqlite" (default: "file")
    FATESIM_DATA_PATH: Directory for per-user JSON files (default: "data/users")
    FATESIM_DATABASE_URI: SQLite database path (default: "instance/fatesim.db")
"""

from .config import (
    StorageBackend,
    get_data_path,
    get_database_uri,
    get_state_repository,
    get_storage_backend,
)
from .file_repo import FileGameStateRepository
from .persistence import StatePersistence, record_to_state, state_to_record
from .repository import GameStateRepository
from .sqlite_repo import SQLiteGameStateRepository
from .transfer import (
    export_state,
    export_state_to_file,
    import_state,
    import_state_from_file,
)

__all__ = [
    # Abstract interface
    "GameStateRepository",
    # Implementations
    "FileGameStateRepository",
    "SQLiteGameStateRepository",
    # Configuration
    "StorageBackend",
    "get_storage_backend",
    "get_data_path",
    "get_database_uri",
    "get_state_repository",
    # Async adapter
    "StatePersistence",
    "state_to_record",
    "record_to_state",
    # Export / import
    "export_state",
    "import_state",
    "export_state_to_file",
    "import_state_from_file",
]
