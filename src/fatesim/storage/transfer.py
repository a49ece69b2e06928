"""Export and import of a player's complete state.

The export format is the FinancialState serialized verbatim as camelCase
JSON. Import validates the whole document before returning anything, so a
malformed file never replaces the live state.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from fatesim.errors import ImportValidationError
from fatesim.models.state import FinancialState
from fatesim.storage.persistence import record_to_state

logger = logging.getLogger(__name__)


def export_state(state: FinancialState) -> str:
    """Serialize state to a JSON document."""
    return state.model_dump_json(by_alias=True, indent=2)


def import_state(text: str | bytes, user_id: str | None = None) -> FinancialState:
    """Parse and validate an exported state.

    Args:
        text: JSON document produced by export_state
        user_id: If given, the document must belong to this user

    Raises:
        ImportValidationError: If the document is not valid UTF-8 JSON, does
            not match the state model (including out-of-range values), or
            belongs to another user
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ImportValidationError(f"Import file is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ImportValidationError(f"Import file must contain an object, got {type(data).__name__}")

    try:
        state = record_to_state(data)
    except ValidationError as e:
        raise ImportValidationError(f"Import file has {e.error_count()} invalid field(s): {e}") from e

    if user_id is not None and state.user_id != user_id:
        raise ImportValidationError(
            f"Import file belongs to user {state.user_id!r}, expected {user_id!r}"
        )
    logger.info(f"Imported state for user {state.user_id} at month {state.month}")
    return state


def export_state_to_file(state: FinancialState, path: str | Path) -> Path:
    """Write an export to path and return it."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(export_state(state), encoding="utf-8")
    return path


def import_state_from_file(path: str | Path, user_id: str | None = None) -> FinancialState:
    """Read and validate an export from path.

    Raises:
        ImportValidationError: If the file cannot be read or does not validate
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ImportValidationError(f"Cannot read import file {path}: {e}") from e
    return import_state(text, user_id=user_id)
