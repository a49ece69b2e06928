"""File-based repository implementation using JSON files.

Each user's state is stored as ``<data_path>/<user_id>.json``.
"""

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .repository import GameStateRepository

_SAFE_ID = re.compile(r"[^A-Za-z0-9_.-]")


def safe_filename(user_id: str) -> str:
    """Make a user id safe to use as a file name.

    Examples:
        >>> safe_filename("user_42")
        'user_42'
        >>> safe_filename("../etc/passwd")
        '.._etc_passwd'
    """
    name = _SAFE_ID.sub("_", user_id)
    if name.strip(".") == "":
        raise ValueError(f"Invalid user id: {user_id!r}")
    return name


class FileGameStateRepository(GameStateRepository):
    """JSON file-based game state repository."""

    def __init__(self, data_path: str | Path = "data/users"):
        """Initialize repository.

        Args:
            data_path: Directory holding one JSON file per user
        """
        self.data_path = Path(data_path)
        self.data_path.mkdir(parents=True, exist_ok=True)

    def _get_user_path(self, user_id: str) -> Path:
        """Get path to a user's file."""
        return self.data_path / f"{safe_filename(user_id)}.json"

    def save_user_data(self, user_id: str, data: dict) -> None:
        """Persist a user's complete state."""
        path = self._get_user_path(user_id)
        data_with_meta = {
            **data,
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
        }
        # Write then rename so a crash never leaves a half-written save
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data_with_meta, f, indent=2, ensure_ascii=False)
        tmp_path.replace(path)

    def load_user_data(self, user_id: str) -> Optional[dict]:
        """Load a user's saved state."""
        path = self._get_user_path(user_id)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def delete_user_data(self, user_id: str) -> bool:
        """Delete a user's saved state."""
        path = self._get_user_path(user_id)
        if path.exists():
            path.unlink()
            return True
        return False

    def list_users(self) -> list[dict]:
        """List saved users, most recently updated first."""
        users = []
        for path in self.data_path.glob("*.json"):
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            users.append({
                "user_id": data.get("userId", path.stem),
                "month": data.get("month", 0),
                "updated_at": data.get("lastUpdated", ""),
            })
        return sorted(users, key=lambda x: x["updated_at"], reverse=True)
