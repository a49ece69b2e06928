"""Tests for the storage module.

Tests cover:
- Storage configuration functions and the repository factory
- Parametrized integration tests to verify both backends pass identical tests
- StatePersistence conversion and failure absorption
"""

import json
import sqlite3
from unittest.mock import MagicMock

import pytest

from fatesim.engine.transitions import apply_choice, apply_income, start_fixed_deposit
from fatesim.models.scenario import Choice
from fatesim.storage.config import (
    StorageBackend,
    get_data_path,
    get_state_repository,
    get_storage_backend,
)
from fatesim.storage.file_repo import FileGameStateRepository, safe_filename
from fatesim.storage.persistence import StatePersistence, state_to_record
from fatesim.storage.repository import GameStateRepository
from fatesim.storage.sqlite_repo import SQLiteGameStateRepository


# ============================================================================
# Config Tests
# ============================================================================


class TestStorageConfig:
    """Tests for storage configuration functions."""

    def test_get_storage_backend_default(self, monkeypatch):
        """Test get_storage_backend returns FILE by default."""
        monkeypatch.delenv("FATESIM_STORAGE_BACKEND", raising=False)
        assert get_storage_backend() == StorageBackend.FILE

    def test_get_data_path_default(self, monkeypatch):
        monkeypatch.delenv("FATESIM_DATA_PATH", raising=False)
        assert get_data_path() == "data/users"

    def test_factory_returns_file_repo(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FATESIM_DATA_PATH", str(tmp_path / "users"))
        repo = get_state_repository(StorageBackend.FILE)
        assert isinstance(repo, FileGameStateRepository)
        assert repo.data_path == tmp_path / "users"

    def test_factory_uses_env_when_backend_not_specified(self, tmp_path, monkeypatch):
        monkeypatch.setenv("FATESIM_STORAGE_BACKEND", "SQLite")
        monkeypatch.setenv("FATESIM_DATABASE_URI", str(tmp_path / "test.db"))
        assert isinstance(get_state_repository(), SQLiteGameStateRepository)


class TestFileRepositoryEdgeCases:
    """File backend specifics."""

    def test_safe_filename(self):
        assert safe_filename("user-1") == "user-1"
        assert safe_filename("../../etc/passwd") == ".._.._etc_passwd"
        with pytest.raises(ValueError):
            safe_filename("..")

    def test_last_updated_stamp(self, tmp_path):
        repo = FileGameStateRepository(tmp_path)
        repo.save_user_data("u1", {"userId": "u1", "month": 2})
        data = json.loads((tmp_path / "u1.json").read_text())
        assert "lastUpdated" in data
        assert not list(tmp_path.glob("*.tmp"))


# ============================================================================
# Integration Tests - Parametrized for Both Backends
# ============================================================================


@pytest.fixture(params=["file", "sqlite"])
def state_repo(request, tmp_path):
    """Parametrized fixture that provides both repository implementations."""
    if request.param == "file":
        return FileGameStateRepository(tmp_path / "users")
    return SQLiteGameStateRepository(str(tmp_path / "fatesim.db"))


class TestStateRepositoryIntegration:
    """Integration tests that run against both file and SQLite backends."""

    def test_empty(self, state_repo):
        assert state_repo.list_users() == []
        assert state_repo.load_user_data("nobody") is None

    def test_save_load_roundtrip(self, state_repo, sample_state):
        record = state_to_record(apply_income(sample_state))
        state_repo.save_user_data("u1", record)
        loaded = state_repo.load_user_data("u1")
        assert loaded["userId"] == "u1"
        assert loaded["balance"] == 5000
        assert loaded["history"] == record["history"]

    def test_save_overwrites(self, state_repo):
        state_repo.save_user_data("u1", {"userId": "u1", "month": 1})
        state_repo.save_user_data("u1", {"userId": "u1", "month": 2})
        assert state_repo.load_user_data("u1")["month"] == 2
        assert len(state_repo.list_users()) == 1

    def test_list_users(self, state_repo):
        state_repo.save_user_data("u1", {"userId": "u1", "month": 1})
        state_repo.save_user_data("u2", {"userId": "u2", "month": 4})
        users = {u["user_id"]: u for u in state_repo.list_users()}
        assert set(users) == {"u1", "u2"}
        assert users["u2"]["month"] == 4
        assert users["u1"]["updated_at"]

    def test_delete(self, state_repo):
        state_repo.save_user_data("u1", {"userId": "u1", "month": 1})
        assert state_repo.delete_user_data("u1") is True
        assert state_repo.delete_user_data("u1") is False
        assert state_repo.load_user_data("u1") is None


# ============================================================================
# StatePersistence
# ============================================================================


class TestStatePersistence:
    """Tests for the async persistence adapter."""

    @pytest.mark.asyncio
    async def test_roundtrip(self, state_repo, sample_state):
        state = apply_income(sample_state.model_copy(update={"month": 1}))
        state = apply_choice(state, Choice(id="c", label="Lunch", balance_change=-150, risk_change=3))
        state = start_fixed_deposit(state, amount=1000, tenure=6, interest_rate=7.0)
        persistence = StatePersistence(state_repo)

        assert await persistence.save_user_data("u1", state) is True
        loaded = await persistence.load_user_data("u1")

        assert loaded == state
        assert loaded.is_loaded is True

    @pytest.mark.asyncio
    async def test_missing_user(self, state_repo):
        assert await StatePersistence(state_repo).load_user_data("ghost") is None

    @pytest.mark.asyncio
    async def test_clear(self, state_repo, sample_state):
        persistence = StatePersistence(state_repo)
        await persistence.save_user_data("u1", sample_state)
        assert await persistence.clear_user_data("u1") is True
        assert await persistence.load_user_data("u1") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "record",
        [
            {"userId": "u1", "riskScore": "very high"},
            {"userId": "u1", "riskScore": None},
            {"userId": "u1", "riskScore": 500},
            {"userId": "u1", "modifiers": {"riskSensitivity": None}},
        ],
    )
    async def test_corrupt_record_returns_none(self, tmp_path, record):
        repo = FileGameStateRepository(tmp_path)
        repo.save_user_data("u1", record)
        assert await StatePersistence(repo).load_user_data("u1") is None

    @pytest.mark.asyncio
    async def test_unreadable_file_returns_none(self, tmp_path):
        repo = FileGameStateRepository(tmp_path)
        (tmp_path / "u1.json").write_text("{not json")
        assert await StatePersistence(repo).load_user_data("u1") is None

    @pytest.mark.asyncio
    async def test_save_failure_returns_false(self, sample_state):
        repo = MagicMock(spec=GameStateRepository)
        repo.save_user_data.side_effect = OSError("read-only file system")
        assert await StatePersistence(repo).save_user_data("u1", sample_state) is False

    @pytest.mark.asyncio
    async def test_delete_failure_returns_false(self):
        repo = MagicMock(spec=GameStateRepository)
        repo.delete_user_data.side_effect = sqlite3.OperationalError("database is locked")
        assert await StatePersistence(repo).clear_user_data("u1") is False
