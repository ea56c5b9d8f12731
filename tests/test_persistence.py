"""Tests for persistence backends."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from finance_ledger.persistence import (
    JsonFilePersistence,
    MemoryPersistence,
    PersistencePort,
    StorageError,
)


class TestMemoryPersistence:
    """Tests for MemoryPersistence."""

    def test_empty(self) -> None:
        assert MemoryPersistence().load() is None

    def test_saved_state_is_a_copy(self) -> None:
        backend = MemoryPersistence()
        state = {"version": 1, "statements": []}

        assert backend.save(state)
        state["statements"].append("mutated")

        assert backend.load() == {"version": 1, "statements": []}
        assert backend.save_count == 1

    def test_unserializable_state(self) -> None:
        backend = MemoryPersistence()

        assert not backend.save({"bad": object()})
        assert backend.save_count == 0

    def test_satisfies_port(self) -> None:
        assert isinstance(MemoryPersistence(), PersistencePort)


class TestJsonFilePersistence:
    """Tests for JsonFilePersistence."""

    def test_missing_file(self, tmp_path: Path) -> None:
        assert JsonFilePersistence(tmp_path / "data.json").load() is None

    def test_save_and_load(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "data.json"
        backend = JsonFilePersistence(path)

        assert backend.save({"version": 1, "statements": []})

        assert path.exists()
        assert json.loads(path.read_text(encoding="utf-8")) == {"version": 1, "statements": []}
        assert backend.load() == {"version": 1, "statements": []}

    def test_no_temporary_files_left(self, tmp_path: Path) -> None:
        backend = JsonFilePersistence(tmp_path / "data.json")

        backend.save({"version": 1})
        backend.save({"version": 1, "statements": []})

        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]

    def test_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")

        assert JsonFilePersistence(path).load() is None

    def test_non_object_file(self, tmp_path: Path) -> None:
        path = tmp_path / "data.json"
        path.write_text("[1, 2]", encoding="utf-8")

        assert JsonFilePersistence(path).load() is None

    def test_failed_write_keeps_previous_file(self, tmp_path: Path) -> None:
        path = tmp_path / "data.json"
        backend = JsonFilePersistence(path)
        backend.save({"version": 1, "statements": []})

        with patch("finance_ledger.persistence.os.replace", side_effect=OSError("disk full")):
            assert not backend.save({"version": 1, "statements": ["new"]})

        assert backend.load() == {"version": 1, "statements": []}
        assert [p.name for p in tmp_path.iterdir()] == ["data.json"]

    def test_unserializable_state(self, tmp_path: Path) -> None:
        backend = JsonFilePersistence(tmp_path / "data.json")

        assert not backend.save({"bad": object()})
        assert list(tmp_path.iterdir()) == []

    def test_directory_path_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(StorageError) as exc_info:
            JsonFilePersistence(tmp_path)

        assert exc_info.value.path == tmp_path
