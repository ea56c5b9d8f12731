"""Persistence backends for the finance store.

A backend stores one JSON-compatible dict (the stored state) and replaces
it wholesale on every save.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from finance_ledger.utils.logging_config import get_logger

logger = get_logger(__name__)

StoredState = dict[str, object]


class StoreError(Exception):
    """Base exception for store and persistence errors."""

    pass


class StorageError(StoreError):
    """Exception raised when a storage location cannot be used."""

    def __init__(self, message: str, path: Optional[Path] = None):
        """Initialize StorageError.

        Args:
            message: Error message.
            path: Optional path of the storage location.
        """
        self.path = path
        super().__init__(message)


@runtime_checkable
class PersistencePort(Protocol):
    """Interface the store uses to load and save its state."""

    def load(self) -> Optional[StoredState]:
        """Return the stored state, or None when nothing has been saved."""
        ...

    def save(self, state: StoredState) -> bool:
        """Replace the stored state. Returns False if the write failed."""
        ...


class MemoryPersistence:
    """In-process backend, mainly for tests and embedding.

    Saved states are round-tripped through JSON so they behave like the
    file backend.
    """

    def __init__(self, initial: Optional[StoredState] = None):
        self._payload: Optional[str] = None
        self.save_count = 0
        if initial is not None:
            self._payload = json.dumps(initial)

    def load(self) -> Optional[StoredState]:
        if self._payload is None:
            return None
        return json.loads(self._payload)

    def save(self, state: StoredState) -> bool:
        try:
            self._payload = json.dumps(state)
        except (TypeError, ValueError) as e:
            logger.error(f"Could not serialize finance data: {e}")
            return False
        self.save_count += 1
        return True


class JsonFilePersistence:
    """Stores the state as a human-readable JSON file.

    Writes go to a temporary file in the same directory which is then
    renamed over the target, so a crash mid-write leaves the previous file
    intact.
    """

    def __init__(self, path: Path):
        """Initialize file backend.

        Args:
            path: Location of the JSON data file.

        Raises:
            StorageError: If the path points at a directory.
        """
        self.path = Path(path)
        if self.path.is_dir():
            raise StorageError(f"Data path is a directory: {self.path}", self.path)

    def load(self) -> Optional[StoredState]:
        """Read the stored state.

        Returns:
            The stored dict, or None when the file is missing or unreadable.
        """
        if not self.path.exists():
            logger.debug(f"No data file at {self.path}")
            return None

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading finance data from {self.path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.error(f"Finance data in {self.path} is not a JSON object, ignoring it")
            return None
        return data

    def save(self, state: StoredState) -> bool:
        """Atomically replace the data file.

        Args:
            state: JSON-compatible state dict.

        Returns:
            True on success, False if serialization or the write failed.
        """
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                json.dump(state, tmp, indent=2)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error saving finance data to {self.path}: {e}")
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            return False

        logger.debug(f"Saved finance data to {self.path}")
        return True
