"""Client-local persistence for the session record.

A storage backend holds one named record (a flat JSON-compatible mapping)
standing in for the browser's ``sessionStorage``. ``MemoryStorage`` lives as
long as the process; ``JsonFileStorage`` survives restarts until cleared.
"""

import copy
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from threading import Lock
from typing import Any

from branchweb.core.config.models import StorageConfig

logger = logging.getLogger(__name__)


class SessionStorage(ABC):
    """Read/write access to a single persisted record."""

    def __init__(self, record_name: str = "branch_session"):
        self.record_name = record_name
        self._lock = Lock()

    @abstractmethod
    def _read(self) -> dict[str, Any] | None:
        """Return the stored record, or None if nothing is stored. Caller holds the lock."""

    @abstractmethod
    def _write(self, record: dict[str, Any] | None) -> None:
        """Replace the stored record; None removes it. Caller holds the lock."""

    def read_all(self) -> dict[str, Any] | None:
        """Return a copy of the whole record, or None if empty."""
        with self._lock:
            record = self._read()
            return copy.deepcopy(record) if record else None

    def write_all(self, record: dict[str, Any]) -> None:
        """Replace the whole record."""
        with self._lock:
            self._write(copy.deepcopy(dict(record)))

    def read_key(self, name: str) -> Any:
        """Return a single value from the record, or None."""
        with self._lock:
            record = self._read() or {}
            return copy.deepcopy(record.get(name))

    def write_key(self, name: str, value: Any) -> None:
        """Set a single value, keeping the rest of the record."""
        with self._lock:
            record = self._read() or {}
            record[name] = copy.deepcopy(value)
            self._write(record)

    def clear(self) -> None:
        """Drop the record entirely."""
        with self._lock:
            self._write(None)


class MemoryStorage(SessionStorage):
    """Process-lifetime storage."""

    def __init__(self, record_name: str = "branch_session", initial: dict[str, Any] | None = None):
        super().__init__(record_name)
        self._record: dict[str, Any] | None = copy.deepcopy(initial) if initial else None

    def _read(self) -> dict[str, Any] | None:
        return dict(self._record) if self._record is not None else None

    def _write(self, record: dict[str, Any] | None) -> None:
        self._record = record


class JsonFileStorage(SessionStorage):
    """Storage backed by a JSON file, keyed by record name.

    The file may hold several records; only ``record_name`` is touched.
    Writes go to a temp file first and are renamed into place.
    """

    def __init__(self, path: Path | str, record_name: str = "branch_session"):
        super().__init__(record_name)
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug(f"JsonFileStorage using {self.path} (record '{record_name}')")

    def _load_file(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Corrupted storage file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Invalid storage format (expected dict): {self.path}")
            return {}
        return data

    def _read(self) -> dict[str, Any] | None:
        record = self._load_file().get(self.record_name)
        if record is not None and not isinstance(record, dict):
            logger.warning(f"Ignoring non-mapping record '{self.record_name}' in {self.path}")
            return None
        return record

    def _write(self, record: dict[str, Any] | None) -> None:
        data = self._load_file()
        if record is None:
            data.pop(self.record_name, None)
        else:
            data[self.record_name] = record

        # Atomic write: write to temp file, then rename
        tmp_path = self.path.with_suffix(".tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, default=str)
            tmp_path.replace(self.path)
        except OSError as e:
            logger.error(f"Failed to save record '{self.record_name}' to {self.path}: {e}", exc_info=True)
            raise


def create_storage(config: StorageConfig) -> SessionStorage:
    """Build the storage backend named by the config."""
    if config.backend == "file":
        return JsonFileStorage(config.path, record_name=config.record_name)
    return MemoryStorage(record_name=config.record_name)
