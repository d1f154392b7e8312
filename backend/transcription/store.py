"""
Key-Value Stores

Persistence backends for credentials and preferences. The router only
needs ``get``/``set``; completion of ``set`` implies the value is durable
in the backing store.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the backing store cannot be read or written."""
    pass


class KeyValueStore(Protocol):
    """Minimal string key-value persistence contract."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryStore:
    """In-process store; nothing survives a restart."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """
    Store backed by a single JSON object on disk.

    Every ``set`` rewrites the file through a temporary file and an atomic
    rename, so a crash never leaves a half-written store behind.
    """

    def __init__(self, path: Path):
        """
        Initialize the store.

        Args:
            path: JSON file location; parent directories are created
        """
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._data = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Failed to read store {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StoreError(f"Store {self.path} does not contain a JSON object")

        return {str(key): str(value) for key, value in data.items()}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        updated = dict(self._data)
        updated[key] = value
        self._write(updated)
        self._data = updated

    def _write(self, data: Dict[str, str]) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=self.path.name, suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            logger.error(f"Failed to write store {self.path}: {e}")
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreError(f"Failed to write store {self.path}: {e}") from e
