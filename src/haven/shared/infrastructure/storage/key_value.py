"""
Key-value storage for state that lives outside the graph.

Canvas preferences (voice profiles, pane ratios, schedule overrides) and graph
snapshots are kept here. Stores are loaded once at startup and write through on
every change.
"""

import json
import os
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...config.settings import get_settings
from ...exceptions import StorageError
from ..monitoring.logger import get_logger


class KeyValueStore(ABC):
    """Abstract base class for key-value stores."""

    @abstractmethod
    def load(self) -> None:
        """Load persisted state. Called once at startup."""
        pass

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by key."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Set a value and persist it."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete a key. Returns whether it existed."""
        pass

    @abstractmethod
    def keys(self) -> List[str]:
        """All stored keys."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every key."""
        pass

    def __contains__(self, key: str) -> bool:
        return key in self.keys()


class InMemoryKeyValueStore(KeyValueStore):
    """
    Ephemeral store for tests and stateless deployments.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._lock = threading.RLock()
        self._data: Dict[str, Any] = dict(initial or {})

    def load(self) -> None:
        pass

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            if key not in self._data:
                return False
            del self._data[key]
            return True

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()


class JsonFileKeyValueStore(KeyValueStore):
    """
    Store persisted as a single JSON document.

    Values must be JSON-serializable. Writes go to a temporary file that is then
    moved over the original, so a crash never leaves a half-written document.
    """

    def __init__(self, path: Union[str, Path], autoload: bool = True):
        self.logger = get_logger(__name__)
        self.path = Path(path)
        self._lock = threading.RLock()
        self._data: Dict[str, Any] = {}

        if autoload:
            self.load()

    def load(self) -> None:
        with self._lock:
            if not self.path.exists():
                self._data = {}
                self.logger.debug(f"No key-value file at {self.path}, starting empty")
                return

            try:
                raw = json.loads(self.path.read_text(encoding="utf-8") or "{}")
            except (OSError, json.JSONDecodeError) as e:
                raise StorageError(f"Failed to load key-value store {self.path}: {e}")

            if not isinstance(raw, dict):
                raise StorageError(f"Key-value store {self.path} must contain a JSON object")

            self._data = raw
            self.logger.info(f"Loaded {len(self._data)} keys from {self.path}")

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            previous = self._data.get(key)
            existed = key in self._data
            self._data[key] = value
            try:
                self._flush()
            except StorageError:
                if existed:
                    self._data[key] = previous
                else:
                    del self._data[key]
                raise

    def delete(self, key: str) -> bool:
        with self._lock:
            if key not in self._data:
                return False
            previous = self._data.pop(key)
            try:
                self._flush()
            except StorageError:
                self._data[key] = previous
                raise
            return True

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data)

    def clear(self) -> None:
        with self._lock:
            self._data = {}
            self._flush()

    def _flush(self) -> None:
        """Write the whole document to disk."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(self._data, indent=2, sort_keys=True), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise StorageError(f"Failed to write key-value store {self.path}: {e}")


def get_preference_store(path: Optional[Union[str, Path]] = None) -> KeyValueStore:
    """
    Open the JSON preference store configured in settings.

    Args:
        path: Override for the settings location

    Returns:
        Loaded JsonFileKeyValueStore
    """
    return JsonFileKeyValueStore(path or get_settings().preferences_path)
