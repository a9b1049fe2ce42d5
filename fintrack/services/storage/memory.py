"""
In-memory key-value store.

Lives as long as the process. Used for tests and for sessions where the
caller persists nothing (or persists by snapshotting `dump()` itself).
"""

import threading
from typing import Iterator, Optional

from fintrack.services.storage.interface import KeyValueStore


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed KeyValueStore."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Values must be strings, got {type(value).__name__}")
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._data))

    def dump(self) -> dict[str, str]:
        """Copy of everything stored, e.g. to hand to a real backend."""
        with self._lock:
            return dict(self._data)
