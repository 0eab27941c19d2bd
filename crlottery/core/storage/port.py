"""KeyValueStore protocol - the persistence port behind local secrets and block samples."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Protocol


class PersistenceError(RuntimeError):
    """The storage backend failed; not retried."""


class KeyValueStore(Protocol):
    """String-keyed, string-valued store (browser localStorage shaped)."""

    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def keys(self) -> List[str]:
        ...


class MemoryStore:
    """In-process KeyValueStore, used by tests and ephemeral sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data)


def load_json(store: KeyValueStore, key: str, default: Any) -> Any:
    """
    Read a JSON value, falling back to `default` when absent or unreadable.

    A corrupt value is treated like a missing one: local storage is a
    cache of user data, not a source of truth.
    """
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except ValueError:
        return default


def save_json(store: KeyValueStore, key: str, value: Any) -> None:
    """Write a JSON value as a single store entry."""
    store.set(key, json.dumps(value, separators=(",", ":"), sort_keys=True))
