"""Key-value persistence contract used by the session store and the wallet."""
from __future__ import annotations

import copy
import json
from typing import Any, Dict, List, Protocol

from spinwheel.core.errors import PersistenceError
from spinwheel.core.types import JSONLike


class KeyValueStore(Protocol):
    """Durable mapping from string keys to JSON-compatible records."""

    def get(self, key: str) -> Dict[str, Any] | None:
        ...

    def put(self, key: str, value: JSONLike) -> None:
        ...

    def delete(self, key: str) -> bool:
        ...

    def keys(self, prefix: str = "") -> List[str]:
        ...


class MemoryStore:
    """Process-local backend. Values are deep-copied in and out."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Dict[str, Any] | None:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def put(self, key: str, value: JSONLike) -> None:
        try:
            json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Value for {key!r} is not JSON-serializable: {exc}") from exc
        self._data[key] = copy.deepcopy(dict(value))

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self, prefix: str = "") -> List[str]:
        return sorted(key for key in self._data if key.startswith(prefix))


__all__ = ["KeyValueStore", "MemoryStore"]
