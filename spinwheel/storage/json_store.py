"""File-based key-value backend: one JSON document per key."""
from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, List

from spinwheel.core.errors import PersistenceError
from spinwheel.core.types import JSONLike

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFileStore:
    """Persist records under ``<data_dir>/<key>.json``.

    Writes go to a temporary sibling first and are moved into place with
    ``os.replace`` so a crash never leaves a half-written record behind.
    """

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = data_dir
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise PersistenceError(f"Invalid storage key: {key!r}")
        return self.data_dir / f"{key}.json"

    def get(self, key: str) -> Dict[str, Any] | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise PersistenceError(f"Failed to read {path.name}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupted record {path.name}: {exc}") from exc
        if not isinstance(payload, dict):
            raise PersistenceError(f"Record {path.name} must be a JSON object")
        return payload

    def put(self, key: str, value: JSONLike) -> None:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            data = json.dumps(dict(value), indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Value for {key!r} is not JSON-serializable: {exc}") from exc
        try:
            tmp_path.write_text(data, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            raise PersistenceError(f"Failed to write {path.name}: {exc}") from exc

    def delete(self, key: str) -> bool:
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise PersistenceError(f"Failed to delete {path.name}: {exc}") from exc
        return True

    def keys(self, prefix: str = "") -> List[str]:
        try:
            names = [path.stem for path in self.data_dir.glob("*.json")]
        except OSError as exc:  # pragma: no cover
            raise PersistenceError(f"Failed to list {self.data_dir}: {exc}") from exc
        return sorted(name for name in names if name.startswith(prefix))


__all__ = ["JsonFileStore"]
