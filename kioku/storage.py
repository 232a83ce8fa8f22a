"""
kioku.storage
-------------

Key-value stores for progress collections and session data.

The scheduler itself never touches storage; a StudySession reads a whole collection,
computes, and writes the whole collection back. Values are JSON-compatible data.

Classes:
    Storage: The protocol a store has to implement.
    MemoryStorage: A store kept in a dictionary.
    JsonFileStorage: A store keeping one JSON file per key in a directory.
    StorageError: Raised when stored data can not be read back.
"""

from __future__ import annotations
from copy import deepcopy
import json
import logging
from pathlib import Path
import re
from typing import Any, Protocol

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


class StorageError(Exception):
    """Raised when a stored value exists but can not be loaded."""


class Storage(Protocol):
    """
    A key-value store of JSON-compatible values.

    load() returns None for a key that was never saved or has been deleted.
    delete() of a missing key is not an error.
    """

    def load(self, key: str) -> Any | None: ...

    def save(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStorage:
    """
    A store that keeps deep copies of its values in a dictionary.
    """

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def load(self, key: str) -> Any | None:
        if key not in self._values:
            return None
        return deepcopy(self._values[key])

    def save(self, key: str, value: Any) -> None:
        self._values[key] = deepcopy(value)

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._values


class JsonFileStorage:
    """
    A store that writes every key to `<directory>/<key>.json`.

    Attributes:
        directory: The directory holding the files. It is created on first write.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Any | None:
        path = self._path(key)
        if not path.exists():
            return None

        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Could not load {key!r} from {path}") from e

    def save(self, key: str, value: Any) -> None:
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)

        # replaced in one step, readers never see a partial file
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(value, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(path)
        logger.debug("Saved %s to %s", key, path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


__all__ = ["Storage", "MemoryStorage", "JsonFileStorage", "StorageError"]
