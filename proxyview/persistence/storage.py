"""Key-value stores holding view state between visits."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger("proxyview.storage")


@runtime_checkable
class KeyValueStore(Protocol):
    """Minimal string store; implementations may raise on any call."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def keys(self) -> Iterator[str]: ...


class MemoryStore:
    """Store living as long as the process, used for session scoped keys."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)


class JsonFileStore:
    """Durable store kept in a single JSON object on disk.

    Every write rewrites the file through a temporary sibling so a crash
    never leaves a truncated document behind. An unreadable file is
    treated as empty.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path).expanduser()
        self._data: dict[str, str] = {}
        self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            with self._path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("Failed to load view state %s: %s", self._path, exc)
            return
        if not isinstance(data, dict):
            logger.warning("Ignoring view state %s: not a JSON object", self._path)
            return
        self._data = {str(key): str(value) for key, value in data.items()}

    def flush(self) -> None:
        """Persist the current contents to disk."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(self._data, fh, indent=2, sort_keys=True)
        tmp_path.replace(self._path)

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)
        self.flush()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self.flush()

    def keys(self) -> Iterator[str]:
        return iter(list(self._data))


__all__ = ["JsonFileStore", "KeyValueStore", "MemoryStore"]
