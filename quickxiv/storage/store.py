"""Key/value persistence shared by the summary cache and usage tracker."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Protocol

from loguru import logger


Updater = Callable[[Any], Any]


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None:
        """Return the stored JSON value for ``key`` or ``None``."""

    def set(self, key: str, value: Any) -> None:
        """Replace the value stored under ``key``."""

    def remove(self, key: str) -> None:
        """Delete ``key`` if present."""

    def keys(self) -> list[str]:
        """Return every stored key."""

    def update(self, key: str, updater: Updater) -> Any:
        """Atomically replace ``key`` with ``updater(current_value)``."""


class MemoryStore:
    """In-process store; values are deep-copied through JSON on every access."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        encoded = json.dumps(value, ensure_ascii=False)
        with self._lock:
            self._data[key] = encoded

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._data)

    def update(self, key: str, updater: Updater) -> Any:
        with self._lock:
            value = updater(self.get(key))
            self.set(key, value)
            return value


class JsonFileStore:
    """Store backed by a single JSON document on disk.

    Every operation reads the file afresh and writes it back whole, so two
    processes never share in-memory state. Writes go through a temporary
    file and ``os.replace``.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._read())

    def update(self, key: str, updater: Updater) -> Any:
        with self._lock:
            data = self._read()
            value = updater(data.get(key))
            data[key] = value
            self._write(data)
            return value

    # ------------------------------------------------------------------
    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as exc:
            logger.warning("State file {} is not valid JSON ({}); starting empty", self.path, exc)
            return {}
        if not isinstance(payload, dict):
            logger.warning("State file {} does not hold a JSON object; starting empty", self.path)
            return {}
        return payload

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fp:
                json.dump(data, fp, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


__all__ = ["KeyValueStore", "MemoryStore", "JsonFileStore"]
