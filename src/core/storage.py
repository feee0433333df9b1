#!/usr/bin/env python3
"""
Persisted key/value storage for client state.

Values are opaque strings, like browser local storage. The JSON file
store keeps everything in one small file and rewrites it atomically.
"""

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Opaque string key/value store."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None."""

    @abstractmethod
    def set_many(self, values: Mapping[str, str]) -> None:
        """Write several keys in one operation."""

    @abstractmethod
    def delete_many(self, keys: Iterable[str]) -> None:
        """Remove several keys in one operation; missing keys are ignored."""

    def set(self, key: str, value: str) -> None:
        self.set_many({key: value})

    def delete(self, key: str) -> None:
        self.delete_many([key])


class MemoryStore(KeyValueStore):
    """In-process store, used for tests and one-shot commands."""

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_many(self, values: Mapping[str, str]) -> None:
        self._data.update(values)

    def delete_many(self, keys: Iterable[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    def keys(self):
        return set(self._data)


class JsonFileStore(KeyValueStore):
    """
    File-backed store holding a flat JSON object of string values.

    Every write replaces the whole file via a temp file and os.replace,
    so paired keys are never observed half-written.
    """

    def __init__(self, path: str):
        """
        Initialize file store.

        Args:
            path: Location of the JSON file (created on first write)
        """
        self.path = Path(path).expanduser()
        self._lock = threading.RLock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable store file {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Ignoring store file {self.path}: expected a JSON object")
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix='.store-', dir=str(self.path.parent))
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set_many(self, values: Mapping[str, str]) -> None:
        with self._lock:
            data = self._read()
            data.update(values)
            self._write(data)
            logger.debug(f"Stored keys {sorted(values)} in {self.path}")

    def delete_many(self, keys: Iterable[str]) -> None:
        with self._lock:
            data = self._read()
            removed = [key for key in keys if data.pop(key, None) is not None]
            if removed:
                self._write(data)
                logger.debug(f"Deleted keys {sorted(removed)} from {self.path}")
