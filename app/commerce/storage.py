# app/commerce/storage.py
"""
Client-local key/value storage for the storefront session.

Holds the persisted cart id, the customer bearer token and the region
preference. Two backends:

  - MemoryStorage: process-local dict (tests, short-lived scripts)
  - JsonFileStorage: a small JSON file that survives restarts
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

CART_ID_KEY = "medusa_cart_id"
TOKEN_KEY = "medusa_token"
REGION_ID_KEY = "medusa_region_id"


class LocalStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileStorage:
    """
    Storage backed by a JSON object on disk.

    Writes go to a temp file first and are renamed into place, so a crash
    mid-write never leaves a truncated file. An unreadable file is treated
    as empty (and logged).
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._data = self._load()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable storefront state %s: %s", self.path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring storefront state %s: not a JSON object", self.path)
            return {}
        return {str(k): str(v) for k, v in raw.items() if v is not None}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(self._data, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp, self.path)

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value
            self._flush()

    def remove(self, key: str) -> None:
        with self._lock:
            if self._data.pop(key, None) is not None:
                self._flush()


def storage_from_settings(state_file: str | None) -> LocalStorage:
    """Pick the JSON file backend when a path is configured, else memory."""
    if state_file:
        return JsonFileStorage(state_file)
    return MemoryStorage()
