"""
Local Key-Value Storage Implementations

DESIGN DECISION: A single JSON file on disk is the default backend because:
1. The ledger is personal and small
2. No database setup required
3. The user can open and back up the file directly

TRADEOFFS:
- Whole-file rewrite on every mutation (fine at personal scale)
- One process at a time (the app serializes writes anyway)

Writes go to a temporary file first and are moved into place, so a crash
mid-write leaves the previous contents intact.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from wealthwise.config import get_settings
from wealthwise.models.audit import AuditEvent
from wealthwise.services.storage.interface import (
    AuditStorageInterface,
    KeyValueStorageInterface,
    PersistenceError,
)


AUDIT_KEY = "wealthwise_audit"
MAX_AUDIT_EVENTS = 500


class InMemoryStorage(KeyValueStorageInterface):
    """Dict-backed storage for tests and throwaway sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStorage(KeyValueStorageInterface):
    """
    Key-value storage in one JSON object on disk.

    The file is read lazily and cached; every write rewrites the file.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path is not None else get_settings().storage.file_path
        self._cache: Optional[dict[str, str]] = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if self._cache is not None:
            return self._cache

        if not self._path.exists():
            self._cache = {}
            return self._cache

        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(str(self._path), "read", str(e)) from e

        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as e:
            raise PersistenceError(str(self._path), "parse", str(e)) from e

        if not isinstance(data, dict):
            raise PersistenceError(str(self._path), "parse", "top level is not an object")

        self._cache = {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in data.items()}
        return self._cache

    def _flush(self, data: dict[str, str], key: str) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=str(self._path.parent),
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False, indent=2)
                os.replace(tmp_name, self._path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise PersistenceError(key, "write", str(e)) from e

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = dict(self._load())
        data[key] = value
        self._flush(data, key)
        self._cache = data

    def remove_item(self, key: str) -> None:
        data = dict(self._load())
        if key not in data:
            return
        del data[key]
        self._flush(data, key)
        self._cache = data

    def keys(self) -> list[str]:
        return list(self._load())


class KeyValueAuditStorage(AuditStorageInterface):
    """
    Audit trail kept under one key of a key-value store.

    Only the newest MAX_AUDIT_EVENTS are retained.
    """

    def __init__(self, storage: KeyValueStorageInterface, key: str = AUDIT_KEY):
        self._storage = storage
        self._key = key

    def _read(self) -> list[dict]:
        raw = self._storage.get_item(self._key)
        if not raw:
            return []
        try:
            events = json.loads(raw)
        except json.JSONDecodeError:
            return []
        return events if isinstance(events, list) else []

    def append_event(self, event: AuditEvent) -> bool:
        events = self._read()
        events.append(json.loads(event.to_record()))
        events = events[-MAX_AUDIT_EVENTS:]
        self._storage.set_item(self._key, json.dumps(events))
        return True

    def get_recent_events(self, limit: int = 100) -> list[dict]:
        events = self._read()
        return list(reversed(events[-limit:])) if limit > 0 else []


def create_storage() -> KeyValueStorageInterface:
    """Backend selected by StorageSettings.backend."""
    settings = get_settings().storage
    if settings.backend == "memory":
        return InMemoryStorage()
    return JsonFileStorage(settings.file_path)
