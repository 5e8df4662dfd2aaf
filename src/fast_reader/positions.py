"""Per-document reading positions in a bounded, time-limited store.

All records live as one JSON array under a single well-known key of a
string-keyed, string-valued storage backend. Saving is best-effort: it never
raises, and a quota failure triggers one eviction-and-retry.
"""

from __future__ import annotations

import errno
import json
import logging
import os
import tempfile
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Dict, List

from .errors import PersistenceError, StorageQuotaError
from .models import ReadingPosition

logger = logging.getLogger(__name__)

STORAGE_KEY = "fastreader_positions"
MAX_STORED_DOCUMENTS = 50
MAX_AGE_DAYS = 30
_DAY_MS = 24 * 60 * 60 * 1000
_QUOTA_ERRNOS = {errno.ENOSPC, getattr(errno, "EDQUOT", errno.ENOSPC)}


def document_id(name: str, size: int | None) -> str:
    """Identify a document by name and byte size.

    Two different files sharing both name and size map to the same id.
    """
    return f"{name}-{size}"


def _now_ms() -> int:
    return int(time.time() * 1000)


class KeyValueStorage(ABC):
    """String-keyed, string-valued persistence medium."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove_item(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    """In-process storage with an optional per-value size quota."""

    def __init__(self, quota_chars: int | None = None) -> None:
        self.quota_chars = quota_chars
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_chars is not None and len(value) > self.quota_chars:
            raise StorageQuotaError(
                f"Value of {len(value)} chars exceeds quota of {self.quota_chars}"
            )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """Stores all keys as one JSON object in a file, replaced atomically on write."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def get_item(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if key in items:
            del items[key]
            self._write_all(items)

    def _read_all(self) -> Dict[str, Any]:
        try:
            contents = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise PersistenceError(f"Unable to read {self.path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise PersistenceError(f"Storage file {self.path} is not UTF-8: {exc}") from exc
        try:
            parsed = json.loads(contents) if contents.strip() else {}
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupt storage file {self.path}: {exc}") from exc
        if not isinstance(parsed, dict):
            raise PersistenceError(f"Storage file {self.path} must hold a JSON object")
        return parsed

    def _write_all(self, items: Dict[str, Any]) -> None:
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(items, handle)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            if exc.errno in _QUOTA_ERRNOS:
                raise StorageQuotaError(f"No space left writing {self.path}") from exc
            raise PersistenceError(f"Unable to write {self.path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass


class PositionStore:
    """Keeps at most one position per document, newest first, bounded in count and age."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        max_positions: int = MAX_STORED_DOCUMENTS,
        max_age_days: int = MAX_AGE_DAYS,
        clock: Callable[[], int] = _now_ms,
        key: str = STORAGE_KEY,
    ) -> None:
        self._storage = storage
        self._max_positions = max_positions
        self._max_age_ms = max_age_days * _DAY_MS
        self._clock = clock
        self._key = key
        self._lock = threading.Lock()

    def save(self, position: ReadingPosition) -> None:
        """Insert or replace the position for its document; never raises."""
        with self._lock:
            positions = [
                p for p in self._load_all() if p.document_id != position.document_id
            ]
            # Newest goes first so it survives truncation even on a timestamp tie.
            positions.insert(0, replace(position, saved_at=self._clock()))
            positions = _newest_first(positions)[: self._max_positions]
            self._persist(positions, recover=True)

    def load(self, document_id: str) -> ReadingPosition | None:
        with self._lock:
            for position in self._load_all():
                if position.document_id == document_id:
                    return position
        return None

    def evict(
        self, positions: List[ReadingPosition] | None = None, *, persist: bool = False
    ) -> List[ReadingPosition]:
        """Drop expired positions and keep only the newest ``max_positions``.

        Returns the kept positions; they are written back only when ``persist``.
        """
        with self._lock:
            kept = self._evicted(self._load_all() if positions is None else positions)
            if persist:
                self._persist(kept, recover=False)
            return kept

    def remove(self, document_id: str) -> None:
        with self._lock:
            positions = self._load_all()
            remaining = [p for p in positions if p.document_id != document_id]
            if len(remaining) != len(positions):
                self._persist(remaining, recover=False)

    def clear(self) -> None:
        with self._lock:
            try:
                self._storage.remove_item(self._key)
            except PersistenceError as exc:
                logger.error("Failed to clear reading positions: %s", exc)

    def all(self) -> List[ReadingPosition]:
        """Every stored position, most recently saved first."""
        with self._lock:
            return self._load_all()

    def count(self) -> int:
        return len(self.all())

    def _evicted(self, positions: List[ReadingPosition]) -> List[ReadingPosition]:
        cutoff = self._clock() - self._max_age_ms
        recent = [p for p in positions if p.saved_at >= cutoff]
        return _newest_first(recent)[: self._max_positions]

    def _load_all(self) -> List[ReadingPosition]:
        try:
            data = self._storage.get_item(self._key)
        except PersistenceError as exc:
            logger.error("Failed to load reading positions: %s", exc)
            return []
        if not data:
            return []
        try:
            records = json.loads(data)
        except json.JSONDecodeError as exc:
            logger.error("Stored reading positions are not valid JSON: %s", exc)
            return []
        if not isinstance(records, list):
            return []
        positions: List[ReadingPosition] = []
        for record in records:
            try:
                positions.append(ReadingPosition.from_record(record))
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                logger.warning("Skipping malformed reading position %r: %s", record, exc)
        return _newest_first(positions)

    def _persist(self, positions: List[ReadingPosition], *, recover: bool) -> None:
        try:
            self._write(positions)
        except StorageQuotaError as exc:
            if not recover:
                logger.error("Failed to save reading positions: %s", exc)
                return
            logger.warning("Storage quota exceeded; cleaning up old positions")
            try:
                self._write(self._evicted(positions))
            except PersistenceError as retry_exc:
                logger.error("Failed to save even after cleanup: %s", retry_exc)
        except PersistenceError as exc:
            logger.error("Failed to save reading positions: %s", exc)

    def _write(self, positions: List[ReadingPosition]) -> None:
        payload = json.dumps([p.to_record() for p in positions])
        self._storage.set_item(self._key, payload)


def _newest_first(positions: List[ReadingPosition]) -> List[ReadingPosition]:
    return sorted(positions, key=lambda p: p.saved_at, reverse=True)
