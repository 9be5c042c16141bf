"""Base repository: process-lifetime, lock-guarded storage for immutable records."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

logger = logging.getLogger(__name__)

SLOW_LOCK_THRESHOLD_MS = 100  # Log lock holds longer than this

M = TypeVar("M", bound=BaseModel)


class DuplicateKeyError(KeyError):
    """Primary key already present."""


class InMemoryRepository(Generic[M]):
    """Generic repository keyed by a model attribute.

    Records are frozen pydantic models; writes replace the stored snapshot
    whole. Entity repositories extend this class, set ``id_field`` and may
    hook :meth:`_validate` / :meth:`_on_insert` / :meth:`_on_replace`.

    A single re-entrant lock guards every read-modify-write. Callers that
    need check-then-act atomicity across several calls hold
    :meth:`locked` for the whole sequence.
    """

    def __init__(self, id_field: str) -> None:
        self.id_field = id_field
        self._records: dict[str, M] = {}
        self._lock = threading.RLock()

    # ── helpers ──────────────────────────────────────────────────────

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the repository lock; log unusually long critical sections."""
        with self._lock:
            start = time.perf_counter()
            try:
                yield
            finally:
                self._log_hold((time.perf_counter() - start) * 1000)

    @staticmethod
    def _log_hold(elapsed_ms: float) -> None:
        if elapsed_ms > SLOW_LOCK_THRESHOLD_MS:
            logger.warning("SLOW CRITICAL SECTION (%.1fms)", elapsed_ms)

    def _key(self, record: M) -> str:
        return str(getattr(record, self.id_field))

    def _validate(self, record: M) -> None:
        """Hook: raise if *record* must not be stored."""

    def _on_insert(self, record: M) -> None:
        """Hook: maintain secondary indexes. Called under the lock."""

    def _on_replace(self, old: M, new: M) -> None:
        """Hook: maintain secondary indexes. Called under the lock."""

    @staticmethod
    def _matches(record: BaseModel, filters: dict[str, Any]) -> bool:
        return all(getattr(record, field) == value for field, value in filters.items())

    # ── read ─────────────────────────────────────────────────────────

    def find_by_id(self, entity_id: str) -> M | None:
        with self._lock:
            return self._records.get(entity_id)

    def all(self) -> list[M]:
        """Return a snapshot of every record in insertion order."""
        with self._lock:
            return list(self._records.values())

    def find_all(
        self,
        limit: int = 20,
        offset: int = 0,
        filters: dict[str, Any] | None = None,
    ) -> list[M]:
        """Return paginated records, optionally filtered by exact field match."""
        rows = [r for r in self.all() if self._matches(r, filters or {})]
        return rows[offset : offset + limit]

    def count(self, filters: dict[str, Any] | None = None) -> int:
        if not filters:
            with self._lock:
                return len(self._records)
        return sum(1 for r in self.all() if self._matches(r, filters))

    # ── write ────────────────────────────────────────────────────────

    def create(self, record: M) -> M:
        """Insert a new record. Raises :class:`DuplicateKeyError` if the key is taken."""
        self._validate(record)
        key = self._key(record)
        with self._lock:
            if key in self._records:
                raise DuplicateKeyError(f"{self.id_field} {key} already exists")
            self._on_insert(record)
            self._records[key] = record
        logger.debug("Inserted %s=%s", self.id_field, key)
        return record

    def replace(self, record: M) -> M:
        """Swap the stored snapshot for *record*. Raises ``KeyError`` if absent."""
        self._validate(record)
        key = self._key(record)
        with self._lock:
            old = self._records.get(key)
            if old is None:
                raise KeyError(f"{self.id_field} {key} not found")
            self._on_replace(old, record)
            self._records[key] = record
        return record

