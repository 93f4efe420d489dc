"""
services/history_service.py — Bounded history of completed splits.

The whole log lives under one key (<namespace>_history) as a JSON list,
most recent first. Capacity is fixed per store (default 5): committing to a
full log evicts the oldest entries until the length equals capacity again.

Reading:
  - Every record passes through migrate_record() before deserialization.
    This is the ONLY place backward-compatible defaults are applied; no
    other caller patches old records on its own.
  - migrate_record() works on a deep copy. Listing never writes back, so the
    stored bytes are identical before and after a read.
  - Unreadable bytes, invalid JSON or a record the schema rejects raise
    LoadError. The caller gets an error, never a partial list.

Writing:
  - commit / delete / clear are serialized by a process-wide lock. The
    optional `after_write` hook (the routes pass the session commit) runs
    while the lock is still held, so a second writer reads the log only
    after the first one is durable.
  - A rejected write raises PersistenceError. Nothing is cached in memory,
    so the log the caller last read is still the log on disk.

Layer rules:
  - No Flask imports. Receives a KeyValueStore; returns dataclasses.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Callable

from marshmallow import ValidationError

from backend.app.errors import AppError, ErrorCode, LoadError, PersistenceError
from backend.app.models.split_data import HistoryEntry, SplitData
from backend.app.schemas.history_schema import HistoryEntrySchema
from backend.app.services import allocation_service
from backend.app.services.storage import KeyValueStore, StorageError

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 5
DEFAULT_NAMESPACE = "splitright"

_WRITE_LOCK = threading.RLock()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ── Record migration ───────────────────────────────────────────────────────

def migrate_split_record(record: dict) -> dict:
    """
    Returns a copy of a stored split (camelCase JSON) with defaults for
    fields added after it was written:
        paymentInfo  absent or null → {"method": None}
    """
    migrated = copy.deepcopy(record)
    if not migrated.get("paymentInfo"):
        logger.debug("Stored split has no paymentInfo; reading it as method=None")
        migrated["paymentInfo"] = {"method": None}
    return migrated


def migrate_record(record: dict) -> dict:
    """Returns a copy of a stored history entry with its `data` migrated."""
    migrated = copy.deepcopy(record)
    if isinstance(migrated.get("data"), dict):
        migrated["data"] = migrate_split_record(migrated["data"])
    return migrated


# ── Store ──────────────────────────────────────────────────────────────────

class HistoryStore:

    def __init__(
            self,
            store: KeyValueStore,
            capacity: int = DEFAULT_CAPACITY,
            namespace: str = DEFAULT_NAMESPACE,
            clock: Callable[[], datetime] = _utc_now,
            after_write: Callable[[], None] | None = None,
    ) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}.")
        self._store = store
        self.capacity = capacity
        self.key = f"{namespace}_history"
        self._clock = clock
        self._after_write = after_write
        self._schema = HistoryEntrySchema(many=True)

    # ── Reads ──────────────────────────────────────────────────────────────

    def _read_records(self) -> list[dict]:
        try:
            raw = self._store.read(self.key)
        except StorageError as exc:
            raise LoadError("History could not be read from storage.") from exc

        if raw is None:
            return []

        try:
            records = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise LoadError("Stored history is not valid JSON.") from exc

        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise LoadError("Stored history is not a list of entries.")
        return records

    def list_entries(self) -> list[HistoryEntry]:
        """All stored entries, most recent first, each migrated on a copy."""
        records = self._read_records()
        migrated = [migrate_record(r) for r in records]
        try:
            return self._schema.load(migrated)
        except ValidationError as exc:
            raise LoadError(f"Stored history is malformed: {exc.messages}") from exc

    def get_entry(self, entry_id: str) -> HistoryEntry:
        """Returns the entry with `entry_id` or raises HISTORY_ENTRY_NOT_FOUND (404)."""
        for entry in self.list_entries():
            if entry.id == entry_id:
                return entry
        raise AppError(
            ErrorCode.HISTORY_ENTRY_NOT_FOUND,
            f"History entry {entry_id} does not exist.",
            404,
        )

    # ── Writes ─────────────────────────────────────────────────────────────

    def build_entry(self, data: SplitData) -> HistoryEntry:
        """
        Snapshots `data` into a new entry. Counts and total are fixed here and
        the split is deep-copied, so later edits to `data` do not reach it.
        """
        return HistoryEntry(
            id=uuid.uuid4().hex,
            timestamp=self._clock(),
            people_count=len(data.people),
            items_count=len(data.items),
            total=allocation_service.compute_total(data),
            data=data.clone(),
        )

    def _write(self, entries: list[HistoryEntry]) -> None:
        payload = self._schema.dumps(entries).encode("utf-8")
        if not self._store.write(self.key, payload):
            raise PersistenceError("History could not be saved.")
        if self._after_write is not None:
            self._after_write()

    def commit(self, entry: HistoryEntry) -> list[HistoryEntry]:
        """
        Prepends `entry` and trims the log to capacity. Returns the new log.

        An unreadable existing log is replaced by a fresh one holding only
        `entry`.
        """
        with _WRITE_LOCK:
            try:
                current = self.list_entries()
            except LoadError:
                logger.warning("History under %r is unreadable; starting a new log", self.key)
                current = []

            entries = [entry] + [e for e in current if e.id != entry.id]
            evicted = entries[self.capacity:]
            entries = entries[:self.capacity]

            self._write(entries)

        if evicted:
            logger.info(
                "History at capacity %d; evicted %s",
                self.capacity,
                ", ".join(e.id for e in evicted),
            )
        return entries

    def commit_split(self, data: SplitData) -> HistoryEntry:
        """Builds an entry from `data` and commits it."""
        entry = self.build_entry(data)
        self.commit(entry)
        return entry

    def delete(self, entry_id: str) -> bool:
        """Removes the entry with `entry_id`. Returns False (no write) if absent."""
        with _WRITE_LOCK:
            entries = self.list_entries()
            remaining = [e for e in entries if e.id != entry_id]
            if len(remaining) == len(entries):
                return False
            self._write(remaining)
        return True

    def clear(self) -> None:
        """Empties the log, readable or not."""
        with _WRITE_LOCK:
            try:
                self._store.remove(self.key)
            except StorageError as exc:
                raise PersistenceError("History could not be cleared.") from exc
            if self._after_write is not None:
                self._after_write()
