"""
services/current_split_service.py — The live, in-progress split.

One key (<namespace>_current_split) holds the split being edited. It is
separate from the history log: saving here never touches history, and
reactivating a history entry copies its data here without changing the entry.

Records read from this slot go through the same migration as history
records (history_service.migrate_split_record).

Layer rules:
  - No Flask imports. Receives a KeyValueStore; returns dataclasses.
"""

from __future__ import annotations

import json

from marshmallow import ValidationError

from backend.app.errors import LoadError, PersistenceError
from backend.app.models.split_data import HistoryEntry, SplitData
from backend.app.schemas.split_schema import SplitDataSchema
from backend.app.services.history_service import DEFAULT_NAMESPACE, migrate_split_record
from backend.app.services.storage import KeyValueStore, StorageError


def current_split_key(namespace: str = DEFAULT_NAMESPACE) -> str:
    return f"{namespace}_current_split"


def load_current_split(
        store: KeyValueStore,
        namespace: str = DEFAULT_NAMESPACE,
) -> SplitData | None:
    """Returns the live split, or None when the slot is empty."""
    key = current_split_key(namespace)
    try:
        raw = store.read(key)
    except StorageError as exc:
        raise LoadError("The current split could not be read from storage.") from exc

    if raw is None:
        return None

    try:
        record = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise LoadError("The stored current split is not valid JSON.") from exc
    if not isinstance(record, dict):
        raise LoadError("The stored current split is not an object.")

    try:
        return SplitDataSchema().load(migrate_split_record(record))
    except ValidationError as exc:
        raise LoadError(f"The stored current split is malformed: {exc.messages}") from exc


def save_current_split(
        store: KeyValueStore,
        data: SplitData,
        namespace: str = DEFAULT_NAMESPACE,
) -> None:
    payload = SplitDataSchema().dumps(data).encode("utf-8")
    if not store.write(current_split_key(namespace), payload):
        raise PersistenceError("The current split could not be saved.")


def clear_current_split(store: KeyValueStore, namespace: str = DEFAULT_NAMESPACE) -> None:
    try:
        store.remove(current_split_key(namespace))
    except StorageError as exc:
        raise PersistenceError("The current split could not be cleared.") from exc


def reactivate(
        entry: HistoryEntry,
        store: KeyValueStore,
        namespace: str = DEFAULT_NAMESPACE,
) -> SplitData:
    """
    Makes a copy of `entry.data` the live split and returns that copy.
    The history entry itself is not modified.
    """
    live = entry.data.clone()
    save_current_split(store, live, namespace)
    return live
