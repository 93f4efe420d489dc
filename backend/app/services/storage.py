"""
services/storage.py — Key-value persistence providers.

The history store and the live-split slot only ever talk to a KeyValueStore:

    read(key)          -> bytes | None     None when the key is absent
    write(key, value)  -> bool             False when the medium rejected it
    remove(key)        -> None             no-op when the key is absent

Providers raise StorageError when the medium itself is unreachable on read
or remove. Callers translate that into LoadError / PersistenceError.

Two providers ship here:
  SqlKeyValueStore     the kv_entries table through a SQLAlchemy session.
                       Flushes only; the route commits.
  MemoryKeyValueStore  a dict, for unit tests and scripting.
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.models.kv_entry import KeyValueEntry

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """The key-value medium could not be reached."""


class KeyValueStore(Protocol):

    def read(self, key: str) -> bytes | None: ...

    def write(self, key: str, value: bytes) -> bool: ...

    def remove(self, key: str) -> None: ...


class MemoryKeyValueStore:

    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(initial or {})

    def read(self, key: str) -> bytes | None:
        return self._data.get(key)

    def write(self, key: str, value: bytes) -> bool:
        self._data[key] = bytes(value)
        return True

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class SqlKeyValueStore:

    def __init__(self, session: Session) -> None:
        self._session = session

    def read(self, key: str) -> bytes | None:
        try:
            row = self._session.get(KeyValueEntry, key)
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not read key {key!r}.") from exc
        return None if row is None else bytes(row.value)

    def write(self, key: str, value: bytes) -> bool:
        try:
            row = self._session.get(KeyValueEntry, key)
            if row is None:
                self._session.add(KeyValueEntry(key=key, value=value))
            else:
                row.value = value
            self._session.flush()
        except SQLAlchemyError:
            logger.exception("Write to key %r was rejected", key)
            self._session.rollback()
            return False
        return True

    def remove(self, key: str) -> None:
        try:
            row = self._session.get(KeyValueEntry, key)
            if row is not None:
                self._session.delete(row)
                self._session.flush()
        except SQLAlchemyError as exc:
            self._session.rollback()
            raise StorageError(f"Could not remove key {key!r}.") from exc
