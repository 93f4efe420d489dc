"""
routes/deps.py — Per-request construction of the storage-backed services.

Routes call these instead of building stores themselves, so every route
reads the same config keys and talks to the same session.
"""

from __future__ import annotations

from flask import current_app

from backend.app.extensions import db
from backend.app.services.history_service import HistoryStore
from backend.app.services.storage import SqlKeyValueStore


def storage_namespace() -> str:
    return current_app.config["STORAGE_NAMESPACE"]


def kv_store() -> SqlKeyValueStore:
    return SqlKeyValueStore(db.session)


def history_store() -> HistoryStore:
    return HistoryStore(
        kv_store(),
        capacity=current_app.config["HISTORY_CAPACITY"],
        namespace=storage_namespace(),
        after_write=db.session.commit,
    )
