"""
routes/history.py — History log route handlers.

Layer rules:
  - Parse, validate, call ONE service, commit, return envelope.
  - History writes are committed by the store itself (after_write, see
    deps.history_store) while its write lock is held. Routes do not commit
    them again.
  - _serialize_entry() is a pure data-shape helper, not business logic.

An unreadable history log is not an error on GET /history: the response is
200 with an empty list and a HISTORY_UNREADABLE warning, so the client can
tell the user and keep working. Every other endpoint lets LoadError
propagate to the error handler.

Endpoints (url_prefix=/api/v1/history):
  GET    /                   → 200  list, most recent first
  POST   /                   → 201  snapshot a SplitData body into a new entry
  DELETE /                   → 200  clear the whole log
  GET    /<id>               → 200  one entry
  GET    /<id>/share-text    → 200  plain-text summary of the entry
  DELETE /<id>               → 200  remove one entry (no-op if absent)
  POST   /<id>/reactivate    → 200  copy the entry's split into the live slot
"""

from __future__ import annotations

from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request

from backend.app.errors import LoadError, WarningCode
from backend.app.extensions import db
from backend.app.models.split_data import HistoryEntry
from backend.app.routes.deps import history_store, kv_store, storage_namespace
from backend.app.schemas.history_schema import HistoryEntrySchema
from backend.app.schemas.split_schema import ShareTextQuerySchema, SplitDataSchema
from backend.app.services import current_split_service, format_service

history_bp = Blueprint("history", __name__)


# ── Serialization helper ───────────────────────────────────────────────────

def _serialize_entry(entry: HistoryEntry, now: datetime) -> dict:
    payload = HistoryEntrySchema().dump(entry)
    payload["title"] = format_service.entry_title(entry.data)
    payload["displayTime"] = format_service.format_relative_time(entry.timestamp, now)
    payload["formattedTotal"] = format_service.format_currency(entry.total, entry.data.currency)
    return payload


# ── Collection routes ──────────────────────────────────────────────────────

@history_bp.route("", methods=["GET"])
def list_history():
    """GET /history — every stored entry, normalized, most recent first."""
    store = history_store()
    try:
        entries = store.list_entries()
    except LoadError as exc:
        current_app.logger.warning("History list failed: %s", exc.message)
        return jsonify({
            "data": [],
            "warnings": [{
                "code": WarningCode.HISTORY_UNREADABLE,
                "message": "Saved history could not be read and is shown as empty.",
            }],
        }), 200

    now = datetime.now(timezone.utc)
    return jsonify({
        "data": [_serialize_entry(e, now) for e in entries],
        "warnings": [],
    }), 200


@history_bp.route("", methods=["POST"])
def commit_history():
    """POST /history — snapshot the SplitData body and prepend it to the log."""
    data = SplitDataSchema().load(request.get_json(force=True) or {})
    entry = history_store().commit_split(data)
    return jsonify({
        "data": _serialize_entry(entry, datetime.now(timezone.utc)),
        "warnings": [],
    }), 201


@history_bp.route("", methods=["DELETE"])
def clear_history():
    """DELETE /history — remove every entry."""
    history_store().clear()
    return jsonify({"data": {"cleared": True}, "warnings": []}), 200


# ── Entry routes ───────────────────────────────────────────────────────────

@history_bp.route("/<entry_id>", methods=["GET"])
def get_history_entry(entry_id: str):
    entry = history_store().get_entry(entry_id)
    return jsonify({
        "data": _serialize_entry(entry, datetime.now(timezone.utc)),
        "warnings": [],
    }), 200


@history_bp.route("/<entry_id>/share-text", methods=["GET"])
def get_history_share_text(entry_id: str):
    """GET /history/:id/share-text?details=true|false"""
    query = ShareTextQuerySchema().load(request.args)
    entry = history_store().get_entry(entry_id)
    text = format_service.generate_shareable_text(entry.data, include_details=query["details"])
    return jsonify({"data": {"text": text}, "warnings": []}), 200


@history_bp.route("/<entry_id>", methods=["DELETE"])
def delete_history_entry(entry_id: str):
    """DELETE /history/:id — unknown ids are a no-op, not a 404."""
    deleted = history_store().delete(entry_id)
    return jsonify({
        "data": {"deleted": deleted, "entry_id": entry_id},
        "warnings": [],
    }), 200


@history_bp.route("/<entry_id>/reactivate", methods=["POST"])
def reactivate_history_entry(entry_id: str):
    """POST /history/:id/reactivate — resume editing a past split."""
    entry = history_store().get_entry(entry_id)
    live = current_split_service.reactivate(entry, kv_store(), storage_namespace())
    db.session.commit()
    return jsonify({"data": SplitDataSchema().dump(live), "warnings": []}), 200
