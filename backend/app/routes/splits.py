"""
routes/splits.py — Share computation and the live-split slot.

Layer rules:
  - Parse, validate, call ONE service, commit, return envelope.
  - No arithmetic here. Amounts are serialized as strings.

Endpoints (url_prefix=/api/v1/splits):
  POST   /shares       → 200  per-participant shares, breakdown and total
  POST   /total        → 200  receipt total with its components
  POST   /share-text   → 200  plain-text summary (?details=true for itemized)
  GET    /current      → 200  live split | 404 NO_CURRENT_SPLIT
  PUT    /current      → 200  replace live split
  DELETE /current      → 200  clear live split
"""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from backend.app.errors import AppError, ErrorCode
from backend.app.extensions import db
from backend.app.models.split_data import SplitData
from backend.app.routes.deps import kv_store, storage_namespace
from backend.app.schemas.split_schema import ShareTextQuerySchema, SplitDataSchema
from backend.app.services import allocation_service, current_split_service, format_service

splits_bp = Blueprint("splits", __name__)


def _load_split() -> SplitData:
    return SplitDataSchema().load(request.get_json(force=True) or {})


def _serialize_shares(data: SplitData) -> dict:
    """Pure data-shaping. Amounts as strings."""
    breakdown = allocation_service.compute_breakdown(data)
    names = {p.id: p.name for p in data.people}
    return {
        "currency": data.currency,
        "shares": {pid: str(parts["total"]) for pid, parts in breakdown.items()},
        "breakdown": [
            {
                "participantId": pid,
                "name": names[pid],
                "itemsSubtotal": str(parts["items_subtotal"]),
                "tax": str(parts["tax"]),
                "tip": str(parts["tip"]),
                "total": str(parts["total"]),
            }
            for pid, parts in breakdown.items()
        ],
        "unassignedSubtotal": str(allocation_service.unassigned_subtotal(data)),
        "total": str(allocation_service.compute_total(data)),
    }


@splits_bp.route("/shares", methods=["POST"])
def compute_shares():
    """POST /splits/shares — final share per participant for a SplitData body."""
    data = _load_split()
    return jsonify({"data": _serialize_shares(data), "warnings": []}), 200


@splits_bp.route("/total", methods=["POST"])
def compute_total():
    """POST /splits/total — receipt total for a SplitData body."""
    data = _load_split()
    subtotal = allocation_service.items_subtotal(data.items)
    tip_amount = allocation_service.compute_tip(subtotal, data.tip_type, data.tip_value)
    total = allocation_service.compute_total(data)
    return jsonify({
        "data": {
            "currency": data.currency,
            "itemsSubtotal": str(subtotal),
            "tax": str(data.tax),
            "tipAmount": str(tip_amount),
            "total": str(total),
            "formattedTotal": format_service.format_currency(total, data.currency),
        },
        "warnings": [],
    }), 200


@splits_bp.route("/share-text", methods=["POST"])
def share_text():
    """POST /splits/share-text?details=true|false — plain-text summary."""
    query = ShareTextQuerySchema().load(request.args)
    data = _load_split()
    text = format_service.generate_shareable_text(data, include_details=query["details"])
    return jsonify({"data": {"text": text}, "warnings": []}), 200


# ── Live-split slot ────────────────────────────────────────────────────────

@splits_bp.route("/current", methods=["GET"])
def get_current_split():
    data = current_split_service.load_current_split(kv_store(), storage_namespace())
    if data is None:
        raise AppError(
            ErrorCode.NO_CURRENT_SPLIT,
            "There is no split in progress.",
            404,
        )
    return jsonify({"data": SplitDataSchema().dump(data), "warnings": []}), 200


@splits_bp.route("/current", methods=["PUT"])
def put_current_split():
    data = _load_split()
    current_split_service.save_current_split(kv_store(), data, storage_namespace())
    db.session.commit()
    return jsonify({"data": SplitDataSchema().dump(data), "warnings": []}), 200


@splits_bp.route("/current", methods=["DELETE"])
def delete_current_split():
    current_split_service.clear_current_split(kv_store(), storage_namespace())
    db.session.commit()
    return jsonify({"data": {"cleared": True}, "warnings": []}), 200
