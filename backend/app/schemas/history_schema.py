"""
schemas/history_schema.py — Marshmallow schemas for history entries.

HistoryEntrySchema is both the API shape and the persisted record layout of
one entry in the history log. Records written by older releases may lack
data.paymentInfo; history_service.migrate_record() fills that in before
this schema ever sees the record.

IMPORTANT: Inherits from marshmallow.Schema directly, never ma.Schema.
"""

from __future__ import annotations

from datetime import timezone

from marshmallow import Schema, fields, post_load, validate

from backend.app.models.split_data import HistoryEntry
from backend.app.schemas.split_schema import SplitDataSchema


class HistoryEntrySchema(Schema):

    id = fields.Str(required=True, validate=validate.Length(min=1))
    timestamp = fields.AwareDateTime(required=True, default_timezone=timezone.utc)
    people_count = fields.Int(
        required=True,
        strict=True,
        data_key="peopleCount",
        validate=validate.Range(min=0),
    )
    items_count = fields.Int(
        required=True,
        strict=True,
        data_key="itemsCount",
        validate=validate.Range(min=0),
    )
    total = fields.Decimal(required=True, as_string=True)
    data = fields.Nested(SplitDataSchema, required=True)

    @post_load
    def make_entry(self, data, **kwargs) -> HistoryEntry:
        return HistoryEntry(**data)
