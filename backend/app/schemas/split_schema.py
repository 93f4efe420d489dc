"""
schemas/split_schema.py — Marshmallow schemas for a split snapshot.

These schemas are the validation gate in front of the allocation engine and
the wire/storage layout of a split. Everything the core assumes about a
well-formed SplitData is checked here:
  - price, tax and tipValue are Decimals between 0 and MAX_AMOUNT
  - quantity is an integer from 1 to MAX_QUANTITY (strict, so 1.0 is rejected)
  - assignedTo holds no duplicate ids            → DUPLICATE_ASSIGNEE
  - participant ids are unique                   → DUPLICATE_PARTICIPANT
  - assignedTo only names current participants   → UNKNOWN_ASSIGNEE
  - tipType / taxTipSplitMode / paymentInfo.method are known enum values

JSON keys are camelCase (data_key); attributes are the snake_case fields of
the dataclasses in models/split_data.py. post_load builds those dataclasses.

IMPORTANT: Inherits from marshmallow.Schema directly, never ma.Schema.
           See extensions.py for the full explanation.
"""

from __future__ import annotations

from decimal import Decimal

from marshmallow import (
    EXCLUDE,
    Schema,
    ValidationError,
    fields,
    post_load,
    validate,
    validates_schema,
)

from backend.app.errors import ErrorCode
from backend.app.models.split_data import (
    Item,
    Participant,
    PaymentInfo,
    PaymentMethod,
    SplitData,
    SplitMode,
    TipType,
)


# Upper bounds keep every total well inside the 28-digit Decimal context.
MAX_AMOUNT = Decimal("1000000000000")
MAX_QUANTITY = 10000

_AMOUNT_RANGE = validate.Range(
    min=Decimal("0"),
    max=MAX_AMOUNT,
    error="Value must be between {min} and {max}.",
)


def _validate_non_empty_after_trim(value: str) -> None:
    """Raises ValidationError if the string is blank or whitespace only."""
    if not value.strip():
        raise ValidationError("This field must not be blank or contain only whitespace.")


def _validate_unique_ids(ids: list[str]) -> None:
    if len(set(ids)) != len(ids):
        raise ValidationError(ErrorCode.DUPLICATE_ASSIGNEE)


class ParticipantSchema(Schema):

    id = fields.Str(required=True, validate=_validate_non_empty_after_trim)
    name = fields.Str(required=True, validate=validate.Length(max=100))
    # Display only. The allocation engine never reads it.
    color = fields.Str(load_default="")

    @post_load
    def make_participant(self, data, **kwargs) -> Participant:
        return Participant(**data)


class ItemSchema(Schema):

    id = fields.Str(required=True, validate=_validate_non_empty_after_trim)
    name = fields.Str(required=True, validate=validate.Length(max=255))
    price = fields.Decimal(required=True, as_string=True, validate=_AMOUNT_RANGE)
    quantity = fields.Int(
        required=True,
        strict=True,
        validate=validate.Range(
            min=1,
            max=MAX_QUANTITY,
            error="quantity must be an integer between {min} and {max}.",
        ),
    )
    assigned_to = fields.List(
        fields.Str(),
        data_key="assignedTo",
        load_default=list,
        validate=_validate_unique_ids,
    )

    @post_load
    def make_item(self, data, **kwargs) -> Item:
        return Item(**data)


class PaymentInfoSchema(Schema):

    method = fields.Enum(
        PaymentMethod,
        by_value=True,
        allow_none=True,
        load_default=None,
        error_messages={"unknown": ErrorCode.INVALID_PAYMENT_METHOD},
    )
    bank_account_number = fields.Str(data_key="bankAccountNumber", allow_none=True)
    venmo_handle = fields.Str(data_key="venmoHandle", allow_none=True)
    paypal_info = fields.Str(data_key="paypalInfo", allow_none=True)
    custom_method = fields.Str(data_key="customMethod", allow_none=True)
    custom_details = fields.Str(data_key="customDetails", allow_none=True)

    @post_load
    def make_payment_info(self, data, **kwargs) -> PaymentInfo:
        return PaymentInfo(**data)


class SplitDataSchema(Schema):
    """
    A full split snapshot.

    Optional fields (storeName, dateTime, paymentInfo) may be absent. An
    absent or null paymentInfo becomes PaymentInfo(method=None).
    """

    store_name = fields.Str(data_key="storeName", allow_none=True, load_default=None)
    date_time = fields.Str(data_key="dateTime", allow_none=True, load_default=None)
    currency = fields.Str(
        required=True,
        validate=validate.Regexp(
            r"^[A-Za-z]{3}$",
            error="currency must be a three-letter ISO 4217 code.",
        ),
    )
    people = fields.List(fields.Nested(ParticipantSchema), load_default=list)
    items = fields.List(fields.Nested(ItemSchema), load_default=list)
    tax = fields.Decimal(as_string=True, load_default=Decimal("0"), validate=_AMOUNT_RANGE)
    tip_type = fields.Enum(
        TipType,
        by_value=True,
        data_key="tipType",
        load_default=TipType.PERCENT,
        error_messages={"unknown": ErrorCode.INVALID_TIP_TYPE},
    )
    tip_value = fields.Decimal(
        as_string=True,
        data_key="tipValue",
        load_default=Decimal("0"),
        validate=_AMOUNT_RANGE,
    )
    tax_tip_split_mode = fields.Enum(
        SplitMode,
        by_value=True,
        data_key="taxTipSplitMode",
        load_default=SplitMode.EQUAL,
        error_messages={"unknown": ErrorCode.INVALID_SPLIT_MODE},
    )
    payment_info = fields.Nested(PaymentInfoSchema, data_key="paymentInfo", allow_none=True)

    @validates_schema
    def validate_references(self, data, **kwargs) -> None:
        """
        Participant ids must be unique, and every assignedTo id must name one
        of them. Runs after field validation, so nested objects are built.
        """
        people = data.get("people") or []
        person_ids = [p.id for p in people]
        if len(set(person_ids)) != len(person_ids):
            raise ValidationError(ErrorCode.DUPLICATE_PARTICIPANT, field_name="people")

        known = set(person_ids)
        for item in data.get("items") or []:
            if any(pid not in known for pid in item.assigned_to):
                raise ValidationError(ErrorCode.UNKNOWN_ASSIGNEE, field_name="items")

    @post_load
    def make_split_data(self, data, **kwargs) -> SplitData:
        data["currency"] = data["currency"].upper()
        if data.get("payment_info") is None:
            data["payment_info"] = PaymentInfo()
        return SplitData(**data)


class ShareTextQuerySchema(Schema):
    """Query string for the share-text endpoints: ?details=true|false"""

    class Meta:
        unknown = EXCLUDE

    details = fields.Bool(load_default=False)
