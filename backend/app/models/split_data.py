"""
models/split_data.py — Value types for one receipt split.

These are plain dataclasses, not ORM rows: a split travels as a single
snapshot (request body, live-split slot, history record) and is never
queried field by field. The marshmallow schemas in app/schemas/ convert
between these types and their camelCase JSON layout.

Key design points:
  - Monetary fields are Decimal — never float.
  - `assigned_to` holds Participant ids. Duplicates are rejected by the
    schema; an empty list means the item is unassigned.
  - `payment_info` defaults to PaymentInfo(method=None) so a split built
    without one is identical to a migrated pre-payment-info record.
"""

from __future__ import annotations

import copy
import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


# ── Enum Definitions ───────────────────────────────────────────────────────
# Do not duplicate these as plain string constants anywhere else.

class TipType(str, enum.Enum):
    PERCENT = "percent"
    AMOUNT  = "amount"


class SplitMode(str, enum.Enum):
    """How tax and tip are spread across participants."""
    EQUAL        = "equal"
    PROPORTIONAL = "proportional"


class PaymentMethod(str, enum.Enum):
    BANK   = "bank"
    VENMO  = "venmo"
    PAYPAL = "paypal"
    CUSTOM = "custom"


# ── Value types ────────────────────────────────────────────────────────────

@dataclass
class Participant:
    id: str
    name: str
    color: str = ""


@dataclass
class Item:
    id: str
    name: str
    price: Decimal
    quantity: int
    assigned_to: list[str] = field(default_factory=list)

    @property
    def cost(self) -> Decimal:
        """Line cost: unit price times quantity."""
        return self.price * self.quantity


@dataclass
class PaymentInfo:
    method: PaymentMethod | None = None
    bank_account_number: str | None = None
    venmo_handle: str | None = None
    paypal_info: str | None = None
    custom_method: str | None = None
    custom_details: str | None = None


@dataclass
class SplitData:
    currency: str
    people: list[Participant] = field(default_factory=list)
    items: list[Item] = field(default_factory=list)
    tax: Decimal = Decimal("0")
    tip_type: TipType = TipType.PERCENT
    tip_value: Decimal = Decimal("0")
    tax_tip_split_mode: SplitMode = SplitMode.EQUAL
    payment_info: PaymentInfo = field(default_factory=PaymentInfo)
    store_name: str | None = None
    date_time: str | None = None

    def clone(self) -> SplitData:
        """Deep copy; the result shares no mutable state with self."""
        return copy.deepcopy(self)


@dataclass(frozen=True)
class HistoryEntry:
    """
    Snapshot of a completed split.

    `people_count`, `items_count` and `total` are taken at commit time and
    never recomputed from `data`.
    """
    id: str
    timestamp: datetime
    people_count: int
    items_count: int
    total: Decimal
    data: SplitData
