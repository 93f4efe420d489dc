"""
services/allocation_service.py — Share allocation for one receipt split.

This file is the SINGLE SOURCE OF TRUTH for how a participant's share is
computed. The formatter, the history store and the routes all call into it;
none of them re-derive a share on their own.

Three stages:
  1. Items      — each line item's cost (price × quantity) is divided evenly
                  across its assignees. Unassigned items go to nobody but
                  still count toward the receipt total.
  2. Surcharges — tax and tip are spread across participants, either evenly
                  (SplitMode.EQUAL) or in proportion to each participant's
                  item subtotal (SplitMode.PROPORTIONAL).
  3. Aggregate  — share = item subtotal + tax share + tip share.

Layer rules:
  - No Flask imports. No database access.
  - Pure functions of SplitData. Nothing here raises for well-formed input;
    the schemas reject malformed input before it gets here.
  - Decimal arithmetic throughout. No rounding is applied: the sum of all
    shares equals compute_total() up to Decimal context precision, and any
    residue is left as-is rather than assigned to one participant.
"""

from __future__ import annotations

from decimal import Decimal

from backend.app.models.split_data import Item, SplitData, SplitMode, TipType


_ZERO = Decimal("0")
_ONE = Decimal("1")
_HUNDRED = Decimal("100")


def nonzero_divisor(value: Decimal | int) -> Decimal:
    """
    Divide-by-zero policy for every share computation.

    A zero divisor is replaced by 1. Callers only divide by a count or a sum
    whose numerators are themselves zero whenever the divisor is zero, so
    every share computed against a zero divisor comes out as exactly zero.
    """
    value = Decimal(value)
    return value if value != _ZERO else _ONE


# ── Stage 1: items ─────────────────────────────────────────────────────────

def items_subtotal(items: list[Item]) -> Decimal:
    """Sum of price × quantity over all items, assigned or not."""
    return sum((item.cost for item in items), _ZERO)


def item_share(item: Item) -> Decimal:
    """What one assignee owes for `item`. Zero for an unassigned item."""
    if not item.assigned_to:
        return _ZERO
    return item.cost / len(item.assigned_to)


def person_subtotal(person_id: str, items: list[Item]) -> Decimal:
    """Sum of item_share() over every item assigned to `person_id`."""
    return sum(
        (item_share(item) for item in items if person_id in item.assigned_to),
        _ZERO,
    )


# ── Stage 2: surcharges ────────────────────────────────────────────────────

def compute_tip(subtotal: Decimal, tip_type: TipType, tip_value: Decimal) -> Decimal:
    """
    Tip amount for the whole receipt.

    PERCENT applies tip_value to the raw items subtotal (so a receipt with no
    item cost carries no percentage tip). AMOUNT is taken as-is.
    """
    if tip_type == TipType.PERCENT:
        return subtotal * tip_value / _HUNDRED
    return tip_value


def surcharge_shares(data: SplitData, subtotal_for_person: Decimal) -> tuple[Decimal, Decimal]:
    """
    Returns (tax_share, tip_share) for one participant.

    EQUAL:        tax / n and tip / n, regardless of what they ordered.
    PROPORTIONAL: tax and tip scaled by subtotal_for_person / items subtotal.
    """
    receipt_subtotal = items_subtotal(data.items)
    tip_amount = compute_tip(receipt_subtotal, data.tip_type, data.tip_value)

    if data.tax_tip_split_mode == SplitMode.EQUAL:
        people_count = nonzero_divisor(len(data.people))
        return data.tax / people_count, tip_amount / people_count

    ratio = subtotal_for_person / nonzero_divisor(receipt_subtotal)
    return data.tax * ratio, tip_amount * ratio


# ── Stage 3: aggregate ─────────────────────────────────────────────────────

def compute_breakdown(data: SplitData) -> dict[str, dict[str, Decimal]]:
    """
    Per-participant components, keyed by participant id:
        {"items_subtotal", "tax", "tip", "total"}

    Every participant appears, including those with no items.
    """
    breakdown: dict[str, dict[str, Decimal]] = {}
    for person in data.people:
        subtotal = person_subtotal(person.id, data.items)
        tax_share, tip_share = surcharge_shares(data, subtotal)
        breakdown[person.id] = {
            "items_subtotal": subtotal,
            "tax": tax_share,
            "tip": tip_share,
            "total": subtotal + tax_share + tip_share,
        }
    return breakdown


def compute_shares(data: SplitData) -> dict[str, Decimal]:
    """Final amount owed, keyed by participant id."""
    return {
        person_id: parts["total"]
        for person_id, parts in compute_breakdown(data).items()
    }


def compute_total(data: SplitData) -> Decimal:
    """Receipt total: items subtotal + tax + tip."""
    subtotal = items_subtotal(data.items)
    return subtotal + data.tax + compute_tip(subtotal, data.tip_type, data.tip_value)


def unassigned_subtotal(data: SplitData) -> Decimal:
    """Cost of items nobody is assigned to. Counted in the total, owed by nobody."""
    return sum((item.cost for item in data.items if not item.assigned_to), _ZERO)
