"""
tests/unit/test_item_allocation.py — Per-item cost division.

What this file proves:
  - An item assigned to k participants contributes price × quantity / k to
    each of them and nothing to anyone else.
  - Unassigned items contribute to nobody's subtotal but still count toward
    the receipt subtotal.
  - Zero-price items contribute zero; an empty item list is not an error.

No database, no Flask.
"""

from __future__ import annotations

from decimal import Decimal

from backend.app.services import allocation_service

from .conftest import item


def test_single_assignee_gets_full_line_cost():
    items = [item("burger", "12.50", ["a"], quantity=2)]

    assert allocation_service.person_subtotal("a", items) == Decimal("25.00")


def test_shared_item_split_evenly_between_two():
    items = [item("pizza", "30", ["a", "b"])]

    assert allocation_service.person_subtotal("a", items) == Decimal("15")
    assert allocation_service.person_subtotal("b", items) == Decimal("15")


def test_non_assignee_gets_nothing():
    items = [item("pizza", "30", ["a", "b"])]

    assert allocation_service.person_subtotal("c", items) == Decimal("0")


def test_item_share_uses_quantity_and_assignee_count():
    shared = item("wings", "9", ["a", "b", "c"], quantity=2)

    assert allocation_service.item_share(shared) == Decimal("6")


def test_three_way_split_of_indivisible_amount_is_not_rounded():
    items = [item("pitcher", "10", ["a", "b", "c"])]

    each = allocation_service.person_subtotal("a", items)

    assert each == Decimal("10") / 3
    assert abs(each * 3 - Decimal("10")) < Decimal("1e-20")


def test_subtotal_sums_over_several_items():
    items = [
        item("burger", "12", ["a"]),
        item("fries", "6", ["a", "b"]),
        item("salad", "9", ["b"]),
    ]

    assert allocation_service.person_subtotal("a", items) == Decimal("15")
    assert allocation_service.person_subtotal("b", items) == Decimal("12")


def test_unassigned_item_goes_to_nobody_but_counts_in_receipt_subtotal():
    items = [
        item("burger", "12", ["a"]),
        item("mystery", "8", []),
    ]

    assert allocation_service.item_share(items[1]) == Decimal("0")
    assert allocation_service.person_subtotal("a", items) == Decimal("12")
    assert allocation_service.items_subtotal(items) == Decimal("20")


def test_zero_price_item_contributes_zero():
    items = [item("water", "0", ["a", "b"], quantity=3)]

    assert allocation_service.person_subtotal("a", items) == Decimal("0")
    assert allocation_service.items_subtotal(items) == Decimal("0")


def test_empty_item_list():
    assert allocation_service.items_subtotal([]) == Decimal("0")
    assert allocation_service.person_subtotal("a", []) == Decimal("0")
