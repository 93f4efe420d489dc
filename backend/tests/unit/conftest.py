"""
tests/unit/conftest.py — Builders for SplitData used across the unit suite.

Plain functions, not fixtures, so tests can call them with any arguments.
Amounts are passed as strings and converted to Decimal here.
"""

from __future__ import annotations

from decimal import Decimal

from backend.app.models.split_data import (
    Item,
    Participant,
    PaymentInfo,
    SplitData,
    SplitMode,
    TipType,
)


def person(pid: str, name: str | None = None) -> Participant:
    return Participant(id=pid, name=name or pid.title(), color="#3366ff")


def item(
    iid: str,
    price: str,
    assigned_to: list[str],
    quantity: int = 1,
    name: str | None = None,
) -> Item:
    return Item(
        id=iid,
        name=name or iid.title(),
        price=Decimal(price),
        quantity=quantity,
        assigned_to=list(assigned_to),
    )


def make_split(
    people: list[Participant] | None = None,
    items: list[Item] | None = None,
    tax: str = "0",
    tip_type: TipType = TipType.AMOUNT,
    tip_value: str = "0",
    mode: SplitMode = SplitMode.EQUAL,
    currency: str = "USD",
    store_name: str | None = None,
    date_time: str | None = None,
    payment_info: PaymentInfo | None = None,
) -> SplitData:
    return SplitData(
        currency=currency,
        people=people if people is not None else [],
        items=items if items is not None else [],
        tax=Decimal(tax),
        tip_type=tip_type,
        tip_value=Decimal(tip_value),
        tax_tip_split_mode=mode,
        payment_info=payment_info or PaymentInfo(),
        store_name=store_name,
        date_time=date_time,
    )
