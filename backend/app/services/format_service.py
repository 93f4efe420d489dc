"""
services/format_service.py — Currency rendering and shareable split text.

Everything here returns plain strings. Nothing performs I/O: copying the text
to a clipboard or saving it to a file is the caller's job.

Layer rules:
  - No Flask imports. No database access.
  - Share amounts come from allocation_service; this module never computes
    a share of its own.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, localcontext

from backend.app.models.split_data import PaymentInfo, PaymentMethod, SplitData
from backend.app.services import allocation_service


# ISO 4217 code → (symbol, minor-unit digits). Unknown codes render as
# "<CODE> 1.00".
_CURRENCY_FORMATS: dict[str, tuple[str, int]] = {
    "USD": ("$", 2),
    "EUR": ("€", 2),
    "GBP": ("£", 2),
    "JPY": ("¥", 0),
    "KRW": ("₩", 0),
    "CNY": ("CN¥", 2),
    "INR": ("₹", 2),
    "CAD": ("CA$", 2),
    "AUD": ("A$", 2),
    "MXN": ("MX$", 2),
    "BRL": ("R$", 2),
    "THB": ("฿", 2),
}

UNTITLED_SPLIT = "Untitled Split"


def format_currency(amount: Decimal | int | float, currency_code: str) -> str:
    """
    Renders `amount` in `currency_code`, e.g. format_currency(Decimal("1234.5"), "USD")
    → "$1,234.50". Rounds half-up to the currency's minor unit. Never raises
    for zero, sub-cent or very large amounts; a value that rounds to zero
    has no sign.
    """
    code = (currency_code or "").upper()
    symbol, places = _CURRENCY_FORMATS.get(code, (f"{code} ", 2))

    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # quantize needs every integer digit plus the minor unit in precision
        ctx.prec = max(ctx.prec, value.adjusted() + places + 2)
        rounded = value.quantize(quantum, rounding=ROUND_HALF_UP)

    sign = "-" if rounded < 0 else ""
    return f"{sign}{symbol}{rounded.copy_abs():,.{places}f}"


def format_payment_info(info: PaymentInfo | None) -> list[str]:
    """
    Lines describing how to pay the organiser. Empty when no method is set or
    the method's detail field is blank.
    """
    if info is None or info.method is None:
        return []

    if info.method == PaymentMethod.BANK and info.bank_account_number:
        return ["Pay via Bank Transfer", f"Account: {info.bank_account_number}"]
    if info.method == PaymentMethod.VENMO and info.venmo_handle:
        return [f"Pay via Venmo: @{info.venmo_handle.lstrip('@')}"]
    if info.method == PaymentMethod.PAYPAL and info.paypal_info:
        return [f"Pay via PayPal: {info.paypal_info}"]
    if info.method == PaymentMethod.CUSTOM and info.custom_method:
        lines = [f"Pay via {info.custom_method}"]
        if info.custom_details:
            lines.append(info.custom_details)
        return lines
    return []


def generate_shareable_text(data: SplitData, include_details: bool = False) -> str:
    """
    Plain-text summary of a split, deterministic for a given SplitData.

    Layout:
        Receipt Split
        <store name>            (if present)
        <date/time>             (if present)

        <name>: <share>         (one line per participant, input order)
          - <item> (÷k): <cost> (include_details, per assigned item)
          - Tax: <share>        (include_details, when tax > 0)
          - Tip: <share>        (include_details, when tipValue > 0)

        Total: <total>

        Pay via ...             (if payment info is set)

    Detail lines only appear under participants with at least one item.
    """
    currency = data.currency
    breakdown = allocation_service.compute_breakdown(data)

    lines = ["Receipt Split"]
    if data.store_name:
        lines.append(data.store_name)
    if data.date_time:
        lines.append(data.date_time)
    lines.append("")

    for person in data.people:
        parts = breakdown[person.id]
        lines.append(f"{person.name}: {format_currency(parts['total'], currency)}")

        if not include_details:
            continue

        person_items = [item for item in data.items if person.id in item.assigned_to]
        if not person_items:
            continue

        for item in person_items:
            split_count = len(item.assigned_to)
            label = item.name if split_count == 1 else f"{item.name} (÷{split_count})"
            cost = allocation_service.item_share(item)
            lines.append(f"  - {label}: {format_currency(cost, currency)}")
        if data.tax > 0:
            lines.append(f"  - Tax: {format_currency(parts['tax'], currency)}")
        if data.tip_value > 0:
            lines.append(f"  - Tip: {format_currency(parts['tip'], currency)}")

    lines.append("")
    lines.append(f"Total: {format_currency(allocation_service.compute_total(data), currency)}")

    payment_lines = format_payment_info(data.payment_info)
    if payment_lines:
        lines.append("")
        lines.extend(payment_lines)

    return "\n".join(lines)


def entry_title(data: SplitData) -> str:
    return data.store_name or UNTITLED_SPLIT


def format_relative_time(timestamp: datetime, now: datetime | None = None) -> str:
    """
    Short age of a history entry: "Just now", "5m ago", "3h ago", "2d ago",
    then a calendar date ("Mar 5", or "Mar 5, 2024" outside the current year).
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)

    elapsed = (now - timestamp).total_seconds()
    minutes = int(elapsed // 60)
    hours = int(elapsed // 3600)
    days = int(elapsed // 86400)

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if hours < 24:
        return f"{hours}h ago"
    if days < 7:
        return f"{days}d ago"

    label = f"{timestamp.strftime('%b')} {timestamp.day}"
    if timestamp.year != now.year:
        label += f", {timestamp.year}"
    return label
