# accounting/services/money.py

"""
Money helpers shared by posting services and reports.

- money():  parse + round half-up to 2dp (raises JournalEntryCreationError on junk)
- q2():     round an existing Decimal to 2dp
- to_major_number() / to_minor_int(): JSON-safe report values
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from accounting.services.exceptions import JournalEntryCreationError

TWOPLACES = Decimal("0.01")
FOURPLACES = Decimal("0.0001")
ZERO = Decimal("0.00")


def money(value) -> Decimal:
    if value is None or value == "":
        return ZERO

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise JournalEntryCreationError(f"Invalid money value: {value!r}") from exc

    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def q2(amount) -> Decimal:
    return Decimal(amount or "0.00").quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def q4(amount) -> Decimal:
    return Decimal(amount or "0").quantize(FOURPLACES, rounding=ROUND_HALF_UP)


def percent_of(amount, rate) -> Decimal:
    return q2(Decimal(amount or 0) * Decimal(rate or 0) / Decimal("100"))


def to_major_number(amount) -> float:
    return float(q2(amount))


def to_minor_int(amount) -> int:
    return int((q2(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def amount_pair(amount, key: str) -> dict:
    """{key: 12.5, key_minor: 1250}"""
    return {key: to_major_number(amount), f"{key}_minor": to_minor_int(amount)}
