# sales/services/pricing.py

"""
Line and document maths shared by invoices and credit notes.

    gross      = quantity * unit_price
    tax        = (gross - discount) * tax_rate / 100
    line_total = gross - discount + tax

    subtotal = SUM(gross)   discount = SUM(discount)   tax = SUM(tax)
    total    = subtotal - discount + tax
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from accounting.services.money import ZERO, q2, q4
from sales.services.exceptions import SalesError


@dataclass
class PricedLine:
    item: object
    description: str
    quantity: Decimal
    unit_price: Decimal
    discount: Decimal
    tax_rate: Decimal
    gross: Decimal
    tax_amount: Decimal
    line_total: Decimal


@dataclass
class DocumentTotals:
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal


def _dec(value, field: str, idx: int) -> Decimal:
    try:
        return Decimal(str(value if value not in (None, "") else "0"))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise SalesError(f"Line {idx}: {field} must be a valid number") from exc


def price_line(idx: int, row: dict) -> PricedLine:
    quantity = q4(_dec(row.get("quantity"), "quantity", idx))
    unit_price = q2(_dec(row.get("unit_price"), "unit_price", idx))
    discount = q2(_dec(row.get("discount"), "discount", idx))
    tax_rate = _dec(row.get("tax_rate"), "tax_rate", idx)

    if quantity <= 0:
        raise SalesError(f"Line {idx}: quantity must be greater than zero")
    if unit_price < 0:
        raise SalesError(f"Line {idx}: unit_price cannot be negative")
    if tax_rate < 0 or tax_rate > 100:
        raise SalesError(f"Line {idx}: tax_rate must be between 0 and 100")

    gross = q2(quantity * unit_price)
    if discount < 0 or discount > gross:
        raise SalesError(f"Line {idx}: discount must be between 0 and the line amount")

    tax_amount = q2((gross - discount) * tax_rate / Decimal("100"))
    item = row.get("item")
    description = (row.get("description") or "").strip() or (item.name if item is not None else "")
    if not description:
        raise SalesError(f"Line {idx}: description is required for lines without an item")

    return PricedLine(
        item=item,
        description=description[:255],
        quantity=quantity,
        unit_price=unit_price,
        discount=discount,
        tax_rate=tax_rate,
        gross=gross,
        tax_amount=tax_amount,
        line_total=q2(gross - discount + tax_amount),
    )


def price_lines(rows) -> tuple[list[PricedLine], DocumentTotals]:
    rows = list(rows or [])
    if not rows:
        raise SalesError("At least one line is required")

    priced = [price_line(idx, row) for idx, row in enumerate(rows, start=1)]
    subtotal = sum((p.gross for p in priced), ZERO)
    discount = sum((p.discount for p in priced), ZERO)
    tax = sum((p.tax_amount for p in priced), ZERO)

    return priced, DocumentTotals(
        subtotal=q2(subtotal),
        discount=q2(discount),
        tax=q2(tax),
        total=q2(subtotal - discount + tax),
    )
