# purchases/services/purchase_order_service.py

"""
======================================================
PATH: purchases/services/purchase_order_service.py
======================================================
PURCHASE ORDERS

Line maths:
    line_amount = quantity * unit_price
    vat_amount  = line_amount * vat_rate / 100   (only when vat_applicable)
    line_total  = line_amount + vat_amount

Header: subtotal = SUM(line_amount), vat_total = SUM(vat_amount), total = subtotal + vat_total

A PO has no ledger impact; the liability is recognised when goods are received.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from accounting.services.money import ZERO, percent_of, q2, q4
from accounting.services.numbering import next_sequence_number
from purchases.models import PurchaseOrder, PurchaseOrderItem

logger = logging.getLogger(__name__)

DEFAULT_VAT_RATE = Decimal("7.50")


class PurchaseOrderError(ValueError):
    pass


class PurchaseOrderStateError(PurchaseOrderError):
    pass


def next_po_number(company, po_date) -> str:
    return next_sequence_number(
        company=company,
        queryset=PurchaseOrder.objects.filter(company=company),
        field="po_number",
        prefix=f"PO-{po_date.year}-",
        width=4,
    )


def _dec(value, field: str, idx: int) -> Decimal:
    try:
        return Decimal(str(value if value not in (None, "") else "0"))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise PurchaseOrderError(f"Line {idx}: {field} must be a valid number") from exc


def _price_line(company, idx: int, row: dict) -> dict:
    item = row.get("item")
    if item is None:
        raise PurchaseOrderError(f"Line {idx}: item is required")
    if item.company_id != company.pk:
        raise PurchaseOrderError(f"Line {idx}: item does not belong to this company")

    quantity = q4(_dec(row.get("quantity"), "quantity", idx))
    unit_price = q4(_dec(row.get("unit_price"), "unit_price", idx))
    if quantity <= 0:
        raise PurchaseOrderError(f"Line {idx}: quantity must be greater than zero")
    if unit_price < 0:
        raise PurchaseOrderError(f"Line {idx}: unit_price cannot be negative")

    vat_applicable = bool(row.get("vat_applicable", False))
    vat_rate = _dec(row.get("vat_rate", DEFAULT_VAT_RATE), "vat_rate", idx) if vat_applicable else ZERO
    if vat_rate < 0 or vat_rate > 100:
        raise PurchaseOrderError(f"Line {idx}: vat_rate must be between 0 and 100")

    line_amount = q2(quantity * unit_price)
    vat_amount = percent_of(line_amount, vat_rate) if vat_applicable else ZERO

    return {
        "item": item,
        "description": ((row.get("description") or "").strip() or item.name)[:255],
        "quantity": quantity,
        "unit_price": unit_price,
        "line_amount": line_amount,
        "vat_applicable": vat_applicable,
        "vat_rate": vat_rate,
        "vat_amount": vat_amount,
        "line_total": q2(line_amount + vat_amount),
    }


@transaction.atomic
def create_purchase_order(
    *,
    company,
    supplier,
    items,
    po_date=None,
    expected_delivery_date=None,
    currency: str | None = None,
    payment_terms: str = "",
    remarks: str = "",
    user=None,
) -> PurchaseOrder:
    if supplier.company_id != company.pk:
        raise PurchaseOrderError("Supplier does not belong to this company")
    if not supplier.is_active:
        raise PurchaseOrderError(f"Supplier {supplier.supplier_code} is inactive")

    rows = list(items or [])
    if not rows:
        raise PurchaseOrderError("A purchase order needs at least one line")
    lines = [_price_line(company, idx, row) for idx, row in enumerate(rows, start=1)]

    subtotal = q2(sum((l["line_amount"] for l in lines), ZERO))
    vat_total = q2(sum((l["vat_amount"] for l in lines), ZERO))

    po_date = po_date or timezone.localdate()
    if expected_delivery_date and expected_delivery_date < po_date:
        raise PurchaseOrderError("Expected delivery cannot be before the PO date")

    po = PurchaseOrder.objects.create(
        company=company,
        po_number=next_po_number(company, po_date),
        supplier=supplier,
        po_date=po_date,
        expected_delivery_date=expected_delivery_date,
        currency=(currency or company.currency or "NGN").upper(),
        payment_terms=payment_terms or "",
        subtotal=subtotal,
        vat_total=vat_total,
        total_amount=q2(subtotal + vat_total),
        remarks=remarks or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )
    PurchaseOrderItem.objects.bulk_create([PurchaseOrderItem(purchase_order=po, **line) for line in lines])

    logger.info("Purchase order created company=%s number=%s total=%s", company.pk, po.po_number, po.total_amount)
    return po


def _lock_po(po: PurchaseOrder) -> PurchaseOrder:
    return PurchaseOrder.objects.select_for_update().get(pk=po.pk)


@transaction.atomic
def approve_purchase_order(*, purchase_order: PurchaseOrder, user=None) -> PurchaseOrder:
    po = _lock_po(purchase_order)
    if po.status != PurchaseOrder.STATUS_DRAFT:
        logger.warning("PO approve refused number=%s status=%s", po.po_number, po.status)
        raise PurchaseOrderStateError(f"Only draft purchase orders can be approved (status={po.status})")

    po.status = PurchaseOrder.STATUS_APPROVED
    po.approved_by = user if getattr(user, "is_authenticated", False) else None
    po.approved_at = timezone.now()
    po.save()

    logger.info("Purchase order approved company=%s number=%s", po.company_id, po.po_number)
    return po


@transaction.atomic
def cancel_purchase_order(*, purchase_order: PurchaseOrder, user=None) -> PurchaseOrder:
    po = _lock_po(purchase_order)
    if po.status in (PurchaseOrder.STATUS_CANCELLED, PurchaseOrder.STATUS_COMPLETED):
        raise PurchaseOrderStateError(f"Purchase order is already {po.status.lower()}")
    if po.status == PurchaseOrder.STATUS_PARTIALLY_RECEIVED or po.items.filter(quantity_received__gt=0).exists():
        raise PurchaseOrderStateError("Purchase orders with received goods cannot be cancelled")

    po.status = PurchaseOrder.STATUS_CANCELLED
    po.save()

    logger.info("Purchase order cancelled company=%s number=%s", po.company_id, po.po_number)
    return po
