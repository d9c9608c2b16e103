# purchases/services/receiving_service.py

"""
======================================================
PATH: purchases/services/receiving_service.py
======================================================
GOODS RECEIVING (GRN)

Receive goods against an approved purchase order atomically:

1) Lock PO + lines
2) Validate status and outstanding quantities
3) Intake stock at the PO unit price (weighted average, RECEIPT movement)
4) Post ledger (idempotent per GRN):
       Dr item inventory account   value per account
       Cr ACCOUNTS_PAYABLE         total value
5) Roll PO status: Completed when SUM(received) >= SUM(ordered), else Partially Received

lines = [{"po_item": <PurchaseOrderItem>, "quantity": Decimal}, ...]
"""

from __future__ import annotations

import logging
from collections import defaultdict

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from accounting.models.journal import JournalVoucher
from accounting.services.account_resolver import get_payable_account
from accounting.services.journal_voucher_service import post_system_voucher
from accounting.services.money import ZERO, q2, q4
from accounting.services.numbering import next_sequence_number
from inventory.models import StockMovement
from inventory.services.stock_service import InventoryError, receive_stock, to_quantity
from purchases.models import GoodsReceivedNote, GRNItem, PurchaseOrder, PurchaseOrderItem

logger = logging.getLogger(__name__)


class PurchaseReceivingError(ValueError):
    pass


def next_grn_number(company, grn_date) -> str:
    return next_sequence_number(
        company=company,
        queryset=GoodsReceivedNote.objects.filter(company=company),
        field="grn_number",
        prefix=f"GRN-{grn_date:%Y%m%d}-",
        width=4,
    )


@transaction.atomic
def receive_goods(*, purchase_order: PurchaseOrder, lines, grn_date=None, remarks: str = "", user=None) -> GoodsReceivedNote:
    po = PurchaseOrder.objects.select_for_update().select_related("company", "supplier").get(pk=purchase_order.pk)
    if po.status not in PurchaseOrder.RECEIVABLE_STATUSES:
        logger.warning("GRN refused po=%s status=%s", po.po_number, po.status)
        raise PurchaseReceivingError(f"Goods cannot be received against a {po.status.lower()} purchase order")

    rows = list(lines or [])
    if not rows:
        raise PurchaseReceivingError("At least one received line is required")

    po_items = {
        it.pk: it
        for it in PurchaseOrderItem.objects.select_for_update()
        .select_related("item", "item__inventory_account")
        .filter(purchase_order=po)
    }

    plan = []
    seen = set()
    for idx, row in enumerate(rows, start=1):
        po_item = po_items.get(getattr(row.get("po_item"), "pk", None))
        if po_item is None:
            raise PurchaseReceivingError(f"Line {idx}: item is not on purchase order {po.po_number}")
        if po_item.pk in seen:
            raise PurchaseReceivingError(f"Line {idx}: {po_item.item.sku} appears more than once")
        seen.add(po_item.pk)

        try:
            qty = to_quantity(row.get("quantity"))
        except InventoryError as exc:
            raise PurchaseReceivingError(f"Line {idx}: {exc}") from exc
        if qty <= 0:
            raise PurchaseReceivingError(f"Line {idx}: quantity must be greater than zero")

        outstanding = q4(po_item.quantity - po_item.quantity_received)
        if qty > outstanding:
            raise PurchaseReceivingError(
                f"Line {idx}: receiving {qty} of {po_item.item.sku} exceeds outstanding {outstanding}"
            )
        plan.append((po_item, qty))

    company = po.company
    grn_date = grn_date or timezone.localdate()
    grn = GoodsReceivedNote.objects.create(
        company=company,
        grn_number=next_grn_number(company, grn_date),
        purchase_order=po,
        grn_date=grn_date,
        remarks=remarks or "",
        received_by=user if getattr(user, "is_authenticated", False) else None,
    )

    value_by_account = defaultdict(lambda: ZERO)
    total_value = ZERO
    for po_item, qty in plan:
        receive_stock(
            item=po_item.item,
            quantity=qty,
            unit_cost=po_item.unit_price,
            movement_type=StockMovement.MovementType.RECEIPT,
            reference=grn.grn_number,
            user=user,
        )
        line_value = q2(qty * po_item.unit_price)
        GRNItem.objects.create(
            grn=grn,
            po_item=po_item,
            quantity_received=qty,
            unit_cost=po_item.unit_price,
            line_value=line_value,
        )

        po_item.quantity_received = q4(po_item.quantity_received + qty)
        po_item.save(update_fields=["quantity_received"])

        value_by_account[po_item.item.inventory_account] += line_value
        total_value += line_value

    total_value = q2(total_value)
    if total_value > ZERO:
        voucher_lines = [
            {"account": account, "debit": q2(value), "description": grn.grn_number}
            for account, value in value_by_account.items()
            if value > ZERO
        ]
        voucher_lines.append(
            {"account": get_payable_account(company), "credit": total_value, "payee": po.supplier.name}
        )
        grn.journal_voucher = post_system_voucher(
            company=company,
            entry_date=grn_date,
            narration=f"Goods received {grn.grn_number} against {po.po_number} - {po.supplier.name}",
            source=JournalVoucher.SOURCE_GOODS_RECEIVED,
            reference_type="GOODS_RECEIVED",
            reference_id=grn.pk,
            created_by=user,
            lines=voucher_lines,
        )
    grn.total_value = total_value
    grn.save(update_fields=["total_value", "journal_voucher"])

    totals = po.items.aggregate(ordered=Sum("quantity"), received=Sum("quantity_received"))
    if (totals["received"] or 0) >= (totals["ordered"] or 0):
        po.status = PurchaseOrder.STATUS_COMPLETED
    else:
        po.status = PurchaseOrder.STATUS_PARTIALLY_RECEIVED
    po.save()

    logger.info(
        "Goods received company=%s grn=%s po=%s value=%s po_status=%s",
        company.pk,
        grn.grn_number,
        po.po_number,
        total_value,
        po.status,
    )
    return grn
