# purchases/services/supplier_invoice_service.py

"""
======================================================
PATH: purchases/services/supplier_invoice_service.py
======================================================
SUPPLIER INVOICES

- One invoice per GRN, numbered SINV-{seq:05d}
- Lines copy the GRN quantities and costs; VAT uses the PO line rate
  (only where the PO line is VAT-applicable)
- Created Awaiting Approval. Approve -> Unpaid; Void only before approval.
- Approval posts the input VAT (the GRN already booked the net payable):
      Dr VAT_INPUT / Cr ACCOUNTS_PAYABLE   (skipped when VAT is zero)
"""

from __future__ import annotations

import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.services.account_resolver import get_account_by_role, get_payable_account
from accounting.services.journal_voucher_service import post_system_voucher
from accounting.services.money import ZERO, percent_of, q2
from accounting.services.numbering import next_sequence_number
from purchases.models import GoodsReceivedNote, SupplierInvoice, SupplierInvoiceItem

logger = logging.getLogger(__name__)

SETTLED_TOLERANCE = q2("0.01")


class SupplierInvoiceError(ValueError):
    pass


class SupplierInvoiceStateError(SupplierInvoiceError):
    pass


class DuplicateSupplierInvoiceError(SupplierInvoiceError):
    pass


def next_supplier_invoice_number(company) -> str:
    return next_sequence_number(
        company=company,
        queryset=SupplierInvoice.objects.filter(company=company),
        field="invoice_number",
        prefix="SINV-",
        width=5,
    )


def default_supplier_due_date(invoice_date):
    return invoice_date + timedelta(days=getattr(settings, "DEFAULT_SUPPLIER_INVOICE_DUE_DAYS", 30))


def _lock(invoice: SupplierInvoice) -> SupplierInvoice:
    return SupplierInvoice.objects.select_for_update().select_related("company", "supplier").get(pk=invoice.pk)


@transaction.atomic
def create_invoice_from_grn(
    *,
    grn: GoodsReceivedNote,
    invoice_date=None,
    due_date=None,
    supplier_reference: str = "",
    user=None,
) -> SupplierInvoice:
    grn = GoodsReceivedNote.objects.select_for_update().select_related("company", "purchase_order__supplier").get(pk=grn.pk)
    if SupplierInvoice.objects.filter(grn=grn).exists():
        raise DuplicateSupplierInvoiceError(f"{grn.grn_number} has already been invoiced")

    grn_items = list(grn.items.select_related("po_item", "po_item__item"))
    if not grn_items:
        raise SupplierInvoiceError(f"{grn.grn_number} has no received lines")

    invoice_date = invoice_date or grn.grn_date
    due_date = due_date or default_supplier_due_date(invoice_date)
    if due_date < invoice_date:
        raise SupplierInvoiceError("Due date cannot be before the invoice date")

    company = grn.company
    po = grn.purchase_order
    invoice = SupplierInvoice.objects.create(
        company=company,
        invoice_number=next_supplier_invoice_number(company),
        supplier_reference=(supplier_reference or "").strip(),
        supplier=po.supplier,
        purchase_order=po,
        grn=grn,
        invoice_date=invoice_date,
        due_date=due_date,
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    subtotal = vat = ZERO
    rows = []
    for grn_item in grn_items:
        po_item = grn_item.po_item
        rate = po_item.vat_rate if po_item.vat_applicable else ZERO
        line_vat = percent_of(grn_item.line_value, rate)
        rows.append(
            SupplierInvoiceItem(
                invoice=invoice,
                grn_item=grn_item,
                item=po_item.item,
                quantity=grn_item.quantity_received,
                unit_cost=grn_item.unit_cost,
                line_amount=grn_item.line_value,
                vat_rate=rate,
                vat_amount=line_vat,
                line_total=q2(grn_item.line_value + line_vat),
            )
        )
        subtotal += grn_item.line_value
        vat += line_vat
    SupplierInvoiceItem.objects.bulk_create(rows)

    invoice.subtotal = q2(subtotal)
    invoice.vat_amount = q2(vat)
    invoice.total_amount = q2(subtotal + vat)
    invoice.save(update_fields=["subtotal", "vat_amount", "total_amount", "updated_at"])

    logger.info(
        "Supplier invoice created company=%s number=%s grn=%s total=%s",
        company.pk,
        invoice.invoice_number,
        grn.grn_number,
        invoice.total_amount,
    )
    return invoice


@transaction.atomic
def approve_supplier_invoice(*, invoice: SupplierInvoice, user=None) -> SupplierInvoice:
    invoice = _lock(invoice)
    if invoice.status != SupplierInvoice.STATUS_AWAITING_APPROVAL:
        logger.warning("Supplier invoice approve refused number=%s status=%s", invoice.invoice_number, invoice.status)
        raise SupplierInvoiceStateError(f"Only invoices awaiting approval can be approved (status={invoice.status})")

    company = invoice.company
    if invoice.vat_amount > ZERO:
        invoice.journal_voucher = post_system_voucher(
            company=company,
            entry_date=invoice.invoice_date,
            narration=f"Input VAT on {invoice.invoice_number} - {invoice.supplier.name}",
            source=JournalVoucher.SOURCE_SUPPLIER_INVOICE,
            reference_type="SUPPLIER_INVOICE",
            reference_id=invoice.pk,
            created_by=user,
            lines=[
                {"account": get_account_by_role(company, Account.VAT_INPUT), "debit": invoice.vat_amount},
                {"account": get_payable_account(company), "credit": invoice.vat_amount, "payee": invoice.supplier.name},
            ],
        )

    invoice.status = SupplierInvoice.STATUS_UNPAID
    invoice.approved_by = user if getattr(user, "is_authenticated", False) else None
    invoice.approved_at = timezone.now()
    invoice.save(update_fields=["status", "journal_voucher", "approved_by", "approved_at", "updated_at"])

    logger.info("Supplier invoice approved company=%s number=%s", company.pk, invoice.invoice_number)
    return invoice


@transaction.atomic
def void_supplier_invoice(*, invoice: SupplierInvoice, user=None) -> SupplierInvoice:
    invoice = _lock(invoice)
    if invoice.status != SupplierInvoice.STATUS_AWAITING_APPROVAL:
        raise SupplierInvoiceStateError(f"Only invoices awaiting approval can be voided (status={invoice.status})")

    # Voiding frees the GRN for a corrected invoice.
    invoice.status = SupplierInvoice.STATUS_VOID
    invoice.grn = None
    invoice.save(update_fields=["status", "grn", "updated_at"])
    invoice.items.update(grn_item=None)

    logger.info("Supplier invoice voided company=%s number=%s", invoice.company_id, invoice.invoice_number)
    return invoice


def unpaid_supplier_invoices(company, supplier=None):
    """Approved invoices with more than a cent outstanding, oldest due first."""
    qs = (
        SupplierInvoice.objects.filter(company=company, status__in=SupplierInvoice.PAYABLE_STATUSES)
        .annotate(balance=F("total_amount") - F("amount_paid"))
        .filter(balance__gt=SETTLED_TOLERANCE)
        .select_related("supplier")
        .order_by("due_date", "id")
    )
    if supplier is not None:
        qs = qs.filter(supplier=supplier)
    return qs
