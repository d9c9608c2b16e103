# sales/services/credit_note_service.py

"""
CREDIT NOTES

create_credit_note -> draft (no ledger impact)
post_credit_note   -> posted:
    Dr SALES_RETURNS_ALLOWANCES  subtotal - discount
    Dr VAT_PAYABLE               tax
    Cr ACCOUNTS_RECEIVABLE       total

The invoice's amount_due is reduced and floored at 0.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.services.account_resolver import get_account_by_role, get_receivable_account
from accounting.services.journal_voucher_service import post_system_voucher
from accounting.services.money import ZERO, q2
from accounting.services.numbering import next_sequence_number
from sales.models import CreditNote, CreditNoteItem, SalesInvoice
from sales.services.exceptions import CreditNoteError, CreditNoteStateError, SalesError
from sales.services.pricing import price_lines

logger = logging.getLogger(__name__)

CREDITABLE_STATUSES = {SalesInvoice.STATUS_ISSUED, SalesInvoice.STATUS_PARTIAL, SalesInvoice.STATUS_PAID}


def next_credit_note_number(company) -> str:
    return next_sequence_number(
        company=company,
        queryset=CreditNote.objects.filter(company=company),
        field="credit_note_number",
        prefix="CN-",
        width=5,
    )


def credited_total(invoice: SalesInvoice):
    total = invoice.credit_notes.filter(status=CreditNote.STATUS_POSTED).aggregate(t=Sum("total_amount"))["t"]
    return q2(total or ZERO)


@transaction.atomic
def create_credit_note(*, company, invoice: SalesInvoice, items, credit_date=None, reason: str = "", user=None) -> CreditNote:
    if invoice.company_id != company.pk:
        raise CreditNoteError("Invoice does not belong to this company")
    if invoice.status not in CREDITABLE_STATUSES:
        raise CreditNoteError(f"Credit notes require an issued invoice (status={invoice.status})")

    for idx, row in enumerate(items or [], start=1):
        item = row.get("item")
        if item is not None and item.company_id != company.pk:
            raise CreditNoteError(f"Line {idx}: item does not belong to this company")

    try:
        priced, totals = price_lines(items)
    except SalesError as exc:
        raise CreditNoteError(str(exc)) from exc
    if totals.total <= ZERO:
        raise CreditNoteError("Credit note total must be greater than zero")

    note = CreditNote.objects.create(
        company=company,
        credit_note_number=next_credit_note_number(company),
        invoice=invoice,
        customer=invoice.customer,
        credit_date=credit_date or timezone.localdate(),
        reason=reason or "",
        subtotal=totals.subtotal,
        discount_amount=totals.discount,
        tax_amount=totals.tax,
        total_amount=totals.total,
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )
    CreditNoteItem.objects.bulk_create(
        [
            CreditNoteItem(
                credit_note=note,
                item=p.item,
                description=p.description,
                quantity=p.quantity,
                unit_price=p.unit_price,
                discount=p.discount,
                tax_rate=p.tax_rate,
                tax_amount=p.tax_amount,
                line_total=p.line_total,
            )
            for p in priced
        ]
    )

    logger.info("Credit note drafted company=%s number=%s invoice=%s", company.pk, note.credit_note_number, invoice.invoice_number)
    return note


@transaction.atomic
def post_credit_note(*, credit_note: CreditNote, user=None) -> CreditNote:
    note = CreditNote.objects.select_for_update().select_related("company", "customer").get(pk=credit_note.pk)
    if note.status != CreditNote.STATUS_DRAFT:
        raise CreditNoteStateError(f"Only draft credit notes can be posted (status={note.status})")

    invoice = SalesInvoice.objects.select_for_update().get(pk=note.invoice_id)
    if invoice.status not in CREDITABLE_STATUSES:
        raise CreditNoteStateError(f"Invoice {invoice.invoice_number} can no longer be credited (status={invoice.status})")
    if q2(credited_total(invoice) + note.total_amount) > invoice.total_amount:
        raise CreditNoteError(f"Credits would exceed the total of invoice {invoice.invoice_number}")

    company = note.company
    net_sales = q2(note.subtotal - note.discount_amount)
    lines = [
        {"account": get_account_by_role(company, Account.SALES_RETURNS_ALLOWANCES), "debit": net_sales},
        {"account": get_receivable_account(company), "credit": note.total_amount, "payee": note.customer.name},
    ]
    if note.tax_amount > ZERO:
        lines.append({"account": get_account_by_role(company, Account.VAT_PAYABLE), "debit": note.tax_amount})

    voucher = post_system_voucher(
        company=company,
        entry_date=note.credit_date,
        narration=f"Credit note {note.credit_note_number} against {invoice.invoice_number}",
        source=JournalVoucher.SOURCE_CREDIT_NOTE,
        reference_type="CREDIT_NOTE",
        reference_id=note.pk,
        created_by=user,
        lines=lines,
    )

    invoice.amount_due = q2(max(invoice.amount_due - note.total_amount, ZERO))
    if invoice.amount_due == ZERO:
        invoice.status = SalesInvoice.STATUS_PAID
    invoice.save()

    note.status = CreditNote.STATUS_POSTED
    note.journal_voucher = voucher
    note.save(update_fields=["status", "journal_voucher"])

    logger.info(
        "Credit note posted company=%s number=%s invoice=%s due=%s",
        company.pk,
        note.credit_note_number,
        invoice.invoice_number,
        invoice.amount_due,
    )
    return note
