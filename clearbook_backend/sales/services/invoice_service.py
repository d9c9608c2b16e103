# sales/services/invoice_service.py

"""
======================================================
PATH: sales/services/invoice_service.py
======================================================
SALES INVOICE SERVICE

Lifecycle:
    DRAFT -> ISSUED -> PARTIAL -> PAID     (payments / credit notes)
    ISSUED (nothing paid) -> CANCELLED

Issue posts ONE voucher (source=Sales Invoice):
    Dr ACCOUNTS_RECEIVABLE    total
    Dr SALES_DISCOUNT         discount
    Cr SALES_REVENUE          subtotal
    Cr VAT_PAYABLE            tax
    Dr COGS                   SUM(qty * average_unit_cost)
    Cr item inventory account cost per account

Cancel mirrors that voucher and restocks at the issue-time cost snapshot.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.services.account_resolver import get_account_by_role
from accounting.services.journal_voucher_service import post_system_voucher, reverse_voucher
from accounting.services.money import ZERO, q2
from accounting.services.numbering import next_sequence_number
from inventory.models import StockMovement
from inventory.services.price_tier_service import PriceTierError, tier_price
from inventory.services.stock_service import (
    InsufficientStockError,
    consume_stock,
    receive_stock,
)
from sales.models import CreditNote, Customer, SalesInvoice, SalesInvoiceItem
from sales.services.exceptions import InvoiceError, InvoiceStateError, SalesError
from sales.services.pricing import price_lines

logger = logging.getLogger(__name__)


def next_invoice_number(company) -> str:
    return next_sequence_number(
        company=company,
        queryset=SalesInvoice.objects.filter(company=company),
        field="invoice_number",
        prefix="INV-",
        width=5,
    )


def default_due_date(invoice_date):
    return invoice_date + timedelta(days=getattr(settings, "DEFAULT_INVOICE_DUE_DAYS", 30))


def _lock_invoice(invoice: SalesInvoice) -> SalesInvoice:
    return SalesInvoice.objects.select_for_update().select_related("company", "customer").get(pk=invoice.pk)


def _resolve_unit_price(idx: int, row: dict) -> None:
    """Fill a missing unit_price from the named price tier or the item's selling price."""
    tier_name = (row.pop("price_tier", None) or "").strip()
    item = row.get("item")
    if tier_name:
        if item is None:
            raise InvoiceError(f"Line {idx}: a price tier needs an item")
        try:
            row["unit_price"] = tier_price(item, tier_name)
        except PriceTierError as exc:
            raise InvoiceError(f"Line {idx}: {exc}") from exc
    elif row.get("unit_price") is None:
        if item is None:
            raise InvoiceError(f"Line {idx}: unit_price is required for lines without an item")
        row["unit_price"] = item.selling_price


@transaction.atomic
def create_invoice(
    *,
    company,
    customer: Customer,
    items,
    invoice_date=None,
    due_date=None,
    notes: str = "",
    post: bool = False,
    user=None,
) -> SalesInvoice:
    if customer.company_id != company.pk:
        raise InvoiceError("Customer does not belong to this company")
    if not customer.is_active:
        raise InvoiceError(f"Customer {customer.customer_code} is inactive")

    items = [dict(row) for row in items or []]
    for idx, row in enumerate(items, start=1):
        item = row.get("item")
        if item is not None and item.company_id != company.pk:
            raise InvoiceError(f"Line {idx}: item does not belong to this company")
        _resolve_unit_price(idx, row)

    try:
        priced, totals = price_lines(items)
    except SalesError as exc:
        raise InvoiceError(str(exc)) from exc
    if totals.total <= ZERO:
        raise InvoiceError("Invoice total must be greater than zero")

    invoice_date = invoice_date or timezone.localdate()
    invoice = SalesInvoice.objects.create(
        company=company,
        invoice_number=next_invoice_number(company),
        customer=customer,
        invoice_date=invoice_date,
        due_date=due_date or default_due_date(invoice_date),
        subtotal=totals.subtotal,
        discount_amount=totals.discount,
        tax_amount=totals.tax,
        total_amount=totals.total,
        notes=notes or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    SalesInvoiceItem.objects.bulk_create(
        [
            SalesInvoiceItem(
                invoice=invoice,
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

    if post:
        invoice = issue_invoice(invoice=invoice, user=user)
    return invoice


@transaction.atomic
def issue_invoice(*, invoice: SalesInvoice, user=None) -> SalesInvoice:
    invoice = _lock_invoice(invoice)
    if invoice.status != SalesInvoice.STATUS_DRAFT:
        logger.warning("Invoice issue refused number=%s status=%s", invoice.invoice_number, invoice.status)
        raise InvoiceStateError(f"Only draft invoices can be issued (status={invoice.status})")

    company = invoice.company
    lines = list(invoice.items.select_related("item", "item__inventory_account"))

    # Check every line before touching stock so the error names the first short item.
    needed = defaultdict(lambda: ZERO)
    for line in lines:
        if line.item is not None:
            needed[line.item] += line.quantity
    for item, qty in needed.items():
        item.refresh_from_db(fields=["quantity_on_hand"])
        if qty > item.quantity_on_hand:
            raise InsufficientStockError(
                f"Insufficient stock for {item.sku}: requested {qty}, available {item.quantity_on_hand}"
            )

    cost_by_account = defaultdict(lambda: ZERO)
    cogs_total = ZERO
    for line in lines:
        if line.item is None:
            continue
        movement = consume_stock(
            item=line.item,
            quantity=line.quantity,
            movement_type=StockMovement.MovementType.SALE,
            reference=invoice.invoice_number,
            user=user,
        )
        line.unit_cost = movement.unit_cost_snapshot
        line.save(update_fields=["unit_cost"])

        cost = q2(line.quantity * movement.unit_cost_snapshot)
        cogs_total += cost
        cost_by_account[line.item.inventory_account] += cost

    voucher_lines = [
        {
            "account": get_account_by_role(company, Account.ACCOUNTS_RECEIVABLE),
            "debit": invoice.total_amount,
            "payee": invoice.customer.name,
        },
        {"account": get_account_by_role(company, Account.SALES_REVENUE), "credit": invoice.subtotal},
    ]
    if invoice.discount_amount > ZERO:
        voucher_lines.append(
            {"account": get_account_by_role(company, Account.SALES_DISCOUNT), "debit": invoice.discount_amount}
        )
    if invoice.tax_amount > ZERO:
        voucher_lines.append(
            {"account": get_account_by_role(company, Account.VAT_PAYABLE), "credit": invoice.tax_amount}
        )
    if cogs_total > ZERO:
        voucher_lines.append({"account": get_account_by_role(company, Account.COGS), "debit": q2(cogs_total)})
        for account, cost in cost_by_account.items():
            if cost > ZERO:
                voucher_lines.append({"account": account, "credit": q2(cost)})

    voucher = post_system_voucher(
        company=company,
        entry_date=invoice.invoice_date,
        narration=f"Sales invoice {invoice.invoice_number} - {invoice.customer.name}",
        source=JournalVoucher.SOURCE_SALES_INVOICE,
        reference_type="SALES_INVOICE",
        reference_id=invoice.pk,
        created_by=user,
        lines=voucher_lines,
    )

    invoice.status = SalesInvoice.STATUS_ISSUED
    invoice.journal_voucher = voucher
    invoice.amount_paid = ZERO
    invoice.amount_due = invoice.total_amount
    invoice.save()

    logger.info(
        "Invoice issued company=%s number=%s total=%s cogs=%s",
        company.pk,
        invoice.invoice_number,
        invoice.total_amount,
        cogs_total,
    )
    return invoice


@transaction.atomic
def cancel_invoice(*, invoice: SalesInvoice, user=None, cancel_date=None) -> SalesInvoice:
    invoice = _lock_invoice(invoice)
    if invoice.status != SalesInvoice.STATUS_ISSUED or invoice.amount_paid > ZERO:
        logger.warning("Invoice cancel refused number=%s status=%s", invoice.invoice_number, invoice.status)
        raise InvoiceStateError("Only issued invoices with no payments can be cancelled")
    if invoice.credit_notes.filter(status=CreditNote.STATUS_POSTED).exists():
        raise InvoiceStateError("Invoices with posted credit notes cannot be cancelled")

    reversal = reverse_voucher(
        voucher=invoice.journal_voucher,
        user=user,
        entry_date=cancel_date,
        narration=f"Cancellation of sales invoice {invoice.invoice_number}",
    )

    for line in invoice.items.select_related("item"):
        if line.item is None:
            continue
        receive_stock(
            item=line.item,
            quantity=line.quantity,
            unit_cost=line.unit_cost or 0,
            movement_type=StockMovement.MovementType.SALE_REVERSAL,
            reference=invoice.invoice_number,
            user=user,
        )

    invoice.status = SalesInvoice.STATUS_CANCELLED
    invoice.reversal_voucher = reversal
    invoice.amount_due = ZERO
    invoice.save()

    logger.info("Invoice cancelled company=%s number=%s", invoice.company_id, invoice.invoice_number)
    return invoice
