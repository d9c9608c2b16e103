# sales/services/receivables_service.py

"""
RECEIVABLES REPORTS (document-based, not ledger-based)

AR aging:
    open invoices (ISSUED / PARTIAL) with amount_due > 0
    days overdue = as_of - due_date
    buckets: Current (<=0), 1-30, 31-60, 61-90, 91+

Customer statement:
    opening balance before `start`, then invoices (debit), payments and
    posted credit notes (credit) in date order with a running balance.
    Cancelled invoices are left out: their voucher was reversed.
"""

from __future__ import annotations

from collections import OrderedDict

from django.db.models import Sum
from django.utils import timezone

from accounting.services.money import ZERO, amount_pair, q2
from sales.models import CreditNote, CustomerPayment, SalesInvoice

BUCKETS = ("current", "1_30", "31_60", "61_90", "91_plus")
BUCKET_LABELS = {
    "current": "Current",
    "1_30": "1-30",
    "31_60": "31-60",
    "61_90": "61-90",
    "91_plus": "91+",
}

STATEMENT_INVOICE_STATUSES = (
    SalesInvoice.STATUS_ISSUED,
    SalesInvoice.STATUS_PARTIAL,
    SalesInvoice.STATUS_PAID,
)


def bucket_for(days_overdue: int) -> str:
    if days_overdue <= 0:
        return "current"
    if days_overdue <= 30:
        return "1_30"
    if days_overdue <= 60:
        return "31_60"
    if days_overdue <= 90:
        return "61_90"
    return "91_plus"


def _bucket_amounts(values: dict) -> dict:
    out = {}
    for key in BUCKETS:
        out.update(amount_pair(values[key], key))
    return out


def ar_aging(*, company, as_of=None) -> dict:
    as_of = as_of or timezone.localdate()

    invoices = (
        SalesInvoice.objects.filter(
            company=company,
            status__in=SalesInvoice.OPEN_STATUSES,
            amount_due__gt=0,
            invoice_date__lte=as_of,
        )
        .select_related("customer")
        .order_by("customer__name", "due_date", "id")
    )

    per_customer: "OrderedDict[int, dict]" = OrderedDict()
    totals = {key: ZERO for key in BUCKETS}

    for inv in invoices:
        days = (as_of - inv.due_date).days
        bucket = bucket_for(days)

        row = per_customer.setdefault(
            inv.customer_id,
            {
                "customer": inv.customer,
                "amounts": {key: ZERO for key in BUCKETS},
                "invoices": [],
            },
        )
        row["amounts"][bucket] += inv.amount_due
        row["invoices"].append(
            {
                "invoice_id": inv.id,
                "invoice_number": inv.invoice_number,
                "invoice_date": inv.invoice_date.isoformat(),
                "due_date": inv.due_date.isoformat(),
                "days_overdue": max(days, 0),
                "bucket": BUCKET_LABELS[bucket],
                **amount_pair(inv.amount_due, "amount_due"),
            }
        )
        totals[bucket] += inv.amount_due

    customers = []
    for row in per_customer.values():
        customer = row["customer"]
        customer_total = q2(sum(row["amounts"].values(), ZERO))
        customers.append(
            {
                "customer_id": customer.id,
                "customer_code": customer.customer_code,
                "customer_name": customer.name,
                **_bucket_amounts(row["amounts"]),
                **amount_pair(customer_total, "total"),
                "invoices": row["invoices"],
            }
        )

    grand_total = q2(sum(totals.values(), ZERO))
    return {
        "as_of": as_of.isoformat(),
        "buckets": [BUCKET_LABELS[key] for key in BUCKETS],
        "customers": customers,
        "totals": {**_bucket_amounts(totals), **amount_pair(grand_total, "total")},
    }


def _opening_voucher_date(customer):
    voucher = customer.opening_balance_voucher
    return voucher.entry_date if voucher else None


def customer_statement(*, customer, start_date, end_date) -> dict:
    invoices = SalesInvoice.objects.filter(customer=customer, status__in=STATEMENT_INVOICE_STATUSES)
    payments = CustomerPayment.objects.filter(customer=customer)
    credits = CreditNote.objects.filter(customer=customer, status=CreditNote.STATUS_POSTED)

    opening = ZERO
    ob_date = _opening_voucher_date(customer)
    if ob_date and ob_date < start_date:
        opening += customer.opening_balance
    opening += invoices.filter(invoice_date__lt=start_date).aggregate(t=Sum("total_amount"))["t"] or ZERO
    opening -= payments.filter(payment_date__lt=start_date).aggregate(t=Sum("amount"))["t"] or ZERO
    opening -= credits.filter(credit_date__lt=start_date).aggregate(t=Sum("total_amount"))["t"] or ZERO
    opening = q2(opening)

    entries = []
    if ob_date and start_date <= ob_date <= end_date:
        entries.append((ob_date, 0, 0, "opening_balance", "Opening balance", customer.opening_balance, ZERO))
    for inv in invoices.filter(invoice_date__range=(start_date, end_date)):
        entries.append((inv.invoice_date, 1, inv.id, "invoice", inv.invoice_number, inv.total_amount, ZERO))
    for pay in payments.filter(payment_date__range=(start_date, end_date)):
        entries.append((pay.payment_date, 2, pay.id, "payment", pay.payment_number, ZERO, pay.amount))
    for cn in credits.filter(credit_date__range=(start_date, end_date)):
        entries.append((cn.credit_date, 3, cn.id, "credit_note", cn.credit_note_number, ZERO, cn.total_amount))
    entries.sort(key=lambda e: (e[0], e[1], e[2]))

    running = opening
    rows = []
    for entry_date, _, doc_id, doc_type, number, debit, credit in entries:
        running = q2(running + debit - credit)
        rows.append(
            {
                "date": entry_date.isoformat(),
                "type": doc_type,
                "document_id": doc_id or None,
                "number": number,
                **amount_pair(debit, "debit"),
                **amount_pair(credit, "credit"),
                **amount_pair(running, "balance"),
            }
        )

    return {
        "customer_id": customer.id,
        "customer_code": customer.customer_code,
        "customer_name": customer.name,
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        **amount_pair(opening, "opening_balance"),
        "lines": rows,
        **amount_pair(running, "closing_balance"),
    }
