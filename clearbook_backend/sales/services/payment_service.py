# sales/services/payment_service.py

"""
======================================================
PATH: sales/services/payment_service.py
======================================================
CUSTOMER PAYMENT ALLOCATION

One receipt, many invoices:
    allocations = [{"invoice": <SalesInvoice>, "amount_applied": Decimal}, ...]

Rules:
- SUM(amount_applied) == payment amount
- every invoice belongs to the paying customer and is ISSUED or PARTIAL
- no allocation exceeds the invoice's amount_due
- an invoice appears at most once per payment

Posting (source=Customer Payment):
    Dr bank/cash account     amount - wht_amount
    Dr WHT_RECEIVABLE        wht_amount (when the customer withheld tax)
    Cr ACCOUNTS_RECEIVABLE   amount
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.services.account_resolver import get_account_by_role, get_receivable_account
from accounting.services.journal_voucher_service import post_system_voucher
from accounting.services.money import ZERO, money, q2
from accounting.services.numbering import next_sequence_number
from sales.models import CustomerPayment, PaymentAllocation, SalesInvoice
from sales.services.exceptions import PaymentAllocationError

logger = logging.getLogger(__name__)


def next_payment_number(company) -> str:
    return next_sequence_number(
        company=company,
        queryset=CustomerPayment.objects.filter(company=company),
        field="payment_number",
        prefix="RCT-",
        width=5,
    )


def settle_invoice(invoice: SalesInvoice, amount) -> SalesInvoice:
    """Reduce amount_due and move the status along. Caller holds the row lock."""
    invoice.amount_due = q2(max(invoice.amount_due - amount, ZERO))
    invoice.status = SalesInvoice.STATUS_PAID if invoice.amount_due == ZERO else SalesInvoice.STATUS_PARTIAL
    return invoice


def _validate_bank_account(company, bank_account: Account) -> None:
    if bank_account.company_id != company.pk:
        raise PaymentAllocationError("Bank account does not belong to this company")
    if bank_account.account_type != Account.ASSET or not bank_account.is_active:
        raise PaymentAllocationError("Payments must be received into an active asset (cash/bank) account")


@transaction.atomic
def allocate_payment(
    *,
    company,
    customer,
    amount,
    bank_account: Account,
    allocations,
    wht_amount=0,
    payment_date=None,
    reference: str = "",
    notes: str = "",
    user=None,
) -> CustomerPayment:
    amount = money(amount)
    if amount <= ZERO:
        raise PaymentAllocationError("Payment amount must be greater than zero")
    wht_amount = money(wht_amount)
    if wht_amount < ZERO or wht_amount >= amount:
        raise PaymentAllocationError("Withholding tax must be at least zero and less than the payment amount")
    if customer.company_id != company.pk:
        raise PaymentAllocationError("Customer does not belong to this company")
    _validate_bank_account(company, bank_account)

    rows = list(allocations or [])
    if not rows:
        raise PaymentAllocationError("At least one invoice allocation is required")

    invoice_ids = [row["invoice"].pk for row in rows]
    if len(set(invoice_ids)) != len(invoice_ids):
        raise PaymentAllocationError("An invoice can only be allocated once per payment")

    locked = {
        inv.pk: inv
        for inv in SalesInvoice.objects.select_for_update().filter(company=company, pk__in=invoice_ids)
    }

    applied_total = ZERO
    plan = []
    for row in rows:
        invoice = locked.get(row["invoice"].pk)
        if invoice is None:
            raise PaymentAllocationError("Invoice does not belong to this company")
        applied = money(row.get("amount_applied"))

        if invoice.customer_id != customer.pk:
            raise PaymentAllocationError(f"Invoice {invoice.invoice_number} belongs to another customer")
        if invoice.status not in SalesInvoice.OPEN_STATUSES:
            raise PaymentAllocationError(
                f"Invoice {invoice.invoice_number} cannot receive payments (status={invoice.status})"
            )
        if applied <= ZERO:
            raise PaymentAllocationError(f"Allocation to {invoice.invoice_number} must be greater than zero")
        if applied > invoice.amount_due:
            raise PaymentAllocationError(
                f"Allocation {applied} exceeds amount due {invoice.amount_due} on {invoice.invoice_number}"
            )
        applied_total += applied
        plan.append((invoice, applied))

    if q2(applied_total) != amount:
        raise PaymentAllocationError(f"Allocations total {q2(applied_total)} but payment amount is {amount}")

    payment_date = payment_date or timezone.localdate()
    payment = CustomerPayment.objects.create(
        company=company,
        payment_number=next_payment_number(company),
        customer=customer,
        payment_date=payment_date,
        amount=amount,
        bank_account=bank_account,
        wht_amount=wht_amount,
        reference=reference or "",
        notes=notes or "",
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    lines = [{"account": bank_account, "debit": q2(amount - wht_amount), "payee": customer.name}]
    if wht_amount > ZERO:
        lines.append(
            {
                "account": get_account_by_role(company, Account.WHT_RECEIVABLE),
                "debit": wht_amount,
                "payee": customer.name,
                "description": f"WHT deducted by {customer.name}",
            }
        )
    lines.append({"account": get_receivable_account(company), "credit": amount, "payee": customer.name})

    voucher = post_system_voucher(
        company=company,
        entry_date=payment_date,
        narration=f"Customer payment {payment.payment_number} - {customer.name}",
        source=JournalVoucher.SOURCE_CUSTOMER_PAYMENT,
        reference_type="CUSTOMER_PAYMENT",
        reference_id=payment.pk,
        created_by=user,
        lines=lines,
    )
    payment.journal_voucher = voucher
    payment.save(update_fields=["journal_voucher"])

    for invoice, applied in plan:
        PaymentAllocation.objects.create(payment=payment, invoice=invoice, amount_applied=applied)
        invoice.amount_paid = q2(invoice.amount_paid + applied)
        settle_invoice(invoice, applied)
        invoice.save()

    logger.info(
        "Customer payment company=%s number=%s customer=%s amount=%s invoices=%s",
        company.pk,
        payment.payment_number,
        customer.customer_code,
        amount,
        len(plan),
    )
    return payment
