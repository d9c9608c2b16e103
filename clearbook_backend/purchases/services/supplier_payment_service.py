# purchases/services/supplier_payment_service.py

"""
======================================================
PATH: purchases/services/supplier_payment_service.py
======================================================
SUPPLIER PAYMENTS (WHT-aware)

pay_supplier settles approved invoices of ONE supplier:
    gross = SUM(allocations)     (an allocation without amount takes the full outstanding)
    wht   = gross * wht_rate / 100
    net   = gross - wht

    Dr ACCOUNTS_PAYABLE   gross
    Cr WHT_PAYABLE        wht     (skipped when zero)
    Cr bank account       net

Each invoice moves to Paid once fully settled, otherwise Partially Paid.

run_payment_schedule pays several suppliers from one bank account at one
WHT rate inside a single transaction; any failure rolls the whole run back.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.services.account_resolver import get_account_by_role, get_payable_account
from accounting.services.journal_voucher_service import post_system_voucher
from accounting.services.money import ZERO, money, percent_of, q2
from accounting.services.numbering import next_sequence_number
from purchases.models import Supplier, SupplierInvoice, SupplierPayment, SupplierPaymentAllocation
from purchases.services.supplier_invoice_service import SETTLED_TOLERANCE

logger = logging.getLogger(__name__)


class SupplierPaymentError(ValueError):
    pass


def next_supplier_payment_number(company) -> str:
    return next_sequence_number(
        company=company,
        queryset=SupplierPayment.objects.filter(company=company),
        field="payment_number",
        prefix="SPAY-",
        width=5,
    )


def _wht_rate(value) -> Decimal:
    try:
        rate = Decimal(str(value if value not in (None, "") else "0"))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise SupplierPaymentError("wht_rate must be a valid number") from exc
    if rate < 0 or rate > 100:
        raise SupplierPaymentError("wht_rate must be between 0 and 100")
    return rate


def _check_bank_account(company, bank_account: Account) -> None:
    if bank_account.company_id != company.pk or bank_account.account_type != Account.ASSET:
        raise SupplierPaymentError("bank_account must be an ASSET account of this company")
    if not bank_account.is_active:
        raise SupplierPaymentError(f"Account {bank_account.code} is inactive")


def _plan_allocations(supplier: Supplier, allocations) -> list[tuple[SupplierInvoice, Decimal]]:
    rows = list(allocations or [])
    if not rows:
        raise SupplierPaymentError(f"No invoices selected for {supplier.name}")

    ids = [getattr(row.get("invoice"), "pk", None) for row in rows]
    locked = {
        inv.pk: inv
        for inv in SupplierInvoice.objects.select_for_update().filter(pk__in=[i for i in ids if i is not None])
    }

    plan = []
    seen = set()
    for idx, (row, invoice_id) in enumerate(zip(rows, ids), start=1):
        invoice = locked.get(invoice_id)
        if invoice is None or invoice.supplier_id != supplier.pk:
            raise SupplierPaymentError(f"Line {idx}: invoice does not belong to {supplier.name}")
        if invoice.pk in seen:
            raise SupplierPaymentError(f"Line {idx}: {invoice.invoice_number} appears more than once")
        seen.add(invoice.pk)

        if invoice.status not in SupplierInvoice.PAYABLE_STATUSES:
            raise SupplierPaymentError(f"Line {idx}: {invoice.invoice_number} is {invoice.status.lower()}")

        outstanding = invoice.outstanding
        amount = outstanding if row.get("amount") in (None, "") else money(row.get("amount"))
        if amount <= ZERO:
            raise SupplierPaymentError(f"Line {idx}: amount must be greater than zero")
        if amount > outstanding:
            raise SupplierPaymentError(
                f"Line {idx}: {amount} exceeds the {outstanding} outstanding on {invoice.invoice_number}"
            )
        plan.append((invoice, amount))
    return plan


@transaction.atomic
def pay_supplier(
    *,
    company,
    supplier: Supplier,
    bank_account: Account,
    allocations,
    wht_rate=0,
    payment_date=None,
    narration: str = "",
    user=None,
) -> SupplierPayment:
    if supplier.company_id != company.pk:
        raise SupplierPaymentError("Supplier does not belong to this company")
    _check_bank_account(company, bank_account)
    rate = _wht_rate(wht_rate)

    plan = _plan_allocations(supplier, allocations)
    gross = q2(sum((amount for _, amount in plan), ZERO))
    wht = percent_of(gross, rate)
    net = q2(gross - wht)

    payment_date = payment_date or timezone.localdate()
    narration = (narration or "").strip() or f"Payment to {supplier.name}"
    payment = SupplierPayment.objects.create(
        company=company,
        payment_number=next_supplier_payment_number(company),
        supplier=supplier,
        payment_date=payment_date,
        bank_account=bank_account,
        gross_amount=gross,
        wht_rate=rate,
        wht_amount=wht,
        net_amount=net,
        narration=narration[:255],
        created_by=user if getattr(user, "is_authenticated", False) else None,
    )

    lines = [{"account": get_payable_account(company), "debit": gross, "payee": supplier.name, "description": narration}]
    if wht > ZERO:
        lines.append(
            {
                "account": get_account_by_role(company, Account.WHT_PAYABLE),
                "credit": wht,
                "payee": supplier.name,
                "description": f"WHT {rate}% on {payment.payment_number}",
            }
        )
    lines.append({"account": bank_account, "credit": net, "payee": supplier.name, "description": narration})

    payment.journal_voucher = post_system_voucher(
        company=company,
        entry_date=payment_date,
        narration=f"{payment.payment_number} {narration}",
        source=JournalVoucher.SOURCE_SUPPLIER_PAYMENT,
        reference_type="SUPPLIER_PAYMENT",
        reference_id=payment.pk,
        created_by=user,
        lines=lines,
    )
    payment.save(update_fields=["journal_voucher"])

    for invoice, amount in plan:
        SupplierPaymentAllocation.objects.create(payment=payment, invoice=invoice, amount=amount)
        invoice.amount_paid = q2(invoice.amount_paid + amount)
        if invoice.total_amount - invoice.amount_paid < SETTLED_TOLERANCE:
            invoice.status = SupplierInvoice.STATUS_PAID
        else:
            invoice.status = SupplierInvoice.STATUS_PARTIALLY_PAID
        invoice.save(update_fields=["amount_paid", "status", "updated_at"])

    logger.info(
        "Supplier paid company=%s number=%s supplier=%s gross=%s wht=%s net=%s",
        company.pk,
        payment.payment_number,
        supplier.supplier_code,
        gross,
        wht,
        net,
    )
    return payment


@transaction.atomic
def run_payment_schedule(
    *,
    company,
    bank_account: Account,
    schedule,
    wht_rate=0,
    payment_date=None,
    user=None,
) -> list[SupplierPayment]:
    """
    schedule = [{"supplier": <Supplier>, "allocations": [...], "narration": str}, ...]
    One SupplierPayment (and one voucher) per supplier.
    """
    rows = list(schedule or [])
    if not rows:
        raise SupplierPaymentError("The payment schedule is empty")

    suppliers = [row.get("supplier") for row in rows]
    if len({getattr(s, "pk", None) for s in suppliers}) != len(suppliers):
        raise SupplierPaymentError("Each supplier may appear only once in a payment schedule")

    payments = [
        pay_supplier(
            company=company,
            supplier=row["supplier"],
            bank_account=bank_account,
            allocations=row.get("allocations"),
            wht_rate=wht_rate,
            payment_date=payment_date,
            narration=row.get("narration", ""),
            user=user,
        )
        for row in rows
    ]

    logger.info(
        "Payment schedule run company=%s payments=%s total_gross=%s",
        company.pk,
        len(payments),
        q2(sum((p.gross_amount for p in payments), ZERO)),
    )
    return payments
