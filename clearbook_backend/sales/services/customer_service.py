# sales/services/customer_service.py

"""
CUSTOMER MASTER

- customer_code is CUS-{seq:05d}, per company
- Opening balance posts ONCE:
      Dr ACCOUNTS_RECEIVABLE / Cr OPENING_BALANCE_EQUITY
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from accounting.models.journal import JournalVoucher
from accounting.services.account_resolver import (
    get_opening_balance_equity_account,
    get_receivable_account,
)
from accounting.services.journal_voucher_service import post_system_voucher
from accounting.services.money import ZERO, money
from accounting.services.numbering import next_sequence_number
from sales.models import Customer
from sales.services.exceptions import CustomerError

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "email", "phone", "address", "credit_limit", "payment_terms_days", "is_active")


def next_customer_code(company) -> str:
    return next_sequence_number(
        company=company,
        queryset=Customer.objects.filter(company=company),
        field="customer_code",
        prefix="CUS-",
        width=5,
    )


@transaction.atomic
def create_customer(*, company, name: str, **fields) -> Customer:
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise CustomerError(f"Unknown fields: {', '.join(sorted(unknown))}")

    try:
        customer = Customer.objects.create(
            company=company,
            customer_code=next_customer_code(company),
            name=name,
            **fields,
        )
    except ValidationError as exc:
        raise CustomerError("; ".join(exc.messages)) from exc

    logger.info("Customer created company=%s code=%s", company.pk, customer.customer_code)
    return customer


@transaction.atomic
def update_customer(*, customer: Customer, **changes) -> Customer:
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise CustomerError(f"Fields cannot be changed: {', '.join(sorted(unknown))}")

    customer = Customer.objects.select_for_update().get(pk=customer.pk)
    for field, value in changes.items():
        setattr(customer, field, value)
    try:
        customer.save()
    except ValidationError as exc:
        raise CustomerError("; ".join(exc.messages)) from exc
    return customer


@transaction.atomic
def set_customer_opening_balance(*, customer: Customer, amount, as_of, user=None) -> Customer:
    customer = Customer.objects.select_for_update().select_related("company").get(pk=customer.pk)
    if customer.opening_balance_voucher_id:
        raise CustomerError(f"Opening balance for {customer.customer_code} has already been posted")

    amount = money(amount)
    if amount <= ZERO:
        raise CustomerError("Opening balance must be greater than zero")

    company = customer.company
    voucher = post_system_voucher(
        company=company,
        entry_date=as_of,
        narration=f"Opening balance {customer.customer_code} - {customer.name}",
        source=JournalVoucher.SOURCE_OPENING_BALANCE,
        reference_type="CUSTOMER_OPENING",
        reference_id=customer.pk,
        created_by=user,
        lines=[
            {"account": get_receivable_account(company), "debit": amount, "payee": customer.name},
            {"account": get_opening_balance_equity_account(company), "credit": amount},
        ],
    )

    customer.opening_balance = amount
    customer.opening_balance_voucher = voucher
    customer.save(update_fields=["opening_balance", "opening_balance_voucher", "updated_at"])

    logger.info("Customer opening balance company=%s code=%s amount=%s", company.pk, customer.customer_code, amount)
    return customer
