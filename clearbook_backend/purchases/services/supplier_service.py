# purchases/services/supplier_service.py

"""
SUPPLIER MASTER

- supplier_code is SUP-{seq:05d}, per company
- Opening balance posts ONCE:
      Dr OPENING_BALANCE_EQUITY / Cr ACCOUNTS_PAYABLE
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from accounting.models.journal import JournalVoucher
from accounting.services.account_resolver import get_opening_balance_equity_account, get_payable_account
from accounting.services.journal_voucher_service import post_system_voucher
from accounting.services.money import ZERO, money
from accounting.services.numbering import next_sequence_number
from purchases.models import Supplier

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "email", "phone", "address", "is_active")


class SupplierError(ValueError):
    pass


def next_supplier_code(company) -> str:
    return next_sequence_number(
        company=company,
        queryset=Supplier.objects.filter(company=company),
        field="supplier_code",
        prefix="SUP-",
        width=5,
    )


@transaction.atomic
def create_supplier(*, company, name: str, **fields) -> Supplier:
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise SupplierError(f"Unknown fields: {', '.join(sorted(unknown))}")
    if not (name or "").strip():
        raise SupplierError("Supplier name is required")

    try:
        supplier = Supplier(company=company, supplier_code=next_supplier_code(company), name=name.strip(), **fields)
        supplier.full_clean()
        supplier.save()
    except ValidationError as exc:
        raise SupplierError("; ".join(exc.messages)) from exc

    logger.info("Supplier created company=%s code=%s", company.pk, supplier.supplier_code)
    return supplier


@transaction.atomic
def update_supplier(*, supplier: Supplier, **changes) -> Supplier:
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise SupplierError(f"Fields cannot be changed: {', '.join(sorted(unknown))}")

    supplier = Supplier.objects.select_for_update().get(pk=supplier.pk)
    for field, value in changes.items():
        setattr(supplier, field, value)
    try:
        supplier.full_clean()
    except ValidationError as exc:
        raise SupplierError("; ".join(exc.messages)) from exc
    supplier.save()
    return supplier


@transaction.atomic
def set_supplier_opening_balance(*, supplier: Supplier, amount, as_of, user=None) -> Supplier:
    supplier = Supplier.objects.select_for_update().select_related("company").get(pk=supplier.pk)
    if supplier.opening_balance_voucher_id:
        raise SupplierError(f"Opening balance for {supplier.supplier_code} has already been posted")

    amount = money(amount)
    if amount <= ZERO:
        raise SupplierError("Opening balance must be greater than zero")

    company = supplier.company
    voucher = post_system_voucher(
        company=company,
        entry_date=as_of,
        narration=f"Opening balance {supplier.supplier_code} - {supplier.name}",
        source=JournalVoucher.SOURCE_OPENING_BALANCE,
        reference_type="SUPPLIER_OPENING",
        reference_id=supplier.pk,
        created_by=user,
        lines=[
            {"account": get_opening_balance_equity_account(company), "debit": amount},
            {"account": get_payable_account(company), "credit": amount, "payee": supplier.name},
        ],
    )

    supplier.opening_balance = amount
    supplier.opening_balance_voucher = voucher
    supplier.save(update_fields=["opening_balance", "opening_balance_voucher", "updated_at"])

    logger.info("Supplier opening balance company=%s code=%s amount=%s", company.pk, supplier.supplier_code, amount)
    return supplier
