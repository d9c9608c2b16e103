# PATH: accounting/services/income_service.py

"""
OTHER INCOME SERVICE

Lifecycle: draft -> posted

Accounting effect on post:
- Dr payment_account (cash / bank, must be ASSET)
- Cr income_account  (must be REVENUE)

Only drafts can be updated, deleted or posted. Changing the income date
of a draft re-mints its number for the new day.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from accounting.models.account import Account
from accounting.models.income import OtherIncome
from accounting.models.journal import JournalVoucher
from accounting.services.account_resolver import get_account_by_role
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_voucher_service import post_system_voucher
from accounting.services.money import ZERO, money
from accounting.services.numbering import next_sequence_number

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "income_date",
    "amount",
    "income_account",
    "payment_account",
    "payment_method",
    "received_from",
    "description",
)

DEFAULT_PAYMENT_ROLES = {
    OtherIncome.PAYMENT_CASH: Account.CASH,
    OtherIncome.PAYMENT_BANK: Account.BANK,
    OtherIncome.PAYMENT_TRANSFER: Account.BANK,
    OtherIncome.PAYMENT_CHEQUE: Account.BANK,
}


class IncomeError(ValueError):
    pass


class IncomeStateError(IncomeError):
    pass


def next_income_number(company, income_date) -> str:
    return next_sequence_number(
        company=company,
        queryset=OtherIncome.objects.filter(company=company),
        field="income_number",
        prefix=f"INC-{income_date:%Y%m%d}-",
        width=4,
    )


def _require_draft(income: OtherIncome, action: str) -> None:
    if income.status != OtherIncome.STATUS_DRAFT:
        logger.warning("Income %s refused number=%s status=%s", action, income.income_number, income.status)
        raise IncomeStateError(f"Only draft incomes can be {action}")


def _resolve_payment_account(company, payment_method: str, payment_account: Account | None) -> Account:
    if payment_account is not None:
        return payment_account
    role = DEFAULT_PAYMENT_ROLES.get(payment_method)
    if role is None:
        raise IncomeError(f"Unsupported payment_method: {payment_method}")
    try:
        return get_account_by_role(company, role)
    except AccountingServiceError as exc:
        raise IncomeError(str(exc)) from exc


def _positive(amount):
    amount = money(amount)
    if amount <= ZERO:
        raise IncomeError("Income amount must be > 0")
    return amount


@transaction.atomic
def create_income(
    *,
    company,
    income_date,
    amount,
    income_account: Account,
    payment_method: str = OtherIncome.PAYMENT_CASH,
    payment_account: Account | None = None,
    received_from: str = "",
    description: str = "",
    user=None,
) -> OtherIncome:
    amount = _positive(amount)

    try:
        income = OtherIncome.objects.create(
            company=company,
            income_number=next_income_number(company, income_date),
            income_date=income_date,
            amount=amount,
            income_account=income_account,
            payment_account=_resolve_payment_account(company, payment_method, payment_account),
            payment_method=payment_method,
            received_from=received_from or "",
            description=description or "",
            created_by=user if getattr(user, "is_authenticated", False) else None,
        )
    except ValidationError as exc:
        raise IncomeError("; ".join(exc.messages)) from exc

    logger.info("Income recorded company=%s number=%s amount=%s", company.pk, income.income_number, amount)
    return income


@transaction.atomic
def update_income(*, income: OtherIncome, **changes) -> OtherIncome:
    income = OtherIncome.objects.select_for_update().select_related("company").get(pk=income.pk)
    _require_draft(income, "updated")

    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise IncomeError(f"Fields cannot be changed: {', '.join(sorted(unknown))}")

    if "amount" in changes:
        changes["amount"] = _positive(changes["amount"])
    new_date = changes.get("income_date")
    if new_date is not None and new_date != income.income_date:
        income.income_number = next_income_number(income.company, new_date)

    for field, value in changes.items():
        setattr(income, field, value)

    try:
        income.save()
    except ValidationError as exc:
        raise IncomeError("; ".join(exc.messages)) from exc
    return income


@transaction.atomic
def delete_income(*, income: OtherIncome) -> None:
    income = OtherIncome.objects.select_for_update().get(pk=income.pk)
    _require_draft(income, "deleted")
    number = income.income_number
    income.delete()
    logger.info("Income deleted company=%s number=%s", income.company_id, number)


@transaction.atomic
def post_income(*, income: OtherIncome, user=None) -> OtherIncome:
    income = (
        OtherIncome.objects.select_for_update()
        .select_related("company", "income_account", "payment_account")
        .get(pk=income.pk)
    )
    _require_draft(income, "posted")

    # Accounts may have been retyped since the draft was saved
    try:
        income.full_clean()
    except ValidationError as exc:
        raise IncomeError("; ".join(exc.messages)) from exc

    narration = income.description or f"Income: {income.income_account.name}"
    try:
        voucher = post_system_voucher(
            company=income.company,
            entry_date=income.income_date,
            narration=f"{income.income_number} {narration}",
            lines=[
                {
                    "account": income.payment_account,
                    "debit": income.amount,
                    "payee": income.received_from,
                    "description": narration,
                },
                {
                    "account": income.income_account,
                    "credit": income.amount,
                    "payee": income.received_from,
                    "description": narration,
                },
            ],
            source=JournalVoucher.SOURCE_OTHER_INCOME,
            reference_type="OTHER_INCOME",
            reference_id=income.pk,
            created_by=user,
        )
    except AccountingServiceError as exc:
        raise IncomeError(str(exc)) from exc

    income.journal_voucher = voucher
    income.status = OtherIncome.STATUS_POSTED
    income.save()

    logger.info("Income posted number=%s amount=%s voucher=%s", income.income_number, income.amount, voucher.voucher_number)
    return income
