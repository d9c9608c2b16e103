# PATH: accounting/services/expense_service.py

"""
EXPENSE SERVICE

Lifecycle: draft -> posted

Accounting effect on post:
- Dr expense_account
- Cr payment_account (cash / bank / accounts payable)

Only drafts can be updated, deleted or posted.
"""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction

from accounting.models.account import Account
from accounting.models.expense import Expense
from accounting.models.journal import JournalVoucher
from accounting.services.account_resolver import get_account_by_role
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_voucher_service import post_system_voucher
from accounting.services.money import ZERO, money

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "expense_date",
    "amount",
    "expense_account",
    "payment_account",
    "payment_method",
    "payee",
    "description",
)

DEFAULT_PAYMENT_ROLES = {
    Expense.PAYMENT_CASH: Account.CASH,
    Expense.PAYMENT_BANK: Account.BANK,
    Expense.PAYMENT_CREDIT: Account.ACCOUNTS_PAYABLE,
}


class ExpenseError(ValueError):
    pass


class ExpenseStateError(ExpenseError):
    pass


def _require_draft(expense: Expense, action: str) -> None:
    if expense.status != Expense.STATUS_DRAFT:
        logger.warning("Expense %s refused id=%s status=%s", action, expense.pk, expense.status)
        raise ExpenseStateError(f"Only draft expenses can be {action}")


def _resolve_payment_account(company, payment_method: str, payment_account: Account | None) -> Account:
    if payment_account is not None:
        return payment_account
    role = DEFAULT_PAYMENT_ROLES.get(payment_method)
    if role is None:
        raise ExpenseError(f"Unsupported payment_method: {payment_method}")
    try:
        return get_account_by_role(company, role)
    except AccountingServiceError as exc:
        raise ExpenseError(str(exc)) from exc


@transaction.atomic
def create_expense(
    *,
    company,
    expense_date,
    amount,
    expense_account: Account,
    payment_method: str = Expense.PAYMENT_CASH,
    payment_account: Account | None = None,
    payee: str = "",
    description: str = "",
    user=None,
) -> Expense:
    amount = money(amount)
    if amount <= ZERO:
        raise ExpenseError("Expense amount must be > 0")

    try:
        expense = Expense.objects.create(
            company=company,
            expense_date=expense_date,
            amount=amount,
            expense_account=expense_account,
            payment_account=_resolve_payment_account(company, payment_method, payment_account),
            payment_method=payment_method,
            payee=payee or "",
            description=description or "",
            created_by=user if getattr(user, "is_authenticated", False) else None,
        )
    except ValidationError as exc:
        raise ExpenseError("; ".join(exc.messages)) from exc

    return expense


@transaction.atomic
def update_expense(*, expense: Expense, **changes) -> Expense:
    expense = Expense.objects.select_for_update().get(pk=expense.pk)
    _require_draft(expense, "updated")

    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ExpenseError(f"Fields cannot be changed: {', '.join(sorted(unknown))}")

    for field, value in changes.items():
        if field == "amount":
            value = money(value)
            if value <= ZERO:
                raise ExpenseError("Expense amount must be > 0")
        setattr(expense, field, value)

    try:
        expense.save()
    except ValidationError as exc:
        raise ExpenseError("; ".join(exc.messages)) from exc
    return expense


@transaction.atomic
def delete_expense(*, expense: Expense) -> None:
    expense = Expense.objects.select_for_update().get(pk=expense.pk)
    _require_draft(expense, "deleted")
    expense.delete()


@transaction.atomic
def post_expense(*, expense: Expense, user=None) -> Expense:
    expense = (
        Expense.objects.select_for_update()
        .select_related("company", "expense_account", "payment_account")
        .get(pk=expense.pk)
    )
    _require_draft(expense, "posted")

    narration = expense.description or f"Expense: {expense.expense_account.name}"
    try:
        voucher = post_system_voucher(
            company=expense.company,
            entry_date=expense.expense_date,
            narration=narration,
            lines=[
                {
                    "account": expense.expense_account,
                    "debit": expense.amount,
                    "payee": expense.payee,
                    "description": narration,
                },
                {
                    "account": expense.payment_account,
                    "credit": expense.amount,
                    "payee": expense.payee,
                    "description": narration,
                },
            ],
            source=JournalVoucher.SOURCE_EXPENSE,
            reference_type="EXPENSE",
            reference_id=expense.pk,
            created_by=user,
        )
    except AccountingServiceError as exc:
        raise ExpenseError(str(exc)) from exc

    expense.journal_voucher = voucher
    expense.status = Expense.STATUS_POSTED
    expense.save()

    logger.info("Expense posted id=%s amount=%s voucher=%s", expense.pk, expense.amount, voucher.voucher_number)
    return expense
