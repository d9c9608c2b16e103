# accounting/services/general_ledger_service.py

"""
GENERAL LEDGER + ACCOUNT STATEMENT

General ledger (date range, optional account):
    per account: opening balance (before start), lines with running balance, closing balance

Account statement (account code, from, to):
    opening balance before `from` on the account's normal side,
    transactions in the period, closing balance

Running balances are on the account's normal side
(ASSET/EXPENSE: debit - credit; others: credit - debit).
"""

from __future__ import annotations

from datetime import timedelta

from accounting.models.account import Account
from accounting.services.account_resolver import get_account_by_code
from accounting.services.ledger import ledger_lines_between, signed_balance, sum_debit_credit
from accounting.services.money import ZERO, q2, to_major_number, to_minor_int


def _opening_balance(company, account, start_date):
    if start_date is None:
        return ZERO
    debit, credit = sum_debit_credit(
        ledger_lines_between(company, end_date=start_date - timedelta(days=1)).filter(account=account)
    )
    return q2(signed_balance(account, debit, credit))


def _account_ledger(company, account, start_date, end_date) -> dict:
    opening = _opening_balance(company, account, start_date)

    lines = (
        ledger_lines_between(company, start_date=start_date, end_date=end_date)
        .filter(account=account)
        .select_related("voucher")
        .order_by("voucher__entry_date", "voucher_id", "line_order", "id")
    )

    running = opening
    rows = []
    total_debit = ZERO
    total_credit = ZERO
    for line in lines:
        running = q2(running + signed_balance(account, line.debit, line.credit))
        total_debit += line.debit
        total_credit += line.credit
        rows.append(
            {
                "line_id": line.id,
                "date": line.voucher.entry_date.isoformat(),
                "voucher_id": line.voucher_id,
                "voucher_number": line.voucher.voucher_number,
                "source": line.voucher.source,
                "narration": line.voucher.narration,
                "description": line.description,
                "payee": line.payee,
                "debit": to_major_number(line.debit),
                "credit": to_major_number(line.credit),
                "balance": to_major_number(running),
                "balance_minor": to_minor_int(running),
            }
        )

    return {
        "account_id": account.id,
        "account_code": account.code,
        "account_name": account.name,
        "account_type": account.account_type,
        "opening_balance": to_major_number(opening),
        "opening_balance_minor": to_minor_int(opening),
        "lines": rows,
        "total_debit": to_major_number(total_debit),
        "total_credit": to_major_number(total_credit),
        "closing_balance": to_major_number(running),
        "closing_balance_minor": to_minor_int(running),
    }


def get_general_ledger(*, company, start_date=None, end_date=None, account: Account | None = None) -> dict:
    if account is not None:
        accounts = [account]
    else:
        touched = (
            ledger_lines_between(company, end_date=end_date)
            .values_list("account_id", flat=True)
            .distinct()
        )
        accounts = list(Account.objects.filter(company=company, pk__in=touched).order_by("code"))

    ledgers = [_account_ledger(company, acc, start_date, end_date) for acc in accounts]
    ledgers = [l for l in ledgers if l["lines"] or l["opening_balance_minor"] != 0]

    return {
        "start_date": start_date.isoformat() if start_date else None,
        "end_date": end_date.isoformat() if end_date else None,
        "accounts": ledgers,
    }


def get_account_statement(*, company, account_code: str, start_date, end_date) -> dict:
    account = get_account_by_code(company, account_code)
    ledger = _account_ledger(company, account, start_date, end_date)
    ledger["start_date"] = start_date.isoformat() if start_date else None
    ledger["end_date"] = end_date.isoformat() if end_date else None
    return ledger
