# accounting/services/income_statement_service.py

"""
INCOME STATEMENT (date range)

Sections:
- revenue:            REVENUE accounts, credit - debit
- cost_of_sales:      EXPENSE accounts with the COGS system role or a code starting with "5"
- operating_expenses: every other EXPENSE account, debit - credit

gross_profit = revenue - cost_of_sales
net_income   = gross_profit - operating_expenses

Each line carries percent_of_revenue (0 when revenue is 0).

Note:
- Period-close vouchers are excluded so a closed period still reports its activity.
"""

from __future__ import annotations

from decimal import Decimal

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.services.ledger import ledger_lines_between, totals_by_account
from accounting.services.money import ZERO, q2, to_major_number, to_minor_int


def is_cost_of_sales(account: Account) -> bool:
    return account.system_role == Account.COGS or account.code.startswith("5")


def _percent(amount: Decimal, revenue: Decimal) -> float:
    if revenue == ZERO:
        return 0.0
    return float(q2(amount * Decimal("100") / revenue))


def get_income_statement(*, company, start_date=None, end_date=None) -> dict:
    qs = (
        ledger_lines_between(company, start_date=start_date, end_date=end_date)
        .filter(account__account_type__in=[Account.REVENUE, Account.EXPENSE])
        .exclude(voucher__source=JournalVoucher.SOURCE_PERIOD_CLOSE)
    )
    totals = totals_by_account(qs)
    accounts = Account.objects.in_bulk(list(totals))

    revenue_rows, cogs_rows, expense_rows = [], [], []
    for account_id, (debit, credit) in totals.items():
        acc = accounts[account_id]
        if acc.account_type == Account.REVENUE:
            revenue_rows.append((acc, q2(credit - debit)))
        elif is_cost_of_sales(acc):
            cogs_rows.append((acc, q2(debit - credit)))
        else:
            expense_rows.append((acc, q2(debit - credit)))

    total_revenue = q2(sum((amt for _, amt in revenue_rows), ZERO))
    total_cogs = q2(sum((amt for _, amt in cogs_rows), ZERO))
    total_expenses = q2(sum((amt for _, amt in expense_rows), ZERO))
    gross_profit = q2(total_revenue - total_cogs)
    net_income = q2(gross_profit - total_expenses)

    def _section(rows):
        return [
            {
                "account_id": acc.id,
                "code": acc.code,
                "name": acc.name,
                "amount": to_major_number(amt),
                "amount_minor": to_minor_int(amt),
                "percent_of_revenue": _percent(amt, total_revenue),
            }
            for acc, amt in sorted(rows, key=lambda r: r[0].code)
            if amt != ZERO
        ]

    def _total(amount):
        return {
            "amount": to_major_number(amount),
            "amount_minor": to_minor_int(amount),
            "percent_of_revenue": _percent(amount, total_revenue),
        }

    return {
        "start_date": start_date.isoformat() if start_date else None,
        "end_date": end_date.isoformat() if end_date else None,
        "revenue": _section(revenue_rows),
        "cost_of_sales": _section(cogs_rows),
        "operating_expenses": _section(expense_rows),
        "totals": {
            "revenue": _total(total_revenue),
            "cost_of_sales": _total(total_cogs),
            "gross_profit": _total(gross_profit),
            "operating_expenses": _total(total_expenses),
            "net_income": _total(net_income),
        },
    }
