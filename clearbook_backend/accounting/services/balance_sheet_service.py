# accounting/services/balance_sheet_service.py

"""
BALANCE SHEET (as of date)

- Assets: debit - credit; Liabilities/Equity: credit - debit
- Accounts group by the name prefix before " - " (e.g. "Inventory - Raw Materials" -> "Inventory")
- Revenue/expense activity since Jan 1 of the as-of year -> "Current Year Earnings"
- Revenue/expense activity before that year (not yet closed) -> "Retained Earnings (Unclosed)"
- Check: Assets == Liabilities + Equity

Provides both major-unit numbers (floats, 2dp) and minor-unit ints (exact).
"""

from __future__ import annotations

from datetime import date, timedelta

from django.utils import timezone

from accounting.models.account import Account
from accounting.services.ledger import ledger_lines_between, totals_by_account
from accounting.services.money import ZERO, q2, to_major_number, to_minor_int

SECTION_KEYS = {
    Account.ASSET: "assets",
    Account.LIABILITY: "liabilities",
    Account.EQUITY: "equity",
}


def _net_income(company, *, start_date=None, end_date=None):
    totals = totals_by_account(
        ledger_lines_between(company, start_date=start_date, end_date=end_date).filter(
            account__account_type__in=[Account.REVENUE, Account.EXPENSE]
        )
    )
    types = dict(
        Account.objects.filter(pk__in=list(totals)).values_list("pk", "account_type")
    )
    net = ZERO
    for account_id, (debit, credit) in totals.items():
        if types[account_id] == Account.REVENUE:
            net += credit - debit
        else:
            net -= debit - credit
    return q2(net)


def _line(code, name, balance):
    return {
        "code": code,
        "name": name,
        "balance": to_major_number(balance),
        "balance_minor": to_minor_int(balance),
    }


def generate_balance_sheet(*, company, as_of: date | None = None) -> dict:
    as_of = as_of or timezone.localdate()
    year_start = date(as_of.year, 1, 1)

    accounts = list(
        Account.objects.filter(
            company=company,
            account_type__in=[Account.ASSET, Account.LIABILITY, Account.EQUITY],
        ).order_by("code")
    )
    totals = totals_by_account(ledger_lines_between(company, end_date=as_of))

    sections = {key: {"groups": {}, "accounts": [], "total": ZERO} for key in SECTION_KEYS.values()}

    for acc in accounts:
        debit, credit = totals.get(acc.id, (ZERO, ZERO))
        if acc.account_type == Account.ASSET:
            balance = q2(debit - credit)
        else:
            balance = q2(credit - debit)

        if balance == ZERO:
            continue

        section = sections[SECTION_KEYS[acc.account_type]]
        row = _line(acc.code, acc.name, balance)
        section["accounts"].append(row)
        group = acc.name.split(" - ")[0]
        section["groups"].setdefault(group, ZERO)
        section["groups"][group] += balance
        section["total"] += balance

    current_earnings = _net_income(company, start_date=year_start, end_date=as_of)
    prior_unclosed = _net_income(company, end_date=year_start - timedelta(days=1))

    equity = sections["equity"]
    if prior_unclosed != ZERO:
        equity["accounts"].append(_line("prior-earnings", "Retained Earnings (Unclosed)", prior_unclosed))
        equity["groups"]["Retained Earnings (Unclosed)"] = prior_unclosed
        equity["total"] += prior_unclosed
    equity["accounts"].append(_line("current-earnings", "Current Year Earnings", current_earnings))
    equity["groups"]["Current Year Earnings"] = current_earnings
    equity["total"] += current_earnings

    assets_total = q2(sections["assets"]["total"])
    liabilities_total = q2(sections["liabilities"]["total"])
    equity_total = q2(equity["total"])
    liabilities_plus_equity = q2(liabilities_total + equity_total)

    def _render(section):
        return {
            "accounts": section["accounts"],
            "groups": [
                {"name": name, "total": to_major_number(total), "total_minor": to_minor_int(total)}
                for name, total in section["groups"].items()
            ],
            "total": to_major_number(section["total"]),
            "total_minor": to_minor_int(section["total"]),
        }

    return {
        "as_of": as_of.isoformat(),
        "assets": _render(sections["assets"]),
        "liabilities": _render(sections["liabilities"]),
        "equity": _render(equity),
        "current_year_earnings": to_major_number(current_earnings),
        "totals": {
            "assets": to_major_number(assets_total),
            "liabilities": to_major_number(liabilities_total),
            "equity": to_major_number(equity_total),
            "liabilities_plus_equity": to_major_number(liabilities_plus_equity),
            "assets_minor": to_minor_int(assets_total),
            "liabilities_minor": to_minor_int(liabilities_total),
            "equity_minor": to_minor_int(equity_total),
            "liabilities_plus_equity_minor": to_minor_int(liabilities_plus_equity),
        },
        "balanced": to_minor_int(assets_total) == to_minor_int(liabilities_plus_equity),
    }
