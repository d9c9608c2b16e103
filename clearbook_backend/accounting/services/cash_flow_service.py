# accounting/services/cash_flow_service.py

"""
CASH FLOW SUMMARY (dashboard)

Last six calendar months ending with the as-of month:
- revenue  = revenue credits - debits
- expenses = expense debits - credits
- net      = revenue - expenses
"""

from __future__ import annotations

from datetime import date

from django.db.models.functions import TruncMonth
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.services.ledger import ledger_lines_between
from accounting.services.money import ZERO, q2, to_major_number, to_minor_int

MONTHS = 6


def _shift_month(d: date, months: int) -> date:
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def get_cash_flow_summary(*, company, as_of: date | None = None, months: int = MONTHS) -> dict:
    as_of = as_of or timezone.localdate()
    first_month = _shift_month(date(as_of.year, as_of.month, 1), -(months - 1))

    rows = (
        ledger_lines_between(company, start_date=first_month, end_date=as_of)
        .exclude(voucher__source=JournalVoucher.SOURCE_PERIOD_CLOSE)
        .filter(account__account_type__in=[Account.REVENUE, Account.EXPENSE])
        .annotate(month=TruncMonth("voucher__entry_date"))
        .values("month", "account__account_type", "debit", "credit")
    )

    buckets = {}
    for i in range(months):
        m = _shift_month(first_month, i)
        buckets[(m.year, m.month)] = {"revenue": ZERO, "expenses": ZERO}

    for r in rows:
        month = r["month"]
        key = (month.year, month.month)
        if key not in buckets:
            continue
        if r["account__account_type"] == Account.REVENUE:
            buckets[key]["revenue"] += r["credit"] - r["debit"]
        else:
            buckets[key]["expenses"] += r["debit"] - r["credit"]

    out = []
    for (year, month), data in buckets.items():
        revenue = q2(data["revenue"])
        expenses = q2(data["expenses"])
        net = q2(revenue - expenses)
        out.append(
            {
                "month": f"{year:04d}-{month:02d}",
                "label": date(year, month, 1).strftime("%b %Y"),
                "revenue": to_major_number(revenue),
                "expenses": to_major_number(expenses),
                "net": to_major_number(net),
                "revenue_minor": to_minor_int(revenue),
                "expenses_minor": to_minor_int(expenses),
                "net_minor": to_minor_int(net),
            }
        )

    return {"as_of": as_of.isoformat(), "months": out}
