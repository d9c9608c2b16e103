# accounting/services/ledger.py

"""
Ledger query helpers.

The ledger is the set of voucher lines whose voucher is posted
(or posted and later reversed; the reversing voucher nets it to zero).
"""

from __future__ import annotations

from decimal import Decimal

from django.db.models import DecimalField, Sum, Value
from django.db.models.functions import Coalesce

from accounting.models.journal import JournalVoucher, JournalVoucherLine

_DEC = DecimalField(max_digits=18, decimal_places=2)


def ledger_lines(company):
    return JournalVoucherLine.objects.filter(
        voucher__company=company,
        voucher__status__in=JournalVoucher.LEDGER_STATUSES,
    )


def ledger_lines_between(company, *, start_date=None, end_date=None):
    qs = ledger_lines(company)
    if start_date is not None:
        qs = qs.filter(voucher__entry_date__gte=start_date)
    if end_date is not None:
        qs = qs.filter(voucher__entry_date__lte=end_date)
    return qs


def totals_by_account(qs) -> dict:
    """
    {account_id: (debit_total, credit_total)}
    """
    rows = qs.values("account_id").annotate(
        debit_total=Coalesce(Sum("debit"), Value(Decimal("0.00")), output_field=_DEC),
        credit_total=Coalesce(Sum("credit"), Value(Decimal("0.00")), output_field=_DEC),
    )
    return {r["account_id"]: (r["debit_total"], r["credit_total"]) for r in rows}


def sum_debit_credit(qs) -> tuple[Decimal, Decimal]:
    agg = qs.aggregate(
        debit_total=Coalesce(Sum("debit"), Value(Decimal("0.00")), output_field=_DEC),
        credit_total=Coalesce(Sum("credit"), Value(Decimal("0.00")), output_field=_DEC),
    )
    return agg["debit_total"], agg["credit_total"]


def signed_balance(account, debit: Decimal, credit: Decimal) -> Decimal:
    """Balance on the account's normal side."""
    if account.is_debit_normal:
        return (debit or Decimal("0.00")) - (credit or Decimal("0.00"))
    return (credit or Decimal("0.00")) - (debit or Decimal("0.00"))
