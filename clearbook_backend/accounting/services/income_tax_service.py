# accounting/services/income_tax_service.py

"""
INCOME TAX COMPUTATION (date range)

assessable_profit   = revenue - expenses (ledger, period-close vouchers excluded)
company_income_tax  = INCOME_TAX_RATE % of max(0, assessable_profit)
education_tax       = EDUCATION_TAX_RATE % of max(0, assessable_profit)
total_liability     = company_income_tax + education_tax
wht_credit          = WHT deducted by customers in the range
                      (debits on the WHT_RECEIVABLE account)
final_tax_payable   = max(0, total_liability - wht_credit)

Rates come from settings and may be overridden per call.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.services.ledger import ledger_lines_between, sum_debit_credit
from accounting.services.money import ZERO, percent_of, q2, to_major_number, to_minor_int


def _amount(value: Decimal) -> dict:
    return {"amount": to_major_number(value), "amount_minor": to_minor_int(value)}


def get_income_tax_report(
    *,
    company,
    start_date=None,
    end_date=None,
    income_tax_rate=None,
    education_tax_rate=None,
) -> dict:
    cit_rate = Decimal(str(income_tax_rate if income_tax_rate is not None else settings.INCOME_TAX_RATE))
    tet_rate = Decimal(str(education_tax_rate if education_tax_rate is not None else settings.EDUCATION_TAX_RATE))

    lines = ledger_lines_between(company, start_date=start_date, end_date=end_date)
    pl_lines = lines.exclude(voucher__source=JournalVoucher.SOURCE_PERIOD_CLOSE)

    rev_debit, rev_credit = sum_debit_credit(pl_lines.filter(account__account_type=Account.REVENUE))
    exp_debit, exp_credit = sum_debit_credit(pl_lines.filter(account__account_type=Account.EXPENSE))
    revenue = q2(rev_credit - rev_debit)
    expenses = q2(exp_debit - exp_credit)
    profit = q2(revenue - expenses)

    taxable = max(profit, ZERO)
    cit = percent_of(taxable, cit_rate)
    tet = percent_of(taxable, tet_rate)
    liability = q2(cit + tet)

    wht_debit, _ = sum_debit_credit(lines.filter(account__system_role=Account.WHT_RECEIVABLE))
    wht_credit = q2(wht_debit)
    final_payable = q2(max(liability - wht_credit, ZERO))

    return {
        "start_date": start_date.isoformat() if start_date else None,
        "end_date": end_date.isoformat() if end_date else None,
        "revenue": _amount(revenue),
        "expenses": _amount(expenses),
        "assessable_profit": _amount(profit),
        "company_income_tax": {"rate": float(cit_rate), **_amount(cit)},
        "education_tax": {"rate": float(tet_rate), **_amount(tet)},
        "total_tax_liability": _amount(liability),
        "wht_credit": _amount(wht_credit),
        "final_tax_payable": _amount(final_payable),
    }
