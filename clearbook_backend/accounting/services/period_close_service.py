# PATH: accounting/services/period_close_service.py

"""
PERIOD CLOSE SERVICE

Closes an accounting period by zeroing out every revenue and expense
balance of the period into RETAINED_EARNINGS with ONE posted voucher.

Guarantees:
- Atomic: voucher + PeriodClose record created together
- Idempotent: reference PERIOD_CLOSE:<start>:<end>
- Refuses future periods and overlaps with existing closes
- The close voucher is dated end_date and is exempt from the period lock
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.models.period_close import PeriodClose
from accounting.services.account_resolver import get_retained_earnings_account
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_voucher_service import post_system_voucher
from accounting.services.ledger import ledger_lines_between, totals_by_account
from accounting.services.money import ZERO, q2

logger = logging.getLogger(__name__)


class PeriodCloseError(ValueError):
    pass


def _validate_period_dates(*, start_date, end_date) -> None:
    if not start_date or not end_date:
        raise PeriodCloseError("start_date and end_date are required")
    if start_date > end_date:
        raise PeriodCloseError("start_date cannot be after end_date")

    today = timezone.localdate()
    if end_date > today:
        raise PeriodCloseError(f"Cannot close a future period. end_date={end_date} today={today}")


def _ensure_no_overlap(*, company, start_date, end_date) -> None:
    overlaps = PeriodClose.objects.filter(
        company=company,
        start_date__lte=end_date,
        end_date__gte=start_date,
    ).exists()
    if overlaps:
        raise PeriodCloseError("This period overlaps an already-closed period.")


@transaction.atomic
def close_period(*, company, start_date, end_date, user=None) -> dict:
    _validate_period_dates(start_date=start_date, end_date=end_date)
    _ensure_no_overlap(company=company, start_date=start_date, end_date=end_date)

    try:
        retained_earnings = get_retained_earnings_account(company)
    except AccountingServiceError as exc:
        raise PeriodCloseError(str(exc)) from exc

    activity = ledger_lines_between(company, start_date=start_date, end_date=end_date).filter(
        account__account_type__in=[Account.REVENUE, Account.EXPENSE],
    )
    totals = totals_by_account(activity)
    if not totals:
        raise PeriodCloseError("No revenue/expense activity found in this period")

    accounts = Account.objects.in_bulk(list(totals))

    lines = []
    total_revenue = ZERO
    total_expenses = ZERO

    for account_id, (debit, credit) in sorted(totals.items(), key=lambda kv: accounts[kv[0]].code):
        account = accounts[account_id]

        if account.account_type == Account.REVENUE:
            net = q2(credit - debit)
            total_revenue += net
        else:
            net = q2(debit - credit)
            total_expenses += net

        if net == ZERO:
            continue

        # Revenue is zeroed with a debit, expense with a credit; negative nets flip side
        zeroing_debit = (account.account_type == Account.REVENUE) == (net > 0)
        lines.append(
            {
                "account": account,
                "debit": abs(net) if zeroing_debit else ZERO,
                "credit": ZERO if zeroing_debit else abs(net),
                "description": "Period close",
            }
        )

    total_revenue = q2(total_revenue)
    total_expenses = q2(total_expenses)
    net_profit = q2(total_revenue - total_expenses)

    if not lines:
        raise PeriodCloseError("Nothing to close: period revenue and expenses are zero")

    if net_profit > ZERO:
        lines.append({"account": retained_earnings, "debit": ZERO, "credit": net_profit, "description": "Net profit"})
    elif net_profit < ZERO:
        lines.append({"account": retained_earnings, "debit": abs(net_profit), "credit": ZERO, "description": "Net loss"})

    try:
        voucher = post_system_voucher(
            company=company,
            entry_date=end_date,
            narration=f"Period close {start_date.isoformat()} to {end_date.isoformat()}",
            lines=lines,
            source=JournalVoucher.SOURCE_PERIOD_CLOSE,
            reference_type="PERIOD_CLOSE",
            reference_id=f"{start_date.isoformat()}:{end_date.isoformat()}",
            created_by=user,
        )
    except AccountingServiceError as exc:
        raise PeriodCloseError(str(exc)) from exc

    try:
        period = PeriodClose.objects.create(
            company=company,
            start_date=start_date,
            end_date=end_date,
            journal_voucher=voucher,
            closed_by=user if getattr(user, "is_authenticated", False) else None,
        )
    except IntegrityError as exc:
        raise PeriodCloseError(
            "Failed to create PeriodClose record (possible overlap/duplicate under concurrency)."
        ) from exc

    logger.info(
        "Period closed company=%s %s..%s net_profit=%s voucher=%s",
        company.pk,
        start_date,
        end_date,
        net_profit,
        voucher.voucher_number,
    )

    return {
        "period_close": period,
        "journal_voucher": voucher,
        "total_revenue": total_revenue,
        "total_expenses": total_expenses,
        "net_profit": net_profit,
    }
