# accounting/services/period_lock.py

"""
======================================================
PATH: accounting/services/period_lock.py
======================================================
PERIOD LOCK GUARD

Prevents posting ANY voucher whose entry_date falls within a closed
period of the company being posted to.

Called by journal_voucher_service at posting time (engine choke-point).
Disabled when settings.ACCOUNTING_ENFORCE_PERIOD_LOCK is False.
"""

from __future__ import annotations

from datetime import date, datetime

from django.conf import settings

from accounting.models.period_close import PeriodClose
from accounting.services.exceptions import PeriodLockedError


def _to_date(value: datetime | date | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def is_period_locked(*, company, entry_date) -> bool:
    post_date = _to_date(entry_date)
    if post_date is None:
        return False
    return PeriodClose.objects.filter(
        company=company,
        start_date__lte=post_date,
        end_date__gte=post_date,
    ).exists()


def assert_period_open(*, company, entry_date) -> None:
    """
    Raises:
        PeriodLockedError if the date is locked.
    """
    if not getattr(settings, "ACCOUNTING_ENFORCE_PERIOD_LOCK", True):
        return

    if is_period_locked(company=company, entry_date=entry_date):
        raise PeriodLockedError(
            f"Posting blocked: {_to_date(entry_date)} falls inside a closed accounting period."
        )
