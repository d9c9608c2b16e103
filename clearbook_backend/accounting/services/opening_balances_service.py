# PATH: accounting/services/opening_balances_service.py

"""
OPENING BALANCES SERVICE

Responsibilities:
- Validate lines (account ids of this company, debit XOR credit)
- Plug any imbalance into OPENING_BALANCE_EQUITY
- Post ONE voucher with source=Opening Balance
- Atomic + idempotent via reference OPENING_BALANCE:<as_of>

No HTTP, no DRF serializers here.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from django.db import transaction

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.services.account_resolver import get_account_by_role
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_voucher_service import post_system_voucher
from accounting.services.money import ZERO, money, q2

logger = logging.getLogger(__name__)


class OpeningBalancesError(ValueError):
    """Raised when opening balances payload is invalid or cannot be posted."""


@transaction.atomic
def create_opening_balances(*, company, as_of: date, lines: Iterable[dict], user=None) -> JournalVoucher:
    """
    lines format:
      [{"account_id": 12, "debit": "500000.00", "credit": "0"}, ...]

    The difference between debits and credits is posted to the
    OPENING_BALANCE_EQUITY account so the voucher always balances.
    """
    lines = list(lines or [])
    if not lines:
        raise OpeningBalancesError("At least one opening balance line is required")

    ids = {line.get("account_id") for line in lines}
    accounts = {a.pk: a for a in Account.objects.filter(company=company, pk__in=ids, is_active=True)}
    missing = sorted(str(i) for i in ids if i not in accounts)
    if missing:
        raise OpeningBalancesError(f"Unknown or inactive accounts: {', '.join(missing)}")

    postings = []
    total_debit = ZERO
    total_credit = ZERO
    for line in lines:
        debit = money(line.get("debit") or 0)
        credit = money(line.get("credit") or 0)
        if (debit > ZERO) == (credit > ZERO):
            raise OpeningBalancesError("Each opening balance line needs either a debit or a credit")
        total_debit += debit
        total_credit += credit
        postings.append({"account": accounts[line["account_id"]], "debit": debit, "credit": credit})

    try:
        equity = get_account_by_role(company, Account.OPENING_BALANCE_EQUITY)
    except AccountingServiceError as exc:
        raise OpeningBalancesError(str(exc)) from exc

    diff = q2(total_debit - total_credit)
    if diff > ZERO:
        postings.append({"account": equity, "debit": ZERO, "credit": diff})
    elif diff < ZERO:
        postings.append({"account": equity, "debit": -diff, "credit": ZERO})

    if len(postings) < 2:
        raise OpeningBalancesError("Opening balances need a balancing line; add more than one account")

    try:
        voucher = post_system_voucher(
            company=company,
            entry_date=as_of,
            narration=f"Opening Balances as at {as_of.isoformat()}",
            lines=postings,
            source=JournalVoucher.SOURCE_OPENING_BALANCE,
            reference_type="OPENING_BALANCE",
            reference_id=as_of.isoformat(),
            created_by=user,
        )
    except AccountingServiceError as exc:
        raise OpeningBalancesError(str(exc)) from exc

    logger.info("Opening balances posted company=%s as_of=%s voucher=%s", company.pk, as_of, voucher.voucher_number)
    return voucher
