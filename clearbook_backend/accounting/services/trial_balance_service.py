# accounting/services/trial_balance_service.py

from __future__ import annotations

from django.utils import timezone

from accounting.models.account import Account
from accounting.services.ledger import ledger_lines_between, totals_by_account
from accounting.services.money import ZERO, q2, to_major_number, to_minor_int


class TrialBalanceService:
    """
    Trial Balance computation service.

    Guarantees:
    - Scoped to ONE company
    - Uses ledger vouchers only, entry_date <= as_of
    - Aggregates in bulk (no N+1)
    - Returns JSON-safe numeric values (no Decimals)
    """

    def __init__(self, account_model=Account):
        self.Account = account_model

    def generate(self, *, company, as_of=None):
        cutoff = as_of or timezone.localdate()

        accounts = list(
            self.Account.objects.filter(company=company)
            .only("id", "code", "name", "account_type")
            .order_by("code")
        )

        totals = totals_by_account(ledger_lines_between(company, end_date=cutoff))

        accounts_output = []
        total_debit = ZERO
        total_credit = ZERO

        for acc in accounts:
            debit, credit = totals.get(acc.id, (ZERO, ZERO))
            debit = q2(debit)
            credit = q2(credit)

            if debit == ZERO and credit == ZERO:
                continue

            accounts_output.append(
                {
                    "account_id": acc.id,
                    "account_code": acc.code,
                    "account_name": acc.name,
                    "account_type": acc.account_type,
                    "debit": to_major_number(debit),
                    "credit": to_major_number(credit),
                    "debit_minor": to_minor_int(debit),
                    "credit_minor": to_minor_int(credit),
                }
            )

            total_debit += debit
            total_credit += credit

        total_debit = q2(total_debit)
        total_credit = q2(total_credit)

        return {
            "as_of": cutoff.isoformat(),
            "accounts": accounts_output,
            "totals": {
                "debit": to_major_number(total_debit),
                "credit": to_major_number(total_credit),
                "debit_minor": to_minor_int(total_debit),
                "credit_minor": to_minor_int(total_credit),
                "balanced": to_minor_int(total_debit) == to_minor_int(total_credit),
            },
        }
