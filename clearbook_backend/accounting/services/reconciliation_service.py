# accounting/services/reconciliation_service.py

"""
BANK RECONCILIATION SERVICE

create:
- one draft per account at a time (second draft -> ReconciliationConflictError, 409)
- cleared_balance starts at 0, difference = -statement_balance

unreconciled transactions:
- ledger lines on the account, dated <= statement_date,
  not cleared by any COMPLETED reconciliation

update:
- replaces the cleared line set wholesale
- cleared_balance = Σ(debit - credit), difference = cleared - statement
- completion requires difference == 0; completed reconciliations are immutable
"""

from __future__ import annotations

import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.reconciliation import BankReconciliation, ReconciliationLine
from accounting.services.ledger import ledger_lines, sum_debit_credit
from accounting.services.money import ZERO, money, q2

logger = logging.getLogger(__name__)


class ReconciliationError(ValueError):
    pass


class ReconciliationConflictError(ReconciliationError):
    pass


class ReconciliationStateError(ReconciliationError):
    pass


@transaction.atomic
def create_reconciliation(
    *,
    company,
    account: Account,
    statement_date,
    statement_balance,
    notes: str = "",
    user=None,
) -> BankReconciliation:
    if account.company_id != company.pk:
        raise ReconciliationError("Account belongs to another company")
    if account.account_type != Account.ASSET:
        raise ReconciliationError("Only bank/cash (ASSET) accounts can be reconciled")

    # lock the account row so two drafts cannot race past the check
    Account.objects.select_for_update().get(pk=account.pk)

    if BankReconciliation.objects.filter(
        company=company, account=account, status=BankReconciliation.STATUS_DRAFT
    ).exists():
        logger.warning("Second draft reconciliation refused account=%s", account.code)
        raise ReconciliationConflictError(
            f"Account {account.code} already has a draft reconciliation"
        )

    statement_balance = money(statement_balance)
    try:
        with transaction.atomic():
            rec = BankReconciliation.objects.create(
                company=company,
                account=account,
                statement_date=statement_date,
                statement_balance=statement_balance,
                cleared_balance=ZERO,
                difference=q2(ZERO - statement_balance),
                notes=notes or "",
                created_by=user if getattr(user, "is_authenticated", False) else None,
            )
    except IntegrityError as exc:
        raise ReconciliationConflictError(
            f"Account {account.code} already has a draft reconciliation"
        ) from exc

    return rec


def _cleared_elsewhere_ids(account) -> set:
    return set(
        ReconciliationLine.objects.filter(
            reconciliation__account=account,
            reconciliation__status=BankReconciliation.STATUS_COMPLETED,
        ).values_list("voucher_line_id", flat=True)
    )


def unreconciled_lines(*, reconciliation: BankReconciliation):
    """
    Candidate lines for this reconciliation (ordered by date).
    Lines already cleared in this draft are included (the client shows them ticked).
    """
    qs = (
        ledger_lines(reconciliation.company)
        .filter(
            account=reconciliation.account,
            voucher__entry_date__lte=reconciliation.statement_date,
        )
        .exclude(pk__in=_cleared_elsewhere_ids(reconciliation.account))
        .select_related("voucher")
        .order_by("voucher__entry_date", "voucher_id", "line_order", "id")
    )
    return qs


@transaction.atomic
def update_reconciliation(
    *,
    reconciliation: BankReconciliation,
    cleared_line_ids=None,
    notes: str | None = None,
    status: str | None = None,
    statement_balance=None,
) -> BankReconciliation:
    rec = BankReconciliation.objects.select_for_update().select_related("account", "company").get(
        pk=reconciliation.pk
    )
    if rec.status == BankReconciliation.STATUS_COMPLETED:
        logger.warning("Update refused on completed reconciliation id=%s", rec.pk)
        raise ReconciliationStateError("Completed reconciliations cannot be modified")

    if statement_balance is not None:
        rec.statement_balance = money(statement_balance)

    if cleared_line_ids is not None:
        wanted = {int(i) for i in cleared_line_ids}
        eligible = unreconciled_lines(reconciliation=rec).filter(pk__in=wanted)
        found = set(eligible.values_list("pk", flat=True))
        missing = wanted - found
        if missing:
            raise ReconciliationError(
                f"Lines not eligible for this reconciliation: {', '.join(str(i) for i in sorted(missing))}"
            )

        ReconciliationLine.objects.filter(reconciliation=rec).delete()
        ReconciliationLine.objects.bulk_create(
            [ReconciliationLine(reconciliation=rec, voucher_line_id=pk) for pk in sorted(found)]
        )

    debit, credit = sum_debit_credit(rec.cleared_lines.all())
    rec.cleared_balance = q2(debit - credit)
    rec.difference = q2(rec.cleared_balance - rec.statement_balance)

    if notes is not None:
        rec.notes = notes

    if status == BankReconciliation.STATUS_COMPLETED:
        if rec.difference != ZERO:
            raise ReconciliationError(
                f"Cannot complete: difference is {rec.difference} (must be 0.00)"
            )
        rec.status = BankReconciliation.STATUS_COMPLETED
        rec.completed_at = timezone.now()
        rec.save()
        logger.info("Reconciliation completed id=%s account=%s", rec.pk, rec.account.code)
    else:
        rec.save()

    return rec
