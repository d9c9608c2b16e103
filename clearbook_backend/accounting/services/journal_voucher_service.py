# accounting/services/journal_voucher_service.py

"""
======================================================
PATH: accounting/services/journal_voucher_service.py
======================================================
JOURNAL VOUCHER SERVICE (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Create JournalVoucher / JournalVoucherLine rows
- Enforce debit == credit
- Move vouchers between statuses
- Enforce idempotency via reference (prevents double-posting)
- Enforce period locks at posting time

Every other module (expenses, sales, production, GRN, payment vouchers)
must pass through here.

Line input (dict):
    {"account": Account | None, "account_id": int | None,
     "debit": ..., "credit": ..., "payee": "", "description": ""}
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher, JournalVoucherLine
from accounting.services.exceptions import (
    IdempotencyError,
    JournalEntryCreationError,
    VoucherStateError,
)
from accounting.services.money import ZERO, money
from accounting.services.numbering import next_voucher_number

logger = logging.getLogger(__name__)

MIN_LINE_AMOUNT = Decimal("0.01")
MIN_LINES = 2


def _normalize_reference(reference_type: str | None, reference_id) -> str | None:
    if not reference_type or reference_id in (None, ""):
        return None

    rt = str(reference_type).strip()
    rid = str(reference_id).strip()
    if not rt or not rid:
        return None

    return f"{rt}:{rid}"


def _resolve_line_account(company, line: dict) -> Account:
    account = line.get("account")
    if account is None:
        account_id = line.get("account_id")
        if account_id in (None, ""):
            raise JournalEntryCreationError("Voucher line missing account")
        account = Account.objects.filter(company=company, pk=account_id).first()
        if account is None:
            raise JournalEntryCreationError(f"Account {account_id} not found")

    if account.company_id != company.pk:
        raise JournalEntryCreationError(
            f"Account {account.code} does not belong to company {company.pk}"
        )
    if not account.is_active:
        raise JournalEntryCreationError(f"Account {account.code} is inactive")

    return account


def normalize_lines(company, lines) -> tuple[list[dict], Decimal, Decimal]:
    """
    Validate + normalize voucher lines.

    Returns (normalized_lines, total_debits, total_credits).
    """
    lines = list(lines or [])
    if len(lines) < MIN_LINES:
        raise JournalEntryCreationError("A journal voucher needs at least two lines")

    total_debits = ZERO
    total_credits = ZERO
    normalized: list[dict] = []

    for idx, line in enumerate(lines, start=1):
        if not isinstance(line, dict):
            raise JournalEntryCreationError("Each voucher line must be an object/dict")

        account = _resolve_line_account(company, line)
        debit = money(line.get("debit"))
        credit = money(line.get("credit"))

        if debit < 0 or credit < 0:
            raise JournalEntryCreationError(f"Line {idx}: debit or credit cannot be negative")
        if debit > 0 and credit > 0:
            raise JournalEntryCreationError(f"Line {idx}: a line cannot have both debit and credit")
        if debit == 0 and credit == 0:
            raise JournalEntryCreationError(f"Line {idx}: a line must have either debit or credit")
        if max(debit, credit) < MIN_LINE_AMOUNT:
            raise JournalEntryCreationError(f"Line {idx}: amount too small")

        total_debits += debit
        total_credits += credit

        normalized.append(
            {
                "account": account,
                "debit": debit,
                "credit": credit,
                "payee": (line.get("payee") or "").strip()[:200],
                "description": (line.get("description") or "").strip()[:255],
            }
        )

    total_debits = money(total_debits)
    total_credits = money(total_credits)

    if total_debits != total_credits:
        raise JournalEntryCreationError(
            f"Journal voucher not balanced: debits={total_debits} credits={total_credits}"
        )

    return normalized, total_debits, total_credits


def _write_lines(voucher: JournalVoucher, normalized: list[dict]) -> None:
    JournalVoucherLine.objects.bulk_create(
        [
            JournalVoucherLine(
                voucher=voucher,
                account=line["account"],
                debit=line["debit"],
                credit=line["credit"],
                payee=line["payee"],
                description=line["description"],
                line_order=i,
            )
            for i, line in enumerate(normalized)
        ]
    )


def _enforce_period_lock(voucher: JournalVoucher) -> None:
    if voucher.source == JournalVoucher.SOURCE_PERIOD_CLOSE:
        return

    from accounting.services.period_lock import assert_period_open

    assert_period_open(company=voucher.company, entry_date=voucher.entry_date)


def _mark_posted(voucher: JournalVoucher, user=None) -> JournalVoucher:
    _enforce_period_lock(voucher)

    voucher.status = JournalVoucher.STATUS_POSTED
    voucher.posted_at = timezone.now()
    voucher.posted_by = user if getattr(user, "is_authenticated", False) else None
    voucher.save()

    logger.info(
        "Voucher posted company=%s number=%s source=%s amount=%s",
        voucher.company_id,
        voucher.voucher_number,
        voucher.source,
        voucher.total_debits,
    )
    return voucher


@transaction.atomic
def create_journal_voucher(
    *,
    company,
    entry_date: date,
    narration: str,
    lines,
    source: str = JournalVoucher.SOURCE_JOURNAL,
    status: str = JournalVoucher.STATUS_DRAFT,
    reference_type: str | None = None,
    reference_id=None,
    created_by=None,
) -> JournalVoucher:
    if status not in (
        JournalVoucher.STATUS_DRAFT,
        JournalVoucher.STATUS_AWAITING_APPROVAL,
        JournalVoucher.STATUS_POSTED,
    ):
        raise JournalEntryCreationError(f"Cannot create a voucher with status {status}")

    narration = (narration or "").strip()
    if not narration:
        raise JournalEntryCreationError("Narration is required")
    if entry_date is None:
        raise JournalEntryCreationError("entry_date is required")

    normalized, total_debits, total_credits = normalize_lines(company, lines)
    reference = _normalize_reference(reference_type, reference_id)

    # Clear error before DB constraint race handling
    if reference and JournalVoucher.objects.filter(company=company, reference=reference).exists():
        raise IdempotencyError(f"Journal voucher already exists for reference {reference}")

    try:
        voucher = JournalVoucher.objects.create(
            company=company,
            voucher_number=next_voucher_number(company, entry_date),
            entry_date=entry_date,
            source=source,
            narration=narration,
            status=JournalVoucher.STATUS_DRAFT,
            total_debits=total_debits,
            total_credits=total_credits,
            reference=reference,
            created_by=created_by if getattr(created_by, "is_authenticated", False) else None,
        )
    except IntegrityError as exc:
        if reference and JournalVoucher.objects.filter(company=company, reference=reference).exists():
            raise IdempotencyError(
                f"Journal voucher already exists for reference {reference}"
            ) from exc
        raise JournalEntryCreationError(f"Failed to create journal voucher: {exc}") from exc

    _write_lines(voucher, normalized)

    if status == JournalVoucher.STATUS_POSTED:
        _mark_posted(voucher, created_by)
    elif status == JournalVoucher.STATUS_AWAITING_APPROVAL:
        voucher.status = JournalVoucher.STATUS_AWAITING_APPROVAL
        voucher.save()

    return voucher


def post_system_voucher(**kwargs) -> JournalVoucher:
    """Create + post in one step (automatic postings from other modules)."""
    kwargs["status"] = JournalVoucher.STATUS_POSTED
    return create_journal_voucher(**kwargs)


def _lock_voucher(voucher: JournalVoucher) -> JournalVoucher:
    return JournalVoucher.objects.select_for_update().select_related("company").get(pk=voucher.pk)


def _require_manual(voucher: JournalVoucher, action: str) -> None:
    """Document vouchers only move through the service of the document that owns them."""
    if not voucher.is_manual:
        logger.warning(
            "Refused %s on voucher=%s source=%s",
            action,
            voucher.voucher_number,
            voucher.source,
        )
        raise VoucherStateError(
            f"{voucher.source} vouchers cannot be {action} here; use the {voucher.source} document instead"
        )


@transaction.atomic
def post_voucher(*, voucher: JournalVoucher, user=None, manual_only: bool = False) -> JournalVoucher:
    voucher = _lock_voucher(voucher)
    if manual_only:
        _require_manual(voucher, "posted")
    if not voucher.is_open:
        logger.warning("Post refused voucher=%s status=%s", voucher.voucher_number, voucher.status)
        raise VoucherStateError(f"Only draft or awaiting-approval vouchers can be posted (status={voucher.status})")
    return _mark_posted(voucher, user)


@transaction.atomic
def reject_voucher(*, voucher: JournalVoucher, user=None, manual_only: bool = False) -> JournalVoucher:
    voucher = _lock_voucher(voucher)
    if manual_only:
        _require_manual(voucher, "rejected")
    if voucher.status != JournalVoucher.STATUS_AWAITING_APPROVAL:
        logger.warning("Reject refused voucher=%s status=%s", voucher.voucher_number, voucher.status)
        raise VoucherStateError(f"Only vouchers awaiting approval can be rejected (status={voucher.status})")

    voucher.status = JournalVoucher.STATUS_REJECTED
    voucher.save()
    logger.info("Voucher rejected company=%s number=%s", voucher.company_id, voucher.voucher_number)
    return voucher


@transaction.atomic
def delete_voucher(*, voucher: JournalVoucher) -> None:
    voucher = _lock_voucher(voucher)
    _require_manual(voucher, "deleted")
    if voucher.status != JournalVoucher.STATUS_DRAFT:
        logger.warning("Delete refused voucher=%s status=%s", voucher.voucher_number, voucher.status)
        raise VoucherStateError(f"Only draft vouchers can be deleted (status={voucher.status})")

    number = voucher.voucher_number
    voucher.delete()
    logger.info("Voucher deleted company=%s number=%s", voucher.company_id, number)


@transaction.atomic
def update_draft_voucher(
    *,
    voucher: JournalVoucher,
    entry_date: date | None = None,
    narration: str | None = None,
    lines=None,
) -> JournalVoucher:
    voucher = _lock_voucher(voucher)
    _require_manual(voucher, "edited")
    if voucher.status != JournalVoucher.STATUS_DRAFT:
        logger.warning("Update refused voucher=%s status=%s", voucher.voucher_number, voucher.status)
        raise VoucherStateError(f"Only draft vouchers can be edited (status={voucher.status})")

    if narration is not None:
        narration = narration.strip()
        if not narration:
            raise JournalEntryCreationError("Narration is required")
        voucher.narration = narration

    if entry_date is not None:
        if entry_date.year != voucher.entry_date.year:
            # Numbers are sequenced per calendar year of the entry date
            voucher.voucher_number = next_voucher_number(voucher.company, entry_date)
        voucher.entry_date = entry_date

    if lines is not None:
        normalized, total_debits, total_credits = normalize_lines(voucher.company, lines)
        voucher.lines.all().delete()
        _write_lines(voucher, normalized)
        voucher.total_debits = total_debits
        voucher.total_credits = total_credits

    voucher.save()
    return voucher


@transaction.atomic
def reverse_voucher(
    *,
    voucher: JournalVoucher,
    user=None,
    entry_date: date | None = None,
    narration: str | None = None,
    manual_only: bool = False,
) -> JournalVoucher:
    """
    Post a mirror voucher (debits <-> credits) and mark the original reversed.
    Idempotent per original via reference REVERSAL:<id>.
    """
    voucher = _lock_voucher(voucher)
    if manual_only:
        _require_manual(voucher, "reversed")
    if voucher.status != JournalVoucher.STATUS_POSTED:
        logger.warning("Reverse refused voucher=%s status=%s", voucher.voucher_number, voucher.status)
        raise VoucherStateError(f"Only posted vouchers can be reversed (status={voucher.status})")

    mirrored = [
        {
            "account": line.account,
            "debit": line.credit,
            "credit": line.debit,
            "payee": line.payee,
            "description": line.description,
        }
        for line in voucher.lines.select_related("account").order_by("line_order", "id")
    ]

    reversal = create_journal_voucher(
        company=voucher.company,
        entry_date=entry_date or timezone.localdate(),
        narration=narration or f"Reversal of {voucher.voucher_number}: {voucher.narration}",
        lines=mirrored,
        source=JournalVoucher.SOURCE_REVERSAL,
        status=JournalVoucher.STATUS_POSTED,
        reference_type="REVERSAL",
        reference_id=voucher.pk,
        created_by=user,
    )
    reversal.reversal_of = voucher
    reversal.save()

    voucher.status = JournalVoucher.STATUS_REVERSED
    voucher.save()

    logger.info(
        "Voucher reversed company=%s original=%s reversal=%s",
        voucher.company_id,
        voucher.voucher_number,
        reversal.voucher_number,
    )
    return reversal
