# accounting/tests/test_journal_vouchers.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.services.exceptions import (
    IdempotencyError,
    JournalEntryCreationError,
    VoucherStateError,
)
from accounting.services.journal_voucher_service import (
    create_journal_voucher,
    delete_voucher,
    post_voucher,
    reject_voucher,
    reverse_voucher,
    update_draft_voucher,
)
from accounting.services.trial_balance_service import TrialBalanceService
from companies.tests.factories import account, make_company, make_user


class JournalVoucherEngineTests(TestCase):
    """
    GUARANTEES:
    - Vouchers balance, have >= 2 one-sided lines, and use company accounts
    - Numbers are {company}-{YYYY}-{seq:06d}, sequential per company + year
    - Status moves only along draft -> awaiting_approval -> posted -> reversed
    """

    def setUp(self):
        self.company = make_company("ACME")
        self.user = make_user(self.company)
        self.cash = account(self.company, Account.CASH)
        self.revenue = account(self.company, Account.SALES_REVENUE)

    def _lines(self, amount="100.00"):
        return [
            {"account": self.cash, "debit": amount},
            {"account": self.revenue, "credit": amount},
        ]

    def _draft(self, **kwargs):
        params = {
            "company": self.company,
            "entry_date": date(2024, 3, 1),
            "narration": "Cash sale",
            "lines": self._lines(),
            "created_by": self.user,
        }
        params.update(kwargs)
        return create_journal_voucher(**params)

    def test_draft_is_created_with_totals_and_number(self):
        voucher = self._draft()

        self.assertEqual(voucher.status, JournalVoucher.STATUS_DRAFT)
        self.assertEqual(voucher.voucher_number, "ACME-2024-000001")
        self.assertEqual(voucher.total_debits, Decimal("100.00"))
        self.assertEqual(voucher.total_credits, Decimal("100.00"))
        self.assertEqual(voucher.lines.count(), 2)

    def test_numbers_are_sequential_per_year(self):
        first = self._draft()
        second = self._draft()
        next_year = self._draft(entry_date=date(2025, 1, 5))

        self.assertEqual(first.voucher_number, "ACME-2024-000001")
        self.assertEqual(second.voucher_number, "ACME-2024-000002")
        self.assertEqual(next_year.voucher_number, "ACME-2025-000001")

    def test_numbers_are_independent_per_company(self):
        other = make_company("BETA")
        self._draft()
        voucher = create_journal_voucher(
            company=other,
            entry_date=date(2024, 3, 1),
            narration="Other company",
            lines=[
                {"account": account(other, Account.CASH), "debit": "10"},
                {"account": account(other, Account.SALES_REVENUE), "credit": "10"},
            ],
        )
        self.assertEqual(voucher.voucher_number, "BETA-2024-000001")

    def test_unbalanced_voucher_is_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            self._draft(
                lines=[
                    {"account": self.cash, "debit": "100.00"},
                    {"account": self.revenue, "credit": "90.00"},
                ]
            )
        self.assertEqual(JournalVoucher.objects.count(), 0)

    def test_single_line_is_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            self._draft(lines=[{"account": self.cash, "debit": "100.00"}])

    def test_line_with_both_sides_is_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            self._draft(
                lines=[
                    {"account": self.cash, "debit": "100.00", "credit": "100.00"},
                    {"account": self.revenue, "credit": "0"},
                ]
            )

    def test_amounts_round_half_up(self):
        voucher = self._draft(lines=self._lines("10.005"))
        self.assertEqual(voucher.total_debits, Decimal("10.01"))

    def test_foreign_company_account_is_rejected(self):
        other = make_company("BETA")
        with self.assertRaises(JournalEntryCreationError):
            self._draft(
                lines=[
                    {"account": account(other, Account.CASH), "debit": "5"},
                    {"account": self.revenue, "credit": "5"},
                ]
            )

    def test_inactive_account_is_rejected(self):
        self.cash.is_active = False
        self.cash.save()
        with self.assertRaises(JournalEntryCreationError):
            self._draft()

    def test_duplicate_reference_raises_idempotency_error(self):
        self._draft(reference_type="TEST", reference_id="1")
        with self.assertRaises(IdempotencyError):
            self._draft(reference_type="TEST", reference_id="1")

    def test_post_sets_posted_fields(self):
        voucher = post_voucher(voucher=self._draft(), user=self.user)

        self.assertEqual(voucher.status, JournalVoucher.STATUS_POSTED)
        self.assertIsNotNone(voucher.posted_at)
        self.assertEqual(voucher.posted_by, self.user)

    def test_posting_twice_is_a_state_error(self):
        voucher = post_voucher(voucher=self._draft(), user=self.user)
        with self.assertRaises(VoucherStateError):
            post_voucher(voucher=voucher, user=self.user)

    def test_reject_only_from_awaiting_approval(self):
        draft = self._draft()
        with self.assertRaises(VoucherStateError):
            reject_voucher(voucher=draft)

        pending = self._draft(status=JournalVoucher.STATUS_AWAITING_APPROVAL)
        rejected = reject_voucher(voucher=pending)
        self.assertEqual(rejected.status, JournalVoucher.STATUS_REJECTED)

        with self.assertRaises(VoucherStateError):
            post_voucher(voucher=rejected)

    def test_delete_only_drafts(self):
        draft = self._draft()
        delete_voucher(voucher=draft)
        self.assertFalse(JournalVoucher.objects.filter(pk=draft.pk).exists())

        posted = self._draft(status=JournalVoucher.STATUS_POSTED)
        with self.assertRaises(VoucherStateError):
            delete_voucher(voucher=posted)

    def test_update_draft_replaces_lines(self):
        draft = self._draft()
        updated = update_draft_voucher(voucher=draft, narration="Edited", lines=self._lines("250.00"))

        self.assertEqual(updated.narration, "Edited")
        self.assertEqual(updated.total_debits, Decimal("250.00"))
        self.assertEqual(updated.lines.count(), 2)

    def test_update_moving_to_next_year_renumbers(self):
        self._draft(entry_date=date(2024, 6, 1))
        draft = self._draft(entry_date=date(2024, 12, 31))
        self.assertEqual(draft.voucher_number, "ACME-2024-000002")

        updated = update_draft_voucher(voucher=draft, entry_date=date(2025, 1, 2))

        self.assertEqual(updated.entry_date, date(2025, 1, 2))
        self.assertEqual(updated.voucher_number, "ACME-2025-000001")
        self.assertEqual(self._draft(entry_date=date(2025, 2, 1)).voucher_number, "ACME-2025-000002")

    def test_update_within_year_keeps_number(self):
        draft = self._draft(entry_date=date(2024, 3, 1))
        updated = update_draft_voucher(voucher=draft, entry_date=date(2024, 11, 30))
        self.assertEqual(updated.voucher_number, "ACME-2024-000001")

    def test_update_posted_is_a_state_error(self):
        posted = self._draft(status=JournalVoucher.STATUS_POSTED)
        with self.assertRaises(VoucherStateError):
            update_draft_voucher(voucher=posted, narration="Nope")

    def test_posted_lines_are_immutable(self):
        posted = self._draft(status=JournalVoucher.STATUS_POSTED)
        line = posted.lines.first()
        line.description = "tamper"
        with self.assertRaises(ValidationError):
            line.save()

    def test_reverse_mirrors_lines_and_nets_to_zero(self):
        posted = self._draft(status=JournalVoucher.STATUS_POSTED)
        reversal = reverse_voucher(voucher=posted, user=self.user, entry_date=date(2024, 3, 2))

        posted.refresh_from_db()
        self.assertEqual(posted.status, JournalVoucher.STATUS_REVERSED)
        self.assertEqual(reversal.status, JournalVoucher.STATUS_POSTED)
        self.assertEqual(reversal.source, JournalVoucher.SOURCE_REVERSAL)
        self.assertEqual(reversal.reversal_of, posted)

        cash_line = reversal.lines.get(account=self.cash)
        self.assertEqual(cash_line.credit, Decimal("100.00"))

        tb = TrialBalanceService().generate(company=self.company, as_of=date(2024, 12, 31))
        by_code = {row["account_code"]: row for row in tb["accounts"]}
        self.assertEqual(by_code[self.cash.code]["debit"], by_code[self.cash.code]["credit"])
        self.assertTrue(tb["totals"]["balanced"])

    def test_reverse_requires_posted(self):
        with self.assertRaises(VoucherStateError):
            reverse_voucher(voucher=self._draft())

    def test_drafts_do_not_reach_reports(self):
        self._draft()
        self._draft(status=JournalVoucher.STATUS_AWAITING_APPROVAL)
        tb = TrialBalanceService().generate(company=self.company, as_of=date(2024, 12, 31))
        self.assertEqual(tb["accounts"], [])

    def test_manual_only_refuses_document_vouchers(self):
        pending = self._draft(
            status=JournalVoucher.STATUS_AWAITING_APPROVAL,
            source=JournalVoucher.SOURCE_PAYMENT_VOUCHER,
        )
        with self.assertRaises(VoucherStateError):
            post_voucher(voucher=pending, user=self.user, manual_only=True)
        with self.assertRaises(VoucherStateError):
            reject_voucher(voucher=pending, manual_only=True)

        pending.refresh_from_db()
        self.assertEqual(pending.status, JournalVoucher.STATUS_AWAITING_APPROVAL)
        self.assertEqual(post_voucher(voucher=pending, user=self.user).status, JournalVoucher.STATUS_POSTED)

    def test_manual_only_refuses_reversing_document_vouchers(self):
        posted = self._draft(status=JournalVoucher.STATUS_POSTED, source=JournalVoucher.SOURCE_SALES_INVOICE)
        with self.assertRaises(VoucherStateError):
            reverse_voucher(voucher=posted, manual_only=True)

        posted.refresh_from_db()
        self.assertEqual(posted.status, JournalVoucher.STATUS_POSTED)
        self.assertFalse(posted.reversals.exists())

    def test_manual_only_accepts_journal_source(self):
        voucher = post_voucher(voucher=self._draft(), user=self.user, manual_only=True)
        self.assertEqual(voucher.status, JournalVoucher.STATUS_POSTED)
