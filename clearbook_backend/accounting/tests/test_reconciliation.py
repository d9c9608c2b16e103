# accounting/tests/test_reconciliation.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.account import Account
from accounting.models.reconciliation import BankReconciliation
from accounting.services.reconciliation_service import (
    ReconciliationConflictError,
    ReconciliationError,
    ReconciliationStateError,
    create_reconciliation,
    unreconciled_lines,
    update_reconciliation,
)
from companies.tests.factories import account, make_company, make_user, post_simple


class BankReconciliationTests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.user = make_user(self.company)
        self.bank = account(self.company, Account.BANK)
        self.revenue = account(self.company, Account.SALES_REVENUE)
        self.charges = account(self.company, code="64000")

        self.deposit = post_simple(self.company, date(2024, 2, 1), self.bank, self.revenue, "1000")
        self.fee = post_simple(self.company, date(2024, 2, 3), self.charges, self.bank, "50")
        self.late = post_simple(self.company, date(2024, 3, 9), self.bank, self.revenue, "700")

    def _bank_line(self, voucher):
        return voucher.lines.get(account=self.bank)

    def _start(self, statement_balance="950.00"):
        return create_reconciliation(
            company=self.company,
            account=self.bank,
            statement_date=date(2024, 2, 29),
            statement_balance=statement_balance,
            user=self.user,
        )

    def test_create_starts_with_negative_statement_difference(self):
        rec = self._start()
        self.assertEqual(rec.status, BankReconciliation.STATUS_DRAFT)
        self.assertEqual(rec.cleared_balance, Decimal("0.00"))
        self.assertEqual(rec.difference, Decimal("-950.00"))

    def test_second_draft_for_same_account_conflicts(self):
        self._start()
        with self.assertRaises(ReconciliationConflictError):
            self._start()

    def test_non_asset_account_is_refused(self):
        with self.assertRaises(ReconciliationError):
            create_reconciliation(
                company=self.company,
                account=self.revenue,
                statement_date=date(2024, 2, 29),
                statement_balance="0",
            )

    def test_unreconciled_lines_stop_at_statement_date(self):
        rec = self._start()
        ids = set(unreconciled_lines(reconciliation=rec).values_list("pk", flat=True))
        self.assertEqual(ids, {self._bank_line(self.deposit).pk, self._bank_line(self.fee).pk})

    def test_update_recomputes_cleared_balance(self):
        rec = self._start()
        rec = update_reconciliation(
            reconciliation=rec,
            cleared_line_ids=[self._bank_line(self.deposit).pk],
            notes="first pass",
        )
        self.assertEqual(rec.cleared_balance, Decimal("1000.00"))
        self.assertEqual(rec.difference, Decimal("50.00"))
        self.assertEqual(rec.notes, "first pass")

    def test_ineligible_line_is_refused(self):
        rec = self._start()
        with self.assertRaises(ReconciliationError):
            update_reconciliation(reconciliation=rec, cleared_line_ids=[self._bank_line(self.late).pk])

    def test_complete_requires_zero_difference(self):
        rec = self._start()
        with self.assertRaises(ReconciliationError):
            update_reconciliation(
                reconciliation=rec,
                cleared_line_ids=[self._bank_line(self.deposit).pk],
                status=BankReconciliation.STATUS_COMPLETED,
            )
        rec.refresh_from_db()
        self.assertEqual(rec.status, BankReconciliation.STATUS_DRAFT)

    def test_completed_reconciliation_is_frozen_and_lines_leave_the_pool(self):
        rec = self._start()
        rec = update_reconciliation(
            reconciliation=rec,
            cleared_line_ids=[self._bank_line(self.deposit).pk, self._bank_line(self.fee).pk],
            status=BankReconciliation.STATUS_COMPLETED,
        )
        self.assertEqual(rec.status, BankReconciliation.STATUS_COMPLETED)
        self.assertEqual(rec.difference, Decimal("0.00"))
        self.assertIsNotNone(rec.completed_at)

        with self.assertRaises(ReconciliationStateError):
            update_reconciliation(reconciliation=rec, notes="edit")

        nxt = create_reconciliation(
            company=self.company,
            account=self.bank,
            statement_date=date(2024, 3, 31),
            statement_balance="1650.00",
        )
        ids = set(unreconciled_lines(reconciliation=nxt).values_list("pk", flat=True))
        self.assertEqual(ids, {self._bank_line(self.late).pk})
