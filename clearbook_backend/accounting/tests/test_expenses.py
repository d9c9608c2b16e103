# accounting/tests/test_expenses.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.account import Account
from accounting.models.expense import Expense
from accounting.models.journal import JournalVoucher
from accounting.services.expense_service import (
    ExpenseError,
    ExpenseStateError,
    create_expense,
    delete_expense,
    post_expense,
    update_expense,
)
from companies.tests.factories import account, make_company, make_user


class ExpenseTests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.user = make_user(self.company)
        self.utilities = account(self.company, code="62000")

    def _create(self, **kwargs):
        params = {
            "company": self.company,
            "expense_date": date(2024, 6, 3),
            "amount": "45000",
            "expense_account": self.utilities,
            "payment_method": Expense.PAYMENT_BANK,
            "payee": "Power Co",
            "user": self.user,
        }
        params.update(kwargs)
        return create_expense(**params)

    def test_create_records_draft_with_default_payment_account(self):
        expense = self._create()

        self.assertEqual(expense.status, Expense.STATUS_DRAFT)
        self.assertEqual(expense.payment_account.system_role, Account.BANK)
        self.assertIsNone(expense.journal_voucher)

    def test_credit_expense_pays_from_accounts_payable(self):
        expense = self._create(payment_method=Expense.PAYMENT_CREDIT)
        self.assertEqual(expense.payment_account.system_role, Account.ACCOUNTS_PAYABLE)

    def test_non_expense_account_is_rejected(self):
        with self.assertRaises(ExpenseError):
            self._create(expense_account=account(self.company, Account.CASH))

    def test_post_creates_expense_voucher(self):
        expense = post_expense(expense=self._create(), user=self.user)
        jv = expense.journal_voucher

        self.assertEqual(expense.status, Expense.STATUS_POSTED)
        self.assertEqual(jv.status, JournalVoucher.STATUS_POSTED)
        self.assertEqual(jv.source, JournalVoucher.SOURCE_EXPENSE)
        self.assertEqual(jv.lines.get(account=self.utilities).debit, Decimal("45000.00"))
        self.assertEqual(jv.lines.get(account=expense.payment_account).credit, Decimal("45000.00"))

    def test_only_drafts_can_change(self):
        draft = self._create()
        updated = update_expense(expense=draft, amount="50000", payee="Grid Co")
        self.assertEqual(updated.amount, Decimal("50000.00"))
        self.assertEqual(updated.payee, "Grid Co")

        posted = post_expense(expense=updated, user=self.user)
        with self.assertRaises(ExpenseStateError):
            update_expense(expense=posted, amount="1")
        with self.assertRaises(ExpenseStateError):
            delete_expense(expense=posted)
        with self.assertRaises(ExpenseStateError):
            post_expense(expense=posted)

    def test_delete_draft(self):
        draft = self._create()
        delete_expense(expense=draft)
        self.assertFalse(Expense.objects.filter(pk=draft.pk).exists())
