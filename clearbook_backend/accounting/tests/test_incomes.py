# accounting/tests/test_incomes.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status

from accounting.models.account import Account
from accounting.models.income import OtherIncome
from accounting.models.journal import JournalVoucher
from accounting.services.income_service import (
    IncomeError,
    IncomeStateError,
    create_income,
    delete_income,
    post_income,
    update_income,
)
from companies.tests.factories import account, client_for, make_company, make_user
from permissions.roles import ROLE_ACCOUNTANT


class OtherIncomeTests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.user = make_user(self.company)
        self.other_income = account(self.company, code="41000")

    def _create(self, **kwargs):
        params = {
            "company": self.company,
            "income_date": date(2024, 7, 9),
            "amount": "12000",
            "income_account": self.other_income,
            "payment_method": OtherIncome.PAYMENT_BANK,
            "received_from": "First Bank",
            "description": "Interest on deposit",
            "user": self.user,
        }
        params.update(kwargs)
        return create_income(**params)

    def test_numbers_run_per_day(self):
        first = self._create()
        second = self._create()
        next_day = self._create(income_date=date(2024, 7, 10))

        self.assertEqual(first.income_number, "INC-20240709-0001")
        self.assertEqual(second.income_number, "INC-20240709-0002")
        self.assertEqual(next_day.income_number, "INC-20240710-0001")
        self.assertEqual(first.status, OtherIncome.STATUS_DRAFT)
        self.assertEqual(first.payment_account.system_role, Account.BANK)

    def test_income_account_must_be_revenue(self):
        with self.assertRaises(IncomeError):
            self._create(income_account=account(self.company, code="61000"))

    def test_payment_account_must_be_asset(self):
        with self.assertRaises(IncomeError):
            self._create(payment_account=account(self.company, Account.ACCOUNTS_PAYABLE))

    def test_post_debits_payment_and_credits_income(self):
        income = post_income(income=self._create(), user=self.user)
        jv = income.journal_voucher

        self.assertEqual(income.status, OtherIncome.STATUS_POSTED)
        self.assertEqual(jv.source, JournalVoucher.SOURCE_OTHER_INCOME)
        self.assertEqual(jv.status, JournalVoucher.STATUS_POSTED)
        self.assertEqual(jv.lines.get(account=income.payment_account).debit, Decimal("12000.00"))
        self.assertEqual(jv.lines.get(account=self.other_income).credit, Decimal("12000.00"))

    def test_only_drafts_change(self):
        draft = self._create()
        updated = update_income(income=draft, amount="15000", income_date=date(2024, 8, 1))
        self.assertEqual(updated.amount, Decimal("15000.00"))
        self.assertEqual(updated.income_number, "INC-20240801-0001")

        posted = post_income(income=updated, user=self.user)
        with self.assertRaises(IncomeStateError):
            update_income(income=posted, amount="1")
        with self.assertRaises(IncomeStateError):
            delete_income(income=posted)
        with self.assertRaises(IncomeStateError):
            post_income(income=posted)

    def test_delete_draft(self):
        draft = self._create()
        delete_income(income=draft)
        self.assertFalse(OtherIncome.objects.filter(pk=draft.pk).exists())


class OtherIncomeAPITests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.client = client_for(make_user(self.company, ROLE_ACCOUNTANT))
        self.other_income = account(self.company, code="41000")

    def test_create_post_and_list(self):
        res = self.client.post(
            reverse("accounting:income-list"),
            {
                "income_date": "2024-07-09",
                "amount": "2500.00",
                "income_account_id": self.other_income.pk,
                "payment_method": "cash",
                "received_from": "Scrap buyer",
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["status"], "draft")
        income_id = res.data["id"]

        res = self.client.post(reverse("accounting:income-post", args=[income_id]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "posted")
        self.assertIsNotNone(res.data["voucher_number"])

        res = self.client.post(reverse("accounting:income-post", args=[income_id]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        res = self.client.delete(reverse("accounting:income-detail", args=[income_id]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        res = self.client.get(reverse("accounting:income-list"), {"status": "posted"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)

    def test_expense_account_is_400(self):
        res = self.client.post(
            reverse("accounting:income-list"),
            {"income_date": "2024-07-09", "amount": "10", "income_account_id": account(self.company, code="61000").pk},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_company_income_is_404(self):
        other = make_company("BETA")
        income = create_income(
            company=other,
            income_date=date(2024, 7, 9),
            amount="10",
            income_account=account(other, code="41000"),
        )
        res = self.client.get(reverse("accounting:income-detail", args=[income.pk]))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
