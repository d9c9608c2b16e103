# accounting/tests/test_income_tax.py

from __future__ import annotations

from datetime import date

from django.test import TestCase, override_settings
from django.urls import reverse
from rest_framework import status

from accounting.models.account import Account
from accounting.services.income_tax_service import get_income_tax_report
from companies.tests.factories import account, client_for, make_company, make_user, post_simple
from permissions.roles import ROLE_ACCOUNTANT


class IncomeTaxReportTests(TestCase):
    """
    GUARANTEES:
    - Tax is charged on max(0, revenue - expenses)
    - WHT withheld by customers in the range is credited against the liability
    - The final payable never goes below zero
    """

    def setUp(self):
        self.company = make_company("ACME")
        self.cash = account(self.company, Account.CASH)
        self.revenue = account(self.company, Account.SALES_REVENUE)
        self.rent = account(self.company, code="61000")
        self.receivable = account(self.company, Account.ACCOUNTS_RECEIVABLE)
        self.wht = account(self.company, Account.WHT_RECEIVABLE)

    def _report(self, **kwargs):
        return get_income_tax_report(
            company=self.company,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 12, 31),
            **kwargs,
        )

    def test_profit_taxed_and_wht_credited(self):
        post_simple(self.company, date(2024, 3, 1), self.cash, self.revenue, "1000000")
        post_simple(self.company, date(2024, 4, 1), self.rent, self.cash, "400000")
        post_simple(self.company, date(2024, 5, 1), self.wht, self.receivable, "10000")
        # Outside the range
        post_simple(self.company, date(2025, 1, 5), self.cash, self.revenue, "999")

        report = self._report()

        self.assertEqual(report["revenue"]["amount"], 1000000.0)
        self.assertEqual(report["expenses"]["amount"], 400000.0)
        self.assertEqual(report["assessable_profit"]["amount"], 600000.0)
        self.assertEqual(report["company_income_tax"]["rate"], 30.0)
        self.assertEqual(report["company_income_tax"]["amount"], 180000.0)
        self.assertEqual(report["education_tax"]["amount"], 15000.0)
        self.assertEqual(report["total_tax_liability"]["amount"], 195000.0)
        self.assertEqual(report["wht_credit"]["amount"], 10000.0)
        self.assertEqual(report["final_tax_payable"]["amount"], 185000.0)
        self.assertEqual(report["final_tax_payable"]["amount_minor"], 18500000)

    def test_loss_owes_nothing(self):
        post_simple(self.company, date(2024, 3, 1), self.cash, self.revenue, "100")
        post_simple(self.company, date(2024, 4, 1), self.rent, self.cash, "500")
        post_simple(self.company, date(2024, 5, 1), self.wht, self.receivable, "50")

        report = self._report()

        self.assertEqual(report["assessable_profit"]["amount"], -400.0)
        self.assertEqual(report["total_tax_liability"]["amount"], 0.0)
        self.assertEqual(report["final_tax_payable"]["amount"], 0.0)

    def test_wht_credit_larger_than_liability_floors_at_zero(self):
        post_simple(self.company, date(2024, 3, 1), self.cash, self.revenue, "1000")
        post_simple(self.company, date(2024, 5, 1), self.wht, self.receivable, "800")

        self.assertEqual(self._report()["final_tax_payable"]["amount"], 0.0)

    def test_rates_can_be_overridden(self):
        post_simple(self.company, date(2024, 3, 1), self.cash, self.revenue, "1000")
        report = self._report(income_tax_rate="20", education_tax_rate="0")
        self.assertEqual(report["company_income_tax"]["amount"], 200.0)
        self.assertEqual(report["education_tax"]["amount"], 0.0)

    @override_settings(INCOME_TAX_RATE=25, EDUCATION_TAX_RATE=3)
    def test_rates_default_from_settings(self):
        post_simple(self.company, date(2024, 3, 1), self.cash, self.revenue, "1000")
        report = self._report()
        self.assertEqual(report["company_income_tax"]["amount"], 250.0)
        self.assertEqual(report["education_tax"]["amount"], 30.0)

    def test_endpoint(self):
        post_simple(self.company, date(2024, 3, 1), self.cash, self.revenue, "1000")
        client = client_for(make_user(self.company, ROLE_ACCOUNTANT))

        res = client.get(reverse("accounting:income-tax"), {"start_date": "2024-01-01", "end_date": "2024-12-31"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["final_tax_payable"]["amount"], 325.0)

        res = client.get(reverse("accounting:income-tax"), {"start_date": "2024-12-31", "end_date": "2024-01-01"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
