# accounting/tests/test_reports.py

from __future__ import annotations

from datetime import date

from django.test import TestCase

from accounting.models.account import Account
from accounting.services.balance_sheet_service import generate_balance_sheet
from accounting.services.cash_flow_service import get_cash_flow_summary
from accounting.services.general_ledger_service import get_account_statement, get_general_ledger
from accounting.services.income_statement_service import get_income_statement
from accounting.services.opening_balances_service import OpeningBalancesError, create_opening_balances
from accounting.services.trial_balance_service import TrialBalanceService
from companies.tests.factories import account, make_company, post_simple


class FinancialReportTests(TestCase):
    """
    Ledger:
      2023-12-15  Dr Cash 2,000     Cr Sales 2,000      (prior year, unclosed)
      2024-01-10  Dr Cash 10,000    Cr Sales 10,000
      2024-01-12  Dr COGS 4,000     Cr Inventory FG 4,000
      2024-02-05  Dr Rent 1,500     Cr Cash 1,500
    Opening balances 2023-12-01: Inventory FG 4,000 Dr (equity plug)
    """

    def setUp(self):
        self.company = make_company("ACME")
        self.cash = account(self.company, Account.CASH)
        self.sales = account(self.company, Account.SALES_REVENUE)
        self.cogs = account(self.company, Account.COGS)
        self.fg = account(self.company, Account.INVENTORY_FINISHED_GOODS)
        self.rent = account(self.company, code="61000")

        create_opening_balances(
            company=self.company,
            as_of=date(2023, 12, 1),
            lines=[{"account_id": self.fg.pk, "debit": "4000"}],
        )
        post_simple(self.company, date(2023, 12, 15), self.cash, self.sales, "2000")
        post_simple(self.company, date(2024, 1, 10), self.cash, self.sales, "10000")
        post_simple(self.company, date(2024, 1, 12), self.cogs, self.fg, "4000")
        post_simple(self.company, date(2024, 2, 5), self.rent, self.cash, "1500")

    def test_trial_balance_balances(self):
        tb = TrialBalanceService().generate(company=self.company, as_of=date(2024, 3, 31))
        rows = {r["account_code"]: r for r in tb["accounts"]}

        self.assertTrue(tb["totals"]["balanced"])
        self.assertEqual(rows[self.cash.code]["debit"], 12000.0)
        self.assertEqual(rows[self.cash.code]["credit"], 1500.0)
        self.assertEqual(rows[self.cash.code]["debit_minor"], 1200000)

    def test_trial_balance_respects_as_of(self):
        tb = TrialBalanceService().generate(company=self.company, as_of=date(2023, 12, 31))
        codes = {r["account_code"] for r in tb["accounts"]}
        self.assertNotIn(self.rent.code, codes)

    def test_income_statement_sections(self):
        statement = get_income_statement(
            company=self.company,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 12, 31),
        )
        totals = statement["totals"]

        self.assertEqual(totals["revenue"]["amount"], 10000.0)
        self.assertEqual(totals["cost_of_sales"]["amount"], 4000.0)
        self.assertEqual(totals["gross_profit"]["amount"], 6000.0)
        self.assertEqual(totals["operating_expenses"]["amount"], 1500.0)
        self.assertEqual(totals["net_income"]["amount"], 4500.0)
        self.assertEqual(totals["cost_of_sales"]["percent_of_revenue"], 40.0)
        self.assertEqual([r["code"] for r in statement["operating_expenses"]], [self.rent.code])

    def test_income_statement_percent_is_zero_without_revenue(self):
        statement = get_income_statement(
            company=self.company,
            start_date=date(2024, 2, 1),
            end_date=date(2024, 2, 29),
        )
        self.assertEqual(statement["totals"]["operating_expenses"]["percent_of_revenue"], 0.0)

    def test_balance_sheet_balances_with_earnings_lines(self):
        sheet = generate_balance_sheet(company=self.company, as_of=date(2024, 3, 31))
        equity_names = [row["name"] for row in sheet["equity"]["accounts"]]

        self.assertTrue(sheet["balanced"])
        self.assertIn("Retained Earnings (Unclosed)", equity_names)
        self.assertIn("Current Year Earnings", equity_names)
        self.assertEqual(sheet["current_year_earnings"], 4500.0)
        self.assertEqual(sheet["totals"]["assets"], 10500.0)

    def test_general_ledger_running_balance(self):
        ledger = get_general_ledger(
            company=self.company,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 12, 31),
            account=self.cash,
        )
        (cash,) = ledger["accounts"]
        self.assertEqual(cash["opening_balance"], 2000.0)
        self.assertEqual([row["balance"] for row in cash["lines"]], [12000.0, 10500.0])
        self.assertEqual(cash["closing_balance"], 10500.0)

    def test_account_statement_uses_normal_side(self):
        statement = get_account_statement(
            company=self.company,
            account_code=self.sales.code,
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 31),
        )
        self.assertEqual(statement["opening_balance"], 2000.0)
        self.assertEqual(statement["closing_balance"], 12000.0)

    def test_cash_flow_covers_six_months(self):
        summary = get_cash_flow_summary(company=self.company, as_of=date(2024, 2, 15))
        months = {m["month"]: m for m in summary["months"]}

        self.assertEqual(len(summary["months"]), 6)
        self.assertEqual(list(months)[0], "2023-09")
        self.assertEqual(months["2023-12"]["revenue"], 2000.0)
        self.assertEqual(months["2024-01"]["expenses"], 4000.0)
        self.assertEqual(months["2024-02"]["net"], -1500.0)

    def test_opening_balances_post_once_per_date(self):
        with self.assertRaises(OpeningBalancesError):
            create_opening_balances(
                company=self.company,
                as_of=date(2023, 12, 1),
                lines=[{"account_id": self.cash.pk, "debit": "1"}],
            )
