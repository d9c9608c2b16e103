# sales/tests/test_receivables.py

from __future__ import annotations

from datetime import date

from django.test import TestCase

from accounting.models.account import Account
from companies.tests.factories import account
from sales.services.customer_service import create_customer, set_customer_opening_balance
from sales.services.invoice_service import cancel_invoice, create_invoice
from sales.services.payment_service import allocate_payment
from sales.services.receivables_service import ar_aging, bucket_for, customer_statement
from sales.tests.test_invoices import SalesFixtureMixin


def service_line(amount):
    return [{"description": "Services", "quantity": "1", "unit_price": str(amount)}]


class AgingTests(SalesFixtureMixin, TestCase):
    def test_bucket_edges(self):
        self.assertEqual(bucket_for(0), "current")
        self.assertEqual(bucket_for(1), "1_30")
        self.assertEqual(bucket_for(30), "1_30")
        self.assertEqual(bucket_for(31), "31_60")
        self.assertEqual(bucket_for(90), "61_90")
        self.assertEqual(bucket_for(91), "91_plus")

    def test_aging_groups_open_invoices_by_customer(self):
        other = create_customer(company=self.company, name="Corner Shop")

        self.draft(post=True, invoice_date=date(2024, 6, 1), items=service_line(100))  # due 07-01 -> current
        self.draft(post=True, invoice_date=date(2024, 3, 1), items=service_line(200))  # due 03-31 -> 91 days
        self.draft(post=True, invoice_date=date(2024, 5, 1), due_date=date(2024, 5, 20), items=service_line(50))  # 41 days
        self.draft(invoice_date=date(2024, 5, 1), items=service_line(999))  # draft, ignored
        cancelled = self.draft(post=True, invoice_date=date(2024, 5, 1), items=service_line(70))
        cancel_invoice(invoice=cancelled)

        create_invoice(
            company=self.company,
            customer=other,
            invoice_date=date(2024, 6, 15),
            due_date=date(2024, 6, 20),
            items=service_line(30),
            post=True,
        )

        report = ar_aging(company=self.company, as_of=date(2024, 6, 30))

        self.assertEqual(report["buckets"], ["Current", "1-30", "31-60", "61-90", "91+"])
        by_name = {row["customer_name"]: row for row in report["customers"]}
        bright = by_name["Bright Stores"]
        self.assertEqual(bright["current"], 100.0)
        self.assertEqual(bright["31_60"], 50.0)
        self.assertEqual(bright["91_plus"], 200.0)
        self.assertEqual(bright["total"], 350.0)
        self.assertEqual(bright["total_minor"], 35000)
        self.assertEqual(len(bright["invoices"]), 3)

        self.assertEqual(by_name["Corner Shop"]["1_30"], 30.0)
        self.assertEqual(report["totals"]["total"], 380.0)
        self.assertEqual(report["totals"]["1_30_minor"], 3000)

    def test_paid_invoices_drop_out(self):
        invoice = self.draft(post=True, items=service_line(100))
        allocate_payment(
            company=self.company,
            customer=self.customer,
            amount="100",
            bank_account=account(self.company, Account.BANK),
            allocations=[{"invoice": invoice, "amount_applied": "100"}],
            payment_date=date(2024, 3, 5),
        )
        report = ar_aging(company=self.company, as_of=date(2024, 6, 30))
        self.assertEqual(report["customers"], [])
        self.assertEqual(report["totals"]["total"], 0.0)


class CustomerStatementTests(SalesFixtureMixin, TestCase):
    def test_running_balance(self):
        set_customer_opening_balance(customer=self.customer, amount="100", as_of=date(2024, 1, 1))
        invoice = self.draft(post=True, invoice_date=date(2024, 3, 1), items=service_line(250))
        allocate_payment(
            company=self.company,
            customer=self.customer,
            amount="150",
            bank_account=account(self.company, Account.BANK),
            allocations=[{"invoice": invoice, "amount_applied": "150"}],
            payment_date=date(2024, 3, 10),
        )
        self.draft(post=True, invoice_date=date(2024, 4, 5), items=service_line(40))  # after the period

        self.customer.refresh_from_db()
        statement = customer_statement(customer=self.customer, start_date=date(2024, 2, 1), end_date=date(2024, 3, 31))

        self.assertEqual(statement["opening_balance"], 100.0)
        self.assertEqual([row["type"] for row in statement["lines"]], ["invoice", "payment"])
        self.assertEqual(statement["lines"][0]["balance"], 350.0)
        self.assertEqual(statement["lines"][1]["credit"], 150.0)
        self.assertEqual(statement["closing_balance"], 200.0)
        self.assertEqual(statement["closing_balance_minor"], 20000)

    def test_opening_balance_inside_period_is_a_line(self):
        set_customer_opening_balance(customer=self.customer, amount="80", as_of=date(2024, 2, 10))
        self.customer.refresh_from_db()
        statement = customer_statement(customer=self.customer, start_date=date(2024, 2, 1), end_date=date(2024, 2, 28))
        self.assertEqual(statement["opening_balance"], 0.0)
        self.assertEqual(statement["lines"][0]["type"], "opening_balance")
        self.assertEqual(statement["closing_balance"], 80.0)
