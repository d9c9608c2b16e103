# sales/tests/test_invoices.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from companies.tests.factories import account, make_company, make_item, make_user
from inventory.models import StockMovement
from inventory.services.stock_service import InsufficientStockError
from sales.models import SalesInvoice
from sales.services.customer_service import create_customer, set_customer_opening_balance
from sales.services.exceptions import CustomerError, InvoiceError, InvoiceStateError
from sales.services.invoice_service import cancel_invoice, create_invoice, issue_invoice
from sales.services.payment_service import allocate_payment


def debit_on(voucher, acc):
    return sum((l.debit for l in voucher.lines.filter(account=acc)), Decimal("0"))


def credit_on(voucher, acc):
    return sum((l.credit for l in voucher.lines.filter(account=acc)), Decimal("0"))


class SalesFixtureMixin:
    def setUp(self):
        self.company = make_company("ACME")
        self.user = make_user(self.company)
        self.customer = create_customer(company=self.company, name="Bright Stores", email="ap@bright.test")
        self.bottle = make_item(self.company, "FG-BOTTLE", "product", quantity=10, unit_cost="4")

    def mixed_lines(self):
        return [
            {"item": self.bottle, "quantity": "2", "unit_price": "100", "discount": "20", "tax_rate": "7.5"},
            {"description": "Delivery", "quantity": "1", "unit_price": "50"},
        ]

    def draft(self, **kwargs):
        kwargs.setdefault("invoice_date", date(2024, 3, 1))
        kwargs.setdefault("items", self.mixed_lines())
        return create_invoice(company=self.company, customer=self.customer, user=self.user, **kwargs)


class CustomerTests(SalesFixtureMixin, TestCase):
    def test_codes_are_sequential_per_company(self):
        second = create_customer(company=self.company, name="Corner Shop")
        other = create_customer(company=make_company("OTHER"), name="Elsewhere")
        self.assertEqual(self.customer.customer_code, "CUS-00001")
        self.assertEqual(second.customer_code, "CUS-00002")
        self.assertEqual(other.customer_code, "CUS-00001")

    def test_opening_balance_posts_once(self):
        customer = set_customer_opening_balance(customer=self.customer, amount="500", as_of=date(2024, 1, 1))
        voucher = customer.opening_balance_voucher
        self.assertEqual(voucher.source, JournalVoucher.SOURCE_OPENING_BALANCE)
        self.assertEqual(debit_on(voucher, account(self.company, Account.ACCOUNTS_RECEIVABLE)), Decimal("500.00"))
        self.assertEqual(credit_on(voucher, account(self.company, Account.OPENING_BALANCE_EQUITY)), Decimal("500.00"))

        with self.assertRaises(CustomerError):
            set_customer_opening_balance(customer=customer, amount="10", as_of=date(2024, 1, 1))


class InvoiceTests(SalesFixtureMixin, TestCase):
    def test_draft_totals_and_default_due_date(self):
        invoice = self.draft()

        self.assertEqual(invoice.invoice_number, "INV-00001")
        self.assertEqual(invoice.status, SalesInvoice.STATUS_DRAFT)
        self.assertEqual(invoice.due_date, date(2024, 3, 31))
        self.assertEqual(invoice.subtotal, Decimal("250.00"))
        self.assertEqual(invoice.discount_amount, Decimal("20.00"))
        self.assertEqual(invoice.tax_amount, Decimal("13.50"))
        self.assertEqual(invoice.total_amount, Decimal("243.50"))
        self.assertIsNone(invoice.journal_voucher)

        self.bottle.refresh_from_db()
        self.assertEqual(self.bottle.quantity_on_hand, Decimal("10"))

    def test_service_line_needs_description(self):
        with self.assertRaises(InvoiceError):
            self.draft(items=[{"quantity": "1", "unit_price": "50"}])

    def test_issue_posts_sales_and_cost_of_sales(self):
        invoice = issue_invoice(invoice=self.draft(), user=self.user)
        voucher = invoice.journal_voucher

        self.assertEqual(invoice.status, SalesInvoice.STATUS_ISSUED)
        self.assertEqual(invoice.amount_due, Decimal("243.50"))
        self.assertEqual(voucher.source, JournalVoucher.SOURCE_SALES_INVOICE)
        self.assertEqual(voucher.status, JournalVoucher.STATUS_POSTED)
        self.assertEqual(voucher.total_debits, voucher.total_credits)

        self.assertEqual(debit_on(voucher, account(self.company, Account.ACCOUNTS_RECEIVABLE)), Decimal("243.50"))
        self.assertEqual(debit_on(voucher, account(self.company, Account.SALES_DISCOUNT)), Decimal("20.00"))
        self.assertEqual(credit_on(voucher, account(self.company, Account.SALES_REVENUE)), Decimal("250.00"))
        self.assertEqual(credit_on(voucher, account(self.company, Account.VAT_PAYABLE)), Decimal("13.50"))
        self.assertEqual(debit_on(voucher, account(self.company, Account.COGS)), Decimal("8.00"))
        self.assertEqual(credit_on(voucher, account(self.company, Account.INVENTORY_FINISHED_GOODS)), Decimal("8.00"))

        self.bottle.refresh_from_db()
        self.assertEqual(self.bottle.quantity_on_hand, Decimal("8"))
        line = invoice.items.get(item=self.bottle)
        self.assertEqual(line.unit_cost, Decimal("4.0000"))
        self.assertTrue(
            StockMovement.objects.filter(
                item=self.bottle,
                movement_type=StockMovement.MovementType.SALE,
                reference=invoice.invoice_number,
            ).exists()
        )

    def test_issue_only_from_draft(self):
        invoice = self.draft(post=True)
        with self.assertRaises(InvoiceStateError):
            issue_invoice(invoice=invoice)

    def test_insufficient_stock_leaves_nothing_behind(self):
        lines = [{"item": self.bottle, "quantity": "11", "unit_price": "100"}]
        with self.assertRaises(InsufficientStockError):
            self.draft(items=lines, post=True)

        self.assertFalse(SalesInvoice.objects.exists())
        self.assertFalse(JournalVoucher.objects.filter(source=JournalVoucher.SOURCE_SALES_INVOICE).exists())
        self.bottle.refresh_from_db()
        self.assertEqual(self.bottle.quantity_on_hand, Decimal("10"))

    def test_cancel_reverses_and_restocks(self):
        invoice = self.draft(post=True)
        original = invoice.journal_voucher

        invoice = cancel_invoice(invoice=invoice, user=self.user, cancel_date=date(2024, 3, 5))
        original.refresh_from_db()

        self.assertEqual(invoice.status, SalesInvoice.STATUS_CANCELLED)
        self.assertEqual(invoice.amount_due, Decimal("0.00"))
        self.assertEqual(original.status, JournalVoucher.STATUS_REVERSED)
        self.assertEqual(invoice.reversal_voucher.reversal_of, original)
        self.assertEqual(
            credit_on(invoice.reversal_voucher, account(self.company, Account.ACCOUNTS_RECEIVABLE)),
            Decimal("243.50"),
        )

        self.bottle.refresh_from_db()
        self.assertEqual(self.bottle.quantity_on_hand, Decimal("10"))
        self.assertEqual(self.bottle.average_unit_cost, Decimal("4.0000"))
        self.assertTrue(
            StockMovement.objects.filter(item=self.bottle, movement_type=StockMovement.MovementType.SALE_REVERSAL).exists()
        )

    def test_cancel_refused_once_paid(self):
        invoice = self.draft(post=True)
        allocate_payment(
            company=self.company,
            customer=self.customer,
            amount="100",
            bank_account=account(self.company, Account.BANK),
            allocations=[{"invoice": invoice, "amount_applied": "100"}],
            payment_date=date(2024, 3, 2),
        )
        with self.assertRaises(InvoiceStateError):
            cancel_invoice(invoice=invoice)

    def test_cancel_refused_for_draft(self):
        with self.assertRaises(InvoiceStateError):
            cancel_invoice(invoice=self.draft())

    def test_foreign_item_is_refused(self):
        foreign = make_item(make_company("OTHER"), "FG-X", quantity=5, unit_cost="1")
        with self.assertRaises(InvoiceError):
            self.draft(items=[{"item": foreign, "quantity": "1", "unit_price": "10"}])
