# sales/tests/test_payments.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from companies.tests.factories import account
from sales.models import CreditNote, PaymentAllocation, SalesInvoice
from sales.services.credit_note_service import create_credit_note, post_credit_note
from sales.services.customer_service import create_customer
from sales.services.exceptions import CreditNoteError, CreditNoteStateError, PaymentAllocationError
from sales.services.payment_service import allocate_payment
from sales.tests.test_invoices import SalesFixtureMixin, credit_on, debit_on


class PaymentAllocationTests(SalesFixtureMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.bank = account(self.company, Account.BANK)
        self.inv1 = self.draft(post=True, items=[{"item": self.bottle, "quantity": "1", "unit_price": "100"}])
        self.inv2 = self.draft(post=True, items=[{"description": "Consulting", "quantity": "1", "unit_price": "300"}])

    def pay(self, amount, allocations, customer=None, **extra):
        return allocate_payment(
            company=self.company,
            customer=customer or self.customer,
            amount=amount,
            **extra,
            bank_account=self.bank,
            allocations=allocations,
            payment_date=date(2024, 3, 10),
            user=self.user,
        )

    def test_one_receipt_settles_several_invoices(self):
        payment = self.pay(
            "250",
            [
                {"invoice": self.inv1, "amount_applied": "100"},
                {"invoice": self.inv2, "amount_applied": "150"},
            ],
        )
        self.inv1.refresh_from_db()
        self.inv2.refresh_from_db()

        self.assertEqual(payment.payment_number, "RCT-00001")
        self.assertEqual(PaymentAllocation.objects.filter(payment=payment).count(), 2)
        self.assertEqual(self.inv1.status, SalesInvoice.STATUS_PAID)
        self.assertEqual(self.inv1.amount_due, Decimal("0.00"))
        self.assertEqual(self.inv2.status, SalesInvoice.STATUS_PARTIAL)
        self.assertEqual(self.inv2.amount_paid, Decimal("150.00"))
        self.assertEqual(self.inv2.amount_due, Decimal("150.00"))

        voucher = payment.journal_voucher
        self.assertEqual(voucher.source, JournalVoucher.SOURCE_CUSTOMER_PAYMENT)
        self.assertEqual(debit_on(voucher, self.bank), Decimal("250.00"))
        self.assertEqual(credit_on(voucher, account(self.company, Account.ACCOUNTS_RECEIVABLE)), Decimal("250.00"))

    def test_allocations_must_sum_to_amount(self):
        with self.assertRaises(PaymentAllocationError):
            self.pay("200", [{"invoice": self.inv1, "amount_applied": "100"}])

    def test_allocation_cannot_exceed_due(self):
        with self.assertRaises(PaymentAllocationError):
            self.pay("150", [{"invoice": self.inv1, "amount_applied": "150"}])

    def test_invoice_of_another_customer_is_refused(self):
        other = create_customer(company=self.company, name="Corner Shop")
        with self.assertRaises(PaymentAllocationError):
            self.pay("100", [{"invoice": self.inv1, "amount_applied": "100"}], customer=other)

    def test_draft_invoice_cannot_be_paid(self):
        draft = self.draft()
        with self.assertRaises(PaymentAllocationError):
            self.pay("10", [{"invoice": draft, "amount_applied": "10"}])

    def test_failed_allocation_posts_nothing(self):
        with self.assertRaises(PaymentAllocationError):
            self.pay(
                "400",
                [
                    {"invoice": self.inv1, "amount_applied": "100"},
                    {"invoice": self.inv2, "amount_applied": "300.01"},
                ],
            )
        self.assertFalse(JournalVoucher.objects.filter(source=JournalVoucher.SOURCE_CUSTOMER_PAYMENT).exists())

    def test_withheld_tax_goes_to_wht_receivable(self):
        payment = self.pay("300", [{"invoice": self.inv2, "amount_applied": "300"}], wht_amount="15")
        self.inv2.refresh_from_db()

        voucher = payment.journal_voucher
        self.assertEqual(payment.wht_amount, Decimal("15.00"))
        self.assertEqual(debit_on(voucher, self.bank), Decimal("285.00"))
        self.assertEqual(debit_on(voucher, account(self.company, Account.WHT_RECEIVABLE)), Decimal("15.00"))
        self.assertEqual(credit_on(voucher, account(self.company, Account.ACCOUNTS_RECEIVABLE)), Decimal("300.00"))
        self.assertEqual(self.inv2.status, SalesInvoice.STATUS_PAID)

    def test_withheld_tax_must_be_below_amount(self):
        with self.assertRaises(PaymentAllocationError):
            self.pay("300", [{"invoice": self.inv2, "amount_applied": "300"}], wht_amount="300")


class CreditNoteTests(SalesFixtureMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.invoice = self.draft(post=True)

    def note(self, quantity="1", unit_price="100", tax_rate="7.5"):
        return create_credit_note(
            company=self.company,
            invoice=self.invoice,
            items=[{"item": self.bottle, "quantity": quantity, "unit_price": unit_price, "tax_rate": tax_rate}],
            credit_date=date(2024, 3, 15),
            reason="Damaged in transit",
            user=self.user,
        )

    def test_post_credit_note(self):
        note = self.note()
        self.assertEqual(note.credit_note_number, "CN-00001")
        self.assertEqual(note.status, CreditNote.STATUS_DRAFT)
        self.assertEqual(note.total_amount, Decimal("107.50"))

        note = post_credit_note(credit_note=note, user=self.user)
        voucher = note.journal_voucher
        self.assertEqual(note.status, CreditNote.STATUS_POSTED)
        self.assertEqual(voucher.source, JournalVoucher.SOURCE_CREDIT_NOTE)
        self.assertEqual(debit_on(voucher, account(self.company, Account.SALES_RETURNS_ALLOWANCES)), Decimal("100.00"))
        self.assertEqual(debit_on(voucher, account(self.company, Account.VAT_PAYABLE)), Decimal("7.50"))
        self.assertEqual(credit_on(voucher, account(self.company, Account.ACCOUNTS_RECEIVABLE)), Decimal("107.50"))

        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.amount_due, Decimal("136.00"))

    def test_full_credit_marks_invoice_paid(self):
        note = create_credit_note(
            company=self.company,
            invoice=self.invoice,
            items=[{"description": "Full credit", "quantity": "1", "unit_price": "243.50"}],
            credit_date=date(2024, 3, 15),
        )
        post_credit_note(credit_note=note)
        self.invoice.refresh_from_db()
        self.assertEqual(self.invoice.amount_due, Decimal("0.00"))
        self.assertEqual(self.invoice.status, SalesInvoice.STATUS_PAID)

    def test_post_only_once(self):
        note = post_credit_note(credit_note=self.note())
        with self.assertRaises(CreditNoteStateError):
            post_credit_note(credit_note=note)

    def test_credits_cannot_exceed_invoice(self):
        post_credit_note(credit_note=self.note(quantity="2"))
        with self.assertRaises(CreditNoteError):
            post_credit_note(credit_note=self.note(quantity="1"))

    def test_draft_invoice_cannot_be_credited(self):
        with self.assertRaises(CreditNoteError):
            create_credit_note(
                company=self.company,
                invoice=self.draft(),
                items=[{"description": "x", "quantity": "1", "unit_price": "1"}],
            )
