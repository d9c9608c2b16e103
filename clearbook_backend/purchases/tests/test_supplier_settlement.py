# purchases/tests/test_supplier_settlement.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from companies.tests.factories import account, client_for, make_user
from permissions.roles import ROLE_PROCUREMENT_MANAGER
from purchases.models import SupplierInvoice, SupplierPayment
from purchases.services.purchase_order_service import approve_purchase_order, create_purchase_order
from purchases.services.receiving_service import receive_goods
from purchases.services.supplier_invoice_service import (
    DuplicateSupplierInvoiceError,
    SupplierInvoiceStateError,
    approve_supplier_invoice,
    create_invoice_from_grn,
    unpaid_supplier_invoices,
    void_supplier_invoice,
)
from purchases.services.supplier_payment_service import (
    SupplierPaymentError,
    pay_supplier,
    run_payment_schedule,
)
from purchases.services.supplier_service import create_supplier
from purchases.tests.test_purchasing import ProcurementFixtureMixin


class SettlementFixtureMixin(ProcurementFixtureMixin):
    def setUp(self):
        super().setUp()
        self.bank = account(self.company, Account.BANK)
        self.payable = account(self.company, Account.ACCOUNTS_PAYABLE)

    def received(self, supplier=None):
        po = self.approved() if supplier is None else self._approved_for(supplier)
        lines = [{"po_item": line, "quantity": line.quantity} for line in po.items.all()]
        return receive_goods(purchase_order=po, lines=lines, grn_date=date(2024, 4, 10), user=self.user)

    def _approved_for(self, supplier):
        po = create_purchase_order(
            company=self.company,
            supplier=supplier,
            po_date=date(2024, 4, 2),
            items=[{"item": self.cap, "quantity": "100", "unit_price": "1"}],
            user=self.user,
        )
        return approve_purchase_order(purchase_order=po, user=self.user)

    def approved_invoice(self, supplier=None):
        invoice = create_invoice_from_grn(grn=self.received(supplier), user=self.user)
        return approve_supplier_invoice(invoice=invoice, user=self.user)


class SupplierInvoiceTests(SettlementFixtureMixin, TestCase):
    def test_invoice_copies_grn_and_adds_vat(self):
        grn = self.received()
        invoice = create_invoice_from_grn(grn=grn, supplier_reference=" RT-881 ", user=self.user)

        self.assertEqual(invoice.invoice_number, "SINV-00001")
        self.assertEqual(invoice.status, SupplierInvoice.STATUS_AWAITING_APPROVAL)
        self.assertEqual(invoice.supplier_reference, "RT-881")
        self.assertEqual(invoice.subtotal, grn.total_value)
        self.assertEqual(invoice.subtotal, Decimal("325.00"))
        self.assertEqual(invoice.vat_amount, Decimal("22.50"))
        self.assertEqual(invoice.total_amount, Decimal("347.50"))
        self.assertEqual(invoice.due_date, date(2024, 5, 10))
        self.assertEqual(invoice.items.count(), 2)
        self.assertIsNone(invoice.journal_voucher)

    def test_one_invoice_per_grn(self):
        grn = self.received()
        create_invoice_from_grn(grn=grn)
        with self.assertRaises(DuplicateSupplierInvoiceError):
            create_invoice_from_grn(grn=grn)

    def test_approve_posts_input_vat(self):
        invoice = self.approved_invoice()
        jv = invoice.journal_voucher

        self.assertEqual(invoice.status, SupplierInvoice.STATUS_UNPAID)
        self.assertEqual(jv.source, JournalVoucher.SOURCE_SUPPLIER_INVOICE)
        self.assertEqual(jv.lines.get(account=account(self.company, Account.VAT_INPUT)).debit, Decimal("22.50"))
        self.assertEqual(jv.lines.get(account=self.payable).credit, Decimal("22.50"))

        with self.assertRaises(SupplierInvoiceStateError):
            approve_supplier_invoice(invoice=invoice)
        with self.assertRaises(SupplierInvoiceStateError):
            void_supplier_invoice(invoice=invoice)

    def test_zero_vat_invoice_posts_nothing(self):
        other = create_supplier(company=self.company, name="Cap Makers")
        invoice = self.approved_invoice(supplier=other)
        self.assertEqual(invoice.vat_amount, Decimal("0.00"))
        self.assertIsNone(invoice.journal_voucher)
        self.assertEqual(invoice.status, SupplierInvoice.STATUS_UNPAID)

    def test_void_frees_the_grn(self):
        grn = self.received()
        invoice = void_supplier_invoice(invoice=create_invoice_from_grn(grn=grn))
        self.assertEqual(invoice.status, SupplierInvoice.STATUS_VOID)

        again = create_invoice_from_grn(grn=grn)
        self.assertEqual(again.invoice_number, "SINV-00002")

    def test_unpaid_list_skips_drafts_and_settled(self):
        awaiting = create_invoice_from_grn(grn=self.received())
        unpaid = self.approved_invoice()

        listed = list(unpaid_supplier_invoices(self.company))
        self.assertEqual(listed, [unpaid])
        self.assertNotIn(awaiting, listed)

        pay_supplier(company=self.company, supplier=self.supplier, bank_account=self.bank, allocations=[{"invoice": unpaid}])
        self.assertEqual(list(unpaid_supplier_invoices(self.company)), [])


class SupplierPaymentTests(SettlementFixtureMixin, TestCase):
    def test_partial_payment_with_wht(self):
        invoice = self.approved_invoice()

        payment = pay_supplier(
            company=self.company,
            supplier=self.supplier,
            bank_account=self.bank,
            allocations=[{"invoice": invoice, "amount": "200"}],
            wht_rate="5",
            payment_date=date(2024, 5, 1),
            user=self.user,
        )
        jv = payment.journal_voucher
        invoice.refresh_from_db()

        self.assertEqual(payment.payment_number, "SPAY-00001")
        self.assertEqual(payment.gross_amount, Decimal("200.00"))
        self.assertEqual(payment.wht_amount, Decimal("10.00"))
        self.assertEqual(payment.net_amount, Decimal("190.00"))
        self.assertEqual(jv.source, JournalVoucher.SOURCE_SUPPLIER_PAYMENT)
        self.assertEqual(jv.lines.get(account=self.payable).debit, Decimal("200.00"))
        self.assertEqual(jv.lines.get(account=account(self.company, Account.WHT_PAYABLE)).credit, Decimal("10.00"))
        self.assertEqual(jv.lines.get(account=self.bank).credit, Decimal("190.00"))

        self.assertEqual(invoice.status, SupplierInvoice.STATUS_PARTIALLY_PAID)
        self.assertEqual(invoice.outstanding, Decimal("147.50"))

        pay_supplier(company=self.company, supplier=self.supplier, bank_account=self.bank, allocations=[{"invoice": invoice}])
        invoice.refresh_from_db()
        self.assertEqual(invoice.status, SupplierInvoice.STATUS_PAID)
        self.assertEqual(invoice.amount_paid, Decimal("347.50"))

    def test_no_wht_line_when_rate_is_zero(self):
        payment = pay_supplier(
            company=self.company,
            supplier=self.supplier,
            bank_account=self.bank,
            allocations=[{"invoice": self.approved_invoice()}],
        )
        self.assertFalse(payment.journal_voucher.lines.filter(account__system_role=Account.WHT_PAYABLE).exists())
        self.assertEqual(payment.net_amount, payment.gross_amount)

    def test_overpayment_and_unapproved_invoices_are_refused(self):
        invoice = self.approved_invoice()
        with self.assertRaises(SupplierPaymentError):
            pay_supplier(
                company=self.company,
                supplier=self.supplier,
                bank_account=self.bank,
                allocations=[{"invoice": invoice, "amount": "400"}],
            )

        awaiting = create_invoice_from_grn(grn=self.received())
        with self.assertRaises(SupplierPaymentError):
            pay_supplier(company=self.company, supplier=self.supplier, bank_account=self.bank, allocations=[{"invoice": awaiting}])

    def test_invoice_of_another_supplier_is_refused(self):
        invoice = self.approved_invoice()
        other = create_supplier(company=self.company, name="Cap Makers")
        with self.assertRaises(SupplierPaymentError):
            pay_supplier(company=self.company, supplier=other, bank_account=self.bank, allocations=[{"invoice": invoice}])

    def test_bank_account_must_be_an_asset(self):
        with self.assertRaises(SupplierPaymentError):
            pay_supplier(
                company=self.company,
                supplier=self.supplier,
                bank_account=self.payable,
                allocations=[{"invoice": self.approved_invoice()}],
            )

    def test_schedule_pays_each_supplier_once(self):
        other = create_supplier(company=self.company, name="Cap Makers")
        first = self.approved_invoice()
        second = self.approved_invoice(supplier=other)

        payments = run_payment_schedule(
            company=self.company,
            bank_account=self.bank,
            wht_rate="10",
            payment_date=date(2024, 5, 2),
            schedule=[
                {"supplier": self.supplier, "allocations": [{"invoice": first}], "narration": "April resin"},
                {"supplier": other, "allocations": [{"invoice": second}]},
            ],
            user=self.user,
        )

        self.assertEqual(len(payments), 2)
        self.assertEqual(payments[1].gross_amount, Decimal("100.00"))
        self.assertEqual(payments[1].wht_amount, Decimal("10.00"))
        self.assertEqual(payments[1].net_amount, Decimal("90.00"))
        first.refresh_from_db()
        second.refresh_from_db()
        self.assertEqual(first.status, SupplierInvoice.STATUS_PAID)
        self.assertEqual(second.status, SupplierInvoice.STATUS_PAID)

    def test_schedule_is_all_or_nothing(self):
        other = create_supplier(company=self.company, name="Cap Makers")
        first = self.approved_invoice()
        second = self.approved_invoice(supplier=other)

        with self.assertRaises(SupplierPaymentError):
            run_payment_schedule(
                company=self.company,
                bank_account=self.bank,
                schedule=[
                    {"supplier": self.supplier, "allocations": [{"invoice": first}]},
                    {"supplier": other, "allocations": [{"invoice": second, "amount": "999"}]},
                ],
            )

        self.assertFalse(SupplierPayment.objects.filter(company=self.company).exists())
        first.refresh_from_db()
        self.assertEqual(first.status, SupplierInvoice.STATUS_UNPAID)


class SupplierSettlementAPITests(SettlementFixtureMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.client = client_for(make_user(self.company, ROLE_PROCUREMENT_MANAGER))

    def test_invoice_approve_and_pay(self):
        grn = self.received()

        res = self.client.post(reverse("purchases:supplier-invoice-list"), {"grn_id": grn.pk}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        invoice_id = res.data["id"]

        res = self.client.post(reverse("purchases:supplier-invoice-list"), {"grn_id": grn.pk}, format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

        res = self.client.post(reverse("purchases:supplier-invoice-approve", args=[invoice_id]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], SupplierInvoice.STATUS_UNPAID)

        res = self.client.post(reverse("purchases:supplier-invoice-void", args=[invoice_id]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        res = self.client.get(reverse("purchases:supplier-unpaid-invoices", args=[self.supplier.pk]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual([row["id"] for row in res.data], [invoice_id])

        res = self.client.post(
            reverse("purchases:supplier-payment-list"),
            {
                "supplier_id": self.supplier.pk,
                "bank_account_id": self.bank.pk,
                "payment_date": "2024-05-01",
                "wht_rate": "5",
                "allocations": [{"invoice_id": invoice_id, "amount": "200"}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(res.data["net_amount"]), Decimal("190.00"))
        self.assertIsNotNone(res.data["journal_voucher_number"])

        res = self.client.get(reverse("purchases:supplier-invoice-detail", args=[invoice_id]))
        self.assertEqual(res.data["status"], SupplierInvoice.STATUS_PARTIALLY_PAID)

    def test_payment_schedule_endpoint(self):
        invoice = self.approved_invoice()
        res = self.client.post(
            reverse("purchases:payment-schedule"),
            {
                "bank_account_id": self.bank.pk,
                "wht_rate": "0",
                "payments": [{"supplier_id": self.supplier.pk, "allocations": [{"invoice_id": invoice.pk}]}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(res.data), 1)
        self.assertEqual(Decimal(res.data[0]["gross_amount"]), Decimal("347.50"))

        res = self.client.get(reverse("purchases:supplier-payment-list"), {"supplier_id": self.supplier.pk})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
