# accounting/tests/test_payment_vouchers.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.models.payment_voucher import PaymentVoucher
from accounting.services.payment_voucher_service import (
    PaymentFormLockedError,
    PaymentVoucherStateError,
    approve_payment_voucher,
    create_payment_voucher,
    reject_payment_voucher,
)
from companies.services.company_service import set_payment_form_lock
from companies.tests.factories import account, make_company, make_user
from permissions.roles import ROLE_ACCOUNTANT


class PaymentVoucherTests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.preparer = make_user(self.company, ROLE_ACCOUNTANT)
        self.approver = make_user(self.company)
        self.bank = account(self.company, Account.BANK)
        self.rent = account(self.company, code="61000")

    def _create(self, **line_overrides):
        line = {
            "gl_account": self.rent,
            "amount": "1000.00",
            "line_description": "Office rent",
            "vat_applicable": True,
            "vat_rate": "7.5",
            "wht_applicable": True,
            "wht_rate": "10",
        }
        line.update(line_overrides)
        return create_payment_voucher(
            company=self.company,
            voucher_date=date(2024, 5, 10),
            payee_name="Landlord Ltd",
            bank_cash_account=self.bank,
            lines=[line],
            user=self.preparer,
        )

    def test_amounts_and_number(self):
        pv = self._create()

        self.assertEqual(pv.pv_number, "PV-2024-0001")
        self.assertEqual(pv.status, PaymentVoucher.STATUS_SUBMITTED)
        self.assertEqual(pv.gross_amount, Decimal("1000.00"))
        self.assertEqual(pv.total_vat, Decimal("75.00"))
        self.assertEqual(pv.total_wht, Decimal("100.00"))
        self.assertEqual(pv.net_payable, Decimal("975.00"))
        self.assertEqual(pv.prepared_by, self.preparer)

    def test_journal_voucher_awaits_approval_and_balances(self):
        pv = self._create()
        jv = pv.journal_voucher

        self.assertEqual(jv.status, JournalVoucher.STATUS_AWAITING_APPROVAL)
        self.assertEqual(jv.source, JournalVoucher.SOURCE_PAYMENT_VOUCHER)
        self.assertEqual(jv.total_debits, Decimal("1075.00"))
        self.assertEqual(jv.total_credits, Decimal("1075.00"))

        by_account = {line.account.system_role or line.account.code: line for line in jv.lines.select_related("account")}
        self.assertEqual(by_account["61000"].debit, Decimal("1000.00"))
        self.assertEqual(by_account[Account.VAT_INPUT].debit, Decimal("75.00"))
        self.assertEqual(by_account[Account.WHT_PAYABLE].credit, Decimal("100.00"))
        self.assertEqual(by_account[Account.BANK].credit, Decimal("975.00"))

    def test_no_tax_lines_when_not_applicable(self):
        pv = self._create(vat_applicable=False, wht_applicable=False)
        self.assertEqual(pv.net_payable, Decimal("1000.00"))
        self.assertEqual(pv.journal_voucher.lines.count(), 2)

    def test_approve_posts_journal_voucher(self):
        pv = approve_payment_voucher(payment_voucher=self._create(), user=self.approver)

        self.assertEqual(pv.status, PaymentVoucher.STATUS_APPROVED)
        self.assertEqual(pv.approved_by, self.approver)
        pv.journal_voucher.refresh_from_db()
        self.assertEqual(pv.journal_voucher.status, JournalVoucher.STATUS_POSTED)

    def test_reject_rejects_journal_voucher(self):
        pv = reject_payment_voucher(payment_voucher=self._create(), user=self.approver)

        self.assertEqual(pv.status, PaymentVoucher.STATUS_REJECTED)
        pv.journal_voucher.refresh_from_db()
        self.assertEqual(pv.journal_voucher.status, JournalVoucher.STATUS_REJECTED)

    def test_only_submitted_can_be_approved_or_rejected(self):
        pv = approve_payment_voucher(payment_voucher=self._create(), user=self.approver)

        with self.assertRaises(PaymentVoucherStateError):
            approve_payment_voucher(payment_voucher=pv, user=self.approver)
        with self.assertRaises(PaymentVoucherStateError):
            reject_payment_voucher(payment_voucher=pv, user=self.approver)

    def test_locked_form_refuses_creation(self):
        set_payment_form_lock(company=self.company, locked=True)
        self.company.refresh_from_db()

        with self.assertRaises(PaymentFormLockedError):
            self._create()
        self.assertEqual(PaymentVoucher.objects.count(), 0)
