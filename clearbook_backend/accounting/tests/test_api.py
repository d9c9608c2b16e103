# accounting/tests/test_api.py

from __future__ import annotations

from datetime import date

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from accounting.models.payment_voucher import PaymentVoucher
from accounting.services.journal_voucher_service import create_journal_voucher
from accounting.services.payment_voucher_service import approve_payment_voucher, create_payment_voucher
from companies.tests.factories import account, client_for, make_company, make_user, post_simple
from permissions.models import AuditLog
from permissions.roles import ROLE_ACCOUNTANT, ROLE_STAFF, ROLE_STORE_MANAGER
from sales.models import SalesInvoice
from sales.services.customer_service import create_customer
from sales.services.invoice_service import cancel_invoice, create_invoice

User = get_user_model()


class AccountingAPITests(TestCase):
    """
    GUARANTEES:
    - Accounting endpoints need the view_accounting module
    - Everything is scoped to the caller's company (foreign ids -> 404)
    - Engine state errors surface as 403, duplicates as 409
    """

    def setUp(self):
        self.company = make_company("ACME")
        self.accountant = make_user(self.company, ROLE_ACCOUNTANT)
        self.client = client_for(self.accountant)
        self.cash = account(self.company, Account.CASH)
        self.revenue = account(self.company, Account.SALES_REVENUE)

    def _voucher_payload(self, status_value="draft"):
        return {
            "entry_date": "2024-04-01",
            "narration": "Manual journal",
            "status": status_value,
            "lines": [
                {"account_id": self.cash.pk, "debit": "300.00"},
                {"account_id": self.revenue.pk, "credit": "300.00"},
            ],
        }

    def test_anonymous_is_rejected(self):
        res = self.client_class().get(reverse("accounting:account-list"))
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_role_without_accounting_module_is_forbidden(self):
        store = make_user(self.company, ROLE_STORE_MANAGER)
        res = client_for(store).get(reverse("accounting:account-list"))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_user_grant_opens_the_module(self):
        from permissions.services.permission_service import set_user_permissions

        staff = make_user(self.company, ROLE_STAFF)
        set_user_permissions(company=self.company, user=staff, modules=["view_accounting"])
        res = client_for(staff).get(reverse("accounting:account-list"))
        self.assertEqual(res.status_code, status.HTTP_200_OK)

    def test_list_accounts_filters_by_type(self):
        res = self.client.get(reverse("accounting:account-list"), {"account_type": "EQUITY"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data)
        self.assertTrue(all(row["account_type"] == "EQUITY" for row in res.data))

    def test_duplicate_account_code_conflicts(self):
        payload = {"code": self.cash.code, "name": "Petty cash", "account_type": "ASSET"}
        res = self.client.post(reverse("accounting:account-list"), payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

    def test_create_account_with_parent(self):
        payload = {"code": "10110", "name": "Petty Cash", "account_type": "ASSET", "parent_id": self.cash.pk}
        res = self.client.post(reverse("accounting:account-list"), payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["parent_code"], self.cash.code)

    def test_voucher_lifecycle_and_state_errors(self):
        res = self.client.post(reverse("accounting:voucher-list"), self._voucher_payload(), format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        voucher_id = res.data["id"]
        self.assertEqual(res.data["voucher_number"], "ACME-2024-000001")

        res = self.client.post(reverse("accounting:voucher-post", args=[voucher_id]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], JournalVoucher.STATUS_POSTED)

        res = self.client.post(reverse("accounting:voucher-post", args=[voucher_id]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        res = self.client.delete(reverse("accounting:voucher-detail", args=[voucher_id]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        res = self.client.post(reverse("accounting:voucher-reverse", args=[voucher_id]), {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["source"], JournalVoucher.SOURCE_REVERSAL)

        self.assertTrue(AuditLog.objects.filter(company=self.company, action="post_voucher").exists())

    def test_unbalanced_voucher_is_400(self):
        payload = self._voucher_payload()
        payload["lines"][1]["credit"] = "200.00"
        res = self.client.post(reverse("accounting:voucher-list"), payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_company_voucher_is_404(self):
        other = make_company("BETA")
        foreign = post_simple(
            other,
            date(2024, 1, 1),
            account(other, Account.CASH),
            account(other, Account.SALES_REVENUE),
            "10",
        )
        res = self.client.get(reverse("accounting:voucher-detail", args=[foreign.pk]))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_user_without_company_is_forbidden(self):
        orphan = User.objects.create_user(
            email="orphan@example.test",
            password="pass12345",
            role=ROLE_ACCOUNTANT,
            is_superuser=True,
        )
        res = client_for(orphan).get(reverse("accounting:account-list"))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_period_close_then_locked_posting_is_400(self):
        post_simple(self.company, date(2024, 1, 5), self.cash, self.revenue, "100")
        res = self.client.post(
            reverse("accounting:period-close"),
            {"start_date": "2024-01-01", "end_date": "2024-01-31"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["net_profit"], 100.0)

        payload = self._voucher_payload("posted")
        payload["entry_date"] = "2024-01-20"
        res = self.client.post(reverse("accounting:voucher-list"), payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_payment_voucher_endpoints(self):
        payload = {
            "voucher_date": "2024-04-02",
            "payee_name": "Supplier X",
            "bank_cash_account_id": account(self.company, Account.BANK).pk,
            "lines": [{"gl_account_id": account(self.company, code="63000").pk, "amount": "500.00"}],
        }
        res = self.client.post(reverse("accounting:pv-list"), payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        pv_id = res.data["id"]

        res = self.client.post(reverse("accounting:pv-approve", args=[pv_id]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "Approved")

        res = self.client.post(reverse("accounting:pv-reject", args=[pv_id]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_reconciliation_conflict_is_409(self):
        payload = {
            "account_id": account(self.company, Account.BANK).pk,
            "statement_date": "2024-01-31",
            "statement_balance": "0.00",
        }
        first = self.client.post(reverse("accounting:reconciliation-list"), payload, format="json")
        second = self.client.post(reverse("accounting:reconciliation-list"), payload, format="json")
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)

    def test_duplicate_tax_name_is_409(self):
        payload = {"name": "VAT 7.5%", "tax_type": "VAT", "rate": "7.50"}
        first = self.client.post(reverse("accounting:tax-config-list"), payload, format="json")
        second = self.client.post(reverse("accounting:tax-config-list"), payload, format="json")
        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)

    def test_reports_respond(self):
        post_simple(self.company, date(2024, 1, 5), self.cash, self.revenue, "100")
        for name in ("trial-balance", "balance-sheet", "cash-flow"):
            res = self.client.get(reverse(f"accounting:{name}"), {"as_of": "2024-06-30"})
            self.assertEqual(res.status_code, status.HTTP_200_OK, name)

        res = self.client.get(reverse("accounting:trial-balance"), {"as_of": "not-a-date"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self.client.get(
            reverse("accounting:account-statement"),
            {"account_code": "99999", "start_date": "2024-01-01", "end_date": "2024-01-31"},
        )
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_payment_voucher_journal_cannot_be_posted_directly(self):
        pv = create_payment_voucher(
            company=self.company,
            voucher_date=date(2024, 4, 2),
            payee_name="Landlord Ltd",
            bank_cash_account=account(self.company, Account.BANK),
            lines=[{"gl_account": account(self.company, code="61000"), "amount": "800.00"}],
            user=self.accountant,
        )

        for name in ("accounting:voucher-post", "accounting:voucher-reject"):
            res = self.client.post(reverse(name, args=[pv.journal_voucher_id]))
            self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN, name)

        pv.refresh_from_db()
        pv.journal_voucher.refresh_from_db()
        self.assertEqual(pv.status, PaymentVoucher.STATUS_SUBMITTED)
        self.assertEqual(pv.journal_voucher.status, JournalVoucher.STATUS_AWAITING_APPROVAL)

        pv = approve_payment_voucher(payment_voucher=pv, user=self.accountant)
        self.assertEqual(pv.status, PaymentVoucher.STATUS_APPROVED)

    def test_invoice_journal_cannot_be_reversed_directly(self):
        customer = create_customer(company=self.company, name="Bright Stores")
        invoice = create_invoice(
            company=self.company,
            customer=customer,
            invoice_date=date(2024, 4, 3),
            items=[{"description": "Consulting", "quantity": "1", "unit_price": "400"}],
            post=True,
            user=self.accountant,
        )

        res = self.client.post(
            reverse("accounting:voucher-reverse", args=[invoice.journal_voucher_id]),
            {"entry_date": "2024-04-04"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        invoice.refresh_from_db()
        self.assertEqual(invoice.status, SalesInvoice.STATUS_ISSUED)
        self.assertEqual(invoice.journal_voucher.status, JournalVoucher.STATUS_POSTED)
        self.assertFalse(JournalVoucher.objects.filter(reversal_of=invoice.journal_voucher).exists())

        invoice = cancel_invoice(invoice=invoice, user=self.accountant, cancel_date=date(2024, 4, 4))
        self.assertEqual(invoice.status, SalesInvoice.STATUS_CANCELLED)

    def test_document_voucher_cannot_be_edited_or_deleted(self):
        voucher = create_journal_voucher(
            company=self.company,
            entry_date=date(2024, 4, 5),
            narration="Expense draft",
            lines=[{"account": self.cash, "debit": "90"}, {"account": self.revenue, "credit": "90"}],
            source=JournalVoucher.SOURCE_EXPENSE,
        )

        res = self.client.patch(
            reverse("accounting:voucher-detail", args=[voucher.pk]), {"narration": "Changed"}, format="json"
        )
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        res = self.client.delete(reverse("accounting:voucher-detail", args=[voucher.pk]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(JournalVoucher.objects.filter(pk=voucher.pk, narration="Expense draft").exists())
