# sales/tests/test_api.py

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status

from accounting.models.account import Account
from companies.tests.factories import account, client_for, make_company, make_item, make_user
from permissions.models import AuditLog
from permissions.roles import ROLE_ACCOUNTANT, ROLE_SALES_MANAGER
from sales.models import SalesInvoice
from sales.services.customer_service import create_customer


class SalesAPITests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.manager = make_user(self.company, ROLE_SALES_MANAGER)
        self.client = client_for(self.manager)
        self.customer = create_customer(company=self.company, name="Bright Stores")
        self.bottle = make_item(self.company, "FG-BOTTLE", "product", quantity=10, unit_cost="4")

    def invoice_payload(self, quantity="2", post=True):
        return {
            "customer_id": self.customer.pk,
            "invoice_date": "2024-03-01",
            "post": post,
            "items": [{"item_id": self.bottle.pk, "quantity": quantity, "unit_price": "100", "tax_rate": "7.5"}],
        }

    def test_accountant_has_no_sales_module(self):
        res = client_for(make_user(self.company, ROLE_ACCOUNTANT)).get(reverse("sales:invoice-list"))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_customer_assigns_code(self):
        res = self.client.post(reverse("sales:customer-list"), {"name": "Corner Shop", "email": "x@corner.test"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["customer_code"], "CUS-00002")
        self.assertTrue(AuditLog.objects.filter(company=self.company, action="create_customer").exists())

    def test_customer_opening_balance_twice_is_400(self):
        url = reverse("sales:customer-opening-balance", args=[self.customer.pk])
        res = self.client.post(url, {"amount": "500", "as_of": "2024-01-01"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertTrue(res.data["voucher_number"].startswith("ACME-2024-"))

        res = self.client.post(url, {"amount": "500", "as_of": "2024-01-01"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_and_issue_invoice(self):
        res = self.client.post(reverse("sales:invoice-list"), self.invoice_payload(post=False), format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["status"], SalesInvoice.STATUS_DRAFT)
        self.assertEqual(Decimal(res.data["total_amount"]), Decimal("215.00"))
        self.assertEqual(res.data["due_date"], "2024-03-31")

        issue_url = reverse("sales:invoice-issue", args=[res.data["id"]])
        res = self.client.post(issue_url)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], SalesInvoice.STATUS_ISSUED)
        self.assertIsNotNone(res.data["journal_voucher_number"])

        res = self.client.post(issue_url)
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_insufficient_stock_is_400(self):
        res = self.client.post(reverse("sales:invoice-list"), self.invoice_payload(quantity="50"), format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Insufficient stock", res.data["detail"])
        self.assertFalse(SalesInvoice.objects.exists())

    def test_foreign_customer_is_404(self):
        foreign = create_customer(company=make_company("OTHER"), name="Elsewhere")
        payload = self.invoice_payload()
        payload["customer_id"] = foreign.pk
        res = self.client.post(reverse("sales:invoice-list"), payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_payment_then_cancel_is_forbidden(self):
        invoice_id = self.client.post(reverse("sales:invoice-list"), self.invoice_payload(), format="json").data["id"]

        res = self.client.post(
            reverse("sales:payment-list"),
            {
                "customer_id": self.customer.pk,
                "amount": "100",
                "bank_account_id": account(self.company, Account.BANK).pk,
                "payment_date": "2024-03-05",
                "allocations": [{"invoice_id": invoice_id, "amount_applied": "100"}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["payment_number"], "RCT-00001")

        res = self.client.get(reverse("sales:invoice-detail", args=[invoice_id]))
        self.assertEqual(res.data["status"], SalesInvoice.STATUS_PARTIAL)
        self.assertEqual(Decimal(res.data["amount_due"]), Decimal("115.00"))

        res = self.client.post(reverse("sales:invoice-cancel", args=[invoice_id]), {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_credit_note_flow(self):
        invoice_id = self.client.post(reverse("sales:invoice-list"), self.invoice_payload(), format="json").data["id"]

        res = self.client.post(
            reverse("sales:credit-note-list"),
            {
                "invoice_id": invoice_id,
                "credit_date": "2024-03-20",
                "items": [{"description": "Price correction", "quantity": "1", "unit_price": "15"}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["status"], "draft")

        post_url = reverse("sales:credit-note-post", args=[res.data["id"]])
        res = self.client.post(post_url)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "posted")

        res = self.client.post(post_url)
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        res = self.client.get(reverse("sales:invoice-detail", args=[invoice_id]))
        self.assertEqual(Decimal(res.data["amount_due"]), Decimal("200.00"))

    def test_aging_and_statement_endpoints(self):
        self.client.post(reverse("sales:invoice-list"), self.invoice_payload(), format="json")

        res = self.client.get(reverse("sales:ar-aging"), {"as_of": "2024-05-15"})
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["totals"]["31_60"], 215.0)

        res = self.client.get(
            reverse("sales:customer-statement", args=[self.customer.pk]),
            {"start_date": "2024-01-01", "end_date": "2024-12-31"},
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["closing_balance"], 215.0)

        res = self.client.get(reverse("sales:customer-statement", args=[self.customer.pk]), {"start_date": "2024-01-01"})
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
