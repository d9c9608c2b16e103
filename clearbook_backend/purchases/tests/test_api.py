# purchases/tests/test_api.py

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status

from companies.tests.factories import client_for, make_company, make_item, make_user
from permissions.roles import ROLE_PROCUREMENT_MANAGER, ROLE_SALES_MANAGER
from purchases.models import PurchaseOrder
from purchases.services.supplier_service import create_supplier


class ProcurementAPITests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.buyer = make_user(self.company, ROLE_PROCUREMENT_MANAGER)
        self.client = client_for(self.buyer)
        self.supplier = create_supplier(company=self.company, name="Resin Traders")
        self.resin = make_item(self.company, "RM-RESIN", "raw_material")

    def create_po(self):
        res = self.client.post(
            reverse("purchases:purchase-order-list"),
            {
                "supplier_id": self.supplier.pk,
                "po_date": "2024-04-02",
                "items": [{"item_id": self.resin.pk, "quantity": "10", "unit_price": "3", "vat_applicable": True}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        return res.data

    def test_sales_manager_has_no_procurement_module(self):
        res = client_for(make_user(self.company, ROLE_SALES_MANAGER)).get(reverse("purchases:supplier-list"))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_create_supplier_and_opening_balance(self):
        res = self.client.post(reverse("purchases:supplier-list"), {"name": "Cap Makers"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["supplier_code"], "SUP-00002")

        url = reverse("purchases:supplier-opening-balance", args=[res.data["id"]])
        res = self.client.post(url, {"amount": "200", "as_of": "2024-01-01"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(res.data["opening_balance"]), Decimal("200.00"))

    def test_order_approve_receive(self):
        po = self.create_po()
        self.assertEqual(po["po_number"], "PO-2024-0001")
        self.assertEqual(Decimal(po["total_amount"]), Decimal("32.25"))

        res = self.client.post(
            reverse("purchases:grn-list"),
            {"purchase_order_id": po["id"], "lines": [{"po_item_id": po["items"][0]["id"], "quantity_received": "4"}]},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

        res = self.client.post(reverse("purchases:purchase-order-approve", args=[po["id"]]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], PurchaseOrder.STATUS_APPROVED)

        res = self.client.post(reverse("purchases:purchase-order-approve", args=[po["id"]]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

        res = self.client.post(
            reverse("purchases:grn-list"),
            {
                "purchase_order_id": po["id"],
                "grn_date": "2024-04-10",
                "lines": [{"po_item_id": po["items"][0]["id"], "quantity_received": "4"}],
            },
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["grn_number"], "GRN-20240410-0001")
        self.assertEqual(res.data["po_status"], PurchaseOrder.STATUS_PARTIALLY_RECEIVED)
        self.assertEqual(Decimal(res.data["total_value"]), Decimal("12.00"))

        res = self.client.post(reverse("purchases:purchase-order-cancel", args=[po["id"]]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_foreign_supplier_is_404(self):
        foreign = create_supplier(company=make_company("OTHER"), name="Elsewhere")
        res = self.client.get(reverse("purchases:supplier-detail", args=[foreign.pk]))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)
