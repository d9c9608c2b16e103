# inventory/tests/test_api.py

from __future__ import annotations

from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status

from companies.tests.factories import client_for, make_company, make_item, make_user
from inventory.models import MaterialIssue
from permissions.roles import ROLE_ACCOUNTANT, ROLE_STAFF, ROLE_STORE_MANAGER


class InventoryAPITests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.store = make_user(self.company, ROLE_STORE_MANAGER)
        self.client = client_for(self.store)

    def test_register_and_duplicate_sku(self):
        payload = {"sku": "fg-100", "name": "500ml Bottle", "item_type": "product", "selling_price": "150"}
        res = self.client.post(reverse("inventory:item-list"), payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["sku"], "FG-100")

        res = self.client.post(reverse("inventory:item-list"), payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

    def test_accountant_has_no_inventory_module(self):
        accountant = make_user(self.company, ROLE_ACCOUNTANT)
        res = client_for(accountant).get(reverse("inventory:item-list"))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_filters(self):
        make_item(self.company, "RM-1", "raw_material")
        make_item(self.company, "FG-1", "product", reorder_level="5")

        res = self.client.get(reverse("inventory:item-list"), {"item_type": "raw_material"})
        self.assertEqual([r["sku"] for r in res.data["results"]], ["RM-1"])

        res = self.client.get(reverse("inventory:item-list"), {"low_stock": "1", "q": "fg"})
        self.assertEqual([r["sku"] for r in res.data["results"]], ["FG-1"])

    def test_foreign_item_is_not_found(self):
        foreign = make_item(make_company("OTHER"), "FG-1")
        res = self.client.get(reverse("inventory:item-detail", args=[foreign.pk]))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_opening_balance_then_history(self):
        item = make_item(self.company, "FG-1")
        res = self.client.post(
            reverse("inventory:item-opening-balance", args=[item.pk]),
            {"quantity": "10", "unit_cost": "4", "as_of": "2024-01-01"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(res.data["quantity_on_hand"]), Decimal("10"))
        self.assertTrue(res.data["voucher_number"].startswith("ACME-2024-"))

        res = self.client.get(reverse("inventory:item-history", args=[item.pk]))
        self.assertEqual(res.data["results"][0]["movement_type"], "OPENING")

    def test_staff_can_issue_material_without_inventory_module(self):
        item = make_item(self.company, "RM-1", "raw_material", quantity=5, unit_cost="2")
        staff = make_user(self.company, ROLE_STAFF)
        payload = {"item_id": item.pk, "quantity": "2", "issued_to": "Mixing", "issue_date": "2024-02-01"}

        res = client_for(staff).post(reverse("inventory:material-issue-list"), payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["issue_number"], "MI-20240201-0001")

        res = client_for(staff).get(reverse("inventory:material-issue-list"))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_accountant_cannot_issue_material(self):
        item = make_item(self.company, "RM-1", "raw_material", quantity=5, unit_cost="2")
        accountant = make_user(self.company, ROLE_ACCOUNTANT)
        res = client_for(accountant).post(
            reverse("inventory:material-issue-list"),
            {"item_id": item.pk, "quantity": "1", "issued_to": "Mixing"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_over_issue_is_a_bad_request(self):
        item = make_item(self.company, "RM-1", "raw_material", quantity=5, unit_cost="2")
        res = self.client.post(
            reverse("inventory:material-issue-list"),
            {"item_id": item.pk, "quantity": "6", "issued_to": "Mixing"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Insufficient stock", res.data["detail"])
        self.assertFalse(MaterialIssue.objects.exists())
