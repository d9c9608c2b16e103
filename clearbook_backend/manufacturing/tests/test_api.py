# manufacturing/tests/test_api.py

from __future__ import annotations

from django.test import TestCase
from django.urls import reverse
from rest_framework import status

from companies.models import Company
from companies.tests.factories import client_for, make_company, make_item, make_user
from permissions.roles import ROLE_ADMIN, ROLE_PRODUCTION_MANAGER, ROLE_SALES_MANAGER


class ManufacturingAPITests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.manager = make_user(self.company, ROLE_PRODUCTION_MANAGER)
        self.client = client_for(self.manager)
        self.resin = make_item(self.company, "RM-RESIN", "raw_material", quantity=100, unit_cost="2")
        self.bottle = make_item(self.company, "FG-BOTTLE", "product")

    def _bom_payload(self, **overrides):
        payload = {
            "finished_good_id": self.bottle.pk,
            "bom_code": "BOM-1",
            "name": "Bottle",
            "components": [{"item_id": self.resin.pk, "quantity": "2"}],
            "overheads": [{"name": "Labour", "cost_method": "per_batch", "value": "10"}],
        }
        payload.update(overrides)
        return payload

    def test_bom_create_and_duplicate(self):
        res = self.client.post(reverse("manufacturing:bom-list"), self._bom_payload(), format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(res.data["components"]), 1)

        res = self.client.post(reverse("manufacturing:bom-list"), self._bom_payload(), format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

    def test_bom_without_components_is_rejected(self):
        res = self.client.post(reverse("manufacturing:bom-list"), self._bom_payload(components=[]), format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_production_lifecycle(self):
        bom_id = self.client.post(reverse("manufacturing:bom-list"), self._bom_payload(), format="json").data["id"]

        res = self.client.post(
            reverse("manufacturing:production-order-list"),
            {"bom_id": bom_id, "quantity_to_produce": "10", "order_date": "2024-05-01"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        order_id = res.data["id"]
        self.assertEqual(res.data["order_number"], "PRD-2024-00001")
        self.assertEqual(res.data["planned_material_cost"], "40.00")

        res = self.client.post(reverse("manufacturing:production-order-start", args=[order_id]))
        self.assertEqual(res.data["status"], "In Progress")

        res = self.client.post(
            reverse("manufacturing:production-order-complete", args=[order_id]),
            {"completion_date": "2024-05-02"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["status"], "Completed")
        self.assertEqual(res.data["cost_per_unit"], "5.0000")
        self.assertTrue(res.data["voucher_number"])

        res = self.client.post(reverse("manufacturing:production-order-cancel", args=[order_id]))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_insufficient_stock_is_a_bad_request(self):
        bom_id = self.client.post(reverse("manufacturing:bom-list"), self._bom_payload(), format="json").data["id"]
        order_id = self.client.post(
            reverse("manufacturing:production-order-list"),
            {"bom_id": bom_id, "quantity_to_produce": "51"},
            format="json",
        ).data["id"]

        res = self.client.post(reverse("manufacturing:production-order-complete", args=[order_id]), {}, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)

    def test_sales_manager_has_no_production_module(self):
        sales = make_user(self.company, ROLE_SALES_MANAGER)
        res = client_for(sales).get(reverse("manufacturing:bom-list"))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_services_company_admin_has_no_production_module(self):
        services = make_company("SVC", company_type=Company.TYPE_SERVICES)
        admin = make_user(services, ROLE_ADMIN)
        res = client_for(admin).get(reverse("manufacturing:production-order-list"))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
