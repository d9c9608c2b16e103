# inventory/tests/test_price_tiers.py

from __future__ import annotations

from datetime import date
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status

from companies.tests.factories import client_for, make_company, make_item, make_user
from inventory.models import PriceTier
from inventory.services.price_tier_service import (
    DuplicatePriceTierError,
    PriceTierError,
    create_price_tier,
    list_price_tiers,
    tier_price,
    update_price_tier,
)
from permissions.roles import ROLE_SALES_MANAGER, ROLE_STORE_MANAGER
from sales.services.customer_service import create_customer
from sales.services.exceptions import InvoiceError
from sales.services.invoice_service import create_invoice


class PriceTierServiceTests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.bottle = make_item(self.company, "FG-BOTTLE", "product", selling_price="150")

    def test_tiers_list_cheapest_first(self):
        create_price_tier(item=self.bottle, tier_name="Retail", price="150")
        create_price_tier(item=self.bottle, tier_name=" Wholesale ", price="120")

        tiers = list(list_price_tiers(self.bottle))
        self.assertEqual([t.tier_name for t in tiers], ["Wholesale", "Retail"])
        self.assertEqual(tier_price(self.bottle, "wholesale"), Decimal("120.00"))

    def test_duplicate_name_is_refused_case_insensitively(self):
        create_price_tier(item=self.bottle, tier_name="Wholesale", price="120")
        with self.assertRaises(DuplicatePriceTierError):
            create_price_tier(item=self.bottle, tier_name="WHOLESALE", price="110")

    def test_same_name_on_another_item_is_fine(self):
        other = make_item(self.company, "FG-CAP", "product")
        create_price_tier(item=self.bottle, tier_name="Wholesale", price="120")
        create_price_tier(item=other, tier_name="Wholesale", price="3")
        self.assertEqual(PriceTier.objects.filter(tier_name="Wholesale").count(), 2)

    def test_raw_materials_have_no_tiers(self):
        resin = make_item(self.company, "RM-RESIN", "raw_material")
        with self.assertRaises(PriceTierError):
            create_price_tier(item=resin, tier_name="Bulk", price="10")

    def test_negative_price_and_blank_name_are_refused(self):
        with self.assertRaises(PriceTierError):
            create_price_tier(item=self.bottle, tier_name="Promo", price="-1")
        with self.assertRaises(PriceTierError):
            create_price_tier(item=self.bottle, tier_name="  ", price="1")

    def test_rename_onto_existing_tier_is_refused(self):
        create_price_tier(item=self.bottle, tier_name="Wholesale", price="120")
        distributor = create_price_tier(item=self.bottle, tier_name="Distributor", price="100")

        with self.assertRaises(DuplicatePriceTierError):
            update_price_tier(tier=distributor, tier_name="wholesale")

        updated = update_price_tier(tier=distributor, price="95")
        self.assertEqual(updated.price, Decimal("95.00"))

    def test_unknown_tier(self):
        with self.assertRaises(PriceTierError):
            tier_price(self.bottle, "Gold")


class InvoicePriceTierTests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.customer = create_customer(company=self.company, name="Bright Stores")
        self.bottle = make_item(self.company, "FG-BOTTLE", "product", quantity=10, unit_cost="4", selling_price="150")
        create_price_tier(item=self.bottle, tier_name="Wholesale", price="120")

    def _invoice(self, line):
        return create_invoice(
            company=self.company,
            customer=self.customer,
            invoice_date=date(2024, 3, 1),
            items=[line],
        )

    def test_line_priced_from_tier(self):
        invoice = self._invoice({"item": self.bottle, "quantity": "2", "price_tier": "Wholesale"})
        self.assertEqual(invoice.items.get().unit_price, Decimal("120.00"))
        self.assertEqual(invoice.total_amount, Decimal("240.00"))

    def test_line_without_price_uses_selling_price(self):
        invoice = self._invoice({"item": self.bottle, "quantity": "1"})
        self.assertEqual(invoice.items.get().unit_price, Decimal("150.00"))

    def test_explicit_price_wins_without_tier(self):
        invoice = self._invoice({"item": self.bottle, "quantity": "1", "unit_price": "99"})
        self.assertEqual(invoice.items.get().unit_price, Decimal("99.00"))

    def test_unknown_tier_is_invoice_error(self):
        with self.assertRaises(InvoiceError):
            self._invoice({"item": self.bottle, "quantity": "1", "price_tier": "Gold"})

    def test_free_text_line_needs_price(self):
        with self.assertRaises(InvoiceError):
            self._invoice({"description": "Delivery", "quantity": "1"})


class PriceTierAPITests(TestCase):
    def setUp(self):
        self.company = make_company("ACME")
        self.client = client_for(make_user(self.company, ROLE_STORE_MANAGER))
        self.bottle = make_item(self.company, "FG-BOTTLE", "product", quantity=10, unit_cost="4", selling_price="150")

    def test_create_list_update_delete(self):
        url = reverse("inventory:item-price-tiers", args=[self.bottle.pk])
        res = self.client.post(url, {"tier_name": "Wholesale", "price": "120"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        tier_id = res.data["id"]

        res = self.client.post(url, {"tier_name": "wholesale", "price": "110"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

        res = self.client.get(url)
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(len(res.data), 1)

        detail = reverse("inventory:price-tier-detail", args=[tier_id])
        res = self.client.patch(detail, {"price": "115"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(res.data["price"]), Decimal("115.00"))

        res = self.client.delete(detail)
        self.assertEqual(res.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(PriceTier.objects.filter(pk=tier_id).exists())

    def test_other_company_item_is_404(self):
        other = make_item(make_company("BETA"), "FG-X", "product")
        res = self.client.get(reverse("inventory:item-price-tiers", args=[other.pk]))
        self.assertEqual(res.status_code, status.HTTP_404_NOT_FOUND)

    def test_invoice_line_names_a_tier(self):
        create_price_tier(item=self.bottle, tier_name="Wholesale", price="120")
        customer = create_customer(company=self.company, name="Bright Stores")
        sales = client_for(make_user(self.company, ROLE_SALES_MANAGER))

        payload = {
            "customer_id": customer.pk,
            "invoice_date": "2024-03-01",
            "items": [{"item_id": self.bottle.pk, "quantity": "2", "price_tier": "Wholesale"}],
        }
        res = sales.post(reverse("sales:invoice-list"), payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(res.data["total_amount"]), Decimal("240.00"))

        payload["items"] = [{"description": "Delivery", "quantity": "1"}]
        res = sales.post(reverse("sales:invoice-list"), payload, format="json")
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
