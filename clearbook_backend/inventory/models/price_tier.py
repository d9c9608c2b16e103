# inventory/models/price_tier.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from companies.models import Company
from inventory.models.item import InventoryItem


class PriceTier(models.Model):
    """
    A named selling price for a product ("Wholesale", "Distributor", ...).

    Tier names are unique per item (case-insensitive); listings run cheapest first.
    Sales invoice lines may name a tier instead of a unit price.
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="price_tiers",
    )
    item = models.ForeignKey(
        InventoryItem,
        on_delete=models.CASCADE,
        related_name="price_tiers",
    )
    tier_name = models.CharField(max_length=100)
    price = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["price", "tier_name"]
        constraints = [
            models.UniqueConstraint(fields=["item", "tier_name"], name="uniq_price_tier_item_name"),
            models.CheckConstraint(condition=Q(price__gte=0), name="chk_price_tier_not_negative"),
        ]

    def __str__(self):
        return f"{self.item.sku} {self.tier_name} @ {self.price}"

    def clean(self):
        self.tier_name = (self.tier_name or "").strip()
        if not self.tier_name:
            raise ValidationError({"tier_name": "Tier name is required"})
        if self.item_id and self.item.company_id != self.company_id:
            raise ValidationError({"item": "Item belongs to another company"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
