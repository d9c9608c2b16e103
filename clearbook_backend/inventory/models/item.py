# inventory/models/item.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounting.models.account import Account
from companies.models import Company


class InventoryItem(models.Model):
    """
    A stocked item: a sellable product or a raw material.

    STOCK MODEL:
    - quantity_on_hand is the running balance of StockMovement rows
    - average_unit_cost is a weighted average, updated on every receipt
    - Neither field is edited directly; inventory.services.stock_service owns them
    """

    TYPE_PRODUCT = "product"
    TYPE_RAW_MATERIAL = "raw_material"

    ITEM_TYPES = [
        (TYPE_PRODUCT, "Product"),
        (TYPE_RAW_MATERIAL, "Raw Material"),
    ]

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="inventory_items",
    )

    sku = models.CharField(max_length=64, db_index=True)
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")

    item_type = models.CharField(max_length=20, choices=ITEM_TYPES, default=TYPE_PRODUCT)
    category = models.CharField(max_length=100, blank=True, default="")
    uom = models.CharField(max_length=20, default="unit", help_text="Unit of measure")

    average_unit_cost = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal("0.0000"))
    quantity_on_hand = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal("0.0000"))

    selling_price = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    reorder_level = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal("0.0000"))

    inventory_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="inventory_items",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["company", "item_type"]),
            models.Index(fields=["company", "name"]),
        ]
        constraints = [
            models.UniqueConstraint(fields=["company", "sku"], name="uniq_inventory_item_company_sku"),
            models.CheckConstraint(
                condition=Q(quantity_on_hand__gte=0),
                name="chk_inventory_item_stock_not_negative",
            ),
            models.CheckConstraint(
                condition=Q(average_unit_cost__gte=0),
                name="chk_inventory_item_cost_not_negative",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.sku})"

    @property
    def is_low_stock(self) -> bool:
        return self.quantity_on_hand <= self.reorder_level

    @property
    def stock_value(self) -> Decimal:
        return (self.quantity_on_hand or 0) * (self.average_unit_cost or 0)

    def clean(self):
        self.sku = (self.sku or "").strip().upper()
        self.name = (self.name or "").strip()

        if not self.sku:
            raise ValidationError({"sku": "SKU is required"})
        if not self.name:
            raise ValidationError({"name": "Name is required"})

        if self.quantity_on_hand is not None and self.quantity_on_hand < 0:
            raise ValidationError({"quantity_on_hand": "Stock cannot go negative"})
        if self.selling_price is not None and self.selling_price < 0:
            raise ValidationError({"selling_price": "Selling price cannot be negative"})

        if self.inventory_account_id:
            acct = self.inventory_account
            if acct.company_id != self.company_id:
                raise ValidationError({"inventory_account": "Account belongs to another company"})
            if acct.account_type != Account.ASSET:
                raise ValidationError({"inventory_account": "Inventory account must be an ASSET account"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
