# manufacturing/models/production.py

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from accounting.models.journal import JournalVoucher
from companies.models import Company
from inventory.models import InventoryItem
from manufacturing.models.bom import BillOfMaterials, BOMOverhead


class ProductionOrder(models.Model):
    """
    Lifecycle:
        Planned -> In Progress -> Completed
        Planned / In Progress -> Cancelled

    Planned costs are frozen at creation; actual costs are written on completion.
    """

    STATUS_PLANNED = "Planned"
    STATUS_IN_PROGRESS = "In Progress"
    STATUS_COMPLETED = "Completed"
    STATUS_CANCELLED = "Cancelled"

    STATUS_CHOICES = [
        (STATUS_PLANNED, "Planned"),
        (STATUS_IN_PROGRESS, "In Progress"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    OPEN_STATUSES = {STATUS_PLANNED, STATUS_IN_PROGRESS}

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="production_orders",
    )
    order_number = models.CharField(max_length=30)

    bom = models.ForeignKey(
        BillOfMaterials,
        on_delete=models.PROTECT,
        related_name="production_orders",
    )
    product = models.ForeignKey(
        InventoryItem,
        on_delete=models.PROTECT,
        related_name="production_orders",
    )

    quantity_to_produce = models.DecimalField(
        max_digits=18,
        decimal_places=4,
        validators=[MinValueValidator(Decimal("0.0001"))],
    )
    quantity_produced = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal("0.0000"))

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PLANNED)

    planned_material_cost = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    planned_overhead_cost = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    total_material_cost = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    total_overhead_cost = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    cost_per_unit = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal("0.0000"))

    notes = models.TextField(blank=True, default="")

    order_date = models.DateField()
    completion_date = models.DateField(null=True, blank=True)

    journal_voucher = models.OneToOneField(
        JournalVoucher,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="production_order",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="production_orders",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-order_date", "-id"]
        indexes = [
            models.Index(fields=["company", "status"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "order_number"],
                name="uniq_production_order_company_number",
            ),
        ]

    def __str__(self):
        return f"{self.order_number} ({self.status})"

    @property
    def total_cost(self) -> Decimal:
        return (self.total_material_cost or Decimal("0")) + (self.total_overhead_cost or Decimal("0"))

    def clean(self):
        if self.bom_id and self.product_id and self.bom.finished_good_id != self.product_id:
            raise ValidationError({"product": "Product must be the BOM finished good"})
        if self.bom_id and self.bom.company_id != self.company_id:
            raise ValidationError({"bom": "BOM belongs to another company"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class ProductionOrderCost(models.Model):
    TYPE_DIRECT = "direct"
    TYPE_MISC = "misc"

    COST_TYPES = [
        (TYPE_DIRECT, "Direct Labour"),
        (TYPE_MISC, "Miscellaneous Overhead"),
    ]

    production_order = models.ForeignKey(
        ProductionOrder,
        on_delete=models.CASCADE,
        related_name="costs",
    )
    overhead = models.ForeignKey(
        BOMOverhead,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="production_costs",
    )

    cost_type = models.CharField(max_length=10, choices=COST_TYPES, default=TYPE_MISC)
    description = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=18, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.description}: {self.amount}"


class ProductionConsumption(models.Model):
    production_order = models.ForeignKey(
        ProductionOrder,
        on_delete=models.CASCADE,
        related_name="consumptions",
    )
    item = models.ForeignKey(
        InventoryItem,
        on_delete=models.PROTECT,
        related_name="production_consumptions",
    )

    quantity_consumed = models.DecimalField(max_digits=18, decimal_places=4)
    unit_cost_at_consumption = models.DecimalField(max_digits=18, decimal_places=4)
    total_cost = models.DecimalField(max_digits=18, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.item.sku} x {self.quantity_consumed}"
