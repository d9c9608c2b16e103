# inventory/models/material_issue.py

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models

from companies.models import Company
from inventory.models.item import InventoryItem


class MaterialIssue(models.Model):
    """Stock handed out of the store, costed at the average cost on the day."""

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="material_issues",
    )

    issue_number = models.CharField(max_length=30)

    item = models.ForeignKey(
        InventoryItem,
        on_delete=models.PROTECT,
        related_name="material_issues",
    )
    quantity = models.DecimalField(max_digits=18, decimal_places=4)
    unit_cost_at_issue = models.DecimalField(max_digits=18, decimal_places=4)
    total_cost = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    issued_to = models.CharField(max_length=150)
    purpose = models.TextField(blank=True, default="")

    production_order = models.ForeignKey(
        "manufacturing.ProductionOrder",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="material_issues",
    )

    issued_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="material_issues",
    )
    issue_date = models.DateField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-issue_date", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "issue_number"],
                name="uniq_material_issue_company_number",
            ),
        ]

    def __str__(self):
        return f"{self.issue_number} {self.item.sku} x {self.quantity}"
