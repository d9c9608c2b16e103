# inventory/models/stock_movement.py

"""
INVENTORY LEDGER

Immutable stock ledger entry.

GUARANTEES:
- Append-only (no updates, no deletes)
- quantity is signed: inbound > 0, outbound < 0
- Direction is validated against movement_type
- unit_cost_snapshot and balance_after freeze the item state at movement time
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from inventory.models.item import InventoryItem


class StockMovement(models.Model):
    class MovementType(models.TextChoices):
        OPENING = "OPENING", "Opening Balance"
        RECEIPT = "RECEIPT", "Stock Receipt"
        ISSUE = "ISSUE", "Material Issue"
        SALE = "SALE", "Sale"
        SALE_REVERSAL = "SALE_REVERSAL", "Sale Reversal"
        PRODUCTION_IN = "PRODUCTION_IN", "Production Output"
        PRODUCTION_OUT = "PRODUCTION_OUT", "Production Consumption"
        ADJUSTMENT = "ADJUSTMENT", "Manual Adjustment"

    INBOUND = {
        MovementType.OPENING,
        MovementType.RECEIPT,
        MovementType.SALE_REVERSAL,
        MovementType.PRODUCTION_IN,
    }
    OUTBOUND = {
        MovementType.ISSUE,
        MovementType.SALE,
        MovementType.PRODUCTION_OUT,
    }

    item = models.ForeignKey(
        InventoryItem,
        on_delete=models.CASCADE,
        related_name="stock_movements",
    )

    movement_type = models.CharField(max_length=20, choices=MovementType.choices)
    quantity = models.DecimalField(max_digits=18, decimal_places=4)

    unit_cost_snapshot = models.DecimalField(
        max_digits=18,
        decimal_places=4,
        help_text="Unit cost at movement time (immutable).",
    )
    balance_after = models.DecimalField(max_digits=18, decimal_places=4)

    reference = models.CharField(max_length=100, blank=True, default="")

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="stock_movements",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["item", "created_at"]),
            models.Index(fields=["movement_type"]),
            models.Index(fields=["reference"]),
        ]

    def clean(self):
        if self.quantity is None or self.quantity == 0:
            raise ValidationError("quantity must be non-zero")

        if self.movement_type in self.INBOUND and self.quantity < 0:
            raise ValidationError(f"{self.movement_type} must increase stock")
        if self.movement_type in self.OUTBOUND and self.quantity > 0:
            raise ValidationError(f"{self.movement_type} must decrease stock")

        if self.balance_after is not None and self.balance_after < 0:
            raise ValidationError("Stock cannot go negative")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("StockMovement records are immutable")
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("StockMovement records are immutable and cannot be deleted")

    @property
    def total_cost(self) -> Decimal:
        return (self.unit_cost_snapshot or Decimal("0")) * abs(self.quantity or Decimal("0"))

    def __str__(self):
        return f"{self.item.sku} | {self.movement_type} | {self.quantity}"
