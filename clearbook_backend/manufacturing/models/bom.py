# manufacturing/models/bom.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from accounting.models.account import Account
from companies.models import Company
from inventory.models import InventoryItem


class BillOfMaterials(models.Model):
    """
    Recipe for one finished good.

    Component quantities are per ONE unit of the finished good.
    (bom_code, version) is unique per finished good.
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="boms",
    )
    finished_good = models.ForeignKey(
        InventoryItem,
        on_delete=models.PROTECT,
        related_name="boms",
    )

    bom_code = models.CharField(max_length=50)
    version = models.CharField(max_length=20, default="1")
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")

    output_quantity = models.DecimalField(
        max_digits=18,
        decimal_places=4,
        default=Decimal("1.0000"),
        validators=[MinValueValidator(Decimal("0.0001"))],
        help_text="Standard batch size",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["bom_code", "version"]
        verbose_name = "Bill of Materials"
        verbose_name_plural = "Bills of Materials"
        constraints = [
            models.UniqueConstraint(
                fields=["finished_good", "bom_code", "version"],
                name="uniq_bom_finished_good_code_version",
            ),
        ]

    def __str__(self):
        return f"{self.bom_code} v{self.version}"

    def clean(self):
        self.bom_code = (self.bom_code or "").strip().upper()
        self.version = (self.version or "").strip()
        self.name = (self.name or "").strip()

        if not self.bom_code:
            raise ValidationError({"bom_code": "BOM code is required"})
        if not self.name:
            raise ValidationError({"name": "Name is required"})

        if self.finished_good_id:
            if self.finished_good.company_id != self.company_id:
                raise ValidationError({"finished_good": "Item belongs to another company"})
            if self.finished_good.item_type != InventoryItem.TYPE_PRODUCT:
                raise ValidationError({"finished_good": "Finished good must be a product"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class BOMComponent(models.Model):
    TYPE_RAW_MATERIAL = "raw_material"
    TYPE_PACKAGING = "packaging"
    TYPE_SUB_ASSEMBLY = "sub_assembly"

    COMPONENT_TYPES = [
        (TYPE_RAW_MATERIAL, "Raw Material"),
        (TYPE_PACKAGING, "Packaging"),
        (TYPE_SUB_ASSEMBLY, "Sub-Assembly"),
    ]

    bom = models.ForeignKey(
        BillOfMaterials,
        on_delete=models.CASCADE,
        related_name="components",
    )
    item = models.ForeignKey(
        InventoryItem,
        on_delete=models.PROTECT,
        related_name="bom_usages",
    )

    quantity = models.DecimalField(
        max_digits=18,
        decimal_places=4,
        validators=[MinValueValidator(Decimal("0.0001"))],
        help_text="Quantity per unit of finished good",
    )
    waste_percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )
    component_type = models.CharField(max_length=20, choices=COMPONENT_TYPES, default=TYPE_RAW_MATERIAL)
    uom = models.CharField(max_length=20, blank=True, default="")

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.item.sku} x {self.quantity}"


class BOMOperation(models.Model):
    bom = models.ForeignKey(
        BillOfMaterials,
        on_delete=models.CASCADE,
        related_name="operations",
    )

    sequence = models.PositiveIntegerField(default=10)
    name = models.CharField(max_length=150)
    work_center = models.CharField(max_length=100, blank=True, default="")
    duration_minutes = models.PositiveIntegerField(default=0)
    notes = models.TextField(blank=True, default="")

    class Meta:
        ordering = ["sequence", "id"]

    def __str__(self):
        return f"{self.sequence}: {self.name}"


class BOMOverhead(models.Model):
    PER_UNIT = "per_unit"
    PER_BATCH = "per_batch"
    PERCENTAGE_OF_MATERIAL = "percentage_of_material"

    COST_METHODS = [
        (PER_UNIT, "Per Unit"),
        (PER_BATCH, "Per Batch"),
        (PERCENTAGE_OF_MATERIAL, "Percentage of Material"),
    ]

    bom = models.ForeignKey(
        BillOfMaterials,
        on_delete=models.CASCADE,
        related_name="overheads",
    )

    name = models.CharField(max_length=150)
    cost_method = models.CharField(max_length=30, choices=COST_METHODS, default=PER_UNIT)
    value = models.DecimalField(
        max_digits=18,
        decimal_places=4,
        validators=[MinValueValidator(Decimal("0"))],
    )

    # Credited when production absorbs this overhead; falls back to MANUFACTURING_OVERHEAD.
    gl_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bom_overheads",
    )

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.name} ({self.cost_method})"

    @property
    def is_labour(self) -> bool:
        name = (self.name or "").lower()
        return "labor" in name or "labour" in name
