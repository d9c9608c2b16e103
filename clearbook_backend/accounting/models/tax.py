# accounting/models/tax.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from accounting.models.account import Account
from companies.models import Company


class TaxAuthority(models.Model):
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="tax_authorities",
    )

    name = models.CharField(max_length=150)
    code = models.CharField(max_length=30, blank=True, default="")

    contact_person = models.CharField(max_length=150, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    address = models.TextField(blank=True, default="")

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "Tax Authorities"
        constraints = [
            models.UniqueConstraint(fields=["company", "name"], name="uniq_tax_authority_company_name"),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        self.name = (self.name or "").strip()
        self.code = (self.code or "").strip().upper()
        if not self.name:
            raise ValidationError({"name": "Authority name is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class TaxConfig(models.Model):
    VAT = "VAT"
    WHT = "WHT"
    OTHER = "OTHER"

    TAX_TYPES = [
        (VAT, "Value Added Tax"),
        (WHT, "Withholding Tax"),
        (OTHER, "Other"),
    ]

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="tax_configs",
    )

    name = models.CharField(max_length=100)
    tax_type = models.CharField(max_length=10, choices=TAX_TYPES)
    rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
        help_text="Percentage",
    )

    gl_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="tax_configs",
    )
    authority = models.ForeignKey(
        TaxAuthority,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tax_configs",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["tax_type", "name"]
        constraints = [
            models.UniqueConstraint(fields=["company", "name"], name="uniq_tax_config_company_name"),
        ]

    def __str__(self):
        return f"{self.name} ({self.rate}%)"

    def clean(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationError({"name": "Tax name is required"})
        if self.gl_account_id and self.gl_account.company_id != self.company_id:
            raise ValidationError({"gl_account": "Account belongs to another company"})
        if self.authority_id and self.authority.company_id != self.company_id:
            raise ValidationError({"authority": "Tax authority belongs to another company"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
