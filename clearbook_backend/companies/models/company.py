# companies/models/company.py

"""
======================================================
PATH: companies/models/company.py
======================================================
COMPANY (TENANT) MODEL

Every tenant-owned row in the system carries a `company` FK pointing here.

The primary key is the human company key (e.g. "HARI_INDUSTRIES"), so
`<model>.company_id` is that key everywhere and voucher numbers can embed it.

Rules:
- company_id is upper-cased and immutable once created
- company_type is immutable once created (it drives available modules)
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator
from django.db import models

company_id_validator = RegexValidator(
    regex=r"^[A-Z0-9_\-]+$",
    message="company_id may only contain A-Z, 0-9, '_' and '-'",
)


def _default_currency() -> str:
    return getattr(settings, "DEFAULT_CURRENCY", "NGN")


class Company(models.Model):
    TYPE_MANUFACTURING = "manufacturing"
    TYPE_SERVICES = "services"

    COMPANY_TYPES = [
        (TYPE_MANUFACTURING, "Manufacturing"),
        (TYPE_SERVICES, "Services"),
    ]

    company_id = models.CharField(
        max_length=50,
        primary_key=True,
        validators=[company_id_validator],
    )

    name = models.CharField(max_length=200)
    company_type = models.CharField(
        max_length=20,
        choices=COMPANY_TYPES,
        default=TYPE_MANUFACTURING,
    )

    address = models.TextField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    currency = models.CharField(max_length=3, default=_default_currency)

    # Global kill-switch for the payment voucher form (set by admins)
    payment_form_locked = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "Company"
        verbose_name_plural = "Companies"
        indexes = [
            models.Index(fields=["company_type"]),
            models.Index(fields=["is_active"]),
        ]

    def __str__(self):
        return f"{self.name} ({self.company_id})"

    @property
    def is_manufacturing(self) -> bool:
        return self.company_type == self.TYPE_MANUFACTURING

    def clean(self):
        self.company_id = (self.company_id or "").strip().upper()
        self.name = (self.name or "").strip()
        self.currency = (self.currency or "").strip().upper()

        if not self.company_id:
            raise ValidationError({"company_id": "company_id is required"})
        if not self.name:
            raise ValidationError({"name": "Company name is required"})

        if not self._state.adding:
            stored_type = (
                Company.objects.filter(pk=self.pk)
                .values_list("company_type", flat=True)
                .first()
            )
            if stored_type and stored_type != self.company_type:
                raise ValidationError(
                    {"company_type": "company_type cannot be changed after creation"}
                )

    def save(self, *args, **kwargs):
        self.company_id = (self.company_id or "").strip().upper()
        self.full_clean()
        return super().save(*args, **kwargs)
