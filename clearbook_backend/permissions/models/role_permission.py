# permissions/models/role_permission.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models

from companies.models import Company
from permissions.roles import ALL_MODULES, ROLE_CHOICES, modules_for_company_type


class RolePermission(models.Model):
    """
    One module granted to one role inside one company.

    The set of rows for (company, role) is replaced wholesale on update.
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="role_permissions",
    )
    role = models.CharField(max_length=32, choices=ROLE_CHOICES)
    module = models.CharField(max_length=64)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["role", "module"]
        indexes = [
            models.Index(fields=["company", "role"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "role", "module"],
                name="uniq_role_permission_company_role_module",
            ),
        ]

    def __str__(self):
        return f"{self.company_id}:{self.role} -> {self.module}"

    def clean(self):
        if self.module not in ALL_MODULES:
            raise ValidationError({"module": f"Unknown module: {self.module}"})
        if self.company_id and self.module not in modules_for_company_type(
            self.company.company_type
        ):
            raise ValidationError(
                {"module": f"Module {self.module} is not available for this company type"}
            )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
