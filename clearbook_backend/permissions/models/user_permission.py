# permissions/models/user_permission.py

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from companies.models import Company
from permissions.roles import ALL_MODULES


class UserPermission(models.Model):
    """
    Module granted to a single user on top of their role permissions.
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="user_permissions",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="module_permissions",
    )
    module = models.CharField(max_length=64)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["module"]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "user", "module"],
                name="uniq_user_permission_company_user_module",
            ),
        ]

    def __str__(self):
        return f"{self.user_id} -> {self.module}"

    def clean(self):
        if self.module not in ALL_MODULES:
            raise ValidationError({"module": f"Unknown module: {self.module}"})
        if self.user_id and self.company_id and self.user.company_id != self.company_id:
            raise ValidationError({"user": "User does not belong to this company"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
