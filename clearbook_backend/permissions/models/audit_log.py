# permissions/models/audit_log.py

"""
AUDIT LOG MODEL

Append-only trail of business actions (who did what, to which entity).

Guarantees:
- Immutable once created (no updates, no deletes)
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from companies.models import Company


class AuditLog(models.Model):
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="audit_logs",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
    )

    action = models.CharField(max_length=50)
    entity = models.CharField(max_length=100, blank=True, default="")
    details = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["company", "created_at"]),
            models.Index(fields=["company", "entity"]),
        ]

    def __str__(self):
        return f"[{self.company_id}] {self.action} {self.entity}"

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("AuditLog records are immutable once created")
        self.action = (self.action or "").strip()
        if not self.action:
            raise ValidationError("AuditLog action is required")
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("AuditLog records cannot be deleted")
