# accounting/models/period_close.py

"""
======================================================
PATH: accounting/models/period_close.py
======================================================
PERIOD CLOSE MODEL

A locked accounting period for one company.

Audit guarantees:
- Immutable once created
- Non-deletable
- Records the voucher that executed the close
- A company cannot have overlapping closed periods
"""

from __future__ import annotations

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from accounting.models.journal import JournalVoucher
from companies.models import Company


class PeriodClose(models.Model):
    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="period_closes",
    )

    start_date = models.DateField()
    end_date = models.DateField()

    journal_voucher = models.ForeignKey(
        JournalVoucher,
        on_delete=models.PROTECT,
        related_name="period_closes",
        help_text="The voucher that performed the close (Revenue/Expense -> Retained Earnings).",
    )

    closed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="period_closes",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-end_date", "-created_at"]
        indexes = [
            models.Index(fields=["company", "start_date", "end_date"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "start_date", "end_date"],
                name="uniq_period_close_company_start_end",
            ),
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="chk_period_close_end_gte_start",
            ),
        ]
        verbose_name = "Period Close"
        verbose_name_plural = "Period Closes"

    def __str__(self):
        return f"PeriodClose {self.start_date} -> {self.end_date} ({self.company_id})"

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "end_date must be >= start_date"})

        if self.journal_voucher_id and self.journal_voucher.status != JournalVoucher.STATUS_POSTED:
            raise ValidationError({"journal_voucher": "journal_voucher must be posted"})

        if self.company_id and self.start_date and self.end_date:
            overlaps = PeriodClose.objects.filter(
                company_id=self.company_id,
                start_date__lte=self.end_date,
                end_date__gte=self.start_date,
            )
            if self.pk:
                overlaps = overlaps.exclude(pk=self.pk)
            if overlaps.exists():
                raise ValidationError("This period overlaps an existing closed period.")

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("PeriodClose records are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("PeriodClose records are immutable and cannot be deleted")
