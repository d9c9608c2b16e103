# accounting/models/reconciliation.py

"""
BANK RECONCILIATION

A reconciliation matches posted voucher lines on one bank/cash account
against a bank statement balance.

- cleared_balance = Σ(debit - credit) of the cleared lines
- difference      = cleared_balance - statement_balance
- One draft per account at a time; completed reconciliations are immutable
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounting.models.account import Account
from accounting.models.journal import JournalVoucherLine
from companies.models import Company


class BankReconciliation(models.Model):
    STATUS_DRAFT = "draft"
    STATUS_COMPLETED = "completed"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_COMPLETED, "Completed"),
    ]

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="bank_reconciliations",
    )

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="reconciliations",
    )

    statement_date = models.DateField()
    statement_balance = models.DecimalField(max_digits=18, decimal_places=2)

    cleared_balance = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    difference = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_DRAFT)
    notes = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="bank_reconciliations",
    )
    completed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    cleared_lines = models.ManyToManyField(
        JournalVoucherLine,
        through="ReconciliationLine",
        related_name="reconciliations",
        blank=True,
    )

    class Meta:
        ordering = ["-statement_date", "-id"]
        indexes = [
            models.Index(fields=["company", "account", "status"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["account"],
                condition=Q(status="draft"),
                name="uniq_draft_reconciliation_per_account",
            ),
        ]

    def __str__(self):
        return f"Reconciliation {self.account} @ {self.statement_date} ({self.status})"

    def clean(self):
        if self.account_id:
            if self.account.company_id != self.company_id:
                raise ValidationError({"account": "Account belongs to another company"})
            if self.account.account_type != Account.ASSET:
                raise ValidationError({"account": "Only bank/cash (ASSET) accounts can be reconciled"})

        if self.pk:
            stored = BankReconciliation.objects.filter(pk=self.pk).values_list("status", flat=True).first()
            if stored == self.STATUS_COMPLETED:
                raise ValidationError("Completed reconciliations are immutable")

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class ReconciliationLine(models.Model):
    reconciliation = models.ForeignKey(
        BankReconciliation,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    voucher_line = models.ForeignKey(
        JournalVoucherLine,
        on_delete=models.PROTECT,
        related_name="reconciliation_lines",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["reconciliation", "voucher_line"],
                name="uniq_reconciliation_voucher_line",
            ),
        ]

    def __str__(self):
        return f"{self.reconciliation_id}:{self.voucher_line_id}"
