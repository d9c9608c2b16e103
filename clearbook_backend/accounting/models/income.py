# accounting/models/income.py

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from companies.models import Company


class OtherIncome(models.Model):
    """
    Non-invoice income (interest, rent received, scrap sales, ...).

    Recorded as a draft, then posted:
        Dr payment_account (ASSET) / Cr income_account (REVENUE)

    income_number is INC-{YYYYMMDD}-{seq:04d} on the income date.
    """

    STATUS_DRAFT = "draft"
    STATUS_POSTED = "posted"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_POSTED, "Posted"),
    ]

    PAYMENT_CASH = "cash"
    PAYMENT_BANK = "bank"
    PAYMENT_TRANSFER = "transfer"
    PAYMENT_CHEQUE = "cheque"

    PAYMENT_METHODS = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_BANK, "Bank"),
        (PAYMENT_TRANSFER, "Transfer"),
        (PAYMENT_CHEQUE, "Cheque"),
    ]

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="other_incomes",
    )
    income_number = models.CharField(max_length=30)

    income_date = models.DateField()
    amount = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    income_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="incomes_as_income",
    )
    payment_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="incomes_as_payment",
    )
    payment_method = models.CharField(max_length=10, choices=PAYMENT_METHODS, default=PAYMENT_CASH)

    received_from = models.CharField(max_length=200, blank=True, default="")
    description = models.TextField(blank=True, default="")

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_DRAFT)

    journal_voucher = models.OneToOneField(
        JournalVoucher,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="other_income",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="incomes_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-income_date", "-created_at"]
        indexes = [
            models.Index(fields=["company", "income_date"]),
            models.Index(fields=["company", "status"]),
        ]
        constraints = [
            models.UniqueConstraint(fields=["company", "income_number"], name="uniq_income_company_number"),
            models.CheckConstraint(condition=Q(amount__gt=0), name="chk_income_amount_gt_0"),
        ]

    def __str__(self):
        return f"{self.income_number} {self.amount} ({self.status})"

    def clean(self):
        self.received_from = (self.received_from or "").strip()
        self.description = (self.description or "").strip()

        if self.income_account_id:
            if self.income_account.company_id != self.company_id:
                raise ValidationError({"income_account": "Account belongs to another company"})
            if self.income_account.account_type != Account.REVENUE:
                raise ValidationError({"income_account": "income_account must be a REVENUE account"})

        if self.payment_account_id:
            if self.payment_account.company_id != self.company_id:
                raise ValidationError({"payment_account": "Account belongs to another company"})
            if self.payment_account.account_type != Account.ASSET:
                raise ValidationError({"payment_account": "payment_account must be an ASSET account"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
