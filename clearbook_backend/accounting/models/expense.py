# accounting/models/expense.py

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


class Expense(models.Model):
    """
    Business expense recorded as a draft, then posted:
        Dr expense_account / Cr payment_account

    Only drafts may be edited or deleted.
    """

    STATUS_DRAFT = "draft"
    STATUS_POSTED = "posted"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_POSTED, "Posted"),
    ]

    PAYMENT_CASH = "cash"
    PAYMENT_BANK = "bank"
    PAYMENT_CREDIT = "credit"

    PAYMENT_METHODS = [
        (PAYMENT_CASH, "Cash"),
        (PAYMENT_BANK, "Bank"),
        (PAYMENT_CREDIT, "Credit"),
    ]

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="expenses",
    )

    expense_date = models.DateField()
    amount = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    expense_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="expenses_as_expense",
    )
    payment_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="expenses_as_payment",
    )
    payment_method = models.CharField(max_length=10, choices=PAYMENT_METHODS, default=PAYMENT_CASH)

    payee = models.CharField(max_length=200, blank=True, default="")
    description = models.TextField(blank=True, default="")

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_DRAFT)

    journal_voucher = models.OneToOneField(
        JournalVoucher,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="expense",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="expenses_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-expense_date", "-created_at"]
        indexes = [
            models.Index(fields=["company", "expense_date"]),
            models.Index(fields=["company", "status"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="chk_expense_amount_gt_0",
            ),
        ]

    def __str__(self):
        return f"Expense {self.amount} on {self.expense_date} ({self.status})"

    def clean(self):
        self.payee = (self.payee or "").strip()
        self.description = (self.description or "").strip()

        if self.expense_account_id:
            if self.expense_account.company_id != self.company_id:
                raise ValidationError({"expense_account": "Account belongs to another company"})
            if self.expense_account.account_type != Account.EXPENSE:
                raise ValidationError({"expense_account": "expense_account must be an EXPENSE account"})

        if self.payment_account_id:
            if self.payment_account.company_id != self.company_id:
                raise ValidationError({"payment_account": "Account belongs to another company"})
            if self.payment_account.account_type not in (Account.ASSET, Account.LIABILITY):
                raise ValidationError(
                    {"payment_account": "payment_account must be an ASSET or LIABILITY account"}
                )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
