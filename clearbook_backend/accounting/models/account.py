# accounting/models/account.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from companies.models import Company


class Account(models.Model):
    """
    One account in a company's chart of accounts.

    Guarantees:
    - Account codes are unique per company
    - A system role (CASH, ACCOUNTS_RECEIVABLE, ...) maps to at most one account per company
    - Parent accounts belong to the same company
    """

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"

    ACCOUNT_TYPES = [
        (ASSET, "Asset"),
        (LIABILITY, "Liability"),
        (EQUITY, "Equity"),
        (REVENUE, "Revenue"),
        (EXPENSE, "Expense"),
    ]

    # Accounts whose balance grows on the debit side
    DEBIT_NORMAL_TYPES = {ASSET, EXPENSE}

    CASH = "CASH"
    BANK = "BANK"
    ACCOUNTS_RECEIVABLE = "ACCOUNTS_RECEIVABLE"
    ACCOUNTS_PAYABLE = "ACCOUNTS_PAYABLE"
    VAT_INPUT = "VAT_INPUT"
    VAT_PAYABLE = "VAT_PAYABLE"
    WHT_PAYABLE = "WHT_PAYABLE"
    WHT_RECEIVABLE = "WHT_RECEIVABLE"
    INVENTORY_RAW_MATERIAL = "INVENTORY_RAW_MATERIAL"
    INVENTORY_FINISHED_GOODS = "INVENTORY_FINISHED_GOODS"
    SALES_REVENUE = "SALES_REVENUE"
    SALES_DISCOUNT = "SALES_DISCOUNT"
    SALES_RETURNS_ALLOWANCES = "SALES_RETURNS_ALLOWANCES"
    COGS = "COGS"
    RETAINED_EARNINGS = "RETAINED_EARNINGS"
    OPENING_BALANCE_EQUITY = "OPENING_BALANCE_EQUITY"
    MANUFACTURING_OVERHEAD = "MANUFACTURING_OVERHEAD"

    SYSTEM_ROLES = [
        (CASH, "Cash"),
        (BANK, "Bank"),
        (ACCOUNTS_RECEIVABLE, "Accounts Receivable"),
        (ACCOUNTS_PAYABLE, "Accounts Payable"),
        (VAT_INPUT, "VAT Input"),
        (VAT_PAYABLE, "VAT Payable"),
        (WHT_PAYABLE, "WHT Payable"),
        (WHT_RECEIVABLE, "WHT Receivable"),
        (INVENTORY_RAW_MATERIAL, "Inventory - Raw Materials"),
        (INVENTORY_FINISHED_GOODS, "Inventory - Finished Goods"),
        (SALES_REVENUE, "Sales Revenue"),
        (SALES_DISCOUNT, "Sales Discount"),
        (SALES_RETURNS_ALLOWANCES, "Sales Returns & Allowances"),
        (COGS, "Cost of Goods Sold"),
        (RETAINED_EARNINGS, "Retained Earnings"),
        (OPENING_BALANCE_EQUITY, "Opening Balance Equity"),
        (MANUFACTURING_OVERHEAD, "Manufacturing Overhead"),
    ]

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="accounts",
    )

    code = models.CharField(max_length=20)
    name = models.CharField(max_length=150)

    account_type = models.CharField(max_length=20, choices=ACCOUNT_TYPES)

    system_role = models.CharField(
        max_length=40,
        choices=SYSTEM_ROLES,
        null=True,
        blank=True,
        help_text="Semantic purpose used by automatic postings",
    )

    parent = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="children",
    )

    description = models.TextField(blank=True, default="")

    is_control_account = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        indexes = [
            models.Index(fields=["company", "code"]),
            models.Index(fields=["company", "account_type"]),
            models.Index(fields=["company", "is_active"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "code"],
                name="uniq_account_company_code",
            ),
            models.UniqueConstraint(
                fields=["company", "system_role"],
                condition=Q(system_role__isnull=False),
                name="uniq_account_company_system_role",
            ),
            models.CheckConstraint(
                condition=~Q(code=""),
                name="chk_account_code_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_account_name_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @property
    def is_debit_normal(self) -> bool:
        return self.account_type in self.DEBIT_NORMAL_TYPES

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()
        self.system_role = (self.system_role or "").strip() or None

        if not self.code:
            raise ValidationError("Account code is required")
        if not self.name:
            raise ValidationError("Account name is required")

        if self.parent_id:
            if self.pk and self.parent_id == self.pk:
                raise ValidationError({"parent": "An account cannot be its own parent"})
            if self.parent.company_id != self.company_id:
                raise ValidationError({"parent": "Parent account belongs to another company"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
