# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL VOUCHER MODELS (DOUBLE-ENTRY)

JournalVoucher is the transaction header; JournalVoucherLine holds one
debit OR credit against one account.

Lifecycle:
    draft ──────────────┐
    awaiting_approval ──┼──> posted ──> reversed
                        └──> rejected

Guarantees:
- A posted voucher can only move to reversed; rejected/reversed are terminal
- Lines of a posted (or reversed) voucher are immutable
- Only drafts can be deleted
- Idempotency via (company, reference) uniqueness when reference is provided
- entry_date is the accounting effective date (period locks + reports)
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from accounting.models.account import Account
from companies.models import Company


class JournalVoucher(models.Model):
    STATUS_DRAFT = "draft"
    STATUS_AWAITING_APPROVAL = "awaiting_approval"
    STATUS_POSTED = "posted"
    STATUS_REJECTED = "rejected"
    STATUS_REVERSED = "reversed"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_AWAITING_APPROVAL, "Awaiting Approval"),
        (STATUS_POSTED, "Posted"),
        (STATUS_REJECTED, "Rejected"),
        (STATUS_REVERSED, "Reversed"),
    ]

    OPEN_STATUSES = {STATUS_DRAFT, STATUS_AWAITING_APPROVAL}
    # Statuses whose lines affect balances (a reversed original is netted by its reversal)
    LEDGER_STATUSES = {STATUS_POSTED, STATUS_REVERSED}

    # status -> statuses it may move to
    ALLOWED_TRANSITIONS = {
        STATUS_DRAFT: {STATUS_DRAFT, STATUS_AWAITING_APPROVAL, STATUS_POSTED},
        STATUS_AWAITING_APPROVAL: {STATUS_AWAITING_APPROVAL, STATUS_POSTED, STATUS_REJECTED},
        STATUS_POSTED: {STATUS_POSTED, STATUS_REVERSED},
        STATUS_REJECTED: {STATUS_REJECTED},
        STATUS_REVERSED: {STATUS_REVERSED},
    }

    SOURCE_JOURNAL = "Journal"
    SOURCE_EXPENSE = "Expense"
    SOURCE_PAYMENT_VOUCHER = "Payment Voucher"
    SOURCE_SALES_INVOICE = "Sales Invoice"
    SOURCE_CUSTOMER_PAYMENT = "Customer Payment"
    SOURCE_CREDIT_NOTE = "Credit Note"
    SOURCE_PRODUCTION = "Production"
    SOURCE_GOODS_RECEIVED = "Goods Received"
    SOURCE_OPENING_BALANCE = "Opening Balance"
    SOURCE_PERIOD_CLOSE = "Period Close"
    SOURCE_REVERSAL = "Reversal"
    SOURCE_OTHER_INCOME = "Other Income"
    SOURCE_SUPPLIER_INVOICE = "Supplier Invoice"
    SOURCE_SUPPLIER_PAYMENT = "Supplier Payment"

    SOURCE_CHOICES = [
        (SOURCE_JOURNAL, "Journal"),
        (SOURCE_EXPENSE, "Expense"),
        (SOURCE_PAYMENT_VOUCHER, "Payment Voucher"),
        (SOURCE_SALES_INVOICE, "Sales Invoice"),
        (SOURCE_CUSTOMER_PAYMENT, "Customer Payment"),
        (SOURCE_CREDIT_NOTE, "Credit Note"),
        (SOURCE_PRODUCTION, "Production"),
        (SOURCE_GOODS_RECEIVED, "Goods Received"),
        (SOURCE_OPENING_BALANCE, "Opening Balance"),
        (SOURCE_PERIOD_CLOSE, "Period Close"),
        (SOURCE_REVERSAL, "Reversal"),
        (SOURCE_OTHER_INCOME, "Other Income"),
        (SOURCE_SUPPLIER_INVOICE, "Supplier Invoice"),
        (SOURCE_SUPPLIER_PAYMENT, "Supplier Payment"),
    ]

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="journal_vouchers",
    )

    voucher_number = models.CharField(max_length=80, unique=True)
    entry_date = models.DateField(help_text="Accounting effective date")

    source = models.CharField(max_length=30, choices=SOURCE_CHOICES, default=SOURCE_JOURNAL)
    narration = models.TextField()

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_DRAFT)

    total_debits = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    total_credits = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    reference = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        help_text="Idempotency key TYPE:ID (e.g. SALES_INVOICE:12)",
    )

    reversal_of = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversals",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_vouchers",
    )
    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="posted_vouchers",
    )
    posted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-entry_date", "-id"]
        indexes = [
            models.Index(fields=["company", "entry_date"]),
            models.Index(fields=["company", "status"]),
            models.Index(fields=["company", "source"]),
            models.Index(fields=["reference"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "reference"],
                condition=Q(reference__isnull=False) & ~Q(reference=""),
                name="uniq_voucher_company_reference",
            ),
            models.CheckConstraint(
                condition=Q(total_debits=F("total_credits")),
                name="chk_voucher_balanced",
            ),
        ]
        verbose_name = "Journal Voucher"
        verbose_name_plural = "Journal Vouchers"

    def __str__(self):
        return f"{self.voucher_number} ({self.status})"

    @property
    def is_open(self) -> bool:
        return self.status in self.OPEN_STATUSES

    @property
    def is_manual(self) -> bool:
        # Every other source is owned by a document (invoice, PV, GRN, ...)
        return self.source == self.SOURCE_JOURNAL

    def clean(self):
        if self.reference is not None:
            self.reference = str(self.reference).strip() or None

        self.narration = (self.narration or "").strip()
        if not self.narration:
            raise ValidationError({"narration": "Narration is required"})

        if self.pk:
            stored = JournalVoucher.objects.filter(pk=self.pk).values_list("status", flat=True).first()
            if stored and self.status not in self.ALLOWED_TRANSITIONS.get(stored, set()):
                raise ValidationError(
                    {"status": f"Voucher cannot move from {stored} to {self.status}"}
                )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.status != self.STATUS_DRAFT:
            raise ValidationError("Only draft vouchers can be deleted")
        return super().delete(*args, **kwargs)


class JournalVoucherLine(models.Model):
    voucher = models.ForeignKey(
        JournalVoucher,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="voucher_lines",
    )

    debit = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    credit = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    payee = models.CharField(max_length=200, blank=True, default="")
    description = models.CharField(max_length=255, blank=True, default="")

    line_order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["voucher_id", "line_order", "id"]
        indexes = [
            models.Index(fields=["account"]),
            models.Index(fields=["voucher"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(debit__gte=0) & Q(credit__gte=0),
                name="chk_voucher_line_non_negative",
            ),
            models.CheckConstraint(
                condition=(Q(debit__gt=0) & Q(credit=0)) | (Q(debit=0) & Q(credit__gt=0)),
                name="chk_voucher_line_one_side",
            ),
        ]

    def __str__(self):
        side = f"Dr {self.debit}" if self.debit else f"Cr {self.credit}"
        return f"{side} -> {self.account}"

    @property
    def net(self) -> Decimal:
        return (self.debit or Decimal("0.00")) - (self.credit or Decimal("0.00"))

    def _assert_mutable(self):
        if self.voucher_id and not self.voucher.is_open:
            raise ValidationError("Lines of a posted voucher are immutable")

    def clean(self):
        self._assert_mutable()
        if self.account_id and self.voucher_id and self.account.company_id != self.voucher.company_id:
            raise ValidationError({"account": "Account belongs to another company"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        self._assert_mutable()
        return super().delete(*args, **kwargs)
