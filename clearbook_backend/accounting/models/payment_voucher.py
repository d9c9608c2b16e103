# accounting/models/payment_voucher.py

"""
PAYMENT VOUCHER (PV)

Header + lines for an outgoing payment that needs approval.
Creating a PV raises a journal voucher in awaiting_approval; approving the PV posts it.

Amounts:
- line vat = amount * vat_rate / 100 (when vat_applicable)
- line wht = amount * wht_rate / 100 (when wht_applicable)
- net_payable = gross + vat - wht
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from companies.models import Company


class PaymentVoucher(models.Model):
    STATUS_SUBMITTED = "Submitted"
    STATUS_APPROVED = "Approved"
    STATUS_REJECTED = "Rejected"

    STATUS_CHOICES = [
        (STATUS_SUBMITTED, "Submitted"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
    ]

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="payment_vouchers",
    )

    pv_number = models.CharField(max_length=30)
    voucher_date = models.DateField()

    payment_type = models.CharField(max_length=50, blank=True, default="")
    payment_mode = models.CharField(max_length=50, blank=True, default="")

    currency = models.CharField(max_length=3, default="NGN")
    exchange_rate = models.DecimalField(max_digits=12, decimal_places=4, default=Decimal("1.0000"))

    payee_type = models.CharField(max_length=30, blank=True, default="")
    payee_code = models.CharField(max_length=50, blank=True, default="")
    payee_name = models.CharField(max_length=200)

    narration = models.TextField(blank=True, default="")

    source_module = models.CharField(max_length=50, blank=True, default="")
    source_document_no = models.CharField(max_length=100, blank=True, default="")

    gross_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    total_vat = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    total_wht = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    net_payable = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    bank_cash_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="payment_vouchers",
    )

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_SUBMITTED)

    prepared_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="prepared_payment_vouchers",
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_payment_vouchers",
    )
    approved_at = models.DateTimeField(null=True, blank=True)

    journal_voucher = models.OneToOneField(
        JournalVoucher,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payment_voucher",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-voucher_date", "-id"]
        indexes = [
            models.Index(fields=["company", "status"]),
            models.Index(fields=["company", "voucher_date"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["company", "pv_number"],
                name="uniq_payment_voucher_company_number",
            ),
        ]

    def __str__(self):
        return f"{self.pv_number} {self.payee_name} ({self.status})"

    def clean(self):
        self.payee_name = (self.payee_name or "").strip()
        if not self.payee_name:
            raise ValidationError({"payee_name": "Payee name is required"})
        if self.bank_cash_account_id and self.bank_cash_account.company_id != self.company_id:
            raise ValidationError({"bank_cash_account": "Account belongs to another company"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)


class PaymentVoucherLine(models.Model):
    payment_voucher = models.ForeignKey(
        PaymentVoucher,
        on_delete=models.CASCADE,
        related_name="lines",
    )

    gl_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="payment_voucher_lines",
    )

    line_description = models.CharField(max_length=255, blank=True, default="")
    cost_center = models.CharField(max_length=50, blank=True, default="")

    amount = models.DecimalField(max_digits=18, decimal_places=2)

    vat_applicable = models.BooleanField(default=False)
    vat_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    vat_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    wht_applicable = models.BooleanField(default=False)
    wht_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    wht_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.gl_account} {self.amount}"
