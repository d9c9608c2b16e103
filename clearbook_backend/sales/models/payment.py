# sales/models/payment.py

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from companies.models import Company
from sales.models.customer import Customer
from sales.models.invoice import SalesInvoice


class CustomerPayment(models.Model):
    """
    Money received from a customer, split across open invoices.

    RULES:
    - Sum(allocations.amount_applied) == amount (enforced by payment_service)
    - Write-once: corrections are made with journal vouchers
    - wht_amount is tax the customer withheld; the bank receives amount - wht_amount
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="customer_payments",
    )
    payment_number = models.CharField(max_length=20)

    customer = models.ForeignKey(
        Customer,
        on_delete=models.PROTECT,
        related_name="payments",
    )
    payment_date = models.DateField()
    amount = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    bank_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="customer_payments",
    )
    wht_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    reference = models.CharField(max_length=100, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    journal_voucher = models.OneToOneField(
        JournalVoucher,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="customer_payment",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="customer_payments",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-payment_date", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["company", "payment_number"], name="uniq_payment_company_number"),
        ]

    def __str__(self):
        return f"{self.payment_number} {self.amount}"


class PaymentAllocation(models.Model):
    payment = models.ForeignKey(
        CustomerPayment,
        on_delete=models.CASCADE,
        related_name="allocations",
    )
    invoice = models.ForeignKey(
        SalesInvoice,
        on_delete=models.PROTECT,
        related_name="allocations",
    )
    amount_applied = models.DecimalField(
        max_digits=18,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["payment", "invoice"], name="uniq_allocation_payment_invoice"),
        ]

    def __str__(self):
        return f"{self.payment_id} -> {self.invoice_id}: {self.amount_applied}"
