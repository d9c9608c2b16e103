# purchases/models.py

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models

from accounting.models.account import Account
from accounting.models.journal import JournalVoucher
from companies.models import Company
from inventory.models import InventoryItem

User = settings.AUTH_USER_MODEL


class Supplier(models.Model):
    """
    Supplier master (per company).

    Opening balance posts once: Dr OPENING_BALANCE_EQUITY / Cr ACCOUNTS_PAYABLE
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="suppliers",
    )
    supplier_code = models.CharField(max_length=20)

    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=50, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    address = models.TextField(blank=True, default="")

    opening_balance = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    opening_balance_voucher = models.OneToOneField(
        JournalVoucher,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="supplier_opening",
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["company", "name"]),
            models.Index(fields=["company", "is_active"]),
        ]
        constraints = [
            models.UniqueConstraint(fields=["company", "supplier_code"], name="uniq_supplier_company_code"),
        ]

    def __str__(self):
        return f"{self.supplier_code} - {self.name}"


class PurchaseOrder(models.Model):
    """
    Lifecycle:
        Draft -> Approved -> Partially Received -> Completed
        Draft / Approved (nothing received) -> Cancelled

    Receiving is performed by purchases.services.receiving_service (GRNs).
    """

    STATUS_DRAFT = "Draft"
    STATUS_APPROVED = "Approved"
    STATUS_PARTIALLY_RECEIVED = "Partially Received"
    STATUS_COMPLETED = "Completed"
    STATUS_CANCELLED = "Cancelled"

    STATUSES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_PARTIALLY_RECEIVED, "Partially Received"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    RECEIVABLE_STATUSES = {STATUS_APPROVED, STATUS_PARTIALLY_RECEIVED}

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="purchase_orders",
    )
    po_number = models.CharField(max_length=20)

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="purchase_orders",
    )

    po_date = models.DateField()
    expected_delivery_date = models.DateField(null=True, blank=True)

    currency = models.CharField(max_length=3, default="NGN")
    payment_terms = models.CharField(max_length=100, blank=True, default="")

    subtotal = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    vat_total = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_DRAFT)
    remarks = models.TextField(blank=True, default="")

    approved_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchase_orders_approved",
    )
    approved_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="purchase_orders_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-po_date", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["company", "po_number"], name="uniq_po_company_number"),
            models.CheckConstraint(condition=models.Q(total_amount__gte=0), name="chk_po_total_not_negative"),
        ]
        indexes = [
            models.Index(fields=["company", "status"]),
            models.Index(fields=["company", "supplier"]),
        ]

    def clean(self):
        if self.supplier_id and self.supplier.company_id != self.company_id:
            raise ValidationError({"supplier": "Supplier belongs to another company"})
        if self.expected_delivery_date and self.po_date and self.expected_delivery_date < self.po_date:
            raise ValidationError({"expected_delivery_date": "Expected delivery cannot be before the PO date"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.po_number} ({self.status})"


class PurchaseOrderItem(models.Model):
    purchase_order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.CASCADE,
        related_name="items",
    )
    item = models.ForeignKey(
        InventoryItem,
        on_delete=models.PROTECT,
        related_name="purchase_order_items",
    )
    description = models.CharField(max_length=255, blank=True, default="")

    quantity = models.DecimalField(
        max_digits=18,
        decimal_places=4,
        validators=[MinValueValidator(Decimal("0.0001"))],
    )
    unit_price = models.DecimalField(
        max_digits=18,
        decimal_places=4,
        validators=[MinValueValidator(Decimal("0"))],
    )
    line_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    vat_applicable = models.BooleanField(default=False)
    vat_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )
    vat_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    line_total = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    quantity_received = models.DecimalField(max_digits=18, decimal_places=4, default=Decimal("0"))

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity_received__gte=0),
                name="chk_po_item_received_not_negative",
            ),
        ]

    @property
    def quantity_outstanding(self) -> Decimal:
        return max(self.quantity - self.quantity_received, Decimal("0"))

    def __str__(self):
        return f"{self.item} x {self.quantity}"


class GoodsReceivedNote(models.Model):
    """
    One delivery against a purchase order.

    Posting: Dr inventory account(s) / Cr ACCOUNTS_PAYABLE for the received value.
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="goods_received_notes",
    )
    grn_number = models.CharField(max_length=20)

    purchase_order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.PROTECT,
        related_name="grns",
    )
    grn_date = models.DateField()
    remarks = models.TextField(blank=True, default="")

    total_value = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    journal_voucher = models.OneToOneField(
        JournalVoucher,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="goods_received_note",
    )

    received_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="goods_received_notes",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-grn_date", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["company", "grn_number"], name="uniq_grn_company_number"),
        ]

    def __str__(self):
        return self.grn_number


class GRNItem(models.Model):
    grn = models.ForeignKey(
        GoodsReceivedNote,
        on_delete=models.CASCADE,
        related_name="items",
    )
    po_item = models.ForeignKey(
        PurchaseOrderItem,
        on_delete=models.PROTECT,
        related_name="grn_items",
    )
    quantity_received = models.DecimalField(
        max_digits=18,
        decimal_places=4,
        validators=[MinValueValidator(Decimal("0.0001"))],
    )
    unit_cost = models.DecimalField(max_digits=18, decimal_places=4)
    line_value = models.DecimalField(max_digits=18, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.po_item.item} x {self.quantity_received}"


# ============================================================
# SUPPLIER SETTLEMENT
# ============================================================


class SupplierInvoice(models.Model):
    """
    The supplier's bill for one GRN.

    Lifecycle:
        Awaiting Approval -> Unpaid -> Partially Paid -> Paid
        Awaiting Approval -> Void

    The GRN already credited ACCOUNTS_PAYABLE with the net value; approval posts
    the input VAT on top: Dr VAT_INPUT / Cr ACCOUNTS_PAYABLE.
    """

    STATUS_AWAITING_APPROVAL = "Awaiting Approval"
    STATUS_UNPAID = "Unpaid"
    STATUS_PARTIALLY_PAID = "Partially Paid"
    STATUS_PAID = "Paid"
    STATUS_VOID = "Void"

    STATUSES = [
        (STATUS_AWAITING_APPROVAL, "Awaiting Approval"),
        (STATUS_UNPAID, "Unpaid"),
        (STATUS_PARTIALLY_PAID, "Partially Paid"),
        (STATUS_PAID, "Paid"),
        (STATUS_VOID, "Void"),
    ]

    PAYABLE_STATUSES = {STATUS_UNPAID, STATUS_PARTIALLY_PAID}

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="supplier_invoices",
    )
    invoice_number = models.CharField(max_length=20)
    supplier_reference = models.CharField(max_length=100, blank=True, default="")

    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="invoices",
    )
    purchase_order = models.ForeignKey(
        PurchaseOrder,
        on_delete=models.PROTECT,
        related_name="supplier_invoices",
    )
    grn = models.OneToOneField(
        GoodsReceivedNote,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="supplier_invoice",
    )

    invoice_date = models.DateField()
    due_date = models.DateField()

    subtotal = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    vat_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    amount_paid = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(max_length=20, choices=STATUSES, default=STATUS_AWAITING_APPROVAL)

    journal_voucher = models.OneToOneField(
        JournalVoucher,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="supplier_invoice",
    )

    approved_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="supplier_invoices_approved",
    )
    approved_at = models.DateTimeField(null=True, blank=True)
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="supplier_invoices_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["due_date", "id"]
        constraints = [
            models.UniqueConstraint(fields=["company", "invoice_number"], name="uniq_supplier_invoice_company_number"),
            models.CheckConstraint(
                condition=models.Q(amount_paid__gte=0) & models.Q(amount_paid__lte=models.F("total_amount")),
                name="chk_supplier_invoice_paid_within_total",
            ),
        ]
        indexes = [
            models.Index(fields=["company", "status"]),
            models.Index(fields=["company", "supplier"]),
        ]

    @property
    def outstanding(self) -> Decimal:
        return max(self.total_amount - self.amount_paid, Decimal("0.00"))

    def __str__(self):
        return f"{self.invoice_number} ({self.status})"


class SupplierInvoiceItem(models.Model):
    invoice = models.ForeignKey(
        SupplierInvoice,
        on_delete=models.CASCADE,
        related_name="items",
    )
    grn_item = models.OneToOneField(
        GRNItem,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoice_item",
    )
    item = models.ForeignKey(
        InventoryItem,
        on_delete=models.PROTECT,
        related_name="supplier_invoice_items",
    )
    quantity = models.DecimalField(max_digits=18, decimal_places=4)
    unit_cost = models.DecimalField(max_digits=18, decimal_places=4)
    line_amount = models.DecimalField(max_digits=18, decimal_places=2)
    vat_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    vat_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    line_total = models.DecimalField(max_digits=18, decimal_places=2)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.item} x {self.quantity}"


class SupplierPayment(models.Model):
    """
    One payment to one supplier, settling one or more approved invoices.

    Posting (source=Supplier Payment):
        Dr ACCOUNTS_PAYABLE   gross
        Cr WHT_PAYABLE        gross * wht_rate / 100
        Cr bank account       net
    """

    company = models.ForeignKey(
        Company,
        on_delete=models.PROTECT,
        related_name="supplier_payments",
    )
    payment_number = models.CharField(max_length=20)
    supplier = models.ForeignKey(
        Supplier,
        on_delete=models.PROTECT,
        related_name="payments",
    )
    payment_date = models.DateField()
    bank_account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="supplier_payments",
    )

    gross_amount = models.DecimalField(max_digits=18, decimal_places=2)
    wht_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )
    wht_amount = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0.00"))
    net_amount = models.DecimalField(max_digits=18, decimal_places=2)
    narration = models.CharField(max_length=255, blank=True, default="")

    journal_voucher = models.OneToOneField(
        JournalVoucher,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="supplier_payment",
    )
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="supplier_payments_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-payment_date", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["company", "payment_number"], name="uniq_supplier_payment_company_number"),
            models.CheckConstraint(condition=models.Q(gross_amount__gt=0), name="chk_supplier_payment_gross_positive"),
        ]

    def __str__(self):
        return f"{self.payment_number} - {self.supplier.name}"


class SupplierPaymentAllocation(models.Model):
    payment = models.ForeignKey(
        SupplierPayment,
        on_delete=models.CASCADE,
        related_name="allocations",
    )
    invoice = models.ForeignKey(
        SupplierInvoice,
        on_delete=models.PROTECT,
        related_name="allocations",
    )
    amount = models.DecimalField(max_digits=18, decimal_places=2)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["payment", "invoice"], name="uniq_supplier_allocation_invoice"),
            models.CheckConstraint(condition=models.Q(amount__gt=0), name="chk_supplier_allocation_positive"),
        ]

    def __str__(self):
        return f"{self.payment.payment_number} -> {self.invoice.invoice_number}: {self.amount}"
