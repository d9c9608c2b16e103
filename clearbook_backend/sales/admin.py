# sales/admin.py

from django.contrib import admin

from sales.models import (
    CreditNote,
    CreditNoteItem,
    Customer,
    CustomerPayment,
    PaymentAllocation,
    SalesInvoice,
    SalesInvoiceItem,
)


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("customer_code", "name", "email", "company", "opening_balance", "is_active")
    list_filter = ("company", "is_active")
    search_fields = ("customer_code", "name", "email")
    readonly_fields = ("customer_code", "opening_balance", "opening_balance_voucher")


class SalesInvoiceItemInline(admin.TabularInline):
    model = SalesInvoiceItem
    extra = 0
    readonly_fields = ("tax_amount", "line_total", "unit_cost")


@admin.register(SalesInvoice)
class SalesInvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "customer", "invoice_date", "due_date", "status", "total_amount", "amount_due", "company")
    list_filter = ("company", "status")
    search_fields = ("invoice_number", "customer__name")
    inlines = [SalesInvoiceItemInline]
    readonly_fields = (
        "subtotal",
        "discount_amount",
        "tax_amount",
        "total_amount",
        "amount_paid",
        "amount_due",
        "journal_voucher",
        "reversal_voucher",
    )


class PaymentAllocationInline(admin.TabularInline):
    model = PaymentAllocation
    extra = 0
    can_delete = False
    readonly_fields = ("invoice", "amount_applied")


@admin.register(CustomerPayment)
class CustomerPaymentAdmin(admin.ModelAdmin):
    list_display = ("payment_number", "customer", "payment_date", "amount", "bank_account", "company")
    list_filter = ("company",)
    search_fields = ("payment_number", "customer__name", "reference")
    inlines = [PaymentAllocationInline]
    readonly_fields = ("journal_voucher",)


class CreditNoteItemInline(admin.TabularInline):
    model = CreditNoteItem
    extra = 0
    readonly_fields = ("tax_amount", "line_total")


@admin.register(CreditNote)
class CreditNoteAdmin(admin.ModelAdmin):
    list_display = ("credit_note_number", "invoice", "customer", "credit_date", "status", "total_amount", "company")
    list_filter = ("company", "status")
    search_fields = ("credit_note_number", "invoice__invoice_number")
    inlines = [CreditNoteItemInline]
    readonly_fields = ("journal_voucher",)
