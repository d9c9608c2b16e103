# purchases/admin.py

from django.contrib import admin

from purchases.models import (
    GoodsReceivedNote,
    GRNItem,
    PurchaseOrder,
    PurchaseOrderItem,
    Supplier,
    SupplierInvoice,
    SupplierInvoiceItem,
    SupplierPayment,
    SupplierPaymentAllocation,
)


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ("supplier_code", "name", "email", "phone", "opening_balance", "company", "is_active")
    list_filter = ("company", "is_active")
    search_fields = ("supplier_code", "name", "email")
    readonly_fields = ("supplier_code", "opening_balance", "opening_balance_voucher")


class PurchaseOrderItemInline(admin.TabularInline):
    model = PurchaseOrderItem
    extra = 0
    readonly_fields = ("line_amount", "vat_amount", "line_total", "quantity_received")


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ("po_number", "supplier", "po_date", "status", "total_amount", "company")
    list_filter = ("company", "status")
    search_fields = ("po_number", "supplier__name")
    inlines = [PurchaseOrderItemInline]
    readonly_fields = ("subtotal", "vat_total", "total_amount", "approved_by", "approved_at")


class GRNItemInline(admin.TabularInline):
    model = GRNItem
    extra = 0
    can_delete = False
    readonly_fields = ("po_item", "quantity_received", "unit_cost", "line_value")


@admin.register(GoodsReceivedNote)
class GoodsReceivedNoteAdmin(admin.ModelAdmin):
    list_display = ("grn_number", "purchase_order", "grn_date", "total_value", "company")
    list_filter = ("company",)
    search_fields = ("grn_number", "purchase_order__po_number")
    inlines = [GRNItemInline]
    readonly_fields = ("total_value", "journal_voucher")


# ============================================================
# SUPPLIER SETTLEMENT (posted through the services only)
# ============================================================


class SupplierInvoiceItemInline(admin.TabularInline):
    model = SupplierInvoiceItem
    extra = 0
    can_delete = False
    readonly_fields = ("item", "quantity", "unit_cost", "line_amount", "vat_rate", "vat_amount", "line_total")


@admin.register(SupplierInvoice)
class SupplierInvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "supplier", "invoice_date", "due_date", "status", "total_amount", "amount_paid", "company")
    list_filter = ("company", "status")
    search_fields = ("invoice_number", "supplier_reference", "supplier__name")
    inlines = [SupplierInvoiceItemInline]
    readonly_fields = (
        "invoice_number",
        "grn",
        "subtotal",
        "vat_amount",
        "total_amount",
        "amount_paid",
        "status",
        "journal_voucher",
        "approved_by",
        "approved_at",
    )


class SupplierPaymentAllocationInline(admin.TabularInline):
    model = SupplierPaymentAllocation
    extra = 0
    can_delete = False
    readonly_fields = ("invoice", "amount")


@admin.register(SupplierPayment)
class SupplierPaymentAdmin(admin.ModelAdmin):
    list_display = ("payment_number", "supplier", "payment_date", "gross_amount", "wht_amount", "net_amount", "company")
    list_filter = ("company",)
    search_fields = ("payment_number", "supplier__name")
    inlines = [SupplierPaymentAllocationInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
