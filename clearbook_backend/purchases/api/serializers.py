# purchases/api/serializers.py

from rest_framework import serializers

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


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = (
            "id",
            "supplier_code",
            "name",
            "email",
            "phone",
            "address",
            "opening_balance",
            "is_active",
            "created_at",
        )
        read_only_fields = ("id", "supplier_code", "opening_balance", "created_at")


class SupplierOpeningBalanceSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0)
    as_of = serializers.DateField()


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    sku = serializers.CharField(source="item.sku", read_only=True)
    quantity_outstanding = serializers.DecimalField(max_digits=18, decimal_places=4, read_only=True)

    class Meta:
        model = PurchaseOrderItem
        fields = (
            "id",
            "item",
            "sku",
            "description",
            "quantity",
            "unit_price",
            "line_amount",
            "vat_applicable",
            "vat_rate",
            "vat_amount",
            "line_total",
            "quantity_received",
            "quantity_outstanding",
        )
        read_only_fields = fields


class PurchaseOrderSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    items = PurchaseOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = (
            "id",
            "po_number",
            "supplier",
            "supplier_name",
            "po_date",
            "expected_delivery_date",
            "currency",
            "payment_terms",
            "subtotal",
            "vat_total",
            "total_amount",
            "status",
            "remarks",
            "approved_at",
            "items",
            "created_at",
        )
        read_only_fields = fields


class PurchaseOrderItemCreateSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    description = serializers.CharField(required=False, allow_blank=True, default="")
    quantity = serializers.DecimalField(max_digits=18, decimal_places=4, min_value=0)
    unit_price = serializers.DecimalField(max_digits=18, decimal_places=4, min_value=0)
    vat_applicable = serializers.BooleanField(required=False, default=False)
    vat_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False)


class PurchaseOrderCreateSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField()
    po_date = serializers.DateField(required=False)
    expected_delivery_date = serializers.DateField(required=False, allow_null=True)
    currency = serializers.CharField(max_length=3, required=False)
    payment_terms = serializers.CharField(required=False, allow_blank=True, default="")
    remarks = serializers.CharField(required=False, allow_blank=True, default="")
    items = PurchaseOrderItemCreateSerializer(many=True, allow_empty=False)


class GRNItemSerializer(serializers.ModelSerializer):
    sku = serializers.CharField(source="po_item.item.sku", read_only=True)

    class Meta:
        model = GRNItem
        fields = ("id", "po_item", "sku", "quantity_received", "unit_cost", "line_value")
        read_only_fields = fields


class GoodsReceivedNoteSerializer(serializers.ModelSerializer):
    po_number = serializers.CharField(source="purchase_order.po_number", read_only=True)
    po_status = serializers.CharField(source="purchase_order.status", read_only=True)
    journal_voucher_number = serializers.CharField(source="journal_voucher.voucher_number", read_only=True, default=None)
    items = GRNItemSerializer(many=True, read_only=True)

    class Meta:
        model = GoodsReceivedNote
        fields = (
            "id",
            "grn_number",
            "purchase_order",
            "po_number",
            "po_status",
            "grn_date",
            "remarks",
            "total_value",
            "journal_voucher",
            "journal_voucher_number",
            "items",
            "created_at",
        )
        read_only_fields = fields


class GRNLineCreateSerializer(serializers.Serializer):
    po_item_id = serializers.IntegerField()
    quantity_received = serializers.DecimalField(max_digits=18, decimal_places=4, min_value=0)


class GoodsReceivedNoteCreateSerializer(serializers.Serializer):
    purchase_order_id = serializers.IntegerField()
    grn_date = serializers.DateField(required=False)
    remarks = serializers.CharField(required=False, allow_blank=True, default="")
    lines = GRNLineCreateSerializer(many=True, allow_empty=False)


# ============================================================
# SUPPLIER SETTLEMENT
# ============================================================


class SupplierInvoiceItemSerializer(serializers.ModelSerializer):
    sku = serializers.CharField(source="item.sku", read_only=True)

    class Meta:
        model = SupplierInvoiceItem
        fields = ("id", "item", "sku", "quantity", "unit_cost", "line_amount", "vat_rate", "vat_amount", "line_total")
        read_only_fields = fields


class SupplierInvoiceSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    po_number = serializers.CharField(source="purchase_order.po_number", read_only=True)
    grn_number = serializers.CharField(source="grn.grn_number", read_only=True, default=None)
    journal_voucher_number = serializers.CharField(source="journal_voucher.voucher_number", read_only=True, default=None)
    outstanding = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)
    items = SupplierInvoiceItemSerializer(many=True, read_only=True)

    class Meta:
        model = SupplierInvoice
        fields = (
            "id",
            "invoice_number",
            "supplier_reference",
            "supplier",
            "supplier_name",
            "purchase_order",
            "po_number",
            "grn",
            "grn_number",
            "invoice_date",
            "due_date",
            "subtotal",
            "vat_amount",
            "total_amount",
            "amount_paid",
            "outstanding",
            "status",
            "journal_voucher",
            "journal_voucher_number",
            "approved_at",
            "items",
            "created_at",
        )
        read_only_fields = fields


class SupplierInvoiceCreateSerializer(serializers.Serializer):
    grn_id = serializers.IntegerField()
    invoice_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False)
    supplier_reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")

    def validate(self, attrs):
        invoice_date, due_date = attrs.get("invoice_date"), attrs.get("due_date")
        if invoice_date and due_date and due_date < invoice_date:
            raise serializers.ValidationError({"due_date": "Due date cannot be before the invoice date"})
        return attrs


class SupplierPaymentAllocationSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(source="invoice.invoice_number", read_only=True)

    class Meta:
        model = SupplierPaymentAllocation
        fields = ("id", "invoice", "invoice_number", "amount")
        read_only_fields = fields


class SupplierPaymentSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    bank_account_code = serializers.CharField(source="bank_account.code", read_only=True)
    journal_voucher_number = serializers.CharField(source="journal_voucher.voucher_number", read_only=True, default=None)
    allocations = SupplierPaymentAllocationSerializer(many=True, read_only=True)

    class Meta:
        model = SupplierPayment
        fields = (
            "id",
            "payment_number",
            "supplier",
            "supplier_name",
            "payment_date",
            "bank_account",
            "bank_account_code",
            "gross_amount",
            "wht_rate",
            "wht_amount",
            "net_amount",
            "narration",
            "journal_voucher",
            "journal_voucher_number",
            "allocations",
            "created_at",
        )
        read_only_fields = fields


class AllocationInputSerializer(serializers.Serializer):
    invoice_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, required=False, allow_null=True)


class SupplierPaymentCreateSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField()
    bank_account_id = serializers.IntegerField()
    payment_date = serializers.DateField(required=False)
    wht_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False, default=0)
    narration = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    allocations = AllocationInputSerializer(many=True, allow_empty=False)


class ScheduledPaymentSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField()
    narration = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    allocations = AllocationInputSerializer(many=True, allow_empty=False)


class PaymentScheduleSerializer(serializers.Serializer):
    bank_account_id = serializers.IntegerField()
    payment_date = serializers.DateField(required=False)
    wht_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False, default=0)
    payments = ScheduledPaymentSerializer(many=True, allow_empty=False)
