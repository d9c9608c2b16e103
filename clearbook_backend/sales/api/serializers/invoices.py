# sales/api/serializers/invoices.py

from rest_framework import serializers

from sales.models import SalesInvoice, SalesInvoiceItem


class SalesInvoiceItemSerializer(serializers.ModelSerializer):
    sku = serializers.CharField(source="item.sku", read_only=True, default=None)

    class Meta:
        model = SalesInvoiceItem
        fields = (
            "id",
            "item",
            "sku",
            "description",
            "quantity",
            "unit_price",
            "discount",
            "tax_rate",
            "tax_amount",
            "line_total",
            "unit_cost",
        )
        read_only_fields = fields


class SalesInvoiceListSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    journal_voucher_number = serializers.CharField(source="journal_voucher.voucher_number", read_only=True, default=None)

    class Meta:
        model = SalesInvoice
        fields = (
            "id",
            "invoice_number",
            "customer",
            "customer_name",
            "invoice_date",
            "due_date",
            "status",
            "subtotal",
            "discount_amount",
            "tax_amount",
            "total_amount",
            "amount_paid",
            "amount_due",
            "notes",
            "journal_voucher",
            "journal_voucher_number",
            "reversal_voucher",
            "created_at",
        )
        read_only_fields = fields


class SalesInvoiceSerializer(SalesInvoiceListSerializer):
    items = SalesInvoiceItemSerializer(many=True, read_only=True)

    class Meta(SalesInvoiceListSerializer.Meta):
        fields = (*SalesInvoiceListSerializer.Meta.fields, "items")
        read_only_fields = fields


class DocumentLineInputSerializer(serializers.Serializer):
    item_id = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    quantity = serializers.DecimalField(max_digits=18, decimal_places=4, min_value=0)
    unit_price = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0)
    discount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, required=False, default=0)
    tax_rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False, default=0)

    def validate(self, attrs):
        if attrs["quantity"] <= 0:
            raise serializers.ValidationError({"quantity": "Must be greater than zero"})
        if attrs.get("item_id") is None and not (attrs.get("description") or "").strip():
            raise serializers.ValidationError({"description": "Required for lines without an item"})
        return attrs


class InvoiceLineInputSerializer(DocumentLineInputSerializer):
    """
    Invoice lines may name a price tier, or leave unit_price out to use the
    item's selling price. Lines without an item still need a unit_price.
    """

    unit_price = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, required=False, allow_null=True)
    price_tier = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if attrs.get("item_id") is None:
            if (attrs.get("price_tier") or "").strip():
                raise serializers.ValidationError({"price_tier": "Only lines with an item can use a price tier"})
            if attrs.get("unit_price") is None:
                raise serializers.ValidationError({"unit_price": "Required for lines without an item"})
        return attrs


class SalesInvoiceCreateSerializer(serializers.Serializer):
    customer_id = serializers.IntegerField()
    invoice_date = serializers.DateField(required=False)
    due_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    post = serializers.BooleanField(required=False, default=False)
    items = InvoiceLineInputSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        invoice_date, due_date = attrs.get("invoice_date"), attrs.get("due_date")
        if invoice_date and due_date and due_date < invoice_date:
            raise serializers.ValidationError({"due_date": "Due date cannot be before the invoice date"})
        return attrs


class CancelInvoiceSerializer(serializers.Serializer):
    cancel_date = serializers.DateField(required=False)
