# sales/api/serializers/credit_notes.py

from rest_framework import serializers

from sales.api.serializers.invoices import DocumentLineInputSerializer
from sales.models import CreditNote, CreditNoteItem


class CreditNoteItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = CreditNoteItem
        fields = ("id", "item", "description", "quantity", "unit_price", "discount", "tax_rate", "tax_amount", "line_total")
        read_only_fields = fields


class CreditNoteSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(source="invoice.invoice_number", read_only=True)
    journal_voucher_number = serializers.CharField(source="journal_voucher.voucher_number", read_only=True, default=None)
    items = CreditNoteItemSerializer(many=True, read_only=True)

    class Meta:
        model = CreditNote
        fields = (
            "id",
            "credit_note_number",
            "invoice",
            "invoice_number",
            "customer",
            "credit_date",
            "reason",
            "status",
            "subtotal",
            "discount_amount",
            "tax_amount",
            "total_amount",
            "journal_voucher",
            "journal_voucher_number",
            "items",
            "created_at",
        )
        read_only_fields = fields


class CreditNoteCreateSerializer(serializers.Serializer):
    invoice_id = serializers.IntegerField()
    credit_date = serializers.DateField(required=False)
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    items = DocumentLineInputSerializer(many=True, allow_empty=False)
