# sales/api/serializers/payments.py

from rest_framework import serializers

from sales.models import CustomerPayment, PaymentAllocation


class PaymentAllocationSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(source="invoice.invoice_number", read_only=True)

    class Meta:
        model = PaymentAllocation
        fields = ("id", "invoice", "invoice_number", "amount_applied")
        read_only_fields = fields


class CustomerPaymentSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source="customer.name", read_only=True)
    bank_account_code = serializers.CharField(source="bank_account.code", read_only=True)
    journal_voucher_number = serializers.CharField(source="journal_voucher.voucher_number", read_only=True, default=None)
    allocations = PaymentAllocationSerializer(many=True, read_only=True)

    class Meta:
        model = CustomerPayment
        fields = (
            "id",
            "payment_number",
            "customer",
            "customer_name",
            "payment_date",
            "amount",
            "wht_amount",
            "bank_account",
            "bank_account_code",
            "reference",
            "notes",
            "journal_voucher",
            "journal_voucher_number",
            "allocations",
            "created_at",
        )
        read_only_fields = fields


class AllocationInputSerializer(serializers.Serializer):
    invoice_id = serializers.IntegerField()
    amount_applied = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0)


class CustomerPaymentCreateSerializer(serializers.Serializer):
    customer_id = serializers.IntegerField()
    amount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0)
    bank_account_id = serializers.IntegerField()
    wht_amount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, required=False, default=0)
    payment_date = serializers.DateField(required=False)
    reference = serializers.CharField(required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    allocations = AllocationInputSerializer(many=True, allow_empty=False)
