# accounting/api/serializers/payment_vouchers.py

from rest_framework import serializers

from accounting.models.payment_voucher import PaymentVoucher, PaymentVoucherLine


class PaymentVoucherLineSerializer(serializers.ModelSerializer):
    gl_account_code = serializers.CharField(source="gl_account.code", read_only=True)

    class Meta:
        model = PaymentVoucherLine
        fields = (
            "id",
            "gl_account",
            "gl_account_code",
            "line_description",
            "cost_center",
            "amount",
            "vat_applicable",
            "vat_rate",
            "vat_amount",
            "wht_applicable",
            "wht_rate",
            "wht_amount",
        )
        read_only_fields = fields


class PaymentVoucherSerializer(serializers.ModelSerializer):
    lines = PaymentVoucherLineSerializer(many=True, read_only=True)
    voucher_number = serializers.CharField(source="journal_voucher.voucher_number", read_only=True, default=None)

    class Meta:
        model = PaymentVoucher
        fields = (
            "id",
            "pv_number",
            "voucher_date",
            "payment_type",
            "payment_mode",
            "currency",
            "exchange_rate",
            "payee_type",
            "payee_code",
            "payee_name",
            "narration",
            "source_module",
            "source_document_no",
            "gross_amount",
            "total_vat",
            "total_wht",
            "net_payable",
            "bank_cash_account",
            "status",
            "prepared_by",
            "approved_by",
            "approved_at",
            "journal_voucher",
            "voucher_number",
            "created_at",
            "lines",
        )
        read_only_fields = fields


class PaymentVoucherLineInputSerializer(serializers.Serializer):
    gl_account_id = serializers.IntegerField()
    line_description = serializers.CharField(required=False, allow_blank=True, default="")
    cost_center = serializers.CharField(required=False, allow_blank=True, default="")
    amount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0)
    vat_applicable = serializers.BooleanField(required=False, default=False)
    vat_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, default=0, min_value=0)
    wht_applicable = serializers.BooleanField(required=False, default=False)
    wht_rate = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, default=0, min_value=0)


class PaymentVoucherCreateSerializer(serializers.Serializer):
    voucher_date = serializers.DateField()
    payment_type = serializers.CharField(required=False, allow_blank=True, default="")
    payment_mode = serializers.CharField(required=False, allow_blank=True, default="")
    currency = serializers.CharField(required=False, allow_blank=True, max_length=3)
    exchange_rate = serializers.DecimalField(max_digits=12, decimal_places=4, required=False, min_value=0)
    payee_type = serializers.CharField(required=False, allow_blank=True, default="")
    payee_code = serializers.CharField(required=False, allow_blank=True, default="")
    payee_name = serializers.CharField()
    narration = serializers.CharField(required=False, allow_blank=True, default="")
    source_module = serializers.CharField(required=False, allow_blank=True, default="")
    source_document_no = serializers.CharField(required=False, allow_blank=True, default="")
    bank_cash_account_id = serializers.IntegerField()
    lines = PaymentVoucherLineInputSerializer(many=True, allow_empty=False)
