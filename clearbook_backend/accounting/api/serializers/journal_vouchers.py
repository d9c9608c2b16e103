# accounting/api/serializers/journal_vouchers.py

from rest_framework import serializers

from accounting.models.journal import JournalVoucher, JournalVoucherLine


class JournalVoucherLineSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)

    class Meta:
        model = JournalVoucherLine
        fields = ("id", "account", "account_code", "account_name", "debit", "credit", "payee", "description")
        read_only_fields = fields


class JournalVoucherSerializer(serializers.ModelSerializer):
    lines = JournalVoucherLineSerializer(many=True, read_only=True)
    created_by_email = serializers.CharField(source="created_by.email", read_only=True, default=None)
    posted_by_email = serializers.CharField(source="posted_by.email", read_only=True, default=None)

    class Meta:
        model = JournalVoucher
        fields = (
            "id",
            "voucher_number",
            "entry_date",
            "source",
            "narration",
            "status",
            "total_debits",
            "total_credits",
            "reference",
            "reversal_of",
            "created_by_email",
            "posted_by_email",
            "posted_at",
            "created_at",
            "lines",
        )
        read_only_fields = fields


class JournalVoucherListSerializer(serializers.ModelSerializer):
    class Meta:
        model = JournalVoucher
        fields = (
            "id",
            "voucher_number",
            "entry_date",
            "source",
            "narration",
            "status",
            "total_debits",
            "total_credits",
            "posted_at",
        )
        read_only_fields = fields


class VoucherLineInputSerializer(serializers.Serializer):
    account_id = serializers.IntegerField()
    debit = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, default=0, min_value=0)
    credit = serializers.DecimalField(max_digits=18, decimal_places=2, required=False, default=0, min_value=0)
    payee = serializers.CharField(required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")


class JournalVoucherCreateSerializer(serializers.Serializer):
    STATUS_CHOICES = [
        JournalVoucher.STATUS_DRAFT,
        JournalVoucher.STATUS_AWAITING_APPROVAL,
        JournalVoucher.STATUS_POSTED,
    ]

    entry_date = serializers.DateField()
    narration = serializers.CharField()
    status = serializers.ChoiceField(choices=STATUS_CHOICES, required=False, default=JournalVoucher.STATUS_DRAFT)
    lines = VoucherLineInputSerializer(many=True)


class JournalVoucherUpdateSerializer(serializers.Serializer):
    entry_date = serializers.DateField(required=False)
    narration = serializers.CharField(required=False)
    lines = VoucherLineInputSerializer(many=True, required=False)


class ReverseVoucherSerializer(serializers.Serializer):
    entry_date = serializers.DateField(required=False)
    narration = serializers.CharField(required=False, allow_blank=True)
