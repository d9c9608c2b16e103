# accounting/api/serializers/reconciliation.py

from rest_framework import serializers

from accounting.models.reconciliation import BankReconciliation


class BankReconciliationSerializer(serializers.ModelSerializer):
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)
    cleared_line_ids = serializers.SerializerMethodField()

    class Meta:
        model = BankReconciliation
        fields = (
            "id",
            "account",
            "account_code",
            "account_name",
            "statement_date",
            "statement_balance",
            "cleared_balance",
            "difference",
            "status",
            "notes",
            "cleared_line_ids",
            "created_by",
            "completed_at",
            "created_at",
        )
        read_only_fields = fields

    def get_cleared_line_ids(self, obj):
        return sorted(obj.lines.values_list("voucher_line_id", flat=True))


class BankReconciliationCreateSerializer(serializers.Serializer):
    account_id = serializers.IntegerField()
    statement_date = serializers.DateField()
    statement_balance = serializers.DecimalField(max_digits=18, decimal_places=2)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class BankReconciliationUpdateSerializer(serializers.Serializer):
    cleared_line_ids = serializers.ListField(child=serializers.IntegerField(), required=False)
    statement_balance = serializers.DecimalField(max_digits=18, decimal_places=2, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=BankReconciliation.STATUS_CHOICES, required=False)
