# accounting/api/serializers/incomes.py

from rest_framework import serializers

from accounting.models.income import OtherIncome


class OtherIncomeSerializer(serializers.ModelSerializer):
    income_account_code = serializers.CharField(source="income_account.code", read_only=True)
    income_account_name = serializers.CharField(source="income_account.name", read_only=True)
    payment_account_code = serializers.CharField(source="payment_account.code", read_only=True)
    voucher_number = serializers.CharField(source="journal_voucher.voucher_number", read_only=True, default=None)

    class Meta:
        model = OtherIncome
        fields = (
            "id",
            "income_number",
            "income_date",
            "amount",
            "income_account",
            "income_account_code",
            "income_account_name",
            "payment_account",
            "payment_account_code",
            "payment_method",
            "received_from",
            "description",
            "status",
            "journal_voucher",
            "voucher_number",
            "created_at",
        )
        read_only_fields = fields


class OtherIncomeCreateSerializer(serializers.Serializer):
    income_date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0)
    income_account_id = serializers.IntegerField()
    payment_method = serializers.ChoiceField(choices=OtherIncome.PAYMENT_METHODS, default=OtherIncome.PAYMENT_CASH)
    payment_account_id = serializers.IntegerField(required=False, allow_null=True)
    received_from = serializers.CharField(required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    post = serializers.BooleanField(required=False, default=False)


class OtherIncomeUpdateSerializer(serializers.Serializer):
    income_date = serializers.DateField(required=False)
    amount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, required=False)
    income_account_id = serializers.IntegerField(required=False)
    payment_method = serializers.ChoiceField(choices=OtherIncome.PAYMENT_METHODS, required=False)
    payment_account_id = serializers.IntegerField(required=False)
    received_from = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
