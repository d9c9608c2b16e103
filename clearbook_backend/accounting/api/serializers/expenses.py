# accounting/api/serializers/expenses.py

from rest_framework import serializers

from accounting.models.expense import Expense


class ExpenseSerializer(serializers.ModelSerializer):
    expense_account_code = serializers.CharField(source="expense_account.code", read_only=True)
    expense_account_name = serializers.CharField(source="expense_account.name", read_only=True)
    payment_account_code = serializers.CharField(source="payment_account.code", read_only=True)
    voucher_number = serializers.CharField(source="journal_voucher.voucher_number", read_only=True, default=None)

    class Meta:
        model = Expense
        fields = (
            "id",
            "expense_date",
            "amount",
            "expense_account",
            "expense_account_code",
            "expense_account_name",
            "payment_account",
            "payment_account_code",
            "payment_method",
            "payee",
            "description",
            "status",
            "journal_voucher",
            "voucher_number",
            "created_at",
        )
        read_only_fields = fields


class ExpenseCreateSerializer(serializers.Serializer):
    expense_date = serializers.DateField()
    amount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0)
    expense_account_id = serializers.IntegerField()
    payment_method = serializers.ChoiceField(choices=Expense.PAYMENT_METHODS, default=Expense.PAYMENT_CASH)
    payment_account_id = serializers.IntegerField(required=False, allow_null=True)
    payee = serializers.CharField(required=False, allow_blank=True, default="")
    description = serializers.CharField(required=False, allow_blank=True, default="")
    post = serializers.BooleanField(required=False, default=False)


class ExpenseUpdateSerializer(serializers.Serializer):
    expense_date = serializers.DateField(required=False)
    amount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, required=False)
    expense_account_id = serializers.IntegerField(required=False)
    payment_method = serializers.ChoiceField(choices=Expense.PAYMENT_METHODS, required=False)
    payment_account_id = serializers.IntegerField(required=False)
    payee = serializers.CharField(required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
