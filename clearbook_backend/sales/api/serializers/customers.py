# sales/api/serializers/customers.py

from rest_framework import serializers

from sales.models import Customer


class CustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = (
            "id",
            "customer_code",
            "name",
            "email",
            "phone",
            "address",
            "credit_limit",
            "payment_terms_days",
            "opening_balance",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "customer_code", "opening_balance", "created_at", "updated_at")


class CustomerOpeningBalanceSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0)
    as_of = serializers.DateField()


class CustomerStatementQuerySerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs["start_date"] > attrs["end_date"]:
            raise serializers.ValidationError("start_date cannot be after end_date")
        return attrs


class AgingQuerySerializer(serializers.Serializer):
    as_of = serializers.DateField(required=False)
