# companies/api/serializers.py

from rest_framework import serializers

from companies.models import Company


class CompanySerializer(serializers.ModelSerializer):
    class Meta:
        model = Company
        fields = [
            "company_id",
            "name",
            "company_type",
            "address",
            "phone",
            "email",
            "currency",
            "payment_form_locked",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CompanyUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, max_length=200)
    address = serializers.CharField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=50)
    email = serializers.EmailField(required=False, allow_blank=True)
    currency = serializers.CharField(required=False, max_length=3, min_length=3)

    def validate(self, attrs):
        blocked = {"company_id", "company_type"} & set(self.initial_data or {})
        if blocked:
            raise serializers.ValidationError(
                {field: "This field cannot be changed." for field in sorted(blocked)}
            )
        return attrs


class PaymentFormLockSerializer(serializers.Serializer):
    locked = serializers.BooleanField()
