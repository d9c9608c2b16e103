# accounting/api/serializers/tax.py

from rest_framework import serializers

from accounting.models.tax import TaxAuthority, TaxConfig


class TaxAuthoritySerializer(serializers.ModelSerializer):
    class Meta:
        model = TaxAuthority
        fields = ("id", "name", "code", "contact_person", "email", "phone", "address", "is_active", "created_at")
        read_only_fields = ("id", "created_at")


class TaxConfigSerializer(serializers.ModelSerializer):
    gl_account_code = serializers.CharField(source="gl_account.code", read_only=True, default=None)
    authority_name = serializers.CharField(source="authority.name", read_only=True, default=None)

    class Meta:
        model = TaxConfig
        fields = (
            "id",
            "name",
            "tax_type",
            "rate",
            "gl_account",
            "gl_account_code",
            "authority",
            "authority_name",
            "is_active",
            "created_at",
        )
        read_only_fields = fields


class TaxConfigInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    tax_type = serializers.ChoiceField(choices=TaxConfig.TAX_TYPES)
    rate = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100)
    gl_account_id = serializers.IntegerField(required=False, allow_null=True)
    authority_id = serializers.IntegerField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False, default=True)
