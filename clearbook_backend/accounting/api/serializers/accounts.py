# accounting/api/serializers/accounts.py

from rest_framework import serializers

from accounting.models.account import Account


class AccountSerializer(serializers.ModelSerializer):
    parent_code = serializers.CharField(source="parent.code", read_only=True, default=None)

    class Meta:
        model = Account
        fields = (
            "id",
            "code",
            "name",
            "account_type",
            "system_role",
            "parent",
            "parent_code",
            "description",
            "is_control_account",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class AccountCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=150)
    account_type = serializers.ChoiceField(choices=Account.ACCOUNT_TYPES)
    system_role = serializers.ChoiceField(choices=Account.SYSTEM_ROLES, required=False, allow_null=True)
    parent_id = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    is_control_account = serializers.BooleanField(required=False, default=False)


class AccountUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150, required=False)
    parent_id = serializers.IntegerField(required=False, allow_null=True)
    system_role = serializers.ChoiceField(choices=Account.SYSTEM_ROLES, required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)
