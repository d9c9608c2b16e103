# permissions/api/serializers.py

from rest_framework import serializers

from permissions.models import AuditLog


class ModuleListSerializer(serializers.Serializer):
    modules = serializers.ListField(child=serializers.CharField(), allow_empty=True)


class AuditLogSerializer(serializers.ModelSerializer):
    user_email = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = [
            "id",
            "action",
            "entity",
            "details",
            "user",
            "user_email",
            "created_at",
        ]
        read_only_fields = fields

    def get_user_email(self, obj):
        return getattr(obj.user, "email", None)
