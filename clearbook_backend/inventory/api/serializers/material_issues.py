# inventory/api/serializers/material_issues.py

from rest_framework import serializers

from inventory.models import MaterialIssue


class MaterialIssueSerializer(serializers.ModelSerializer):
    item_sku = serializers.CharField(source="item.sku", read_only=True)
    item_name = serializers.CharField(source="item.name", read_only=True)
    production_order_number = serializers.CharField(
        source="production_order.order_number", read_only=True, default=None
    )
    issued_by_email = serializers.EmailField(source="issued_by.email", read_only=True, default=None)

    class Meta:
        model = MaterialIssue
        fields = (
            "id",
            "issue_number",
            "item",
            "item_sku",
            "item_name",
            "quantity",
            "unit_cost_at_issue",
            "total_cost",
            "issued_to",
            "purpose",
            "production_order",
            "production_order_number",
            "issued_by_email",
            "issue_date",
            "created_at",
        )
        read_only_fields = fields


class MaterialIssueCreateSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=18, decimal_places=4)
    issued_to = serializers.CharField(max_length=150)
    purpose = serializers.CharField(required=False, allow_blank=True, default="")
    production_order_id = serializers.IntegerField(required=False, allow_null=True)
    issue_date = serializers.DateField(required=False)
