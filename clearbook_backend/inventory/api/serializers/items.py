# inventory/api/serializers/items.py

from rest_framework import serializers

from inventory.models import InventoryItem, StockMovement


class InventoryItemSerializer(serializers.ModelSerializer):
    """
    Read serializer. Stock fields are owned by the stock engine and never written here.
    """

    inventory_account_code = serializers.CharField(source="inventory_account.code", read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = InventoryItem
        fields = (
            "id",
            "sku",
            "name",
            "description",
            "item_type",
            "category",
            "uom",
            "average_unit_cost",
            "quantity_on_hand",
            "selling_price",
            "reorder_level",
            "is_low_stock",
            "inventory_account",
            "inventory_account_code",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class InventoryItemCreateSerializer(serializers.Serializer):
    sku = serializers.CharField(max_length=64)
    name = serializers.CharField(max_length=255)
    item_type = serializers.ChoiceField(choices=InventoryItem.ITEM_TYPES)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    category = serializers.CharField(required=False, allow_blank=True, default="")
    uom = serializers.CharField(required=False, default="unit")
    unit_cost = serializers.DecimalField(max_digits=18, decimal_places=4, min_value=0, required=False)
    selling_price = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, required=False)
    reorder_level = serializers.DecimalField(max_digits=18, decimal_places=4, min_value=0, required=False)
    inventory_account_id = serializers.IntegerField(required=False, allow_null=True)

    def validate_sku(self, value):
        value = (value or "").strip().upper()
        if not value:
            raise serializers.ValidationError("SKU is required")
        return value


class InventoryItemUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    category = serializers.CharField(required=False, allow_blank=True)
    uom = serializers.CharField(required=False)
    selling_price = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, required=False)
    reorder_level = serializers.DecimalField(max_digits=18, decimal_places=4, min_value=0, required=False)
    inventory_account_id = serializers.IntegerField(required=False)
    is_active = serializers.BooleanField(required=False)


class OpeningStockSerializer(serializers.Serializer):
    quantity = serializers.DecimalField(max_digits=18, decimal_places=4)
    unit_cost = serializers.DecimalField(max_digits=18, decimal_places=4, min_value=0)
    as_of = serializers.DateField()


class StockMovementSerializer(serializers.ModelSerializer):
    performed_by_email = serializers.EmailField(source="performed_by.email", read_only=True, default=None)

    class Meta:
        model = StockMovement
        fields = (
            "id",
            "movement_type",
            "quantity",
            "unit_cost_snapshot",
            "balance_after",
            "reference",
            "performed_by_email",
            "created_at",
        )
        read_only_fields = fields
