# inventory/api/serializers/price_tiers.py

from rest_framework import serializers

from inventory.models import PriceTier


class PriceTierSerializer(serializers.ModelSerializer):
    sku = serializers.CharField(source="item.sku", read_only=True)

    class Meta:
        model = PriceTier
        fields = ("id", "item", "sku", "tier_name", "price", "created_at", "updated_at")
        read_only_fields = fields


class PriceTierWriteSerializer(serializers.Serializer):
    tier_name = serializers.CharField(max_length=100)
    price = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0)


class PriceTierUpdateSerializer(serializers.Serializer):
    tier_name = serializers.CharField(max_length=100, required=False)
    price = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=0, required=False)
