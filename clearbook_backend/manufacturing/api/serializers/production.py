# manufacturing/api/serializers/production.py

from rest_framework import serializers

from manufacturing.models import ProductionConsumption, ProductionOrder, ProductionOrderCost


class ProductionOrderCostSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductionOrderCost
        fields = ("id", "cost_type", "description", "amount", "overhead")
        read_only_fields = fields


class ProductionConsumptionSerializer(serializers.ModelSerializer):
    item_sku = serializers.CharField(source="item.sku", read_only=True)

    class Meta:
        model = ProductionConsumption
        fields = ("id", "item", "item_sku", "quantity_consumed", "unit_cost_at_consumption", "total_cost")
        read_only_fields = fields


class ProductionOrderListSerializer(serializers.ModelSerializer):
    product_sku = serializers.CharField(source="product.sku", read_only=True)
    product_name = serializers.CharField(source="product.name", read_only=True)
    bom_code = serializers.CharField(source="bom.bom_code", read_only=True)

    class Meta:
        model = ProductionOrder
        fields = (
            "id",
            "order_number",
            "bom",
            "bom_code",
            "product",
            "product_sku",
            "product_name",
            "quantity_to_produce",
            "quantity_produced",
            "status",
            "planned_material_cost",
            "planned_overhead_cost",
            "order_date",
            "completion_date",
        )
        read_only_fields = fields


class ProductionOrderSerializer(ProductionOrderListSerializer):
    costs = ProductionOrderCostSerializer(many=True, read_only=True)
    consumptions = ProductionConsumptionSerializer(many=True, read_only=True)
    voucher_number = serializers.CharField(source="journal_voucher.voucher_number", read_only=True, default=None)

    class Meta(ProductionOrderListSerializer.Meta):
        fields = ProductionOrderListSerializer.Meta.fields + (
            "total_material_cost",
            "total_overhead_cost",
            "cost_per_unit",
            "notes",
            "journal_voucher",
            "voucher_number",
            "costs",
            "consumptions",
        )
        read_only_fields = fields


class ProductionOrderCreateSerializer(serializers.Serializer):
    bom_id = serializers.IntegerField()
    quantity_to_produce = serializers.DecimalField(max_digits=18, decimal_places=4)
    order_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ProductionCompleteSerializer(serializers.Serializer):
    quantity_produced = serializers.DecimalField(max_digits=18, decimal_places=4, required=False)
    include_waste = serializers.BooleanField(required=False, default=False)
    completion_date = serializers.DateField(required=False)
