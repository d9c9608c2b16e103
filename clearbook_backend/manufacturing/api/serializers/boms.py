# manufacturing/api/serializers/boms.py

from rest_framework import serializers

from manufacturing.models import BillOfMaterials, BOMComponent, BOMOperation, BOMOverhead


class BOMComponentSerializer(serializers.ModelSerializer):
    item_sku = serializers.CharField(source="item.sku", read_only=True)
    item_name = serializers.CharField(source="item.name", read_only=True)
    average_unit_cost = serializers.DecimalField(
        source="item.average_unit_cost", max_digits=18, decimal_places=4, read_only=True
    )

    class Meta:
        model = BOMComponent
        fields = (
            "id",
            "item",
            "item_sku",
            "item_name",
            "quantity",
            "waste_percentage",
            "component_type",
            "uom",
            "average_unit_cost",
        )
        read_only_fields = fields


class BOMOperationSerializer(serializers.ModelSerializer):
    class Meta:
        model = BOMOperation
        fields = ("id", "sequence", "name", "work_center", "duration_minutes", "notes")
        read_only_fields = fields


class BOMOverheadSerializer(serializers.ModelSerializer):
    gl_account_code = serializers.CharField(source="gl_account.code", read_only=True, default=None)

    class Meta:
        model = BOMOverhead
        fields = ("id", "name", "cost_method", "value", "gl_account", "gl_account_code")
        read_only_fields = fields


class BillOfMaterialsListSerializer(serializers.ModelSerializer):
    finished_good_sku = serializers.CharField(source="finished_good.sku", read_only=True)
    finished_good_name = serializers.CharField(source="finished_good.name", read_only=True)

    class Meta:
        model = BillOfMaterials
        fields = (
            "id",
            "bom_code",
            "version",
            "name",
            "finished_good",
            "finished_good_sku",
            "finished_good_name",
            "output_quantity",
            "is_active",
            "created_at",
        )
        read_only_fields = fields


class BillOfMaterialsSerializer(BillOfMaterialsListSerializer):
    components = BOMComponentSerializer(many=True, read_only=True)
    operations = BOMOperationSerializer(many=True, read_only=True)
    overheads = BOMOverheadSerializer(many=True, read_only=True)

    class Meta(BillOfMaterialsListSerializer.Meta):
        fields = BillOfMaterialsListSerializer.Meta.fields + (
            "description",
            "components",
            "operations",
            "overheads",
        )
        read_only_fields = fields


class ComponentInputSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    quantity = serializers.DecimalField(max_digits=18, decimal_places=4)
    waste_percentage = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, default=0)
    component_type = serializers.ChoiceField(
        choices=BOMComponent.COMPONENT_TYPES, required=False, default=BOMComponent.TYPE_RAW_MATERIAL
    )
    uom = serializers.CharField(required=False, allow_blank=True, default="")


class OperationInputSerializer(serializers.Serializer):
    sequence = serializers.IntegerField(min_value=0, required=False, default=10)
    name = serializers.CharField(max_length=150)
    work_center = serializers.CharField(required=False, allow_blank=True, default="")
    duration_minutes = serializers.IntegerField(min_value=0, required=False, default=0)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class OverheadInputSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    cost_method = serializers.ChoiceField(choices=BOMOverhead.COST_METHODS)
    value = serializers.DecimalField(max_digits=18, decimal_places=4, min_value=0)
    gl_account_id = serializers.IntegerField(required=False, allow_null=True)


class BillOfMaterialsCreateSerializer(serializers.Serializer):
    finished_good_id = serializers.IntegerField()
    bom_code = serializers.CharField(max_length=50)
    version = serializers.CharField(max_length=20, required=False, default="1")
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    output_quantity = serializers.DecimalField(max_digits=18, decimal_places=4, required=False, default=1)
    components = ComponentInputSerializer(many=True)
    operations = OperationInputSerializer(many=True, required=False, default=list)
    overheads = OverheadInputSerializer(many=True, required=False, default=list)

    def validate_components(self, value):
        if not value:
            raise serializers.ValidationError("At least one component is required")
        return value
