# manufacturing/admin.py

from django.contrib import admin

from manufacturing.models import (
    BillOfMaterials,
    BOMComponent,
    BOMOperation,
    BOMOverhead,
    ProductionConsumption,
    ProductionOrder,
    ProductionOrderCost,
)


class BOMComponentInline(admin.TabularInline):
    model = BOMComponent
    extra = 0


class BOMOperationInline(admin.TabularInline):
    model = BOMOperation
    extra = 0


class BOMOverheadInline(admin.TabularInline):
    model = BOMOverhead
    extra = 0


@admin.register(BillOfMaterials)
class BillOfMaterialsAdmin(admin.ModelAdmin):
    list_display = ("bom_code", "version", "name", "finished_good", "company", "is_active")
    list_filter = ("company", "is_active")
    search_fields = ("bom_code", "name", "finished_good__sku")
    inlines = [BOMComponentInline, BOMOperationInline, BOMOverheadInline]


# ============================================================
# PRODUCTION (costs + consumption are written by the service)
# ============================================================


class ProductionOrderCostInline(admin.TabularInline):
    model = ProductionOrderCost
    extra = 0
    can_delete = False
    readonly_fields = ("cost_type", "description", "amount", "overhead")


class ProductionConsumptionInline(admin.TabularInline):
    model = ProductionConsumption
    extra = 0
    can_delete = False
    readonly_fields = ("item", "quantity_consumed", "unit_cost_at_consumption", "total_cost")


@admin.register(ProductionOrder)
class ProductionOrderAdmin(admin.ModelAdmin):
    list_display = ("order_number", "product", "quantity_to_produce", "quantity_produced", "status", "company")
    list_filter = ("company", "status")
    search_fields = ("order_number", "product__sku")
    inlines = [ProductionOrderCostInline, ProductionConsumptionInline]
    readonly_fields = (
        "order_number",
        "status",
        "planned_material_cost",
        "planned_overhead_cost",
        "total_material_cost",
        "total_overhead_cost",
        "cost_per_unit",
        "journal_voucher",
    )
