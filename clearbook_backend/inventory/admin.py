# inventory/admin.py

from django.contrib import admin

from inventory.models import InventoryItem, MaterialIssue, PriceTier, StockMovement


class PriceTierInline(admin.TabularInline):
    model = PriceTier
    fields = ("tier_name", "price", "company")
    extra = 0


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ("sku", "name", "item_type", "quantity_on_hand", "average_unit_cost", "company", "is_active")
    list_filter = ("company", "item_type", "is_active")
    search_fields = ("sku", "name")
    inlines = [PriceTierInline]
    readonly_fields = ("quantity_on_hand", "average_unit_cost", "created_at", "updated_at")


# ============================================================
# STOCK LEDGER (append-only)
# ============================================================


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("item", "movement_type", "quantity", "unit_cost_snapshot", "balance_after", "reference", "created_at")
    list_filter = ("movement_type",)
    search_fields = ("item__sku", "reference")

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(MaterialIssue)
class MaterialIssueAdmin(admin.ModelAdmin):
    list_display = ("issue_number", "item", "quantity", "total_cost", "issued_to", "issue_date", "company")
    list_filter = ("company",)
    search_fields = ("issue_number", "item__sku", "issued_to")
    readonly_fields = ("issue_number", "unit_cost_at_issue", "total_cost")
