# inventory/api/urls.py

from django.urls import path

from inventory.api.views.items import (
    InventoryItemDetailView,
    InventoryItemHistoryView,
    InventoryItemListCreateView,
    InventoryOpeningBalanceView,
)
from inventory.api.views.material_issues import MaterialIssueListCreateView
from inventory.api.views.price_tiers import ItemPriceTierListCreateView, PriceTierDetailView

app_name = "inventory"

urlpatterns = [
    path("items/", InventoryItemListCreateView.as_view(), name="item-list"),
    path("items/<int:pk>/", InventoryItemDetailView.as_view(), name="item-detail"),
    path("items/<int:pk>/opening-balance/", InventoryOpeningBalanceView.as_view(), name="item-opening-balance"),
    path("items/<int:pk>/history/", InventoryItemHistoryView.as_view(), name="item-history"),
    path("items/<int:pk>/price-tiers/", ItemPriceTierListCreateView.as_view(), name="item-price-tiers"),
    path("price-tiers/<int:pk>/", PriceTierDetailView.as_view(), name="price-tier-detail"),
    path("material-issues/", MaterialIssueListCreateView.as_view(), name="material-issue-list"),
]
