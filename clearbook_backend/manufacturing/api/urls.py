# manufacturing/api/urls.py

from django.urls import path

from manufacturing.api.views.boms import BillOfMaterialsDetailView, BillOfMaterialsListCreateView
from manufacturing.api.views.production import (
    ProductionOrderCancelView,
    ProductionOrderCompleteView,
    ProductionOrderDetailView,
    ProductionOrderListCreateView,
    ProductionOrderStartView,
)

app_name = "manufacturing"

urlpatterns = [
    path("boms/", BillOfMaterialsListCreateView.as_view(), name="bom-list"),
    path("boms/<int:pk>/", BillOfMaterialsDetailView.as_view(), name="bom-detail"),
    path("production-orders/", ProductionOrderListCreateView.as_view(), name="production-order-list"),
    path("production-orders/<int:pk>/", ProductionOrderDetailView.as_view(), name="production-order-detail"),
    path("production-orders/<int:pk>/start/", ProductionOrderStartView.as_view(), name="production-order-start"),
    path("production-orders/<int:pk>/cancel/", ProductionOrderCancelView.as_view(), name="production-order-cancel"),
    path(
        "production-orders/<int:pk>/complete/",
        ProductionOrderCompleteView.as_view(),
        name="production-order-complete",
    ),
]
