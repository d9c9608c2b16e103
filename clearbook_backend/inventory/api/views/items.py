# inventory/api/views/items.py

"""
GET   /api/inventory/items/                     list (?item_type=&is_active=&q=&low_stock=1)
POST  /api/inventory/items/                     register (409 on duplicate SKU)
GET   /api/inventory/items/<id>/
PATCH /api/inventory/items/<id>/
POST  /api/inventory/items/<id>/opening-balance/
GET   /api/inventory/items/<id>/history/
"""

from django.db.models import F, Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.views.base import error_response
from accounting.models.account import Account
from accounting.services.exceptions import AccountingServiceError
from inventory.api.serializers.items import (
    InventoryItemCreateSerializer,
    InventoryItemSerializer,
    InventoryItemUpdateSerializer,
    OpeningStockSerializer,
    StockMovementSerializer,
)
from inventory.api.views.base import InventoryAPIView
from inventory.models import InventoryItem
from inventory.services.item_service import (
    DuplicateSkuError,
    record_opening_balance,
    register_item,
    update_item,
)
from inventory.services.stock_service import InventoryError, item_history
from permissions.services.audit import log_action

TRUE_VALUES = {"1", "true", "yes"}


class InventoryItemListCreateView(InventoryAPIView):
    serializer_class = InventoryItemCreateSerializer

    @extend_schema(
        tags=["inventory"],
        parameters=[
            OpenApiParameter(name="item_type", required=False, type=str),
            OpenApiParameter(name="is_active", required=False, type=bool),
            OpenApiParameter(name="low_stock", required=False, type=bool),
            OpenApiParameter(name="q", required=False, type=str),
        ],
        responses=InventoryItemSerializer(many=True),
    )
    def get(self, request):
        qs = InventoryItem.objects.filter(company=self.company).select_related("inventory_account")
        params = request.query_params

        item_type = (params.get("item_type") or "").strip()
        if item_type:
            qs = qs.filter(item_type=item_type)

        is_active = (params.get("is_active") or "").strip().lower()
        if is_active:
            qs = qs.filter(is_active=is_active in TRUE_VALUES)

        if (params.get("low_stock") or "").strip().lower() in TRUE_VALUES:
            qs = qs.filter(quantity_on_hand__lte=F("reorder_level"))

        search = (params.get("q") or "").strip()
        if search:
            qs = qs.filter(Q(sku__icontains=search) | Q(name__icontains=search))

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(InventoryItemSerializer(page, many=True).data)
        return Response(InventoryItemSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["inventory"], request=InventoryItemCreateSerializer, responses={201: InventoryItemSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        inventory_account = None
        if data.get("inventory_account_id") is not None:
            inventory_account = self.get_company_object(Account, data["inventory_account_id"])

        try:
            item = register_item(
                company=self.company,
                sku=data["sku"],
                name=data["name"],
                item_type=data["item_type"],
                description=data.get("description", ""),
                category=data.get("category", ""),
                uom=data.get("uom", "unit"),
                unit_cost=data.get("unit_cost"),
                selling_price=data.get("selling_price"),
                reorder_level=data.get("reorder_level"),
                inventory_account=inventory_account,
            )
        except DuplicateSkuError as exc:
            return error_response(exc, status.HTTP_409_CONFLICT)
        except InventoryError as exc:
            return error_response(exc)

        log_action(self.company, request.user, "register_item", f"item:{item.pk}", {"sku": item.sku})
        return Response(InventoryItemSerializer(item).data, status=status.HTTP_201_CREATED)


class InventoryItemDetailView(InventoryAPIView):
    serializer_class = InventoryItemUpdateSerializer

    @extend_schema(tags=["inventory"], responses=InventoryItemSerializer)
    def get(self, request, pk):
        item = self.get_company_object(InventoryItem, pk)
        return Response(InventoryItemSerializer(item).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["inventory"], request=InventoryItemUpdateSerializer, responses={200: InventoryItemSerializer})
    def patch(self, request, pk):
        item = self.get_company_object(InventoryItem, pk)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        changes = dict(s.validated_data)
        if "inventory_account_id" in changes:
            changes["inventory_account"] = self.get_company_object(Account, changes.pop("inventory_account_id"))

        try:
            item = update_item(item=item, **changes)
        except InventoryError as exc:
            return error_response(exc)

        log_action(self.company, request.user, "update_item", f"item:{item.pk}")
        return Response(InventoryItemSerializer(item).data, status=status.HTTP_200_OK)


class InventoryOpeningBalanceView(InventoryAPIView):
    serializer_class = OpeningStockSerializer

    @extend_schema(tags=["inventory"], request=OpeningStockSerializer, responses={201: InventoryItemSerializer})
    def post(self, request, pk):
        item = self.get_company_object(InventoryItem, pk)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            movement, voucher = record_opening_balance(
                item=item,
                quantity=data["quantity"],
                unit_cost=data["unit_cost"],
                as_of=data["as_of"],
                user=request.user,
            )
        except (InventoryError, AccountingServiceError) as exc:
            return error_response(exc)

        item.refresh_from_db()
        log_action(
            self.company,
            request.user,
            "item_opening_balance",
            f"item:{item.pk}",
            {"quantity": movement.quantity, "unit_cost": movement.unit_cost_snapshot},
        )
        payload = InventoryItemSerializer(item).data
        payload["voucher_number"] = voucher.voucher_number if voucher else None
        return Response(payload, status=status.HTTP_201_CREATED)


class InventoryItemHistoryView(InventoryAPIView):
    @extend_schema(tags=["inventory"], responses=StockMovementSerializer(many=True))
    def get(self, request, pk):
        item = self.get_company_object(InventoryItem, pk)
        qs = item_history(item)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(StockMovementSerializer(page, many=True).data)
        return Response(StockMovementSerializer(qs, many=True).data, status=status.HTTP_200_OK)
