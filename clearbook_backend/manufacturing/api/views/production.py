# manufacturing/api/views/production.py

"""
GET  /api/manufacturing/production-orders/              list (?status=)
POST /api/manufacturing/production-orders/              create (planned costs frozen)
GET  /api/manufacturing/production-orders/<id>/
POST /api/manufacturing/production-orders/<id>/start/
POST /api/manufacturing/production-orders/<id>/cancel/
POST /api/manufacturing/production-orders/<id>/complete/
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.views.base import error_response
from accounting.services.exceptions import AccountingServiceError
from inventory.services.stock_service import InventoryError
from manufacturing.api.serializers.production import (
    ProductionCompleteSerializer,
    ProductionOrderCreateSerializer,
    ProductionOrderListSerializer,
    ProductionOrderSerializer,
)
from manufacturing.api.views.base import ManufacturingAPIView
from manufacturing.models import BillOfMaterials, ProductionOrder
from manufacturing.services.production_service import (
    ProductionError,
    ProductionStateError,
    cancel_production_order,
    complete_production_order,
    create_production_order,
    start_production_order,
)
from permissions.services.audit import log_action

PRODUCTION_ERRORS = (ProductionError, InventoryError, AccountingServiceError)


def _production_error(exc) -> Response:
    if isinstance(exc, ProductionStateError):
        return error_response(exc, status.HTTP_403_FORBIDDEN)
    return error_response(exc)


def _order_detail(order) -> dict:
    order = (
        ProductionOrder.objects.select_related("bom", "product", "journal_voucher")
        .prefetch_related("costs", "consumptions__item")
        .get(pk=order.pk)
    )
    return ProductionOrderSerializer(order).data


class ProductionOrderListCreateView(ManufacturingAPIView):
    serializer_class = ProductionOrderCreateSerializer

    @extend_schema(
        tags=["manufacturing"],
        parameters=[OpenApiParameter(name="status", required=False, type=str)],
        responses=ProductionOrderListSerializer(many=True),
    )
    def get(self, request):
        qs = ProductionOrder.objects.filter(company=self.company).select_related("bom", "product")
        status_filter = (request.query_params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(ProductionOrderListSerializer(page, many=True).data)
        return Response(ProductionOrderListSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["manufacturing"],
        request=ProductionOrderCreateSerializer,
        responses={201: ProductionOrderSerializer},
    )
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        bom = self.get_company_object(BillOfMaterials, data["bom_id"])
        try:
            order = create_production_order(
                company=self.company,
                bom=bom,
                quantity_to_produce=data["quantity_to_produce"],
                order_date=data.get("order_date"),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except PRODUCTION_ERRORS as exc:
            return _production_error(exc)

        log_action(
            self.company,
            request.user,
            "create_production_order",
            f"production_order:{order.pk}",
            {"order_number": order.order_number, "quantity": order.quantity_to_produce},
        )
        return Response(_order_detail(order), status=status.HTTP_201_CREATED)


class ProductionOrderDetailView(ManufacturingAPIView):
    @extend_schema(tags=["manufacturing"], responses=ProductionOrderSerializer)
    def get(self, request, pk):
        order = self.get_company_object(ProductionOrder, pk)
        return Response(_order_detail(order), status=status.HTTP_200_OK)


class ProductionOrderStartView(ManufacturingAPIView):
    @extend_schema(tags=["manufacturing"], request=None, responses={200: ProductionOrderSerializer, 403: dict})
    def post(self, request, pk):
        order = self.get_company_object(ProductionOrder, pk)
        try:
            order = start_production_order(order=order)
        except PRODUCTION_ERRORS as exc:
            return _production_error(exc)

        log_action(self.company, request.user, "start_production_order", f"production_order:{order.pk}")
        return Response(_order_detail(order), status=status.HTTP_200_OK)


class ProductionOrderCancelView(ManufacturingAPIView):
    @extend_schema(tags=["manufacturing"], request=None, responses={200: ProductionOrderSerializer, 403: dict})
    def post(self, request, pk):
        order = self.get_company_object(ProductionOrder, pk)
        try:
            order = cancel_production_order(order=order)
        except PRODUCTION_ERRORS as exc:
            return _production_error(exc)

        log_action(self.company, request.user, "cancel_production_order", f"production_order:{order.pk}")
        return Response(_order_detail(order), status=status.HTTP_200_OK)


class ProductionOrderCompleteView(ManufacturingAPIView):
    serializer_class = ProductionCompleteSerializer

    @extend_schema(
        tags=["manufacturing"],
        request=ProductionCompleteSerializer,
        responses={200: ProductionOrderSerializer, 400: dict, 403: dict},
    )
    def post(self, request, pk):
        order = self.get_company_object(ProductionOrder, pk)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            order = complete_production_order(
                order=order,
                quantity_produced=data.get("quantity_produced"),
                include_waste=data.get("include_waste", False),
                completion_date=data.get("completion_date"),
                user=request.user,
            )
        except PRODUCTION_ERRORS as exc:
            return _production_error(exc)

        log_action(
            self.company,
            request.user,
            "complete_production_order",
            f"production_order:{order.pk}",
            {"quantity_produced": order.quantity_produced, "cost_per_unit": order.cost_per_unit},
        )
        return Response(_order_detail(order), status=status.HTTP_200_OK)
