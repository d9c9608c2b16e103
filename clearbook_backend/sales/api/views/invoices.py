# sales/api/views/invoices.py

"""
GET  /api/sales/invoices/                 list (?status=&customer_id=&start_date=&end_date=)
POST /api/sales/invoices/                 create draft (post=true issues immediately)
GET  /api/sales/invoices/<id>/
POST /api/sales/invoices/<id>/issue/      DRAFT -> ISSUED (stock out + voucher)
POST /api/sales/invoices/<id>/cancel/     ISSUED, unpaid -> CANCELLED (reversal + restock)
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.serializers.reports import DateRangeQuerySerializer
from inventory.models import InventoryItem
from permissions.services.audit import log_action
from sales.api.serializers.invoices import (
    CancelInvoiceSerializer,
    SalesInvoiceCreateSerializer,
    SalesInvoiceListSerializer,
    SalesInvoiceSerializer,
)
from sales.api.views.base import SALES_ERRORS, SalesAPIView, sales_error_response
from sales.models import Customer, SalesInvoice
from sales.services.invoice_service import cancel_invoice, create_invoice, issue_invoice


class SalesInvoiceListCreateView(SalesAPIView):
    serializer_class = SalesInvoiceCreateSerializer

    @extend_schema(
        tags=["sales"],
        parameters=[
            OpenApiParameter(name="status", required=False, type=str),
            OpenApiParameter(name="customer_id", required=False, type=int),
            OpenApiParameter(name="start_date", required=False, type=str, description="YYYY-MM-DD"),
            OpenApiParameter(name="end_date", required=False, type=str, description="YYYY-MM-DD"),
        ],
        responses=SalesInvoiceListSerializer(many=True),
    )
    def get(self, request):
        qs = SalesInvoice.objects.filter(company=self.company).select_related("customer", "journal_voucher")
        params = request.query_params

        status_filter = (params.get("status") or "").strip().upper()
        if status_filter:
            qs = qs.filter(status=status_filter)

        customer_id = (params.get("customer_id") or "").strip()
        if customer_id.isdigit():
            qs = qs.filter(customer_id=int(customer_id))

        dates = DateRangeQuerySerializer(data=params)
        dates.is_valid(raise_exception=True)
        if dates.validated_data.get("start_date"):
            qs = qs.filter(invoice_date__gte=dates.validated_data["start_date"])
        if dates.validated_data.get("end_date"):
            qs = qs.filter(invoice_date__lte=dates.validated_data["end_date"])

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(SalesInvoiceListSerializer(page, many=True).data)
        return Response(SalesInvoiceListSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["sales"], request=SalesInvoiceCreateSerializer, responses={201: SalesInvoiceSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        customer = self.get_company_object(Customer, data["customer_id"])
        items = []
        for row in data["items"]:
            row = dict(row)
            item_id = row.pop("item_id", None)
            row["item"] = self.get_company_object(InventoryItem, item_id) if item_id is not None else None
            items.append(row)

        try:
            invoice = create_invoice(
                company=self.company,
                customer=customer,
                items=items,
                invoice_date=data.get("invoice_date"),
                due_date=data.get("due_date"),
                notes=data.get("notes", ""),
                post=data.get("post", False),
                user=request.user,
            )
        except SALES_ERRORS as exc:
            return sales_error_response(exc)

        log_action(
            self.company,
            request.user,
            "create_invoice",
            f"invoice:{invoice.pk}",
            {"number": invoice.invoice_number, "status": invoice.status, "total": invoice.total_amount},
        )
        return Response(SalesInvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


class SalesInvoiceDetailView(SalesAPIView):
    @extend_schema(tags=["sales"], responses=SalesInvoiceSerializer)
    def get(self, request, pk):
        invoice = self.get_company_object(SalesInvoice, pk)
        return Response(SalesInvoiceSerializer(invoice).data, status=status.HTTP_200_OK)


class IssueInvoiceView(SalesAPIView):
    @extend_schema(tags=["sales"], request=None, responses=SalesInvoiceSerializer)
    def post(self, request, pk):
        invoice = self.get_company_object(SalesInvoice, pk)
        try:
            invoice = issue_invoice(invoice=invoice, user=request.user)
        except SALES_ERRORS as exc:
            return sales_error_response(exc)

        log_action(self.company, request.user, "issue_invoice", f"invoice:{invoice.pk}", {"number": invoice.invoice_number})
        return Response(SalesInvoiceSerializer(invoice).data, status=status.HTTP_200_OK)


class CancelInvoiceView(SalesAPIView):
    serializer_class = CancelInvoiceSerializer

    @extend_schema(tags=["sales"], request=CancelInvoiceSerializer, responses=SalesInvoiceSerializer)
    def post(self, request, pk):
        invoice = self.get_company_object(SalesInvoice, pk)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            invoice = cancel_invoice(invoice=invoice, user=request.user, cancel_date=s.validated_data.get("cancel_date"))
        except SALES_ERRORS as exc:
            return sales_error_response(exc)

        log_action(self.company, request.user, "cancel_invoice", f"invoice:{invoice.pk}", {"number": invoice.invoice_number})
        return Response(SalesInvoiceSerializer(invoice).data, status=status.HTTP_200_OK)
