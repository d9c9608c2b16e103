# sales/api/views/customers.py

"""
GET   /api/sales/customers/                          list (?q=&is_active=)
POST  /api/sales/customers/                          create (code assigned)
GET   /api/sales/customers/<id>/
PATCH /api/sales/customers/<id>/
POST  /api/sales/customers/<id>/opening-balance/     once per customer
GET   /api/sales/customers/<id>/statement/?start_date=&end_date=
"""

from django.db.models import Q
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from permissions.services.audit import log_action
from sales.api.serializers.customers import (
    CustomerOpeningBalanceSerializer,
    CustomerSerializer,
    CustomerStatementQuerySerializer,
)
from sales.api.views.base import SALES_ERRORS, SalesAPIView, sales_error_response
from sales.models import Customer
from sales.services.customer_service import create_customer, set_customer_opening_balance, update_customer
from sales.services.receivables_service import customer_statement

TRUE_VALUES = {"1", "true", "yes"}


class CustomerListCreateView(SalesAPIView):
    serializer_class = CustomerSerializer

    @extend_schema(
        tags=["sales"],
        parameters=[
            OpenApiParameter(name="q", required=False, type=str),
            OpenApiParameter(name="is_active", required=False, type=bool),
        ],
        responses=CustomerSerializer(many=True),
    )
    def get(self, request):
        qs = Customer.objects.filter(company=self.company)

        search = (request.query_params.get("q") or "").strip()
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(customer_code__icontains=search) | Q(email__icontains=search))

        is_active = (request.query_params.get("is_active") or "").strip().lower()
        if is_active:
            qs = qs.filter(is_active=is_active in TRUE_VALUES)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(CustomerSerializer(page, many=True).data)
        return Response(CustomerSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["sales"], request=CustomerSerializer, responses={201: CustomerSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        fields = dict(s.validated_data)

        try:
            customer = create_customer(company=self.company, name=fields.pop("name"), **fields)
        except SALES_ERRORS as exc:
            return sales_error_response(exc)

        log_action(self.company, request.user, "create_customer", f"customer:{customer.pk}", {"code": customer.customer_code})
        return Response(CustomerSerializer(customer).data, status=status.HTTP_201_CREATED)


class CustomerDetailView(SalesAPIView):
    serializer_class = CustomerSerializer

    @extend_schema(tags=["sales"], responses=CustomerSerializer)
    def get(self, request, pk):
        customer = self.get_company_object(Customer, pk)
        return Response(CustomerSerializer(customer).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["sales"], request=CustomerSerializer, responses=CustomerSerializer)
    def patch(self, request, pk):
        customer = self.get_company_object(Customer, pk)
        s = self.get_serializer(customer, data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        try:
            customer = update_customer(customer=customer, **s.validated_data)
        except SALES_ERRORS as exc:
            return sales_error_response(exc)

        log_action(self.company, request.user, "update_customer", f"customer:{customer.pk}")
        return Response(CustomerSerializer(customer).data, status=status.HTTP_200_OK)


class CustomerOpeningBalanceView(SalesAPIView):
    serializer_class = CustomerOpeningBalanceSerializer

    @extend_schema(tags=["sales"], request=CustomerOpeningBalanceSerializer, responses={201: CustomerSerializer})
    def post(self, request, pk):
        customer = self.get_company_object(Customer, pk)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            customer = set_customer_opening_balance(
                customer=customer,
                amount=s.validated_data["amount"],
                as_of=s.validated_data["as_of"],
                user=request.user,
            )
        except SALES_ERRORS as exc:
            return sales_error_response(exc)

        log_action(
            self.company,
            request.user,
            "customer_opening_balance",
            f"customer:{customer.pk}",
            {"amount": customer.opening_balance},
        )
        payload = CustomerSerializer(customer).data
        payload["voucher_number"] = customer.opening_balance_voucher.voucher_number
        return Response(payload, status=status.HTTP_201_CREATED)


class CustomerStatementView(SalesAPIView):
    @extend_schema(
        tags=["sales"],
        parameters=[
            OpenApiParameter(name="start_date", required=True, type=str, description="YYYY-MM-DD"),
            OpenApiParameter(name="end_date", required=True, type=str, description="YYYY-MM-DD"),
        ],
        responses=dict,
    )
    def get(self, request, pk):
        customer = self.get_company_object(Customer, pk)
        s = CustomerStatementQuerySerializer(data=request.query_params)
        s.is_valid(raise_exception=True)

        data = customer_statement(
            customer=customer,
            start_date=s.validated_data["start_date"],
            end_date=s.validated_data["end_date"],
        )
        return Response(data, status=status.HTTP_200_OK)
