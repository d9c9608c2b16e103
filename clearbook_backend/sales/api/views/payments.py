# sales/api/views/payments.py

"""
GET  /api/sales/payments/          list (?customer_id=)
POST /api/sales/payments/          receive + allocate across invoices
GET  /api/sales/payments/<id>/
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.models.account import Account
from permissions.services.audit import log_action
from sales.api.serializers.payments import CustomerPaymentCreateSerializer, CustomerPaymentSerializer
from sales.api.views.base import SALES_ERRORS, SalesAPIView, sales_error_response
from sales.models import Customer, CustomerPayment, SalesInvoice
from sales.services.payment_service import allocate_payment


class CustomerPaymentListCreateView(SalesAPIView):
    serializer_class = CustomerPaymentCreateSerializer

    @extend_schema(
        tags=["sales"],
        parameters=[OpenApiParameter(name="customer_id", required=False, type=int)],
        responses=CustomerPaymentSerializer(many=True),
    )
    def get(self, request):
        qs = (
            CustomerPayment.objects.filter(company=self.company)
            .select_related("customer", "bank_account", "journal_voucher")
            .prefetch_related("allocations__invoice")
        )
        customer_id = (request.query_params.get("customer_id") or "").strip()
        if customer_id.isdigit():
            qs = qs.filter(customer_id=int(customer_id))

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(CustomerPaymentSerializer(page, many=True).data)
        return Response(CustomerPaymentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["sales"], request=CustomerPaymentCreateSerializer, responses={201: CustomerPaymentSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        customer = self.get_company_object(Customer, data["customer_id"])
        bank_account = self.get_company_object(Account, data["bank_account_id"])
        allocations = [
            {
                "invoice": self.get_company_object(SalesInvoice, row["invoice_id"]),
                "amount_applied": row["amount_applied"],
            }
            for row in data["allocations"]
        ]

        try:
            payment = allocate_payment(
                company=self.company,
                customer=customer,
                amount=data["amount"],
                bank_account=bank_account,
                wht_amount=data.get("wht_amount") or 0,
                allocations=allocations,
                payment_date=data.get("payment_date"),
                reference=data.get("reference", ""),
                notes=data.get("notes", ""),
                user=request.user,
            )
        except SALES_ERRORS as exc:
            return sales_error_response(exc)

        log_action(
            self.company,
            request.user,
            "customer_payment",
            f"payment:{payment.pk}",
            {"number": payment.payment_number, "amount": payment.amount},
        )
        return Response(CustomerPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class CustomerPaymentDetailView(SalesAPIView):
    @extend_schema(tags=["sales"], responses=CustomerPaymentSerializer)
    def get(self, request, pk):
        payment = self.get_company_object(CustomerPayment, pk)
        return Response(CustomerPaymentSerializer(payment).data, status=status.HTTP_200_OK)
