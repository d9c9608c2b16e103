# accounting/api/views/incomes.py

"""
GET    /api/accounting/incomes/              list (?status=draft|posted, ?start_date=&end_date=)
POST   /api/accounting/incomes/              create draft ("post": true posts immediately)
GET    /api/accounting/incomes/<id>/
PATCH  /api/accounting/incomes/<id>/         drafts only
DELETE /api/accounting/incomes/<id>/         drafts only
POST   /api/accounting/incomes/<id>/post/
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.serializers.incomes import (
    OtherIncomeCreateSerializer,
    OtherIncomeSerializer,
    OtherIncomeUpdateSerializer,
)
from accounting.api.serializers.reports import DateRangeQuerySerializer
from accounting.api.views.base import AccountingAPIView, error_response
from accounting.models.income import OtherIncome
from accounting.services.exceptions import AccountingServiceError
from accounting.services.income_service import (
    IncomeError,
    IncomeStateError,
    create_income,
    delete_income,
    post_income,
    update_income,
)
from permissions.services.audit import log_action

INCOME_ERRORS = (IncomeError, AccountingServiceError, DjangoValidationError)


def _income_error(exc) -> Response:
    if isinstance(exc, IncomeStateError):
        return error_response(exc, status.HTTP_403_FORBIDDEN)
    return error_response(exc)


class OtherIncomeListCreateView(AccountingAPIView):
    serializer_class = OtherIncomeCreateSerializer

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(name="status", required=False, type=str),
            OpenApiParameter(name="start_date", required=False, type=str, description="YYYY-MM-DD"),
            OpenApiParameter(name="end_date", required=False, type=str, description="YYYY-MM-DD"),
        ],
        responses=OtherIncomeSerializer(many=True),
    )
    def get(self, request):
        qs = (
            OtherIncome.objects.filter(company=self.company)
            .select_related("income_account", "payment_account", "journal_voucher")
            .order_by("-income_date", "-id")
        )
        status_filter = (request.query_params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)

        dates = DateRangeQuerySerializer(data=request.query_params)
        dates.is_valid(raise_exception=True)
        if dates.validated_data.get("start_date"):
            qs = qs.filter(income_date__gte=dates.validated_data["start_date"])
        if dates.validated_data.get("end_date"):
            qs = qs.filter(income_date__lte=dates.validated_data["end_date"])

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(OtherIncomeSerializer(page, many=True).data)
        return Response(OtherIncomeSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=OtherIncomeCreateSerializer, responses={201: OtherIncomeSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            income = create_income(
                company=self.company,
                income_date=data["income_date"],
                amount=data["amount"],
                income_account=self.get_account(data["income_account_id"]),
                payment_method=data["payment_method"],
                payment_account=self.get_account(data.get("payment_account_id")),
                received_from=data.get("received_from", ""),
                description=data.get("description", ""),
                user=request.user,
            )
            if data.get("post"):
                income = post_income(income=income, user=request.user)
        except INCOME_ERRORS as exc:
            return _income_error(exc)

        log_action(
            self.company,
            request.user,
            "create_income",
            f"income:{income.pk}",
            {"number": income.income_number, "amount": income.amount},
        )
        return Response(OtherIncomeSerializer(income).data, status=status.HTTP_201_CREATED)


class OtherIncomeDetailView(AccountingAPIView):
    serializer_class = OtherIncomeUpdateSerializer

    @extend_schema(tags=["accounting"], responses=OtherIncomeSerializer)
    def get(self, request, pk):
        income = self.get_company_object(OtherIncome, pk)
        return Response(OtherIncomeSerializer(income).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=OtherIncomeUpdateSerializer, responses={200: OtherIncomeSerializer})
    def patch(self, request, pk):
        income = self.get_company_object(OtherIncome, pk)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        changes = dict(s.validated_data)
        if "income_account_id" in changes:
            changes["income_account"] = self.get_account(changes.pop("income_account_id"))
        if "payment_account_id" in changes:
            changes["payment_account"] = self.get_account(changes.pop("payment_account_id"))

        try:
            income = update_income(income=income, **changes)
        except INCOME_ERRORS as exc:
            return _income_error(exc)

        log_action(self.company, request.user, "update_income", f"income:{income.pk}")
        return Response(OtherIncomeSerializer(income).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], responses={204: None, 403: dict})
    def delete(self, request, pk):
        income = self.get_company_object(OtherIncome, pk)
        try:
            delete_income(income=income)
        except INCOME_ERRORS as exc:
            return _income_error(exc)

        log_action(self.company, request.user, "delete_income", f"income:{pk}")
        return Response(status=status.HTTP_204_NO_CONTENT)


class OtherIncomePostView(AccountingAPIView):
    @extend_schema(tags=["accounting"], request=None, responses={200: OtherIncomeSerializer, 403: dict})
    def post(self, request, pk):
        income = self.get_company_object(OtherIncome, pk)
        try:
            income = post_income(income=income, user=request.user)
        except INCOME_ERRORS as exc:
            return _income_error(exc)

        log_action(
            self.company,
            request.user,
            "post_income",
            f"income:{income.pk}",
            {"voucher": income.journal_voucher.voucher_number},
        )
        return Response(OtherIncomeSerializer(income).data, status=status.HTTP_200_OK)
