# accounting/api/views/expenses.py

"""
GET    /api/accounting/expenses/              list (?status=draft|posted)
POST   /api/accounting/expenses/              create draft ("post": true posts immediately)
GET    /api/accounting/expenses/<id>/
PATCH  /api/accounting/expenses/<id>/         drafts only
DELETE /api/accounting/expenses/<id>/         drafts only
POST   /api/accounting/expenses/<id>/post/
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.serializers.expenses import (
    ExpenseCreateSerializer,
    ExpenseSerializer,
    ExpenseUpdateSerializer,
)
from accounting.api.views.base import AccountingAPIView, error_response
from accounting.models.expense import Expense
from accounting.services.exceptions import AccountingServiceError
from accounting.services.expense_service import (
    ExpenseError,
    ExpenseStateError,
    create_expense,
    delete_expense,
    post_expense,
    update_expense,
)
from permissions.services.audit import log_action

EXPENSE_ERRORS = (ExpenseError, AccountingServiceError, DjangoValidationError)


def _expense_error(exc) -> Response:
    if isinstance(exc, ExpenseStateError):
        return error_response(exc, status.HTTP_403_FORBIDDEN)
    return error_response(exc)


class ExpenseListCreateView(AccountingAPIView):
    serializer_class = ExpenseCreateSerializer

    @extend_schema(
        tags=["accounting"],
        parameters=[OpenApiParameter(name="status", required=False, type=str)],
        responses=ExpenseSerializer(many=True),
    )
    def get(self, request):
        qs = (
            Expense.objects.filter(company=self.company)
            .select_related("expense_account", "payment_account", "journal_voucher")
            .order_by("-expense_date", "-id")
        )
        status_filter = (request.query_params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(ExpenseSerializer(page, many=True).data)
        return Response(ExpenseSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=ExpenseCreateSerializer, responses={201: ExpenseSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            expense = create_expense(
                company=self.company,
                expense_date=data["expense_date"],
                amount=data["amount"],
                expense_account=self.get_account(data["expense_account_id"]),
                payment_method=data["payment_method"],
                payment_account=self.get_account(data.get("payment_account_id")),
                payee=data.get("payee", ""),
                description=data.get("description", ""),
                user=request.user,
            )
            if data.get("post"):
                expense = post_expense(expense=expense, user=request.user)
        except EXPENSE_ERRORS as exc:
            return _expense_error(exc)

        log_action(self.company, request.user, "create_expense", f"expense:{expense.pk}", {"amount": expense.amount})
        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)


class ExpenseDetailView(AccountingAPIView):
    serializer_class = ExpenseUpdateSerializer

    @extend_schema(tags=["accounting"], responses=ExpenseSerializer)
    def get(self, request, pk):
        expense = self.get_company_object(Expense, pk)
        return Response(ExpenseSerializer(expense).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=ExpenseUpdateSerializer, responses={200: ExpenseSerializer})
    def patch(self, request, pk):
        expense = self.get_company_object(Expense, pk)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        changes = dict(s.validated_data)
        if "expense_account_id" in changes:
            changes["expense_account"] = self.get_account(changes.pop("expense_account_id"))
        if "payment_account_id" in changes:
            changes["payment_account"] = self.get_account(changes.pop("payment_account_id"))

        try:
            expense = update_expense(expense=expense, **changes)
        except EXPENSE_ERRORS as exc:
            return _expense_error(exc)

        log_action(self.company, request.user, "update_expense", f"expense:{expense.pk}")
        return Response(ExpenseSerializer(expense).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], responses={204: None, 403: dict})
    def delete(self, request, pk):
        expense = self.get_company_object(Expense, pk)
        try:
            delete_expense(expense=expense)
        except EXPENSE_ERRORS as exc:
            return _expense_error(exc)

        log_action(self.company, request.user, "delete_expense", f"expense:{pk}")
        return Response(status=status.HTTP_204_NO_CONTENT)


class ExpensePostView(AccountingAPIView):
    @extend_schema(tags=["accounting"], request=None, responses={200: ExpenseSerializer, 403: dict})
    def post(self, request, pk):
        expense = self.get_company_object(Expense, pk)
        try:
            expense = post_expense(expense=expense, user=request.user)
        except EXPENSE_ERRORS as exc:
            return _expense_error(exc)

        log_action(self.company, request.user, "post_expense", f"expense:{expense.pk}")
        return Response(ExpenseSerializer(expense).data, status=status.HTTP_200_OK)
