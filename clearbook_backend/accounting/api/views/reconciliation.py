# accounting/api/views/reconciliation.py

"""
GET   /api/accounting/reconciliations/                       list (?account_id=)
POST  /api/accounting/reconciliations/                       start a draft (409 if one exists)
GET   /api/accounting/reconciliations/<id>/
PATCH /api/accounting/reconciliations/<id>/                  cleared lines / notes / status
GET   /api/accounting/reconciliations/<id>/transactions/     unreconciled ledger lines
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.serializers.reconciliation import (
    BankReconciliationCreateSerializer,
    BankReconciliationSerializer,
    BankReconciliationUpdateSerializer,
)
from accounting.api.views.base import AccountingAPIView, error_response
from accounting.models.reconciliation import BankReconciliation
from accounting.services.money import to_major_number, to_minor_int
from accounting.services.reconciliation_service import (
    ReconciliationConflictError,
    ReconciliationError,
    ReconciliationStateError,
    create_reconciliation,
    unreconciled_lines,
    update_reconciliation,
)
from permissions.services.audit import log_action


def _rec_error(exc) -> Response:
    if isinstance(exc, ReconciliationConflictError):
        return error_response(exc, status.HTTP_409_CONFLICT)
    if isinstance(exc, ReconciliationStateError):
        return error_response(exc, status.HTTP_403_FORBIDDEN)
    return error_response(exc)


class ReconciliationListCreateView(AccountingAPIView):
    serializer_class = BankReconciliationCreateSerializer

    @extend_schema(
        tags=["reconciliation"],
        parameters=[OpenApiParameter(name="account_id", required=False, type=int)],
        responses=BankReconciliationSerializer(many=True),
    )
    def get(self, request):
        qs = (
            BankReconciliation.objects.filter(company=self.company)
            .select_related("account")
            .order_by("-statement_date", "-id")
        )
        account_id = request.query_params.get("account_id")
        if account_id:
            if not str(account_id).isdigit():
                return Response({"detail": "account_id must be an integer"}, status=status.HTTP_400_BAD_REQUEST)
            qs = qs.filter(account_id=int(account_id))
        return Response(BankReconciliationSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["reconciliation"],
        request=BankReconciliationCreateSerializer,
        responses={201: BankReconciliationSerializer, 409: dict},
    )
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            rec = create_reconciliation(
                company=self.company,
                account=self.get_account(data["account_id"]),
                statement_date=data["statement_date"],
                statement_balance=data["statement_balance"],
                notes=data.get("notes", ""),
                user=request.user,
            )
        except ReconciliationError as exc:
            return _rec_error(exc)

        log_action(self.company, request.user, "create_reconciliation", f"reconciliation:{rec.pk}")
        return Response(BankReconciliationSerializer(rec).data, status=status.HTTP_201_CREATED)


class ReconciliationDetailView(AccountingAPIView):
    serializer_class = BankReconciliationUpdateSerializer

    @extend_schema(tags=["reconciliation"], responses=BankReconciliationSerializer)
    def get(self, request, pk):
        rec = self.get_company_object(BankReconciliation, pk)
        return Response(BankReconciliationSerializer(rec).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["reconciliation"],
        request=BankReconciliationUpdateSerializer,
        responses={200: BankReconciliationSerializer, 400: dict, 403: dict},
    )
    def patch(self, request, pk):
        rec = self.get_company_object(BankReconciliation, pk)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            rec = update_reconciliation(reconciliation=rec, **s.validated_data)
        except ReconciliationError as exc:
            return _rec_error(exc)

        log_action(
            self.company,
            request.user,
            "update_reconciliation",
            f"reconciliation:{rec.pk}",
            {"status": rec.status, "difference": rec.difference},
        )
        return Response(BankReconciliationSerializer(rec).data, status=status.HTTP_200_OK)


class ReconciliationTransactionsView(AccountingAPIView):
    @extend_schema(tags=["reconciliation"], responses=dict)
    def get(self, request, pk):
        rec = self.get_company_object(BankReconciliation, pk)
        cleared = set(rec.lines.values_list("voucher_line_id", flat=True))

        rows = []
        for line in unreconciled_lines(reconciliation=rec):
            amount = line.debit - line.credit
            rows.append(
                {
                    "line_id": line.id,
                    "date": line.voucher.entry_date.isoformat(),
                    "voucher_number": line.voucher.voucher_number,
                    "narration": line.voucher.narration,
                    "payee": line.payee,
                    "description": line.description,
                    "debit": to_major_number(line.debit),
                    "credit": to_major_number(line.credit),
                    "amount": to_major_number(amount),
                    "amount_minor": to_minor_int(amount),
                    "cleared": line.id in cleared,
                }
            )

        return Response(
            {
                "reconciliation_id": rec.pk,
                "account_code": rec.account.code,
                "statement_date": rec.statement_date.isoformat(),
                "transactions": rows,
            },
            status=status.HTTP_200_OK,
        )
