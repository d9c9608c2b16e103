# accounting/api/views/reports.py

"""
Financial reports (ledger-based, posted vouchers only).

GET /api/accounting/reports/trial-balance/?as_of=YYYY-MM-DD
GET /api/accounting/reports/balance-sheet/?as_of=YYYY-MM-DD
GET /api/accounting/reports/income-statement/?start_date=&end_date=
GET /api/accounting/reports/general-ledger/?start_date=&end_date=&account_id=
GET /api/accounting/reports/account-statement/?account_code=&start_date=&end_date=
GET /api/accounting/reports/cash-flow/?as_of=YYYY-MM-DD
GET /api/accounting/reports/income-tax/?start_date=&end_date=&income_tax_rate=&education_tax_rate=
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.serializers.reports import (
    AccountStatementQuerySerializer,
    AsOfQuerySerializer,
    DateRangeQuerySerializer,
    GeneralLedgerQuerySerializer,
    IncomeTaxQuerySerializer,
)
from accounting.api.views.base import AccountingAPIView, error_response
from accounting.services.balance_sheet_service import generate_balance_sheet
from accounting.services.cash_flow_service import get_cash_flow_summary
from accounting.services.exceptions import AccountingServiceError
from accounting.services.general_ledger_service import get_account_statement, get_general_ledger
from accounting.services.income_statement_service import get_income_statement
from accounting.services.income_tax_service import get_income_tax_report
from accounting.services.trial_balance_service import TrialBalanceService

AS_OF_PARAM = OpenApiParameter(
    name="as_of",
    required=False,
    type=str,
    description="YYYY-MM-DD. Defaults to today.",
)
RANGE_PARAMS = [
    OpenApiParameter(name="start_date", required=False, type=str, description="YYYY-MM-DD"),
    OpenApiParameter(name="end_date", required=False, type=str, description="YYYY-MM-DD"),
]


class ReportView(AccountingAPIView):
    query_serializer_class = AsOfQuerySerializer

    def get_query(self) -> dict:
        s = self.query_serializer_class(data=self.request.query_params)
        s.is_valid(raise_exception=True)
        return s.validated_data


class TrialBalanceView(ReportView):
    @extend_schema(tags=["reports"], parameters=[AS_OF_PARAM], responses=dict)
    def get(self, request):
        query = self.get_query()
        data = TrialBalanceService().generate(company=self.company, as_of=query.get("as_of"))
        return Response(data, status=status.HTTP_200_OK)


class BalanceSheetView(ReportView):
    @extend_schema(tags=["reports"], parameters=[AS_OF_PARAM], responses=dict)
    def get(self, request):
        query = self.get_query()
        data = generate_balance_sheet(company=self.company, as_of=query.get("as_of"))
        return Response(data, status=status.HTTP_200_OK)


class IncomeStatementView(ReportView):
    query_serializer_class = DateRangeQuerySerializer

    @extend_schema(tags=["reports"], parameters=RANGE_PARAMS, responses=dict)
    def get(self, request):
        query = self.get_query()
        data = get_income_statement(
            company=self.company,
            start_date=query.get("start_date"),
            end_date=query.get("end_date"),
        )
        return Response(data, status=status.HTTP_200_OK)


class GeneralLedgerView(ReportView):
    query_serializer_class = GeneralLedgerQuerySerializer

    @extend_schema(
        tags=["reports"],
        parameters=[*RANGE_PARAMS, OpenApiParameter(name="account_id", required=False, type=int)],
        responses=dict,
    )
    def get(self, request):
        query = self.get_query()
        data = get_general_ledger(
            company=self.company,
            start_date=query.get("start_date"),
            end_date=query.get("end_date"),
            account=self.get_account(query.get("account_id")),
        )
        return Response(data, status=status.HTTP_200_OK)


class AccountStatementView(ReportView):
    query_serializer_class = AccountStatementQuerySerializer

    @extend_schema(
        tags=["reports"],
        parameters=[
            OpenApiParameter(name="account_code", required=True, type=str),
            OpenApiParameter(name="start_date", required=True, type=str, description="YYYY-MM-DD"),
            OpenApiParameter(name="end_date", required=True, type=str, description="YYYY-MM-DD"),
        ],
        responses=dict,
    )
    def get(self, request):
        query = self.get_query()
        try:
            data = get_account_statement(
                company=self.company,
                account_code=query["account_code"],
                start_date=query["start_date"],
                end_date=query["end_date"],
            )
        except AccountingServiceError as exc:
            return error_response(exc, status.HTTP_404_NOT_FOUND)
        return Response(data, status=status.HTTP_200_OK)


class CashFlowView(ReportView):
    @extend_schema(tags=["reports"], parameters=[AS_OF_PARAM], responses=dict)
    def get(self, request):
        query = self.get_query()
        data = get_cash_flow_summary(company=self.company, as_of=query.get("as_of"))
        return Response(data, status=status.HTTP_200_OK)


class IncomeTaxReportView(ReportView):
    query_serializer_class = IncomeTaxQuerySerializer

    @extend_schema(
        tags=["reports"],
        parameters=[
            *RANGE_PARAMS,
            OpenApiParameter(name="income_tax_rate", required=False, type=float, description="Percent, default 30"),
            OpenApiParameter(name="education_tax_rate", required=False, type=float, description="Percent, default 2.5"),
        ],
        responses=dict,
    )
    def get(self, request):
        query = self.get_query()
        data = get_income_tax_report(
            company=self.company,
            start_date=query.get("start_date"),
            end_date=query.get("end_date"),
            income_tax_rate=query.get("income_tax_rate"),
            education_tax_rate=query.get("education_tax_rate"),
        )
        return Response(data, status=status.HTTP_200_OK)
