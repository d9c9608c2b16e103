# accounting/api/views/period_close.py

"""
GET  /api/accounting/period-closes/   closed periods
POST /api/accounting/period-closes/   close a period {start_date, end_date}
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.serializers.period_close import ClosePeriodSerializer, PeriodCloseSerializer
from accounting.api.views.base import AccountingAPIView, error_response
from accounting.models.period_close import PeriodClose
from accounting.services.exceptions import AccountingServiceError
from accounting.services.money import amount_pair
from accounting.services.period_close_service import PeriodCloseError, close_period
from permissions.roles import IsAccountantOrAdmin
from permissions.services.audit import log_action


class PeriodCloseView(AccountingAPIView):
    serializer_class = ClosePeriodSerializer

    def get_permissions(self):
        perms = super().get_permissions()
        if self.request.method == "POST":
            perms.append(IsAccountantOrAdmin())
        return perms

    @extend_schema(tags=["accounting"], responses=PeriodCloseSerializer(many=True))
    def get(self, request):
        qs = (
            PeriodClose.objects.filter(company=self.company)
            .select_related("journal_voucher")
            .order_by("-end_date")
        )
        return Response(PeriodCloseSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=ClosePeriodSerializer, responses={201: dict, 400: dict})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            result = close_period(
                company=self.company,
                start_date=s.validated_data["start_date"],
                end_date=s.validated_data["end_date"],
                user=request.user,
            )
        except (PeriodCloseError, AccountingServiceError) as exc:
            return error_response(exc)

        period = result["period_close"]
        voucher = result["journal_voucher"]
        payload = {
            "period_close": PeriodCloseSerializer(period).data,
            "voucher_number": voucher.voucher_number,
            **amount_pair(result["total_revenue"], "total_revenue"),
            **amount_pair(result["total_expenses"], "total_expenses"),
            **amount_pair(result["net_profit"], "net_profit"),
        }

        log_action(self.company, request.user, "close_period", f"period_close:{period.pk}", payload)
        return Response(payload, status=status.HTTP_201_CREATED)
