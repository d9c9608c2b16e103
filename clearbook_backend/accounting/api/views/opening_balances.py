# accounting/api/views/opening_balances.py

"""
POST /api/accounting/opening-balances/

Posts company opening balances as one voucher; the imbalance goes to
OPENING_BALANCE_EQUITY. One posting per as_of date (409 on repeat).
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.serializers.journal_vouchers import JournalVoucherSerializer
from accounting.api.serializers.reports import OpeningBalancesSerializer
from accounting.api.views.base import AccountingAPIView, error_response
from accounting.models.journal import JournalVoucher
from accounting.services.opening_balances_service import OpeningBalancesError, create_opening_balances
from permissions.roles import IsAccountantOrAdmin
from permissions.services.audit import log_action


class OpeningBalancesView(AccountingAPIView):
    serializer_class = OpeningBalancesSerializer

    def get_permissions(self):
        return [*super().get_permissions(), IsAccountantOrAdmin()]

    @extend_schema(
        tags=["accounting"],
        request=OpeningBalancesSerializer,
        responses={201: JournalVoucherSerializer, 400: dict, 409: dict},
    )
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        as_of = s.validated_data["as_of"]
        company = self.company

        if JournalVoucher.objects.filter(company=company, reference=f"OPENING_BALANCE:{as_of.isoformat()}").exists():
            return Response(
                {"detail": f"Opening balances already posted as at {as_of.isoformat()}"},
                status=status.HTTP_409_CONFLICT,
            )

        try:
            voucher = create_opening_balances(
                company=company,
                as_of=as_of,
                lines=s.validated_data["lines"],
                user=request.user,
            )
        except OpeningBalancesError as exc:
            return error_response(exc)

        log_action(company, request.user, "post_opening_balances", f"voucher:{voucher.pk}", {"as_of": as_of})
        return Response(JournalVoucherSerializer(voucher).data, status=status.HTTP_201_CREATED)
