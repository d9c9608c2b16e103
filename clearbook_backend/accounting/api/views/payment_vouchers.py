# accounting/api/views/payment_vouchers.py

"""
GET  /api/accounting/payment-vouchers/               list (?status=Submitted)
POST /api/accounting/payment-vouchers/               create (status Submitted, JV awaiting approval)
GET  /api/accounting/payment-vouchers/<id>/
POST /api/accounting/payment-vouchers/<id>/approve/  posts the JV
POST /api/accounting/payment-vouchers/<id>/reject/   rejects the JV
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.serializers.payment_vouchers import (
    PaymentVoucherCreateSerializer,
    PaymentVoucherSerializer,
)
from accounting.api.views.base import AccountingAPIView, error_response
from accounting.models.payment_voucher import PaymentVoucher
from accounting.services.payment_voucher_service import (
    PaymentFormLockedError,
    PaymentVoucherError,
    PaymentVoucherStateError,
    approve_payment_voucher,
    create_payment_voucher,
    reject_payment_voucher,
)
from permissions.services.audit import log_action


def _pv_error(exc) -> Response:
    if isinstance(exc, (PaymentVoucherStateError, PaymentFormLockedError)):
        return error_response(exc, status.HTTP_403_FORBIDDEN)
    return error_response(exc)


def _pv_detail(pv):
    pv = (
        PaymentVoucher.objects.select_related("journal_voucher")
        .prefetch_related("lines__gl_account")
        .get(pk=pv.pk)
    )
    return PaymentVoucherSerializer(pv).data


class PaymentVoucherListCreateView(AccountingAPIView):
    serializer_class = PaymentVoucherCreateSerializer

    @extend_schema(
        tags=["accounting"],
        parameters=[OpenApiParameter(name="status", required=False, type=str)],
        responses=PaymentVoucherSerializer(many=True),
    )
    def get(self, request):
        qs = (
            PaymentVoucher.objects.filter(company=self.company)
            .select_related("journal_voucher")
            .prefetch_related("lines__gl_account")
            .order_by("-voucher_date", "-id")
        )
        status_filter = (request.query_params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PaymentVoucherSerializer(page, many=True).data)
        return Response(PaymentVoucherSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=PaymentVoucherCreateSerializer, responses={201: PaymentVoucherSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = dict(s.validated_data)

        bank_cash_account = self.get_account(data.pop("bank_cash_account_id"))
        lines = []
        for line in data.pop("lines"):
            line = dict(line)
            line["gl_account"] = self.get_account(line.pop("gl_account_id"))
            lines.append(line)

        try:
            pv = create_payment_voucher(
                company=self.company,
                bank_cash_account=bank_cash_account,
                lines=lines,
                user=request.user,
                **data,
            )
        except PaymentVoucherError as exc:
            return _pv_error(exc)

        log_action(self.company, request.user, "create_payment_voucher", f"payment_voucher:{pv.pk}", {"pv_number": pv.pv_number})
        return Response(_pv_detail(pv), status=status.HTTP_201_CREATED)


class PaymentVoucherDetailView(AccountingAPIView):
    @extend_schema(tags=["accounting"], responses=PaymentVoucherSerializer)
    def get(self, request, pk):
        pv = self.get_company_object(PaymentVoucher, pk)
        return Response(_pv_detail(pv), status=status.HTTP_200_OK)


class PaymentVoucherApproveView(AccountingAPIView):
    @extend_schema(tags=["accounting"], request=None, responses={200: PaymentVoucherSerializer, 403: dict})
    def post(self, request, pk):
        pv = self.get_company_object(PaymentVoucher, pk)
        try:
            pv = approve_payment_voucher(payment_voucher=pv, user=request.user)
        except PaymentVoucherError as exc:
            return _pv_error(exc)

        log_action(self.company, request.user, "approve_payment_voucher", f"payment_voucher:{pv.pk}")
        return Response(_pv_detail(pv), status=status.HTTP_200_OK)


class PaymentVoucherRejectView(AccountingAPIView):
    @extend_schema(tags=["accounting"], request=None, responses={200: PaymentVoucherSerializer, 403: dict})
    def post(self, request, pk):
        pv = self.get_company_object(PaymentVoucher, pk)
        try:
            pv = reject_payment_voucher(payment_voucher=pv, user=request.user)
        except PaymentVoucherError as exc:
            return _pv_error(exc)

        log_action(self.company, request.user, "reject_payment_voucher", f"payment_voucher:{pv.pk}")
        return Response(_pv_detail(pv), status=status.HTTP_200_OK)
