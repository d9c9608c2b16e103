# accounting/api/views/journal_vouchers.py

"""
GET    /api/accounting/journal-vouchers/                 list (?status=&source=&start_date=&end_date=)
POST   /api/accounting/journal-vouchers/                 create (draft | awaiting_approval | posted)
GET    /api/accounting/journal-vouchers/<id>/
PATCH  /api/accounting/journal-vouchers/<id>/            edit a draft
DELETE /api/accounting/journal-vouchers/<id>/            delete a draft
POST   /api/accounting/journal-vouchers/<id>/post/
POST   /api/accounting/journal-vouchers/<id>/reject/
POST   /api/accounting/journal-vouchers/<id>/reverse/

State errors (posting a posted voucher, deleting a non-draft, ...) return 403.
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.dateparse import parse_date
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.serializers.journal_vouchers import (
    JournalVoucherCreateSerializer,
    JournalVoucherListSerializer,
    JournalVoucherSerializer,
    JournalVoucherUpdateSerializer,
    ReverseVoucherSerializer,
)
from accounting.api.views.base import AccountingAPIView, accounting_error_response, error_response
from accounting.models.journal import JournalVoucher
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_voucher_service import (
    create_journal_voucher,
    delete_voucher,
    post_voucher,
    reject_voucher,
    reverse_voucher,
    update_draft_voucher,
)
from permissions.services.audit import log_action

logger = logging.getLogger(__name__)


def _voucher_detail(voucher):
    voucher = (
        JournalVoucher.objects.select_related("created_by", "posted_by")
        .prefetch_related("lines__account")
        .get(pk=voucher.pk)
    )
    return JournalVoucherSerializer(voucher).data


class JournalVoucherListCreateView(AccountingAPIView):
    serializer_class = JournalVoucherCreateSerializer

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(name="status", required=False, type=str),
            OpenApiParameter(name="source", required=False, type=str),
            OpenApiParameter(name="start_date", required=False, type=str, description="YYYY-MM-DD"),
            OpenApiParameter(name="end_date", required=False, type=str, description="YYYY-MM-DD"),
        ],
        responses=JournalVoucherListSerializer(many=True),
    )
    def get(self, request):
        qs = JournalVoucher.objects.filter(company=self.company).order_by("-entry_date", "-id")

        status_filter = (request.query_params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status=status_filter)

        source = (request.query_params.get("source") or "").strip()
        if source:
            qs = qs.filter(source=source)

        for param, lookup in (("start_date", "entry_date__gte"), ("end_date", "entry_date__lte")):
            raw = request.query_params.get(param)
            if raw:
                parsed = parse_date(raw)
                if parsed is None:
                    return Response({"detail": f"Invalid {param}. Use YYYY-MM-DD."}, status=status.HTTP_400_BAD_REQUEST)
                qs = qs.filter(**{lookup: parsed})

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(JournalVoucherListSerializer(page, many=True).data)
        return Response(JournalVoucherListSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=JournalVoucherCreateSerializer, responses={201: JournalVoucherSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            voucher = create_journal_voucher(
                company=self.company,
                entry_date=data["entry_date"],
                narration=data["narration"],
                lines=data["lines"],
                status=data["status"],
                created_by=request.user,
            )
        except (AccountingServiceError, DjangoValidationError) as exc:
            return accounting_error_response(exc)

        log_action(self.company, request.user, "create_voucher", f"voucher:{voucher.pk}", {"number": voucher.voucher_number})
        return Response(_voucher_detail(voucher), status=status.HTTP_201_CREATED)


class JournalVoucherDetailView(AccountingAPIView):
    serializer_class = JournalVoucherUpdateSerializer

    @extend_schema(tags=["accounting"], responses=JournalVoucherSerializer)
    def get(self, request, pk):
        voucher = self.get_company_object(JournalVoucher, pk)
        return Response(_voucher_detail(voucher), status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=JournalVoucherUpdateSerializer, responses={200: JournalVoucherSerializer})
    def patch(self, request, pk):
        voucher = self.get_company_object(JournalVoucher, pk)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            voucher = update_draft_voucher(voucher=voucher, **s.validated_data)
        except (AccountingServiceError, DjangoValidationError) as exc:
            return accounting_error_response(exc)

        log_action(self.company, request.user, "update_voucher", f"voucher:{voucher.pk}")
        return Response(_voucher_detail(voucher), status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], responses={204: None, 403: dict})
    def delete(self, request, pk):
        voucher = self.get_company_object(JournalVoucher, pk)
        number = voucher.voucher_number

        try:
            delete_voucher(voucher=voucher)
        except AccountingServiceError as exc:
            return accounting_error_response(exc)
        except DjangoValidationError as exc:
            return error_response(exc, status.HTTP_403_FORBIDDEN)

        log_action(self.company, request.user, "delete_voucher", f"voucher:{pk}", {"number": number})
        return Response(status=status.HTTP_204_NO_CONTENT)


class JournalVoucherPostView(AccountingAPIView):
    @extend_schema(tags=["accounting"], request=None, responses={200: JournalVoucherSerializer, 403: dict})
    def post(self, request, pk):
        voucher = self.get_company_object(JournalVoucher, pk)
        try:
            voucher = post_voucher(voucher=voucher, user=request.user, manual_only=True)
        except (AccountingServiceError, DjangoValidationError) as exc:
            return accounting_error_response(exc)

        log_action(self.company, request.user, "post_voucher", f"voucher:{voucher.pk}", {"number": voucher.voucher_number})
        return Response(_voucher_detail(voucher), status=status.HTTP_200_OK)


class JournalVoucherRejectView(AccountingAPIView):
    @extend_schema(tags=["accounting"], request=None, responses={200: JournalVoucherSerializer, 403: dict})
    def post(self, request, pk):
        voucher = self.get_company_object(JournalVoucher, pk)
        try:
            voucher = reject_voucher(voucher=voucher, user=request.user, manual_only=True)
        except (AccountingServiceError, DjangoValidationError) as exc:
            return accounting_error_response(exc)

        log_action(self.company, request.user, "reject_voucher", f"voucher:{voucher.pk}")
        return Response(_voucher_detail(voucher), status=status.HTTP_200_OK)


class JournalVoucherReverseView(AccountingAPIView):
    serializer_class = ReverseVoucherSerializer

    @extend_schema(tags=["accounting"], request=ReverseVoucherSerializer, responses={201: JournalVoucherSerializer, 403: dict})
    def post(self, request, pk):
        voucher = self.get_company_object(JournalVoucher, pk)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            reversal = reverse_voucher(
                voucher=voucher,
                user=request.user,
                entry_date=s.validated_data.get("entry_date"),
                narration=s.validated_data.get("narration") or None,
                manual_only=True,
            )
        except (AccountingServiceError, DjangoValidationError) as exc:
            return accounting_error_response(exc)

        log_action(
            self.company,
            request.user,
            "reverse_voucher",
            f"voucher:{voucher.pk}",
            {"reversal": reversal.voucher_number},
        )
        return Response(_voucher_detail(reversal), status=status.HTTP_201_CREATED)
