# sales/api/views/credit_notes.py

"""
GET  /api/sales/credit-notes/              list (?invoice_id=&status=)
POST /api/sales/credit-notes/              draft against an issued invoice
GET  /api/sales/credit-notes/<id>/
POST /api/sales/credit-notes/<id>/post/    draft -> posted (voucher + invoice due reduced)
"""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from inventory.models import InventoryItem
from permissions.services.audit import log_action
from sales.api.serializers.credit_notes import CreditNoteCreateSerializer, CreditNoteSerializer
from sales.api.views.base import SALES_ERRORS, SalesAPIView, sales_error_response
from sales.models import CreditNote, SalesInvoice
from sales.services.credit_note_service import create_credit_note, post_credit_note


class CreditNoteListCreateView(SalesAPIView):
    serializer_class = CreditNoteCreateSerializer

    @extend_schema(
        tags=["sales"],
        parameters=[
            OpenApiParameter(name="invoice_id", required=False, type=int),
            OpenApiParameter(name="status", required=False, type=str),
        ],
        responses=CreditNoteSerializer(many=True),
    )
    def get(self, request):
        qs = CreditNote.objects.filter(company=self.company).select_related("invoice", "journal_voucher")

        invoice_id = (request.query_params.get("invoice_id") or "").strip()
        if invoice_id.isdigit():
            qs = qs.filter(invoice_id=int(invoice_id))

        status_filter = (request.query_params.get("status") or "").strip().lower()
        if status_filter:
            qs = qs.filter(status=status_filter)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(CreditNoteSerializer(page, many=True).data)
        return Response(CreditNoteSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["sales"], request=CreditNoteCreateSerializer, responses={201: CreditNoteSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        invoice = self.get_company_object(SalesInvoice, data["invoice_id"])
        items = []
        for row in data["items"]:
            row = dict(row)
            item_id = row.pop("item_id", None)
            row["item"] = self.get_company_object(InventoryItem, item_id) if item_id is not None else None
            items.append(row)

        try:
            note = create_credit_note(
                company=self.company,
                invoice=invoice,
                items=items,
                credit_date=data.get("credit_date"),
                reason=data.get("reason", ""),
                user=request.user,
            )
        except SALES_ERRORS as exc:
            return sales_error_response(exc)

        log_action(self.company, request.user, "create_credit_note", f"credit_note:{note.pk}", {"number": note.credit_note_number})
        return Response(CreditNoteSerializer(note).data, status=status.HTTP_201_CREATED)


class CreditNoteDetailView(SalesAPIView):
    @extend_schema(tags=["sales"], responses=CreditNoteSerializer)
    def get(self, request, pk):
        note = self.get_company_object(CreditNote, pk)
        return Response(CreditNoteSerializer(note).data, status=status.HTTP_200_OK)


class PostCreditNoteView(SalesAPIView):
    @extend_schema(tags=["sales"], request=None, responses=CreditNoteSerializer)
    def post(self, request, pk):
        note = self.get_company_object(CreditNote, pk)
        try:
            note = post_credit_note(credit_note=note, user=request.user)
        except SALES_ERRORS as exc:
            return sales_error_response(exc)

        log_action(self.company, request.user, "post_credit_note", f"credit_note:{note.pk}", {"number": note.credit_note_number})
        return Response(CreditNoteSerializer(note).data, status=status.HTTP_200_OK)
