# purchases/api/views.py

"""
GET/POST   /api/purchases/suppliers/
GET/PATCH  /api/purchases/suppliers/<id>/
POST       /api/purchases/suppliers/<id>/opening-balance/
GET/POST   /api/purchases/orders/                 (?status=&supplier_id=)
GET        /api/purchases/orders/<id>/
POST       /api/purchases/orders/<id>/approve/    Draft -> Approved
POST       /api/purchases/orders/<id>/cancel/     unless goods were received
GET/POST   /api/purchases/grns/                   (?purchase_order_id=)
GET        /api/purchases/grns/<id>/
GET/POST   /api/purchases/supplier-invoices/      (?status=&supplier_id=)  create from a GRN (409 if invoiced)
GET        /api/purchases/supplier-invoices/<id>/
POST       /api/purchases/supplier-invoices/<id>/approve/   Awaiting Approval -> Unpaid
POST       /api/purchases/supplier-invoices/<id>/void/      Awaiting Approval -> Void
GET        /api/purchases/suppliers/<id>/unpaid-invoices/
GET/POST   /api/purchases/supplier-payments/      (?supplier_id=)
GET        /api/purchases/supplier-payments/<id>/
POST       /api/purchases/payment-schedule/       pay several suppliers in one run
"""

from django.db.models import Q
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.views.base import accounting_error_response, error_response
from accounting.models.account import Account
from accounting.services.exceptions import AccountingServiceError
from companies.tenancy import CompanyScopedMixin
from inventory.models import InventoryItem
from inventory.services.stock_service import InventoryError
from permissions.roles import MODULE_PROCUREMENT, HasModulePermission
from permissions.services.audit import log_action
from purchases.api.serializers import (
    GoodsReceivedNoteCreateSerializer,
    GoodsReceivedNoteSerializer,
    PaymentScheduleSerializer,
    PurchaseOrderCreateSerializer,
    PurchaseOrderSerializer,
    SupplierInvoiceCreateSerializer,
    SupplierInvoiceSerializer,
    SupplierOpeningBalanceSerializer,
    SupplierPaymentCreateSerializer,
    SupplierPaymentSerializer,
    SupplierSerializer,
)
from purchases.models import (
    GoodsReceivedNote,
    PurchaseOrder,
    PurchaseOrderItem,
    Supplier,
    SupplierInvoice,
    SupplierPayment,
)
from purchases.services.purchase_order_service import (
    PurchaseOrderError,
    PurchaseOrderStateError,
    approve_purchase_order,
    cancel_purchase_order,
    create_purchase_order,
)
from purchases.services.receiving_service import PurchaseReceivingError, receive_goods
from purchases.services.supplier_invoice_service import (
    DuplicateSupplierInvoiceError,
    SupplierInvoiceError,
    SupplierInvoiceStateError,
    approve_supplier_invoice,
    create_invoice_from_grn,
    unpaid_supplier_invoices,
    void_supplier_invoice,
)
from purchases.services.supplier_payment_service import SupplierPaymentError, pay_supplier, run_payment_schedule
from purchases.services.supplier_service import (
    SupplierError,
    create_supplier,
    set_supplier_opening_balance,
    update_supplier,
)

TRUE_VALUES = {"1", "true", "yes"}


class ProcurementAPIView(CompanyScopedMixin, GenericAPIView):
    """Company-scoped view behind the procurement module permission."""

    permission_classes = [IsAuthenticated, HasModulePermission]
    required_module = MODULE_PROCUREMENT

    def get_company_object(self, model, pk, **extra):
        return get_object_or_404(model, company=self.company, pk=pk, **extra)


def procurement_error_response(exc):
    if isinstance(exc, DuplicateSupplierInvoiceError):
        return error_response(exc, status.HTTP_409_CONFLICT)
    if isinstance(exc, (PurchaseOrderStateError, SupplierInvoiceStateError)):
        return error_response(exc, status.HTTP_403_FORBIDDEN)
    if isinstance(exc, AccountingServiceError):
        return accounting_error_response(exc)
    return error_response(exc)


PROCUREMENT_ERRORS = (
    SupplierError,
    PurchaseOrderError,
    PurchaseReceivingError,
    SupplierInvoiceError,
    SupplierPaymentError,
    InventoryError,
    AccountingServiceError,
)


# ============================================================
# SUPPLIERS
# ============================================================


class SupplierListCreateView(ProcurementAPIView):
    serializer_class = SupplierSerializer

    @extend_schema(
        tags=["purchases"],
        parameters=[
            OpenApiParameter(name="q", required=False, type=str),
            OpenApiParameter(name="is_active", required=False, type=bool),
        ],
        responses=SupplierSerializer(many=True),
    )
    def get(self, request):
        qs = Supplier.objects.filter(company=self.company)

        search = (request.query_params.get("q") or "").strip()
        if search:
            qs = qs.filter(Q(name__icontains=search) | Q(supplier_code__icontains=search))

        is_active = (request.query_params.get("is_active") or "").strip().lower()
        if is_active:
            qs = qs.filter(is_active=is_active in TRUE_VALUES)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(SupplierSerializer(page, many=True).data)
        return Response(SupplierSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["purchases"], request=SupplierSerializer, responses={201: SupplierSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        fields = dict(s.validated_data)

        try:
            supplier = create_supplier(company=self.company, name=fields.pop("name"), **fields)
        except PROCUREMENT_ERRORS as exc:
            return procurement_error_response(exc)

        log_action(self.company, request.user, "create_supplier", f"supplier:{supplier.pk}", {"code": supplier.supplier_code})
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_201_CREATED)


class SupplierDetailView(ProcurementAPIView):
    serializer_class = SupplierSerializer

    @extend_schema(tags=["purchases"], responses=SupplierSerializer)
    def get(self, request, pk):
        supplier = self.get_company_object(Supplier, pk)
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["purchases"], request=SupplierSerializer, responses=SupplierSerializer)
    def patch(self, request, pk):
        supplier = self.get_company_object(Supplier, pk)
        s = self.get_serializer(supplier, data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        try:
            supplier = update_supplier(supplier=supplier, **s.validated_data)
        except PROCUREMENT_ERRORS as exc:
            return procurement_error_response(exc)

        log_action(self.company, request.user, "update_supplier", f"supplier:{supplier.pk}")
        return Response(SupplierSerializer(supplier).data, status=status.HTTP_200_OK)


class SupplierOpeningBalanceView(ProcurementAPIView):
    serializer_class = SupplierOpeningBalanceSerializer

    @extend_schema(tags=["purchases"], request=SupplierOpeningBalanceSerializer, responses={201: SupplierSerializer})
    def post(self, request, pk):
        supplier = self.get_company_object(Supplier, pk)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            supplier = set_supplier_opening_balance(
                supplier=supplier,
                amount=s.validated_data["amount"],
                as_of=s.validated_data["as_of"],
                user=request.user,
            )
        except PROCUREMENT_ERRORS as exc:
            return procurement_error_response(exc)

        log_action(
            self.company,
            request.user,
            "supplier_opening_balance",
            f"supplier:{supplier.pk}",
            {"amount": supplier.opening_balance},
        )
        payload = SupplierSerializer(supplier).data
        payload["voucher_number"] = supplier.opening_balance_voucher.voucher_number
        return Response(payload, status=status.HTTP_201_CREATED)


# ============================================================
# PURCHASE ORDERS
# ============================================================


class PurchaseOrderListCreateView(ProcurementAPIView):
    serializer_class = PurchaseOrderCreateSerializer

    @extend_schema(
        tags=["purchases"],
        parameters=[
            OpenApiParameter(name="status", required=False, type=str),
            OpenApiParameter(name="supplier_id", required=False, type=int),
        ],
        responses=PurchaseOrderSerializer(many=True),
    )
    def get(self, request):
        qs = (
            PurchaseOrder.objects.filter(company=self.company)
            .select_related("supplier")
            .prefetch_related("items", "items__item")
        )

        status_filter = (request.query_params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status__iexact=status_filter)

        supplier_id = (request.query_params.get("supplier_id") or "").strip()
        if supplier_id.isdigit():
            qs = qs.filter(supplier_id=int(supplier_id))

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PurchaseOrderSerializer(page, many=True).data)
        return Response(PurchaseOrderSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["purchases"], request=PurchaseOrderCreateSerializer, responses={201: PurchaseOrderSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        supplier = self.get_company_object(Supplier, data["supplier_id"])
        items = []
        for row in data["items"]:
            row = dict(row)
            row["item"] = self.get_company_object(InventoryItem, row.pop("item_id"))
            items.append(row)

        try:
            po = create_purchase_order(
                company=self.company,
                supplier=supplier,
                items=items,
                po_date=data.get("po_date"),
                expected_delivery_date=data.get("expected_delivery_date"),
                currency=data.get("currency"),
                payment_terms=data.get("payment_terms", ""),
                remarks=data.get("remarks", ""),
                user=request.user,
            )
        except PROCUREMENT_ERRORS as exc:
            return procurement_error_response(exc)

        log_action(
            self.company,
            request.user,
            "create_purchase_order",
            f"purchase_order:{po.pk}",
            {"number": po.po_number, "total": po.total_amount},
        )
        return Response(PurchaseOrderSerializer(po).data, status=status.HTTP_201_CREATED)


class PurchaseOrderDetailView(ProcurementAPIView):
    @extend_schema(tags=["purchases"], responses=PurchaseOrderSerializer)
    def get(self, request, pk):
        po = self.get_company_object(PurchaseOrder, pk)
        return Response(PurchaseOrderSerializer(po).data, status=status.HTTP_200_OK)


class PurchaseOrderApproveView(ProcurementAPIView):
    @extend_schema(tags=["purchases"], request=None, responses=PurchaseOrderSerializer)
    def post(self, request, pk):
        po = self.get_company_object(PurchaseOrder, pk)
        try:
            po = approve_purchase_order(purchase_order=po, user=request.user)
        except PROCUREMENT_ERRORS as exc:
            return procurement_error_response(exc)

        log_action(self.company, request.user, "approve_purchase_order", f"purchase_order:{po.pk}", {"number": po.po_number})
        return Response(PurchaseOrderSerializer(po).data, status=status.HTTP_200_OK)


class PurchaseOrderCancelView(ProcurementAPIView):
    @extend_schema(tags=["purchases"], request=None, responses=PurchaseOrderSerializer)
    def post(self, request, pk):
        po = self.get_company_object(PurchaseOrder, pk)
        try:
            po = cancel_purchase_order(purchase_order=po, user=request.user)
        except PROCUREMENT_ERRORS as exc:
            return procurement_error_response(exc)

        log_action(self.company, request.user, "cancel_purchase_order", f"purchase_order:{po.pk}", {"number": po.po_number})
        return Response(PurchaseOrderSerializer(po).data, status=status.HTTP_200_OK)


# ============================================================
# GOODS RECEIVED NOTES
# ============================================================


class GoodsReceivedNoteListCreateView(ProcurementAPIView):
    serializer_class = GoodsReceivedNoteCreateSerializer

    @extend_schema(
        tags=["purchases"],
        parameters=[OpenApiParameter(name="purchase_order_id", required=False, type=int)],
        responses=GoodsReceivedNoteSerializer(many=True),
    )
    def get(self, request):
        qs = (
            GoodsReceivedNote.objects.filter(company=self.company)
            .select_related("purchase_order", "journal_voucher")
            .prefetch_related("items", "items__po_item__item")
        )
        po_id = (request.query_params.get("purchase_order_id") or "").strip()
        if po_id.isdigit():
            qs = qs.filter(purchase_order_id=int(po_id))

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(GoodsReceivedNoteSerializer(page, many=True).data)
        return Response(GoodsReceivedNoteSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["purchases"],
        request=GoodsReceivedNoteCreateSerializer,
        responses={201: GoodsReceivedNoteSerializer},
    )
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        po = self.get_company_object(PurchaseOrder, data["purchase_order_id"])
        lines = [
            {
                "po_item": get_object_or_404(PurchaseOrderItem, pk=row["po_item_id"], purchase_order=po),
                "quantity": row["quantity_received"],
            }
            for row in data["lines"]
        ]

        try:
            grn = receive_goods(
                purchase_order=po,
                lines=lines,
                grn_date=data.get("grn_date"),
                remarks=data.get("remarks", ""),
                user=request.user,
            )
        except PROCUREMENT_ERRORS as exc:
            return procurement_error_response(exc)

        log_action(
            self.company,
            request.user,
            "receive_goods",
            f"grn:{grn.pk}",
            {"number": grn.grn_number, "po": po.po_number, "value": grn.total_value},
        )
        return Response(GoodsReceivedNoteSerializer(grn).data, status=status.HTTP_201_CREATED)


class GoodsReceivedNoteDetailView(ProcurementAPIView):
    @extend_schema(tags=["purchases"], responses=GoodsReceivedNoteSerializer)
    def get(self, request, pk):
        grn = self.get_company_object(GoodsReceivedNote, pk)
        return Response(GoodsReceivedNoteSerializer(grn).data, status=status.HTTP_200_OK)


# ============================================================
# SUPPLIER INVOICES
# ============================================================


class SupplierInvoiceListCreateView(ProcurementAPIView):
    serializer_class = SupplierInvoiceCreateSerializer

    @extend_schema(
        tags=["purchases"],
        parameters=[
            OpenApiParameter(name="status", required=False, type=str),
            OpenApiParameter(name="supplier_id", required=False, type=int),
        ],
        responses=SupplierInvoiceSerializer(many=True),
    )
    def get(self, request):
        qs = (
            SupplierInvoice.objects.filter(company=self.company)
            .select_related("supplier", "purchase_order", "grn", "journal_voucher")
            .prefetch_related("items", "items__item")
        )

        status_filter = (request.query_params.get("status") or "").strip()
        if status_filter:
            qs = qs.filter(status__iexact=status_filter)

        supplier_id = (request.query_params.get("supplier_id") or "").strip()
        if supplier_id.isdigit():
            qs = qs.filter(supplier_id=int(supplier_id))

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(SupplierInvoiceSerializer(page, many=True).data)
        return Response(SupplierInvoiceSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["purchases"], request=SupplierInvoiceCreateSerializer, responses={201: SupplierInvoiceSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        grn = self.get_company_object(GoodsReceivedNote, data["grn_id"])
        try:
            invoice = create_invoice_from_grn(
                grn=grn,
                invoice_date=data.get("invoice_date"),
                due_date=data.get("due_date"),
                supplier_reference=data.get("supplier_reference", ""),
                user=request.user,
            )
        except PROCUREMENT_ERRORS as exc:
            return procurement_error_response(exc)

        log_action(
            self.company,
            request.user,
            "create_supplier_invoice",
            f"supplier_invoice:{invoice.pk}",
            {"number": invoice.invoice_number, "grn": grn.grn_number, "total": invoice.total_amount},
        )
        return Response(SupplierInvoiceSerializer(invoice).data, status=status.HTTP_201_CREATED)


class SupplierInvoiceDetailView(ProcurementAPIView):
    @extend_schema(tags=["purchases"], responses=SupplierInvoiceSerializer)
    def get(self, request, pk):
        invoice = self.get_company_object(SupplierInvoice, pk)
        return Response(SupplierInvoiceSerializer(invoice).data, status=status.HTTP_200_OK)


class SupplierInvoiceApproveView(ProcurementAPIView):
    @extend_schema(tags=["purchases"], request=None, responses={200: SupplierInvoiceSerializer, 403: dict})
    def post(self, request, pk):
        invoice = self.get_company_object(SupplierInvoice, pk)
        try:
            invoice = approve_supplier_invoice(invoice=invoice, user=request.user)
        except PROCUREMENT_ERRORS as exc:
            return procurement_error_response(exc)

        log_action(
            self.company,
            request.user,
            "approve_supplier_invoice",
            f"supplier_invoice:{invoice.pk}",
            {"number": invoice.invoice_number},
        )
        return Response(SupplierInvoiceSerializer(invoice).data, status=status.HTTP_200_OK)


class SupplierInvoiceVoidView(ProcurementAPIView):
    @extend_schema(tags=["purchases"], request=None, responses={200: SupplierInvoiceSerializer, 403: dict})
    def post(self, request, pk):
        invoice = self.get_company_object(SupplierInvoice, pk)
        try:
            invoice = void_supplier_invoice(invoice=invoice, user=request.user)
        except PROCUREMENT_ERRORS as exc:
            return procurement_error_response(exc)

        log_action(
            self.company,
            request.user,
            "void_supplier_invoice",
            f"supplier_invoice:{invoice.pk}",
            {"number": invoice.invoice_number},
        )
        return Response(SupplierInvoiceSerializer(invoice).data, status=status.HTTP_200_OK)


class SupplierUnpaidInvoicesView(ProcurementAPIView):
    @extend_schema(tags=["purchases"], responses=SupplierInvoiceSerializer(many=True))
    def get(self, request, pk):
        supplier = self.get_company_object(Supplier, pk)
        qs = unpaid_supplier_invoices(self.company, supplier=supplier).prefetch_related("items", "items__item")
        return Response(SupplierInvoiceSerializer(qs, many=True).data, status=status.HTTP_200_OK)


# ============================================================
# SUPPLIER PAYMENTS
# ============================================================


class SupplierPaymentMixin:
    def build_allocations(self, rows):
        return [
            {"invoice": self.get_company_object(SupplierInvoice, row["invoice_id"]), "amount": row.get("amount")}
            for row in rows
        ]


class SupplierPaymentListCreateView(SupplierPaymentMixin, ProcurementAPIView):
    serializer_class = SupplierPaymentCreateSerializer

    @extend_schema(
        tags=["purchases"],
        parameters=[OpenApiParameter(name="supplier_id", required=False, type=int)],
        responses=SupplierPaymentSerializer(many=True),
    )
    def get(self, request):
        qs = (
            SupplierPayment.objects.filter(company=self.company)
            .select_related("supplier", "bank_account", "journal_voucher")
            .prefetch_related("allocations", "allocations__invoice")
        )
        supplier_id = (request.query_params.get("supplier_id") or "").strip()
        if supplier_id.isdigit():
            qs = qs.filter(supplier_id=int(supplier_id))

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(SupplierPaymentSerializer(page, many=True).data)
        return Response(SupplierPaymentSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["purchases"], request=SupplierPaymentCreateSerializer, responses={201: SupplierPaymentSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        supplier = self.get_company_object(Supplier, data["supplier_id"])
        bank_account = self.get_company_object(Account, data["bank_account_id"])
        try:
            payment = pay_supplier(
                company=self.company,
                supplier=supplier,
                bank_account=bank_account,
                allocations=self.build_allocations(data["allocations"]),
                wht_rate=data.get("wht_rate", 0),
                payment_date=data.get("payment_date"),
                narration=data.get("narration", ""),
                user=request.user,
            )
        except PROCUREMENT_ERRORS as exc:
            return procurement_error_response(exc)

        log_action(
            self.company,
            request.user,
            "pay_supplier",
            f"supplier_payment:{payment.pk}",
            {"number": payment.payment_number, "gross": payment.gross_amount, "wht": payment.wht_amount},
        )
        return Response(SupplierPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)


class SupplierPaymentDetailView(ProcurementAPIView):
    @extend_schema(tags=["purchases"], responses=SupplierPaymentSerializer)
    def get(self, request, pk):
        payment = self.get_company_object(SupplierPayment, pk)
        return Response(SupplierPaymentSerializer(payment).data, status=status.HTTP_200_OK)


class PaymentScheduleView(SupplierPaymentMixin, ProcurementAPIView):
    serializer_class = PaymentScheduleSerializer

    @extend_schema(tags=["purchases"], request=PaymentScheduleSerializer, responses={201: SupplierPaymentSerializer(many=True)})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        bank_account = self.get_company_object(Account, data["bank_account_id"])
        schedule = [
            {
                "supplier": self.get_company_object(Supplier, row["supplier_id"]),
                "allocations": self.build_allocations(row["allocations"]),
                "narration": row.get("narration", ""),
            }
            for row in data["payments"]
        ]

        try:
            payments = run_payment_schedule(
                company=self.company,
                bank_account=bank_account,
                schedule=schedule,
                wht_rate=data.get("wht_rate", 0),
                payment_date=data.get("payment_date"),
                user=request.user,
            )
        except PROCUREMENT_ERRORS as exc:
            return procurement_error_response(exc)

        log_action(
            self.company,
            request.user,
            "run_payment_schedule",
            "supplier_payment:schedule",
            {"payments": [p.payment_number for p in payments]},
        )
        return Response(SupplierPaymentSerializer(payments, many=True).data, status=status.HTTP_201_CREATED)
