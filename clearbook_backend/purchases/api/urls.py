# purchases/api/urls.py

from django.urls import path

from purchases.api.views import (
    GoodsReceivedNoteDetailView,
    GoodsReceivedNoteListCreateView,
    PaymentScheduleView,
    PurchaseOrderApproveView,
    PurchaseOrderCancelView,
    PurchaseOrderDetailView,
    PurchaseOrderListCreateView,
    SupplierDetailView,
    SupplierInvoiceApproveView,
    SupplierInvoiceDetailView,
    SupplierInvoiceListCreateView,
    SupplierInvoiceVoidView,
    SupplierListCreateView,
    SupplierOpeningBalanceView,
    SupplierPaymentDetailView,
    SupplierPaymentListCreateView,
    SupplierUnpaidInvoicesView,
)

app_name = "purchases"

urlpatterns = [
    path("suppliers/", SupplierListCreateView.as_view(), name="supplier-list"),
    path("suppliers/<int:pk>/", SupplierDetailView.as_view(), name="supplier-detail"),
    path("suppliers/<int:pk>/opening-balance/", SupplierOpeningBalanceView.as_view(), name="supplier-opening-balance"),
    path("orders/", PurchaseOrderListCreateView.as_view(), name="purchase-order-list"),
    path("orders/<int:pk>/", PurchaseOrderDetailView.as_view(), name="purchase-order-detail"),
    path("orders/<int:pk>/approve/", PurchaseOrderApproveView.as_view(), name="purchase-order-approve"),
    path("orders/<int:pk>/cancel/", PurchaseOrderCancelView.as_view(), name="purchase-order-cancel"),
    path("grns/", GoodsReceivedNoteListCreateView.as_view(), name="grn-list"),
    path("grns/<int:pk>/", GoodsReceivedNoteDetailView.as_view(), name="grn-detail"),
    path("supplier-invoices/", SupplierInvoiceListCreateView.as_view(), name="supplier-invoice-list"),
    path("supplier-invoices/<int:pk>/", SupplierInvoiceDetailView.as_view(), name="supplier-invoice-detail"),
    path("supplier-invoices/<int:pk>/approve/", SupplierInvoiceApproveView.as_view(), name="supplier-invoice-approve"),
    path("supplier-invoices/<int:pk>/void/", SupplierInvoiceVoidView.as_view(), name="supplier-invoice-void"),
    path("suppliers/<int:pk>/unpaid-invoices/", SupplierUnpaidInvoicesView.as_view(), name="supplier-unpaid-invoices"),
    path("supplier-payments/", SupplierPaymentListCreateView.as_view(), name="supplier-payment-list"),
    path("supplier-payments/<int:pk>/", SupplierPaymentDetailView.as_view(), name="supplier-payment-detail"),
    path("payment-schedule/", PaymentScheduleView.as_view(), name="payment-schedule"),
]
