# sales/api/urls.py

from django.urls import path

from sales.api.views.credit_notes import CreditNoteDetailView, CreditNoteListCreateView, PostCreditNoteView
from sales.api.views.customers import (
    CustomerDetailView,
    CustomerListCreateView,
    CustomerOpeningBalanceView,
    CustomerStatementView,
)
from sales.api.views.invoices import (
    CancelInvoiceView,
    IssueInvoiceView,
    SalesInvoiceDetailView,
    SalesInvoiceListCreateView,
)
from sales.api.views.payments import CustomerPaymentDetailView, CustomerPaymentListCreateView
from sales.api.views.reports import ARAgingView

app_name = "sales"

urlpatterns = [
    # Customers
    path("customers/", CustomerListCreateView.as_view(), name="customer-list"),
    path("customers/<int:pk>/", CustomerDetailView.as_view(), name="customer-detail"),
    path("customers/<int:pk>/opening-balance/", CustomerOpeningBalanceView.as_view(), name="customer-opening-balance"),
    path("customers/<int:pk>/statement/", CustomerStatementView.as_view(), name="customer-statement"),
    # Invoices
    path("invoices/", SalesInvoiceListCreateView.as_view(), name="invoice-list"),
    path("invoices/<int:pk>/", SalesInvoiceDetailView.as_view(), name="invoice-detail"),
    path("invoices/<int:pk>/issue/", IssueInvoiceView.as_view(), name="invoice-issue"),
    path("invoices/<int:pk>/cancel/", CancelInvoiceView.as_view(), name="invoice-cancel"),
    # Payments
    path("payments/", CustomerPaymentListCreateView.as_view(), name="payment-list"),
    path("payments/<int:pk>/", CustomerPaymentDetailView.as_view(), name="payment-detail"),
    # Credit notes
    path("credit-notes/", CreditNoteListCreateView.as_view(), name="credit-note-list"),
    path("credit-notes/<int:pk>/", CreditNoteDetailView.as_view(), name="credit-note-detail"),
    path("credit-notes/<int:pk>/post/", PostCreditNoteView.as_view(), name="credit-note-post"),
    # Reports
    path("reports/ar-aging/", ARAgingView.as_view(), name="ar-aging"),
]
