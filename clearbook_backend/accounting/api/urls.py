# accounting/api/urls.py

from django.urls import path

from accounting.api.views.accounts import AccountDetailView, AccountListCreateView
from accounting.api.views.expenses import ExpenseDetailView, ExpenseListCreateView, ExpensePostView
from accounting.api.views.incomes import OtherIncomeDetailView, OtherIncomeListCreateView, OtherIncomePostView
from accounting.api.views.journal_vouchers import (
    JournalVoucherDetailView,
    JournalVoucherListCreateView,
    JournalVoucherPostView,
    JournalVoucherRejectView,
    JournalVoucherReverseView,
)
from accounting.api.views.opening_balances import OpeningBalancesView
from accounting.api.views.payment_vouchers import (
    PaymentVoucherApproveView,
    PaymentVoucherDetailView,
    PaymentVoucherListCreateView,
    PaymentVoucherRejectView,
)
from accounting.api.views.period_close import PeriodCloseView
from accounting.api.views.reconciliation import (
    ReconciliationDetailView,
    ReconciliationListCreateView,
    ReconciliationTransactionsView,
)
from accounting.api.views.reports import (
    AccountStatementView,
    BalanceSheetView,
    CashFlowView,
    GeneralLedgerView,
    IncomeStatementView,
    IncomeTaxReportView,
    TrialBalanceView,
)
from accounting.api.views.tax import (
    TaxAuthorityDetailView,
    TaxAuthorityListCreateView,
    TaxConfigDetailView,
    TaxConfigListCreateView,
)

app_name = "accounting"

urlpatterns = [
    # Chart of accounts
    path("accounts/", AccountListCreateView.as_view(), name="account-list"),
    path("accounts/<int:pk>/", AccountDetailView.as_view(), name="account-detail"),
    path("opening-balances/", OpeningBalancesView.as_view(), name="opening-balances"),
    # Journal vouchers
    path("journal-vouchers/", JournalVoucherListCreateView.as_view(), name="voucher-list"),
    path("journal-vouchers/<int:pk>/", JournalVoucherDetailView.as_view(), name="voucher-detail"),
    path("journal-vouchers/<int:pk>/post/", JournalVoucherPostView.as_view(), name="voucher-post"),
    path("journal-vouchers/<int:pk>/reject/", JournalVoucherRejectView.as_view(), name="voucher-reject"),
    path("journal-vouchers/<int:pk>/reverse/", JournalVoucherReverseView.as_view(), name="voucher-reverse"),
    # Payment vouchers
    path("payment-vouchers/", PaymentVoucherListCreateView.as_view(), name="pv-list"),
    path("payment-vouchers/<int:pk>/", PaymentVoucherDetailView.as_view(), name="pv-detail"),
    path("payment-vouchers/<int:pk>/approve/", PaymentVoucherApproveView.as_view(), name="pv-approve"),
    path("payment-vouchers/<int:pk>/reject/", PaymentVoucherRejectView.as_view(), name="pv-reject"),
    # Expenses
    path("expenses/", ExpenseListCreateView.as_view(), name="expense-list"),
    path("expenses/<int:pk>/", ExpenseDetailView.as_view(), name="expense-detail"),
    path("expenses/<int:pk>/post/", ExpensePostView.as_view(), name="expense-post"),
    # Other income
    path("incomes/", OtherIncomeListCreateView.as_view(), name="income-list"),
    path("incomes/<int:pk>/", OtherIncomeDetailView.as_view(), name="income-detail"),
    path("incomes/<int:pk>/post/", OtherIncomePostView.as_view(), name="income-post"),
    # Period close
    path("period-closes/", PeriodCloseView.as_view(), name="period-close"),
    # Tax
    path("tax-authorities/", TaxAuthorityListCreateView.as_view(), name="tax-authority-list"),
    path("tax-authorities/<int:pk>/", TaxAuthorityDetailView.as_view(), name="tax-authority-detail"),
    path("tax-configs/", TaxConfigListCreateView.as_view(), name="tax-config-list"),
    path("tax-configs/<int:pk>/", TaxConfigDetailView.as_view(), name="tax-config-detail"),
    # Bank reconciliation
    path("reconciliations/", ReconciliationListCreateView.as_view(), name="reconciliation-list"),
    path("reconciliations/<int:pk>/", ReconciliationDetailView.as_view(), name="reconciliation-detail"),
    path(
        "reconciliations/<int:pk>/transactions/",
        ReconciliationTransactionsView.as_view(),
        name="reconciliation-transactions",
    ),
    # Reports
    path("reports/trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    path("reports/balance-sheet/", BalanceSheetView.as_view(), name="balance-sheet"),
    path("reports/income-statement/", IncomeStatementView.as_view(), name="income-statement"),
    path("reports/general-ledger/", GeneralLedgerView.as_view(), name="general-ledger"),
    path("reports/account-statement/", AccountStatementView.as_view(), name="account-statement"),
    path("reports/cash-flow/", CashFlowView.as_view(), name="cash-flow"),
    path("reports/income-tax/", IncomeTaxReportView.as_view(), name="income-tax"),
]
