# accounting/admin.py

from django.contrib import admin

from accounting.models import (
    Account,
    BankReconciliation,
    Expense,
    JournalVoucher,
    JournalVoucherLine,
    OtherIncome,
    PaymentVoucher,
    PaymentVoucherLine,
    PeriodClose,
    TaxAuthority,
    TaxConfig,
)

# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "account_type", "system_role", "company", "is_active")
    list_filter = ("company", "account_type", "is_active")
    search_fields = ("code", "name")
    ordering = ("company", "code")


# ============================================================
# JOURNAL VOUCHERS (read-only once created)
# ============================================================


class JournalVoucherLineInline(admin.TabularInline):
    model = JournalVoucherLine
    extra = 0
    can_delete = False
    readonly_fields = ("account", "debit", "credit", "payee", "description", "line_order")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(JournalVoucher)
class JournalVoucherAdmin(admin.ModelAdmin):
    list_display = ("voucher_number", "entry_date", "source", "status", "total_debits", "company")
    list_filter = ("company", "status", "source")
    search_fields = ("voucher_number", "narration", "reference")
    date_hierarchy = "entry_date"
    inlines = [JournalVoucherLineInline]
    readonly_fields = (
        "company",
        "voucher_number",
        "entry_date",
        "source",
        "narration",
        "status",
        "total_debits",
        "total_credits",
        "reference",
        "reversal_of",
        "created_by",
        "posted_by",
        "posted_at",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# PAYMENT VOUCHERS
# ============================================================


class PaymentVoucherLineInline(admin.TabularInline):
    model = PaymentVoucherLine
    extra = 0
    can_delete = False
    readonly_fields = ("gl_account", "amount", "vat_amount", "wht_amount", "line_description")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(PaymentVoucher)
class PaymentVoucherAdmin(admin.ModelAdmin):
    list_display = ("pv_number", "voucher_date", "payee_name", "net_payable", "status", "company")
    list_filter = ("company", "status")
    search_fields = ("pv_number", "payee_name")
    inlines = [PaymentVoucherLineInline]

    def has_add_permission(self, request):
        return False


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ("expense_date", "amount", "expense_account", "payment_method", "status", "company")
    list_filter = ("company", "status", "payment_method")
    search_fields = ("payee", "description")


@admin.register(OtherIncome)
class OtherIncomeAdmin(admin.ModelAdmin):
    list_display = ("income_number", "income_date", "amount", "income_account", "status", "company")
    list_filter = ("company", "status", "payment_method")
    search_fields = ("income_number", "received_from", "description")


@admin.register(PeriodClose)
class PeriodCloseAdmin(admin.ModelAdmin):
    list_display = ("company", "start_date", "end_date", "journal_voucher", "closed_by", "created_at")
    list_filter = ("company",)

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(TaxAuthority)
class TaxAuthorityAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "company", "is_active")
    list_filter = ("company",)


@admin.register(TaxConfig)
class TaxConfigAdmin(admin.ModelAdmin):
    list_display = ("name", "tax_type", "rate", "company", "is_active")
    list_filter = ("company", "tax_type")


@admin.register(BankReconciliation)
class BankReconciliationAdmin(admin.ModelAdmin):
    list_display = ("account", "statement_date", "statement_balance", "difference", "status", "company")
    list_filter = ("company", "status")
