# accounting/models/__init__.py

from accounting.models.account import Account
from accounting.models.expense import Expense
from accounting.models.income import OtherIncome
from accounting.models.journal import JournalVoucher, JournalVoucherLine
from accounting.models.payment_voucher import PaymentVoucher, PaymentVoucherLine
from accounting.models.period_close import PeriodClose
from accounting.models.reconciliation import BankReconciliation, ReconciliationLine
from accounting.models.tax import TaxAuthority, TaxConfig

__all__ = [
    "Account",
    "JournalVoucher",
    "JournalVoucherLine",
    "PaymentVoucher",
    "PaymentVoucherLine",
    "Expense",
    "OtherIncome",
    "PeriodClose",
    "TaxAuthority",
    "TaxConfig",
    "BankReconciliation",
    "ReconciliationLine",
]
