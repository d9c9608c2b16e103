# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for accounting services.
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""


class AccountResolutionError(AccountingServiceError):
    """Raised when an expected account cannot be resolved."""


class JournalEntryCreationError(AccountingServiceError):
    """Raised when a journal voucher cannot be created."""


class IdempotencyError(AccountingServiceError):
    """Raised on duplicate or retried accounting events."""


class VoucherStateError(AccountingServiceError):
    """Raised when a voucher is not in a state that allows the requested action."""


class PeriodLockedError(AccountingServiceError):
    """Raised when posting into a closed accounting period."""
