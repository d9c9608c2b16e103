# sales/services/exceptions.py

"""
SALES SERVICE ERRORS

State errors surface as 403, everything else as 400.
"""


class SalesError(ValueError):
    pass


class CustomerError(SalesError):
    pass


class InvoiceError(SalesError):
    pass


class InvoiceStateError(InvoiceError):
    pass


class PaymentAllocationError(SalesError):
    pass


class CreditNoteError(SalesError):
    pass


class CreditNoteStateError(CreditNoteError):
    pass
