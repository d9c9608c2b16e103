# sales/models/__init__.py

from sales.models.credit_note import CreditNote, CreditNoteItem
from sales.models.customer import Customer
from sales.models.invoice import SalesInvoice, SalesInvoiceItem
from sales.models.payment import CustomerPayment, PaymentAllocation

__all__ = [
    "Customer",
    "SalesInvoice",
    "SalesInvoiceItem",
    "CustomerPayment",
    "PaymentAllocation",
    "CreditNote",
    "CreditNoteItem",
]
