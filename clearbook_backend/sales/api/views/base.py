# sales/api/views/base.py

from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated

from accounting.api.views.base import accounting_error_response, error_response
from accounting.services.exceptions import AccountingServiceError
from companies.tenancy import CompanyScopedMixin
from inventory.services.stock_service import InventoryError
from permissions.roles import MODULE_SALES, HasModulePermission
from sales.services.exceptions import CreditNoteStateError, InvoiceStateError, SalesError

SALES_ERRORS = (SalesError, InventoryError, AccountingServiceError)


class SalesAPIView(CompanyScopedMixin, GenericAPIView):
    """Company-scoped view behind the sales module permission."""

    permission_classes = [IsAuthenticated, HasModulePermission]
    required_module = MODULE_SALES

    def get_company_object(self, model, pk, **extra):
        return get_object_or_404(model, company=self.company, pk=pk, **extra)


def sales_error_response(exc):
    if isinstance(exc, (InvoiceStateError, CreditNoteStateError)):
        return error_response(exc, status.HTTP_403_FORBIDDEN)
    if isinstance(exc, AccountingServiceError):
        return accounting_error_response(exc)
    return error_response(exc)
