# accounting/api/views/base.py

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.models.account import Account
from companies.tenancy import CompanyScopedMixin
from permissions.roles import MODULE_ACCOUNTING, HasModulePermission


class AccountingAPIView(CompanyScopedMixin, GenericAPIView):
    """Company-scoped view behind the accounting module permission."""

    permission_classes = [IsAuthenticated, HasModulePermission]
    required_module = MODULE_ACCOUNTING

    def get_company_object(self, model, pk, **extra):
        return get_object_or_404(model, company=self.company, pk=pk, **extra)

    def get_account(self, account_id):
        if account_id is None:
            return None
        return self.get_company_object(Account, account_id)


def error_response(exc, http_status=status.HTTP_400_BAD_REQUEST) -> Response:
    if isinstance(exc, DjangoValidationError):
        return Response({"detail": exc.messages}, status=http_status)
    return Response({"detail": str(exc)}, status=http_status)


def accounting_error_response(exc) -> Response:
    """Map voucher engine errors onto HTTP statuses."""
    from accounting.services.exceptions import IdempotencyError, VoucherStateError

    if isinstance(exc, VoucherStateError):
        return error_response(exc, status.HTTP_403_FORBIDDEN)
    if isinstance(exc, IdempotencyError):
        return error_response(exc, status.HTTP_409_CONFLICT)
    return error_response(exc)
