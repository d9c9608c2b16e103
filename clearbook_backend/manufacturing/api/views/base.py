# manufacturing/api/views/base.py

from __future__ import annotations

from django.shortcuts import get_object_or_404
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated

from companies.tenancy import CompanyScopedMixin
from permissions.roles import MODULE_PRODUCTION, HasModulePermission


class ManufacturingAPIView(CompanyScopedMixin, GenericAPIView):
    """Company-scoped view behind the production module (manufacturing companies only)."""

    permission_classes = [IsAuthenticated, HasModulePermission]
    required_module = MODULE_PRODUCTION

    def get_company_object(self, model, pk, **extra):
        return get_object_or_404(model, company=self.company, pk=pk, **extra)
