# accounting/api/views/tax.py

"""
GET   /api/accounting/tax-authorities/
POST  /api/accounting/tax-authorities/
PATCH /api/accounting/tax-authorities/<id>/
GET   /api/accounting/tax-configs/
POST  /api/accounting/tax-configs/
PATCH /api/accounting/tax-configs/<id>/

Duplicate names inside a company return 409.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.serializers.tax import (
    TaxAuthoritySerializer,
    TaxConfigInputSerializer,
    TaxConfigSerializer,
)
from accounting.api.views.base import AccountingAPIView, error_response
from accounting.models.tax import TaxAuthority, TaxConfig
from accounting.services.tax_service import (
    DuplicateTaxNameError,
    TaxError,
    save_tax_authority,
    save_tax_config,
)
from permissions.services.audit import log_action


def _tax_error(exc) -> Response:
    if isinstance(exc, DuplicateTaxNameError):
        return error_response(exc, status.HTTP_409_CONFLICT)
    return error_response(exc)


class TaxAuthorityListCreateView(AccountingAPIView):
    serializer_class = TaxAuthoritySerializer

    @extend_schema(tags=["tax"], responses=TaxAuthoritySerializer(many=True))
    def get(self, request):
        qs = TaxAuthority.objects.filter(company=self.company).order_by("name")
        return Response(TaxAuthoritySerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["tax"], request=TaxAuthoritySerializer, responses={201: TaxAuthoritySerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            authority = save_tax_authority(company=self.company, **s.validated_data)
        except TaxError as exc:
            return _tax_error(exc)

        log_action(self.company, request.user, "create_tax_authority", f"tax_authority:{authority.pk}")
        return Response(TaxAuthoritySerializer(authority).data, status=status.HTTP_201_CREATED)


class TaxAuthorityDetailView(AccountingAPIView):
    serializer_class = TaxAuthoritySerializer

    @extend_schema(tags=["tax"], request=TaxAuthoritySerializer, responses={200: TaxAuthoritySerializer})
    def patch(self, request, pk):
        authority = self.get_company_object(TaxAuthority, pk)
        s = self.get_serializer(authority, data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        try:
            authority = save_tax_authority(company=self.company, authority=authority, **s.validated_data)
        except TaxError as exc:
            return _tax_error(exc)

        log_action(self.company, request.user, "update_tax_authority", f"tax_authority:{authority.pk}")
        return Response(TaxAuthoritySerializer(authority).data, status=status.HTTP_200_OK)


def _resolve_config_refs(view, data: dict) -> dict:
    data = dict(data)
    if "gl_account_id" in data:
        data["gl_account"] = view.get_account(data.pop("gl_account_id"))
    if "authority_id" in data:
        authority_id = data.pop("authority_id")
        data["authority"] = view.get_company_object(TaxAuthority, authority_id) if authority_id else None
    return data


class TaxConfigListCreateView(AccountingAPIView):
    serializer_class = TaxConfigInputSerializer

    @extend_schema(tags=["tax"], responses=TaxConfigSerializer(many=True))
    def get(self, request):
        qs = (
            TaxConfig.objects.filter(company=self.company)
            .select_related("gl_account", "authority")
            .order_by("tax_type", "name")
        )
        return Response(TaxConfigSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["tax"], request=TaxConfigInputSerializer, responses={201: TaxConfigSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            config = save_tax_config(company=self.company, **_resolve_config_refs(self, s.validated_data))
        except TaxError as exc:
            return _tax_error(exc)

        log_action(self.company, request.user, "create_tax_config", f"tax_config:{config.pk}", {"rate": config.rate})
        return Response(TaxConfigSerializer(config).data, status=status.HTTP_201_CREATED)


class TaxConfigDetailView(AccountingAPIView):
    serializer_class = TaxConfigInputSerializer

    @extend_schema(tags=["tax"], request=TaxConfigInputSerializer, responses={200: TaxConfigSerializer})
    def patch(self, request, pk):
        config = self.get_company_object(TaxConfig, pk)
        s = self.get_serializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        try:
            config = save_tax_config(
                company=self.company,
                config=config,
                **_resolve_config_refs(self, s.validated_data),
            )
        except TaxError as exc:
            return _tax_error(exc)

        log_action(self.company, request.user, "update_tax_config", f"tax_config:{config.pk}")
        return Response(TaxConfigSerializer(config).data, status=status.HTTP_200_OK)
