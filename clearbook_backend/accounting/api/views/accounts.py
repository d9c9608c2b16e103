# accounting/api/views/accounts.py

"""
GET   /api/accounting/accounts/          list (?account_type=ASSET&is_active=true)
POST  /api/accounting/accounts/          create (409 on duplicate code)
GET   /api/accounting/accounts/<id>/
PATCH /api/accounting/accounts/<id>/     name, parent, system_role, description, is_active
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response

from accounting.api.serializers.accounts import (
    AccountCreateSerializer,
    AccountSerializer,
    AccountUpdateSerializer,
)
from accounting.api.views.base import AccountingAPIView, error_response
from accounting.models.account import Account
from permissions.services.audit import log_action

logger = logging.getLogger(__name__)


def _parse_bool(raw):
    if raw is None:
        return None
    return str(raw).strip().lower() in {"1", "true", "yes"}


class AccountListCreateView(AccountingAPIView):
    serializer_class = AccountCreateSerializer

    @extend_schema(
        tags=["accounting"],
        parameters=[
            OpenApiParameter(name="account_type", required=False, type=str),
            OpenApiParameter(name="is_active", required=False, type=bool),
        ],
        responses=AccountSerializer(many=True),
    )
    def get(self, request):
        qs = Account.objects.filter(company=self.company).select_related("parent").order_by("code")

        account_type = (request.query_params.get("account_type") or "").strip().upper()
        if account_type:
            qs = qs.filter(account_type=account_type)

        is_active = _parse_bool(request.query_params.get("is_active"))
        if is_active is not None:
            qs = qs.filter(is_active=is_active)

        return Response(AccountSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=AccountCreateSerializer, responses={201: AccountSerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data
        company = self.company

        code = data["code"].strip()
        if Account.objects.filter(company=company, code=code).exists():
            return Response({"detail": f"Account code {code} already exists"}, status=status.HTTP_409_CONFLICT)

        account = Account(
            company=company,
            code=code,
            name=data["name"].strip(),
            account_type=data["account_type"],
            system_role=data.get("system_role") or None,
            parent=self.get_account(data.get("parent_id")),
            description=data.get("description", ""),
            is_control_account=data.get("is_control_account", False),
        )
        try:
            with transaction.atomic():
                account.save()
        except DjangoValidationError as exc:
            return error_response(exc)
        except IntegrityError:
            return Response({"detail": f"Account code {code} already exists"}, status=status.HTTP_409_CONFLICT)

        log_action(company, request.user, "create_account", f"account:{account.pk}", {"code": account.code})
        return Response(AccountSerializer(account).data, status=status.HTTP_201_CREATED)


class AccountDetailView(AccountingAPIView):
    serializer_class = AccountUpdateSerializer

    @extend_schema(tags=["accounting"], responses=AccountSerializer)
    def get(self, request, pk):
        account = self.get_company_object(Account, pk)
        return Response(AccountSerializer(account).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=AccountUpdateSerializer, responses={200: AccountSerializer})
    def patch(self, request, pk):
        account = self.get_company_object(Account, pk)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        if "name" in data:
            account.name = data["name"].strip()
        if "description" in data:
            account.description = data["description"]
        if "is_active" in data:
            account.is_active = data["is_active"]
        if "system_role" in data:
            account.system_role = data["system_role"] or None
        if "parent_id" in data:
            account.parent = self.get_account(data["parent_id"])

        try:
            with transaction.atomic():
                account.save()
        except DjangoValidationError as exc:
            return error_response(exc)

        log_action(self.company, request.user, "update_account", f"account:{account.pk}", data)
        return Response(AccountSerializer(account).data, status=status.HTTP_200_OK)
