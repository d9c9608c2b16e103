# companies/api/views.py

"""
PATH: companies/api/views.py

GET   /api/company/                      caller's company
PATCH /api/company/                      update profile (admin)
POST  /api/company/payment-form-lock/    toggle payment voucher lock (admin)
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from companies.api.serializers import (
    CompanySerializer,
    CompanyUpdateSerializer,
    PaymentFormLockSerializer,
)
from companies.services.company_service import (
    CompanyServiceError,
    set_payment_form_lock,
    update_company,
)
from companies.tenancy import CompanyScopedMixin
from permissions.roles import IsAdmin
from permissions.services.audit import log_action


class CompanyDetailView(CompanyScopedMixin, GenericAPIView):
    serializer_class = CompanyUpdateSerializer

    def get_permissions(self):
        if self.request.method == "PATCH":
            return [IsAuthenticated(), IsAdmin()]
        return [IsAuthenticated()]

    @extend_schema(tags=["company"], responses=CompanySerializer)
    def get(self, request):
        return Response(CompanySerializer(self.company).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["company"], request=CompanyUpdateSerializer, responses={200: CompanySerializer, 400: dict})
    def patch(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            company = update_company(company=self.company, **s.validated_data)
        except (CompanyServiceError, DjangoValidationError) as exc:
            detail = exc.messages if isinstance(exc, DjangoValidationError) else str(exc)
            return Response({"detail": detail}, status=status.HTTP_400_BAD_REQUEST)

        log_action(company, request.user, "update_company", f"company:{company.pk}", s.validated_data)
        return Response(CompanySerializer(company).data, status=status.HTTP_200_OK)


class PaymentFormLockView(CompanyScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated, IsAdmin]
    serializer_class = PaymentFormLockSerializer

    @extend_schema(tags=["company"], request=PaymentFormLockSerializer, responses={200: CompanySerializer})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        company = set_payment_form_lock(company=self.company, locked=s.validated_data["locked"])
        log_action(
            company,
            request.user,
            "payment_form_lock" if company.payment_form_locked else "payment_form_unlock",
            f"company:{company.pk}",
        )
        return Response(CompanySerializer(company).data, status=status.HTTP_200_OK)
