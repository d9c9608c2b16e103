# permissions/api/views.py

"""
PATH: permissions/api/views.py

PERMISSIONS + AUDIT API

GET  /api/permissions/modules/               modules available to the caller's company type
GET  /api/permissions/roles/                 roles usable in the caller's company
GET  /api/permissions/roles/<role>/          modules granted to a role
PUT  /api/permissions/roles/<role>/          replace a role's modules (manage_users)
GET  /api/permissions/users/<user_id>/       user-specific grants + effective set
PUT  /api/permissions/users/<user_id>/       replace user-specific grants (manage_users)
GET  /api/permissions/effective/             caller's effective modules
GET  /api/permissions/audit-log/             audit trail (manage_settings)
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from companies.tenancy import CompanyScopedMixin
from permissions.api.serializers import AuditLogSerializer, ModuleListSerializer
from permissions.models import AuditLog
from permissions.roles import (
    MODULE_LABELS,
    MODULE_MANAGE_USERS,
    MODULE_SETTINGS,
    ROLE_CHOICES,
    HasModulePermission,
    modules_for_company_type,
    roles_for_company_type,
)
from permissions.services.audit import log_action
from permissions.services.permission_service import (
    PermissionServiceError,
    get_effective_permissions,
    get_role_permissions,
    get_user_permissions,
    set_role_permissions,
    set_user_permissions,
)

User = get_user_model()

ROLE_LABELS = dict(ROLE_CHOICES)


class ModuleListView(CompanyScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["permissions"], responses={200: dict})
    def get(self, request):
        modules = sorted(modules_for_company_type(self.company.company_type))
        return Response(
            [{"module": m, "label": MODULE_LABELS[m]} for m in modules],
            status=status.HTTP_200_OK,
        )


class RoleListView(CompanyScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["permissions"], responses={200: dict})
    def get(self, request):
        roles = roles_for_company_type(self.company.company_type)
        return Response(
            [{"role": r, "label": ROLE_LABELS[r]} for r in roles],
            status=status.HTTP_200_OK,
        )


class RolePermissionView(CompanyScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated, HasModulePermission]
    required_module = MODULE_MANAGE_USERS
    serializer_class = ModuleListSerializer

    @extend_schema(tags=["permissions"], responses={200: dict})
    def get(self, request, role):
        try:
            modules = get_role_permissions(company=self.company, role=role)
        except PermissionServiceError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        return Response({"role": role, "modules": modules}, status=status.HTTP_200_OK)

    @extend_schema(tags=["permissions"], request=ModuleListSerializer, responses={200: dict, 400: dict})
    def put(self, request, role):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            modules = set_role_permissions(
                company=self.company,
                role=role,
                modules=s.validated_data["modules"],
            )
        except PermissionServiceError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        log_action(self.company, request.user, "update_role_permissions", f"role:{role}", {"modules": modules})
        return Response({"role": role, "modules": modules}, status=status.HTTP_200_OK)


class UserPermissionView(CompanyScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated, HasModulePermission]
    required_module = MODULE_MANAGE_USERS
    serializer_class = ModuleListSerializer

    def _get_user(self, user_id):
        return get_object_or_404(User, pk=user_id, company=self.company)

    @extend_schema(tags=["permissions"], responses={200: dict})
    def get(self, request, user_id):
        user = self._get_user(user_id)
        return Response(
            {
                "user_id": str(user.pk),
                "role": user.role,
                "modules": get_user_permissions(company=self.company, user=user),
                "effective": sorted(get_effective_permissions(user)),
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(tags=["permissions"], request=ModuleListSerializer, responses={200: dict, 400: dict})
    def put(self, request, user_id):
        user = self._get_user(user_id)
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            modules = set_user_permissions(
                company=self.company,
                user=user,
                modules=s.validated_data["modules"],
            )
        except PermissionServiceError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)

        log_action(self.company, request.user, "update_user_permissions", f"user:{user.pk}", {"modules": modules})
        return Response(
            {
                "user_id": str(user.pk),
                "modules": modules,
                "effective": sorted(get_effective_permissions(user)),
            },
            status=status.HTTP_200_OK,
        )


class EffectivePermissionView(CompanyScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["permissions"], responses={200: dict})
    def get(self, request):
        company = self.company
        return Response(
            {"company_id": company.company_id, "role": request.user.role, "modules": sorted(get_effective_permissions(request.user))},
            status=status.HTTP_200_OK,
        )


class AuditLogListView(CompanyScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated, HasModulePermission]
    required_module = MODULE_SETTINGS
    serializer_class = AuditLogSerializer

    @extend_schema(
        tags=["permissions"],
        parameters=[
            OpenApiParameter(name="entity", required=False, type=str),
            OpenApiParameter(name="action", required=False, type=str),
        ],
        responses=AuditLogSerializer(many=True),
    )
    def get(self, request):
        qs = AuditLog.objects.filter(company=self.company).select_related("user")

        entity = (request.query_params.get("entity") or "").strip()
        if entity:
            qs = qs.filter(entity__icontains=entity)
        action = (request.query_params.get("action") or "").strip()
        if action:
            qs = qs.filter(action=action)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data, status=status.HTTP_200_OK)
