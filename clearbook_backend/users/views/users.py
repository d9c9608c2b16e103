# users/views/users.py

"""
COMPANY USERS

GET  /api/auth/users/   list users of the caller's company
POST /api/auth/users/   invite (create) a user; always joins the caller's company

Both require the manage_users module.
"""

from django.contrib.auth import get_user_model
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from companies.tenancy import CompanyScopedMixin
from permissions.roles import MODULE_MANAGE_USERS, HasModulePermission, roles_for_company_type
from permissions.services.audit import log_action
from users.serializers import UserCreateSerializer, UserSerializer

User = get_user_model()


class UserListCreateView(CompanyScopedMixin, GenericAPIView):
    permission_classes = [IsAuthenticated, HasModulePermission]
    required_module = MODULE_MANAGE_USERS
    serializer_class = UserCreateSerializer

    @extend_schema(tags=["auth"], responses=UserSerializer(many=True))
    def get(self, request):
        qs = User.objects.filter(company=self.company).select_related("company").order_by("email")

        role = (request.query_params.get("role") or "").strip()
        if role:
            qs = qs.filter(role=role)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(UserSerializer(page, many=True).data)
        return Response(UserSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["auth"], request=UserCreateSerializer, responses={201: UserSerializer, 400: dict})
    def post(self, request):
        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        company = self.company
        if data["role"] not in roles_for_company_type(company.company_type):
            return Response(
                {"detail": f"Role {data['role']} is not available for {company.company_type} companies"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        user = User.objects.create_user(
            email=data["email"],
            password=data["password"],
            username=data.get("username") or None,
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            role=data["role"],
            company=company,
        )

        log_action(company, request.user, "create_user", f"user:{user.pk}", {"email": user.email, "role": user.role})
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
