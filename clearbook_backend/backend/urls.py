# backend/urls.py
"""
PROJECT URLS

Every business route lives under /api/<module>/ and acts for the caller's
company (taken from the authenticated user, never from the request).

Public endpoints:
- /api/           index of modules and auth routes
- /api/health/    database check for load balancers
- /api/docs/      Swagger UI over the drf-spectacular schema

ADMIN_PATH moves the Django admin off /admin/ in production.
"""

from __future__ import annotations

from django.conf import settings
from django.contrib import admin
from django.db import connections
from django.db.utils import DatabaseError
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.utils import extend_schema
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

# (url prefix, urlconf) per business module, in menu order
MODULE_URLCONFS = [
    ("company", "companies.api.urls"),
    ("permissions", "permissions.api.urls"),
    ("accounting", "accounting.api.urls"),
    ("inventory", "inventory.api.urls"),
    ("manufacturing", "manufacturing.api.urls"),
    ("sales", "sales.api.urls"),
    ("purchases", "purchases.api.urls"),
]


@extend_schema(tags=["meta"], responses={200: dict})
@api_view(["GET"])
@permission_classes([AllowAny])
def api_root(request):
    return Response(
        {
            "message": "ClearBook ERP API is running",
            "auth": {
                "login": "/api/auth/login/",
                "me": "/api/auth/me/",
                "users": "/api/auth/users/",
                "jwt_create": "/api/auth/jwt/create/",
                "jwt_refresh": "/api/auth/jwt/refresh/",
            },
            "docs": {"swagger": "/api/docs/", "schema": "/api/schema/"},
            "modules": {prefix: f"/api/{prefix}/" for prefix, _ in MODULE_URLCONFS},
        }
    )


@extend_schema(tags=["meta"], responses={200: dict, 503: dict})
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    try:
        with connections["default"].cursor() as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except DatabaseError as exc:
        return Response(
            {"status": "degraded", "db": "down", "error": str(exc)},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return Response({"status": "ok", "db": "ok"})


ADMIN_PATH = getattr(settings, "ADMIN_PATH", "admin/")
if not ADMIN_PATH.endswith("/"):
    ADMIN_PATH = f"{ADMIN_PATH}/"


api_urlpatterns = [
    path("", api_root, name="api-root"),
    path("health/", health_check, name="health-check"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("auth/jwt/create/", TokenObtainPairView.as_view(), name="jwt-create"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    path("auth/", include("users.urls")),
] + [path(f"{prefix}/", include(urlconf)) for prefix, urlconf in MODULE_URLCONFS]

urlpatterns = [
    path(ADMIN_PATH, admin.site.urls),
    path("", RedirectView.as_view(url="/api/docs/", permanent=False), name="root"),
    path("api/", include(api_urlpatterns)),
]
