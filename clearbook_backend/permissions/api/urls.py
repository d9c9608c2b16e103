# permissions/api/urls.py

from django.urls import path

from permissions.api.views import (
    AuditLogListView,
    EffectivePermissionView,
    ModuleListView,
    RoleListView,
    RolePermissionView,
    UserPermissionView,
)

app_name = "permissions"

urlpatterns = [
    path("modules/", ModuleListView.as_view(), name="modules"),
    path("roles/", RoleListView.as_view(), name="roles"),
    path("roles/<str:role>/", RolePermissionView.as_view(), name="role-permissions"),
    path("users/<uuid:user_id>/", UserPermissionView.as_view(), name="user-permissions"),
    path("effective/", EffectivePermissionView.as_view(), name="effective"),
    path("audit-log/", AuditLogListView.as_view(), name="audit-log"),
]
