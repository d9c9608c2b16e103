# permissions/admin.py

from django.contrib import admin

from permissions.models import AuditLog, RolePermission, UserPermission


@admin.register(RolePermission)
class RolePermissionAdmin(admin.ModelAdmin):
    list_display = ("company", "role", "module")
    list_filter = ("company", "role")


@admin.register(UserPermission)
class UserPermissionAdmin(admin.ModelAdmin):
    list_display = ("company", "user", "module")
    list_filter = ("company",)


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("created_at", "company", "user", "action", "entity")
    list_filter = ("company", "action")
    search_fields = ("entity", "details")
    readonly_fields = ("company", "user", "action", "entity", "details", "created_at")

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
