# users/admin.py

"""
Django admin for ClearBook users.

Each user belongs to one company and holds one role. Changing either moves
the user's module access, so both sit next to the identity fields and are
filterable on the list page.
"""

from __future__ import annotations

from django.contrib import admin
from django.contrib.auth import get_user_model
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

User = get_user_model()


@admin.register(User)
class CompanyUserAdmin(DjangoUserAdmin):
    ordering = ("company__company_id", "email")
    list_display = ("email", "username", "company", "role", "is_active", "last_login")
    list_filter = ("company", "role", "is_active", "is_superuser")
    list_select_related = ("company",)
    search_fields = ("email", "username", "first_name", "last_name", "company__company_id", "company__name")
    autocomplete_fields = ("company",)
    readonly_fields = ("last_login", "created_at")

    fieldsets = (
        ("Sign-in", {"fields": ("email", "username", "password")}),
        ("Company access", {"fields": ("company", "role")}),
        ("Profile", {"fields": ("first_name", "last_name")}),
        ("Django admin", {"classes": ("collapse",), "fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Activity", {"fields": ("last_login", "created_at")}),
    )

    add_fieldsets = (
        (
            "New company user",
            {
                "classes": ("wide",),
                "fields": ("email", "username", "company", "role", "password1", "password2", "is_active"),
            },
        ),
    )
