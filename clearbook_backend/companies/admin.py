# companies/admin.py

from django.contrib import admin

from companies.models import Company


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("company_id", "name", "company_type", "currency", "payment_form_locked", "is_active")
    list_filter = ("company_type", "is_active")
    search_fields = ("company_id", "name")

    def get_readonly_fields(self, request, obj=None):
        if obj is not None:
            return ("company_id", "company_type", "created_at", "updated_at")
        return ("created_at", "updated_at")
