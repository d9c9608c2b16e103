# companies/tenancy.py

"""
======================================================
PATH: companies/tenancy.py
======================================================
TENANT RESOLUTION

Answers ONE question: "Which company is this request acting for?"

Rule (strict):
- The company is ALWAYS taken from the authenticated user (request.user.company).
- A client-supplied company_id is never trusted.
- Users without a company (or with an inactive one) are denied (403).

Views scope every queryset with the resolved company, so cross-company
object ids resolve to 404 rather than leaking data.
"""

from __future__ import annotations

from rest_framework.exceptions import PermissionDenied

from companies.models import Company


class TenantResolutionError(PermissionDenied):
    default_detail = "Your account is not linked to an active company."
    default_code = "no_company"


def get_user_company(user) -> Company | None:
    if not user or not getattr(user, "is_authenticated", False):
        return None
    return getattr(user, "company", None)


def get_request_company(request) -> Company:
    cached = getattr(request, "_clearbook_company", None)
    if cached is not None:
        return cached

    company = get_user_company(getattr(request, "user", None))
    if company is None:
        raise TenantResolutionError()
    if not company.is_active:
        raise TenantResolutionError("Company is inactive.")

    request._clearbook_company = company
    return company


class CompanyScopedMixin:
    """
    View mixin exposing `self.company` for the current request.

    Usage:
        class InvoiceListView(CompanyScopedMixin, GenericAPIView):
            def get(self, request):
                qs = SalesInvoice.objects.filter(company=self.company)
    """

    @property
    def company(self) -> Company:
        return get_request_company(self.request)
