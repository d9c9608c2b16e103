"""
PATH: companies/services/company_service.py

COMPANY SERVICE

- update_company: editable profile fields only (company_type/company_id are immutable)
- set_payment_form_lock: admin kill-switch for payment voucher creation
- bootstrap_company: company + default chart + default role permissions + first admin (idempotent)
"""

from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from django.db import transaction

from companies.models import Company

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "address", "phone", "email", "currency")


class CompanyServiceError(ValueError):
    pass


@transaction.atomic
def update_company(*, company: Company, **changes) -> Company:
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise CompanyServiceError(f"Fields cannot be changed: {', '.join(sorted(unknown))}")

    for field, value in changes.items():
        setattr(company, field, value)

    company.save()
    logger.info("Company updated company=%s fields=%s", company.pk, sorted(changes))
    return company


@transaction.atomic
def set_payment_form_lock(*, company: Company, locked: bool) -> Company:
    company = Company.objects.select_for_update().get(pk=company.pk)
    company.payment_form_locked = bool(locked)
    company.save(update_fields=["payment_form_locked", "updated_at"])
    logger.info("Payment form lock company=%s locked=%s", company.pk, company.payment_form_locked)
    return company


@transaction.atomic
def bootstrap_company(
    *,
    company_id: str,
    name: str,
    company_type: str = Company.TYPE_MANUFACTURING,
    currency: str | None = None,
    admin_email: str | None = None,
    admin_password: str | None = None,
) -> dict:
    """
    Create (or reuse) a company and seed everything it needs to operate.
    Safe to run repeatedly.
    """
    from accounting.services.chart_setup import seed_default_chart
    from permissions.services.permission_service import seed_default_role_permissions
    from permissions.roles import ROLE_ADMIN

    company_id = (company_id or "").strip().upper()
    defaults = {"name": name, "company_type": company_type}
    if currency:
        defaults["currency"] = currency

    company, created = Company.objects.get_or_create(company_id=company_id, defaults=defaults)

    accounts_created = seed_default_chart(company)
    permissions_created = seed_default_role_permissions(company)

    admin = None
    admin_created = False
    if admin_email:
        User = get_user_model()
        admin = User.objects.filter(email__iexact=admin_email).first()
        if admin is None:
            admin = User.objects.create_user(
                email=admin_email,
                password=admin_password,
                company=company,
                role=ROLE_ADMIN,
            )
            admin_created = True

    logger.info(
        "Bootstrapped company=%s created=%s accounts=%s permissions=%s admin_created=%s",
        company.pk,
        created,
        accounts_created,
        permissions_created,
        admin_created,
    )

    return {
        "company": company,
        "created": created,
        "accounts_created": accounts_created,
        "permissions_created": permissions_created,
        "admin": admin,
        "admin_created": admin_created,
    }
