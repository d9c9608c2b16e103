"""
PATH: permissions/services/permission_service.py

MODULE PERMISSION SERVICE

Effective permissions = role permissions + user-specific grants,
narrowed to the modules the company type can use.

Rules:
- Admins always hold every module available to their company type.
- A company with no stored RolePermission rows at all uses the defaults.
  Once any row is stored, the stored rows are authoritative for every role,
  so revoking every module of a role leaves it empty.
- Replacements are wholesale (delete + insert) inside one transaction.
"""

from __future__ import annotations

import logging
from typing import Iterable

from django.db import transaction

from permissions.models import RolePermission, UserPermission
from permissions.roles import (
    ALL_ROLES,
    DEFAULT_ROLE_PERMISSIONS,
    ROLE_ADMIN,
    default_modules_for,
    modules_for_company_type,
    normalize_modules,
)

logger = logging.getLogger(__name__)


class PermissionServiceError(ValueError):
    pass


class InvalidModuleError(PermissionServiceError):
    pass


class InvalidRoleError(PermissionServiceError):
    pass


def _validate_modules(company, modules: Iterable[str] | None) -> list[str]:
    cleaned = normalize_modules(modules)
    available = modules_for_company_type(company.company_type)
    invalid = [m for m in cleaned if m not in available]
    if invalid:
        raise InvalidModuleError(
            f"Modules not available for {company.company_type} companies: {', '.join(sorted(invalid))}"
        )
    return cleaned


def _validate_role(role: str) -> str:
    role = (role or "").strip()
    if role not in ALL_ROLES:
        raise InvalidRoleError(f"Unknown role: {role}")
    return role


def get_role_permissions(*, company, role: str) -> list[str]:
    role = _validate_role(role)
    available = modules_for_company_type(company.company_type)

    if role == ROLE_ADMIN:
        return sorted(available)

    rows = RolePermission.objects.filter(company=company)
    if rows.exists():
        stored = rows.filter(role=role).values_list("module", flat=True)
        return sorted(m for m in stored if m in available)

    return sorted(default_modules_for(company.company_type, role) & available)


def get_user_permissions(*, company, user) -> list[str]:
    return sorted(
        UserPermission.objects.filter(company=company, user=user).values_list("module", flat=True)
    )


def get_effective_permissions(user) -> set[str]:
    company = getattr(user, "company", None)
    role = getattr(user, "role", None)
    if company is None or not role:
        return set()

    available = modules_for_company_type(company.company_type)
    if role == ROLE_ADMIN:
        return set(available)

    modules = set(get_role_permissions(company=company, role=role))
    modules.update(get_user_permissions(company=company, user=user))
    return modules & available


@transaction.atomic
def set_role_permissions(*, company, role: str, modules: Iterable[str] | None) -> list[str]:
    role = _validate_role(role)
    cleaned = _validate_modules(company, modules)

    # First edit for this company: materialise the defaults for the other roles
    if not RolePermission.objects.filter(company=company).exists():
        seed_default_role_permissions(company)

    RolePermission.objects.filter(company=company, role=role).delete()
    RolePermission.objects.bulk_create(
        [RolePermission(company=company, role=role, module=m) for m in cleaned]
    )

    logger.info("Role permissions replaced company=%s role=%s modules=%s", company.pk, role, cleaned)
    return sorted(cleaned)


@transaction.atomic
def set_user_permissions(*, company, user, modules: Iterable[str] | None) -> list[str]:
    if user.company_id != company.pk:
        raise PermissionServiceError("User does not belong to this company")

    cleaned = _validate_modules(company, modules)

    UserPermission.objects.filter(company=company, user=user).delete()
    UserPermission.objects.bulk_create(
        [UserPermission(company=company, user=user, module=m) for m in cleaned]
    )

    logger.info("User permissions replaced company=%s user=%s modules=%s", company.pk, user.pk, cleaned)
    return sorted(cleaned)


@transaction.atomic
def seed_default_role_permissions(company) -> int:
    """
    Store the default role -> module rows for a company that has none yet.
    Returns the number of rows created (0 once the company has customised
    or seeded its permissions, so revoked modules stay revoked).
    """
    if RolePermission.objects.filter(company=company).exists():
        return 0

    created = 0
    by_role = DEFAULT_ROLE_PERMISSIONS.get(company.company_type, {})
    for role, modules in by_role.items():
        for module in sorted(modules):
            _, was_created = RolePermission.objects.get_or_create(
                company=company, role=role, module=module
            )
            created += int(was_created)
    return created
