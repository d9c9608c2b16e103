# permissions/roles.py

from __future__ import annotations

from typing import Iterable, Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
# These describe what the staff member does inside ONE company.
ROLE_ADMIN = "admin"
ROLE_ACCOUNTANT = "accountant"
ROLE_PRODUCTION_MANAGER = "production_manager"
ROLE_STORE_MANAGER = "store_manager"
ROLE_PROCUREMENT_MANAGER = "procurement_manager"
ROLE_SALES_MANAGER = "sales_manager"
ROLE_STAFF = "staff"

ROLE_CHOICES = [
    (ROLE_ADMIN, "Admin"),
    (ROLE_ACCOUNTANT, "Accountant"),
    (ROLE_PRODUCTION_MANAGER, "Production Manager"),
    (ROLE_STORE_MANAGER, "Store Manager"),
    (ROLE_PROCUREMENT_MANAGER, "Procurement Manager"),
    (ROLE_SALES_MANAGER, "Sales Manager"),
    (ROLE_STAFF, "Staff"),
]

ALL_ROLES = {value for value, _ in ROLE_CHOICES}


# =========================================================
# COMPANY TYPE CONSTANTS (TENANT CONFIG)
# =========================================================
# Mirrors companies.models.Company.company_type values.
COMPANY_MANUFACTURING = "manufacturing"
COMPANY_SERVICES = "services"

COMPANY_TYPES = {COMPANY_MANUFACTURING, COMPANY_SERVICES}


# =========================================================
# MODULES (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect modules, not raw roles.
MODULE_DASHBOARD = "view_dashboard"
MODULE_MANAGE_USERS = "manage_users"
MODULE_ACCOUNTING = "view_accounting"
MODULE_SETTINGS = "manage_settings"
MODULE_PRODUCTION = "view_production"
MODULE_INVENTORY = "view_inventory"
MODULE_PROCUREMENT = "view_procurement"
MODULE_SALES = "view_sales"

MODULE_LABELS = {
    MODULE_DASHBOARD: "Dashboard",
    MODULE_MANAGE_USERS: "User Management",
    MODULE_ACCOUNTING: "Accounting",
    MODULE_SETTINGS: "Settings",
    MODULE_PRODUCTION: "Production",
    MODULE_INVENTORY: "Inventory",
    MODULE_PROCUREMENT: "Procurement",
    MODULE_SALES: "Sales",
}

ALL_MODULES = set(MODULE_LABELS)

# Only manufacturing companies can ever see these.
MANUFACTURING_ONLY_MODULES = {MODULE_PRODUCTION}


# =========================================================
# ROLE → MODULE MAP (DEFAULT, PER COMPANY TYPE)
# =========================================================
DEFAULT_ROLE_PERMISSIONS: dict[str, dict[str, set[str]]] = {
    COMPANY_MANUFACTURING: {
        ROLE_ADMIN: set(ALL_MODULES),
        ROLE_ACCOUNTANT: {MODULE_DASHBOARD, MODULE_ACCOUNTING},
        ROLE_PRODUCTION_MANAGER: {MODULE_DASHBOARD, MODULE_PRODUCTION},
        ROLE_STORE_MANAGER: {MODULE_DASHBOARD, MODULE_INVENTORY},
        ROLE_PROCUREMENT_MANAGER: {MODULE_DASHBOARD, MODULE_PROCUREMENT},
        ROLE_SALES_MANAGER: {MODULE_DASHBOARD, MODULE_SALES},
        ROLE_STAFF: {MODULE_DASHBOARD},
    },
    COMPANY_SERVICES: {
        ROLE_ADMIN: ALL_MODULES - MANUFACTURING_ONLY_MODULES,
        ROLE_ACCOUNTANT: {MODULE_DASHBOARD, MODULE_ACCOUNTING},
        ROLE_STAFF: {MODULE_DASHBOARD},
    },
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def modules_for_company_type(company_type: str | None) -> set[str]:
    if company_type == COMPANY_MANUFACTURING:
        return set(ALL_MODULES)
    return ALL_MODULES - MANUFACTURING_ONLY_MODULES


def roles_for_company_type(company_type: str | None) -> list[str]:
    defaults = DEFAULT_ROLE_PERMISSIONS.get(company_type or "", {})
    return [value for value, _ in ROLE_CHOICES if value in defaults]


def default_modules_for(company_type: str | None, role: str | None) -> set[str]:
    by_role = DEFAULT_ROLE_PERMISSIONS.get(company_type or "", {})
    return set(by_role.get(role or "", set()))


def normalize_modules(modules: Iterable[str] | None) -> list[str]:
    out = []
    seen = set()
    for m in modules or []:
        key = str(m or "").strip()
        if key and key not in seen:
            out.append(key)
            seen.add(key)
    return out


def effective_modules_for(request, user) -> set[str]:
    """
    Role permissions + user-specific grants, narrowed to the company type.

    DB-backed lookups live in permissions.services.permission_service; imported
    lazily to keep this module importable from models/settings without app loading.
    """
    from permissions.services.permission_service import get_effective_permissions

    return get_effective_permissions(user)


# =========================================================
# Base Role Permission
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Base permission for role-based access control.

    Subclasses must define:
    - allowed_roles (set)
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        user_role = get_user_role(user)
        if not user_role:
            return False

        return user_role in self.allowed_roles


# =========================================================
# Module Permissions (RECOMMENDED FOR NEW CODE)
# =========================================================
class HasModulePermission(BasePermission):
    """
    Require a specific module.

    Usage:
        permission_classes = [IsAuthenticated, HasModulePermission]
        required_module = MODULE_ACCOUNTING
    """

    message = "You do not have access to this module."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_module", None)
        if not required:
            # Deny-by-default to avoid accidental open endpoints
            return False

        return required in effective_modules_for(request, user)


class HasAnyModulePermission(BasePermission):
    """
    Require ANY module from a set.

    Usage:
        required_any_modules = {MODULE_SALES, MODULE_ACCOUNTING}
    """

    message = "You do not have access to this module."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_any_modules", None)
        if not required:
            return False

        modules = effective_modules_for(request, user)
        return any(m in modules for m in set(required))


# =========================================================
# Role Permissions
# =========================================================
class IsAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN}


class IsAccountantOrAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN, ROLE_ACCOUNTANT}


class CanIssueMaterial(BaseRolePermission):
    allowed_roles = {
        ROLE_ADMIN,
        ROLE_STAFF,
        ROLE_STORE_MANAGER,
        ROLE_PRODUCTION_MANAGER,
    }
