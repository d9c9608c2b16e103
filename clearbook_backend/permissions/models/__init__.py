# permissions/models/__init__.py

from permissions.models.audit_log import AuditLog
from permissions.models.role_permission import RolePermission
from permissions.models.user_permission import UserPermission

__all__ = [
    "RolePermission",
    "UserPermission",
    "AuditLog",
]
