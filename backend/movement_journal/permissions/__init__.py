# Overview: Permission system package.
# Re-exports all public APIs for backwards-compatible imports.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    MOVEMENT_PERMISSIONS,
    USER_PERMISSIONS,
    REPORT_PERMISSIONS,
    KNOWLEDGE_BASE_PERMISSIONS,
    SYSTEM_PERMISSIONS,
)
from .roles import (
    DEFAULT_ROLE_PERMISSIONS,
    VALID_ROLES,
    ADMIN_ROLES,
    SUPERVISOR_ROLES,
    SYSTEM_ADMINISTRATOR,
    NETWORK_ADMINISTRATOR,
    SENIOR_FIELD_ENGINEER,
    FIELD_ENGINEER,
    NETWORK_ENGINEER_FIELD_OPS,
)
from .helpers import (
    get_all_permission_codes,
    get_role_permissions,
    role_has_permission,
    is_admin,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "MOVEMENT_PERMISSIONS",
    "USER_PERMISSIONS",
    "REPORT_PERMISSIONS",
    "KNOWLEDGE_BASE_PERMISSIONS",
    "SYSTEM_PERMISSIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "VALID_ROLES",
    "ADMIN_ROLES",
    "SUPERVISOR_ROLES",
    "SYSTEM_ADMINISTRATOR",
    "NETWORK_ADMINISTRATOR",
    "SENIOR_FIELD_ENGINEER",
    "FIELD_ENGINEER",
    "NETWORK_ENGINEER_FIELD_OPS",
    "get_all_permission_codes",
    "get_role_permissions",
    "role_has_permission",
    "is_admin",
]
