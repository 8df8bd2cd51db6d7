# Overview: Utility functions for permission lookups and validation.

from .definitions import PERMISSION_DEFINITIONS
from .roles import ADMIN_ROLES, DEFAULT_ROLE_PERMISSIONS


def get_all_permission_codes():
    """Get list of all permission codes."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def get_role_permissions(role: str | None) -> set[str]:
    """Permission codes granted to a role (empty for unknown roles)."""
    return set(DEFAULT_ROLE_PERMISSIONS.get(role, []))


def role_has_permission(role: str | None, code: str) -> bool:
    return code in get_role_permissions(role)


def is_admin(user) -> bool:
    return user is not None and user.role in ADMIN_ROLES


