# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- MOVEMENTS --

MOVEMENT_PERMISSIONS = [
    (
        "SUBMIT_MOVEMENT",
        "Submit Movement",
        "Log a field movement for yourself",
        PermissionCategory.MOVEMENTS,
    ),
    (
        "VIEW_ALL_MOVEMENTS",
        "View All Movements",
        "See every movement regardless of owner or assignment",
        PermissionCategory.MOVEMENTS,
    ),
    (
        "ACKNOWLEDGE_MOVEMENT",
        "Acknowledge Movement",
        "Move pending movements to acknowledged",
        PermissionCategory.MOVEMENTS,
    ),
    (
        "ASSIGN_MOVEMENT",
        "Assign Movement",
        "Assign a movement to any supervisor",
        PermissionCategory.MOVEMENTS,
    ),
    (
        "CLAIM_MOVEMENT",
        "Claim Movement",
        "Self-assign an unassigned movement",
        PermissionCategory.MOVEMENTS,
    ),
    (
        "APPROVE_MOVEMENT",
        "Approve Movement",
        "Approve or reject a movement",
        PermissionCategory.MOVEMENTS,
    ),
    (
        "MANAGE_MOVEMENTS",
        "Manage Movements",
        "Edit or delete any movement, including bulk deletion",
        PermissionCategory.MOVEMENTS,
    ),
]


# -- USERS --

USER_PERMISSIONS = [
    (
        "VIEW_USERS",
        "View Users",
        "View the staff directory",
        PermissionCategory.USERS,
    ),
    (
        "MANAGE_USERS",
        "Manage Users",
        "Create, edit, activate/deactivate and delete users",
        PermissionCategory.USERS,
    ),
]


# -- REPORTS --

REPORT_PERMISSIONS = [
    (
        "VIEW_DASHBOARD",
        "View Dashboard",
        "View dashboard statistics scoped to your role",
        PermissionCategory.REPORTS,
    ),
    (
        "VIEW_REPORTS",
        "View Reports",
        "View organisation-wide movement reports",
        PermissionCategory.REPORTS,
    ),
]


# -- KNOWLEDGE BASE --

KNOWLEDGE_BASE_PERMISSIONS = [
    (
        "VIEW_KNOWLEDGE_BASE",
        "View Knowledge Base",
        "Browse knowledge-base entries",
        PermissionCategory.KNOWLEDGE_BASE,
    ),
    (
        "MANAGE_KNOWLEDGE_BASE",
        "Manage Knowledge Base",
        "Publish knowledge-base entries",
        PermissionCategory.KNOWLEDGE_BASE,
    ),
]


# -- SYSTEM --

SYSTEM_PERMISSIONS = [
    (
        "VIEW_AUDIT_LOG",
        "View Audit Log",
        "View the system-wide audit trail",
        PermissionCategory.SYSTEM,
    ),
]


PERMISSION_DEFINITIONS = (
    MOVEMENT_PERMISSIONS
    + USER_PERMISSIONS
    + REPORT_PERMISSIONS
    + KNOWLEDGE_BASE_PERMISSIONS
    + SYSTEM_PERMISSIONS
)
