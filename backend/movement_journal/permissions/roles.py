# Overview: Staff roles and the permissions each role carries.

SYSTEM_ADMINISTRATOR = "System Administrator"
NETWORK_ADMINISTRATOR = "Network Administrator"
SENIOR_FIELD_ENGINEER = "Senior Field Engineer"
FIELD_ENGINEER = "Field Engineer"
NETWORK_ENGINEER_FIELD_OPS = "Network Engineer (Field Operations)"

VALID_ROLES = (
    SYSTEM_ADMINISTRATOR,
    NETWORK_ADMINISTRATOR,
    SENIOR_FIELD_ENGINEER,
    FIELD_ENGINEER,
    NETWORK_ENGINEER_FIELD_OPS,
)

ADMIN_ROLES = frozenset({SYSTEM_ADMINISTRATOR, NETWORK_ADMINISTRATOR})
SUPERVISOR_ROLES = frozenset({SENIOR_FIELD_ENGINEER, NETWORK_ENGINEER_FIELD_OPS})


_STAFF_PERMISSIONS = [
    "SUBMIT_MOVEMENT",
    "VIEW_USERS",
    "VIEW_DASHBOARD",
    "VIEW_KNOWLEDGE_BASE",
]

_SUPERVISOR_PERMISSIONS = _STAFF_PERMISSIONS + [
    "CLAIM_MOVEMENT",
    "APPROVE_MOVEMENT",
    "MANAGE_KNOWLEDGE_BASE",
]

_ADMIN_PERMISSIONS = _STAFF_PERMISSIONS + [
    "VIEW_ALL_MOVEMENTS",
    "ACKNOWLEDGE_MOVEMENT",
    "ASSIGN_MOVEMENT",
    "APPROVE_MOVEMENT",
    "MANAGE_MOVEMENTS",
    "MANAGE_USERS",
    "VIEW_REPORTS",
    "MANAGE_KNOWLEDGE_BASE",
    "VIEW_AUDIT_LOG",
]

DEFAULT_ROLE_PERMISSIONS = {
    SYSTEM_ADMINISTRATOR: _ADMIN_PERMISSIONS,
    NETWORK_ADMINISTRATOR: _ADMIN_PERMISSIONS,
    SENIOR_FIELD_ENGINEER: _SUPERVISOR_PERMISSIONS,
    NETWORK_ENGINEER_FIELD_OPS: _SUPERVISOR_PERMISSIONS,
    FIELD_ENGINEER: _STAFF_PERMISSIONS,
}
