# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    MOVEMENTS = "MOVEMENTS"
    USERS = "USERS"
    REPORTS = "REPORTS"
    KNOWLEDGE_BASE = "KNOWLEDGE_BASE"
    SYSTEM = "SYSTEM"
