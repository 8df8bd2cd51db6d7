# Overview: Service-layer operations for the audit trail; append-only action records.

"""
Audit Recorder

Every mutating operation writes exactly one entry per logical action. Bulk
operations write one entry per affected item.

log_action() only adds the row to the current session: it commits together
with the mutation it describes, or rolls back with it.
"""

from __future__ import annotations

from ..extensions import db
from ..models import AuditLog, User


RECENT_AUDIT_LIMIT = 100
USER_ACTIVITY_LIMIT = 50


def log_action(user_id: int | None, action: str, details: str) -> AuditLog:
    """
    Record an action. user_id is None for system-attributed actions.
    """
    entry = AuditLog(user_id=user_id, action=action, details=details)
    db.session.add(entry)
    return entry


def list_recent(limit: int = RECENT_AUDIT_LIMIT) -> list[dict]:
    """Most recent entries across all users, with the actor's full name."""
    rows = (
        db.session.query(AuditLog, User.full_name)
        .outerjoin(User, AuditLog.user_id == User.id)
        .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )
    result = []
    for entry, full_name in rows:
        item = entry.to_dict()
        item["full_name"] = full_name
        result.append(item)
    return result


def list_for_user(user_id: int, limit: int = USER_ACTIVITY_LIMIT) -> list[dict]:
    entries = (
        db.session.query(AuditLog)
        .filter(AuditLog.user_id == user_id)
        .order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        .limit(limit)
        .all()
    )
    return [e.to_dict() for e in entries]
