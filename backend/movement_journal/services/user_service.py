# Overview: Service-layer operations for the user directory; encapsulates business logic and database work.

"""
User Directory Service

Profile CRUD, reporting lines and district assignment.

DISTRICTS: transported as an ordered list of strings and stored one row per
district in user_districts. A comma-joined string is accepted on input for
older clients and split back into the list.

DELETION: a user is removed together with everything they own (movements,
audit entries, knowledge-base entries, notifications, sessions, districts).
Rows that merely point at the user (supervisor_id, assigned_supervisor_id,
approved_by) are nulled, never deleted. Single and bulk deletion run in one
transaction; any failure rolls back the whole request.
"""

from __future__ import annotations

import os
import secrets
import time

from sqlalchemy.exc import IntegrityError
from werkzeug.utils import secure_filename

from ..errors import AuthorizationError, NotFoundError, ValidationError, require_id_list
from ..extensions import db
from ..models import (
    AuditLog,
    KnowledgeBaseEntry,
    Movement,
    Notification,
    SessionToken,
    User,
    UserDistrict,
)
from ..permissions import VALID_ROLES
from . import audit_service
from .auth_service import hash_password


VALID_USER_STATUSES = {"active", "inactive"}

PROFILE_FIELDS = (
    "id_number",
    "username",
    "full_name",
    "position",
    "division",
    "base_office",
    "role",
    "email",
    "phone_number",
    "location",
    "date_of_birth",
    "language",
    "locale",
    "first_day_of_week",
    "website",
    "x_handle",
    "fediverse_handle",
    "organisation",
    "profile_role",
    "headline",
    "about",
)

# Fields a user may not change on their own profile.
PRIVILEGED_FIELDS = ("id_number", "username", "role", "supervisor_id", "division", "district")


def normalize_districts(value) -> list[str]:
    """Accept a list or a comma-joined string; return trimmed, non-empty entries in order."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        raise ValidationError("district must be a list of strings")
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _same_id(value, current: int | None) -> bool:
    value = _blank_to_none(value)
    if value is None:
        return current is None
    try:
        return int(value) == current
    except (TypeError, ValueError):
        return False


def _resolve_supervisor_id(value, *, user_id: int | None = None) -> int | None:
    value = _blank_to_none(value)
    if value is None:
        return None
    try:
        supervisor_id = int(value)
    except (TypeError, ValueError):
        raise ValidationError("supervisor_id must be an integer")
    if user_id is not None and supervisor_id == user_id:
        raise ValidationError("A user cannot supervise themselves")
    if not db.session.get(User, supervisor_id):
        raise ValidationError(f"Supervisor {supervisor_id} does not exist")
    return supervisor_id


def _validate_role(role) -> str:
    if role not in VALID_ROLES:
        raise ValidationError(f"Invalid role '{role}'. Must be one of: {', '.join(VALID_ROLES)}")
    return role


def _commit_unique():
    """Commit, turning unique-constraint violations into ValidationError."""
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise ValidationError(str(exc.orig))


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def list_users() -> list[dict]:
    users = db.session.query(User).order_by(User.id.asc()).all()
    return [u.to_dict() for u in users]


def create_user(data: dict, *, actor_id: int | None) -> User:
    """
    Create a user with a bcrypt-hashed password.

    Raises:
        ValidationError: missing fields, bad role/supervisor, weak password,
            or username/id_number already taken
    """
    username = (data.get("username") or "").strip()
    password = data.get("password")
    if not username or not password:
        raise ValidationError("username and password are required")

    user = User(
        username=username,
        password_hash=hash_password(password),
        role=_validate_role(data.get("role")),
        status="active",
    )
    for field in PROFILE_FIELDS:
        if field in ("username", "role"):
            continue
        if field in data:
            setattr(user, field, _blank_to_none(data.get(field)))
    user.supervisor_id = _resolve_supervisor_id(data.get("supervisor_id"))
    user.set_districts(normalize_districts(data.get("district")))

    db.session.add(user)
    try:
        db.session.flush()
    except IntegrityError as exc:
        db.session.rollback()
        raise ValidationError(str(exc.orig))

    audit_service.log_action(
        actor_id or user.id,
        "USER_CREATED",
        f"Created user {username} ({user.role})",
    )
    _commit_unique()
    return user


def update_profile(user_id: int, data: dict, *, actor_id: int, allow_privileged: bool) -> User:
    """
    Full profile update. Only keys present in `data` are changed; the
    password changes only when a non-empty one is supplied.

    allow_privileged=False (self-service) rejects changes to PRIVILEGED_FIELDS.
    """
    user = get_user(user_id)

    if not allow_privileged:
        for field in PRIVILEGED_FIELDS:
            if field not in data:
                continue
            if field == "district":
                changed = normalize_districts(data[field]) != user.districts
            elif field == "supervisor_id":
                changed = not _same_id(data[field], user.supervisor_id)
            else:
                changed = _blank_to_none(data[field]) != getattr(user, field)
            if changed:
                raise AuthorizationError(f"Only administrators can change {field}")

    with db.session.no_autoflush:
        if "supervisor_id" in data:
            user.supervisor_id = _resolve_supervisor_id(data["supervisor_id"], user_id=user.id)
        if "district" in data:
            user.set_districts(normalize_districts(data["district"]))

        for field in PROFILE_FIELDS:
            if field not in data:
                continue
            value = _blank_to_none(data[field])
            if field == "username" and not value:
                raise ValidationError("username cannot be empty")
            if field == "role":
                value = _validate_role(value)
            setattr(user, field, value)

        if data.get("password"):
            user.password_hash = hash_password(data["password"])

    audit_service.log_action(
        actor_id,
        "USER_UPDATED",
        f"Updated profile for {user.username or 'user ' + str(user_id)}",
    )
    _commit_unique()
    return user


def update_status(user_id: int, status: str, *, actor_id: int) -> User:
    """Set active/inactive only."""
    if status not in VALID_USER_STATUSES:
        raise ValidationError("status must be 'active' or 'inactive'")
    user = get_user(user_id)
    user.status = status
    audit_service.log_action(actor_id, "USER_STATUS_UPDATE", f"User {user.username} status updated to {status}")
    db.session.commit()
    return user


def update_presence(user_id: int, online_status: str | None, status_message: str | None, *, actor_id: int) -> User:
    """Set presence (online_status + status_message) only."""
    if not online_status:
        raise ValidationError("online_status is required")
    user = get_user(user_id)
    user.online_status = online_status
    user.status_message = status_message
    audit_service.log_action(actor_id, "USER_PRESENCE_UPDATE", f"User {user.username} is now {online_status}")
    db.session.commit()
    return user


def bulk_update_status(ids, status: str, *, actor_id: int) -> int:
    """
    Set status on several users atomically.

    A missing id aborts the batch; the caller rolls the session back.
    """
    if status not in VALID_USER_STATUSES:
        raise ValidationError("Invalid request parameters")
    user_ids = require_id_list(ids, "user IDs")
    for user_id in user_ids:
        updated = db.session.query(User).filter(User.id == user_id).update(
            {User.status: status}, synchronize_session=False
        )
        if not updated:
            raise NotFoundError(f"User {user_id} not found")
        audit_service.log_action(actor_id, "USER_STATUS_UPDATE", f"User {user_id} status updated to {status}")
    db.session.commit()
    return len(user_ids)


def _purge_user(user_id: int) -> str:
    """
    Remove one user and everything they own inside the current transaction.

    Returns the deleted username. Raises NotFoundError if the user is missing.
    """
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError(f"User {user_id} not found")
    username = user.username

    db.session.query(Movement).filter(Movement.staff_id == user_id).delete(synchronize_session=False)
    db.session.query(User).filter(User.supervisor_id == user_id).update(
        {User.supervisor_id: None}, synchronize_session=False
    )
    db.session.query(Movement).filter(Movement.assigned_supervisor_id == user_id).update(
        {Movement.assigned_supervisor_id: None}, synchronize_session=False
    )
    db.session.query(Movement).filter(Movement.approved_by == user_id).update(
        {Movement.approved_by: None}, synchronize_session=False
    )
    db.session.query(AuditLog).filter(AuditLog.user_id == user_id).delete(synchronize_session=False)
    db.session.query(KnowledgeBaseEntry).filter(KnowledgeBaseEntry.created_by == user_id).delete(
        synchronize_session=False
    )
    db.session.query(Notification).filter(Notification.user_id == user_id).delete(synchronize_session=False)
    db.session.query(SessionToken).filter(SessionToken.user_id == user_id).delete(synchronize_session=False)
    db.session.query(UserDistrict).filter(UserDistrict.user_id == user_id).delete(synchronize_session=False)

    db.session.expunge(user)
    db.session.query(User).filter(User.id == user_id).delete(synchronize_session=False)
    return username


def delete_user(user_id: int, *, actor_id: int | None) -> str:
    if actor_id is not None and actor_id == user_id:
        raise ValidationError("You cannot delete your own account")
    username = _purge_user(user_id)
    audit_service.log_action(actor_id, "USER_DELETED", f"Deleted user {username} (ID: {user_id})")
    db.session.commit()
    return username


def bulk_delete_users(ids, *, actor_id: int | None) -> int:
    """
    Delete several users in one transaction, one USER_DELETED entry each.

    Any missing id aborts the whole batch.
    """
    user_ids = list(dict.fromkeys(require_id_list(ids, "user IDs")))
    if actor_id is not None and actor_id in user_ids:
        raise ValidationError("You cannot delete your own account")
    for user_id in user_ids:
        username = _purge_user(user_id)
        audit_service.log_action(actor_id, "USER_DELETED", f"Deleted user {username} (ID: {user_id})")
    db.session.commit()
    return len(user_ids)


# =============================================================================
# AVATARS
# =============================================================================

def _avatar_path(upload_folder: str, avatar_url: str | None) -> str | None:
    if not avatar_url:
        return None
    return os.path.join(upload_folder, os.path.basename(avatar_url))


def _remove_file(path: str | None) -> bool:
    if path and os.path.exists(path):
        os.remove(path)
        return True
    return False


def attach_avatar(user_id: int, file_storage, *, upload_folder: str, allowed_extensions, actor_id: int) -> User:
    """
    Store an uploaded image and point the user's avatar_url at it.

    The file write and the row update are not one transaction: the new file
    is removed again if the update fails, and the previous file is removed
    after the update commits.
    """
    if file_storage is None or not file_storage.filename:
        raise ValidationError("No file uploaded.")

    original = secure_filename(file_storage.filename)
    ext = os.path.splitext(original)[1].lower()
    if ext.lstrip(".") not in allowed_extensions:
        raise ValidationError(f"Unsupported file type '{ext or original}'")

    user = get_user(user_id)
    previous_path = _avatar_path(upload_folder, user.avatar_url)

    os.makedirs(upload_folder, exist_ok=True)
    filename = f"avatar-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"
    path = os.path.join(upload_folder, filename)
    file_storage.save(path)

    try:
        user.avatar_url = f"/uploads/{filename}"
        audit_service.log_action(actor_id, "USER_AVATAR_UPDATED", f"Avatar updated for {user.username}")
        db.session.commit()
    except Exception:
        db.session.rollback()
        _remove_file(path)
        raise

    if previous_path and previous_path != path:
        _remove_file(previous_path)
    return user


def detach_avatar(user_id: int, *, upload_folder: str, actor_id: int) -> User:
    """Delete the avatar file (if present) and clear avatar_url."""
    user = get_user(user_id)
    _remove_file(_avatar_path(upload_folder, user.avatar_url))
    user.avatar_url = None
    audit_service.log_action(actor_id, "USER_AVATAR_REMOVED", f"Avatar removed for {user.username}")
    db.session.commit()
    return user
