# Overview: Service-layer operations for notifications; encapsulates business logic and database work.

from __future__ import annotations

from ..errors import NotFoundError, require_id_list
from ..extensions import db
from ..models import Notification, User


def notify_user(user_id: int, message: str) -> Notification:
    """Queue a notification in the current transaction (no commit)."""
    notification = Notification(user_id=user_id, message=message, is_read=False)
    db.session.add(notification)
    return notification


def notify_role(role: str, message: str) -> int:
    """Notify every user holding `role`. Returns the number of recipients."""
    recipient_ids = [row[0] for row in db.session.query(User.id).filter(User.role == role).all()]
    for user_id in recipient_ids:
        notify_user(user_id, message)
    return len(recipient_ids)


def list_for_user(user_id: int) -> list[dict]:
    items = (
        db.session.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )
    return [n.to_dict() for n in items]


def _get_owned(notification_id: int, owner_id: int | None) -> Notification:
    """
    Load a notification, treating rows owned by someone else as missing.

    owner_id=None skips the ownership check (administrators).
    """
    query = db.session.query(Notification).filter(Notification.id == notification_id)
    if owner_id is not None:
        query = query.filter(Notification.user_id == owner_id)
    notification = query.first()
    if not notification:
        raise NotFoundError(f"Notification {notification_id} not found")
    return notification


def mark_read(notification_id: int, *, owner_id: int | None) -> Notification:
    notification = _get_owned(notification_id, owner_id)
    notification.is_read = True
    db.session.commit()
    return notification


def bulk_mark_read(ids, *, owner_id: int | None) -> int:
    """
    Mark several notifications read in one transaction.

    Any missing id aborts the batch: the caller rolls the session back.
    """
    notification_ids = list(dict.fromkeys(require_id_list(ids, "notification IDs")))
    for notification_id in notification_ids:
        _get_owned(notification_id, owner_id).is_read = True
    db.session.commit()
    return len(notification_ids)


def delete_notification(notification_id: int, *, owner_id: int | None) -> None:
    db.session.delete(_get_owned(notification_id, owner_id))
    db.session.commit()


def bulk_delete(ids, *, owner_id: int | None) -> int:
    notification_ids = list(dict.fromkeys(require_id_list(ids, "notification IDs")))
    for notification_id in notification_ids:
        db.session.delete(_get_owned(notification_id, owner_id))
    db.session.commit()
    return len(notification_ids)
