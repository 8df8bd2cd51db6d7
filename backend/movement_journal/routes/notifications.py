# Overview: Flask API routes for notification operations; parses input and returns JSON responses.

from flask import Blueprint, request, g, current_app

from ..decorators import require_auth
from ..errors import AuthorizationError, ServiceError
from ..permissions import is_admin
from ..responses import ok, service_error, internal_error
from ..services import notification_service


notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


def _owner_scope() -> int | None:
    """Administrators may act on any notification; everyone else on their own."""
    return None if is_admin(g.current_user) else g.current_user.id


@notifications_bp.get("")
@require_auth
def list_own_notifications_route():
    try:
        return ok(notifications=notification_service.list_for_user(g.current_user.id))
    except Exception:
        return internal_error("list notifications")


@notifications_bp.get("/<int:user_id>")
@require_auth
def list_notifications_route(user_id: int):
    if user_id != g.current_user.id and not is_admin(g.current_user):
        return service_error(AuthorizationError("You can only read your own notifications"))
    try:
        return ok(notifications=notification_service.list_for_user(user_id))
    except Exception:
        return internal_error("list notifications")


@notifications_bp.put("/<int:notification_id>/read")
@require_auth
def mark_read_route(notification_id: int):
    try:
        notification_service.mark_read(notification_id, owner_id=_owner_scope())
        return ok()
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("mark notification as read")


@notifications_bp.put("/bulk/read")
@require_auth
def bulk_mark_read_route():
    try:
        data = request.get_json(silent=True) or {}
        updated = notification_service.bulk_mark_read(data.get("ids"), owner_id=_owner_scope())
        return ok(updated=updated)
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("mark notifications as read")


@notifications_bp.delete("/<int:notification_id>")
@require_auth
def delete_notification_route(notification_id: int):
    try:
        notification_service.delete_notification(notification_id, owner_id=_owner_scope())
        return ok()
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("delete notification")


@notifications_bp.delete("/bulk")
@notifications_bp.post("/bulk/delete")
@require_auth
def bulk_delete_notifications_route():
    try:
        data = request.get_json(silent=True) or {}
        deleted = notification_service.bulk_delete(data.get("ids"), owner_id=_owner_scope())
        current_app.logger.info("Bulk deleted %s notifications (actor=%s)", deleted, g.current_user.id)
        return ok(deleted=deleted)
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("delete notifications")
