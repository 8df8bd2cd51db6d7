# Overview: Flask API routes for user directory operations; parses input and returns JSON responses.

from flask import Blueprint, request, g, current_app

from ..decorators import require_auth, require_permission
from ..errors import AuthorizationError, ServiceError
from ..permissions import role_has_permission
from ..responses import ok, service_error, internal_error
from ..services import audit_service, user_service


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


def _can_manage_users() -> bool:
    return role_has_permission(g.current_user.role, "MANAGE_USERS")


def _require_self_or_manager(user_id: int) -> None:
    if g.current_user.id != user_id and not _can_manage_users():
        raise AuthorizationError("You can only change your own profile")


@users_bp.get("")
@require_auth
@require_permission("VIEW_USERS")
def list_users_route():
    try:
        return ok(users=user_service.list_users())
    except Exception:
        return internal_error("list users")


@users_bp.post("")
@require_auth
@require_permission("MANAGE_USERS")
def create_user_route():
    try:
        data = request.get_json(silent=True) or {}
        user = user_service.create_user(data, actor_id=g.current_user.id)
        return ok(201, id=user.id, user=user.to_dict())
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("create user")


@users_bp.get("/<int:user_id>")
@require_auth
@require_permission("VIEW_USERS")
def get_user_route(user_id: int):
    try:
        return ok(user=user_service.get_user(user_id).to_dict())
    except ServiceError as exc:
        return service_error(exc)


@users_bp.put("/<int:user_id>")
@require_auth
def update_user_route(user_id: int):
    """Full profile update. Self-service callers cannot touch privileged fields."""
    try:
        _require_self_or_manager(user_id)
        data = request.get_json(silent=True) or {}
        user = user_service.update_profile(
            user_id,
            data,
            actor_id=g.current_user.id,
            allow_privileged=_can_manage_users(),
        )
        return ok(user=user.to_dict())
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("update user")


@users_bp.put("/<int:user_id>/status")
@require_auth
@require_permission("MANAGE_USERS")
def update_user_status_route(user_id: int):
    try:
        data = request.get_json(silent=True) or {}
        user = user_service.update_status(user_id, data.get("status"), actor_id=g.current_user.id)
        return ok(user=user.to_dict())
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("update user status")


@users_bp.put("/<int:user_id>/presence")
@require_auth
def update_user_presence_route(user_id: int):
    try:
        _require_self_or_manager(user_id)
        data = request.get_json(silent=True) or {}
        user = user_service.update_presence(
            user_id,
            data.get("online_status"),
            data.get("status_message"),
            actor_id=g.current_user.id,
        )
        return ok(user=user.to_dict())
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("update presence")


@users_bp.delete("/<int:user_id>")
@require_auth
@require_permission("MANAGE_USERS")
def delete_user_route(user_id: int):
    try:
        user_service.delete_user(user_id, actor_id=g.current_user.id)
        return ok(message="User deleted")
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("delete user")


@users_bp.delete("/bulk")
@require_auth
@require_permission("MANAGE_USERS")
def bulk_delete_users_route():
    try:
        data = request.get_json(silent=True) or {}
        deleted = user_service.bulk_delete_users(data.get("ids"), actor_id=g.current_user.id)
        current_app.logger.info("Bulk deleted %s users (actor=%s)", deleted, g.current_user.id)
        return ok(deleted=deleted)
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("delete users")


@users_bp.put("/bulk/status")
@require_auth
@require_permission("MANAGE_USERS")
def bulk_update_status_route():
    try:
        data = request.get_json(silent=True) or {}
        updated = user_service.bulk_update_status(
            data.get("ids"),
            data.get("status"),
            actor_id=g.current_user.id,
        )
        current_app.logger.info("Bulk status update on %s users (actor=%s)", updated, g.current_user.id)
        return ok(updated=updated)
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("update user statuses")


@users_bp.post("/<int:user_id>/avatar")
@require_auth
def upload_avatar_route(user_id: int):
    try:
        _require_self_or_manager(user_id)
        user = user_service.attach_avatar(
            user_id,
            request.files.get("avatar"),
            upload_folder=current_app.config["UPLOAD_FOLDER"],
            allowed_extensions=current_app.config["ALLOWED_AVATAR_EXTENSIONS"],
            actor_id=g.current_user.id,
        )
        return ok(avatar_url=user.avatar_url)
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("upload avatar")


@users_bp.delete("/<int:user_id>/avatar")
@require_auth
def delete_avatar_route(user_id: int):
    try:
        _require_self_or_manager(user_id)
        user_service.detach_avatar(
            user_id,
            upload_folder=current_app.config["UPLOAD_FOLDER"],
            actor_id=g.current_user.id,
        )
        return ok(message="Avatar removed")
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("delete avatar")


@users_bp.get("/<int:user_id>/activity")
@require_auth
def user_activity_route(user_id: int):
    if g.current_user.id != user_id and not role_has_permission(g.current_user.role, "VIEW_AUDIT_LOG"):
        return service_error(AuthorizationError("You can only view your own activity"))
    try:
        return ok(activity=audit_service.list_for_user(user_id))
    except Exception:
        return internal_error("load user activity")
