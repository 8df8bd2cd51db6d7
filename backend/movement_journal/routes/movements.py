# Overview: Flask API routes for movement lifecycle operations; parses input and returns JSON responses.

"""
Movement API routes

Lifecycle:
- POST /api/movements                    submit (pending)
- PUT  /api/movements/<id>/acknowledge   pending -> acknowledged
- PUT  /api/movements/<id>/assign        administrator assigns a supervisor
- PUT  /api/movements/<id>/claim         supervisor claims an unassigned movement
- PUT  /api/movements/<id>/approve       approve or reject ({status, supervisor_remarks})

Bulk:
- DELETE /api/movements/bulk             {ids: [...]} atomic
- PUT    /api/movements/bulk/acknowledge {ids: [...]} atomic
"""

from flask import Blueprint, request, g, current_app

from ..decorators import require_auth, require_permission
from ..errors import NotFoundError, ServiceError
from ..responses import ok, service_error, internal_error
from ..services import movement_service


movements_bp = Blueprint("movements", __name__, url_prefix="/api/movements")


@movements_bp.get("")
@require_auth
def list_movements_route():
    """Movements visible to the principal, newest date first."""
    try:
        return ok(movements=movement_service.list_visible(g.current_user))
    except Exception:
        return internal_error("list movements")


@movements_bp.post("")
@require_auth
@require_permission("SUBMIT_MOVEMENT")
def create_movement_route():
    try:
        data = request.get_json(silent=True) or {}
        movement = movement_service.create_movement(data, actor=g.current_user)
        return ok(201, id=movement.id, movement=movement.to_dict())
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("create movement")


@movements_bp.get("/next-id")
@require_auth
@require_permission("SUBMIT_MOVEMENT")
def next_movement_id_route():
    try:
        return ok(nextId=movement_service.next_movement_id())
    except Exception:
        return internal_error("compute next movement id")


@movements_bp.get("/<int:movement_id>")
@require_auth
def get_movement_route(movement_id: int):
    try:
        if not movement_service.can_view(movement_id, g.current_user):
            raise NotFoundError(f"Movement #{movement_id} not found")
        return ok(movement=movement_service.get_movement(movement_id).to_dict())
    except ServiceError as exc:
        return service_error(exc)


@movements_bp.put("/<int:movement_id>")
@require_auth
def update_movement_route(movement_id: int):
    try:
        data = request.get_json(silent=True) or {}
        movement = movement_service.update_movement(movement_id, data, actor=g.current_user)
        return ok(movement=movement.to_dict())
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("update movement")


@movements_bp.delete("/<int:movement_id>")
@require_auth
def delete_movement_route(movement_id: int):
    try:
        movement_service.delete_movement(movement_id, actor=g.current_user)
        return ok(message="Movement deleted")
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("delete movement")


@movements_bp.delete("/bulk")
@require_auth
@require_permission("MANAGE_MOVEMENTS")
def bulk_delete_movements_route():
    try:
        data = request.get_json(silent=True) or {}
        deleted = movement_service.bulk_delete(data.get("ids"), actor=g.current_user)
        current_app.logger.info("Bulk deleted %s movements (actor=%s)", deleted, g.current_user.id)
        return ok(deleted=deleted)
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("delete movements")


@movements_bp.put("/<int:movement_id>/acknowledge")
@require_auth
@require_permission("ACKNOWLEDGE_MOVEMENT")
def acknowledge_movement_route(movement_id: int):
    try:
        movement = movement_service.acknowledge(movement_id)
        return ok(movement=movement.to_dict())
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("acknowledge movement")


@movements_bp.put("/bulk/acknowledge")
@require_auth
@require_permission("ACKNOWLEDGE_MOVEMENT")
def bulk_acknowledge_route():
    try:
        data = request.get_json(silent=True) or {}
        acknowledged = movement_service.bulk_acknowledge(data.get("ids"))
        return ok(acknowledged=acknowledged)
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("acknowledge movements")


@movements_bp.put("/<int:movement_id>/assign")
@require_auth
@require_permission("ASSIGN_MOVEMENT")
def assign_movement_route(movement_id: int):
    try:
        data = request.get_json(silent=True) or {}
        movement = movement_service.assign(
            movement_id,
            data.get("assigned_supervisor_id"),
            actor=g.current_user,
        )
        return ok(movement=movement.to_dict())
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("assign movement")


@movements_bp.put("/<int:movement_id>/claim")
@require_auth
@require_permission("CLAIM_MOVEMENT")
def claim_movement_route(movement_id: int):
    try:
        movement = movement_service.claim(movement_id, supervisor=g.current_user)
        return ok(movement=movement.to_dict())
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("claim movement")


@movements_bp.put("/<int:movement_id>/approve")
@require_auth
@require_permission("APPROVE_MOVEMENT")
def review_movement_route(movement_id: int):
    try:
        data = request.get_json(silent=True) or {}
        # clients send "remarks"; "supervisor_remarks" mirrors the column name
        remarks = data.get("remarks", data.get("supervisor_remarks"))
        movement = movement_service.review(
            movement_id,
            data.get("status"),
            remarks,
            reviewer=g.current_user,
        )
        return ok(movement=movement.to_dict())
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("review movement")
