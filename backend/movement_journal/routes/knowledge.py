# Overview: Flask API routes for knowledge base operations; parses input and returns JSON responses.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_permission
from ..errors import ServiceError
from ..responses import ok, service_error, internal_error
from ..services import knowledge_service


knowledge_bp = Blueprint("knowledge", __name__, url_prefix="/api/kb")


@knowledge_bp.get("")
@require_auth
@require_permission("VIEW_KNOWLEDGE_BASE")
def list_entries_route():
    try:
        return ok(entries=knowledge_service.list_entries())
    except Exception:
        return internal_error("list knowledge base entries")


@knowledge_bp.post("")
@require_auth
@require_permission("MANAGE_KNOWLEDGE_BASE")
def create_entry_route():
    try:
        data = request.get_json(silent=True) or {}
        entry = knowledge_service.create_entry(data, actor_id=g.current_user.id)
        return ok(201, id=entry.id, entry=entry.to_dict())
    except ServiceError as exc:
        return service_error(exc)
    except Exception:
        return internal_error("create knowledge base entry")
