# Overview: Flask API routes for the audit trail; read-only.

from flask import Blueprint

from ..decorators import require_auth, require_permission
from ..responses import ok, internal_error
from ..services import audit_service


audit_bp = Blueprint("audit", __name__, url_prefix="/api/audit")


@audit_bp.get("")
@require_auth
@require_permission("VIEW_AUDIT_LOG")
def list_audit_route():
    """Latest entries across all users, each with the actor's full_name."""
    try:
        return ok(entries=audit_service.list_recent())
    except Exception:
        return internal_error("load audit log")
