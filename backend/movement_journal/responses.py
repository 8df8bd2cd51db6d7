# Overview: JSON response helpers shared by the route modules.

from flask import jsonify, current_app

from .errors import ServiceError, ClaimConflictError
from .extensions import db


def ok(status: int = 200, **payload):
    return jsonify({"success": True, **payload}), status


def fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def service_error(exc: ServiceError):
    """Roll back the failed unit of work and map the error to its status."""
    db.session.rollback()
    if isinstance(exc, ClaimConflictError):
        current_app.logger.warning("Claim conflict: %s", exc.message)
    return fail(exc.message, exc.status_code)


def internal_error(action: str):
    """Log the active exception and return a 500."""
    db.session.rollback()
    current_app.logger.exception("Failed to %s", action)
    return fail(f"Failed to {action}", 500)
