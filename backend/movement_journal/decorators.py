# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, jsonify, g, current_app

from .services import session_service
from .permissions import role_has_permission


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user')


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a valid session token.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.session_context: The full SessionContext object
    - g.session_token: The raw bearer token (used by logout)

    The principal's role always comes from the stored user row, never from
    request parameters.

    Returns 401 if:
    - No Authorization header
    - Invalid, revoked or expired token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({"success": False, "message": "Authentication required"}), 401

        context = session_service.validate_session(token)
        if not context:
            return jsonify({"success": False, "message": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.session_context = context
        g.session_token = token

        return f(*args, **kwargs)

    return decorated_function


def _deny(permission_codes):
    user = g.current_user
    current_app.logger.warning(
        "Permission denied: user=%s role=%s path=%s %s required=%s",
        user.id, user.role, request.method, request.path, ",".join(permission_codes),
    )
    return jsonify({
        "success": False,
        "message": "Permission denied",
        "required_permissions": list(permission_codes),
    }), 403


def require_permission(permission_code: str):
    """Require a specific permission from the static role map."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return jsonify({"success": False, "message": "Authentication required"}), 401

            if not role_has_permission(g.current_user.role, permission_code):
                return _deny([permission_code])

            return f(*args, **kwargs)

        return decorated_function
    return decorator
