# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

- POST /api/login           username + password -> {user, token}
- POST /api/logout          revoke the bearer token
- GET  /api/session         current principal
- POST /api/reset-password  same answer whether or not the user exists
"""

from flask import Blueprint, request, g

from ..decorators import require_auth
from ..permissions import get_role_permissions
from ..responses import ok, fail, internal_error
from ..services import auth_service, session_service


auth_bp = Blueprint("auth", __name__, url_prefix="/api")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    The token must be sent as `Authorization: Bearer <token>` on every other
    /api route.
    """
    try:
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        password = data.get("password")

        if not username or not password:
            return fail("username and password required", 400)

        user = auth_service.authenticate(username, password)
        if not user:
            return fail("Invalid credentials", 401)

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )

        return ok(
            user=user.to_dict(),
            permissions=sorted(get_role_permissions(user.role)),
            token=token,
            session=session.to_dict(),
        )

    except Exception:
        return internal_error("login user")


@auth_bp.post("/logout")
@require_auth
def logout_route():
    try:
        session_service.revoke_session(g.session_token, reason="User logout")
        return ok(message="Logged out")
    except Exception:
        return internal_error("logout user")


@auth_bp.get("/session")
@require_auth
def session_route():
    user = g.current_user
    return ok(
        user=user.to_dict(),
        permissions=sorted(get_role_permissions(user.role)),
        session=g.session_context.session.to_dict(),
    )


@auth_bp.post("/reset-password")
def reset_password_route():
    try:
        data = request.get_json(silent=True) or {}
        message = auth_service.request_password_reset(data.get("username"))
        return ok(message=message)
    except Exception:
        return internal_error("process password reset")
