# Overview: Flask API routes for auth operations; login, session lookup and logout.

"""
Authentication API routes

SECURITY FEATURES:
- Credentials checked by the app's Authenticator (bcrypt by default)
- Session token returned in the body and set as an HttpOnly cookie
- Only a hash of the token is stored; logout revokes it immediately
"""

from flask import Blueprint, current_app, request

from ..decorators import request_token
from ..responses import json_body, json_error, json_ok
from ..services import session_service
from ..services.auth_service import Credentials, Denied
from ..services.session_service import SESSION_ABSOLUTE_TIMEOUT


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _authenticator():
    return current_app.extensions["orderbyte.authenticator"]


@auth_bp.post("/login")
def login_route():
    """
    Authenticate and create a session.

    Body: {email, password, organizationId?}
    """
    data = json_body()
    email = data.get("email")
    password = data.get("password")
    if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
        return json_error("Email and password are required", 400)

    org_id = data.get("organizationId")
    if org_id is not None and not isinstance(org_id, str):
        return json_error("Invalid organization ID", 400)

    try:
        result = _authenticator().authenticate(
            Credentials(email=email, password=password, organization_id=org_id or None)
        )
        if isinstance(result, Denied):
            current_app.logger.warning(
                "Failed login for %s (org=%s, ip=%s)", email, org_id, request.remote_addr
            )
            return json_error("Invalid credentials", 401)

        session, token = session_service.create_session(
            result,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
        response, status = json_ok(
            session=session.to_dict(),
            user={"id": result.principal_id, "email": result.email, "name": result.name, "role": result.role},
            token=token,
        )
        response.set_cookie(
            current_app.config["SESSION_COOKIE_NAME_AUTH"],
            token,
            max_age=int(SESSION_ABSOLUTE_TIMEOUT.total_seconds()),
            httponly=True,
            secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
            samesite="Lax",
        )
        return response, status
    except Exception:
        current_app.logger.exception("Failed to login user")
        return json_error("Login failed", 500)


@auth_bp.get("/session")
def session_route():
    token = request_token()
    if not token:
        return json_error("No session", 401)
    context = session_service.validate_session(token)
    if context is None:
        return json_error("Invalid session", 401)
    return json_ok(session=context.to_dict())


@auth_bp.route("/logout", methods=["DELETE", "POST"])
def logout_route():
    token = request_token()
    if token:
        session_service.revoke_session(token)
    response, status = json_ok(message="Logged out successfully")
    response.delete_cookie(current_app.config["SESSION_COOKIE_NAME_AUTH"])
    return response, status
