# Overview: Request and permission decorators for API routes.

from functools import wraps

from flask import current_app, g, request

from .permissions import role_has_permission
from .responses import json_error
from .services import organization_service, session_service
from .services.tenant_service import log_cross_tenant_attempt


def request_token() -> str | None:
    """Session token from the Authorization header, else the session cookie."""
    auth_header = request.headers.get("Authorization") or ""
    if auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1].strip()
        if token:
            return token
    return request.cookies.get(current_app.config["SESSION_COOKIE_NAME_AUTH"]) or None


def _is_authenticated() -> bool:
    return getattr(g, "session_context", None) is not None


def _is_superadmin() -> bool:
    return _is_authenticated() and g.session_context.is_superadmin


def require_auth(f):
    """
    Require a staff or superadmin session and establish tenant context.

    MULTI-TENANT: Sets the following Flask g attributes:
    - g.session_context: the SessionContext
    - g.org_id: the session's organization (None for superadmins)

    SECURITY: Returns 401 if the token is missing, unknown, expired or revoked.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = request_token()
        if not token:
            return json_error("Authentication required", 401)

        context = session_service.validate_session(token)
        if not context:
            return json_error("Invalid or expired session", 401)

        g.session_context = context
        g.org_id = context.organization_id
        return f(*args, **kwargs)

    return decorated_function


def require_superadmin(f):
    """Require a platform admin session. Anything else answers 401."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = request_token()
        context = session_service.validate_session(token) if token else None
        if not context or not context.is_superadmin:
            return json_error("Unauthorized", 401)

        g.session_context = context
        g.org_id = None
        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """
    Require a specific permission within the addressed organization.

    Must be stacked under @require_auth.

    MULTI-TENANT: When the route carries an org_id, a staff session bound to
    another organization gets 404 (no existence leak) and the probe is logged.
    Superadmins pass every check and act on the addressed organization.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return json_error("Authentication required", 401)

            target_org = kwargs.get("org_id")

            if _is_superadmin():
                g.org_id = target_org
                return f(*args, **kwargs)

            context = g.session_context
            if target_org is not None and target_org != context.organization_id:
                log_cross_tenant_attempt(
                    f"{request.method} {permission_code}",
                    org_id=context.organization_id,
                    attempted_org_id=target_org,
                )
                return json_error("Organization not found or inactive", 404)

            if not role_has_permission(context.role, permission_code):
                current_app.logger.warning(
                    "Permission denied: %s (role=%s, org=%s, path=%s)",
                    permission_code,
                    context.role,
                    context.organization_id,
                    request.path,
                )
                return json_error(
                    "Permission denied",
                    403,
                    requiredPermission=permission_code,
                )

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_active_org(f):
    """
    Resolve the route's org_id to an active organization.

    Unknown and inactive organizations both answer 404. Sets g.organization.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        org = organization_service.get_organization(kwargs.get("org_id"))
        if org is None:
            return json_error("Organization not found or inactive", 404)
        g.organization = org
        return f(*args, **kwargs)

    return decorated_function
