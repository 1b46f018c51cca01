# Overview: Flask API routes for organization branding and ordering settings.

from flask import Blueprint, current_app, g

from ..decorators import require_active_org, require_auth, require_permission
from ..responses import json_body, json_error, json_ok, json_validation_error
from ..services import audit_service, organization_service
from ..validation import ValidationError


settings_bp = Blueprint("settings", __name__, url_prefix="/api/org/<org_id>/settings")

TENANT_EDITABLE = ("settings", "theme", "contact")


@settings_bp.get("")
@require_active_org
def get_settings_route(org_id: str):
    """Public: the customer menu needs branding, currency and table rules."""
    return json_ok(organization=g.organization.to_dict())


@settings_bp.patch("")
@require_auth
@require_permission("MANAGE_SETTINGS")
@require_active_org
def update_settings_route(org_id: str):
    data = json_body()
    unknown = [k for k in data if k not in TENANT_EDITABLE]
    if unknown:
        return json_error(f"Field not allowed: {unknown[0]}", 400)
    if not data:
        return json_error("No settings provided", 400)

    try:
        org = organization_service.update_organization(org_id, data)
        if org is None:
            return json_error("Organization not found or inactive", 404)
        audit_service.record(
            "settings_change",
            "organization",
            org_id,
            g.session_context.email,
            {"fields": sorted(data)},
        )
        return json_ok(organization=org.to_dict())
    except ValidationError as exc:
        return json_validation_error(exc)
    except Exception:
        current_app.logger.exception("Failed to update settings")
        return json_error("Failed to update settings", 500)
