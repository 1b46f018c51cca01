# Overview: Flask API routes for platform administration of organizations.

"""
Superadmin API

Every route requires a platform admin session and answers 401 otherwise.
Organization create/update/delete are recorded in the audit log with the
acting admin's email.
"""

from flask import Blueprint, current_app, g, request

from ..decorators import require_superadmin
from ..responses import json_body, json_error, json_ok, json_validation_error, parse_limit
from ..services import audit_service, organization_service
from ..validation import ValidationError


superadmin_bp = Blueprint("superadmin", __name__, url_prefix="/api/superadmin")

AUDIT_LOG_DEFAULT_LIMIT = 50
AUDIT_LOG_MAX_LIMIT = 500


@superadmin_bp.get("/organizations")
@require_superadmin
def list_organizations_route():
    include_inactive = request.args.get("includeInactive", "").lower() in {"1", "true", "yes"}
    try:
        orgs = organization_service.list_organizations(include_inactive=include_inactive)
        return json_ok(
            organizations=[o.to_dict() for o in orgs],
            stats=organization_service.get_stats(),
        )
    except Exception:
        current_app.logger.exception("Failed to list organizations")
        return json_error("Failed to fetch organizations", 500)


@superadmin_bp.post("/organizations")
@require_superadmin
def create_organization_route():
    data = json_body()
    if not data.get("id") or not data.get("name") or not data.get("theme"):
        return json_error("Missing required fields", 400)

    try:
        org = organization_service.create_organization(
            org_id=data.get("id"),
            name=data.get("name"),
            theme=data.get("theme"),
            contact=data.get("contact"),
            settings=data.get("settings"),
            logo=data.get("logo"),
        )
        audit_service.record(
            "create",
            "organization",
            org.id,
            g.session_context.email,
            {"name": org.name},
        )
        return json_ok(201, organization=org.to_dict())
    except ValidationError as exc:
        return json_validation_error(exc)
    except Exception:
        current_app.logger.exception("Failed to create organization")
        return json_error("Failed to create organization", 500)


@superadmin_bp.patch("/organizations/<org_id>")
@require_superadmin
def update_organization_route(org_id: str):
    data = json_body()
    try:
        org = organization_service.update_organization(org_id, data)
        if org is None:
            return json_error("Organization not found", 404)
        audit_service.record(
            "update",
            "organization",
            org.id,
            g.session_context.email,
            {"fields": sorted(data)},
        )
        return json_ok(organization=org.to_dict())
    except ValidationError as exc:
        return json_validation_error(exc)
    except Exception:
        current_app.logger.exception("Failed to update organization")
        return json_error("Failed to update organization", 500)


@superadmin_bp.delete("/organizations/<org_id>")
@require_superadmin
def delete_organization_route(org_id: str):
    try:
        if not organization_service.delete_organization(org_id):
            return json_error("Organization not found", 404)
        audit_service.record("delete", "organization", org_id, g.session_context.email, {})
        return json_ok(message="Organization deleted successfully")
    except Exception:
        current_app.logger.exception("Failed to delete organization")
        return json_error("Failed to delete organization", 500)


@superadmin_bp.get("/audit-logs")
@require_superadmin
def list_audit_logs_route():
    try:
        limit = parse_limit(
            request.args.get("limit"),
            default=AUDIT_LOG_DEFAULT_LIMIT,
            maximum=AUDIT_LOG_MAX_LIMIT,
        )
    except ValueError as exc:
        return json_error(str(exc), 400)

    try:
        entries = audit_service.list_entries(
            action=request.args.get("action") or None,
            entity_type=request.args.get("entityType") or None,
            limit=limit,
        )
        return json_ok(logs=[e.to_dict() for e in entries])
    except Exception:
        current_app.logger.exception("Failed to list audit logs")
        return json_error("Failed to fetch audit logs", 500)
