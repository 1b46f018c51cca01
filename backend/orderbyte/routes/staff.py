# Overview: Flask API routes for the staff directory of one organization.

from flask import Blueprint, current_app, g, request

from ..decorators import require_active_org, require_auth, require_permission
from ..responses import json_body, json_error, json_ok, json_validation_error
from ..services import audit_service, staff_service
from ..validation import ConflictError, ValidationError


staff_bp = Blueprint("staff", __name__, url_prefix="/api/org/<org_id>/staff")


@staff_bp.get("")
@require_auth
@require_permission("VIEW_STAFF")
@require_active_org
def list_staff_route(org_id: str):
    staff = staff_service.list_staff(org_id)
    return json_ok(staff=[s.to_dict() for s in staff])


@staff_bp.post("")
@require_auth
@require_permission("MANAGE_STAFF")
@require_active_org
def create_staff_route(org_id: str):
    data = json_body()
    try:
        staff = staff_service.create_staff(
            org_id,
            email=data.get("email"),
            name=data.get("name"),
            role=data.get("role"),
            password=data.get("password"),
        )
        audit_service.record(
            "create",
            "user",
            staff.id,
            g.session_context.email,
            {"organizationId": org_id, "email": staff.email, "role": staff.role},
        )
        return json_ok(201, staff=staff.to_dict())
    except ConflictError as exc:
        return json_error(str(exc), 409)
    except ValidationError as exc:
        return json_validation_error(exc)
    except Exception:
        current_app.logger.exception("Failed to create staff member")
        return json_error("Failed to create staff member", 500)


@staff_bp.patch("")
@require_auth
@require_permission("MANAGE_STAFF")
@require_active_org
def update_staff_route(org_id: str):
    data = json_body()
    staff_id = data.get("staffId")
    updates = data.get("updates")
    if not staff_id or not isinstance(updates, dict):
        return json_error("Staff ID and updates are required", 400)

    try:
        staff = staff_service.update_staff(staff_id, org_id, updates)
        if staff is None:
            return json_error("Staff member not found", 404)
        audit_service.record(
            "update",
            "user",
            staff.id,
            g.session_context.email,
            {"organizationId": org_id, "fields": sorted(updates)},
        )
        return json_ok(staff=staff.to_dict())
    except ConflictError as exc:
        return json_error(str(exc), 409)
    except ValidationError as exc:
        return json_validation_error(exc)
    except Exception:
        current_app.logger.exception("Failed to update staff member")
        return json_error("Failed to update staff member", 500)


@staff_bp.delete("")
@require_auth
@require_permission("MANAGE_STAFF")
@require_active_org
def delete_staff_route(org_id: str):
    staff_id = request.args.get("staffId")
    if not staff_id:
        return json_error("Staff ID is required", 400)

    try:
        if not staff_service.delete_staff(staff_id, org_id):
            return json_error("Staff member not found", 404)
        audit_service.record(
            "delete",
            "user",
            staff_id,
            g.session_context.email,
            {"organizationId": org_id},
        )
        return json_ok(message="Staff member deleted")
    except Exception:
        current_app.logger.exception("Failed to delete staff member")
        return json_error("Failed to delete staff member", 500)
