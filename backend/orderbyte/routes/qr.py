# Overview: Flask API routes for table QR links.

from flask import Blueprint, current_app, g, request

from ..decorators import require_active_org, require_auth, require_permission
from ..responses import json_error, json_ok, json_validation_error
from ..services import qr_service
from ..validation import ValidationError


qr_bp = Blueprint("qr", __name__, url_prefix="/api")


@qr_bp.get("/org/<org_id>/qr")
@require_auth
@require_permission("MANAGE_QR")
@require_active_org
def issue_qr_route(org_id: str):
    base_url = current_app.config.get("PUBLIC_BASE_URL") or request.host_url
    try:
        link = qr_service.issue_table_link(g.organization, request.args.get("table"), base_url)
        return json_ok(qr=link)
    except ValidationError as exc:
        return json_validation_error(exc)


@qr_bp.get("/qr/<token>")
def read_qr_route(token: str):
    """Public: the customer page resolves a scanned token to its tenant and table."""
    try:
        return json_ok(**qr_service.read_table_token(token))
    except ValidationError as exc:
        return json_validation_error(exc)
