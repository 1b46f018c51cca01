# Overview: Flask API routes for per-organization order analytics.

from flask import Blueprint, current_app, request

from ..decorators import require_active_org, require_auth, require_permission
from ..responses import json_error, json_ok
from ..services import analytics_service


analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/org/<org_id>/analytics")


@analytics_bp.get("")
@require_auth
@require_permission("VIEW_ANALYTICS")
@require_active_org
def get_analytics_route(org_id: str):
    period = request.args.get("period", "today")
    try:
        summary = analytics_service.organization_summary(org_id, period)
        return json_ok(analytics=summary)
    except Exception:
        current_app.logger.exception("Failed to compute analytics")
        return json_error("Failed to fetch analytics", 500)
