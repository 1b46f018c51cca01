# Overview: Flask API routes for orders; customer placement/listing and staff status changes.

from flask import Blueprint, current_app, g, request

from ..decorators import require_active_org, require_auth, require_permission
from ..permissions import STATUS_TARGET_ROLES, role_can_set_status, role_has_permission
from ..responses import json_body, json_error, json_ok, json_validation_error, parse_limit
from ..services import order_service
from ..services.tenant_service import resolve_tenant_id
from ..validation import ValidationError


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")
org_orders_bp = Blueprint("org_orders", __name__, url_prefix="/api/org/<org_id>/orders")


def _customer_session_id(explicit) -> str | None:
    """Body/query customerSessionId wins; otherwise the browser cookie."""
    if isinstance(explicit, str) and explicit.strip():
        return explicit.strip()[:128]
    return getattr(g, "customer_session_id", None)


def _status_change_denied(status: str):
    """
    Role gate for moving an order into status.

    The kitchen prepares, front of house serves, CANCEL_ORDER holders cancel.
    Unknown or unreachable targets fall through to the state machine.
    """
    context = g.session_context
    if context.is_superadmin or status not in STATUS_TARGET_ROLES:
        return None
    needed = "CANCEL_ORDER" if status == "cancelled" else "UPDATE_ORDER_STATUS"
    if role_has_permission(context.role, needed) and role_can_set_status(context.role, status):
        return None
    current_app.logger.warning(
        "Status change denied: role=%s target=%s org=%s",
        context.role,
        status,
        context.organization_id,
    )
    return json_error("Permission denied", 403, requiredPermission=needed)


def _place_order(org_id: str, data: dict, success_status: int):
    try:
        order = order_service.create_order(
            org_id,
            customer_name=data.get("customerName"),
            table_number=data.get("tableNumber"),
            items=data.get("items"),
            customer_session_id=_customer_session_id(data.get("customerSessionId")),
            notes=data.get("notes"),
        )
        return json_ok(success_status, order=order.to_dict())
    except ValidationError as exc:
        return json_validation_error(exc)
    except Exception:
        current_app.logger.exception("Failed to create order")
        return json_error("Failed to create order", 500)


def _change_status(order_id, status, org_id):
    if not order_id or status is None:
        return json_error("Order ID and status are required", 400)
    try:
        status = order_service.validate_status(status)
    except ValidationError as exc:
        return json_validation_error(exc)

    denied = _status_change_denied(status)
    if denied is not None:
        return denied

    try:
        order = order_service.update_status(order_id, status, org_id)
        if order is None:
            return json_error("Order not found", 404)
        return json_ok(order=order.to_dict())
    except ValidationError as exc:
        return json_validation_error(exc)
    except Exception:
        current_app.logger.exception("Failed to update order status")
        return json_error("Failed to update order", 500)


@orders_bp.post("")
def create_order_route():
    """
    Place an order.

    Tenant precedence: x-tenant-id header, Host subdomain, body organizationId.
    """
    data = json_body()
    org_id = resolve_tenant_id(request.headers, explicit=data.get("organizationId"))
    if not org_id:
        return json_error("Organization ID is required", 400)
    return _place_order(org_id, data, 200)


@orders_bp.get("")
def list_orders_route():
    """
    Customer "my orders" listing, always bounded.

    Without a customerSessionId or an existing customer cookie the listing
    covers the whole tenant, still capped at CUSTOMER_ORDER_LIMIT_MAX.
    """
    org_id = resolve_tenant_id(request.headers, explicit=request.args.get("organizationId"))
    if not org_id:
        return json_error("Organization ID is required", 400)

    cookie_session = request.cookies.get(current_app.config["CUSTOMER_COOKIE_NAME"])
    customer_session = (request.args.get("customerSessionId") or "").strip() or cookie_session

    try:
        limit = parse_limit(
            request.args.get("limit"),
            default=current_app.config["CUSTOMER_ORDER_LIMIT"],
            maximum=current_app.config["CUSTOMER_ORDER_LIMIT_MAX"],
        )
    except ValueError as exc:
        return json_error(str(exc), 400)

    try:
        orders = order_service.list_orders(
            org_id,
            customer_session_id=customer_session,
            status=request.args.get("status") or None,
            limit=limit,
        )
        return json_ok(orders=[o.to_dict() for o in orders])
    except ValidationError as exc:
        return json_validation_error(exc)
    except Exception:
        current_app.logger.exception("Failed to list orders")
        return json_error("Failed to fetch orders", 500)


@orders_bp.patch("/<order_id>")
@require_auth
@require_permission("VIEW_ORDERS")
def update_order_route(order_id: str):
    """Status change; the tenant comes from the session (superadmins are unscoped)."""
    data = json_body()
    return _change_status(order_id, data.get("status"), g.org_id)


@org_orders_bp.get("")
@require_auth
@require_permission("VIEW_ORDERS")
@require_active_org
def list_org_orders_route(org_id: str):
    try:
        limit = parse_limit(request.args.get("limit"), default=None)
    except ValueError as exc:
        return json_error(str(exc), 400)

    try:
        orders = order_service.list_orders(
            org_id,
            customer_session_id=request.args.get("customerSessionId") or None,
            status=request.args.get("status") or None,
            limit=limit,
        )
        return json_ok(orders=[o.to_dict() for o in orders])
    except ValidationError as exc:
        return json_validation_error(exc)
    except Exception:
        current_app.logger.exception("Failed to list organization orders")
        return json_error("Failed to fetch orders", 500)


@org_orders_bp.post("")
@require_active_org
def create_org_order_route(org_id: str):
    return _place_order(org_id, json_body(), 201)


@org_orders_bp.patch("")
@require_auth
@require_permission("VIEW_ORDERS")
@require_active_org
def update_org_order_route(org_id: str):
    data = json_body()
    if not data.get("orderId") or not data.get("status"):
        return json_error("Order ID and status are required", 400)
    return _change_status(data.get("orderId"), data.get("status"), org_id)


@org_orders_bp.delete("")
@require_auth
@require_permission("CANCEL_ORDER")
@require_active_org
def cancel_org_order_route(org_id: str):
    order_id = request.args.get("orderId")
    if not order_id:
        return json_error("Order ID is required", 400)
    try:
        order = order_service.cancel_order(order_id, org_id)
        if order is None:
            return json_error("Order not found", 404)
        return json_ok(order=order.to_dict())
    except ValidationError as exc:
        return json_validation_error(exc)
    except Exception:
        current_app.logger.exception("Failed to cancel order")
        return json_error("Failed to cancel order", 500)
