# Overview: Order store; tenant-scoped order creation, listing and the status state machine.

"""
================================================================================
PURPOSE: Own every order mutation and enforce the order status pipeline
================================================================================

STATE MACHINE:
    pending -> preparing -> ready -> delivered
    pending -> cancelled
    preparing -> cancelled

    pending:    placed by the customer, not yet started
    preparing:  kitchen/bar is working on it
    ready:      waiting to be served
    delivered:  TERMINAL, served to the table
    cancelled:  TERMINAL, withdrawn before it was ready

RULES (NON-NEGOTIABLE):
1. No state is skipped and nothing moves backward
2. Nothing re-enters pending
3. delivered and cancelled are terminal; no further mutation succeeds
4. Creation is all-or-nothing: one bad line rejects the whole order
5. totalAmount is always computed here from menu prices; a client value is ignored
6. Every lookup is tenant-scoped when an organization id is supplied

FAILURE SEMANTICS:
- unknown order id (or an order of another tenant) -> None
- invalid input, unknown status, illegal transition -> ValidationError subclass
================================================================================
"""

from __future__ import annotations

import secrets
from typing import Any, Literal

from ..extensions import db
from ..models import Order, OrderLine
from ..time_utils import utcnow
from ..validation import (
    MAX_LINE_NOTES,
    MAX_LINE_QUANTITY,
    MAX_ORDER_ITEMS,
    ValidationError,
    optional_text,
    require_text,
)
from . import menu_service, organization_service
from .concurrency import serialized


OrderStatus = Literal["pending", "preparing", "ready", "delivered", "cancelled"]

VALID_STATUSES = ("pending", "preparing", "ready", "delivered", "cancelled")
TERMINAL_STATUSES = frozenset({"delivered", "cancelled"})

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"preparing", "cancelled"}),
    "preparing": frozenset({"ready", "cancelled"}),
    "ready": frozenset({"delivered"}),
    "delivered": frozenset(),
    "cancelled": frozenset(),
}


class OrderError(ValidationError):
    """
    Raised when an order cannot be created or changed because of its input.

    This is a domain error, not a technical error.
    """
    pass


class OrderTransitionError(OrderError):
    """Raised when a status change violates the state machine."""
    pass


def validate_status(status: Any) -> str:
    if not isinstance(status, str) or status not in VALID_STATUSES:
        raise OrderError(
            f"Invalid status '{status}'. Must be one of: {', '.join(VALID_STATUSES)}"
        )
    return status


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def _new_order_id() -> str:
    return f"ord-{secrets.token_hex(8)}"


def _coerce_quantity(value: Any) -> int | None:
    """Positive integer quantity, or None when the value is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        qty = value
    elif isinstance(value, float) and value.is_integer():
        qty = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        qty = int(value.strip())
    else:
        return None
    if qty <= 0 or qty > MAX_LINE_QUANTITY:
        return None
    return qty


def _order_text(value: Any, message: str, max_length: int) -> str:
    try:
        return require_text(value, message, max_length=max_length)
    except ValidationError as exc:
        raise OrderError(exc.message) from exc


def _parse_lines(items: Any) -> list[dict]:
    if not isinstance(items, list) or not items:
        raise OrderError("Order items are required")
    if len(items) > MAX_ORDER_ITEMS:
        raise OrderError(f"An order may contain at most {MAX_ORDER_ITEMS} items")

    parsed = []
    problems = []
    for index, raw in enumerate(items):
        if not isinstance(raw, dict):
            problems.append({"index": index, "reason": "malformed"})
            continue
        item_id = raw.get("itemId")
        if not isinstance(item_id, str) or not item_id.strip():
            problems.append({"index": index, "reason": "missing itemId"})
            continue
        qty = _coerce_quantity(raw.get("quantity"))
        if qty is None:
            problems.append({"index": index, "itemId": item_id, "reason": "invalid quantity"})
            continue
        notes = raw.get("notes")
        if notes is not None and (not isinstance(notes, str) or len(notes.strip()) > MAX_LINE_NOTES):
            problems.append({"index": index, "itemId": item_id, "reason": "invalid notes"})
            continue
        parsed.append({
            "item_id": item_id.strip(),
            "quantity": qty,
            "notes": (notes or "").strip() or None,
        })

    if problems:
        raise OrderError("Invalid order items", details={"items": problems})
    return parsed


@serialized
def create_order(
    organization_id: str,
    *,
    customer_name: Any,
    table_number: Any,
    items: Any,
    customer_session_id: str | None = None,
    notes: Any = None,
) -> Order:
    """
    Place an order for an active organization with an active menu.

    Prices and names are snapshotted from the menu. Nothing is written unless
    every line validates.
    """
    org = organization_service.get_organization(organization_id)
    if org is None:
        raise OrderError("Invalid organization ID")

    name = _order_text(customer_name, "Customer name is required", 120)

    settings = org.settings or {}
    if settings.get("requireTableNumber", True):
        table = _order_text(table_number, "Table number is required", 32)
    else:
        table = None
        if table_number is not None and str(table_number).strip():
            table = _order_text(table_number, "Table number is required", 32)

    lines = _parse_lines(items)
    try:
        order_notes = optional_text(notes, "notes", max_length=1000)
    except ValidationError as exc:
        raise OrderError(exc.message) from exc

    if menu_service.get_active_menu(org.id) is None:
        raise OrderError("No active menu for organization")

    menu_items = menu_service.find_available_items(org.id, [ln["item_id"] for ln in lines])
    problems = []
    for index, line in enumerate(lines):
        item = menu_items.get(line["item_id"])
        if item is None:
            problems.append({"index": index, "itemId": line["item_id"], "reason": "not found"})
        elif not item.available:
            problems.append({"index": index, "itemId": line["item_id"], "reason": "unavailable"})
    if problems:
        raise OrderError("Invalid order items", details={"items": problems})

    now = utcnow()
    order = Order(
        id=_new_order_id(),
        organization_id=org.id,
        customer_session_id=customer_session_id,
        customer_name=name,
        table_number=table,
        notes=order_notes,
        status="pending",
        created_at=now,
        updated_at=now,
    )
    total = 0
    for position, line in enumerate(lines):
        item = menu_items[line["item_id"]]
        total += item.price * line["quantity"]
        order.lines.append(OrderLine(
            position=position,
            item_id=item.id,
            name=item.name,
            price=item.price,
            quantity=line["quantity"],
            notes=line["notes"],
        ))
    order.total_amount = total

    db.session.add(order)
    db.session.flush()
    return order


@serialized
def list_orders(
    organization_id: str,
    *,
    customer_session_id: str | None = None,
    status: str | None = None,
    limit: int | None = None,
) -> list[Order]:
    """
    Orders of one tenant, newest first.

    The tenant filter is never optional; customer session and status narrow it.
    """
    if not organization_id:
        raise OrderError("Organization ID is required")
    query = db.session.query(Order).filter(Order.organization_id == organization_id)
    if customer_session_id:
        query = query.filter(Order.customer_session_id == customer_session_id)
    if status:
        query = query.filter(Order.status == validate_status(status))
    query = query.order_by(Order.created_at.desc(), Order.id.desc())
    if limit is not None:
        if limit <= 0:
            raise OrderError("limit must be > 0")
        query = query.limit(limit)
    return query.all()


@serialized
def get_order(order_id: str, organization_id: str | None = None) -> Order | None:
    order = db.session.get(Order, order_id)
    if order is None:
        return None
    if organization_id is not None and order.organization_id != organization_id:
        return None
    return order


@serialized
def update_status(order_id: str, new_status: Any, organization_id: str | None = None) -> Order | None:
    """
    Move an order to new_status.

    Returns None when the order does not exist (or belongs to another tenant
    when organization_id is given). Raises OrderTransitionError for moves the
    state machine forbids, including same-status updates.
    """
    status = validate_status(new_status)
    order = get_order(order_id, organization_id)
    if order is None:
        return None

    if not can_transition(order.status, status):
        if order.status in TERMINAL_STATUSES:
            raise OrderTransitionError(f"Order is already {order.status}")
        raise OrderTransitionError(
            f"Cannot change order status from {order.status} to {status}"
        )

    order.status = status
    order.updated_at = utcnow()
    db.session.flush()
    return order


@serialized
def cancel_order(order_id: str, organization_id: str) -> Order | None:
    return update_status(order_id, "cancelled", organization_id)
