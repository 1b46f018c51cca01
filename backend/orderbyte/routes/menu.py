# Overview: Flask API routes for menus; public read and action-based staff mutations.

"""
Menu API

Mutations are action-based to keep one URL per tenant menu:
- POST   {action: addCategory, data: {name, description?, order?}}
- POST   {action: addItem, data: {categoryId, item: {...}}}
- PATCH  {action: updateCategory, data: {id, updates: {...}}}
- PATCH  {action: updateItem, data: {categoryId, itemId, updates: {...}}}
- DELETE ?action=deleteCategory&categoryId=...
- DELETE ?action=deleteItem&categoryId=...&itemId=...

Every successful mutation is recorded in the audit log (entityType "menu").
"""

from flask import Blueprint, current_app, g, request

from ..decorators import require_active_org, require_auth, require_permission
from ..responses import json_body, json_error, json_ok, json_validation_error
from ..services import audit_service, menu_service
from ..validation import ValidationError


menu_bp = Blueprint("menu", __name__, url_prefix="/api/org/<org_id>/menu")


def _audit(action: str, entity_id: str, org_id: str, kind: str, **details) -> None:
    audit_service.record(
        action,
        "menu",
        entity_id,
        g.session_context.email,
        {"organizationId": org_id, "kind": kind, **details},
    )


@menu_bp.get("")
@require_active_org
def get_menu_route(org_id: str):
    menu = menu_service.get_active_menu(org_id)
    if menu is None:
        return json_error("Menu not found", 404)
    return json_ok(menu=menu.to_dict())


@menu_bp.post("")
@require_auth
@require_permission("MANAGE_MENU")
@require_active_org
def create_menu_entry_route(org_id: str):
    body = json_body()
    action = body.get("action")
    data = body.get("data") if isinstance(body.get("data"), dict) else {}

    try:
        if action == "addCategory":
            category = menu_service.add_category(org_id, data)
            if category is None:
                return json_error("Menu not found", 404)
            _audit("create", category.id, org_id, "category", name=category.name)
            return json_ok(category=category.to_dict())

        if action == "addItem":
            category_id = data.get("categoryId")
            if not category_id or not isinstance(data.get("item"), dict):
                return json_error("Category ID and item are required", 400)
            if menu_service.get_category(org_id, category_id) is None:
                return json_error("Category not found", 404)
            item = menu_service.add_item(org_id, category_id, data["item"])
            if item is None:
                return json_error("Category not found", 404)
            _audit("create", item.id, org_id, "item", categoryId=category_id, name=item.name)
            return json_ok(item=item.to_dict())

        return json_error("Invalid action", 400)
    except ValidationError as exc:
        return json_validation_error(exc)
    except Exception:
        current_app.logger.exception("Failed to update menu")
        return json_error("Failed to update menu", 500)


@menu_bp.patch("")
@require_auth
@require_permission("MANAGE_MENU")
@require_active_org
def update_menu_entry_route(org_id: str):
    body = json_body()
    action = body.get("action")
    data = body.get("data") if isinstance(body.get("data"), dict) else {}
    updates = data.get("updates")
    if not isinstance(updates, dict):
        return json_error("Updates are required", 400)

    try:
        if action == "updateCategory":
            category = menu_service.update_category(org_id, data.get("id"), updates)
            if category is None:
                return json_error("Category not found", 404)
            _audit("update", category.id, org_id, "category", fields=sorted(updates))
            return json_ok(category=category.to_dict())

        if action == "updateItem":
            category_id = data.get("categoryId")
            if menu_service.get_category(org_id, category_id) is None:
                return json_error("Category not found", 404)
            item = menu_service.update_item(org_id, category_id, data.get("itemId"), updates)
            if item is None:
                return json_error("Item not found", 404)
            _audit("update", item.id, org_id, "item", categoryId=category_id, fields=sorted(updates))
            return json_ok(item=item.to_dict())

        return json_error("Invalid action", 400)
    except ValidationError as exc:
        return json_validation_error(exc)
    except Exception:
        current_app.logger.exception("Failed to update menu")
        return json_error("Failed to update menu", 500)


@menu_bp.delete("")
@require_auth
@require_permission("MANAGE_MENU")
@require_active_org
def delete_menu_entry_route(org_id: str):
    action = request.args.get("action")
    category_id = request.args.get("categoryId")

    try:
        if action == "deleteCategory":
            if not menu_service.delete_category(org_id, category_id):
                return json_error("Category not found", 404)
            _audit("delete", category_id, org_id, "category")
            return json_ok(message="Category deleted")

        if action == "deleteItem":
            item_id = request.args.get("itemId")
            if menu_service.get_category(org_id, category_id) is None:
                return json_error("Category not found", 404)
            if not menu_service.delete_item(org_id, category_id, item_id):
                return json_error("Item not found", 404)
            _audit("delete", item_id, org_id, "item", categoryId=category_id)
            return json_ok(message="Item deleted")

        return json_error("Invalid action", 400)
    except Exception:
        current_app.logger.exception("Failed to delete menu entry")
        return json_error("Failed to update menu", 500)
