# Overview: Menu store; tenant-scoped categories and items of the active menu.

from __future__ import annotations

import secrets
from typing import Any

from ..extensions import db
from ..models import Menu, MenuCategory, MenuItem
from ..time_utils import utcnow
from ..validation import (
    ModelValidationPolicy,
    ValidationError,
    enforce_rules_menu_item,
    validate_payload,
)
from .concurrency import serialized


DIETARY_TAGS = ("vegetarian", "vegan", "gluten-free", "dairy-free", "halal", "spicy")

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"name": "name", "description": "description", "order": "sort_order"},
    required_on_create={"name"},
)

ITEM_POLICY = ModelValidationPolicy(
    writable_fields={
        "name": "name",
        "description": "description",
        "price": "price",
        "image": "image",
        "allergens": "allergens",
        "dietary": "dietary",
        "available": "available",
    },
    required_on_create={"name", "price"},
    string_list_fields={"allergens", "dietary"},
)


class MenuError(ValidationError):
    """Raised when menu input is invalid."""
    pass


def _new_id(prefix: str) -> str:
    return f"{prefix}-{secrets.token_hex(6)}"


def _enforce_dietary(patch: dict) -> None:
    tags = patch.get("dietary")
    if tags:
        unknown = [t for t in tags if t not in DIETARY_TAGS]
        if unknown:
            raise MenuError(f"Unknown dietary tag: {unknown[0]}")


def _active_menu(org_id: str) -> Menu | None:
    return (
        db.session.query(Menu)
        .filter(Menu.organization_id == org_id, Menu.is_active.is_(True))
        .order_by(Menu.updated_at.desc())
        .first()
    )


def _category_in_org(org_id: str, category_id: str) -> MenuCategory | None:
    menu = _active_menu(org_id)
    if menu is None:
        return None
    for category in menu.categories:
        if category.id == category_id:
            return category
    return None


def _touch(menu: Menu) -> None:
    menu.updated_at = utcnow()


@serialized
def get_active_menu(org_id: str) -> Menu | None:
    return _active_menu(org_id)


@serialized
def get_category(org_id: str, category_id: str) -> MenuCategory | None:
    return _category_in_org(org_id, category_id)


@serialized
def find_available_items(org_id: str, item_ids: list[str]) -> dict[str, MenuItem]:
    """
    Map item id -> MenuItem for items of the active menu.

    Unknown ids are simply absent from the result.
    """
    if not item_ids:
        return {}
    rows = (
        db.session.query(MenuItem)
        .join(MenuCategory, MenuItem.category_id == MenuCategory.id)
        .join(Menu, MenuCategory.menu_id == Menu.id)
        .filter(
            Menu.organization_id == org_id,
            Menu.is_active.is_(True),
            MenuItem.id.in_(set(item_ids)),
        )
        .all()
    )
    return {row.id: row for row in rows}


@serialized
def add_category(org_id: str, payload: dict) -> MenuCategory | None:
    """Append a category to the active menu. None when the tenant has no menu."""
    menu = _active_menu(org_id)
    if menu is None:
        return None

    patch = validate_payload(model=MenuCategory, payload=payload, policy=CATEGORY_POLICY, partial=False)
    if patch.get("sort_order") is None:
        patch["sort_order"] = max((c.sort_order for c in menu.categories), default=0) + 1

    category = MenuCategory(id=_new_id("cat"), menu_id=menu.id, items=[], **patch)
    menu.categories.append(category)
    _touch(menu)
    db.session.flush()
    return category


@serialized
def add_item(org_id: str, category_id: str, payload: dict) -> MenuItem | None:
    """Append an item to a category. None when menu or category is missing."""
    category = _category_in_org(org_id, category_id)
    if category is None:
        return None

    patch = validate_payload(model=MenuItem, payload=payload, policy=ITEM_POLICY, partial=False)
    enforce_rules_menu_item(patch)
    _enforce_dietary(patch)
    patch.setdefault("available", True)

    item = MenuItem(
        id=_new_id("item"),
        category_id=category.id,
        sort_order=len(category.items) + 1,
        **patch,
    )
    category.items.append(item)
    _touch(category.menu)
    db.session.flush()
    return item


@serialized
def update_category(org_id: str, category_id: str, updates: dict) -> MenuCategory | None:
    category = _category_in_org(org_id, category_id)
    if category is None:
        return None

    patch = validate_payload(model=MenuCategory, payload=updates, policy=CATEGORY_POLICY, partial=True)
    for key, value in patch.items():
        setattr(category, key, value)
    _touch(category.menu)
    db.session.flush()
    return category


@serialized
def update_item(org_id: str, category_id: str, item_id: str, updates: dict) -> MenuItem | None:
    category = _category_in_org(org_id, category_id)
    if category is None:
        return None
    item = next((i for i in category.items if i.id == item_id), None)
    if item is None:
        return None

    patch = validate_payload(model=MenuItem, payload=updates, policy=ITEM_POLICY, partial=True)
    enforce_rules_menu_item(patch)
    _enforce_dietary(patch)
    for key, value in patch.items():
        setattr(item, key, value)
    _touch(category.menu)
    db.session.flush()
    return item


@serialized
def delete_category(org_id: str, category_id: str) -> bool:
    category = _category_in_org(org_id, category_id)
    if category is None:
        return False
    menu = category.menu
    menu.categories.remove(category)
    _touch(menu)
    db.session.flush()
    return True


@serialized
def delete_item(org_id: str, category_id: str, item_id: str) -> bool:
    category = _category_in_org(org_id, category_id)
    if category is None:
        return False
    item = next((i for i in category.items if i.id == item_id), None)
    if item is None:
        return False
    category.items.remove(item)
    _touch(category.menu)
    db.session.flush()
    return True


@serialized
def create_menu(org_id: str, *, menu_id: str | None = None, name: Any = "Main Menu", description: Any = None) -> Menu:
    """Create the organization's active menu, deactivating any previous one."""
    for existing in db.session.query(Menu).filter(Menu.organization_id == org_id, Menu.is_active.is_(True)):
        existing.is_active = False
    menu = Menu(
        id=menu_id or _new_id("menu"),
        organization_id=org_id,
        name=name,
        description=description,
        is_active=True,
        updated_at=utcnow(),
        categories=[],
    )
    db.session.add(menu)
    db.session.flush()
    return menu
