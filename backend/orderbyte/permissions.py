# Overview: Permission definitions and the role -> permission map for staff.
# Each permission is defined as: (code, name, description, category)

from __future__ import annotations


class PermissionCategory:
    """Permission categories for grouping and display."""
    ORDERS = "ORDERS"
    MENU = "MENU"
    USERS = "USERS"
    ORGANIZATION = "ORGANIZATION"


PERMISSION_DEFINITIONS = [
    ("VIEW_ORDERS", "View Orders", "View the organization's orders", PermissionCategory.ORDERS),
    (
        "UPDATE_ORDER_STATUS",
        "Update Order Status",
        "Move orders through the preparation pipeline",
        PermissionCategory.ORDERS,
    ),
    ("CANCEL_ORDER", "Cancel Order", "Cancel pending or preparing orders", PermissionCategory.ORDERS),
    ("MANAGE_MENU", "Manage Menu", "Add, edit and remove categories and items", PermissionCategory.MENU),
    ("VIEW_STAFF", "View Staff", "View the staff directory", PermissionCategory.USERS),
    ("MANAGE_STAFF", "Manage Staff", "Add, edit and remove staff members", PermissionCategory.USERS),
    (
        "MANAGE_SETTINGS",
        "Manage Settings",
        "Change branding, contact details and ordering settings",
        PermissionCategory.ORGANIZATION,
    ),
    ("VIEW_ANALYTICS", "View Analytics", "View order and revenue analytics", PermissionCategory.ORGANIZATION),
    ("MANAGE_QR", "Manage QR Codes", "Issue table QR links", PermissionCategory.ORGANIZATION),
]

ALL_PERMISSION_CODES = frozenset(code for code, _, _, _ in PERMISSION_DEFINITIONS)

_FLOOR_PERMISSIONS = frozenset({"VIEW_ORDERS", "UPDATE_ORDER_STATUS"})

ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    "admin": ALL_PERMISSION_CODES,
    "manager": ALL_PERMISSION_CODES,
    "staff": _FLOOR_PERMISSIONS,
    "chef": _FLOOR_PERMISSIONS,
    "barman": _FLOOR_PERMISSIONS,
    "waiter": _FLOOR_PERMISSIONS | {"CANCEL_ORDER"},
    "reception": _FLOOR_PERMISSIONS | {"CANCEL_ORDER"},
}

# Which roles may move an order into each status. The kitchen prepares,
# front of house serves.
STATUS_TARGET_ROLES: dict[str, frozenset[str]] = {
    "preparing": frozenset({"admin", "manager", "staff", "chef", "barman"}),
    "ready": frozenset({"admin", "manager", "staff", "chef", "barman"}),
    "delivered": frozenset({"admin", "manager", "staff", "waiter", "reception"}),
    "cancelled": frozenset(role for role, perms in ROLE_PERMISSIONS.items() if "CANCEL_ORDER" in perms),
}


def role_has_permission(role: str, code: str) -> bool:
    return code in ROLE_PERMISSIONS.get(role, frozenset())


def role_can_set_status(role: str, status: str) -> bool:
    return role in STATUS_TARGET_ROLES.get(status, frozenset())


def get_permission_definition(code: str) -> tuple | None:
    for definition in PERMISSION_DEFINITIONS:
        if definition[0] == code:
            return definition
    return None
