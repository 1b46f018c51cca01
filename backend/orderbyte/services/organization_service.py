# Overview: Organization store; tenant records with theme, contact and settings documents.

from __future__ import annotations

import re
from typing import Any

from sqlalchemy import func

from ..extensions import db
from ..models import Order, Organization
from ..time_utils import utcnow
from ..validation import ValidationError, coerce_bool, coerce_int, optional_text, require_text
from . import menu_service
from .concurrency import serialized


SUPPORTED_CURRENCIES = ("MWK", "USD", "EUR", "GBP")

DEFAULT_SETTINGS = {
    "currency": "MWK",
    "taxRate": 0,
    "serviceCharge": 0,
    "allowTips": True,
    "requireTableNumber": True,
    "enableOnlinePayment": False,
    "qrCodeExpiryMinutes": 60,
}

DEFAULT_THEME = {
    "primaryColor": "#2d3748",
    "secondaryColor": "#4a5568",
    "accentColor": "#f6ad55",
}

# Organization ids double as subdomains
_ORG_ID_RE = re.compile(r"^[a-z0-9][a-z0-9-]{1,62}$")
_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")

_THEME_KEYS = ("primaryColor", "secondaryColor", "accentColor")
_CONTACT_KEYS = ("phone", "website", "email", "address")
_BOOL_SETTINGS = ("allowTips", "requireTableNumber", "enableOnlinePayment")

UPDATABLE_FIELDS = ("name", "logo", "theme", "contact", "settings", "isActive")


class OrganizationError(ValidationError):
    """Raised when organization input is invalid."""
    pass


def normalize_org_id(value: Any) -> str:
    if not isinstance(value, str) or not _ORG_ID_RE.match(value.strip()):
        raise OrganizationError(
            "Organization ID must be 2-63 lowercase letters, digits or hyphens"
        )
    return value.strip()


def normalize_theme(value: Any) -> dict:
    if not isinstance(value, dict):
        raise OrganizationError("Theme must be an object")
    theme = {}
    for key in _THEME_KEYS:
        color = value.get(key)
        if not isinstance(color, str) or not _COLOR_RE.match(color):
            raise OrganizationError(f"Theme {key} must be a #rrggbb colour")
        theme[key] = color.lower()
    unknown = set(value) - set(_THEME_KEYS)
    if unknown:
        raise OrganizationError(f"Unknown theme field: {sorted(unknown)[0]}")
    return theme


def normalize_contact(value: Any) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise OrganizationError("Contact must be an object")
    contact = {}
    for key, raw in value.items():
        if key not in _CONTACT_KEYS:
            raise OrganizationError(f"Unknown contact field: {key}")
        text = optional_text(raw, key, max_length=255)
        if text is not None:
            contact[key] = text
    return contact


def _rate(value: Any, name: str) -> int | float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise OrganizationError(f"{name} must be a number")
    if value < 0 or value > 100:
        raise OrganizationError(f"{name} must be between 0 and 100")
    return value


def normalize_settings(value: Any) -> dict:
    """
    Validate a settings document and fill missing keys from DEFAULT_SETTINGS.

    The result always replaces the stored document wholesale; it is never
    merged with the previous value.
    """
    if value is None:
        return dict(DEFAULT_SETTINGS)
    if not isinstance(value, dict):
        raise OrganizationError("Settings must be an object")

    unknown = set(value) - set(DEFAULT_SETTINGS)
    if unknown:
        raise OrganizationError(f"Unknown settings field: {sorted(unknown)[0]}")

    settings = dict(DEFAULT_SETTINGS)
    if "currency" in value:
        currency = value["currency"]
        if currency not in SUPPORTED_CURRENCIES:
            raise OrganizationError(
                f"currency must be one of {', '.join(SUPPORTED_CURRENCIES)}"
            )
        settings["currency"] = currency
    if "taxRate" in value:
        settings["taxRate"] = _rate(value["taxRate"], "taxRate")
    if "serviceCharge" in value:
        settings["serviceCharge"] = _rate(value["serviceCharge"], "serviceCharge")
    for key in _BOOL_SETTINGS:
        if key in value:
            settings[key] = coerce_bool(value[key], key)
    if "qrCodeExpiryMinutes" in value:
        minutes = coerce_int(value["qrCodeExpiryMinutes"], "qrCodeExpiryMinutes")
        if minutes <= 0:
            raise OrganizationError("qrCodeExpiryMinutes must be > 0")
        settings["qrCodeExpiryMinutes"] = minutes
    return settings


@serialized
def list_organizations(*, include_inactive: bool = False) -> list[Organization]:
    query = db.session.query(Organization)
    if not include_inactive:
        query = query.filter(Organization.is_active.is_(True))
    return query.order_by(Organization.created_at.asc(), Organization.id.asc()).all()


@serialized
def get_organization(org_id: str | None) -> Organization | None:
    """Active organization or None. Inactive organizations are invisible."""
    if not org_id:
        return None
    org = db.session.get(Organization, org_id)
    if org is None or not org.is_active:
        return None
    return org


@serialized
def find_organization(org_id: str) -> Organization | None:
    """Any organization, active or not (superadmin tooling only)."""
    return db.session.get(Organization, org_id)


@serialized
def create_organization(
    *,
    org_id: Any,
    name: Any,
    theme: Any,
    contact: Any = None,
    settings: Any = None,
    logo: Any = None,
) -> Organization:
    oid = normalize_org_id(org_id)
    org_name = require_text(name, "Organization name is required")
    normalized_theme = normalize_theme(theme)
    normalized_contact = normalize_contact(contact)
    normalized_settings = normalize_settings(settings)
    org_logo = optional_text(logo, "logo", max_length=512)

    if db.session.get(Organization, oid) is not None:
        # Inactive ids stay reserved
        raise OrganizationError("Organization ID already exists")

    now = utcnow()
    org = Organization(
        id=oid,
        name=org_name,
        logo=org_logo,
        theme=normalized_theme,
        contact=normalized_contact,
        settings=normalized_settings,
        is_active=True,
        created_at=now,
        updated_at=now,
    )
    db.session.add(org)
    db.session.flush()

    # New tenants start with an empty active menu staff can fill in
    menu_service.create_menu(oid, menu_id=f"{oid}-main", name="Main Menu")
    return org


@serialized
def update_organization(org_id: str, updates: dict) -> Organization | None:
    """
    Apply a partial update.

    Top-level fields are replaced; theme, contact and settings documents are
    replaced wholesale (normalized, not deep-merged). Returns None when the id
    is unknown. Inactive organizations can be updated, which is how they are
    reactivated.
    """
    if not isinstance(updates, dict):
        raise OrganizationError("Invalid JSON payload")
    for key in updates:
        if key not in UPDATABLE_FIELDS:
            raise OrganizationError(f"Field not allowed: {key}")
    if not updates:
        raise OrganizationError("No changes provided")

    org = db.session.get(Organization, org_id)
    if org is None:
        return None

    if "name" in updates:
        org.name = require_text(updates["name"], "Organization name is required")
    if "logo" in updates:
        org.logo = optional_text(updates["logo"], "logo", max_length=512)
    if "theme" in updates:
        org.theme = normalize_theme(updates["theme"])
    if "contact" in updates:
        org.contact = normalize_contact(updates["contact"])
    if "settings" in updates:
        org.settings = normalize_settings(updates["settings"])
    if "isActive" in updates:
        org.is_active = coerce_bool(updates["isActive"], "isActive")

    org.updated_at = utcnow()
    db.session.flush()
    return org


@serialized
def delete_organization(org_id: str) -> bool:
    """Soft delete. False when the id is unknown or already inactive."""
    org = db.session.get(Organization, org_id)
    if org is None or not org.is_active:
        return False
    org.is_active = False
    org.updated_at = utcnow()
    db.session.flush()
    return True


@serialized
def get_stats() -> dict:
    total = db.session.query(func.count(Organization.id)).scalar() or 0
    active = (
        db.session.query(func.count(Organization.id))
        .filter(Organization.is_active.is_(True))
        .scalar()
        or 0
    )
    total_orders = db.session.query(func.count(Order.id)).scalar() or 0
    revenue = (
        db.session.query(func.coalesce(func.sum(Order.total_amount), 0))
        .filter(Order.status != "cancelled")
        .scalar()
        or 0
    )
    return {
        "totalOrganizations": int(total),
        "activeOrganizations": int(active),
        "totalOrders": int(total_orders),
        "totalRevenue": int(revenue),
    }
