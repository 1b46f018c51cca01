# Overview: Staff store; per-organization staff directory.

from __future__ import annotations

import secrets
from typing import Any

from ..extensions import db
from ..models import StaffUser
from ..time_utils import utcnow
from ..validation import ConflictError, ValidationError, normalize_email, require_text
from . import session_service
from .auth_service import hash_password
from .concurrency import serialized


STAFF_ROLES = ("admin", "manager", "staff", "chef", "waiter", "barman", "reception")

UPDATABLE_FIELDS = ("email", "name", "role", "password")


class StaffError(ValidationError):
    """Raised when staff input is invalid."""
    pass


def validate_role(role: Any) -> str:
    if role not in STAFF_ROLES:
        raise StaffError(f"Invalid role '{role}'. Must be one of: {', '.join(STAFF_ROLES)}")
    return role


def _email_taken(org_id: str, email: str, *, exclude_id: str | None = None) -> bool:
    query = db.session.query(StaffUser.id).filter(
        StaffUser.organization_id == org_id,
        StaffUser.email == email,
    )
    if exclude_id is not None:
        query = query.filter(StaffUser.id != exclude_id)
    return query.first() is not None


@serialized
def list_staff(org_id: str) -> list[StaffUser]:
    return (
        db.session.query(StaffUser)
        .filter(StaffUser.organization_id == org_id)
        .order_by(StaffUser.created_at.asc(), StaffUser.id.asc())
        .all()
    )


@serialized
def get_staff(staff_id: str, org_id: str) -> StaffUser | None:
    staff = db.session.get(StaffUser, staff_id)
    if staff is None or staff.organization_id != org_id:
        return None
    return staff


@serialized
def create_staff(
    org_id: str,
    *,
    email: Any,
    name: Any,
    role: Any,
    password: Any = None,
) -> StaffUser:
    """
    Add a staff member to one organization.

    Raises ConflictError when the email already exists in that organization;
    the same email in another organization is fine.
    """
    if not email or not name or not role:
        raise StaffError("Email, name, and role are required")

    normalized_email = normalize_email(email)
    staff_name = require_text(name, "Name is required", max_length=120)
    staff_role = validate_role(role)

    if _email_taken(org_id, normalized_email):
        raise ConflictError("Staff member with this email already exists")

    now = utcnow()
    staff = StaffUser(
        id=f"staff-{secrets.token_hex(6)}",
        organization_id=org_id,
        email=normalized_email,
        name=staff_name,
        role=staff_role,
        password_hash=hash_password(password) if password is not None else None,
        created_at=now,
        updated_at=now,
    )
    db.session.add(staff)
    db.session.flush()
    return staff


@serialized
def update_staff(staff_id: str, org_id: str, updates: dict) -> StaffUser | None:
    """Explicit field update. Returns None for unknown or foreign staff ids."""
    if not isinstance(updates, dict):
        raise StaffError("Invalid JSON payload")
    for key in updates:
        if key not in UPDATABLE_FIELDS:
            raise StaffError(f"Field not allowed: {key}")
    if not updates:
        raise StaffError("No changes provided")

    staff = get_staff(staff_id, org_id)
    if staff is None:
        return None

    if "email" in updates:
        new_email = normalize_email(updates["email"])
        if _email_taken(org_id, new_email, exclude_id=staff.id):
            raise ConflictError("Staff member with this email already exists")
        staff.email = new_email
    if "name" in updates:
        staff.name = require_text(updates["name"], "Name is required", max_length=120)
    if "role" in updates:
        staff.role = validate_role(updates["role"])
    if "password" in updates:
        staff.password_hash = hash_password(updates["password"])

    staff.updated_at = utcnow()
    db.session.flush()

    if "role" in updates or "password" in updates or "email" in updates:
        # Sessions freeze role and email; force a fresh login
        session_service.revoke_principal_sessions("staff", staff.id, "Staff account changed")
    return staff


@serialized
def delete_staff(staff_id: str, org_id: str) -> bool:
    staff = get_staff(staff_id, org_id)
    if staff is None:
        return False
    session_service.revoke_principal_sessions("staff", staff.id, "Staff member removed")
    db.session.delete(staff)
    db.session.flush()
    return True
