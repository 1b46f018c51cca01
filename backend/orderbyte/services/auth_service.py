# Overview: Credential verification; password hashing and the pluggable Authenticator.

"""
Authentication Service

WHY: Every staff and superadmin action must be attributable to a verified
identity. The rest of the system only ever sees the outcome of
Authenticator.authenticate(): a Principal or a Denied. Swapping bcrypt
passwords for an identity provider means registering another Authenticator
on the app, nothing else changes.

MULTI-TENANT: Staff belong to exactly one organization. The same email may
exist in several organizations; an organizationId in the credentials picks
one. Platform admins belong to none.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost from BCRYPT_ROUNDS, 12 by default)
- Minimum 8 characters required
- Must contain uppercase, lowercase, digit, and special char
- Session tokens managed separately (see session_service.py)
- Staff of inactive organizations cannot authenticate
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import Organization, PlatformAdmin, StaffUser
from ..time_utils import utcnow
from ..validation import ValidationError
from .concurrency import serialized


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str
    organization_id: str | None = None


@dataclass(frozen=True)
class Principal:
    """A verified identity. principal_type is "staff" or "superadmin"."""
    principal_type: str
    principal_id: str
    email: str
    name: str
    role: str
    organization_id: str | None

    @property
    def is_superadmin(self) -> bool:
        return self.principal_type == "superadmin"


@dataclass(frozen=True)
class Denied:
    reason: str = "Invalid credentials"


AuthResult = Union[Principal, Denied]


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character (!@#$%^&*(),.'":{}|<>)

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str):
        raise PasswordValidationError("Password must be a string")

    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing. The cost factor comes
    from BCRYPT_ROUNDS so tests can run with the minimum.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str | None) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() prevents timing attacks automatically.
    A missing or malformed hash never verifies.
    """
    if not password_hash or not isinstance(password, str):
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


class Authenticator:
    """Credential verification seam: one method, Principal or Denied."""

    def authenticate(self, credentials: Credentials) -> AuthResult:
        raise NotImplementedError


class PasswordAuthenticator(Authenticator):
    """
    bcrypt password check against platform admins and staff users.

    Without an organizationId, platform admins are tried first, then staff in
    any active organization. With one, only that organization's staff match.
    """

    @serialized
    def authenticate(self, credentials: Credentials) -> AuthResult:
        email = (credentials.email or "").strip().lower()
        if not email or not credentials.password:
            return Denied("Email and password are required")

        if credentials.organization_id is None:
            admin = (
                db.session.query(PlatformAdmin)
                .filter(PlatformAdmin.email == email, PlatformAdmin.is_active.is_(True))
                .first()
            )
            if admin is not None and verify_password(credentials.password, admin.password_hash):
                admin.last_login_at = utcnow()
                return Principal(
                    principal_type="superadmin",
                    principal_id=admin.id,
                    email=admin.email,
                    name=admin.name,
                    role="superadmin",
                    organization_id=None,
                )

        query = (
            db.session.query(StaffUser)
            .join(Organization, StaffUser.organization_id == Organization.id)
            .filter(StaffUser.email == email, Organization.is_active.is_(True))
        )
        if credentials.organization_id is not None:
            query = query.filter(StaffUser.organization_id == credentials.organization_id)

        for staff in query.order_by(StaffUser.created_at.asc()).all():
            if verify_password(credentials.password, staff.password_hash):
                return Principal(
                    principal_type="staff",
                    principal_id=staff.id,
                    email=staff.email,
                    name=staff.name,
                    role=staff.role,
                    organization_id=staff.organization_id,
                )

        return Denied()
