# Overview: Session tokens for staff and platform admins.

"""
Session Token Management Service with Multi-Tenant Support

WHY: Secure session management with automatic timeout and revocation.
Tokens are cryptographically secure, hashed in the store, and time-limited.

MULTI-TENANT: Staff sessions capture organization_id and role at creation
time. That context is immutable for the session lifetime; a role change
takes effect at the next login.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage
- 24-hour absolute timeout (SESSION_ABSOLUTE_TIMEOUT)
- 2-hour idle timeout (SESSION_IDLE_TIMEOUT)
- Revoked on logout, staff removal or organization deactivation
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from ..extensions import db
from ..models import Organization, PlatformAdmin, SessionToken, StaffUser
from ..time_utils import utcnow
from .auth_service import Principal
from .concurrency import serialized


SESSION_ABSOLUTE_TIMEOUT = timedelta(hours=24)
SESSION_IDLE_TIMEOUT = timedelta(hours=2)


@dataclass
class SessionContext:
    """
    Session context returned by validate_session.

    All fields come from the immutable session record.
    """
    session: SessionToken
    principal_type: str
    principal_id: str
    email: str
    role: str
    organization_id: str | None

    @property
    def is_superadmin(self) -> bool:
        return self.principal_type == "superadmin"

    def to_dict(self) -> dict:
        return self.session.to_dict()


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    This is the plaintext token sent to client (never stored).
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for storage using SHA-256.

    WHY SHA-256 not bcrypt: Tokens are already high-entropy (unlike passwords).
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def _revoke(session: SessionToken, reason: str) -> None:
    session.is_revoked = True
    session.revoked_at = utcnow()
    session.revoked_reason = reason


@serialized
def create_session(
    principal: Principal,
    user_agent: str | None = None,
    ip_address: str | None = None,
) -> tuple[SessionToken, str]:
    """
    Create a session for an authenticated principal.

    Returns (session_record, plaintext_token).
    """
    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        principal_type=principal.principal_type,
        principal_id=principal.principal_id,
        email=principal.email,
        role=principal.role,
        organization_id=principal.organization_id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + SESSION_ABSOLUTE_TIMEOUT,
        user_agent=(user_agent or "")[:512] or None,
        ip_address=ip_address,
        is_revoked=False,
    )
    db.session.add(session)
    db.session.flush()
    return session, plaintext_token


@serialized
def validate_session(token: str) -> SessionContext | None:
    """
    Validate session token and return SessionContext if valid.

    Returns None if:
    - Token is unknown, expired, idle too long, or revoked
    - The staff member was removed or the platform admin deactivated
    - The staff member's organization was deactivated

    Updates last_used_at on success.
    """
    if not token:
        return None
    now = utcnow()

    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()
    if not session:
        return None

    if session.expires_at < now:
        return None

    if now - session.last_used_at > SESSION_IDLE_TIMEOUT:
        _revoke(session, "Idle timeout")
        return None

    if session.principal_type == "superadmin":
        admin = db.session.get(PlatformAdmin, session.principal_id)
        if admin is None or not admin.is_active:
            _revoke(session, "Account deactivated")
            return None
    else:
        staff = db.session.get(StaffUser, session.principal_id)
        if staff is None or staff.organization_id != session.organization_id:
            _revoke(session, "Staff member removed")
            return None
        org = db.session.get(Organization, session.organization_id)
        if org is None or not org.is_active:
            _revoke(session, "Organization deactivated")
            return None

    session.last_used_at = now

    return SessionContext(
        session=session,
        principal_type=session.principal_type,
        principal_id=session.principal_id,
        email=session.email,
        role=session.role,
        organization_id=session.organization_id,
    )


@serialized
def revoke_session(token: str, reason: str = "User logout") -> bool:
    """Returns True if a live session was revoked, False if not found."""
    session = db.session.query(SessionToken).filter_by(
        token_hash=hash_token(token),
        is_revoked=False,
    ).first()
    if not session:
        return False
    _revoke(session, reason)
    return True


@serialized
def revoke_principal_sessions(principal_type: str, principal_id: str, reason: str) -> int:
    """Revoke every live session of one principal. Returns the count."""
    sessions = db.session.query(SessionToken).filter_by(
        principal_type=principal_type,
        principal_id=principal_id,
        is_revoked=False,
    ).all()
    for session in sessions:
        _revoke(session, reason)
    return len(sessions)
