from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class SessionToken(db.Model):
    """
    Login session for a staff member or platform admin.

    MULTI-TENANT: staff sessions carry the organization id captured at login;
    every staff request is bound to it. Platform admin sessions carry none.

    SECURITY NOTES:
    - Tokens stored hashed (SHA-256), never in plaintext
    - 24-hour absolute timeout
    - 2-hour idle timeout
    - Revocable on logout, staff removal or organization deactivation
    - Role and organization are frozen for the session lifetime
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_principal", "principal_type", "principal_id", "is_revoked"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # "staff" or "superadmin"
    principal_type = db.Column(db.String(16), nullable=False)
    principal_id = db.Column(db.String(64), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(32), nullable=False)
    organization_id = db.Column(db.String(64), db.ForeignKey("organizations.id"), nullable=True, index=True)

    token_hash = db.Column(db.String(255), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    last_used_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False, index=True)
    revoked_at = db.Column(db.DateTime, nullable=True)
    revoked_reason = db.Column(db.String(255), nullable=True)

    user_agent = db.Column(db.String(512), nullable=True)
    ip_address = db.Column(db.String(45), nullable=True)  # IPv6 max length

    def to_dict(self) -> dict:
        return {
            "userId": self.principal_id,
            "email": self.email,
            "role": self.role,
            "organizationId": self.organization_id,
            "createdAt": to_utc_z(self.created_at),
            "expiresAt": to_utc_z(self.expires_at),
        }
