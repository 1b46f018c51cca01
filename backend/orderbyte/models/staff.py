from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class StaffUser(db.Model):
    """
    Restaurant staff member.

    MULTI-TENANT: email is unique within an organization, not globally.
    The same person may work for two restaurants under one address.
    """
    __tablename__ = "staff_users"
    __table_args__ = (
        db.UniqueConstraint("organization_id", "email", name="uq_staff_org_email"),
    )

    id = db.Column(db.String(64), primary_key=True)
    organization_id = db.Column(db.String(64), db.ForeignKey("organizations.id"), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    role = db.Column(db.String(32), nullable=False)

    # Null means the account exists in the directory but cannot log in yet
    password_hash = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "organizationId": self.organization_id,
            "email": self.email,
            "name": self.name,
            "role": self.role,
            "canLogin": self.password_hash is not None,
            "createdAt": to_utc_z(self.created_at),
        }


class PlatformAdmin(db.Model):
    """Superadmin account: manages organizations, belongs to none."""
    __tablename__ = "platform_admins"

    id = db.Column(db.String(64), primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    name = db.Column(db.String(120), nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    last_login_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": "superadmin",
            "isActive": self.is_active,
            "createdAt": to_utc_z(self.created_at),
            "lastLoginAt": to_utc_z(self.last_login_at),
        }
