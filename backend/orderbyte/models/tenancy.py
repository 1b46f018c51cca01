from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Organization(db.Model):
    """
    Multi-tenant root: every restaurant is an Organization.

    WHY: The organization id doubles as the tenant key (subdomain, x-tenant-id
    header, URL segment). Menus, orders and staff all hang off it and no
    query may cross organization boundaries.

    DESIGN:
    - id is a lowercase slug chosen at creation, never reassigned
    - theme/contact/settings are JSON documents replaced wholesale on update
    - deletion is soft: is_active flips to False, the row stays
    """
    __tablename__ = "organizations"

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    logo = db.Column(db.String(512), nullable=True)

    theme = db.Column(db.JSON, nullable=False)
    contact = db.Column(db.JSON, nullable=False, default=dict)
    settings = db.Column(db.JSON, nullable=False)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Organization id={self.id!r} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "logo": self.logo,
            "theme": dict(self.theme or {}),
            "contact": dict(self.contact or {}),
            "settings": dict(self.settings or {}),
            "isActive": self.is_active,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }
