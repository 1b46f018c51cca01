from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Menu(db.Model):
    """
    A tenant's catalog: ordered categories, each an ordered list of items.

    Only one menu per organization is active; order creation and the public
    menu endpoint both read the active one.
    """
    __tablename__ = "menus"
    __table_args__ = (
        db.Index("ix_menus_org_active", "organization_id", "is_active"),
    )

    id = db.Column(db.String(64), primary_key=True)
    organization_id = db.Column(db.String(64), db.ForeignKey("organizations.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    categories = db.relationship(
        "MenuCategory",
        order_by="MenuCategory.sort_order",
        cascade="all, delete-orphan",
        lazy="selectin",
        back_populates="menu",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "organizationId": self.organization_id,
            "name": self.name,
            "description": self.description,
            "isActive": self.is_active,
            "lastUpdated": to_utc_z(self.updated_at),
            "categories": [c.to_dict() for c in sorted(self.categories, key=lambda c: c.sort_order)],
        }


class MenuCategory(db.Model):
    __tablename__ = "menu_categories"

    id = db.Column(db.String(64), primary_key=True)
    menu_id = db.Column(db.String(64), db.ForeignKey("menus.id"), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    menu = db.relationship("Menu", back_populates="categories")
    items = db.relationship(
        "MenuItem",
        order_by="MenuItem.sort_order",
        cascade="all, delete-orphan",
        lazy="selectin",
        back_populates="category",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "order": self.sort_order,
            "items": [i.to_dict() for i in sorted(self.items, key=lambda i: i.sort_order)],
        }


class MenuItem(db.Model):
    """
    Orderable dish. price is an integer count of minor currency units;
    the currency comes from the organization's settings.
    """
    __tablename__ = "menu_items"

    id = db.Column(db.String(64), primary_key=True)
    category_id = db.Column(db.String(64), db.ForeignKey("menu_categories.id"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    price = db.Column(db.Integer, nullable=False)
    image = db.Column(db.String(512), nullable=True)
    allergens = db.Column(db.JSON, nullable=True)
    dietary = db.Column(db.JSON, nullable=True)
    available = db.Column(db.Boolean, nullable=False, default=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    category = db.relationship("MenuCategory", back_populates="items")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "image": self.image,
            "allergens": list(self.allergens or []),
            "dietary": list(self.dietary or []),
            "available": self.available,
        }
