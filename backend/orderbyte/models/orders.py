from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class Order(db.Model):
    """
    A customer's order at a table.

    LIFECYCLE: pending -> preparing -> ready -> delivered, with cancelled
    reachable from pending or preparing. See services/order_service.py.

    Lines are snapshots of the menu at creation time; later menu edits never
    change a placed order.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_org_created", "organization_id", "created_at"),
        db.Index("ix_orders_org_customer", "organization_id", "customer_session_id"),
    )

    id = db.Column(db.String(64), primary_key=True)
    organization_id = db.Column(db.String(64), db.ForeignKey("organizations.id"), nullable=False, index=True)
    customer_session_id = db.Column(db.String(128), nullable=True)

    customer_name = db.Column(db.String(120), nullable=False)
    table_number = db.Column(db.String(32), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    total_amount = db.Column(db.Integer, nullable=False)
    status = db.Column(db.String(16), nullable=False, default="pending", index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    lines = db.relationship(
        "OrderLine",
        order_by="OrderLine.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Order id={self.id!r} org={self.organization_id!r} status={self.status!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "organizationId": self.organization_id,
            "customerSessionId": self.customer_session_id,
            "customerName": self.customer_name,
            "tableNumber": self.table_number,
            "notes": self.notes,
            "items": [line.to_dict() for line in self.lines],
            "totalAmount": self.total_amount,
            "status": self.status,
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
        }


class OrderLine(db.Model):
    __tablename__ = "order_lines"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(64), db.ForeignKey("orders.id"), nullable=False, index=True)
    position = db.Column(db.Integer, nullable=False)

    # Snapshot of the menu item, not a foreign key
    item_id = db.Column(db.String(64), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    price = db.Column(db.Integer, nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    notes = db.Column(db.String(500), nullable=True)

    @property
    def line_total(self) -> int:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        data = {
            "itemId": self.item_id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
        }
        if self.notes:
            data["notes"] = self.notes
        return data
