from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


class AuditLogEntry(db.Model):
    """
    Append-only record of administrative mutations.

    APPEND-ONLY: rows are never updated or deleted. The service layer exposes
    create and list only.
    """
    __tablename__ = "audit_log"
    __table_args__ = (
        db.Index("ix_audit_log_performed_at", "performed_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    action = db.Column(db.String(32), nullable=False, index=True)
    entity_type = db.Column(db.String(32), nullable=False, index=True)
    entity_id = db.Column(db.String(64), nullable=False)
    performed_by = db.Column(db.String(255), nullable=False)
    performed_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    details = db.Column(db.JSON, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": str(self.id),
            "action": self.action,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
            "performedBy": self.performed_by,
            "performedAt": to_utc_z(self.performed_at),
            "details": self.details or {},
        }
