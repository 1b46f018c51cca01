# Overview: Append-only audit trail of administrative mutations.

from __future__ import annotations

from typing import Any

from ..extensions import db
from ..models import AuditLogEntry
from ..time_utils import utcnow
from ..validation import ValidationError
from .concurrency import serialized


AUDIT_ACTIONS = ("create", "update", "delete", "settings_change")
ENTITY_TYPES = ("organization", "menu", "user")


@serialized
def record(
    action: str,
    entity_type: str,
    entity_id: str,
    performed_by: str,
    details: dict[str, Any] | None = None,
) -> AuditLogEntry:
    """Append an entry; id and timestamp are assigned here."""
    if action not in AUDIT_ACTIONS:
        raise ValidationError(f"Unknown audit action: {action}")
    if entity_type not in ENTITY_TYPES:
        raise ValidationError(f"Unknown audit entity type: {entity_type}")

    entry = AuditLogEntry(
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        performed_by=performed_by,
        performed_at=utcnow(),
        details=details or {},
    )
    db.session.add(entry)
    db.session.flush()
    return entry


@serialized
def list_entries(
    *,
    action: str | None = None,
    entity_type: str | None = None,
    limit: int | None = None,
) -> list[AuditLogEntry]:
    """Newest first. Entries have no update or delete counterpart."""
    query = db.session.query(AuditLogEntry)
    if action:
        query = query.filter(AuditLogEntry.action == action)
    if entity_type:
        query = query.filter(AuditLogEntry.entity_type == entity_type)
    query = query.order_by(AuditLogEntry.performed_at.desc(), AuditLogEntry.id.desc())
    if limit is not None:
        query = query.limit(limit)
    return query.all()
