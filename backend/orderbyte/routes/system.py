# backend/orderbyte/routes/system.py
"""
System health endpoint.

Reports store connectivity and basic counts for deployment debugging.
"""

import time

from flask import Blueprint, current_app

from ..extensions import db
from ..models import Order, Organization
from ..responses import json_error, json_ok
from ..services.concurrency import serialized
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


@serialized
def _count_rows() -> dict:
    return {
        "organizations": db.session.query(Organization).count(),
        "orders": db.session.query(Order).count(),
    }


def check_database_health() -> dict:
    start_time = time.time()
    try:
        counts = _count_rows()
        return {
            "status": "healthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "details": counts,
        }
    except Exception:
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "error": "Database error",
        }


@system_bp.get("/health")
def health():
    database = check_database_health()
    if database["status"] != "healthy":
        return json_error("Database unavailable", 503, checks={"database": database})
    return json_ok(
        status="healthy",
        timestamp=to_utc_z(utcnow()),
        checks={"database": database},
    )
