# Overview: JSON envelope helpers; every API response is {"success": bool, ...}.

from __future__ import annotations

from flask import jsonify, request


def json_ok(status_code: int = 200, **payload):
    body = {"success": True}
    body.update(payload)
    return jsonify(body), status_code


def json_error(message: str, status_code: int = 400, **extra):
    body = {"success": False, "error": message}
    body.update(extra)
    return jsonify(body), status_code


def json_validation_error(exc):
    """400 envelope for a ValidationError, with its details when present."""
    details = getattr(exc, "details", None)
    if details:
        return json_error(str(exc), 400, details=details)
    return json_error(str(exc), 400)


def json_body() -> dict:
    """Request JSON object, or {} when the body is missing or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def parse_limit(raw, *, default: int | None, maximum: int | None = None) -> int | None:
    """
    Parse a ?limit= value. Blank means default; values above maximum are
    clamped. Raises ValueError for non-positive or non-integer input.
    """
    if raw is None or str(raw).strip() == "":
        return default
    text = str(raw).strip()
    if not text.isdigit() or int(text) <= 0:
        raise ValueError("limit must be a positive integer")
    limit = int(text)
    if maximum is not None:
        limit = min(limit, maximum)
    return limit
