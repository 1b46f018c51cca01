from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import JSON, Boolean, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta


# Maximum price in minor units (9,999,999.99 in major units)
MAX_PRICE_MINOR = 999_999_999

MAX_ORDER_ITEMS = 100
MAX_LINE_QUANTITY = 999
MAX_LINE_NOTES = 500

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ValidationError(ValueError):
    """400-level input problem."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate staff email)."""


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central update contract for a model:
    - writable_fields: wire key -> column key, the only keys a client may send
    - required_on_create: wire keys required when creating
    - string_list_fields: wire keys holding a JSON list of strings
    """
    writable_fields: dict[str, str]
    required_on_create: set[str] = field(default_factory=set)
    string_list_fields: set[str] = field(default_factory=set)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_int(value: Any, name: str) -> int:
    """Strict integer coercion: rejects bools, decimals and scientific notation."""
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{name} must be an integer")
        if "e" in stripped.lower():
            raise ValidationError(f"{name} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{name} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{name} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{name} must be an integer, not a decimal")
    raise ValidationError(f"{name} must be an integer")


def coerce_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValidationError(f"{name} must be true or false")


def coerce_string_list(value: Any, name: str) -> list[str]:
    if not isinstance(value, list):
        raise ValidationError(f"{name} must be a list of strings")
    out = []
    for entry in value:
        if not isinstance(entry, str) or not entry.strip():
            raise ValidationError(f"{name} must be a list of strings")
        out.append(entry.strip())
    return out


def require_text(value: Any, message: str, *, max_length: int = 255) -> str:
    """Return the trimmed string, raising ValidationError(message) when blank."""
    if value is None or not isinstance(value, (str, int)) or isinstance(value, bool):
        raise ValidationError(message)
    text = str(value).strip()
    if not text:
        raise ValidationError(message)
    if len(text) > max_length:
        raise ValidationError(f"{message.split(' is ')[0]} exceeds max length {max_length}")
    return text


def optional_text(value: Any, name: str, *, max_length: int = 1000) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{name} must be a string")
    text = value.strip()
    if len(text) > max_length:
        raise ValidationError(f"{name} exceeds max length {max_length}")
    return text or None


def normalize_email(value: Any) -> str:
    if not isinstance(value, str) or not _EMAIL_RE.match(value.strip()):
        raise ValidationError("Invalid email address")
    return value.strip().lower()


def _coerce_value(col, key: str, value: Any, policy: ModelValidationPolicy):
    coltype = col.type

    if value is None:
        return None

    if key in policy.string_list_fields:
        return coerce_string_list(value, key)

    if isinstance(coltype, Integer):
        return coerce_int(value, key)

    if isinstance(coltype, Boolean):
        return coerce_bool(value, key)

    if isinstance(coltype, (String, Text)):
        if not isinstance(value, (str, int)) or isinstance(value, bool):
            raise ValidationError(f"{key} must be a string")
        return str(value).strip()

    if isinstance(coltype, JSON):
        return value

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - the policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a patch dict keyed by column name.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) is None)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col_key = policy.writable_fields[k]
        col = cols[col_key]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[col_key] = None
            continue

        val = _coerce_value(col, k, raw, policy)

        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[col_key] = val

    return patch


def enforce_rules_menu_item(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    """
    if "price" in patch and patch["price"] is not None:
        price = patch["price"]
        if price < 0:
            raise ValidationError("price must be >= 0")
        if price > MAX_PRICE_MINOR:
            raise ValidationError(f"price cannot exceed {MAX_PRICE_MINOR}")
