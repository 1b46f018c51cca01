# Overview: Signed, time-limited table links encoded into printed QR codes.

from __future__ import annotations

from urllib.parse import urlencode, urlsplit

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..models import Organization
from ..validation import ValidationError, require_text
from . import organization_service


QR_SALT = "orderbyte.table-qr"


class QRTokenError(ValidationError):
    """Raised when a table token is malformed, tampered with or expired."""
    pass


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=QR_SALT)


def _expiry_minutes(org: Organization) -> int:
    return int((org.settings or {}).get("qrCodeExpiryMinutes") or 60)


def build_menu_url(org_id: str, base_url: str, query: dict) -> str:
    """
    Customer-facing menu URL for a tenant.

    On localhost the tenant goes in the path; elsewhere it becomes the
    subdomain of the public origin.
    """
    parts = urlsplit(base_url)
    scheme = parts.scheme or "http"
    host = parts.hostname or "localhost"
    port = f":{parts.port}" if parts.port else ""
    qs = urlencode(query)

    if host in {"localhost", "127.0.0.1"}:
        return f"{scheme}://{host}{port}/menu/{org_id}?{qs}"

    labels = host.split(".")
    if len(labels) > 2 or labels[0] == "www":
        # Replace an existing subdomain (www.example.com, other.example.com)
        labels = labels[1:]
    root = ".".join(labels)
    return f"{scheme}://{org_id}.{root}{port}/menu?{qs}"


def issue_table_link(org: Organization, table_number, base_url: str) -> dict:
    table = require_text(table_number, "Table number is required", max_length=32)
    token = _serializer().dumps({"o": org.id, "t": table})
    minutes = _expiry_minutes(org)
    return {
        "organizationId": org.id,
        "tableNumber": table,
        "token": token,
        "url": build_menu_url(org.id, base_url, {"table": table, "t": token}),
        "expiresInMinutes": minutes,
    }


def read_table_token(token: str) -> dict:
    """
    Verify a table token against its organization's current QR expiry.

    Returns {"organizationId", "tableNumber"}; raises QRTokenError otherwise.
    """
    serializer = _serializer()
    try:
        payload = serializer.loads(token)
    except BadSignature:
        raise QRTokenError("Invalid QR code")

    if not isinstance(payload, dict) or "o" not in payload or "t" not in payload:
        raise QRTokenError("Invalid QR code")

    org = organization_service.get_organization(payload["o"])
    if org is None:
        raise QRTokenError("Invalid QR code")

    try:
        serializer.loads(token, max_age=_expiry_minutes(org) * 60)
    except SignatureExpired:
        raise QRTokenError("QR code has expired")

    return {"organizationId": org.id, "tableNumber": payload["t"]}
