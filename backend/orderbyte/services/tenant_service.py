"""
Multi-Tenant Service: Tenant Resolution and Scoping Helpers

WHY: Every customer request names a restaurant somehow: an x-tenant-id
header, the subdomain it was served from, or an explicit organizationId.
Resolution lives here so routes agree on the precedence, and cross-tenant
probes are logged in one place.

SECURITY INVARIANTS:
1. A resolved tenant id is only a claim; callers must still check the
   organization exists and is active before using it
2. Staff requests are bound to the organization captured in their session
3. Cross-tenant access attempts answer "not found" and are logged

USAGE:
    from orderbyte.services.tenant_service import resolve_tenant_id

    org_id = resolve_tenant_id(request.headers, explicit=payload.get("organizationId"))
"""

from __future__ import annotations

from typing import Mapping

from flask import current_app, request

TENANT_HEADER = "x-tenant-id"

_LOOPBACK_HOSTS = {"localhost", "127.0.0.1"}


def tenant_from_host(host: str | None) -> str | None:
    """
    Derive a tenant id from a Host header value.

    RULES:
    - a port suffix is ignored
    - localhost / 127.0.0.1 carry no tenant
    - "<tenant>.localhost" yields <tenant>, except "www"
    - otherwise the first label, when the host has at least two labels
      and that label is not "www"

    Pure function: no I/O, no failure mode beyond returning None.
    """
    if not host:
        return None

    hostname = host.strip().lower()
    if hostname.startswith("["):
        # IPv6 literal never carries a tenant
        return None
    hostname = hostname.split(":", 1)[0]

    if not hostname or hostname in _LOOPBACK_HOSTS:
        return None

    if hostname.endswith(".localhost"):
        sub = hostname[: -len(".localhost")]
        if not sub or sub == "www":
            return None
        return sub

    labels = hostname.split(".")
    if len(labels) < 2:
        return None
    first = labels[0]
    if not first or first == "www":
        return None
    return first


def resolve_tenant_id(
    headers: Mapping[str, str],
    *,
    explicit: str | None = None,
) -> str | None:
    """
    Resolve the tenant for a customer request.

    Precedence: x-tenant-id header, then Host subdomain, then the explicit
    organizationId from the body or query string.
    """
    header_value = (headers.get(TENANT_HEADER) or "").strip()
    if header_value:
        return header_value

    from_host = tenant_from_host(headers.get("Host"))
    if from_host:
        return from_host

    if isinstance(explicit, str) and explicit.strip():
        return explicit.strip()
    return None


def log_cross_tenant_attempt(reason: str, *, org_id: str | None, attempted_org_id: str | None = None) -> None:
    """
    Record a cross-tenant probe.

    The caller still answers 404, so the log is the only trace that the
    target exists in another tenant.
    """
    path = request.path if request else None
    current_app.logger.warning(
        "Cross-tenant access denied: %s (session org=%s, target org=%s, path=%s)",
        reason,
        org_id,
        attempted_org_id,
        path,
    )
