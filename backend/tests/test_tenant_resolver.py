# Overview: Pytest coverage for tenant resolution from Host headers and explicit ids.

import pytest

from orderbyte.services.tenant_service import resolve_tenant_id, tenant_from_host


class TestTenantFromHost:
    """Pure host -> tenant derivation."""

    @pytest.mark.parametrize(
        "host,expected",
        [
            (None, None),
            ("", None),
            ("localhost", None),
            ("localhost:3000", None),
            ("127.0.0.1", None),
            ("127.0.0.1:5000", None),
            ("bella-vista.localhost", "bella-vista"),
            ("bella-vista.localhost:3000", "bella-vista"),
            ("www.localhost", None),
            ("bella-vista.orderbyte.com", "bella-vista"),
            ("urban-cafe.orderbyte.com:443", "urban-cafe"),
            ("www.orderbyte.com", None),
            ("orderbyte", None),
            ("Bella-Vista.OrderByte.com", "bella-vista"),
            ("[::1]:5000", None),
        ],
    )
    def test_host_rules(self, host, expected):
        assert tenant_from_host(host) == expected

    def test_two_label_host_uses_first_label(self):
        """A bare registrable domain still yields its first label."""
        assert tenant_from_host("orderbyte.com") == "orderbyte"


class TestResolveTenantId:
    """Precedence: x-tenant-id header, then Host subdomain, then explicit id."""

    def test_header_wins(self):
        headers = {"x-tenant-id": "urban-cafe", "Host": "bella-vista.localhost"}
        assert resolve_tenant_id(headers, explicit="other") == "urban-cafe"

    def test_subdomain_beats_explicit(self):
        headers = {"Host": "bella-vista.localhost:3000"}
        assert resolve_tenant_id(headers, explicit="urban-cafe") == "bella-vista"

    def test_explicit_fallback_on_localhost(self):
        headers = {"Host": "localhost:5000"}
        assert resolve_tenant_id(headers, explicit=" urban-cafe ") == "urban-cafe"

    def test_blank_header_ignored(self):
        headers = {"x-tenant-id": "  ", "Host": "localhost"}
        assert resolve_tenant_id(headers, explicit="bella-vista") == "bella-vista"

    def test_nothing_resolves_to_none(self):
        assert resolve_tenant_id({"Host": "localhost"}) is None
        assert resolve_tenant_id({}, explicit=123) is None
