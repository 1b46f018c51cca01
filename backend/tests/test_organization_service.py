# Overview: Pytest coverage for the organization store.

import pytest

from orderbyte.services import menu_service, order_service, organization_service
from orderbyte.services.organization_service import DEFAULT_SETTINGS, OrganizationError
from orderbyte.validation import ValidationError


THEME = {"primaryColor": "#111111", "secondaryColor": "#222222", "accentColor": "#ABCDEF"}


def _create(org_id="pizza-place", **kwargs):
    kwargs.setdefault("name", "Pizza Place")
    kwargs.setdefault("theme", THEME)
    return organization_service.create_organization(org_id=org_id, **kwargs)


class TestCreateOrganization:

    def test_defaults(self, app):
        org = _create()
        assert org.is_active is True
        assert org.settings == DEFAULT_SETTINGS
        assert org.theme["accentColor"] == "#abcdef"
        assert org.created_at == org.updated_at

    def test_new_tenant_gets_empty_active_menu(self, app):
        _create()
        menu = menu_service.get_active_menu("pizza-place")
        assert menu is not None
        assert menu.categories == []

    def test_duplicate_id_rejected(self, app):
        with pytest.raises(OrganizationError, match="already exists"):
            _create(org_id="bella-vista")

    def test_inactive_id_stays_reserved(self, app):
        organization_service.delete_organization("urban-cafe")
        with pytest.raises(OrganizationError, match="already exists"):
            _create(org_id="urban-cafe")

    @pytest.mark.parametrize("bad_id", ["A", "Upper", "has space", "-leading", "x", "a" * 64, None])
    def test_id_must_be_slug(self, app, bad_id):
        with pytest.raises(OrganizationError):
            _create(org_id=bad_id)

    @pytest.mark.parametrize(
        "theme",
        [
            {"primaryColor": "#111111", "secondaryColor": "#222222"},
            {"primaryColor": "red", "secondaryColor": "#222222", "accentColor": "#333333"},
            {"primaryColor": "#111", "secondaryColor": "#222222", "accentColor": "#333333"},
            "dark",
        ],
    )
    def test_theme_needs_three_hex_colours(self, app, theme):
        with pytest.raises(OrganizationError):
            _create(theme=theme)

    def test_partial_settings_filled_from_defaults(self, app):
        org = _create(settings={"currency": "USD", "taxRate": 16.5})
        assert org.settings["currency"] == "USD"
        assert org.settings["taxRate"] == 16.5
        assert org.settings["qrCodeExpiryMinutes"] == 60

    @pytest.mark.parametrize(
        "settings",
        [
            {"currency": "ZAR"},
            {"taxRate": 101},
            {"serviceCharge": -1},
            {"allowTips": "yes"},
            {"qrCodeExpiryMinutes": 0},
            {"qrCodeExpiryMinutes": 1.5},
            {"unknownFlag": True},
        ],
    )
    def test_invalid_settings(self, app, settings):
        with pytest.raises(ValidationError):
            _create(settings=settings)


class TestReadOrganizations:

    def test_get_all_returns_active_only(self, app):
        organization_service.delete_organization("urban-cafe")
        ids = [o.id for o in organization_service.list_organizations()]
        assert ids == ["bella-vista"]
        all_ids = {o.id for o in organization_service.list_organizations(include_inactive=True)}
        assert all_ids == {"bella-vista", "urban-cafe"}

    def test_get_by_id_hides_inactive(self, app):
        assert organization_service.get_organization("bella-vista").name == "Bella Vista Restaurant"
        organization_service.delete_organization("bella-vista")
        assert organization_service.get_organization("bella-vista") is None
        assert organization_service.find_organization("bella-vista") is not None

    def test_unknown_id(self, app):
        assert organization_service.get_organization("nope") is None
        assert organization_service.get_organization(None) is None


class TestUpdateOrganization:

    def test_partial_update_refreshes_updated_at(self, app):
        before = organization_service.get_organization("bella-vista").updated_at
        org = organization_service.update_organization("bella-vista", {"name": "Bella Vista Trattoria"})
        assert org.name == "Bella Vista Trattoria"
        assert org.updated_at >= before
        assert org.contact["phone"] == "+1 (555) 123-4567"

    def test_nested_documents_replaced_wholesale(self, app):
        """contact is replaced, not merged: the old website disappears."""
        org = organization_service.update_organization("bella-vista", {"contact": {"phone": "+265 1 234"}})
        assert org.contact == {"phone": "+265 1 234"}

    def test_settings_replacement_is_normalized_not_merged(self, app):
        organization_service.update_organization("bella-vista", {"settings": {"currency": "EUR", "taxRate": 10}})
        org = organization_service.update_organization("bella-vista", {"settings": {"allowTips": False}})
        assert org.settings["currency"] == DEFAULT_SETTINGS["currency"]
        assert org.settings["taxRate"] == 0
        assert org.settings["allowTips"] is False

    def test_unknown_id_returns_none(self, app):
        assert organization_service.update_organization("nope", {"name": "X"}) is None

    @pytest.mark.parametrize("field", ["id", "createdAt", "organizationId", "is_active"])
    def test_protected_fields_rejected(self, app, field):
        with pytest.raises(OrganizationError, match="Field not allowed"):
            organization_service.update_organization("bella-vista", {field: "x"})

    def test_failed_update_leaves_record_untouched(self, app):
        with pytest.raises(OrganizationError):
            organization_service.update_organization(
                "bella-vista", {"name": "Changed", "theme": {"primaryColor": "bad"}}
            )
        assert organization_service.get_organization("bella-vista").name == "Bella Vista Restaurant"

    def test_reactivation(self, app):
        organization_service.delete_organization("urban-cafe")
        org = organization_service.update_organization("urban-cafe", {"isActive": True})
        assert org.is_active is True
        assert organization_service.get_organization("urban-cafe") is not None


class TestDeleteOrganization:

    def test_soft_delete_is_idempotent_false(self, app):
        assert organization_service.delete_organization("bella-vista") is True
        assert organization_service.delete_organization("bella-vista") is False
        assert organization_service.find_organization("bella-vista").is_active is False

    def test_unknown_id(self, app):
        assert organization_service.delete_organization("nope") is False


class TestStats:

    def test_real_aggregates(self, app):
        stats = organization_service.get_stats()
        assert stats == {
            "totalOrganizations": 2,
            "activeOrganizations": 2,
            "totalOrders": 2,
            "totalRevenue": 58660 + 50470,
        }

    def test_cancelled_orders_excluded_from_revenue(self, app):
        order = order_service.create_order(
            "bella-vista",
            customer_name="A",
            table_number="1",
            items=[{"itemId": "tiramisu", "quantity": 1}],
        )
        order_service.cancel_order(order.id, "bella-vista")
        organization_service.delete_organization("urban-cafe")

        stats = organization_service.get_stats()
        assert stats["totalOrders"] == 3
        assert stats["totalRevenue"] == 58660 + 50470
        assert stats["activeOrganizations"] == 1
