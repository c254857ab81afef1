"""
Unit tests for role → section / action access mappings.
"""

import pytest

from app.core import permissions
from app.core.permissions import UserRole


@pytest.mark.parametrize(
    "role,allowed",
    [("FREEMIUM", False), ("PREMIUM", False), ("ENTERPRISE", False), ("ADMIN", True), ("SUPERUSER", False), (None, False)],
)
def test_only_admin_may_modify_company_data(role, allowed):
    assert permissions.can_modify_company_data(role) is allowed


def test_section_access_by_role():
    assert permissions.has_section_access("FREEMIUM", "address_contact")
    assert not permissions.has_section_access("FREEMIUM", "key_officials")
    assert permissions.has_section_access("PREMIUM", "financial_metrics")
    assert not permissions.has_section_access("PREMIUM", "funding_investments")
    assert permissions.has_section_access("ENTERPRISE", "news_relationships")
    assert not permissions.has_section_access("ADMIN", None)


def test_export_and_watchlist():
    assert not permissions.can_export_data("FREEMIUM")
    assert permissions.can_export_data("PREMIUM")
    assert all(permissions.can_use_watchlist(role.value) for role in UserRole)


def test_max_step_for_role():
    assert permissions.max_step_for_role("FREEMIUM") == 2
    assert permissions.max_step_for_role("PREMIUM") == 4
    assert permissions.max_step_for_role("ADMIN") == 7
    assert permissions.max_step_for_role("unknown") == 1


def test_listing_helpers():
    assert permissions.accessible_sections("FREEMIUM") == ["basic_info", "address_contact"]
    assert "delete_company" in permissions.available_actions("ADMIN")
    assert permissions.available_actions("nobody") == []


def test_display_names():
    assert permissions.role_display_name("ENTERPRISE") == "Enterprise"
    assert permissions.role_display_name("CUSTOM") == "CUSTOM"
    assert permissions.role_description("nobody") == "Unknown role"


def test_access_summary_for_freemium():
    summary = permissions.access_summary("FREEMIUM")
    assert summary["sections"] == ["basic_info", "address_contact"]
    assert summary["visible_steps"] == [1, 2]
    assert summary["max_step"] == 2
    assert summary["can_modify_company_data"] is False
    assert summary["can_export_data"] is False
    assert summary["can_use_watchlist"] is True


def test_access_summary_for_unknown_role():
    summary = permissions.access_summary("GUEST")
    assert summary["role_display_name"] == "GUEST"
    assert summary["role_description"] == "Unknown role"
    assert summary["sections"] == []
    assert summary["actions"] == []
    assert summary["visible_steps"] == []
    assert summary["max_step"] == 1
