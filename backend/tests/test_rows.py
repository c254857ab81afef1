"""
Unit tests for the per-table row builders.
"""

import pytest

from app.core.exceptions import InvariantViolationError
from app.services.submission import rows
from app.services.wizard.form_state import (
    CompanyNews,
    FormState,
    FundingRound,
    Investor,
    LegalProceeding,
    RegulatoryFiling,
)


def test_company_row_create_and_edit():
    state = FormState(name="Acme Robotics", sector="Tech", employee_count="250", website="  ")

    created = rows.build_company_row(state, "c-1", "create", None)
    assert created["name_lowercase"] == "acme robotics"
    assert created["employee_count"] == 250
    assert created["website"] is None
    assert created["created_at"] == created["updated_at"]

    edited = rows.build_company_row(state, "c-1", "edit", "https://logo")
    assert "created_at" not in edited
    assert edited["logo_url"] == "https://logo"


def test_placeholder_company_row():
    row = rows.placeholder_company_row("  Widget Labs ")
    assert row["name"] == "Widget Labs"
    assert row["name_lowercase"] == "widget labs"
    assert row["sector"] == "Unknown"
    assert row["company_type"] == "PRIVATE"


def test_news_row_defaults():
    row = rows.build_news_row(CompanyNews(title=" Launch ", source_name="ET", tags=["ipo"]), "c-1")
    assert row["title"] == "Launch"
    assert row["content"] == "No content provided"
    assert row["sentiment"] == "NEUTRAL"
    assert row["tags"] == ["ipo"]


def test_investor_row_description_falls_back_to_round_type():
    row = rows.build_investor_row(Investor(name="Accel"), FundingRound(round_type="SERIES_B"))
    assert row["description"] == "Investor in SERIES_B round"
    assert row["is_active"] is True


def test_proceeding_row_uses_case_status():
    row = rows.build_proceeding_row(LegalProceeding(case_title="X v. Y", amount_involved="1e5"), "c-1")
    assert row["case_status"] == "PENDING"
    assert row["amount_involved"] == 100000.0


def test_filing_row_carries_document_reference():
    filing = RegulatoryFiling(filing_type="GST_RETURN", fees_paid="abc")
    row = rows.build_filing_row(filing, "c-1", "regulatory_filings/c-1/a.pdf", "a.pdf", "https://x/a.pdf")
    assert row["fees_paid"] is None
    assert row["file_path"] == "regulatory_filings/c-1/a.pdf"
    assert row["document_url"] == "https://x/a.pdf"


def test_filing_document_key_treats_missing_as_blank():
    assert rows.filing_document_key("ANNUAL_RETURN", "2024-09-30", None) == "ANNUAL_RETURN-2024-09-30-"
    assert rows.filing_document_key("ANNUAL_RETURN", "2024-09-30", "") == "ANNUAL_RETURN-2024-09-30-"


@pytest.mark.parametrize(
    "relationship_type,expected",
    [
        ("SUBSIDIARY", ("me", "them")),
        ("JOINT_VENTURE", ("me", "them")),
        ("PARENT_COMPANY", ("them", "me")),
    ],
)
def test_relationship_endpoints(relationship_type, expected):
    assert rows.relationship_endpoints(relationship_type, "me", "them") == expected


def test_relationship_endpoints_must_differ():
    with pytest.raises(InvariantViolationError):
        rows.relationship_endpoints("SUBSIDIARY", "me", "me")
