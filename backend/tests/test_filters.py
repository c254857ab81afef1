"""
Unit tests for the row-inclusion predicates applied on submit.
"""

import pytest

from app.core.exceptions import UnknownSectionError
from app.services.submission.filters import legacy_financials_have_data, row_filter
from app.services.wizard.form_state import (
    Address,
    CompanyInvestment,
    CompanyNews,
    CompanyRelationship,
    FormState,
    FundingRound,
    Investor,
    LegalProceeding,
    RegulatoryFiling,
    UploadedFile,
)


def test_address_needs_all_required_parts():
    keep = row_filter("addresses", "create")
    assert not keep(Address(address_line_1="1 Main St", city="Pune", state="MH"))
    assert keep(Address(address_line_1="1 Main St", city="Pune", state="MH", zip_code="411001"))


def test_seeded_funding_round_dropped_in_create_but_kept_in_edit():
    seeded = FundingRound(round_type="SEED", round_name="Seed Round")
    assert not row_filter("funding_rounds", "create")(seeded)
    assert row_filter("funding_rounds", "edit")(seeded)


def test_funding_round_with_investors_kept_in_create():
    funding_round = FundingRound(round_type="SEED", round_name="Seed Round", investors=[Investor()])
    assert row_filter("funding_rounds", "create")(funding_round)


def test_investment_modes():
    dated = CompanyInvestment(investment_date="2023-05-01")
    assert not row_filter("company_investments", "create")(dated)
    assert row_filter("company_investments", "edit")(dated)


def test_news_modes():
    partial = CompanyNews(title="Launch")
    assert not row_filter("company_news", "create")(partial)
    assert row_filter("company_news", "edit")(partial)
    complete = CompanyNews(title="Launch", published_date="2024-01-01", source_name="ET")
    assert row_filter("company_news", "create")(complete)


def test_filing_needs_type_status_and_content():
    keep = row_filter("regulatory_filings", "create")
    assert not keep(RegulatoryFiling(filing_type="ANNUAL_RETURN"))
    assert keep(RegulatoryFiling(filing_type="ANNUAL_RETURN", remarks="late"))
    assert keep(RegulatoryFiling(filing_type="ANNUAL_RETURN", document_file=UploadedFile(filename="a.pdf")))
    assert not keep(RegulatoryFiling(filing_type="ANNUAL_RETURN", status="", remarks="late"))


def test_proceeding_title_civil_alone_is_not_data():
    keep = row_filter("legal_proceedings", "edit")
    assert not keep(LegalProceeding(case_title="CIVIL"))
    assert keep(LegalProceeding(case_title="State v. Acme"))
    assert keep(LegalProceeding(case_title="CIVIL", court_name="Bombay HC"))


def test_relationship_needs_name():
    keep = row_filter("company_relationships", "create")
    assert not keep(CompanyRelationship())
    assert keep(CompanyRelationship(related_company_name="Child Co"))


def test_legacy_financials():
    assert not legacy_financials_have_data(FormState())
    assert legacy_financials_have_data(FormState(ebitda="10"))


def test_unknown_section():
    with pytest.raises(UnknownSectionError):
        row_filter("shareholders", "create")
