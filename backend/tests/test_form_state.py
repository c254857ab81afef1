"""
Unit tests for the wizard form records: browser-form value normalisation,
seeded defaults and file exclusion.
"""

from app.services.wizard.form_state import (
    SCALAR_FIELDS,
    SECTIONS,
    Address,
    FormState,
    RegulatoryFiling,
    UploadedFile,
    default_entry,
)


def test_none_falls_back_to_field_default():
    address = Address(address_line_2=None, country=None)
    assert address.address_line_2 == ""
    assert address.country == "India"


def test_numbers_loaded_from_datastore_become_text():
    state = FormState(employee_count=120, market_cap=1.5e9, is_listed=True)
    assert state.employee_count == "120"
    assert state.market_cap == "1500000000.0"
    assert state.is_listed is True


def test_file_list_takes_first_file():
    logo = UploadedFile(filename="a.png")
    assert FormState(logo=[logo, UploadedFile(filename="b.png")]).logo.filename == "a.png"
    assert FormState(logo=[]).logo is None


def test_records_keep_datastore_extras():
    filing = RegulatoryFiling(id="f-1", company_id="c-1", filing_type="ANNUAL_RETURN")
    assert filing.model_extra == {"id": "f-1", "company_id": "c-1"}


def test_form_state_ignores_unknown_keys():
    state = FormState(name="Acme", created_at="2024-01-01")
    assert "created_at" not in state.model_dump()


def test_null_list_section_becomes_empty():
    assert FormState(addresses=None).addresses == []


def test_document_file_excluded_from_dump():
    filing = RegulatoryFiling(document_file=UploadedFile(filename="x.pdf", content=b"1"))
    assert "document_file" not in filing.model_dump()


def test_blank_seeds_one_entry_per_section_except_filings_and_proceedings():
    state = FormState.blank()
    for section in SECTIONS:
        expected = 0 if section in ("regulatory_filings", "legal_proceedings") else 1
        assert len(getattr(state, section)) == expected, section
    assert state.company_relationships[0].relationship_type == "SUBSIDIARY"
    assert state.financial_entries[0].quarter == "ANNUAL"
    assert state.financial_entries[0].currency == "INR"


def test_default_entries():
    assert default_entry("key_officials").is_current is True
    assert default_entry("company_investments").investment_status == "ACTIVE"
    assert default_entry("legal_proceedings").case_status == "PENDING"
    assert default_entry("company_news").tags == []


def test_scalar_fields_exclude_sections():
    assert "name" in SCALAR_FIELDS
    assert "logo" in SCALAR_FIELDS
    assert "addresses" not in SCALAR_FIELDS
