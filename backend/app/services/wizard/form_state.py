"""
form_state.py — Aggregate Form State Edited by the Company Wizard

Purpose:
- Define the records held by one wizard session: company identity scalars,
  the legacy single-entry financial fields, and ten ordered list sections
  (addresses, contacts, key officials, financial entries, funding rounds with
  nested investors, investments, filings, legal proceedings, news,
  relationships).
- Provide the seeded defaults a fresh create-mode session starts from and
  the default record each section appends.

Conventions:
- The form holds text the way a browser form does: declared text fields are
  `str`, numbers loaded from the datastore are stringified, and `None`
  falls back to the field's default.
- Extra keys loaded from the datastore (`id`, `company_id`, `document_url`,
  ...) are kept on the record.
- File fields hold an UploadedFile and are excluded from serialisation, so a
  draft never carries file contents.
- List sections are never None.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from app.core.config import settings


class UploadedFile(BaseModel):
    """A file attached to the form (company logo, filing document)."""

    filename: str
    content: bytes = b""
    content_type: Optional[str] = None


FileField = Optional[UploadedFile]


class FormRecord(BaseModel):
    """Base for every form record: text-typed fields, extras allowed, validated assignment."""

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    @field_validator("*", mode="before")
    @classmethod
    def _as_form_value(cls, value: Any, info: ValidationInfo) -> Any:
        field = cls.model_fields.get(info.field_name)
        if field is None:
            return value
        if value is None:
            if field.default_factory is not None:
                return field.default_factory()
            return field.default
        if field.annotation is str and isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            return str(value)
        if field.annotation == FileField and isinstance(value, (list, tuple)):
            return value[0] if value else None
        return value


# =============================================================================
# Section records
# =============================================================================


class Address(FormRecord):
    address_type: str = ""
    address_line_1: str = ""
    address_line_2: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = Field(default_factory=lambda: settings.DEFAULT_COUNTRY)
    latitude: str = ""
    longitude: str = ""
    is_primary: bool = False


class Contact(FormRecord):
    contact_type: str = ""
    contact_value: str = ""
    department: str = ""
    is_verified: bool = False
    is_primary: bool = False


class KeyOfficial(FormRecord):
    name: str = ""
    designation: str = ""
    din: str = ""
    age: str = ""
    education: str = ""
    previous_experience: str = ""
    email: str = ""
    phone: str = ""
    appointment_date: str = ""
    resignation_date: str = ""
    is_current: bool = True
    is_board_member: bool = False


class FinancialFields(FormRecord):
    """Fields of one reporting period; shared by FinancialEntry and the flat legacy form."""

    financial_year: str = ""
    quarter: str = "ANNUAL"
    statement_type: str = "STANDALONE"
    currency: str = Field(default_factory=lambda: settings.DEFAULT_CURRENCY)
    period_start_date: str = ""
    period_end_date: str = ""
    filed_date: str = ""

    total_revenue: str = ""
    net_profit: str = ""
    gross_profit: str = ""
    operating_profit: str = ""
    ebitda: str = ""
    total_assets: str = ""
    current_assets: str = ""
    fixed_assets: str = ""
    total_liabilities: str = ""
    current_liabilities: str = ""
    shareholders_equity: str = ""
    operating_cash_flow: str = ""
    investing_cash_flow: str = ""
    financing_cash_flow: str = ""
    net_cash_flow: str = ""

    # Derived, written by the ratio calculator only
    debt_to_equity_ratio: str = ""
    current_ratio: str = ""
    return_on_equity: str = ""
    return_on_assets: str = ""
    profit_margin: str = ""


class FinancialEntry(FinancialFields):
    pass


class Investor(FormRecord):
    name: str = ""
    investor_type: str = "VENTURE_CAPITAL"
    investment_amount: str = ""
    is_lead_investor: bool = False
    board_seat_obtained: bool = False


class FundingRound(FormRecord):
    round_type: str = ""
    round_name: str = ""
    amount_raised: str = ""
    currency: str = Field(default_factory=lambda: settings.DEFAULT_CURRENCY)
    valuation_pre_money: str = ""
    valuation_post_money: str = ""
    funding_date: str = ""
    announcement_date: str = ""
    total_investors_count: str = ""
    round_status: str = "ANNOUNCED"
    use_of_funds: str = ""
    investors: List[Investor] = Field(default_factory=list)


class CompanyInvestment(FormRecord):
    investment_target: str = ""
    investment_amount: str = ""
    investment_date: str = ""
    investment_type: str = "EQUITY"
    current_stake_percentage: str = ""
    expected_return: str = ""
    investment_status: str = "ACTIVE"
    exit_date: str = ""
    exit_amount: str = ""
    exit_type: str = ""
    exit_multiple: str = ""
    description: str = ""


class RegulatoryFiling(FormRecord):
    filing_type: str = ""
    filing_number: str = ""
    filing_date: str = ""
    due_date: str = ""
    status: str = "PENDING"
    priority: str = "MEDIUM"
    remarks: str = ""
    fees_paid: str = ""
    document_title: str = ""
    document_url: str = ""
    file_path: str = ""
    uploaded_file_name: str = ""
    filing_authority: str = ""
    form_number: str = ""
    acknowledgment_number: str = ""
    compliance_officer: str = ""
    period_covered: str = ""
    document_file: FileField = Field(default=None, exclude=True)


class LegalProceeding(FormRecord):
    case_title: str = ""
    case_type: str = "OTHER"
    case_status: str = "PENDING"
    case_number: str = ""
    court_name: str = ""
    filing_date: str = ""
    description: str = ""
    amount_involved: str = ""


class CompanyNews(FormRecord):
    title: str = ""
    summary: str = ""
    content: str = ""
    source_name: str = ""
    source_url: str = ""
    published_date: str = ""
    sentiment: str = "NEUTRAL"
    relevance_score: str = ""
    tags: List[str] = Field(default_factory=list)


class CompanyRelationship(FormRecord):
    relationship_type: str = "SUBSIDIARY"
    related_company_name: str = ""
    effective_date: str = ""
    end_date: str = ""
    ownership_percentage: str = ""
    acquisition_value: str = ""


# Section name → record type. Order follows the wizard steps.
SECTIONS: Dict[str, Type[FormRecord]] = {
    "addresses": Address,
    "contacts": Contact,
    "key_officials": KeyOfficial,
    "financial_entries": FinancialEntry,
    "funding_rounds": FundingRound,
    "company_investments": CompanyInvestment,
    "regulatory_filings": RegulatoryFiling,
    "legal_proceedings": LegalProceeding,
    "company_news": CompanyNews,
    "company_relationships": CompanyRelationship,
}


def default_entry(section: str) -> FormRecord:
    """Record appended by "add entry" for a section."""
    return SECTIONS[section]()


# =============================================================================
# Aggregate
# =============================================================================


class FormState(FinancialFields):
    """
    Everything one wizard session edits.

    The flat financial fields inherited from FinancialFields are the legacy
    single-entry form; they are written only when `financial_entries` is empty.
    """

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    # Basic info
    name: str = ""
    legal_name: str = ""
    cin: str = ""
    gst: str = ""
    pan: str = ""
    sector: str = ""
    company_type: str = "PRIVATE"
    status: str = "ACTIVE"
    description: str = ""
    website: str = ""
    linkedin_url: str = ""
    founded_date: str = ""
    employee_count: str = ""
    employee_range: str = ""
    annual_revenue_range: str = ""
    market_cap: str = ""
    is_listed: bool = False
    stock_exchange: str = ""
    stock_symbol: str = ""
    isin: str = ""
    logo: FileField = Field(default=None, exclude=True)
    logo_url: str = ""  # stored logo reference carried in edit mode

    # List sections
    addresses: List[Address] = Field(default_factory=list)
    contacts: List[Contact] = Field(default_factory=list)
    key_officials: List[KeyOfficial] = Field(default_factory=list)
    financial_entries: List[FinancialEntry] = Field(default_factory=list)
    funding_rounds: List[FundingRound] = Field(default_factory=list)
    company_investments: List[CompanyInvestment] = Field(default_factory=list)
    regulatory_filings: List[RegulatoryFiling] = Field(default_factory=list)
    legal_proceedings: List[LegalProceeding] = Field(default_factory=list)
    company_news: List[CompanyNews] = Field(default_factory=list)
    company_relationships: List[CompanyRelationship] = Field(default_factory=list)

    @classmethod
    def blank(cls) -> "FormState":
        """Seeded state of a fresh create-mode session."""
        return cls(
            addresses=[Address(address_type="REGISTERED", is_primary=True)],
            contacts=[Contact(contact_type="EMAIL", is_primary=True)],
            key_officials=[KeyOfficial()],
            financial_entries=[FinancialEntry()],
            funding_rounds=[FundingRound(round_type="SEED", round_name="Seed Round")],
            company_investments=[CompanyInvestment()],
            regulatory_filings=[],
            legal_proceedings=[],
            company_news=[CompanyNews()],
            company_relationships=[CompanyRelationship()],
        )


FILE_FIELDS = frozenset({"logo"})
SCALAR_FIELDS = frozenset(name for name in FormState.model_fields if name not in SECTIONS)
