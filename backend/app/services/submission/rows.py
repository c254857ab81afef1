"""
rows.py — Form Record → Datastore Row Builders

Purpose:
- One pure builder per table: take a form record plus the owning company id
  and return the row dict to insert, with the coercion rules applied:
    * blank optional text → None
    * currency / numeric text → float (non-numeric → None)
    * integer text (employee_count, financial_year, age,
      total_investors_count) → int, truncated
    * blank dates → None
- Defaults for NOT NULL columns the form may leave empty
  ("Not Specified" officials, "OTHER" address type, "No content provided"
  news bodies, ...).
- The relationship direction rule and the filing document preservation key.

This module does NOT:
- Filter entries (see filters.py).
- Talk to the datastore or storage (see translator.py).
- Add created_at / updated_at to child rows (the translator stamps them).
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from app.core.config import settings
from app.core.exceptions import InvariantViolationError
from app.services.submission.coercion import (
    new_id,
    parse_int,
    parse_number,
    sanitize_timestamp,
    text_or_none,
    utc_now_iso,
)

Row = Dict[str, Any]

NOT_SPECIFIED = "Not Specified"
NO_CONTENT = "No content provided"
PLACEHOLDER_SECTOR = "Unknown"


# =============================================================================
# Company
# =============================================================================


def build_company_row(state, company_id: str, mode: str, logo_url: Optional[str]) -> Row:
    """
    Row of the `companies` table.

    `name_lowercase` mirrors `name` for case-insensitive lookups;
    `created_at` is only written when the company is created.
    """
    now = utc_now_iso()
    row: Row = {
        "id": company_id,
        "name": state.name,
        "name_lowercase": state.name.lower(),
        "legal_name": text_or_none(state.legal_name),
        "cin": text_or_none(state.cin),
        "gst": text_or_none(state.gst),
        "pan": text_or_none(state.pan),
        "sector": state.sector,
        "company_type": state.company_type,
        "status": state.status,
        "description": text_or_none(state.description),
        "website": text_or_none(state.website),
        "linkedin_url": text_or_none(state.linkedin_url),
        "logo_url": logo_url,
        "founded_date": sanitize_timestamp(state.founded_date),
        "employee_count": parse_int(state.employee_count),
        "employee_range": text_or_none(state.employee_range),
        "annual_revenue_range": text_or_none(state.annual_revenue_range),
        "market_cap": parse_number(state.market_cap),
        "is_listed": bool(state.is_listed),
        "stock_exchange": text_or_none(state.stock_exchange),
        "stock_symbol": text_or_none(state.stock_symbol),
        "isin": text_or_none(state.isin),
        "updated_at": now,
    }
    if mode != "edit":
        row["created_at"] = now
    return row


def placeholder_company_row(name: str) -> Row:
    """Minimal company standing in for an investment target or related company."""
    now = utc_now_iso()
    return {
        "id": new_id(),
        "name": name.strip(),
        "name_lowercase": name.strip().lower(),
        "sector": PLACEHOLDER_SECTOR,
        "company_type": "PRIVATE",
        "status": "ACTIVE",
        "created_at": now,
        "updated_at": now,
    }


# =============================================================================
# Address & contact, officials
# =============================================================================


def build_address_row(address, company_id: str) -> Row:
    return {
        "id": new_id(),
        "company_id": company_id,
        "address_type": address.address_type or "OTHER",
        "address_line_1": address.address_line_1,
        "address_line_2": text_or_none(address.address_line_2),
        "city": address.city,
        "state": address.state,
        "zip_code": address.zip_code,
        "country": address.country or settings.DEFAULT_COUNTRY,
        "latitude": parse_number(address.latitude),
        "longitude": parse_number(address.longitude),
        "is_primary": bool(address.is_primary),
    }


def build_contact_row(contact, company_id: str) -> Row:
    return {
        "id": new_id(),
        "company_id": company_id,
        "contact_type": contact.contact_type,
        "contact_value": contact.contact_value,
        "department": text_or_none(contact.department),
        "is_verified": bool(contact.is_verified),
        "is_primary": bool(contact.is_primary),
    }


def build_official_row(official, company_id: str) -> Row:
    return {
        "id": new_id(),
        "company_id": company_id,
        "name": official.name or NOT_SPECIFIED,
        "designation": official.designation or NOT_SPECIFIED,
        "din": text_or_none(official.din),
        "age": parse_int(official.age),
        "education": text_or_none(official.education),
        "previous_experience": text_or_none(official.previous_experience),
        "email": text_or_none(official.email),
        "phone": text_or_none(official.phone),
        "appointment_date": sanitize_timestamp(official.appointment_date),
        "resignation_date": sanitize_timestamp(official.resignation_date),
        "is_current": official.is_current is not False,
        "is_board_member": bool(official.is_board_member),
    }


# =============================================================================
# Financials
# =============================================================================

FINANCIAL_NUMBER_FIELDS = (
    "total_revenue",
    "net_profit",
    "gross_profit",
    "operating_profit",
    "ebitda",
    "total_assets",
    "current_assets",
    "fixed_assets",
    "total_liabilities",
    "current_liabilities",
    "shareholders_equity",
    "operating_cash_flow",
    "investing_cash_flow",
    "financing_cash_flow",
    "net_cash_flow",
    "debt_to_equity_ratio",
    "current_ratio",
    "return_on_equity",
    "return_on_assets",
    "profit_margin",
)


def build_financial_row(entry, company_id: str) -> Row:
    """Row of `financial_statements` from a FinancialEntry or the flat legacy form."""
    row: Row = {"id": new_id(), "company_id": company_id}
    for field in FINANCIAL_NUMBER_FIELDS:
        row[field] = parse_number(getattr(entry, field))
    row.update(
        {
            "financial_year": parse_int(entry.financial_year),
            "period_start_date": sanitize_timestamp(entry.period_start_date),
            "period_end_date": sanitize_timestamp(entry.period_end_date),
            "filed_date": sanitize_timestamp(entry.filed_date),
            "quarter": text_or_none(entry.quarter),
            "statement_type": text_or_none(entry.statement_type),
            "currency": text_or_none(entry.currency),
        }
    )
    return row


# =============================================================================
# Funding & investments
# =============================================================================


def build_funding_round_row(funding_round, company_id: str) -> Row:
    return {
        "id": new_id(),
        "company_id": company_id,
        "round_type": text_or_none(funding_round.round_type),
        "round_name": text_or_none(funding_round.round_name),
        "amount_raised": parse_number(funding_round.amount_raised),
        "currency": funding_round.currency or settings.DEFAULT_CURRENCY,
        "valuation_pre_money": parse_number(funding_round.valuation_pre_money),
        "valuation_post_money": parse_number(funding_round.valuation_post_money),
        "funding_date": sanitize_timestamp(funding_round.funding_date),
        "announcement_date": sanitize_timestamp(funding_round.announcement_date),
        "total_investors_count": parse_int(funding_round.total_investors_count),
        "round_status": funding_round.round_status or "ANNOUNCED",
        "use_of_funds": text_or_none(funding_round.use_of_funds),
    }


def build_investor_row(investor, funding_round) -> Row:
    """Canonical `investors` row, created the first time (name, type) is seen."""
    round_label = funding_round.round_name or funding_round.round_type
    return {
        "id": new_id(),
        "name": investor.name,
        "investor_type": investor.investor_type,
        "description": f"Investor in {round_label} round",
        "is_active": True,
    }


def build_funding_investor_row(investor, funding_round_id: str, investor_id: str, company_id: str) -> Row:
    """Association row; the table carries created_at only."""
    return {
        "id": new_id(),
        "funding_round_id": funding_round_id,
        "investor_id": investor_id,
        "company_id": company_id,
        "investment_amount": parse_number(investor.investment_amount),
        "is_lead_investor": bool(investor.is_lead_investor),
        "board_seat_obtained": bool(investor.board_seat_obtained),
        "created_at": utc_now_iso(),
    }


def build_investment_row(investment, company_id: str, investee_company_id: str) -> Row:
    return {
        "id": new_id(),
        "company_id": company_id,
        "investor_company_id": company_id,
        "investee_company_id": investee_company_id,
        "investment_target": text_or_none(investment.investment_target),
        "investment_amount": parse_number(investment.investment_amount),
        "investment_date": sanitize_timestamp(investment.investment_date),
        "investment_type": investment.investment_type or "EQUITY",
        "current_stake_percentage": parse_number(investment.current_stake_percentage),
        "expected_return": parse_number(investment.expected_return),
        "investment_status": investment.investment_status or "ACTIVE",
        "exit_date": sanitize_timestamp(investment.exit_date),
        "exit_amount": parse_number(investment.exit_amount),
        "exit_type": text_or_none(investment.exit_type),
        "exit_multiple": parse_number(investment.exit_multiple),
        "description": text_or_none(investment.description),
    }


# =============================================================================
# Regulatory & legal
# =============================================================================


def filing_document_key(filing_type: Any, filing_date: Any, filing_number: Any) -> str:
    """Key matching a submitted filing to the stored one whose document it keeps."""
    return f"{filing_type or ''}-{filing_date or ''}-{filing_number or ''}"


def build_filing_row(
    filing,
    company_id: str,
    file_path: Optional[str],
    uploaded_file_name: Optional[str],
    document_url: Optional[str],
) -> Row:
    return {
        "id": new_id(),
        "company_id": company_id,
        "filing_type": filing.filing_type,
        "filing_number": text_or_none(filing.filing_number),
        "filing_date": sanitize_timestamp(filing.filing_date),
        "due_date": sanitize_timestamp(filing.due_date),
        "status": filing.status,
        "priority": filing.priority or "MEDIUM",
        "remarks": text_or_none(filing.remarks),
        "fees_paid": parse_number(filing.fees_paid),
        "document_url": document_url,
        "document_title": text_or_none(filing.document_title),
        "file_path": file_path,
        "uploaded_file_name": uploaded_file_name,
        "filing_authority": text_or_none(filing.filing_authority),
        "form_number": text_or_none(filing.form_number),
        "acknowledgment_number": text_or_none(filing.acknowledgment_number),
        "compliance_officer": text_or_none(filing.compliance_officer),
        "period_covered": text_or_none(filing.period_covered),
    }


def build_proceeding_row(proceeding, company_id: str) -> Row:
    return {
        "id": new_id(),
        "company_id": company_id,
        "case_title": text_or_none(proceeding.case_title),
        "case_type": proceeding.case_type or "OTHER",
        "case_status": text_or_none(proceeding.case_status),
        "case_number": text_or_none(proceeding.case_number),
        "court_name": text_or_none(proceeding.court_name),
        "filing_date": sanitize_timestamp(proceeding.filing_date),
        "description": text_or_none(proceeding.description),
        "amount_involved": parse_number(proceeding.amount_involved),
    }


# =============================================================================
# News & relationships
# =============================================================================


def build_news_row(news, company_id: str) -> Row:
    content = (news.content or "").strip()
    return {
        "id": new_id(),
        "company_id": company_id,
        "title": (news.title or "").strip(),
        "summary": text_or_none(news.summary),
        "content": content or NO_CONTENT,
        "source_name": (news.source_name or "").strip(),
        "source_url": text_or_none(news.source_url),
        "published_date": sanitize_timestamp(news.published_date),
        "sentiment": news.sentiment or "NEUTRAL",
        "relevance_score": parse_number(news.relevance_score),
        "tags": list(news.tags) if isinstance(news.tags, (list, tuple)) else [],
    }


def relationship_endpoints(relationship_type: str, company_id: str, related_company_id: str) -> Tuple[str, str]:
    """
    (parent_company_id, subsidiary_company_id) for a relationship.

    PARENT_COMPANY means the related company is the parent; every other type
    makes the current company the parent.
    """
    if relationship_type == "PARENT_COMPANY":
        parent, subsidiary = related_company_id, company_id
    else:
        parent, subsidiary = company_id, related_company_id
    if parent == subsidiary:
        raise InvariantViolationError("Invalid relationship: parent and subsidiary cannot be the same company")
    return parent, subsidiary


def build_relationship_row(relationship, parent_company_id: str, subsidiary_company_id: str) -> Row:
    return {
        "id": new_id(),
        "parent_company_id": parent_company_id,
        "subsidiary_company_id": subsidiary_company_id,
        "relationship_type": relationship.relationship_type,
        "effective_date": sanitize_timestamp(relationship.effective_date),
        "end_date": sanitize_timestamp(relationship.end_date),
        "ownership_percentage": parse_number(relationship.ownership_percentage),
        "acquisition_value": parse_number(relationship.acquisition_value),
    }
