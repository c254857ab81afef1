"""
filters.py — Row-Inclusion Predicates

Purpose:
- Decide which form entries are worth writing. Seeded and appended defaults
  leave entries that carry no user data; those are dropped on submit.
- Create mode is stricter than edit mode for funding rounds, investments
  and news, since the seeded create-mode entries already hold defaults
  (e.g. the "SEED" / "Seed Round" funding round).

Usage:
    keep = row_filter("company_news", "create")
    rows = [news for news in state.company_news if keep(news)]
"""

from __future__ import annotations

from typing import Any, Callable, Dict

from app.core.exceptions import UnknownSectionError
from app.services.submission.coercion import has_text

Predicate = Callable[[Any], bool]


def _any_text(record: Any, *fields: str) -> bool:
    return any(has_text(getattr(record, field, None)) for field in fields)


def _all_text(record: Any, *fields: str) -> bool:
    return all(has_text(getattr(record, field, None)) for field in fields)


def _text_other_than(value: Any, default: str) -> bool:
    return has_text(value) and value != default


# ---------------------------------------------------------------------------
# Predicates shared by both modes
# ---------------------------------------------------------------------------


def address_is_complete(address) -> bool:
    return _all_text(address, "address_line_1", "city", "state", "zip_code")


def contact_is_complete(contact) -> bool:
    return _all_text(contact, "contact_type", "contact_value")


def official_has_data(official) -> bool:
    return _any_text(official, "name", "designation", "din", "email")


FINANCIAL_ENTRY_FIELDS = (
    "total_revenue",
    "net_profit",
    "total_assets",
    "gross_profit",
    "operating_profit",
    "ebitda",
    "period_start_date",
)


def financial_entry_has_data(entry) -> bool:
    return _any_text(entry, *FINANCIAL_ENTRY_FIELDS)


def legacy_financials_have_data(state) -> bool:
    """Flat single-entry form (written only when financial_entries is empty)."""
    return _any_text(
        state, "total_revenue", "net_profit", "total_assets", "gross_profit", "operating_profit", "ebitda"
    )


def filing_has_data(filing) -> bool:
    if not _all_text(filing, "filing_type", "status"):
        return False
    return (
        _any_text(filing, "filing_date", "filing_number", "document_title", "remarks", "fees_paid")
        or getattr(filing, "document_file", None) is not None
    )


def proceeding_has_data(proceeding) -> bool:
    return _text_other_than(proceeding.case_title, "CIVIL") or _any_text(
        proceeding, "case_number", "court_name", "description", "amount_involved"
    )


def relationship_is_complete(relationship) -> bool:
    return has_text(relationship.relationship_type) and has_text(relationship.related_company_name)


# ---------------------------------------------------------------------------
# Mode-specific predicates
# ---------------------------------------------------------------------------


def funding_round_has_data_create(funding_round) -> bool:
    return (
        _text_other_than(funding_round.round_type, "SEED")
        or _text_other_than(funding_round.round_name, "Seed Round")
        or _any_text(funding_round, "funding_date", "amount_raised")
        or len(funding_round.investors) > 0
    )


def funding_round_has_data_edit(funding_round) -> bool:
    return _any_text(funding_round, "round_type", "round_name", "funding_date", "amount_raised")


def investment_has_data_create(investment) -> bool:
    return has_text(investment.investment_target)


def investment_has_data_edit(investment) -> bool:
    return _any_text(investment, "investment_target", "investment_date", "investment_amount", "description")


def news_has_data_create(news) -> bool:
    return _all_text(news, "title", "published_date", "source_name")


def news_has_data_edit(news) -> bool:
    return _any_text(news, "title", "source_name", "content", "published_date")


_SHARED: Dict[str, Predicate] = {
    "addresses": address_is_complete,
    "contacts": contact_is_complete,
    "key_officials": official_has_data,
    "financial_entries": financial_entry_has_data,
    "regulatory_filings": filing_has_data,
    "legal_proceedings": proceeding_has_data,
    "company_relationships": relationship_is_complete,
}

CREATE_FILTERS: Dict[str, Predicate] = {
    **_SHARED,
    "funding_rounds": funding_round_has_data_create,
    "company_investments": investment_has_data_create,
    "company_news": news_has_data_create,
}

EDIT_FILTERS: Dict[str, Predicate] = {
    **_SHARED,
    "funding_rounds": funding_round_has_data_edit,
    "company_investments": investment_has_data_edit,
    "company_news": news_has_data_edit,
}


def row_filter(section: str, mode: str) -> Predicate:
    """Inclusion predicate for one section in the given mode ("create" / "edit")."""
    filters = EDIT_FILTERS if mode == "edit" else CREATE_FILTERS
    try:
        return filters[section]
    except KeyError:
        raise UnknownSectionError(f"No row filter for section: {section}") from None
