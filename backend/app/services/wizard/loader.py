"""
loader.py — Edit-Mode Form Loader

Purpose:
- Read a stored company and all of its child rows and assemble the FormState
  an edit-mode wizard session starts from.

Notes:
- Funding rounds get their investors from funding_investors joined to the
  canonical investors table.
- Relationships are read by either endpoint and re-expressed from the edited
  company's side: SUBSIDIARY when it is the parent, otherwise PARENT_COMPANY.
- A company without financial statements starts with one blank entry.
"""

from __future__ import annotations

from typing import Dict, List

from app.core.exceptions import CompanyNotFoundError
from app.core.logging import get_logger
from app.services.datastore.base import (
    COMPANIES,
    COMPANY_ADDRESSES,
    COMPANY_CONTACTS,
    COMPANY_INVESTMENTS,
    COMPANY_NEWS,
    COMPANY_RELATIONSHIPS,
    FINANCIAL_STATEMENTS,
    FUNDING_INVESTORS,
    FUNDING_ROUNDS,
    INVESTORS,
    KEY_OFFICIALS,
    LEGAL_PROCEEDINGS,
    REGULATORY_FILINGS,
    Datastore,
    Row,
)
from app.services.wizard.form_state import FinancialEntry, FormState

logger = get_logger(__name__)

# Child tables read by company_id → form section
_CHILD_SECTIONS = {
    COMPANY_ADDRESSES: "addresses",
    COMPANY_CONTACTS: "contacts",
    KEY_OFFICIALS: "key_officials",
    COMPANY_INVESTMENTS: "company_investments",
    REGULATORY_FILINGS: "regulatory_filings",
    LEGAL_PROCEEDINGS: "legal_proceedings",
    COMPANY_NEWS: "company_news",
}


def _financial_entries(rows: List[Row]) -> List[FinancialEntry]:
    if not rows:
        return [FinancialEntry()]
    fields = FinancialEntry.model_fields
    return [FinancialEntry(**{k: v for k, v in row.items() if k in fields}) for row in rows]


def _funding_rounds(datastore: Datastore, company_id: str) -> List[Row]:
    rounds = datastore.select(FUNDING_ROUNDS, {"company_id": company_id})
    if not rounds:
        return []

    by_round: Dict[str, List[Row]] = {}
    for link in datastore.select(FUNDING_INVESTORS, {"company_id": company_id}):
        by_round.setdefault(link.get("funding_round_id"), []).append(link)

    investors: Dict[str, Row] = {}
    loaded = []
    for funding_round in rounds:
        round_investors = []
        for link in by_round.get(funding_round.get("id"), []):
            investor_id = link.get("investor_id")
            if investor_id not in investors:
                found = datastore.select(INVESTORS, {"id": investor_id}, limit=1)
                investors[investor_id] = found[0] if found else {}
            investor = investors[investor_id]
            round_investors.append(
                {
                    "id": investor.get("id"),
                    "name": investor.get("name"),
                    "investor_type": investor.get("investor_type"),
                    "investment_amount": link.get("investment_amount"),
                    "is_lead_investor": link.get("is_lead_investor"),
                    "board_seat_obtained": link.get("board_seat_obtained"),
                }
            )
        loaded.append({**funding_round, "investors": round_investors})
    return loaded


def _relationships(datastore: Datastore, company_id: str) -> List[Row]:
    rows = datastore.select(
        COMPANY_RELATIONSHIPS,
        any_of=[("parent_company_id", company_id), ("subsidiary_company_id", company_id)],
    )
    loaded = []
    for row in rows:
        is_parent = row.get("parent_company_id") == company_id
        related_id = row.get("subsidiary_company_id") if is_parent else row.get("parent_company_id")
        related_name = ""
        if related_id:
            found = datastore.select(COMPANIES, {"id": related_id}, columns="name", limit=1)
            if found:
                related_name = found[0].get("name") or ""
        loaded.append(
            {
                **row,
                "related_company_id": related_id,
                "related_company_name": related_name,
                "relationship_type": "SUBSIDIARY" if is_parent else "PARENT_COMPANY",
            }
        )
    return loaded


def load_company_form(datastore: Datastore, company_id: str) -> FormState:
    """
    Build the edit-mode form for one stored company.

    Raises:
        CompanyNotFoundError: no company with this id.
        DatastoreError: any read failed.
    """
    found = datastore.select(COMPANIES, {"id": company_id}, limit=1)
    if not found:
        raise CompanyNotFoundError(f"Company {company_id} not found")
    company = found[0]

    data = {k: v for k, v in company.items() if k in FormState.model_fields}
    for table, section in _CHILD_SECTIONS.items():
        data[section] = datastore.select(table, {"company_id": company_id})
    data["financial_entries"] = _financial_entries(datastore.select(FINANCIAL_STATEMENTS, {"company_id": company_id}))
    data["funding_rounds"] = _funding_rounds(datastore, company_id)
    data["company_relationships"] = _relationships(datastore, company_id)

    logger.info(f"Loaded company {company_id} for editing")
    return FormState.model_validate(data)
