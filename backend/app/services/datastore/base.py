"""
base.py — Datastore Port

Purpose:
- Describe the narrow relational-datastore contract the wizard depends on:
  select / insert / update / delete against named tables with equality
  filters (AND) and equality alternatives (OR).
- Name the tables the wizard reads and writes.

Every method returns the affected rows as plain dicts, or raises
DatastoreError. `transaction()` scopes one replace-all-children pass; how much
atomicity it gives depends on the backend.
"""

from __future__ import annotations

from typing import Any, ContextManager, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Union

Row = Dict[str, Any]
Filters = Mapping[str, Any]
AnyOf = Sequence[Tuple[str, Any]]

# Tables
COMPANIES = "companies"
COMPANY_ADDRESSES = "company_addresses"
COMPANY_CONTACTS = "company_contacts"
KEY_OFFICIALS = "key_officials"
FINANCIAL_STATEMENTS = "financial_statements"
FUNDING_ROUNDS = "funding_rounds"
FUNDING_INVESTORS = "funding_investors"
INVESTORS = "investors"
COMPANY_INVESTMENTS = "company_investments"
REGULATORY_FILINGS = "regulatory_filings"
LEGAL_PROCEEDINGS = "legal_proceedings"
COMPANY_NEWS = "company_news"
COMPANY_RELATIONSHIPS = "company_relationships"
PROFILES = "profiles"


class Datastore(Protocol):
    """Port: relational datastore reached through a backend-as-a-service client."""

    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        any_of: Optional[AnyOf] = None,
        columns: str = "*",
        limit: Optional[int] = None,
    ) -> List[Row]:
        ...

    def insert(self, table: str, rows: Union[Row, Sequence[Row]]) -> List[Row]:
        ...

    def update(self, table: str, values: Row, filters: Filters) -> List[Row]:
        ...

    def delete(
        self,
        table: str,
        filters: Optional[Filters] = None,
        any_of: Optional[AnyOf] = None,
    ) -> List[Row]:
        ...

    def transaction(self) -> ContextManager[None]:
        """Scope for one delete-then-insert replacement of a child table."""
        ...


def as_rows(rows: Union[Row, Sequence[Row]]) -> List[Row]:
    """Accept a single row or a sequence of rows."""
    if isinstance(rows, Mapping):
        return [dict(rows)]
    return [dict(r) for r in rows]
