"""
translator.py — Wizard Form → Datastore Writes

Purpose:
- Translate a submitted FormState into the ordered writes that persist one
  company profile:
    1. company id (new UUID on create, the edited id on edit)
    2. optional logo upload (failure tolerated)
    3. company row (insert on create, update by id on edit)
    4. each child table in turn, replacing the previous rows on edit:
       addresses, contacts, key officials, financial statements, funding
       rounds + investors, investments, regulatory filings, legal
       proceedings, news, relationships
- Resolve referenced entities to canonical rows: investors by
  (name, investor_type), placeholder companies by lower-cased name.
- Keep previously uploaded filing documents when a filing is resubmitted
  without a new file.

Failure model:
- Any DatastoreError / ResolutionError / InvariantViolationError aborts the
  rest of the submission. Writes already completed for earlier tables stay;
  how much of the failing table is rolled back depends on the datastore's
  transaction() support.
- Logo and filing document upload failures and investment placeholder
  failures are logged and recovered.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from app.core.exceptions import AssetUploadError, DatastoreError, InvariantViolationError, ResolutionError
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
from app.services.submission.assets import AssetStorage, filing_document_path, logo_path
from app.services.submission.coercion import add_timestamps, has_text, new_id, text_or_none
from app.services.submission.filters import legacy_financials_have_data, row_filter
from app.services.submission import rows as build

logger = get_logger(__name__)


@dataclass
class SubmissionResult:
    company_id: str
    written: Dict[str, int] = field(default_factory=dict)

    def count(self, table: str, n: int) -> None:
        self.written[table] = self.written.get(table, 0) + n


class SubmissionTranslator:
    """
    Writes one wizard form through the Datastore and AssetStorage ports.

    A translator instance may be reused; per-submission caches are reset by
    every submit().
    """

    def __init__(self, datastore: Datastore, assets: AssetStorage):
        self.datastore = datastore
        self.assets = assets
        self._investor_ids: Dict[Tuple[str, str], str] = {}
        self._company_ids: Dict[str, str] = {}

    # ------------------------------------------------------------------ #
    # Entry point
    def submit(self, state, mode: str, company_id: Optional[str] = None) -> SubmissionResult:
        editing = mode == "edit"
        if editing and not company_id:
            raise InvariantViolationError("Editing a company requires its id")
        company_id = company_id if editing else new_id()

        self._investor_ids = {}
        self._company_ids = {}
        result = SubmissionResult(company_id=company_id)
        logger.info(f"Submitting company {company_id} ({'edit' if editing else 'create'})")

        logo_url = self._upload_logo(state, company_id, editing)
        company_row = build.build_company_row(state, company_id, "edit" if editing else "create", logo_url)
        if editing:
            self.datastore.update(COMPANIES, company_row, {"id": company_id})
        else:
            self.datastore.insert(COMPANIES, company_row)
        result.count(COMPANIES, 1)

        mode_name = "edit" if editing else "create"
        self._write_simple(
            result, COMPANY_ADDRESSES, company_id, editing,
            self._kept(state.addresses, "addresses", mode_name), build.build_address_row,
        )
        self._write_simple(
            result, COMPANY_CONTACTS, company_id, editing,
            self._kept(state.contacts, "contacts", mode_name), build.build_contact_row,
        )
        self._write_simple(
            result, KEY_OFFICIALS, company_id, editing,
            self._kept(state.key_officials, "key_officials", mode_name), build.build_official_row,
        )
        self._write_simple(
            result, FINANCIAL_STATEMENTS, company_id, editing,
            self._financial_records(state, mode_name), build.build_financial_row,
        )
        self._write_funding(result, state, company_id, editing, mode_name)
        self._write_investments(result, state, company_id, editing, mode_name)
        self._write_filings(result, state, company_id, editing, mode_name)
        self._write_simple(
            result, LEGAL_PROCEEDINGS, company_id, editing,
            self._kept(state.legal_proceedings, "legal_proceedings", mode_name), build.build_proceeding_row,
        )
        self._write_simple(
            result, COMPANY_NEWS, company_id, editing,
            self._kept(state.company_news, "company_news", mode_name), build.build_news_row,
        )
        self._write_relationships(result, state, company_id, editing, mode_name)

        logger.info(f"Company {company_id} written: {result.written}")
        return result

    # ------------------------------------------------------------------ #
    # Helpers
    @staticmethod
    def _kept(entries: list, section: str, mode: str) -> list:
        keep = row_filter(section, mode)
        return [entry for entry in entries if keep(entry)]

    def _financial_records(self, state, mode: str) -> list:
        if state.financial_entries:
            return self._kept(state.financial_entries, "financial_entries", mode)
        # Legacy flat single-entry form
        return [state] if legacy_financials_have_data(state) else []

    def _clear(self, table: str, company_id: str) -> None:
        self.datastore.delete(table, {"company_id": company_id})

    def _insert(self, result: SubmissionResult, table: str, rows: List[Row], stamp: bool = True) -> None:
        if not rows:
            return
        self.datastore.insert(table, add_timestamps(rows) if stamp else rows)
        result.count(table, len(rows))

    def _write_simple(
        self,
        result: SubmissionResult,
        table: str,
        company_id: str,
        editing: bool,
        records: list,
        builder: Callable[..., Row],
    ) -> None:
        with self.datastore.transaction():
            if editing:
                self._clear(table, company_id)
            self._insert(result, table, [builder(record, company_id) for record in records])

    # ------------------------------------------------------------------ #
    # Logo
    def _upload_logo(self, state, company_id: str, editing: bool) -> Optional[str]:
        previous = text_or_none(state.logo_url) if editing else None
        logo = state.logo
        if logo is None:
            return previous
        try:
            stored = self.assets.upload(
                logo_path(company_id, logo.filename), logo.content, logo.content_type, upsert=True
            )
            url = self.assets.public_url(stored)
        except AssetUploadError as e:
            logger.warning(f"Logo upload failed for company {company_id}, continuing without it: {e}")
            return previous
        return url or previous

    # ------------------------------------------------------------------ #
    # Entity resolution
    def _resolve_company(self, name: str) -> str:
        """Existing company with this name (case-insensitive), else a new placeholder."""
        lowered = name.strip().lower()
        if lowered in self._company_ids:
            return self._company_ids[lowered]
        try:
            found = self.datastore.select(COMPANIES, {"name_lowercase": lowered}, columns="id", limit=1)
            if found:
                company_id = found[0]["id"]
            else:
                row = build.placeholder_company_row(name)
                self.datastore.insert(COMPANIES, row)
                company_id = row["id"]
                logger.info(f"Created placeholder company {name.strip()!r} ({company_id})")
        except DatastoreError as e:
            raise ResolutionError(f"Could not resolve company {name.strip()!r}: {e}") from e
        self._company_ids[lowered] = company_id
        return company_id

    def _resolve_investor(self, investor, funding_round) -> str:
        key = (investor.name, investor.investor_type)
        if key in self._investor_ids:
            return self._investor_ids[key]
        try:
            found = self.datastore.select(
                INVESTORS,
                {"name": investor.name, "investor_type": investor.investor_type},
                columns="id",
                limit=1,
            )
            if found:
                investor_id = found[0]["id"]
            else:
                row = build.build_investor_row(investor, funding_round)
                self.datastore.insert(INVESTORS, add_timestamps(row))
                investor_id = row["id"]
                logger.info(f"Created investor {investor.name!r} ({investor_id})")
        except DatastoreError as e:
            raise ResolutionError(f"Could not resolve investor {investor.name!r}: {e}") from e
        self._investor_ids[key] = investor_id
        return investor_id

    # ------------------------------------------------------------------ #
    # Funding rounds + investors
    def _write_funding(self, result: SubmissionResult, state, company_id: str, editing: bool, mode: str) -> None:
        # Rows stay paired with the form round they came from.
        kept = [
            (funding_round, build.build_funding_round_row(funding_round, company_id))
            for funding_round in self._kept(state.funding_rounds, "funding_rounds", mode)
        ]
        with self.datastore.transaction():
            if editing:
                self._clear(FUNDING_ROUNDS, company_id)
            self._insert(result, FUNDING_ROUNDS, [row for _, row in kept])

            associations: List[Row] = []
            for funding_round, row in kept:
                for investor in funding_round.investors:
                    if not (has_text(investor.name) and has_text(investor.investor_type)):
                        continue
                    investor_id = self._resolve_investor(investor, funding_round)
                    associations.append(
                        build.build_funding_investor_row(investor, row["id"], investor_id, company_id)
                    )
            if associations:
                self._insert(result, FUNDING_INVESTORS, associations, stamp=False)

    # ------------------------------------------------------------------ #
    # Investments
    def _investee_id(self, investment, company_id: str) -> str:
        if not has_text(investment.investment_target):
            return company_id
        try:
            return self._resolve_company(investment.investment_target)
        except ResolutionError as e:
            logger.warning(f"{e}; recording the investment against company {company_id}")
            return company_id

    def _write_investments(self, result: SubmissionResult, state, company_id: str, editing: bool, mode: str) -> None:
        records = self._kept(state.company_investments, "company_investments", mode)
        # Placeholders are resolved before the replacement starts, so a failed
        # placeholder insert never aborts the replacement transaction.
        rows = [
            build.build_investment_row(investment, company_id, self._investee_id(investment, company_id))
            for investment in records
        ]
        with self.datastore.transaction():
            if editing:
                self._clear(COMPANY_INVESTMENTS, company_id)
            self._insert(result, COMPANY_INVESTMENTS, rows)

    # ------------------------------------------------------------------ #
    # Regulatory filings
    def _filing_document(
        self, filing, company_id: str, existing: Optional[Row]
    ) -> Tuple[Optional[str], Optional[str]]:
        """(file_path, uploaded_file_name) to store for one filing."""
        document = filing.document_file
        if document is not None:
            try:
                path = self.assets.upload(
                    filing_document_path(company_id, document.filename),
                    document.content,
                    document.content_type,
                    upsert=False,
                )
            except AssetUploadError as e:
                logger.warning(f"Filing document upload failed for {document.filename!r}, continuing without it: {e}")
                return None, None
            return path, document.filename

        if existing and all(existing.get(k) for k in ("document_url", "file_path", "uploaded_file_name")):
            return existing["file_path"], existing["uploaded_file_name"]

        if has_text(filing.document_url) and has_text(filing.file_path) and has_text(filing.uploaded_file_name):
            return filing.file_path, filing.uploaded_file_name

        return None, None

    def _write_filings(self, result: SubmissionResult, state, company_id: str, editing: bool, mode: str) -> None:
        records = self._kept(state.regulatory_filings, "regulatory_filings", mode)
        stored: Dict[str, Row] = {}
        if editing:
            for filing in self.datastore.select(REGULATORY_FILINGS, {"company_id": company_id}):
                key = build.filing_document_key(filing.get("filing_type"), filing.get("filing_date"), filing.get("filing_number"))
                stored[key] = filing

        with self.datastore.transaction():
            if editing:
                self._clear(REGULATORY_FILINGS, company_id)
            rows = []
            for filing in records:
                key = build.filing_document_key(filing.filing_type, filing.filing_date, filing.filing_number)
                file_path, file_name = self._filing_document(filing, company_id, stored.get(key))
                document_url = self.assets.public_url(file_path) if file_path else text_or_none(filing.document_url)
                rows.append(build.build_filing_row(filing, company_id, file_path, file_name, document_url))
            self._insert(result, REGULATORY_FILINGS, rows)

    # ------------------------------------------------------------------ #
    # Relationships
    def _write_relationships(self, result: SubmissionResult, state, company_id: str, editing: bool, mode: str) -> None:
        if not company_id:
            raise InvariantViolationError("Company ID is required for creating relationships")
        records = self._kept(state.company_relationships, "company_relationships", mode)
        rows = []
        for relationship in records:
            related_id = self._resolve_company(relationship.related_company_name)
            parent, subsidiary = build.relationship_endpoints(relationship.relationship_type, company_id, related_id)
            rows.append(build.build_relationship_row(relationship, parent, subsidiary))
        with self.datastore.transaction():
            if editing:
                self.datastore.delete(
                    COMPANY_RELATIONSHIPS,
                    any_of=[("parent_company_id", company_id), ("subsidiary_company_id", company_id)],
                )
            self._insert(result, COMPANY_RELATIONSHIPS, rows)
