"""
regulatory.py — Table Models for Regulatory Filings and Legal Proceedings

Purpose:
- `regulatory_filings`: statutory filings with an optional uploaded document.
  The document lives in storage; the row keeps `file_path`,
  `uploaded_file_name` and the public `document_url`.
- `legal_proceedings`: court cases involving the company.

On edit, a filing's document is carried forward by matching
(filing_type, filing_date, filing_number) against the rows being replaced.
"""

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, String, Text

from app.models.base import Base


class RegulatoryFiling(Base):
    __tablename__ = "regulatory_filings"

    id = Column(String(36), primary_key=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)

    filing_type = Column(String, nullable=False)
    filing_number = Column(String, nullable=True)
    filing_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    status = Column(String, nullable=False)             # PENDING, FILED, ...
    priority = Column(String, nullable=False, default="MEDIUM")
    remarks = Column(Text, nullable=True)
    fees_paid = Column(Float, nullable=True)

    # Document
    document_url = Column(String, nullable=True)
    document_title = Column(String, nullable=True)
    file_path = Column(String, nullable=True)
    uploaded_file_name = Column(String, nullable=True)

    filing_authority = Column(String, nullable=True)
    form_number = Column(String, nullable=True)
    acknowledgment_number = Column(String, nullable=True)
    compliance_officer = Column(String, nullable=True)
    period_covered = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<RegulatoryFiling {self.filing_type} | {self.filing_date} | {self.filing_number}>"


class LegalProceeding(Base):
    __tablename__ = "legal_proceedings"

    id = Column(String(36), primary_key=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)

    case_title = Column(String, nullable=True)
    case_type = Column(String, nullable=False, default="OTHER")
    case_status = Column(String, nullable=True)
    case_number = Column(String, nullable=True)
    court_name = Column(String, nullable=True)
    filing_date = Column(Date, nullable=True)
    description = Column(Text, nullable=True)
    amount_involved = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)
