"""
news.py — Table Models for Company News and Inter-Company Relationships

Purpose:
- `company_news`: press items attached to a company.
- `company_relationships`: directed parent → subsidiary edges between two
  rows of `companies`. A company can appear on either side, so edits delete
  by either endpoint.

Invariant: parent_company_id != subsidiary_company_id.
"""

from sqlalchemy import JSON, CheckConstraint, Column, Date, DateTime, Float, ForeignKey, String, Text

from app.models.base import Base


class CompanyNews(Base):
    __tablename__ = "company_news"

    id = Column(String(36), primary_key=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String, nullable=False)
    summary = Column(Text, nullable=True)
    content = Column(Text, nullable=False)
    source_name = Column(String, nullable=False)
    source_url = Column(String, nullable=True)
    published_date = Column(Date, nullable=True)
    sentiment = Column(String, nullable=False, default="NEUTRAL")
    relevance_score = Column(Float, nullable=True)
    tags = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)


class CompanyRelationship(Base):
    __tablename__ = "company_relationships"

    id = Column(String(36), primary_key=True)
    parent_company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)
    subsidiary_company_id = Column(String(36), ForeignKey("companies.id"), nullable=False, index=True)

    relationship_type = Column(String, nullable=False)  # SUBSIDIARY, PARENT_COMPANY, JOINT_VENTURE, ...
    effective_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    ownership_percentage = Column(Float, nullable=True)
    acquisition_value = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("parent_company_id <> subsidiary_company_id", name="ck_relationship_distinct_endpoints"),
    )

    def __repr__(self):
        return f"<CompanyRelationship {self.parent_company_id} -> {self.subsidiary_company_id} ({self.relationship_type})>"
