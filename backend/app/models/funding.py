"""
funding.py — Table Models for Funding Rounds, Investors and Investments

Purpose:
- `funding_rounds`: capital raised by the company.
- `investors`: canonical investor entities, unique by (name, investor_type),
  shared across companies.
- `funding_investors`: association of an investor with one round. The live
  schema has `created_at` only (no `updated_at`).
- `company_investments`: this company investing in another company; the
  investee is a real or placeholder row in `companies`.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text

from app.models.base import Base


class FundingRound(Base):
    __tablename__ = "funding_rounds"

    id = Column(String(36), primary_key=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)

    round_type = Column(String, nullable=True)   # SEED, SERIES_A, ...
    round_name = Column(String, nullable=True)
    amount_raised = Column(Float, nullable=True)
    currency = Column(String, nullable=True)
    valuation_pre_money = Column(Float, nullable=True)
    valuation_post_money = Column(Float, nullable=True)
    funding_date = Column(Date, nullable=True)
    announcement_date = Column(Date, nullable=True)
    total_investors_count = Column(Integer, nullable=True)
    round_status = Column(String, nullable=True)  # ANNOUNCED, CLOSED, ...
    use_of_funds = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)


class Investor(Base):
    __tablename__ = "investors"

    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=False)
    investor_type = Column(String, nullable=False)  # VENTURE_CAPITAL, ANGEL, ...
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_investors_name_type", "name", "investor_type"),
    )


class FundingInvestor(Base):
    __tablename__ = "funding_investors"

    id = Column(String(36), primary_key=True)
    funding_round_id = Column(String(36), ForeignKey("funding_rounds.id", ondelete="CASCADE"), nullable=False, index=True)
    investor_id = Column(String(36), ForeignKey("investors.id"), nullable=False)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)

    investment_amount = Column(Float, nullable=True)
    is_lead_investor = Column(Boolean, nullable=False, default=False)
    board_seat_obtained = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=True)


class CompanyInvestment(Base):
    __tablename__ = "company_investments"

    id = Column(String(36), primary_key=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    investor_company_id = Column(String(36), ForeignKey("companies.id"), nullable=False)
    investee_company_id = Column(String(36), ForeignKey("companies.id"), nullable=False)

    investment_target = Column(String, nullable=True)  # display name of the investee
    investment_amount = Column(Float, nullable=True)
    investment_date = Column(Date, nullable=True)
    investment_type = Column(String, nullable=False, default="EQUITY")
    current_stake_percentage = Column(Float, nullable=True)
    expected_return = Column(Float, nullable=True)
    investment_status = Column(String, nullable=False, default="ACTIVE")
    exit_date = Column(Date, nullable=True)
    exit_amount = Column(Float, nullable=True)
    exit_type = Column(String, nullable=True)
    exit_multiple = Column(Float, nullable=True)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)
