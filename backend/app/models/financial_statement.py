"""
financial_statement.py — Table Model for Reported Financial Periods

Purpose:
- One row per reporting period entered through the wizard's financial step.
- Stores the entered figures together with the five derived ratios
  (debt-to-equity, current ratio, ROE, ROA, profit margin). Ratios are plain
  numeric columns computed client-side, never edited directly.
"""

from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Index, Integer, String

from app.models.base import Base


class FinancialStatement(Base):
    __tablename__ = "financial_statements"

    id = Column(String(36), primary_key=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)

    # Period
    financial_year = Column(Integer, nullable=True)
    quarter = Column(String, nullable=True)          # ANNUAL, Q1..Q4
    statement_type = Column(String, nullable=True)   # STANDALONE, CONSOLIDATED
    currency = Column(String, nullable=True)
    period_start_date = Column(Date, nullable=True)
    period_end_date = Column(Date, nullable=True)
    filed_date = Column(Date, nullable=True)

    # Income statement
    total_revenue = Column(Float, nullable=True)
    net_profit = Column(Float, nullable=True)
    gross_profit = Column(Float, nullable=True)
    operating_profit = Column(Float, nullable=True)
    ebitda = Column(Float, nullable=True)

    # Balance sheet
    total_assets = Column(Float, nullable=True)
    current_assets = Column(Float, nullable=True)
    fixed_assets = Column(Float, nullable=True)
    total_liabilities = Column(Float, nullable=True)
    current_liabilities = Column(Float, nullable=True)
    shareholders_equity = Column(Float, nullable=True)

    # Cash flow
    operating_cash_flow = Column(Float, nullable=True)
    investing_cash_flow = Column(Float, nullable=True)
    financing_cash_flow = Column(Float, nullable=True)
    net_cash_flow = Column(Float, nullable=True)

    # Derived ratios
    debt_to_equity_ratio = Column(Float, nullable=True)
    current_ratio = Column(Float, nullable=True)
    return_on_equity = Column(Float, nullable=True)
    return_on_assets = Column(Float, nullable=True)
    profit_margin = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_financial_statements_company_year", "company_id", "financial_year"),
    )

    def __repr__(self):
        return f"<FinancialStatement {self.company_id} | FY{self.financial_year} {self.quarter}>"
