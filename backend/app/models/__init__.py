"""
Table models for the company-profile schema.

Importing this package registers every table on `Base.metadata`.
"""

from app.models.base import Base
from app.models.company import Company, CompanyAddress, CompanyContact, KeyOfficial
from app.models.financial_statement import FinancialStatement
from app.models.funding import CompanyInvestment, FundingInvestor, FundingRound, Investor
from app.models.news import CompanyNews, CompanyRelationship
from app.models.regulatory import LegalProceeding, RegulatoryFiling
from app.models.user import Profile

__all__ = [
    "Base",
    "Company",
    "CompanyAddress",
    "CompanyContact",
    "CompanyInvestment",
    "CompanyNews",
    "CompanyRelationship",
    "FinancialStatement",
    "FundingInvestor",
    "FundingRound",
    "Investor",
    "KeyOfficial",
    "LegalProceeding",
    "Profile",
    "RegulatoryFiling",
]
