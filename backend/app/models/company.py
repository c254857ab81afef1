"""
company.py — Table Models for Company Identity, Addresses, Contacts, Officials

Purpose:
- Represent a company profile and its directly owned child rows.
- `companies` also holds placeholder companies created as the far endpoint
  of an investment or relationship (sector "Unknown").

Important Design Rules:
- Identifiers are UUID v4 strings generated client-side before the write.
- `name_lowercase` mirrors `name` for case-insensitive lookup.
- Child rows are fully replaced on every edit submission.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Index, Integer, String, Text

from app.models.base import Base


class Company(Base):
    __tablename__ = "companies"

    id = Column(String(36), primary_key=True)

    # Display / lookup
    name = Column(String, nullable=False)
    name_lowercase = Column(String, nullable=False, index=True)
    legal_name = Column(String, nullable=True)

    # Registration identifiers
    cin = Column(String, nullable=True)
    gst = Column(String, nullable=True)
    pan = Column(String, nullable=True)

    # Classification
    sector = Column(String, nullable=False)
    company_type = Column(String, nullable=False, default="PRIVATE")
    status = Column(String, nullable=False, default="ACTIVE")

    description = Column(Text, nullable=True)
    website = Column(String, nullable=True)
    linkedin_url = Column(String, nullable=True)
    logo_url = Column(String, nullable=True)
    founded_date = Column(Date, nullable=True)
    employee_count = Column(Integer, nullable=True)
    employee_range = Column(String, nullable=True)
    annual_revenue_range = Column(String, nullable=True)
    market_cap = Column(Float, nullable=True)

    # Listing
    is_listed = Column(Boolean, nullable=False, default=False)
    stock_exchange = Column(String, nullable=True)
    stock_symbol = Column(String, nullable=True)
    isin = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_companies_sector", "sector"),
    )

    def __repr__(self):
        return f"<Company {self.name} | {self.sector}>"


class CompanyAddress(Base):
    __tablename__ = "company_addresses"

    id = Column(String(36), primary_key=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)

    address_type = Column(String, nullable=False, default="OTHER")  # REGISTERED, CORPORATE, ...
    address_line_1 = Column(String, nullable=False)
    address_line_2 = Column(String, nullable=True)
    city = Column(String, nullable=False)
    state = Column(String, nullable=False)
    zip_code = Column(String, nullable=False)
    country = Column(String, nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    is_primary = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)


class CompanyContact(Base):
    __tablename__ = "company_contacts"

    id = Column(String(36), primary_key=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)

    contact_type = Column(String, nullable=False)  # EMAIL, PHONE, ...
    contact_value = Column(String, nullable=False)
    department = Column(String, nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)
    is_primary = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)


class KeyOfficial(Base):
    __tablename__ = "key_officials"

    id = Column(String(36), primary_key=True)
    company_id = Column(String(36), ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)

    # NOT NULL in the live schema; the wizard writes "Not Specified" when blank
    name = Column(String, nullable=False)
    designation = Column(String, nullable=False)

    din = Column(String, nullable=True)
    age = Column(Integer, nullable=True)
    education = Column(String, nullable=True)
    previous_experience = Column(Text, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    appointment_date = Column(Date, nullable=True)
    resignation_date = Column(Date, nullable=True)
    is_current = Column(Boolean, nullable=False, default=True)
    is_board_member = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)
