"""
user.py — Table Model for User Profiles

Purpose:
- Hold the subscription role of each authenticated user.
- `id` equals the Supabase Auth user id (the access token's `sub` claim);
  credentials themselves live in Supabase Auth, never here.

Used by:
- security.py (role lookup for the wizard's access gate)
"""

from sqlalchemy import Column, DateTime, String

from app.models.base import Base


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True)
    email = Column(String, nullable=True)
    full_name = Column(String, nullable=True)

    # FREEMIUM, PREMIUM, ENTERPRISE, ADMIN
    role = Column(String, nullable=False, default="FREEMIUM")

    created_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<Profile {self.email} ({self.role})>"
