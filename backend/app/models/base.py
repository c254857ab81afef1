"""
base.py — Shared Declarative Base

All table models register on this one Base so `Base.metadata` describes the
whole company-profile schema. The SQL datastore builds its statements from
these tables; nothing here creates or migrates the live Supabase schema.
"""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
