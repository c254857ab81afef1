"""
database.py — Direct Postgres Engine Management

Purpose:
- Create the SQLAlchemy Engine used by the transactional SQL datastore
  (DATASTORE_BACKEND=sql).
- Normalize the Supabase Postgres URL to the psycopg (v3) driver.

Key Characteristics:
- Synchronous SQLAlchemy engine.
- No Alembic migrations; schema expected to already exist (created in
  Supabase). `app.models` mirrors it for query building only.
- The engine is created lazily on first use so that the default Supabase
  REST backend never needs SUPABASE_DB_URL.

This module does NOT:
- Define table metadata (see app/models/*).
- Perform any queries or business logic.
"""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from app.core.config import settings

_engine: Optional[Engine] = None


def normalize_db_url(db_url: str) -> str:
    """
    Use psycopg (v3) driver; SQLAlchemy 2.0+ supports psycopg3.
    Convert postgresql:// to postgresql+psycopg:// if no driver is specified.
    """
    if db_url.startswith("postgresql://") and "+" not in db_url.split("://")[0]:
        return db_url.replace("postgresql://", "postgresql+psycopg://", 1)
    return db_url


def get_engine() -> Engine:
    """
    Return the process-wide engine, creating it on first call.

    Raises:
        RuntimeError: If database is not configured (SUPABASE_DB_URL is empty)
    """
    global _engine
    if _engine is not None:
        return _engine

    db_url = settings.SUPABASE_DB_URL
    if not db_url:
        raise RuntimeError(
            "Database is not configured. Please set SUPABASE_DB_URL environment variable "
            "or use DATASTORE_BACKEND=supabase."
        )

    _engine = create_engine(
        normalize_db_url(db_url),
        pool_pre_ping=True  # Ensures connections are valid before use
    )
    return _engine
