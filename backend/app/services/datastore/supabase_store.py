"""
Supabase datastore adapter for wizard submissions.

Wraps the supabase-py `Client` table builder behind the Datastore port. The
REST interface has no multi-statement transactions, so `transaction()` only
marks the scope in the debug log.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Sequence, Union

from supabase import Client, create_client

from app.core.config import settings
from app.core.exceptions import DatastoreError
from app.core.logging import get_logger
from app.services.datastore.base import AnyOf, Filters, Row, as_rows


logger = get_logger(__name__)

_OR_RESERVED = set(',.:()"')


def _create_supabase_client() -> Client:
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


def _or_value(value: Any) -> str:
    text = str(value)
    if any(ch in _OR_RESERVED for ch in text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def or_clause(any_of: AnyOf) -> str:
    """
    Build a PostgREST `or` filter from equality alternatives.

    Example:
        [("parent_company_id", "a"), ("subsidiary_company_id", "a")]
        → "parent_company_id.eq.a,subsidiary_company_id.eq.a"
    """
    return ",".join(f"{column}.eq.{_or_value(value)}" for column, value in any_of)


class SupabaseDatastore:
    """
    Thin wrapper providing the Datastore port over Supabase tables.
    """

    def __init__(self, client: Optional[Client] = None):
        self._client = client or _create_supabase_client()

    # ------------------------------------------------------------------ #
    # Filters
    def _apply_filters(self, query, filters: Optional[Filters], any_of: Optional[AnyOf]):
        for column, value in (filters or {}).items():
            query = query.eq(column, value)
        if any_of:
            query = query.or_(or_clause(any_of))
        return query

    # ------------------------------------------------------------------ #
    # Port
    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        any_of: Optional[AnyOf] = None,
        columns: str = "*",
        limit: Optional[int] = None,
    ) -> List[Row]:
        query = self._apply_filters(self._client.table(table).select(columns), filters, any_of)
        if limit is not None:
            query = query.limit(limit)
        try:
            response = query.execute()
        except Exception as e:
            raise DatastoreError(f"Failed to select from {table}: {e}") from e
        return list(response.data or [])

    def insert(self, table: str, rows: Union[Row, Sequence[Row]]) -> List[Row]:
        payload = as_rows(rows)
        if not payload:
            return []
        try:
            response = self._client.table(table).insert(payload).execute()
        except Exception as e:
            raise DatastoreError(f"Failed to insert into {table}: {e}") from e
        return list(response.data or [])

    def update(self, table: str, values: Row, filters: Filters) -> List[Row]:
        if not filters:
            raise DatastoreError(f"Refusing to update every row of {table}")
        query = self._apply_filters(self._client.table(table).update(dict(values)), filters, None)
        try:
            response = query.execute()
        except Exception as e:
            raise DatastoreError(f"Failed to update {table}: {e}") from e
        return list(response.data or [])

    def delete(
        self,
        table: str,
        filters: Optional[Filters] = None,
        any_of: Optional[AnyOf] = None,
    ) -> List[Row]:
        if not filters and not any_of:
            raise DatastoreError(f"Refusing to delete every row of {table}")
        query = self._apply_filters(self._client.table(table).delete(), filters, any_of)
        try:
            response = query.execute()
        except Exception as e:
            raise DatastoreError(f"Failed to delete from {table}: {e}") from e
        return list(response.data or [])

    @contextmanager
    def transaction(self) -> Iterator[None]:
        # PostgREST executes each request in its own transaction.
        logger.debug("Supabase REST datastore: replacement is not atomic across requests")
        yield

    @property
    def client(self) -> Client:
        return self._client
