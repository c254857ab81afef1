"""
SQL datastore adapter (direct Postgres through SQLAlchemy Core).

Builds statements from the table metadata in `app.models` and runs each
`transaction()` block in a single database transaction, so a child-table
replacement that fails halfway leaves the previous rows in place.
Outside a transaction block every call commits on its own. The open
transaction lives in a context variable, so it belongs to the request
(thread or task) that started it; one instance serves every request.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime
from typing import Any, Iterator, List, Optional, Sequence, Union

from sqlalchemy import Date, DateTime, Table, and_, or_, select
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import get_engine
from app.core.exceptions import DatastoreError
from app.core.logging import get_logger
from app.models import Base
from app.services.datastore.base import AnyOf, Filters, Row, as_rows


logger = get_logger(__name__)


def _to_python(column_type, value: Any) -> Any:
    """Convert ISO strings to the date/datetime objects typed columns expect."""
    if value is None or not isinstance(value, str):
        return value
    if isinstance(column_type, DateTime):
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(column_type, Date):
        return date.fromisoformat(value[:10])
    return value


def _to_json(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


class SqlDatastore:
    """
    Datastore port over a SQLAlchemy engine.
    """

    def __init__(self, engine: Optional[Engine] = None):
        self._engine = engine or get_engine()
        self._conn_ctx: ContextVar[Optional[Connection]] = ContextVar("sql_datastore_conn", default=None)

    # ------------------------------------------------------------------ #
    # Helpers
    def _table(self, name: str) -> Table:
        try:
            return Base.metadata.tables[name]
        except KeyError:
            raise DatastoreError(f"Unknown table: {name}") from None

    def _where(self, table: Table, filters: Optional[Filters], any_of: Optional[AnyOf]):
        try:
            clauses = [table.c[column] == value for column, value in (filters or {}).items()]
            if any_of:
                clauses.append(or_(*[table.c[column] == value for column, value in any_of]))
        except KeyError as e:
            raise DatastoreError(f"Unknown column {e} on {table.name}") from None
        return and_(*clauses) if clauses else None

    def _bind(self, table: Table, row: Row) -> Row:
        bound = {}
        for key, value in row.items():
            if key not in table.c:
                raise DatastoreError(f"Unknown column {key!r} on {table.name}")
            try:
                bound[key] = _to_python(table.c[key].type, value)
            except ValueError as e:
                raise DatastoreError(f"Invalid value for {table.name}.{key}: {value!r}") from e
        return bound

    @property
    def _conn(self) -> Optional[Connection]:
        return self._conn_ctx.get()

    @contextmanager
    def _connection(self) -> Iterator[Connection]:
        conn = self._conn
        if conn is not None:
            yield conn
            return
        with self._engine.begin() as conn:
            yield conn

    def _fetch(self, conn: Connection, table: Table, where, columns: str = "*", limit: Optional[int] = None) -> List[Row]:
        if columns.strip() == "*":
            stmt = select(table)
        else:
            try:
                stmt = select(*[table.c[c.strip()] for c in columns.split(",")])
            except KeyError as e:
                raise DatastoreError(f"Unknown column {e} on {table.name}") from None
        if where is not None:
            stmt = stmt.where(where)
        if limit is not None:
            stmt = stmt.limit(limit)
        return [
            {key: _to_json(value) for key, value in row._mapping.items()}
            for row in conn.execute(stmt)
        ]

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
        tbl = self._table(table)
        where = self._where(tbl, filters, any_of)
        try:
            with self._connection() as conn:
                return self._fetch(conn, tbl, where, columns, limit)
        except SQLAlchemyError as e:
            raise DatastoreError(f"Failed to select from {table}: {e}") from e

    def insert(self, table: str, rows: Union[Row, Sequence[Row]]) -> List[Row]:
        tbl = self._table(table)
        payload = as_rows(rows)
        bound = [self._bind(tbl, row) for row in payload]
        try:
            with self._connection() as conn:
                for row in bound:
                    conn.execute(tbl.insert().values(**row))
        except SQLAlchemyError as e:
            raise DatastoreError(f"Failed to insert into {table}: {e}") from e
        return payload

    def update(self, table: str, values: Row, filters: Filters) -> List[Row]:
        if not filters:
            raise DatastoreError(f"Refusing to update every row of {table}")
        tbl = self._table(table)
        where = self._where(tbl, filters, None)
        bound = self._bind(tbl, values)
        try:
            with self._connection() as conn:
                conn.execute(tbl.update().where(where).values(**bound))
                return self._fetch(conn, tbl, where)
        except SQLAlchemyError as e:
            raise DatastoreError(f"Failed to update {table}: {e}") from e

    def delete(
        self,
        table: str,
        filters: Optional[Filters] = None,
        any_of: Optional[AnyOf] = None,
    ) -> List[Row]:
        if not filters and not any_of:
            raise DatastoreError(f"Refusing to delete every row of {table}")
        tbl = self._table(table)
        where = self._where(tbl, filters, any_of)
        try:
            with self._connection() as conn:
                deleted = self._fetch(conn, tbl, where)
                conn.execute(tbl.delete().where(where))
        except SQLAlchemyError as e:
            raise DatastoreError(f"Failed to delete from {table}: {e}") from e
        return deleted

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._conn is not None:
            # Nested scopes join the outer transaction.
            yield
            return
        with self._engine.begin() as conn:
            token = self._conn_ctx.set(conn)
            try:
                yield
            finally:
                self._conn_ctx.reset(token)
