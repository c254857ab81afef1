"""
Shared fixtures: an in-memory datastore and asset storage with failure
injection, plus wizard/translator factories wired to them.
"""

from __future__ import annotations

import copy
from collections import defaultdict
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Tuple

import pytest

from app.core.cache import cache_clear
from app.core.exceptions import AssetUploadError, DatastoreError
from app.services.datastore.base import as_rows
from app.services.submission.translator import SubmissionTranslator
from app.services.wizard.drafts import MemoryDraftStore
from app.services.wizard.machine import CompanyWizard


class FakeDatastore:
    """Dict-of-lists datastore implementing the Datastore port."""

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        for name, rows in (tables or {}).items():
            self.tables[name] = [dict(r) for r in rows]
        self.calls: List[Tuple[str, str]] = []
        self.failures: Dict[Tuple[str, str], str] = {}
        self.transactions = 0

    # Failure injection
    def fail(self, op: str, table: str, message: str = "simulated datastore failure") -> None:
        self.failures[(op, table)] = message

    def _record(self, op: str, table: str) -> None:
        self.calls.append((op, table))
        if (op, table) in self.failures:
            raise DatastoreError(self.failures[(op, table)])

    @staticmethod
    def _matches(row, filters, any_of) -> bool:
        if any(row.get(k) != v for k, v in (filters or {}).items()):
            return False
        if any_of and not any(row.get(k) == v for k, v in any_of):
            return False
        return True

    def rows(self, table: str) -> List[Dict[str, Any]]:
        return self.tables[table]

    # Port
    def select(self, table, filters=None, any_of=None, columns="*", limit=None):
        self._record("select", table)
        found = [r for r in self.tables[table] if self._matches(r, filters, any_of)]
        if columns.strip() != "*":
            names = [c.strip() for c in columns.split(",")]
            found = [{c: r.get(c) for c in names} for r in found]
        if limit is not None:
            found = found[:limit]
        return copy.deepcopy(found)

    def insert(self, table, rows):
        self._record("insert", table)
        payload = as_rows(rows)
        self.tables[table].extend(copy.deepcopy(payload))
        return payload

    def update(self, table, values, filters):
        self._record("update", table)
        updated = []
        for row in self.tables[table]:
            if self._matches(row, filters, None):
                row.update(values)
                updated.append(dict(row))
        return updated

    def delete(self, table, filters=None, any_of=None):
        self._record("delete", table)
        kept, removed = [], []
        for row in self.tables[table]:
            (removed if self._matches(row, filters, any_of) else kept).append(row)
        self.tables[table] = kept
        return removed

    @contextmanager
    def transaction(self):
        self.transactions += 1
        yield


class FakeAssetStorage:
    """Records uploads; `fail=True` makes every upload raise AssetUploadError."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.objects: Dict[str, bytes] = {}
        self.uploads: List[Tuple[str, bool]] = []

    def upload(self, path, content, content_type=None, upsert=False):
        if self.fail:
            raise AssetUploadError("storage unavailable")
        if path in self.objects and not upsert:
            raise AssetUploadError(f"{path} already exists")
        self.objects[path] = content
        self.uploads.append((path, upsert))
        return path

    def public_url(self, path):
        return f"https://storage.test/company-assets/{path}"


@pytest.fixture(autouse=True)
def _clear_role_cache():
    cache_clear()
    yield
    cache_clear()


@pytest.fixture
def datastore() -> FakeDatastore:
    return FakeDatastore()


@pytest.fixture
def assets() -> FakeAssetStorage:
    return FakeAssetStorage()


@pytest.fixture
def drafts() -> MemoryDraftStore:
    return MemoryDraftStore()


@pytest.fixture
def translator(datastore, assets) -> SubmissionTranslator:
    return SubmissionTranslator(datastore, assets)


@pytest.fixture
def make_wizard(translator, drafts):
    """Factory: make_wizard(mode="create", company_id=None, state=None, owner="user-1")."""

    def _make(mode="create", company_id=None, state=None, owner="user-1", submitter=None):
        return CompanyWizard(
            submitter or translator,
            drafts,
            owner=owner,
            mode=mode,
            company_id=company_id,
            state=state,
        )

    return _make
