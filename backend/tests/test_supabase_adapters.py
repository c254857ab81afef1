"""
Tests for the Supabase datastore and storage wrappers, with the supabase-py
client replaced by a MagicMock.
"""

from unittest.mock import MagicMock

import pytest

from app.core.exceptions import AssetUploadError, DatastoreError
from app.services.datastore.supabase_store import SupabaseDatastore, or_clause
from app.services.submission.assets import SupabaseAssetStorage, manual_public_url


@pytest.fixture
def client():
    return MagicMock()


def test_or_clause():
    assert or_clause([("parent_company_id", "a"), ("subsidiary_company_id", "a")]) == (
        "parent_company_id.eq.a,subsidiary_company_id.eq.a"
    )


def test_or_clause_quotes_reserved_characters():
    assert or_clause([("name", "Acme, Inc.")]) == 'name.eq."Acme, Inc."'


def test_select_applies_filters_and_limit(client):
    query = client.table.return_value.select.return_value
    query.eq.return_value = query
    query.limit.return_value = query
    query.execute.return_value.data = [{"id": "c-1"}]

    rows = SupabaseDatastore(client).select("companies", {"name_lowercase": "acme"}, columns="id", limit=1)

    assert rows == [{"id": "c-1"}]
    client.table.assert_called_with("companies")
    client.table.return_value.select.assert_called_with("id")
    query.eq.assert_called_with("name_lowercase", "acme")
    query.limit.assert_called_with(1)


def test_delete_by_either_endpoint(client):
    query = client.table.return_value.delete.return_value
    query.or_.return_value = query
    query.execute.return_value.data = []

    SupabaseDatastore(client).delete(
        "company_relationships", any_of=[("parent_company_id", "c-1"), ("subsidiary_company_id", "c-1")]
    )

    query.or_.assert_called_with("parent_company_id.eq.c-1,subsidiary_company_id.eq.c-1")


def test_client_errors_become_datastore_errors(client):
    client.table.return_value.insert.return_value.execute.side_effect = RuntimeError("409 Conflict")

    with pytest.raises(DatastoreError, match="companies"):
        SupabaseDatastore(client).insert("companies", {"id": "c-1"})


def test_empty_insert_skips_request(client):
    assert SupabaseDatastore(client).insert("companies", []) == []
    client.table.assert_not_called()


def test_unfiltered_delete_refused(client):
    with pytest.raises(DatastoreError):
        SupabaseDatastore(client).delete("companies")


def test_storage_upload_options(client):
    bucket = client.storage.from_.return_value
    bucket.upload.return_value.path = "company-logos/c-1-logo.png"

    storage = SupabaseAssetStorage(client, bucket="company-assets")
    path = storage.upload("company-logos/c-1-logo.png", b"png", "image/png", upsert=True)

    assert path == "company-logos/c-1-logo.png"
    client.storage.from_.assert_called_with("company-assets")
    bucket.upload.assert_called_with(
        path="company-logos/c-1-logo.png",
        file=b"png",
        file_options={"upsert": "true", "content-type": "image/png"},
    )


def test_storage_upload_failure(client):
    client.storage.from_.return_value.upload.side_effect = RuntimeError("Duplicate")
    storage = SupabaseAssetStorage(client, bucket="company-assets")

    with pytest.raises(AssetUploadError):
        storage.upload("regulatory_filings/c-1/a.pdf", b"%PDF")


def test_public_url_falls_back_to_manual_url(client):
    client.storage.from_.return_value.get_public_url.return_value = None
    storage = SupabaseAssetStorage(client, bucket="company-assets")

    assert storage.public_url("a/b.png") == manual_public_url("company-assets", "a/b.png")
