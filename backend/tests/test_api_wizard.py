"""
API tests for the wizard routes, driven through FastAPI's TestClient with
the datastore, storage, drafts and signed-in user overridden.
"""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from app.api.v1 import wizard as wizard_api
from app.core.security import SessionUser, require_company_editor
from app.main import app
from app.services.datastore import get_datastore

from conftest import FakeAssetStorage, FakeDatastore

BASE = "/api/v1/wizard/sessions"


@pytest.fixture
def backend(drafts):
    """Shared fakes behind the overridden dependencies."""
    datastore = FakeDatastore(
        {"companies": [{"id": "c-1", "name": "Stored Co", "name_lowercase": "stored co", "sector": "Energy"}]}
    )
    return {
        "datastore": datastore,
        "assets": FakeAssetStorage(),
        "drafts": drafts,
        "registry": wizard_api.WizardSessionRegistry(),
        "user": SessionUser(id="admin-1", role="ADMIN"),
    }


@pytest.fixture
def client(backend):
    app.dependency_overrides[get_datastore] = lambda: backend["datastore"]
    app.dependency_overrides[wizard_api.get_asset_storage] = lambda: backend["assets"]
    app.dependency_overrides[wizard_api.get_draft_store] = lambda: backend["drafts"]
    app.dependency_overrides[wizard_api.get_registry] = lambda: backend["registry"]
    app.dependency_overrides[require_company_editor] = lambda: backend["user"]
    yield TestClient(app)
    app.dependency_overrides.clear()


def _open(client, **payload):
    response = client.post(BASE, json=payload)
    assert response.status_code == 201, response.text
    return response.json()["session_id"]


def _fill_and_walk_to_last_step(client, session_id):
    client.patch(f"{BASE}/{session_id}/fields", json={"name": "sector", "value": "Manufacturing"})
    client.patch(f"{BASE}/{session_id}/fields", json={"name": "name", "value": "Acme Robotics"})
    for _ in range(6):
        assert client.post(f"{BASE}/{session_id}/next").status_code == 200


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


def test_open_create_session(client):
    response = client.post(BASE, json={})
    body = response.json()

    assert response.status_code == 201
    assert body["mode"] == "create"
    assert body["step"] == 1
    assert body["phase"] == "idle"
    assert body["state"]["addresses"][0]["address_type"] == "REGISTERED"


def test_open_edit_session_loads_company(client):
    body = client.post(BASE, json={"mode": "edit", "company_id": "c-1"}).json()
    assert body["mode"] == "edit"
    assert body["company_id"] == "c-1"
    assert body["state"]["name"] == "Stored Co"


def test_open_edit_session_errors(client):
    assert client.post(BASE, json={"mode": "edit"}).status_code == 422
    assert client.post(BASE, json={"mode": "edit", "company_id": "missing"}).status_code == 404


def test_open_edit_session_datastore_failure(client, backend):
    backend["datastore"].fail("select", "companies")
    assert client.post(BASE, json={"mode": "edit", "company_id": "c-1"}).status_code == 500


def test_unknown_session(client):
    assert client.get(f"{BASE}/nope").status_code == 404


def test_sessions_belong_to_their_owner(client, backend):
    session_id = _open(client)
    backend["user"] = SessionUser(id="admin-2", role="ADMIN")
    assert client.get(f"{BASE}/{session_id}").status_code == 404


def test_abandon_session(client, backend):
    session_id = _open(client)
    client.patch(f"{BASE}/{session_id}/fields", json={"name": "name", "value": "Temp"})

    assert client.delete(f"{BASE}/{session_id}").status_code == 204
    assert client.get(f"{BASE}/{session_id}").status_code == 404
    assert len(backend["registry"]) == 0
    # Draft discarded: a new session starts blank
    assert client.post(BASE, json={}).json()["state"]["name"] == ""


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


def test_change_field_and_unknown_field(client):
    session_id = _open(client)

    body = client.patch(f"{BASE}/{session_id}/fields", json={"name": "net_profit", "value": "25"}).json()
    assert body["state"]["net_profit"] == "25"

    response = client.patch(f"{BASE}/{session_id}/fields", json={"name": "nope", "value": "x"})
    assert response.status_code == 422

    response = client.patch(f"{BASE}/{session_id}/fields", json={"name": "logo", "value": "aGVsbG8="})
    assert response.status_code == 422


def test_section_entries(client):
    session_id = _open(client)

    response = client.post(f"{BASE}/{session_id}/sections/key_officials/entries")
    assert response.status_code == 201
    assert len(response.json()["state"]["key_officials"]) == 2

    body = client.patch(
        f"{BASE}/{session_id}/sections/key_officials/entries/1", json={"field": "name", "value": "R. Mehta"}
    ).json()
    assert body["state"]["key_officials"][1]["name"] == "R. Mehta"

    body = client.delete(f"{BASE}/{session_id}/sections/key_officials/entries/0").json()
    assert [o["name"] for o in body["state"]["key_officials"]] == ["R. Mehta"]

    assert client.delete(f"{BASE}/{session_id}/sections/key_officials/entries/9").status_code == 422
    assert client.post(f"{BASE}/{session_id}/sections/shareholders/entries").status_code == 422


def test_financial_entry_ratios_in_view(client):
    session_id = _open(client)
    url = f"{BASE}/{session_id}/sections/financial_entries/entries/0"
    client.patch(url, json={"field": "net_profit", "value": "25"})
    body = client.patch(url, json={"field": "total_assets", "value": "250"}).json()

    assert body["state"]["financial_entries"][0]["return_on_assets"] == "10.00"


def test_investor_routes(client):
    session_id = _open(client)
    url = f"{BASE}/{session_id}/funding_rounds/0/investors"

    assert client.post(url).status_code == 201
    body = client.patch(f"{url}/0", json={"field": "name", "value": "Accel"}).json()
    assert body["state"]["funding_rounds"][0]["investors"][0]["name"] == "Accel"

    body = client.delete(f"{url}/0").json()
    assert body["state"]["funding_rounds"][0]["investors"] == []
    assert client.post(f"{BASE}/{session_id}/funding_rounds/3/investors").status_code == 422


def test_file_uploads_attach_to_session(client, backend):
    session_id = _open(client)

    response = client.post(
        f"{BASE}/{session_id}/files/logo", files={"file": ("logo.png", b"\x89PNG", "image/png")}
    )
    assert response.status_code == 200
    assert "logo" not in response.json()["state"]

    client.post(f"{BASE}/{session_id}/sections/regulatory_filings/entries")
    response = client.post(
        f"{BASE}/{session_id}/sections/regulatory_filings/entries/0/document",
        files={"file": ("mgt7.pdf", b"%PDF-1.7", "application/pdf")},
    )
    assert response.status_code == 200

    wizard = backend["registry"].get(session_id, "admin-1")
    assert wizard.state.logo.content == b"\x89PNG"
    assert wizard.state.regulatory_filings[0].document_file.filename == "mgt7.pdf"


# ---------------------------------------------------------------------------
# Navigation & submission
# ---------------------------------------------------------------------------


def test_next_blocked_reports_errors(client):
    session_id = _open(client)
    response = client.post(f"{BASE}/{session_id}/next")

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["step"] == 1
    assert set(detail["errors"]) == {"name", "sector"}


def test_previous(client):
    session_id = _open(client)
    assert client.post(f"{BASE}/{session_id}/previous").json()["step"] == 1


def test_submit_before_last_step_conflicts(client):
    session_id = _open(client)
    assert client.post(f"{BASE}/{session_id}/submit").status_code == 409


def test_full_create_flow(client, backend):
    session_id = _open(client)
    _fill_and_walk_to_last_step(client, session_id)
    assert client.post(f"{BASE}/{session_id}/next").status_code == 409

    response = client.post(f"{BASE}/{session_id}/submit")
    body = response.json()

    assert response.status_code == 200
    assert body["phase"] == "succeeded"
    company = backend["datastore"].rows("companies")[-1]
    assert body["company_id"] == company["id"]
    assert company["name"] == "Acme Robotics"

    # Session closed after success
    assert len(backend["registry"]) == 0
    assert client.get(f"{BASE}/{session_id}").status_code == 404


def test_failed_submit_reports_error(client, backend):
    backend["datastore"].fail("insert", "companies", "duplicate key value")
    session_id = _open(client)
    _fill_and_walk_to_last_step(client, session_id)

    body = client.post(f"{BASE}/{session_id}/submit").json()
    assert body["phase"] == "failed"
    assert body["submit_error"] == "duplicate key value"
    assert body["step"] == 7
    # Kept open so the user can retry
    assert len(backend["registry"]) == 1


def test_successful_submissions_release_their_sessions(client, backend):
    for n in range(3):
        session_id = _open(client)
        _fill_and_walk_to_last_step(client, session_id)
        client.post(
            f"{BASE}/{session_id}/files/logo", files={"file": (f"logo{n}.png", b"\x89PNG", "image/png")}
        )
        assert client.post(f"{BASE}/{session_id}/submit").json()["phase"] == "succeeded"

    assert len(backend["registry"]) == 0
    assert len(backend["datastore"].rows("companies")) == 4


def test_idle_sessions_are_evicted():
    now = [0.0]
    registry = wizard_api.WizardSessionRegistry(idle_seconds=60, clock=lambda: now[0])
    idle = registry.open("user-1", object())
    now[0] = 30.0
    active = registry.open("user-1", object())

    now[0] = 80.0
    registry.get(active, "user-1")
    assert len(registry) == 1
    with pytest.raises(HTTPException) as exc:
        registry.get(idle, "user-1")
    assert exc.value.status_code == 404

    now[0] = 139.0
    assert registry.get(active, "user-1") is not None


def test_access_route_reports_editor_access(client):
    body = client.get("/api/v1/wizard/access").json()
    assert body["role"] == "ADMIN"
    assert body["visible_steps"] == [1, 2, 3, 4, 5, 6, 7]
    assert body["can_modify_company_data"] is True
    assert "delete_company" in body["actions"]
