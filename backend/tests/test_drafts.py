"""
Unit tests for wizard draft persistence (memory and JSON file backends).
"""

import json

import pytest

from app.services.wizard.drafts import DraftScope, FileDraftStore, MemoryDraftStore
from app.services.wizard.form_state import FormState, UploadedFile


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryDraftStore()
    return FileDraftStore(directory=str(tmp_path))


def test_save_load_clear(store):
    scope = DraftScope("create", "user-1")
    state = FormState.blank()
    state.name = "Acme"
    state.addresses[0].city = "Pune"

    store.save(scope, 3, state)
    draft = store.load(scope)
    assert draft.step == 3
    assert draft.state.name == "Acme"
    assert draft.state.addresses[0].city == "Pune"

    store.clear(scope)
    assert store.load(scope) is None
    # Clearing twice is harmless
    store.clear(scope)


def test_step_only_draft(store):
    scope = DraftScope("edit", "user-1")
    store.save(scope, 5)
    draft = store.load(scope)
    assert draft.step == 5
    assert draft.state is None


def test_scopes_are_independent(store):
    store.save(DraftScope("create", "user-1"), 2, FormState(name="Create"))
    store.save(DraftScope("edit", "user-1"), 6)

    assert store.load(DraftScope("create", "user-1")).state.name == "Create"
    assert store.load(DraftScope("edit", "user-1")).step == 6
    assert store.load(DraftScope("create", "user-2")) is None


def test_logo_never_written(tmp_path):
    store = FileDraftStore(directory=str(tmp_path))
    state = FormState(name="Acme", logo=UploadedFile(filename="logo.png", content=b"\x89PNG"))
    store.save(DraftScope("create", "u"), 1, state)

    payload = json.loads((tmp_path / "create-u.json").read_text(encoding="utf-8"))
    assert "logo" not in payload["state"]
    assert payload["step"] == 1
    assert "saved_at" in payload


def test_owner_is_sanitised_into_file_name(tmp_path):
    store = FileDraftStore(directory=str(tmp_path))
    store.save(DraftScope("create", "../../etc/passwd"), 1)
    files = [p.name for p in tmp_path.iterdir()]
    assert files == ["create-.._.._etc_passwd.json"]


def test_corrupt_draft_is_treated_as_absent(tmp_path):
    store = FileDraftStore(directory=str(tmp_path))
    (tmp_path / "create-user-1.json").write_text("{not json", encoding="utf-8")
    assert store.load(DraftScope("create", "user-1")) is None


def test_invalid_draft_payload_is_treated_as_absent(tmp_path):
    store = FileDraftStore(directory=str(tmp_path))
    (tmp_path / "create-user-1.json").write_text(json.dumps({"state": {}}), encoding="utf-8")
    assert store.load(DraftScope("create", "user-1")) is None
