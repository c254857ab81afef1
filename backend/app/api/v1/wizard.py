"""
wizard.py — Company Profile Wizard API Endpoints

Purpose:
- Drive one CompanyWizard per session over HTTP so a browser front end can
  run the seven-step create / edit flow:
    * report the signed-in role's access
    * open / read / abandon a session
    * edit scalar fields, list-section entries and funding-round investors
    * attach the company logo and filing documents
    * step forward / back, submit
- Keep sessions in an in-process registry keyed by session id and owned by
  the signed-in user; sessions close on abandon or successful submit and
  are evicted after SESSION_IDLE_MINUTES without a request.

Every route requires a role allowed to modify company data.

Error mapping:
- unknown session / company       → 404
- transition not available        → 409
- invalid field / section / index → 422
- step blocked by validation      → 422 with the field errors
- submission failure              → 200 with phase "failed" and submit_error

This file should be thin: the wizard, loader and translator do the work.
"""

import threading
import time
import uuid
from contextlib import contextmanager
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from pydantic import BaseModel

from app.core.config import settings
from app.core.exceptions import (
    CompanyNotFoundError,
    DatastoreError,
    InvalidTransitionError,
    WizardError,
)
from app.core.logging import get_logger
from app.core.permissions import access_summary
from app.core.security import SessionUser, require_company_editor
from app.services.datastore import Datastore, get_datastore
from app.services.submission.assets import AssetStorage, SupabaseAssetStorage
from app.services.submission.translator import SubmissionTranslator
from app.services.wizard.drafts import DraftStore, build_draft_store
from app.services.wizard.form_state import UploadedFile
from app.services.wizard.loader import load_company_form
from app.services.wizard.machine import CompanyWizard, SubmissionPhase, WizardMode

logger = get_logger(__name__)

router = APIRouter(
    prefix="/wizard",
    tags=["wizard"],
    dependencies=[Depends(require_company_editor)],
)


# -----------------------------------------------------------------------------
# Session Registry
# -----------------------------------------------------------------------------

class WizardSessionRegistry:
    """
    In-process store of open wizard sessions: session id → (owner, wizard).

    Sessions are closed on abandon and after a successful submit. Sessions
    left idle longer than `idle_seconds` are evicted on the next open/get,
    which releases their attached logo and document bytes; a create-mode
    user still gets the form back from the draft store.
    """

    def __init__(self, idle_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self._sessions: Dict[str, List[Any]] = {}
        self._lock = threading.Lock()
        self._idle_seconds = settings.SESSION_IDLE_MINUTES * 60 if idle_seconds is None else idle_seconds
        self._clock = clock

    def open(self, owner: str, wizard: CompanyWizard) -> str:
        session_id = str(uuid.uuid4())
        with self._lock:
            self._evict_idle()
            self._sessions[session_id] = [owner, wizard, self._clock()]
        return session_id

    def get(self, session_id: str, owner: str) -> CompanyWizard:
        with self._lock:
            self._evict_idle()
            entry = self._sessions.get(session_id)
            if entry is None or entry[0] != owner:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Wizard session {session_id} not found")
            entry[2] = self._clock()
            return entry[1]

    def close(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def _evict_idle(self) -> None:
        cutoff = self._clock() - self._idle_seconds
        expired = [sid for sid, (_, _, seen) in self._sessions.items() if seen < cutoff]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info(f"Evicted {len(expired)} idle wizard session(s)")

    def __len__(self) -> int:
        return len(self._sessions)


_registry = WizardSessionRegistry()


def get_registry() -> WizardSessionRegistry:
    return _registry


@lru_cache(maxsize=1)
def get_draft_store() -> DraftStore:
    return build_draft_store()


@lru_cache(maxsize=1)
def get_asset_storage() -> AssetStorage:
    return SupabaseAssetStorage()


def get_translator(
    datastore: Datastore = Depends(get_datastore),
    assets: AssetStorage = Depends(get_asset_storage),
) -> SubmissionTranslator:
    return SubmissionTranslator(datastore, assets)


# -----------------------------------------------------------------------------
# Request Schemas
# -----------------------------------------------------------------------------

class CreateSessionRequest(BaseModel):
    """
    - `mode`: "create" or "edit".
    - `company_id`: company to edit (edit mode only).
    """
    mode: WizardMode = WizardMode.CREATE
    company_id: Optional[str] = None


class FieldChange(BaseModel):
    name: str
    value: Any = None


class EntryFieldChange(BaseModel):
    field: str
    value: Any = None


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

@contextmanager
def _wizard_errors():
    """Map wizard misuse onto HTTP status codes."""
    try:
        yield
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except WizardError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e


def _view(session_id: str, wizard: CompanyWizard) -> Dict[str, Any]:
    return {"session_id": session_id, **wizard.snapshot()}


async def _read_upload(upload: UploadFile) -> UploadedFile:
    return UploadedFile(
        filename=upload.filename or "upload",
        content=await upload.read(),
        content_type=upload.content_type,
    )


# -----------------------------------------------------------------------------
# Sessions
# -----------------------------------------------------------------------------

@router.get("/access")
def get_access(user: SessionUser = Depends(require_company_editor)):
    """GET /wizard/access: the signed-in editor's sections, actions and steps."""
    return access_summary(user.role)


@router.post("/sessions", status_code=status.HTTP_201_CREATED)
def open_session(
    payload: CreateSessionRequest,
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
    drafts: DraftStore = Depends(get_draft_store),
    datastore: Datastore = Depends(get_datastore),
    translator: SubmissionTranslator = Depends(get_translator),
):
    """
    POST /wizard/sessions

    Create mode starts from the user's draft (or seeded defaults); edit mode
    loads the company from the datastore.
    """
    state = None
    if payload.mode is WizardMode.EDIT:
        if not payload.company_id:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail="company_id is required in edit mode")
        try:
            state = load_company_form(datastore, payload.company_id)
        except CompanyNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
        except DatastoreError as e:
            logger.error(f"Error loading company {payload.company_id}: {e}")
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=f"Failed to load company: {e}") from e

    with _wizard_errors():
        wizard = CompanyWizard(
            translator,
            drafts,
            owner=user.id,
            mode=payload.mode,
            company_id=payload.company_id,
            state=state,
        )
    session_id = registry.open(user.id, wizard)
    logger.info(f"Opened {payload.mode.value} wizard session {session_id} for user {user.id}")
    return _view(session_id, wizard)


@router.get("/sessions/{session_id}")
def get_session(
    session_id: str,
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
):
    return _view(session_id, registry.get(session_id, user.id))


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def abandon_session(
    session_id: str,
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
):
    """Leave the wizard; an unsubmitted create-mode draft is discarded."""
    wizard = registry.get(session_id, user.id)
    wizard.abandon()
    registry.close(session_id)


# -----------------------------------------------------------------------------
# Scalar fields & files
# -----------------------------------------------------------------------------

@router.patch("/sessions/{session_id}/fields")
def change_field(
    session_id: str,
    payload: FieldChange,
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
):
    wizard = registry.get(session_id, user.id)
    with _wizard_errors():
        wizard.change(payload.name, payload.value)
    return _view(session_id, wizard)


@router.post("/sessions/{session_id}/files/logo")
async def upload_logo(
    session_id: str,
    file: UploadFile = File(...),
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
):
    """Attach the company logo; it is uploaded to storage on submit."""
    wizard = registry.get(session_id, user.id)
    logo = await _read_upload(file)
    with _wizard_errors():
        wizard.change("logo", logo)
    return _view(session_id, wizard)


# -----------------------------------------------------------------------------
# List sections
# -----------------------------------------------------------------------------

@router.post("/sessions/{session_id}/sections/{section}/entries", status_code=status.HTTP_201_CREATED)
def add_entry(
    session_id: str,
    section: str,
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
):
    wizard = registry.get(session_id, user.id)
    with _wizard_errors():
        wizard.add_entry(section)
    return _view(session_id, wizard)


@router.patch("/sessions/{session_id}/sections/{section}/entries/{index}")
def change_entry(
    session_id: str,
    section: str,
    index: int,
    payload: EntryFieldChange,
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
):
    wizard = registry.get(session_id, user.id)
    with _wizard_errors():
        wizard.change_entry(section, index, payload.field, payload.value)
    return _view(session_id, wizard)


@router.delete("/sessions/{session_id}/sections/{section}/entries/{index}")
def remove_entry(
    session_id: str,
    section: str,
    index: int,
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
):
    wizard = registry.get(session_id, user.id)
    with _wizard_errors():
        wizard.remove_entry(section, index)
    return _view(session_id, wizard)


@router.post("/sessions/{session_id}/sections/regulatory_filings/entries/{index}/document")
async def attach_filing_document(
    session_id: str,
    index: int,
    file: UploadFile = File(...),
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
):
    """Attach a document to one filing; it is uploaded to storage on submit."""
    wizard = registry.get(session_id, user.id)
    document = await _read_upload(file)
    with _wizard_errors():
        wizard.change_entry("regulatory_filings", index, "document_file", document)
    return _view(session_id, wizard)


# -----------------------------------------------------------------------------
# Investors of a funding round
# -----------------------------------------------------------------------------

@router.post("/sessions/{session_id}/funding_rounds/{round_index}/investors", status_code=status.HTTP_201_CREATED)
def add_investor(
    session_id: str,
    round_index: int,
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
):
    wizard = registry.get(session_id, user.id)
    with _wizard_errors():
        wizard.add_investor(round_index)
    return _view(session_id, wizard)


@router.patch("/sessions/{session_id}/funding_rounds/{round_index}/investors/{index}")
def change_investor(
    session_id: str,
    round_index: int,
    index: int,
    payload: EntryFieldChange,
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
):
    wizard = registry.get(session_id, user.id)
    with _wizard_errors():
        wizard.change_investor(round_index, index, payload.field, payload.value)
    return _view(session_id, wizard)


@router.delete("/sessions/{session_id}/funding_rounds/{round_index}/investors/{index}")
def remove_investor(
    session_id: str,
    round_index: int,
    index: int,
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
):
    wizard = registry.get(session_id, user.id)
    with _wizard_errors():
        wizard.remove_investor(round_index, index)
    return _view(session_id, wizard)


# -----------------------------------------------------------------------------
# Navigation & submission
# -----------------------------------------------------------------------------

@router.post("/sessions/{session_id}/next")
def next_step(
    session_id: str,
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
):
    wizard = registry.get(session_id, user.id)
    with _wizard_errors():
        advanced = wizard.next()
    if not advanced:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"step": wizard.step, "errors": wizard.errors},
        )
    return _view(session_id, wizard)


@router.post("/sessions/{session_id}/previous")
def previous_step(
    session_id: str,
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
):
    wizard = registry.get(session_id, user.id)
    with _wizard_errors():
        wizard.previous()
    return _view(session_id, wizard)


@router.post("/sessions/{session_id}/submit")
def submit(
    session_id: str,
    user: SessionUser = Depends(require_company_editor),
    registry: WizardSessionRegistry = Depends(get_registry),
):
    """
    POST /wizard/sessions/{id}/submit

    Only available on the last step. The response carries the outcome:
    phase "succeeded" with company_id, or phase "failed" with submit_error
    (the form is kept so the user can retry).

    A succeeded session is closed; the response is its last view.
    """
    wizard = registry.get(session_id, user.id)
    with _wizard_errors():
        submitted = wizard.submit()
    if not submitted and wizard.errors:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"step": wizard.step, "errors": wizard.errors},
        )
    view = _view(session_id, wizard)
    if wizard.phase is SubmissionPhase.SUCCEEDED:
        registry.close(session_id)
        logger.info(f"Closed wizard session {session_id} after submitting company {wizard.company_id}")
    return view
