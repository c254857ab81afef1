"""
drafts.py — Wizard Draft Persistence

Purpose:
- Keep an in-progress wizard session recoverable across restarts:
    * create mode: the form state (restored on the next create session)
    * edit mode: the step pointer only (the state is reloaded from the
      datastore)
- One draft slot per (mode, owner) scope.

Backends:
- MemoryDraftStore: serialised JSON in a dict (tests, single process).
- FileDraftStore: one JSON file per scope under settings.DRAFT_DIR, written
  as {"step", "state", "saved_at"}.

Unreadable or invalid drafts are logged and treated as absent.
File contents (logo, filing documents) are never part of a draft.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from pydantic import ValidationError

from app.core.config import settings
from app.core.logging import get_logger
from app.services.wizard.form_state import FormState

logger = get_logger(__name__)


@dataclass(frozen=True)
class DraftScope:
    mode: str
    owner: str

    @property
    def key(self) -> str:
        return f"{self.mode}:{self.owner}"


@dataclass
class Draft:
    step: int
    state: Optional[FormState] = None


class DraftStore(Protocol):
    def save(self, scope: DraftScope, step: int, state: Optional[FormState] = None) -> None:
        ...

    def load(self, scope: DraftScope) -> Optional[Draft]:
        ...

    def clear(self, scope: DraftScope) -> None:
        ...


# ---------------------------------------------------------------------------
# (De)serialisation shared by both backends
# ---------------------------------------------------------------------------


def _dump(step: int, state: Optional[FormState]) -> Dict[str, Any]:
    return {
        "step": step,
        "state": state.model_dump(mode="json") if state is not None else None,
        "saved_at": datetime.now(timezone.utc).isoformat(),
    }


def _parse(payload: Any, source: str) -> Optional[Draft]:
    try:
        step = int(payload["step"])
        raw_state = payload.get("state")
        state = FormState.model_validate(raw_state) if raw_state is not None else None
    except (KeyError, TypeError, ValueError, AttributeError, ValidationError) as e:
        logger.warning(f"Ignoring invalid draft {source}: {e}")
        return None
    return Draft(step=step, state=state)


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


class MemoryDraftStore:
    """Drafts kept as JSON text in process memory."""

    def __init__(self):
        self._drafts: Dict[str, str] = {}

    def save(self, scope: DraftScope, step: int, state: Optional[FormState] = None) -> None:
        self._drafts[scope.key] = json.dumps(_dump(step, state))

    def load(self, scope: DraftScope) -> Optional[Draft]:
        text = self._drafts.get(scope.key)
        if text is None:
            return None
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable draft {scope.key}: {e}")
            return None
        return _parse(payload, scope.key)

    def clear(self, scope: DraftScope) -> None:
        self._drafts.pop(scope.key, None)


_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class FileDraftStore:
    """Drafts stored as JSON files, one per scope."""

    def __init__(self, directory: Optional[str] = None):
        self.directory = Path(directory or settings.DRAFT_DIR)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, scope: DraftScope) -> Path:
        safe = _UNSAFE_CHARS.sub("_", f"{scope.mode}-{scope.owner}")
        return self.directory / f"{safe}.json"

    def save(self, scope: DraftScope, step: int, state: Optional[FormState] = None) -> None:
        path = self._path(scope)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(_dump(step, state), f, indent=2, ensure_ascii=False)
        logger.debug(f"Saved draft {scope.key} (step {step}) to {path}")

    def load(self, scope: DraftScope) -> Optional[Draft]:
        path = self._path(scope)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable draft {path}: {e}")
            return None
        return _parse(payload, str(path))

    def clear(self, scope: DraftScope) -> None:
        self._path(scope).unlink(missing_ok=True)


def build_draft_store() -> DraftStore:
    """Return the draft store selected by settings.DRAFT_BACKEND."""
    if settings.DRAFT_BACKEND == "memory":
        return MemoryDraftStore()
    return FileDraftStore()
