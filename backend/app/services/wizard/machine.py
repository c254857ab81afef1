"""
machine.py — Company Wizard State Machine

Purpose:
- Own one editing session of the seven-step company wizard:
    * the form state and the current step
    * field errors of the last validation
    * the submission phase and its error message
- Gate step advancement on validation, keep derived ratios in sync with
  their inputs, snapshot drafts, and hand the form to the submission
  translator on the last step.

Core Workflow:
1. Session opens in create mode (draft state or seeded defaults) or edit mode
   (state loaded from the datastore, step pointer from the draft)
2. change / add_entry / remove_entry / change_entry edit the form
3. next() validates the current step before advancing; previous() never does
4. submit() on step 7 → validating → submitting → succeeded | failed

This module does NOT:
- Talk to the datastore directly (the translator and loader do).
- Decide who may use the wizard (see app.core.security).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from pydantic import ValidationError

from app.core.exceptions import (
    EntryIndexError,
    InvalidTransitionError,
    UnknownFieldError,
    UnknownSectionError,
    WizardError,
)
from app.core.logging import get_logger
from app.core.permissions import AccessLevel
from app.services.submission.coercion import has_text
from app.services.wizard import entry_lists
from app.services.wizard.drafts import DraftScope, DraftStore
from app.services.wizard.form_state import (
    FILE_FIELDS,
    SCALAR_FIELDS,
    SECTIONS,
    FormState,
    FundingRound,
    Investor,
    UploadedFile,
    default_entry,
)
from app.services.wizard.metrics import RATIO_DEFINITIONS, RATIO_INPUT_FIELDS, apply_ratios

logger = get_logger(__name__)


class WizardMode(str, Enum):
    CREATE = "create"
    EDIT = "edit"


class SubmissionPhase(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class WizardStep:
    number: int
    name: str
    section: str


STEPS: List[WizardStep] = [
    WizardStep(1, "Basic Info", AccessLevel.BASIC_INFO.value),
    WizardStep(2, "Address & Contact", AccessLevel.ADDRESS_CONTACT.value),
    WizardStep(3, "Key Officials", AccessLevel.KEY_OFFICIALS.value),
    WizardStep(4, "Financial Info", AccessLevel.FINANCIAL_INFO.value),
    WizardStep(5, "Funding & Investments", AccessLevel.FUNDING_INVESTMENTS.value),
    WizardStep(6, "Regulatory & Legal", AccessLevel.REGULATORY_LEGAL.value),
    WizardStep(7, "News & Relationships", AccessLevel.NEWS_RELATIONSHIPS.value),
]
FIRST_STEP = STEPS[0].number
LAST_STEP = STEPS[-1].number

DERIVED_FIELDS = frozenset(RATIO_DEFINITIONS)


class Submitter(Protocol):
    def submit(self, state: FormState, mode: str, company_id: Optional[str] = None) -> Any:
        ...


class CompanyWizard:
    """
    One wizard session.

    Args:
        translator: writes the form on submit (SubmissionTranslator).
        drafts: draft store the session snapshots into.
        owner: identifier of the signed-in user; scopes the drafts.
        mode: create or edit.
        company_id: company being edited (edit mode).
        state: form loaded from the datastore (edit mode). Ignored in
            create mode, which starts from the draft or the seeded defaults.
    """

    def __init__(
        self,
        translator: Submitter,
        drafts: DraftStore,
        owner: str,
        mode: WizardMode = WizardMode.CREATE,
        company_id: Optional[str] = None,
        state: Optional[FormState] = None,
    ):
        self.mode = WizardMode(mode)
        if self.mode is WizardMode.EDIT and not company_id:
            raise WizardError("Edit mode requires the id of the company being edited")

        self.translator = translator
        self.drafts = drafts
        self.owner = owner
        self.scope = DraftScope(self.mode.value, owner)
        self.company_id = company_id

        self.step = FIRST_STEP
        self.errors: Dict[str, str] = {}
        self.phase = SubmissionPhase.IDLE
        self.submit_error: Optional[str] = None
        self.result = None

        draft = drafts.load(self.scope)
        if self.mode is WizardMode.CREATE:
            # New uploads always start at step 1; only the form is restored.
            self.state = draft.state if draft and draft.state is not None else FormState.blank()
        else:
            self.state = state if state is not None else FormState()
            if draft is not None:
                self.step = min(max(draft.step, FIRST_STEP), LAST_STEP)

    # ------------------------------------------------------------------ #
    # Draft snapshots
    def _snapshot_state(self) -> None:
        if self.mode is WizardMode.CREATE:
            self.drafts.save(self.scope, self.step, self.state)

    def _snapshot_step(self) -> None:
        if self.mode is WizardMode.CREATE:
            self.drafts.save(self.scope, self.step, self.state)
        else:
            self.drafts.save(self.scope, self.step)

    # ------------------------------------------------------------------ #
    # Guards
    def _ensure_editable(self) -> None:
        if self.phase is SubmissionPhase.SUBMITTING:
            raise InvalidTransitionError("Submission in progress")
        if self.phase is SubmissionPhase.SUCCEEDED:
            raise InvalidTransitionError("Session already submitted")

    def _entries(self, section: str) -> list:
        if section not in SECTIONS:
            raise UnknownSectionError(f"Unknown section: {section}")
        return getattr(self.state, section)

    def _set_entries(self, section: str, entries: list) -> None:
        setattr(self.state, section, entries)
        self._snapshot_state()

    def _funding_round(self, round_index: int) -> FundingRound:
        rounds = self._entries("funding_rounds")
        if round_index < 0 or round_index >= len(rounds):
            raise EntryIndexError(f"No funding round at position {round_index}")
        return rounds[round_index]

    def _replace_round(self, round_index: int, funding_round: FundingRound) -> None:
        rounds = list(self.state.funding_rounds)
        rounds[round_index] = funding_round
        self._set_entries("funding_rounds", rounds)

    # ------------------------------------------------------------------ #
    # Scalar fields
    def change(self, name: str, value: Any) -> None:
        """
        Set one scalar form field.

    File fields take an UploadedFile (or None to detach); plain JSON values
    are rejected so file bytes only arrive through an upload.
        Setting a ratio input recomputes the flat form's ratios in the same
        update; list sections go through the entry operations instead.
        """
        self._ensure_editable()
        if name in SECTIONS or name not in SCALAR_FIELDS:
            raise UnknownFieldError(f"Unknown form field: {name}")
        if name in DERIVED_FIELDS:
            raise UnknownFieldError(f"{name} is derived from other fields")
        if name in FILE_FIELDS and value is not None and not isinstance(value, UploadedFile):
            raise WizardError(f"{name} must be attached as an uploaded file")
        try:
            setattr(self.state, name, value)
        except ValidationError as e:
            raise WizardError(f"Invalid value for {name}: {e.errors()[0]['msg']}") from e

        if name in RATIO_INPUT_FIELDS:
            self.state = apply_ratios(self.state)
        self.errors.pop(name, None)
        self._snapshot_state()

    # ------------------------------------------------------------------ #
    # List sections
    def add_entry(self, section: str) -> int:
        """Append the section's default record; returns its position."""
        self._ensure_editable()
        entries = entry_lists.append_entry(self._entries(section), default_entry(section))
        self._set_entries(section, entries)
        return len(entries) - 1

    def remove_entry(self, section: str, index: int) -> None:
        self._ensure_editable()
        self._set_entries(section, entry_lists.remove_entry(self._entries(section), index))

    def change_entry(self, section: str, index: int, field: str, value: Any) -> None:
        self._ensure_editable()
        entries = self._entries(section)
        record_type = SECTIONS[section]
        if field not in record_type.model_fields or field == "investors":
            raise UnknownFieldError(f"Unknown field {field!r} for {section}")
        if section == "financial_entries" and field in DERIVED_FIELDS:
            raise UnknownFieldError(f"{field} is derived from other fields")
        try:
            entries = entry_lists.patch_entry(entries, index, field, value)
        except ValidationError as e:
            raise WizardError(f"Invalid value for {section}[{index}].{field}: {e.errors()[0]['msg']}") from e

        if section == "financial_entries":
            entries[index] = apply_ratios(entries[index])
        self._set_entries(section, entries)

    # ------------------------------------------------------------------ #
    # Investors of a funding round
    def add_investor(self, round_index: int) -> int:
        self._ensure_editable()
        updated = entry_lists.add_investor(self._funding_round(round_index))
        self._replace_round(round_index, updated)
        return len(updated.investors) - 1

    def remove_investor(self, round_index: int, index: int) -> None:
        self._ensure_editable()
        updated = entry_lists.remove_investor(self._funding_round(round_index), index)
        self._replace_round(round_index, updated)

    def change_investor(self, round_index: int, index: int, field: str, value: Any) -> None:
        self._ensure_editable()
        funding_round = self._funding_round(round_index)
        if field not in Investor.model_fields:
            raise UnknownFieldError(f"Unknown investor field: {field}")
        try:
            updated = entry_lists.patch_investor(funding_round, index, field, value)
        except ValidationError as e:
            raise WizardError(f"Invalid value for investor {field}: {e.errors()[0]['msg']}") from e
        self._replace_round(round_index, updated)

    # ------------------------------------------------------------------ #
    # Steps
    def validate_step(self, step: Optional[int] = None) -> bool:
        """Validate one step (default: the current one); replaces self.errors."""
        step = step or self.step
        errors: Dict[str, str] = {}
        if step == 1:
            if not has_text(self.state.name):
                errors["name"] = "Company name is required"
            if not has_text(self.state.sector):
                errors["sector"] = "Sector is required"
        self.errors = errors
        return not errors

    def next(self) -> bool:
        """Advance one step when the current step validates; False when blocked."""
        self._ensure_editable()
        if self.step >= LAST_STEP:
            raise InvalidTransitionError("Already on the last step; submit instead")
        if not self.validate_step():
            return False
        self.step += 1
        self._snapshot_step()
        return True

    def previous(self) -> None:
        self._ensure_editable()
        self.step = max(FIRST_STEP, self.step - 1)
        self._snapshot_step()

    # ------------------------------------------------------------------ #
    # Submission
    def submit(self) -> bool:
        """
        Submit the form. Returns True on success.

        Any failure leaves the form and step untouched, sets phase to failed
        and keeps the message in submit_error so the user can retry.
        """
        self._ensure_editable()
        if self.step != LAST_STEP:
            raise InvalidTransitionError(f"Submit is only available on step {LAST_STEP}")

        self.phase = SubmissionPhase.VALIDATING
        self.submit_error = None
        if not self.validate_step():
            self.phase = SubmissionPhase.IDLE
            return False

        self.phase = SubmissionPhase.SUBMITTING
        try:
            result = self.translator.submit(self.state, self.mode.value, company_id=self.company_id)
        except Exception as e:
            logger.error(f"Company {self.mode.value} submission failed: {e}", exc_info=True)
            self.phase = SubmissionPhase.FAILED
            self.submit_error = str(e) or e.__class__.__name__
            return False

        self.result = result
        self.company_id = result.company_id
        self.phase = SubmissionPhase.SUCCEEDED
        for mode in WizardMode:
            self.drafts.clear(DraftScope(mode.value, self.owner))
        logger.info(f"Company {result.company_id} {self.mode.value} submission succeeded")
        return True

    def abandon(self) -> None:
        """Leave the session; an unsubmitted create-mode draft is discarded."""
        if self.mode is WizardMode.CREATE and self.phase is not SubmissionPhase.SUCCEEDED:
            self.drafts.clear(self.scope)

    # ------------------------------------------------------------------ #
    # View
    def snapshot(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "step": self.step,
            "steps": [{"number": s.number, "name": s.name, "section": s.section} for s in STEPS],
            "phase": self.phase.value,
            "errors": dict(self.errors),
            "submit_error": self.submit_error,
            "company_id": self.company_id,
            "state": self.state.model_dump(mode="json"),
        }
