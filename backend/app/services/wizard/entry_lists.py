"""
entry_lists.py — Ordered Entry List Editing

Append / remove-by-position / patch-one-field over any list section of the
form, plus the same three operations on a funding round's investor sub-list.

Every function returns new lists and records; inputs are never mutated.
"""

from __future__ import annotations

from typing import Any, List, Sequence, TypeVar

from app.core.exceptions import EntryIndexError
from app.services.wizard.form_state import FormRecord, FundingRound, Investor

R = TypeVar("R", bound=FormRecord)


def _check_index(entries: Sequence[Any], index: int, label: str = "entry") -> None:
    if index < 0 or index >= len(entries):
        raise EntryIndexError(f"No {label} at position {index} (list has {len(entries)})")


def _assign(record: R, field: str, value: Any) -> R:
    updated = record.model_copy(deep=True)
    setattr(updated, field, value)
    return updated


def append_entry(entries: Sequence[R], record: R) -> List[R]:
    return [*entries, record]


def remove_entry(entries: Sequence[R], index: int) -> List[R]:
    """Remove by position; later entries shift down by one."""
    _check_index(entries, index)
    return [entry for i, entry in enumerate(entries) if i != index]


def patch_entry(entries: Sequence[R], index: int, field: str, value: Any) -> List[R]:
    """Replace the entry at index with a copy that has one field assigned."""
    _check_index(entries, index)
    patched = list(entries)
    patched[index] = _assign(entries[index], field, value)
    return patched


# ---------------------------------------------------------------------------
# Investors nested in a funding round
# ---------------------------------------------------------------------------


def add_investor(funding_round: FundingRound, investor: Investor = None) -> FundingRound:
    investors = append_entry(funding_round.investors, investor or Investor())
    return funding_round.model_copy(update={"investors": investors})


def remove_investor(funding_round: FundingRound, index: int) -> FundingRound:
    _check_index(funding_round.investors, index, "investor")
    investors = [inv for i, inv in enumerate(funding_round.investors) if i != index]
    return funding_round.model_copy(update={"investors": investors})


def patch_investor(funding_round: FundingRound, index: int, field: str, value: Any) -> FundingRound:
    _check_index(funding_round.investors, index, "investor")
    investors = list(funding_round.investors)
    investors[index] = _assign(investors[index], field, value)
    return funding_round.model_copy(update={"investors": investors})
