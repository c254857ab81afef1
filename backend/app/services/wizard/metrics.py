"""
metrics.py — Derived Financial Ratios

Purpose:
- Compute the five ratios shown beside a financial entry:
    * Debt / Equity           = total_liabilities / shareholders_equity
    * Current ratio           = current_assets / current_liabilities
    * Return on equity (%)    = net_profit / shareholders_equity * 100
    * Return on assets (%)    = net_profit / total_assets * 100
    * Profit margin (%)       = net_profit / total_revenue * 100
- Each ratio is rounded half-up to 2 decimals and omitted when either input
  is blank, non-numeric or zero.

Inputs:
- A FinancialEntry, the flat FormState, or any mapping of field → text.

Outputs:
- Dict of ratio name → float (compute_ratios), or a copy of the record with
  the ratios merged in as form text (apply_ratios).

This module does NOT:
- Write to the datastore.
- Clear ratios whose inputs were removed (the previous value stays).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel

from app.services.submission.coercion import parse_number

RATIO_INPUT_FIELDS: Tuple[str, ...] = (
    "total_liabilities",
    "shareholders_equity",
    "current_assets",
    "current_liabilities",
    "net_profit",
    "total_assets",
    "total_revenue",
)

# ratio field → (numerator, denominator, scale)
RATIO_DEFINITIONS: Dict[str, Tuple[str, str, int]] = {
    "debt_to_equity_ratio": ("total_liabilities", "shareholders_equity", 1),
    "current_ratio": ("current_assets", "current_liabilities", 1),
    "return_on_equity": ("net_profit", "shareholders_equity", 100),
    "return_on_assets": ("net_profit", "total_assets", 100),
    "profit_margin": ("net_profit", "total_revenue", 100),
}

_TWO_PLACES = Decimal("0.01")

Record = Union[BaseModel, Mapping[str, Any]]


def _field(record: Record, name: str) -> Any:
    if isinstance(record, BaseModel):
        return getattr(record, name, None)
    return record.get(name)


def _operand(record: Record, name: str) -> Optional[Decimal]:
    number = parse_number(_field(record, name))
    if not number:
        return None
    return Decimal(repr(number))


def compute_ratios(record: Record) -> Dict[str, float]:
    """
    Ratios derivable from the record's current inputs.

    Example:
        liabilities 100, equity 150 → {"debt_to_equity_ratio": 0.67, ...}
    """
    ratios: Dict[str, float] = {}
    for ratio, (numerator, denominator, scale) in RATIO_DEFINITIONS.items():
        top = _operand(record, numerator)
        bottom = _operand(record, denominator)
        if top is None or bottom is None:
            continue
        value = (top / bottom * scale).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
        ratios[ratio] = float(value)
    return ratios


def format_ratio(value: float) -> str:
    return f"{value:.2f}"


def apply_ratios(record: Record) -> Record:
    """
    Copy of record with every computable ratio written as text ("0.67").
    Ratios that cannot be computed keep their previous value.
    """
    formatted = {name: format_ratio(value) for name, value in compute_ratios(record).items()}
    if isinstance(record, BaseModel):
        return record.model_copy(update=formatted)
    return {**record, **formatted}
