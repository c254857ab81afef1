"""
coercion.py — Form Text → Datastore Value Coercion

Purpose:
- Turn the text a browser form holds into the typed values the datastore
  columns expect:
    * blank text → None
    * numeric text → float / int (non-numeric → None)
    * timestamps → ISO text or None
- Stamp rows with created_at / updated_at.
- Generate client-side UUID identifiers.
"""

from __future__ import annotations

import math
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union


def has_text(value: Any) -> bool:
    """True when value is present and not only whitespace."""
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip() != ""
    return True


def text_or_none(value: Any) -> Optional[Any]:
    return value if has_text(value) else None


def parse_number(value: Any) -> Optional[float]:
    """
    Parse currency / numeric form text.

    Blank, non-numeric, NaN and infinite values become None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def parse_int(value: Any) -> Optional[int]:
    """Integer form text; fractional input is truncated ("12.7" → 12)."""
    number = parse_number(value)
    if number is None:
        return None
    return int(number)


def sanitize_timestamp(value: Any) -> Optional[str]:
    """Blank date / timestamp text → None."""
    if not has_text(value):
        return None
    return str(value).strip()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def add_timestamps(
    data: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]],
    timestamp: Optional[str] = None,
) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
    """
    Copy row(s) with created_at and updated_at set to one shared timestamp.
    """
    stamp = timestamp or utc_now_iso()
    if isinstance(data, Mapping):
        return {**data, "created_at": stamp, "updated_at": stamp}
    return [{**row, "created_at": stamp, "updated_at": stamp} for row in data]


def new_id() -> str:
    """Random UUID v4, assigned before the row is written."""
    return str(uuid.uuid4())
