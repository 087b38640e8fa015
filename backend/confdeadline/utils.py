# backend/confdeadline/utils.py
from __future__ import annotations

import unicodedata
from datetime import date, datetime
from typing import Any


def to_date_obj(v: Any) -> date | None:
    """
    Accepts:
      - None / ""
      - datetime/date
      - 'YYYY-MM-DD' string (or a longer ISO timestamp)
    Returns:
      - date or None
    """
    if v is None or v == "":
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if isinstance(v, str):
        return date.fromisoformat(v[:10])
    raise ValueError("Invalid date value")


_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
           "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_date(d: date) -> str:
    # 'Jan 5, 2026' (en-US, 시스템 locale 무관)
    return f"{_MONTHS[d.month - 1]} {d.day}, {d.year}"


def collation_key(text: str) -> tuple[str, str]:
    """
    Locale-aware-ish sort key: accents stripped and case folded first,
    raw text as the tie-break so the order stays total.
    """
    decomposed = unicodedata.normalize("NFKD", text or "")
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), text or "")
