from __future__ import annotations

import uuid
from datetime import date, datetime, timezone


def iso_today() -> str:
    return date.today().isoformat()


def iso_now() -> str:
    # Use UTC ISO timestamps for consistency.
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def money(v: float) -> float:
    return round(float(v), 2)


def new_id(prefix: str) -> str:
    """Short opaque id, e.g. INV-3F9A1C2B."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


def month_label(d: date) -> str:
    return d.strftime("%B %Y")


def normalize_month(label: str) -> str:
    return " ".join(str(label).split()).lower()
