from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional, Union

from ..core.exceptions import ValidationError

def parse_iso_datetime(value: Optional[str], field_name: str = "date") -> Optional[datetime]:
    """Parse an ISO-8601 date or datetime; a trailing ``Z`` is accepted.

    Aware values are converted to naive local time so they compare with DB values.
    """
    if value is None or str(value).strip() == "":
        return None
    raw = str(value).strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}", field=field_name) from None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed

def as_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)

def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
