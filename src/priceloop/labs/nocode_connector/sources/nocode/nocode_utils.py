"""
Value conversion helpers for the nocode connector.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from priceloop.labs.nocode_connector.errors import UserError
from priceloop.labs.nocode_connector.libs.fields import Field


def _parse_timestamp(raw: Any) -> datetime:
    if isinstance(raw, bool):
        raise ValueError("booleans are not timestamps")
    if isinstance(raw, (int, float)):
        # epoch milliseconds
        return datetime.fromtimestamp(raw / 1000, tz=timezone.utc)
    if isinstance(raw, str):
        value = raw.strip()
        if value.endswith(("Z", "z")):
            value = value[:-1] + "+00:00"
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    raise ValueError(f"unsupported value type {type(raw).__name__}")


def normalize_date(raw: Any) -> Optional[str]:
    """
    Render a timestamp as the host's ``YYYYMMDDHHMMSS`` string in UTC.

    Accepts ISO 8601 strings (values without an offset are read as UTC) and
    epoch milliseconds. None stays None.

    Raises:
        UserError: If the value cannot be read as a point in time.
    """
    if raw is None:
        return None
    try:
        parsed = _parse_timestamp(raw).astimezone(timezone.utc)
    except (ValueError, OverflowError, OSError) as e:
        raise UserError(f"Cannot convert {raw!r} to a date: {e}") from e
    return (
        f"{parsed.year:04d}{parsed.month:02d}{parsed.day:02d}"
        f"{parsed.hour:02d}{parsed.minute:02d}{parsed.second:02d}"
    )


def extract_values(row: dict, fields: Iterable[Field]) -> list:
    """Pick ``row`` values in ``fields`` order, converting dates for the host."""
    values = []
    for field in fields:
        value = row.get(field.id)
        values.append(normalize_date(value) if field.is_date else value)
    return values
