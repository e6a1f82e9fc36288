"""
Record Access: Optional-safe reads over raw record-store records.

Records arrive as decoded JSON from the hosted record store. Nothing about
them is guaranteed: collections may be None or not lists, elements may not be
mappings, fields may be missing or malformed. Every read in the derivation
core goes through these helpers so that bad data degrades to "absent"
instead of raising.
"""

import math
import re
from collections.abc import Iterable, Mapping
from datetime import UTC, date, datetime, time
from typing import Any

_STATUS_SEPARATORS = re.compile(r"[\s_-]")


def as_records(value: Any) -> list[Mapping[str, Any]]:
    """
    Coerce a source collection into a list of mappings.

    None, scalars, strings and mappings (a single record is not a collection)
    become an empty list. Non-mapping elements are dropped.
    """
    if value is None or isinstance(value, (str, bytes, Mapping)):
        return []
    if not isinstance(value, Iterable):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def as_mapping(value: Any) -> Mapping[str, Any] | None:
    """Return value if it is a mapping, else None."""
    return value if isinstance(value, Mapping) else None


def first(record: Mapping[str, Any] | None, *keys: str) -> Any:
    """First value among keys that is neither None nor an empty string."""
    if not isinstance(record, Mapping):
        return None
    for key in keys:
        value = record.get(key)
        if value is None or value == "":
            continue
        return value
    return None


def text(record: Mapping[str, Any] | None, *keys: str, default: str = "") -> str:
    """First non-empty value among keys, as a stripped string."""
    value = first(record, *keys)
    if value is None:
        return default
    value = str(value).strip()
    return value or default


def flag(record: Mapping[str, Any] | None, *keys: str) -> bool:
    """
    Truthiness of the first present key.

    String values "true"/"yes"/"1" count as set; everything else that is a
    string counts as unset.
    """
    value = first(record, *keys)
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


def number(record: Mapping[str, Any] | None, *keys: str) -> float | None:
    """First value among keys parsed as a finite float, else None."""
    value = first(record, *keys)
    if value is None or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def record_id(record: Mapping[str, Any] | None) -> str | None:
    value = first(record, "id", "_id")
    return str(value) if value is not None else None


def status_key(value: Any) -> str:
    """
    Normalize a status for comparison.

    "In Storage", "in_storage" and "in-storage" all become "instorage".
    """
    if value is None:
        return ""
    return _STATUS_SEPARATORS.sub("", str(value).lower())


def status_of(record: Mapping[str, Any] | None) -> str:
    return status_key(first(record, "status"))


# =============================================================================
# TIMESTAMPS
# =============================================================================


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a record-store timestamp into an aware UTC datetime.

    Accepts datetimes, dates, ISO-8601 strings (with or without "Z") and
    epoch seconds or milliseconds. Naive values are taken as UTC.
    Anything unparseable returns None.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, (int, float)):
        if math.isnan(value) or math.isinf(value):
            return None
        seconds = value / 1000.0 if abs(value) > 1e11 else float(value)
        try:
            return datetime.fromtimestamp(seconds, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(raw)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    try:
        return parsed.astimezone(UTC)
    except (OverflowError, ValueError):
        return None


def timestamp(record: Mapping[str, Any] | None, *keys: str) -> datetime | None:
    """First key whose value parses as a timestamp."""
    if not isinstance(record, Mapping):
        return None
    for key in keys:
        parsed = parse_timestamp(record.get(key))
        if parsed is not None:
            return parsed
    return None


def days_between(earlier: datetime, later: datetime) -> int:
    """Whole days from earlier to later (floored, may be negative)."""
    return math.floor((later - earlier).total_seconds() / 86400)


def hours_between(earlier: datetime, later: datetime) -> float:
    return (later - earlier).total_seconds() / 3600


# =============================================================================
# EMAIL DIRECTION
# =============================================================================

OUTBOUND_DIRECTIONS = frozenset(("outbound", "sent", "outgoing"))


def is_outbound(record: Mapping[str, Any] | None) -> bool:
    """Direction of an email: explicit is_outbound flag first, then direction."""
    if first(record, "is_outbound") is not None:
        return flag(record, "is_outbound")
    return text(record, "direction").lower() in OUTBOUND_DIRECTIONS
