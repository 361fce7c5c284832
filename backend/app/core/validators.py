"""Field-level validation helpers shared by the user and mood flows.

Every check here is a pure function: it inspects raw JSON values and never
raises, so callers decide which message to surface.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any

MAX_STRING_LENGTH = 500
MIN_PASSWORD_LENGTH = 6
LEVEL_MIN = 1
LEVEL_MAX = 10
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100
# Largest value a signed 64-bit INTEGER column can hold.
MAX_ID = 2**63 - 1
MAX_PAGE = MAX_ID // MAX_LIMIT

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    offset: int


def validate_required_fields(data: Mapping[str, Any], fields: Iterable[str]) -> list[str]:
    """Return the fields that are absent, ``None`` or an empty string."""

    missing: list[str] = []
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and value == ""):
            missing.append(field)
    return missing


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(_EMAIL_RE.fullmatch(value))


def is_valid_password(value: Any) -> bool:
    return isinstance(value, str) and len(value) >= MIN_PASSWORD_LENGTH


def to_number(value: Any) -> float | None:
    """Coerce ints, floats and numeric strings; anything else is ``None``."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number):
        return None
    return number


def is_in_range(value: Any, minimum: float, maximum: float) -> bool:
    number = to_number(value)
    return number is not None and minimum <= number <= maximum


def is_valid_level(value: Any) -> bool:
    return is_in_range(value, LEVEL_MIN, LEVEL_MAX)


def is_valid_rating(value: Any) -> bool:
    return is_in_range(value, LEVEL_MIN, LEVEL_MAX)


def is_date_only(value: Any) -> bool:
    return isinstance(value, str) and bool(_DATE_ONLY_RE.match(value.strip()))


def parse_iso_datetime(value: Any) -> datetime | None:
    """Parse an ISO-8601 date or datetime into a naive UTC ``datetime``."""

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed


def is_valid_date(value: Any) -> bool:
    return parse_iso_datetime(value) is not None


def is_not_future_date(value: Any, now: datetime | None = None) -> bool:
    parsed = parse_iso_datetime(value)
    if parsed is None:
        return False
    current = now or datetime.now(UTC).replace(tzinfo=None)
    return parsed <= current


def is_valid_date_range(start: Any, end: Any) -> bool:
    start_dt = parse_iso_datetime(start)
    end_dt = parse_iso_datetime(end)
    if start_dt is None or end_dt is None:
        return False
    return start_dt <= end_dt


def sanitize_string(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()[:MAX_STRING_LENGTH]


def parse_int_or_default(value: Any, default: int | None = None) -> int | None:
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    match = _LEADING_INT_RE.match(str(value))
    if match is None:
        return default
    try:
        return int(match.group(1))
    except ValueError:
        # digit strings past the interpreter's int conversion limit
        return default


def validate_pagination(page: Any = None, limit: Any = None) -> Pagination:
    parsed_page = parse_int_or_default(page, DEFAULT_PAGE)
    parsed_limit = parse_int_or_default(limit, DEFAULT_LIMIT)
    valid_page = min(
        MAX_PAGE, max(1, parsed_page if parsed_page is not None else DEFAULT_PAGE)
    )
    valid_limit = min(MAX_LIMIT, max(1, parsed_limit if parsed_limit is not None else DEFAULT_LIMIT))
    return Pagination(
        page=valid_page,
        limit=valid_limit,
        offset=(valid_page - 1) * valid_limit,
    )


__all__ = [
    "DEFAULT_LIMIT",
    "MAX_ID",
    "MAX_LIMIT",
    "MAX_PAGE",
    "MAX_STRING_LENGTH",
    "Pagination",
    "is_date_only",
    "is_in_range",
    "is_not_future_date",
    "is_valid_date",
    "is_valid_date_range",
    "is_valid_email",
    "is_valid_level",
    "is_valid_password",
    "is_valid_rating",
    "parse_int_or_default",
    "parse_iso_datetime",
    "sanitize_string",
    "to_number",
    "validate_pagination",
    "validate_required_fields",
]
