"""Date parsing and inception-date standardization.

Legacy imports stored inception dates in whatever format the source
spreadsheet used. Everything downstream (the compliance engine, the
database ``date`` columns) expects ``YYYY-MM-DD``. This module recognizes
the formats seen in those exports, converts them, and flags dates that
parse but make no sense for a policy (in the future, or implausibly old).

Nothing here raises on malformed input: parsers return ``None`` and
``standardize_date`` returns an unsuccessful result carrying the error.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone

STANDARD_FORMAT = "YYYY-MM-DD (already standard)"
ISO_TIMESTAMP_FORMAT = "ISO 8601 timestamp"
US_SLASH_FORMAT = "MM/DD/YYYY"
DAY_FIRST_DASH_FORMAT = "DD-MM-YYYY"
TEXT_FORMAT = "Text/Natural language"

MAX_INCEPTION_AGE_YEARS = 5
MISSING_DATE_ERROR = "Missing date"

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_ISO_TIMESTAMP_RE = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}")
_US_SLASH_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_DAY_FIRST_DASH_RE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")

_TEXT_PATTERNS = (
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%d %B, %Y",
)


@dataclass
class DateStandardization:
    """Outcome of converting one raw date string."""

    original: str | None
    success: bool
    standardized: str | None = None
    format: str | None = None
    error: str | None = None

    @property
    def already_standard(self) -> bool:
        return self.success and self.format == STANDARD_FORMAT


def parse_timestamp(value: object) -> datetime | None:
    """Parse a stored timestamp into an aware UTC datetime.

    Naive values are treated as UTC. Returns None for empty or
    unparseable input.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_date(value: object) -> date | None:
    """Parse a stored date (ISO date, ISO timestamp, date or datetime)."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if _ISO_DATE_RE.match(text):
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    parsed = parse_timestamp(text)
    return parsed.date() if parsed else None


def _build(year: str, month: str, day: str) -> date | None:
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def standardize_date(raw: str | None) -> DateStandardization:
    """Convert a raw date string to ``YYYY-MM-DD``.

    Parameters
    ----------
    raw : str | None
        Date as stored by a legacy import.

    Returns
    -------
    DateStandardization
        ``success`` is False (with ``error`` set) for missing or
        unrecognized input.
    """
    if raw is None or str(raw).strip() == "":
        return DateStandardization(original=raw, success=False, error=MISSING_DATE_ERROR)

    text = str(raw).strip()

    if _ISO_DATE_RE.match(text):
        parsed = parse_date(text)
        if parsed is not None:
            return DateStandardization(text, True, text, STANDARD_FORMAT)
        return DateStandardization(text, False, error="Invalid calendar date")

    if _ISO_TIMESTAMP_RE.match(text):
        parsed_ts = parse_timestamp(text)
        if parsed_ts is not None:
            return DateStandardization(text, True, parsed_ts.date().isoformat(), ISO_TIMESTAMP_FORMAT)
        return DateStandardization(text, False, error="Invalid ISO timestamp")

    match = _US_SLASH_RE.match(text)
    if match:
        month, day, year = match.groups()
        parsed = _build(year, month, day)
        if parsed is not None:
            return DateStandardization(text, True, parsed.isoformat(), US_SLASH_FORMAT)

    match = _DAY_FIRST_DASH_RE.match(text)
    if match:
        day, month, year = match.groups()
        parsed = _build(year, month, day)
        if parsed is not None:
            return DateStandardization(text, True, parsed.isoformat(), DAY_FIRST_DASH_FORMAT)

    collapsed = " ".join(text.split())
    for pattern in _TEXT_PATTERNS:
        try:
            parsed = datetime.strptime(collapsed, pattern).date()
        except ValueError:
            continue
        return DateStandardization(text, True, parsed.isoformat(), TEXT_FORMAT)

    return DateStandardization(text, False, error="Unrecognized format")


def validate_inception_date(
    value: str,
    policy_number: str,
    today: date | None = None,
) -> list[str]:
    """Return data-quality issues for a standardized inception date."""
    today = today or date.today()
    parsed = parse_date(value)
    if parsed is None:
        return [f"Unparseable inception date: {value} for policy {policy_number}"]

    issues = []
    if parsed > today:
        issues.append(f"Future date detected: {value} for policy {policy_number}")

    try:
        cutoff = today.replace(year=today.year - MAX_INCEPTION_AGE_YEARS)
    except ValueError:  # 29 February
        cutoff = today.replace(year=today.year - MAX_INCEPTION_AGE_YEARS, day=28)
    if parsed < cutoff:
        issues.append(
            f"Very old inception date: {value} for policy {policy_number} "
            f"(before {cutoff.isoformat()})"
        )
    return issues
