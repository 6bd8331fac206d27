"""Shared functions for parsing date-time strings."""

import re
import zoneinfo
from datetime import datetime
from typing import Optional


# Strict XMP encodings, tried in order. Each must match the whole string.
XMP_DATE_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
)

# Year-first encodings accepted by the lenient fallback
FALLBACK_DATE_FORMATS = (
    "%Y:%m:%d %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
)

_STRICT_OFFSET = re.compile(r'[+-]\d{2}:\d{2}$')


class DateParseError(ValueError):
    """Raised when a string matches none of the supported date encodings."""


def parse_date(text: str) -> datetime:
    """Parse an XMP-style date-time string.

    Handles ISO 8601 with optional fractional seconds and an optional
    ``±hh:mm`` offset (2024-05-15T14:30:00.250+02:00), plain dates
    (2024-05-15), and a lenient year-first fallback. Day/month order is never
    guessed: every pattern is year-month-day.

    Raises:
        DateParseError: if no encoding matches the whole string.
    """
    if not isinstance(text, str) or not text.strip():
        raise DateParseError(f"Empty or non-string date value: {text!r}")

    value = text.strip()
    for fmt in XMP_DATE_FORMATS:
        # %z also accepts 'Z' and '+0200'; the strict encodings require '±hh:mm'
        if fmt.endswith("%z") and not _STRICT_OFFSET.search(value):
            continue
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    parsed = _parse_lenient(value)
    if parsed is None:
        raise DateParseError(f"Unrecognized date format: {text!r}")
    return parsed


def _parse_lenient(value: str) -> Optional[datetime]:
    """Last-resort parse of common year-first encodings."""
    iso_value = value[:-1] + "+00:00" if value.endswith("Z") else value
    if re.match(r'\d{4}-', iso_value):
        try:
            return datetime.fromisoformat(iso_value)
        except ValueError:
            pass

    for fmt in FALLBACK_DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue

    return None


def parse_exif_timestamp(value: str) -> Optional[datetime]:
    """Convert a raw EXIF/QuickTime ``YYYY:MM:DD hh:mm:ss`` value to a datetime.

    Uninitialized values such as ``0000:00:00 00:00:00`` yield None. A
    fractional-second or offset suffix after the first 19 characters is ignored.
    """
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip()[:19], "%Y:%m:%d %H:%M:%S")
    except ValueError:
        return None


def to_timezone(date: datetime, tz_name: Optional[str]) -> datetime:
    """Convert an offset-aware datetime to the named zone as a naive datetime.

    Naive datetimes and an empty zone name pass through unchanged.
    """
    if not tz_name or date.tzinfo is None:
        return date
    return date.astimezone(zoneinfo.ZoneInfo(tz_name)).replace(tzinfo=None)
