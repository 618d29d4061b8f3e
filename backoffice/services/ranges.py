"""
Calendar date range → half-open timestamp interval.

``to`` is inclusive for the caller, so the SQL bound is midnight of the
following day: ``last_updated >= start AND last_updated < end``.  Dates
are plain calendar dates; no timezone conversion happens after parsing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from backoffice.core.exceptions import BadRequest

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

INVALID_RANGE_MESSAGE = "Invalid from/to (expected YYYY-MM-DD)"


@dataclass(frozen=True)
class DateRange:
    start: datetime  # inclusive
    end: datetime  # exclusive


def parse_iso_date(value: str | None) -> date:
    if not isinstance(value, str) or not _ISO_DATE_RE.match(value):
        raise BadRequest(INVALID_RANGE_MESSAGE)
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise BadRequest(INVALID_RANGE_MESSAGE) from exc


def resolve_range(from_iso: str | None, to_iso: str | None) -> DateRange:
    """Validate both bounds and return ``[from 00:00, to+1d 00:00)``.

    A reversed range is not an error; it just matches nothing.
    """
    first = parse_iso_date(from_iso)
    last = parse_iso_date(to_iso)
    try:
        day_after = last + timedelta(days=1)
    except OverflowError as exc:
        raise BadRequest(INVALID_RANGE_MESSAGE) from exc
    return DateRange(
        start=datetime.combine(first, time.min),
        end=datetime.combine(day_after, time.min),
    )
