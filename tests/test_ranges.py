"""Tests for the calendar date range resolver."""

from datetime import datetime

import pytest

from backoffice.core.exceptions import BadRequest
from backoffice.services.ranges import resolve_range


def test_to_is_inclusive_via_exclusive_next_midnight():
    rng = resolve_range("2024-01-01", "2024-01-03")
    assert rng.start == datetime(2024, 1, 1, 0, 0, 0)
    assert rng.end == datetime(2024, 1, 4, 0, 0, 0)


def test_month_and_leap_year_boundaries():
    assert resolve_range("2024-02-28", "2024-02-28").end == datetime(2024, 2, 29)
    assert resolve_range("2023-02-28", "2023-02-28").end == datetime(2023, 3, 1)
    assert resolve_range("2024-12-31", "2024-12-31").end == datetime(2025, 1, 1)


def test_reversed_range_is_allowed():
    rng = resolve_range("2024-02-01", "2024-01-01")
    assert rng.start > rng.end


@pytest.mark.parametrize(
    "from_iso, to_iso",
    [
        ("2024-13-01", "2024-01-02"),
        ("01/01/2024", "2024-01-02"),
        ("2024-01-01", "2024-02-30"),
        ("2024-1-1", "2024-01-02"),
        ("2024-01-01T00:00", "2024-01-02"),
        ("20240101", "2024-01-02"),
        (None, "2024-01-02"),
        ("2024-01-01", None),
        ("", ""),
        ("2024-01-01", "9999-12-31"),
    ],
)
def test_malformed_dates_are_bad_requests(from_iso, to_iso):
    with pytest.raises(BadRequest) as exc_info:
        resolve_range(from_iso, to_iso)
    assert exc_info.value.status_code == 400
