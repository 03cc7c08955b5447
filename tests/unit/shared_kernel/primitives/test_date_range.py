from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from strategy_lab.shared_kernel.primitives import DateRange


def test_date_range_allows_missing_bounds_and_reports_completeness() -> None:
    assert DateRange().is_complete() is False
    assert DateRange(start=date(2024, 1, 1)).is_complete() is False
    assert DateRange(start=date(2024, 1, 1), end=date(2024, 6, 1)).is_complete() is True


def test_date_range_to_iso_pair() -> None:
    date_range = DateRange(start=date(2024, 1, 5), end=None)

    assert date_range.to_iso_pair() == ("2024-01-05", None)


def test_date_range_rejects_datetime_bounds() -> None:
    with pytest.raises(ValueError):
        DateRange(start=datetime(2024, 1, 1, tzinfo=timezone.utc))
    with pytest.raises(ValueError):
        DateRange(end="2024-01-01")  # type: ignore[arg-type]
