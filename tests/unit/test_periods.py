"""Tests for billing period labels and arithmetic."""

from datetime import date, datetime, timedelta, timezone

import pytest

from app.utils.periods import Period


def test_label_uses_english_month_names():
    assert Period(2025, 3).label == "March 2025"
    assert str(Period(2024, 12)) == "December 2024"


@pytest.mark.parametrize("label", ["March 2025", "march 2025", "MARCH 2025", "  March   2025 "])
def test_parse_accepts_legacy_labels(label):
    assert Period.parse(label) == Period(2025, 3)


@pytest.mark.parametrize("label", ["", "March", "Marzo 2025", "March 25", "2025 March", "March 2025 x", "March 0000"])
def test_parse_rejects_malformed_labels(label):
    with pytest.raises(ValueError):
        Period.parse(label)


def test_shifted_crosses_year_boundary():
    assert Period(2025, 11).shifted(1) == Period(2025, 12)
    assert Period(2025, 11).shifted(2) == Period(2026, 1)
    assert Period(2025, 1).shifted(-1) == Period(2024, 12)


def test_current_uses_given_day():
    assert Period.current(date(2025, 6, 30)) == Period(2025, 6)
    assert Period.current(datetime(2025, 6, 1, 23, 59, tzinfo=timezone.utc)).label == "June 2025"


def test_current_reads_aware_times_in_utc():
    # 20:00 on May 31 at UTC-5 is already June 1 in UTC
    evening = datetime(2025, 5, 31, 20, 0, tzinfo=timezone(timedelta(hours=-5)))
    assert Period.current(evening) == Period(2025, 6)


def test_of_validates_month_number():
    with pytest.raises(ValueError):
        Period.of(2025, 13)
    assert Period.of(2025, 1) == Period(2025, 1)


def test_periods_sort_chronologically():
    periods = [Period(2025, 2), Period(2024, 11), Period(2025, 1)]
    assert [p.label for p in sorted(periods)] == ["November 2024", "January 2025", "February 2025"]
