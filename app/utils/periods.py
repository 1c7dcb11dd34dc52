# app/utils/periods.py
"""
Billing periods.

A payment counts toward a calendar month. The month is stored as two integers
(year, month) and only rendered as a "<MonthName> <Year>" label for display,
e.g. "March 2025". Labels are always produced from the fixed English table
below so they never depend on the process locale.
"""
from datetime import date, datetime
from typing import NamedTuple

from dateutil.relativedelta import relativedelta

from .clock import as_utc, utc_now

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

_MONTH_LOOKUP = {name.lower(): index for index, name in enumerate(MONTH_NAMES, start=1)}


class Period(NamedTuple):
    year: int
    month: int

    @property
    def label(self) -> str:
        return f"{MONTH_NAMES[self.month - 1]} {self.year}"

    def shifted(self, months: int) -> "Period":
        moved = date(self.year, self.month, 1) + relativedelta(months=months)
        return Period(moved.year, moved.month)

    @classmethod
    def of(cls, year: int, month: int) -> "Period":
        if not 1 <= month <= 12:
            raise ValueError(f"Invalid month number: {month}")
        if not 1 <= year <= 9999:
            raise ValueError(f"Invalid year: {year}")
        return cls(year, month)

    @classmethod
    def current(cls, today: date | datetime | None = None) -> "Period":
        today = today or utc_now()
        if isinstance(today, datetime):
            today = as_utc(today)
        return cls(today.year, today.month)

    @classmethod
    def parse(cls, label: str) -> "Period":
        """Parse a "<MonthName> <Year>" label ("March 2025", "march 2025")."""
        parts = (label or "").split()
        if len(parts) != 2:
            raise ValueError(f"Invalid period label: {label!r}")
        name, year = parts
        month = _MONTH_LOOKUP.get(name.lower())
        if month is None or not (year.isdigit() and len(year) == 4):
            raise ValueError(f"Invalid period label: {label!r}")
        return cls.of(int(year), month)

    def __str__(self) -> str:
        return self.label
