from __future__ import annotations

import calendar
import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

_MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

_PERIOD_RX = re.compile(r"^\s*(\d{4})-(\d{1,2})\s*$")


@dataclass(frozen=True, order=True)
class MonthPeriod:
    """A calendar month; the unit monthly profit snapshots are keyed by."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= int(self.month) <= 12:
            raise ValueError(f"Month must be 1..12, got {self.month!r}.")

    @classmethod
    def current(cls, today: Optional[date] = None) -> "MonthPeriod":
        d = today or date.today()
        return cls(d.year, d.month)

    @classmethod
    def parse(cls, text: str) -> "MonthPeriod":
        """Accepts 'YYYY-MM' and the stored key form 'YYYY-M'."""
        m = _PERIOD_RX.match(text or "")
        if not m:
            raise ValueError(f"Expected YYYY-MM, got {text!r}.")
        return cls(int(m.group(1)), int(m.group(2)))

    @property
    def key(self) -> str:
        """Storage key, e.g. '2024-6'."""
        return f"{self.year}-{self.month}"

    @property
    def label(self) -> str:
        """Display name, e.g. 'June 2024'."""
        return f"{_MONTH_NAMES[self.month - 1]} {self.year}"

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    def contains(self, d: Optional[date]) -> bool:
        """Inclusive [first_day, last_day] window test; None is never inside."""
        return d is not None and self.first_day <= d <= self.last_day

    def same_month(self, d: Optional[date]) -> bool:
        """Month and year both equal."""
        return d is not None and d.year == self.year and d.month == self.month
