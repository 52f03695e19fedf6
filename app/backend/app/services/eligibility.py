"""Employment-lifecycle aware report eligibility."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta


@dataclass(frozen=True, slots=True)
class AdjustedStartDate:
    adjusted_start_date: date
    original_start_date: date
    end_date: date
    hire_date_used: bool
    has_data: bool

    @property
    def days_difference(self) -> int:
        """Inclusive day count between adjusted start and window end."""

        return (self.end_date - self.adjusted_start_date).days + 1


def week_start(value: date) -> date:
    return value - timedelta(days=value.weekday())


def adjust_start_date(
    *,
    hire_date: date | None,
    end_of_employment: date | None,
    start_date: date,
    end_date: date,
) -> AdjustedStartDate:
    """Shift the window start for users hired inside the window.

    Users hired on or after ``start_date`` are measured from the Monday of their
    hire week. The window has data when that adjusted start is not after
    ``end_date`` and the user had not already left before ``start_date``.
    """

    hire_date_used = hire_date is not None and hire_date >= start_date
    adjusted = week_start(hire_date) if hire_date_used else start_date

    has_data = adjusted <= end_date
    if end_of_employment is not None and end_of_employment < start_date:
        has_data = False

    return AdjustedStartDate(
        adjusted_start_date=adjusted,
        original_start_date=start_date,
        end_date=end_date,
        hire_date_used=hire_date_used,
        has_data=has_data,
    )
