from datetime import date, datetime
from lib.constants import (
    DAYS_IN_MONTH,
    HOURS_IN_DAY,
    MONTH_NAMES,
    MONTHS_IN_YEAR,
    REPRESENTATIVE_DAY_OF_MONTH,
)


def _check_month(month: int) -> None:
    if not 1 <= month <= MONTHS_IN_YEAR:
        raise ValueError(f"month must be in 1..12, got {month}")

def days_in_month(month: int) -> int:
    _check_month(month)
    return DAYS_IN_MONTH[month - 1]

def hours_in_month(month: int) -> int:
    return days_in_month(month) * HOURS_IN_DAY

def month_name(month: int) -> str:
    _check_month(month)
    return MONTH_NAMES[month - 1]

def day_of_year(month: int, day: int) -> int:
    """Return the 1-based day of a non-leap year for *month*/*day*."""
    if not 1 <= day <= days_in_month(month):
        raise ValueError(f"day {day} is out of range for month {month}")
    return sum(DAYS_IN_MONTH[: month - 1]) + day

def representative_day(month: int) -> int:
    """Day of year used to stand in for the whole of *month* (the 15th)."""
    return day_of_year(month, REPRESENTATIVE_DAY_OF_MONTH)

def timestamp_slug(moment: datetime | date) -> str:
    """Return ``YYYY-MM-DD_HH-MM`` for use in file names."""
    return moment.strftime("%Y-%m-%d_%H-%M")
