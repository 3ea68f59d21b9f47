"""Date manipulation utilities"""

import calendar
import re
from datetime import date, timedelta
from enum import Enum
from typing import List, Tuple

from ledger_projection.domain.exceptions import InvalidDateError

_ISO_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_BR_PATTERN = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")


class DateOrder(Enum):
    """Result of comparing two calendar dates"""

    BEFORE = -1
    EQUAL = 0
    AFTER = 1


def add_months(year: int, month_index: int, delta: int) -> Tuple[int, int]:
    """
    Roll a 0-based month index by delta months, carrying year changes.

    Example:
        add_months(2024, 11, 2) -> (2025, 1)   # December + 2 = February
        add_months(2024, 0, -1) -> (2023, 11)
    """
    total = year * 12 + month_index + delta
    return total // 12, total % 12


def last_day_of_month(year: int, month: int) -> int:
    """Number of days in a calendar month (month is 1-12)"""
    return calendar.monthrange(year, month)[1]


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, pulling day back to the month's last day when it overflows"""
    return date(year, month, min(day, last_day_of_month(year, month)))


def compare_dates(a: date, b: date) -> DateOrder:
    """Compare two calendar dates on (year, month, day)"""
    key_a = (a.year, a.month, a.day)
    key_b = (b.year, b.month, b.day)
    if key_a < key_b:
        return DateOrder.BEFORE
    if key_a > key_b:
        return DateOrder.AFTER
    return DateOrder.EQUAL


def shift_months(from_date: date, months: int) -> date:
    """Return a new date `months` later, clamping day 29-31 on short months"""
    year, month_index = add_months(from_date.year, from_date.month - 1, months)
    return clamp_day(year, month_index + 1, from_date.day)


def shift_years(from_date: date, years: int) -> date:
    """Return a new date `years` later (29 Feb falls back to 28 Feb)"""
    return clamp_day(from_date.year + years, from_date.month, from_date.day)


def make_date(year: int, month: int, day: int) -> date:
    """Build a date from raw components, raising InvalidDateError when malformed"""
    try:
        return date(int(year), int(month), int(day))
    except (TypeError, ValueError) as e:
        raise InvalidDateError(f"Invalid date components: {year}-{month}-{day}") from e


def parse_iso_date(text: str) -> date:
    """Parse YYYY-MM-DD"""
    match = _ISO_PATTERN.match(text.strip()) if isinstance(text, str) else None
    if not match:
        raise InvalidDateError(f"Expected YYYY-MM-DD, got {text!r}")
    year, month, day = (int(part) for part in match.groups())
    return make_date(year, month, day)


def format_iso_date(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def parse_br_date(text: str) -> date:
    """Parse DD/MM/YYYY as typed in the entry forms"""
    match = _BR_PATTERN.match(text.strip()) if isinstance(text, str) else None
    if not match:
        raise InvalidDateError(f"Expected DD/MM/YYYY, got {text!r}")
    day, month, year = (int(part) for part in match.groups())
    return make_date(year, month, day)


def format_br_date(value: date) -> str:
    return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"


def generate_date_range(start: date, end: date) -> List[date]:
    """Generate list of dates from start to end (inclusive)"""
    days = (end - start).days + 1
    return [start + timedelta(days=i) for i in range(days)]


def month_span(year: int, month: int, months: int) -> Tuple[date, date]:
    """First day of (year, month) and last day of the month `months - 1` later"""
    start = date(year, month, 1)
    end_year, end_index = add_months(year, month - 1, months - 1)
    end = date(end_year, end_index + 1, last_day_of_month(end_year, end_index + 1))
    return start, end
