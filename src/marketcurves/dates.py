"""
Date utilities for curve construction.

Provides:
- Offset code parsing ("3M", "-2M", "1Y", "10BD")
- Calendar arithmetic by offset code with business day adjustment
- Month boundary helpers used by index fixing lags
"""

from datetime import date, timedelta
from typing import Optional, Tuple
import calendar
import re

from .conventions import (
    BusinessDayConvention,
    adjust_business_day,
    is_business_day,
)


class DateUtils:
    """Utility class for date manipulation in curve contexts."""

    # Offset pattern: optional sign + number + unit (D/BD/W/M/Y)
    OFFSET_PATTERN = re.compile(r'^([+-]?\d+)(BD|[DWMY])$', re.IGNORECASE)

    @staticmethod
    def parse_offset(code: str) -> Tuple[int, str]:
        """
        Parse an offset code into (amount, unit).

        Args:
            code: Offset code like "3M", "-2M", "1Y", "2BD"

        Returns:
            Tuple of (signed amount, unit) where unit is D/BD/W/M/Y

        Raises:
            ValueError: If the code format is invalid
        """
        match = DateUtils.OFFSET_PATTERN.match(code.upper().strip())
        if not match:
            raise ValueError(f"Invalid offset code: {code}. Expected format like '3M', '-2M', '1Y'")

        return int(match.group(1)), match.group(2).upper()

    @staticmethod
    def add_offset(start: date, code: str, holidays: Optional[set] = None) -> date:
        """
        Shift a date by an offset code without business day adjustment.

        Business day offsets ("BD") skip weekends and holidays; every other
        unit is calendar arithmetic, month and year offsets clamping to the
        end of the target month.
        """
        amount, unit = DateUtils.parse_offset(code)

        if unit == 'BD':
            step = timedelta(days=1 if amount >= 0 else -1)
            result = start
            remaining = abs(amount)
            while remaining > 0:
                result += step
                if is_business_day(result, holidays):
                    remaining -= 1
            return result

        if unit == 'D':
            return start + timedelta(days=amount)

        if unit == 'W':
            return start + timedelta(weeks=amount)

        if unit == 'M':
            return add_months(start, amount)

        if unit == 'Y':
            return add_months(start, 12 * amount)

        raise ValueError(f"Unknown offset unit: {unit}")


def adjusted_date(
    d: date,
    offset_code: str,
    roll_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
    holidays: Optional[set] = None
) -> date:
    """
    Shift ``d`` by ``offset_code`` and roll the result to a business day.

    Args:
        d: Start date
        offset_code: Offset code such as "3M" or "1Y"
        roll_convention: Business day adjustment applied to the shifted date
        holidays: Optional holiday calendar

    Returns:
        Adjusted date
    """
    shifted = DateUtils.add_offset(d, offset_code, holidays)
    return adjust_business_day(shifted, roll_convention, holidays)


def add_months(d: date, months: int) -> date:
    """Add (possibly negative) months, clamping the day to the month end."""
    year = d.year + (d.month + months - 1) // 12
    month = (d.month + months - 1) % 12 + 1
    day = min(d.day, _days_in_month(year, month))
    return date(year, month, day)


def first_of_month(d: date) -> date:
    return d.replace(day=1)


def end_of_month(d: date) -> date:
    return d.replace(day=_days_in_month(d.year, d.month))


def _days_in_month(year: int, month: int) -> int:
    """Return number of days in a month."""
    return calendar.monthrange(year, month)[1]


__all__ = [
    "DateUtils",
    "adjusted_date",
    "add_months",
    "first_of_month",
    "end_of_month",
]
