"""
Day counts, business day rolls and model time.

Model time is the signed ACT/365 year fraction from a curve's reference
date. Converting back to a date rounds ``t * 365`` to whole days, so
dates survive a round trip while times in between snap to the nearest day.

Day counts:
- ACT/360, ACT/365 (fixed), ACT/ACT (ISDA)
- 30/360 (US) and 30E/360 (Eurobond), the latter used for annualized
  index zero rates

Business days are weekdays not listed in an optional holiday set.
"""

from datetime import date, timedelta
from enum import Enum
from typing import Callable, Dict, Optional
import calendar

from .config import DAYS_PER_YEAR


class DayCount(Enum):
    """Day count convention enumeration."""
    ACT_360 = "ACT/360"
    ACT_365 = "ACT/365"
    ACT_ACT = "ACT/ACT"
    THIRTY_360 = "30/360"
    THIRTY_E_360 = "30E/360"

    @classmethod
    def from_string(cls, s: str) -> "DayCount":
        """Parse a day count such as "ACT/360", "act/365f" or "30E360"."""
        key = s.upper().replace(" ", "").replace("/", "")
        if key == "ACT365F":
            key = "ACT365"
        for member in cls:
            if member.value.replace("/", "") == key:
                return member
        raise ValueError(f"Unknown day count convention: {s}")


class BusinessDayConvention(Enum):
    """Business day adjustment convention."""
    MODIFIED_FOLLOWING = "ModifiedFollowing"
    FOLLOWING = "Following"
    PRECEDING = "Preceding"
    UNADJUSTED = "Unadjusted"


class CompoundingConvention(Enum):
    """Interest rate compounding convention."""
    CONTINUOUS = "Continuous"
    ANNUAL = "Annual"
    SEMI_ANNUAL = "SemiAnnual"
    QUARTERLY = "Quarterly"


def _days_in_year(year: int) -> int:
    return 366 if calendar.isleap(year) else 365


def _act_act(start: date, end: date) -> float:
    # ISDA: each calendar year contributes its days over its own length
    total = 0.0
    period_start = start
    while period_start.year < end.year:
        next_year = date(period_start.year + 1, 1, 1)
        total += (next_year - period_start).days / _days_in_year(period_start.year)
        period_start = next_year
    return total + (end - period_start).days / _days_in_year(end.year)


def _thirty_360(d1: int, d2: int, start: date, end: date) -> float:
    months = 12 * (end.year - start.year) + (end.month - start.month)
    return (30 * months + (d2 - d1)) / 360.0


def _thirty_360_us(start: date, end: date) -> float:
    d1 = min(start.day, 30)
    d2 = 30 if (end.day == 31 and d1 == 30) else end.day
    return _thirty_360(d1, d2, start, end)


def _thirty_e_360(start: date, end: date) -> float:
    return _thirty_360(min(start.day, 30), min(end.day, 30), start, end)


_YEAR_FRACTIONS: Dict[DayCount, Callable[[date, date], float]] = {
    DayCount.ACT_360: lambda start, end: (end - start).days / 360.0,
    DayCount.ACT_365: lambda start, end: (end - start).days / DAYS_PER_YEAR,
    DayCount.ACT_ACT: _act_act,
    DayCount.THIRTY_360: _thirty_360_us,
    DayCount.THIRTY_E_360: _thirty_e_360,
}


def year_fraction(start: date, end: date, day_count: DayCount) -> float:
    """
    Year fraction between two dates.

    Args:
        start: Start date
        end: End date
        day_count: Day count convention

    Returns:
        Year fraction, negative if end precedes start
    """
    if day_count not in _YEAR_FRACTIONS:
        raise ValueError(f"Unknown day count: {day_count}")
    if start == end:
        return 0.0
    if start > end:
        return -year_fraction(end, start, day_count)
    return _YEAR_FRACTIONS[day_count](start, end)


def time_from_date(reference_date: date, d: date) -> float:
    """Model time of ``d`` measured from ``reference_date`` (ACT/365, signed)."""
    return (d - reference_date).days / DAYS_PER_YEAR


def date_from_time(reference_date: date, t: float) -> date:
    """Date corresponding to model time ``t``, rounded to whole days."""
    return reference_date + timedelta(days=int(round(t * DAYS_PER_YEAR)))


def is_business_day(d: date, holidays: Optional[set] = None) -> bool:
    """True for weekdays that are not in ``holidays``."""
    return d.weekday() < 5 and not (holidays and d in holidays)


def _roll(d: date, step: int, holidays: Optional[set]) -> date:
    while not is_business_day(d, holidays):
        d += timedelta(days=step)
    return d


def adjust_business_day(
    d: date,
    convention: BusinessDayConvention,
    holidays: Optional[set] = None
) -> date:
    """
    Roll a date onto a business day.

    Args:
        d: Date to adjust
        convention: Business day adjustment rule
        holidays: Optional set of holiday dates

    Returns:
        Adjusted date; ``d`` itself if it is a business day or the
        convention is UNADJUSTED
    """
    if convention == BusinessDayConvention.UNADJUSTED:
        return d
    if convention == BusinessDayConvention.PRECEDING:
        return _roll(d, -1, holidays)

    following = _roll(d, 1, holidays)
    if convention == BusinessDayConvention.MODIFIED_FOLLOWING and following.month != d.month:
        return _roll(d, -1, holidays)
    return following


__all__ = [
    "DayCount",
    "BusinessDayConvention",
    "CompoundingConvention",
    "year_fraction",
    "time_from_date",
    "date_from_time",
    "is_business_day",
    "adjust_business_day",
]
