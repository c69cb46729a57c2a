"""
Unit tests for conventions module.
"""

from datetime import date
import pytest

from marketcurves.conventions import (
    BusinessDayConvention,
    DayCount,
    adjust_business_day,
    date_from_time,
    is_business_day,
    time_from_date,
    year_fraction,
)


class TestDayCount:
    """Tests for day count conventions."""

    def test_act_360(self):
        """Test ACT/360 day count."""
        start = date(2024, 1, 15)
        end = date(2024, 4, 15)  # 91 days

        yf = year_fraction(start, end, DayCount.ACT_360)
        expected = 91 / 360

        assert abs(yf - expected) < 1e-10

    def test_act_365(self):
        """Test ACT/365 day count."""
        start = date(2024, 1, 15)
        end = date(2024, 4, 15)  # 91 days

        yf = year_fraction(start, end, DayCount.ACT_365)
        expected = 91 / 365

        assert abs(yf - expected) < 1e-10

    def test_act_act(self):
        """Test ACT/ACT day count across a leap year boundary."""
        start = date(2023, 7, 1)
        end = date(2024, 7, 1)

        yf = year_fraction(start, end, DayCount.ACT_ACT)
        expected = 184 / 365 + 182 / 366

        assert abs(yf - expected) < 1e-10

    def test_thirty_360(self):
        """Test 30/360 day count."""
        start = date(2024, 1, 15)
        end = date(2024, 4, 15)  # 3 months

        yf = year_fraction(start, end, DayCount.THIRTY_360)
        expected = 90 / 360  # 3 months * 30 days

        assert abs(yf - expected) < 1e-10

    def test_thirty_e_360(self):
        """Test 30E/360 caps both day numbers at 30."""
        yf = year_fraction(date(2024, 1, 31), date(2024, 3, 31), DayCount.THIRTY_E_360)
        assert abs(yf - 60 / 360) < 1e-10

        yf = year_fraction(date(2024, 1, 1), date(2025, 1, 1), DayCount.THIRTY_E_360)
        assert yf == 1.0

    def test_year_fraction_same_date(self):
        """Test year fraction for same date returns 0."""
        d = date(2024, 1, 15)
        yf = year_fraction(d, d, DayCount.ACT_360)
        assert yf == 0.0

    def test_year_fraction_signed(self):
        """Test reversed dates give a negative year fraction."""
        start = date(2024, 1, 15)
        end = date(2024, 4, 15)
        assert year_fraction(end, start, DayCount.ACT_360) == -year_fraction(start, end, DayCount.ACT_360)

    @pytest.mark.parametrize("text,expected", [
        ("ACT/360", DayCount.ACT_360),
        ("act/365f", DayCount.ACT_365),
        ("ACT ACT", DayCount.ACT_ACT),
        ("30/360", DayCount.THIRTY_360),
        ("30E/360", DayCount.THIRTY_E_360),
    ])
    def test_from_string(self, text, expected):
        assert DayCount.from_string(text) == expected

    def test_from_string_invalid(self):
        with pytest.raises(ValueError):
            DayCount.from_string("BUS/252")


class TestModelTime:
    """Tests for model time conversions."""

    def test_time_from_date(self):
        ref = date(2024, 1, 15)
        assert time_from_date(ref, date(2025, 1, 14)) == 1.0
        assert time_from_date(ref, date(2024, 1, 8)) == -7 / 365

    def test_date_from_time(self):
        ref = date(2024, 1, 15)
        assert date_from_time(ref, 1.0) == date(2025, 1, 14)
        assert date_from_time(ref, 0.0) == ref
        assert date_from_time(ref, -7 / 365) == date(2024, 1, 8)

    def test_round_trip(self):
        ref = date(2024, 1, 15)
        for days in [1, 30, 91, 182, 365, 3652]:
            d = date.fromordinal(ref.toordinal() + days)
            assert date_from_time(ref, time_from_date(ref, d)) == d


class TestBusinessDays:
    """Tests for business day adjustments."""

    def test_weekend(self):
        assert is_business_day(date(2024, 1, 15))
        assert not is_business_day(date(2024, 1, 13))
        assert not is_business_day(date(2024, 1, 15), holidays={date(2024, 1, 15)})

    def test_following(self):
        saturday = date(2024, 1, 13)
        assert adjust_business_day(saturday, BusinessDayConvention.FOLLOWING) == date(2024, 1, 15)

    def test_preceding(self):
        saturday = date(2024, 1, 13)
        assert adjust_business_day(saturday, BusinessDayConvention.PRECEDING) == date(2024, 1, 12)

    def test_modified_following(self):
        """Test modified following stays within the month."""
        saturday = date(2024, 8, 31)
        assert adjust_business_day(saturday, BusinessDayConvention.MODIFIED_FOLLOWING) == date(2024, 8, 30)
        assert adjust_business_day(date(2024, 1, 13), BusinessDayConvention.MODIFIED_FOLLOWING) == date(2024, 1, 15)

    def test_unadjusted(self):
        saturday = date(2024, 1, 13)
        assert adjust_business_day(saturday, BusinessDayConvention.UNADJUSTED) == saturday
