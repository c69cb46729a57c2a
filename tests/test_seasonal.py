"""
Unit tests for seasonal curves and the seasonality estimator.
"""

from datetime import date
import math

import numpy as np
import pandas as pd
import pytest

from marketcurves.curves import SeasonalCurve, compute_seasonal_adjustments, estimate_seasonal_adjustments
from marketcurves.curves.seasonal import MONTH_NAMES, fixings_series

# Monthly seasonal log-returns, January first, summing to zero
SEASONAL_PATTERN = 0.001 * np.array([1.0, -1.0, 2.0, -2.0, 0.0, 0.0, 1.0, -1.0, 3.0, -3.0, 0.0, 0.0])


def monthly_fixings(start_year=2022, years=2, trend=0.002):
    """First-of-month fixings whose return into month m is trend + SEASONAL_PATTERN[m-1]."""
    fixings = {}
    value = 100.0
    for k in range(12 * years):
        d = date(start_year + k // 12, k % 12 + 1, 1)
        if k > 0:
            value *= math.exp(trend + SEASONAL_PATTERN[d.month - 1])
        fixings[d] = value
    return fixings


class TestEstimator:
    """Tests for seasonal adjustment estimation."""

    def test_recovers_pattern(self):
        """Test the estimator recovers demeaned, annualized monthly returns."""
        adjustments = estimate_seasonal_adjustments(monthly_fixings(), years=2)
        assert len(adjustments) == 12
        assert np.allclose(adjustments, 12 * SEASONAL_PATTERN, rtol=0, atol=1e-10)

    def test_mean_zero(self):
        adjustments = estimate_seasonal_adjustments(monthly_fixings(years=3), years=2)
        assert abs(adjustments.sum()) < 1e-12

    def test_accepts_series(self):
        series = pd.Series(monthly_fixings())
        series.index = pd.to_datetime(series.index)
        adjustments = estimate_seasonal_adjustments(series, years=2)
        assert np.allclose(adjustments, 12 * SEASONAL_PATTERN, rtol=0, atol=1e-10)

    def test_too_few_fixings(self):
        """Test every calendar month needs at least one return."""
        values = 100.0 * np.exp(0.001 * np.arange(6))
        with pytest.raises(ValueError):
            compute_seasonal_adjustments(values, last_month=6, years=1)

    def test_invalid_years(self):
        with pytest.raises(ValueError):
            compute_seasonal_adjustments(np.ones(13), last_month=12, years=0)

    def test_fixings_series_sorted(self):
        series = fixings_series({date(2024, 2, 1): 2.0, date(2024, 1, 1): 1.0})
        assert list(series.index) == [date(2024, 1, 1), date(2024, 2, 1)]
        with pytest.raises(ValueError):
            fixings_series({})


class TestSeasonalCurve:
    """Tests for SeasonalCurve."""

    def test_season(self):
        """Test the position of dates within the calendar year."""
        assert SeasonalCurve.season(date(2024, 1, 1)) == 0.0
        assert abs(SeasonalCurve.season(date(2024, 3, 16)) - (2 / 12 + 15 / 31 / 12)) < 1e-15
        assert SeasonalCurve.season(date(2023, 12, 31)) < 1.0

    def test_flat_adjustments(self):
        curve = SeasonalCurve.from_adjustments("S", date(2024, 1, 1), np.zeros(12))
        for t in [0.0, 0.3, 0.9, 4.2]:
            assert abs(curve.value(t) - 1.0) < 1e-15

    def test_monthly_factors(self):
        """Test explicit factors are cumulated month by month without annualizing."""
        adjustments = {name: 0.0 for name in MONTH_NAMES}
        adjustments["March"] = 0.01
        del adjustments["march"]
        curve = SeasonalCurve.from_monthly_factors("S", date(2024, 1, 1), adjustments)

        feb = curve.time_from_date(date(2024, 2, 10))
        apr = curve.time_from_date(date(2024, 4, 10))
        assert abs(curve.value(feb) - 1.0) < 1e-15
        assert abs(curve.value(apr) - math.exp(0.01)) < 1e-15

    def test_monthly_factors_missing(self):
        with pytest.raises(ValueError):
            SeasonalCurve.from_monthly_factors("S", date(2024, 1, 1), {"january": 0.01})

    def test_periodic(self):
        """Test the curve repeats every calendar year."""
        curve = SeasonalCurve.from_fixings("S", date(2024, 1, 1), monthly_fixings(), years=2)
        t1 = curve.time_from_date(date(2024, 5, 20))
        t2 = curve.time_from_date(date(2026, 5, 20))
        assert curve.value(t1) == curve.value(t2)

    def test_wrong_number_of_adjustments(self):
        with pytest.raises(ValueError):
            SeasonalCurve.from_adjustments("S", date(2024, 1, 1), np.zeros(11))

    def test_parameters_delegate(self):
        curve = SeasonalCurve.from_adjustments("S", date(2024, 1, 1), np.zeros(12))
        assert len(curve.parameters()) == 0
        assert curve.with_parameters([]) is curve
