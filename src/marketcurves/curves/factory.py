"""
Factory for composite index curves.

create_index_curve_with_seasonality assembles an inflation-style index curve:

    I(t) = fixings(t)                                 for t <= last fixing
    I(t) = I_base / S(t_base) / P(t) * S(t)           afterwards

where P is a discount curve implied by annualized zero rates quoted at the
lagged index dates, S an optional seasonal curve and I_base the fixing at
the lagged base date.
"""

from datetime import date
import logging
from typing import Mapping, Optional

import numpy as np

from ..config import (
    DAYS_PER_YEAR,
    ExtrapolationMethod,
    InterpolationConfig,
    InterpolationEntity,
    InterpolationMethod,
)
from ..conventions import DayCount, time_from_date, year_fraction
from ..dates import DateUtils, add_months, end_of_month, first_of_month
from ..exceptions import ConflictingSeasonalitySpecError, MissingBaseFixingError
from .composite import IndexCurveFromDiscountCurve, PiecewiseCurve, ProductOfCurves
from .curve import Curve, InterpolatedCurve
from .seasonal import Fixings, SeasonalCurve, fixings_series

logger = logging.getLogger(__name__)

END_OF_MONTH = "endOfMonth"
SUPPORTED_FIXING_LAGS = ("-2M", "-3M", "-4M")


def lagged_index_date(
    d: date,
    fixing_lag: Optional[str],
    fixing_type: Optional[str],
    curve_name: str = ""
) -> date:
    """
    Index date referenced by date ``d`` under a fixing lag convention.

    With fixing type "endOfMonth" the date moves to the first of its month,
    back by the lag and then to the end of that month. Without a lag or a
    fixing type the date is returned unchanged.

    Raises:
        ValueError: Unsupported fixing type or lag
    """
    if fixing_lag is None or fixing_type is None:
        return d
    if fixing_type != END_OF_MONTH or fixing_lag not in SUPPORTED_FIXING_LAGS:
        raise ValueError(
            f"Unsupported fixing type {fixing_type!r} with lag {fixing_lag!r} for forward in curve {curve_name}"
        )
    months, _ = DateUtils.parse_offset(fixing_lag)
    return end_of_month(add_months(first_of_month(d), months))


def create_index_curve_with_seasonality(
    name: str,
    reference_date: date,
    index_fixings: Fixings,
    annualized_zero_rates: Fixings,
    seasonality_adjustments: Optional[Mapping[str, float]] = None,
    seasonal_averaging_years: Optional[int] = None,
    forwards_fixing_lag: Optional[str] = None,
    forwards_fixing_type: Optional[str] = None
) -> Curve:
    """
    Build an index curve from fixings, projected zero rates and seasonality.

    Args:
        name: Curve name
        reference_date: Date of time 0
        index_fixings: Historical index fixings by date
        annualized_zero_rates: Annually compounded zero rates by quote date
        seasonality_adjustments: Explicit adjustments by English month name
        seasonal_averaging_years: Estimate seasonality from the fixings over this many years
        forwards_fixing_lag: Fixing lag of projected index values, "-2M", "-3M" or "-4M"
        forwards_fixing_type: Fixing type, "endOfMonth"

    Returns:
        Index curve: fixings up to the last fixing, projection afterwards

    Raises:
        ConflictingSeasonalitySpecError: Both seasonality inputs given, even an empty adjustment map
        MissingBaseFixingError: No fixing at the lagged base date
    """
    if seasonality_adjustments is not None and seasonal_averaging_years is not None:
        raise ConflictingSeasonalitySpecError(
            f"Curve {name}: specified seasonal factors and seasonal averaging at the same time"
        )

    fixings = fixings_series(index_fixings)
    fixing_times = np.array([time_from_date(reference_date, d) for d in fixings.index])
    curve_of_fixings = InterpolatedCurve.from_points(
        name + "-fixings", fixing_times, fixings.to_numpy(),
        config=InterpolationConfig.fixings(), reference_date=reference_date
    )

    season_curve: Optional[SeasonalCurve] = None
    if seasonality_adjustments:
        season_curve = SeasonalCurve.from_monthly_factors(name + "-seasonal", reference_date, seasonality_adjustments)
    elif seasonal_averaging_years is not None:
        season_curve = SeasonalCurve.from_fixings(
            name + "-seasonal", reference_date, fixings, seasonal_averaging_years
        )

    zero_rates = fixings_series(annualized_zero_rates)
    times = []
    discount_factors = []
    for quote_date, rate in zero_rates.items():
        index_date = lagged_index_date(quote_date, forwards_fixing_lag, forwards_fixing_type, name)
        times.append(time_from_date(reference_date, index_date))
        discount_factors.append(
            1.0 / (1.0 + rate) ** year_fraction(reference_date, quote_date, DayCount.THIRTY_E_360)
        )
    # Evaluated from the last fixing on, possibly before time 0
    discount_curve = InterpolatedCurve.from_points(
        name + "-discount", times, discount_factors,
        config=InterpolationConfig(
            method=InterpolationMethod.LINEAR,
            extrapolation=ExtrapolationMethod.CONSTANT,
            entity=InterpolationEntity.LOG_OF_VALUE
        ),
        reference_date=reference_date
    )

    base_date = reference_date
    if forwards_fixing_type == END_OF_MONTH:
        base_date = lagged_index_date(reference_date, forwards_fixing_lag, forwards_fixing_type, name)
    if base_date not in fixings.index:
        raise MissingBaseFixingError(name, base_date)
    base_value = float(fixings[base_date])
    base_time = time_from_date(reference_date, base_date)

    last_fixing_time = float(fixing_times[-1])
    if season_curve is not None:
        projected_index_value = base_value / season_curve.value(base_time)
        index_curve = IndexCurveFromDiscountCurve(name, projected_index_value, discount_curve, reference_date)
        projection: Curve = ProductOfCurves([index_curve, season_curve], name=name, reference_date=reference_date)
        fixed_part_end = last_fixing_time + 1.0 / DAYS_PER_YEAR
    else:
        projection = IndexCurveFromDiscountCurve(name, base_value, discount_curve, reference_date)
        fixed_part_end = last_fixing_time

    logger.info(
        "Built index curve %s: %d fixings up to %s, base %s = %s, %d zero rates, seasonality %s",
        name, len(fixings), fixings.index[-1], base_date, base_value, len(zero_rates),
        "none" if season_curve is None else ("explicit" if seasonality_adjustments else f"{seasonal_averaging_years}y")
    )

    return PiecewiseCurve(projection, curve_of_fixings, -np.inf, fixed_part_end, name=name)


__all__ = [
    "END_OF_MONTH",
    "SUPPORTED_FIXING_LAGS",
    "lagged_index_date",
    "create_index_curve_with_seasonality",
]
