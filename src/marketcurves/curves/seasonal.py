"""
Seasonality of index curves.

A SeasonalCurve maps model time to a position within the calendar year,

    season = (month - 1) / 12 + (day - 1) / days_in_month / 12

and evaluates a base curve defined on [0, 1) there, typically 12 piecewise
constant monthly factors. Adjustments can be estimated from historical
index fixings: the average monthly log-return of each calendar month,
demeaned and annualized, so that the 12 adjustments sum to zero.
"""

import calendar
from datetime import date
import logging
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from ..config import (
    ExtrapolationMethod,
    InterpolationConfig,
    InterpolationEntity,
    InterpolationMethod,
    SEASONAL_MONTHS,
)
from .curve import Curve, InterpolatedCurve

if TYPE_CHECKING:
    from ..model import CurveRepository

logger = logging.getLogger(__name__)

Fixings = Union[Mapping[date, float], pd.Series]

MONTH_NAMES = [calendar.month_name[m].lower() for m in range(1, 13)]


def fixings_series(fixings: Fixings) -> pd.Series:
    """Fixings as a float Series sorted by date."""
    series = fixings.copy() if isinstance(fixings, pd.Series) else pd.Series(dict(fixings), dtype=float)
    if series.empty:
        raise ValueError("No index fixings given")
    series.index = pd.Index([pd.Timestamp(d).date() for d in series.index])
    return series.astype(float).sort_index()


def compute_seasonal_adjustments(values: Sequence[float], last_month: int, years: int) -> np.ndarray:
    """
    Seasonal adjustments from consecutive monthly index values.

    Args:
        values: Monthly index values, oldest first
        last_month: Calendar month (1-12) of the last value
        years: Number of years of monthly returns to average

    Returns:
        Array of 12 annualized, demeaned adjustments, January first
    """
    values = np.asarray(values, dtype=np.float64)
    if years < 1:
        raise ValueError("Need at least one year to average")

    # Most recent return first; return i ends in month (last_month - 1 - i) mod 12
    log_returns = np.diff(np.log(values))[::-1][:SEASONAL_MONTHS * years]
    months = (last_month - 1 - np.arange(len(log_returns))) % SEASONAL_MONTHS

    counts = np.bincount(months, minlength=SEASONAL_MONTHS)
    if np.any(counts == 0):
        raise ValueError(
            f"Need at least {SEASONAL_MONTHS + 1} consecutive monthly fixings, got {len(values)}"
        )
    if len(log_returns) < SEASONAL_MONTHS * years:
        logger.warning(
            "Only %d monthly returns available to average over %d years", len(log_returns), years
        )

    average = np.bincount(months, weights=log_returns, minlength=SEASONAL_MONTHS) / counts
    return (average - average.mean()) * SEASONAL_MONTHS


def estimate_seasonal_adjustments(fixings: Fixings, years: int) -> np.ndarray:
    """Seasonal adjustments from dated monthly fixings, see compute_seasonal_adjustments."""
    series = fixings_series(fixings)
    return compute_seasonal_adjustments(series.to_numpy(), series.index[-1].month, years)


def _monthly_base_curve(name: str, reference_date: Optional[date], factors: Sequence[float]) -> InterpolatedCurve:
    times = [j / SEASONAL_MONTHS for j in range(SEASONAL_MONTHS)]
    config = InterpolationConfig(
        method=InterpolationMethod.PIECEWISE_CONSTANT_LEFTPOINT,
        extrapolation=ExtrapolationMethod.CONSTANT,
        entity=InterpolationEntity.VALUE
    )
    return InterpolatedCurve.from_points(name, times, factors, config=config, reference_date=reference_date)


class SeasonalCurve(Curve):
    """
    Curve periodic in the calendar year.

    Attributes:
        base_curve: Curve on the season coordinate in [0, 1)
    """

    def __init__(self, name: str, reference_date: date, base_curve: Curve):
        super().__init__(name, reference_date)
        self.base_curve = base_curve

    @classmethod
    def from_adjustments(
        cls,
        name: str,
        reference_date: date,
        adjustments: Sequence[float],
        scaling: float = 1.0 / SEASONAL_MONTHS
    ) -> "SeasonalCurve":
        """
        Build from 12 monthly adjustments, January first.

        The factor of month j is prod_{k<=j} exp(adjustment_k * scaling).
        """
        if len(adjustments) != SEASONAL_MONTHS:
            raise ValueError(f"Need {SEASONAL_MONTHS} monthly adjustments, got {len(adjustments)}")
        factors = np.cumprod(np.exp(np.asarray(adjustments, dtype=np.float64) * scaling))
        return cls(name, reference_date, _monthly_base_curve(name + "-seasonal-base", reference_date, factors))

    @classmethod
    def from_fixings(cls, name: str, reference_date: date, fixings: Fixings, years: int) -> "SeasonalCurve":
        """
        Build from adjustments estimated on historical monthly fixings.

        Args:
            name: Curve name
            reference_date: Date of time 0
            fixings: Monthly index fixings by date
            years: Number of years to average

        Returns:
            Seasonal curve
        """
        adjustments = estimate_seasonal_adjustments(fixings, years)
        logger.debug("Seasonal adjustments for %s: %s", name, np.round(adjustments, 6))
        return cls.from_adjustments(name, reference_date, adjustments)

    @classmethod
    def from_monthly_factors(
        cls,
        name: str,
        reference_date: date,
        adjustments: Mapping[str, float]
    ) -> "SeasonalCurve":
        """
        Build from explicit adjustments keyed by English month name.

        Unlike estimated adjustments these are not annualized: the factor of
        month j is prod_{k<=j} exp(adjustment_k).
        """
        by_month: Dict[str, float] = {k.strip().lower(): float(v) for k, v in adjustments.items()}
        missing = [m for m in MONTH_NAMES if m not in by_month]
        if missing:
            raise ValueError(f"Missing seasonal adjustments for {', '.join(missing)}")
        return cls.from_adjustments(name, reference_date, [by_month[m] for m in MONTH_NAMES], scaling=1.0)

    @staticmethod
    def season(d: date) -> float:
        """Position of a date within its calendar year, in [0, 1)."""
        days_in_month = calendar.monthrange(d.year, d.month)[1]
        return (d.month - 1) / SEASONAL_MONTHS + (d.day - 1) / days_in_month / SEASONAL_MONTHS

    def value(self, t: float, model: Optional["CurveRepository"] = None) -> float:
        return self.base_curve.value(self.season(self.date_from_time(t)), model)

    def parameters(self) -> np.ndarray:
        return self.base_curve.parameters()

    def with_parameters(self, parameters: Sequence[float]) -> "SeasonalCurve":
        new_base = self.base_curve.with_parameters(parameters)
        if new_base is self.base_curve:
            return self
        return SeasonalCurve(self.name, self.reference_date, new_base)


__all__ = [
    "MONTH_NAMES",
    "SeasonalCurve",
    "compute_seasonal_adjustments",
    "estimate_seasonal_adjustments",
    "fixings_series",
]
