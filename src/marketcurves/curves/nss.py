"""
Nelson-Siegel-Svensson (NSS) parametric discount and forward curves.

The NSS zero rate uses 6 parameters:

    z(t) = β₀ + β₁ * y₁ + β₂ * (y₁ - x₁) + β₃ * (y₂ - x₂)

    x_i = exp(-t/τ_i),  y_i = (1 - x_i) * τ_i / t

with t the maturity multiplied by a time scaling factor. A decay τ_i <= 0
switches its terms off (x_i = y_i = 0). The discount factor is exp(-z(t) t).

Parameters:
    β₀: Long-term level (asymptotic rate)
    β₁: Short-term component (slope)
    β₂: Medium-term hump (curvature 1)
    β₃: Second hump (curvature 2) - Svensson extension
    τ₀: Decay for first hump
    τ₁: Decay for second hump

Curves are immutable: with_parameters always returns a new instance.
"""

from dataclasses import dataclass
from datetime import date
import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

import numpy as np
from scipy.optimize import differential_evolution, minimize

from ..conventions import BusinessDayConvention, DayCount, year_fraction
from ..exceptions import ArityMismatchError
from .discount import AbstractDiscountCurve
from .forward import AbstractForwardCurve

if TYPE_CHECKING:
    from ..model import CurveRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NSSParameters:
    """Nelson-Siegel-Svensson parameters."""
    beta0: float  # Long-term level
    beta1: float  # Short-term component
    beta2: float  # Medium-term hump 1
    beta3: float  # Medium-term hump 2 (Svensson)
    tau0: float  # Decay 1
    tau1: float  # Decay 2

    @classmethod
    def default_initial_guess(cls, level: float = 0.04) -> "NSSParameters":
        """Reasonable initial guess around a given long-term level."""
        return cls(
            beta0=level,
            beta1=-0.02,  # Upward sloping
            beta2=0.01,   # Slight hump
            beta3=0.01,   # Additional curvature
            tau0=1.5,     # Medium-term decay
            tau1=3.0      # Longer-term decay
        )

    def to_array(self) -> np.ndarray:
        """Convert to numpy array for optimization."""
        return np.array([
            self.beta0, self.beta1, self.beta2,
            self.beta3, self.tau0, self.tau1
        ])

    @classmethod
    def from_array(cls, arr: Sequence[float]) -> "NSSParameters":
        """Create from a length 6 array."""
        arr = np.asarray(arr, dtype=np.float64).ravel()
        if len(arr) != 6:
            raise ArityMismatchError(6, len(arr))
        return cls(
            beta0=float(arr[0]), beta1=float(arr[1]), beta2=float(arr[2]),
            beta3=float(arr[3]), tau0=float(arr[4]), tau1=float(arr[5])
        )


def nss_zero_rate(t: float, params: NSSParameters) -> float:
    """
    NSS zero rate at scaled time t.

    Args:
        t: Scaled time to maturity
        params: NSS parameters

    Returns:
        Continuously compounded zero rate
    """
    x1 = np.exp(-t / params.tau0) if params.tau0 > 0 else 0.0
    x2 = np.exp(-t / params.tau1) if params.tau1 > 0 else 0.0

    if params.tau0 > 0:
        y1 = (1.0 - x1) * params.tau0 / t if t > 0 else 1.0
    else:
        y1 = 0.0
    if params.tau1 > 0:
        y2 = (1.0 - x2) * params.tau1 / t if t > 0 else 1.0
    else:
        y2 = 0.0

    return float(
        params.beta0
        + params.beta1 * y1
        + params.beta2 * (y1 - x1)
        + params.beta3 * (y2 - x2)
    )


class DiscountCurveNelsonSiegelSvensson(AbstractDiscountCurve):
    """
    Discount curve given by the NSS parametrization.

    Attributes:
        params: NSS shape parameters
        time_scaling: Factor applied to maturities before evaluation
    """

    def __init__(
        self,
        name: str,
        parameters: Union[NSSParameters, Sequence[float]],
        time_scaling: float = 1.0,
        reference_date: Optional[date] = None
    ):
        super().__init__(name, reference_date)
        if not isinstance(parameters, NSSParameters):
            parameters = NSSParameters.from_array(parameters)
        self.params = parameters
        self.time_scaling = time_scaling

    def nss_zero_rate(self, maturity: float) -> float:
        """Zero rate on the scaled time axis."""
        return nss_zero_rate(maturity * self.time_scaling, self.params)

    def _discount_factor(self, t: float, model: Optional["CurveRepository"]) -> float:
        scaled = t * self.time_scaling
        return float(np.exp(-nss_zero_rate(scaled, self.params) * scaled))

    def parameters(self) -> np.ndarray:
        return self.params.to_array()

    def with_parameters(self, parameters: Sequence[float]) -> "DiscountCurveNelsonSiegelSvensson":
        """New curve with the six shape parameters replaced."""
        return DiscountCurveNelsonSiegelSvensson(
            self.name, NSSParameters.from_array(parameters), self.time_scaling, self.reference_date
        )

    def __repr__(self) -> str:
        p = self.params
        return (f"DiscountCurveNelsonSiegelSvensson(name={self.name!r}, "
                f"β₀={p.beta0:.4f}, β₁={p.beta1:.4f}, β₂={p.beta2:.4f}, "
                f"β₃={p.beta3:.4f}, τ₀={p.tau0:.2f}, τ₁={p.tau1:.2f})")


class ForwardCurveNelsonSiegelSvensson(AbstractForwardCurve):
    """
    Forward curve implied by an owned NSS discount curve.

        F(T) = (P(T + s) / P(T + o + s) - 1) / dcf

    where s is the period offset and dcf the day count fraction of the
    period (floored at one day) or the payment offset without a day count.
    """

    def __init__(
        self,
        name: str,
        reference_date: date,
        payment_offset_code: str,
        parameters: Union[NSSParameters, Sequence[float]],
        time_scaling: float = 1.0,
        business_day_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        holidays: Optional[set] = None,
        day_count: Optional[DayCount] = None,
        period_offset: float = 0.0
    ):
        super().__init__(
            name, reference_date,
            payment_offset_code=payment_offset_code,
            business_day_convention=business_day_convention,
            holidays=holidays
        )
        self.discount_curve = DiscountCurveNelsonSiegelSvensson(
            name + "_discountCurve", parameters, time_scaling, reference_date
        )
        self.day_count = day_count
        self.period_offset = period_offset

    def _forward(self, model: Optional["CurveRepository"], fixing_time: float) -> float:
        start = fixing_time + self.period_offset
        offset = self.payment_offset(start)
        end = start + offset

        dcf = offset
        if self.day_count is not None:
            dcf = max(
                year_fraction(self.date_from_time(start), self.date_from_time(end), self.day_count),
                1.0 / 365.0
            )
        return (self.discount_curve.value(start) / self.discount_curve.value(end) - 1.0) / dcf

    def parameters(self) -> np.ndarray:
        return self.discount_curve.parameters()

    def with_parameters(self, parameters: Sequence[float]) -> "ForwardCurveNelsonSiegelSvensson":
        return ForwardCurveNelsonSiegelSvensson(
            self.name, self.reference_date, self.payment_offset_code,
            NSSParameters.from_array(parameters),
            time_scaling=self.discount_curve.time_scaling,
            business_day_convention=self.business_day_convention,
            holidays=self.holidays,
            day_count=self.day_count,
            period_offset=self.period_offset
        )


# Parameter bounds for fitting
NSS_BOUNDS = [
    (-0.5, 0.5),    # beta0: reasonable rate range
    (-0.5, 0.5),    # beta1
    (-0.5, 0.5),    # beta2
    (-0.5, 0.5),    # beta3
    (0.1, 10.0),    # tau0: positive, reasonable range
    (0.1, 20.0),    # tau1: positive, can be larger
]


def fit_nelson_siegel_svensson(
    name: str,
    maturities: List[float],
    zero_rates: List[float],
    weights: Optional[List[float]] = None,
    initial_guess: Optional[NSSParameters] = None,
    reference_date: Optional[date] = None,
    time_scaling: float = 1.0,
    method: str = "L-BFGS-B"
) -> DiscountCurveNelsonSiegelSvensson:
    """
    Fit an NSS discount curve to observed zero rates.

    Args:
        name: Name of the fitted curve
        maturities: Maturities in years
        zero_rates: Observed continuously compounded zero rates (decimal)
        weights: Optional weights for each observation
        initial_guess: Starting parameters
        reference_date: Date of time 0
        time_scaling: Time scaling of the fitted curve
        method: Local optimization method

    Returns:
        Fitted discount curve
    """
    if len(maturities) != len(zero_rates):
        raise ValueError("Maturities and zero rates must have same length")

    if len(maturities) < 4:
        raise ValueError("Need at least 4 points to fit NSS model")

    t = np.array(maturities, dtype=np.float64) * time_scaling
    z_obs = np.array(zero_rates, dtype=np.float64)
    w = np.array(weights, dtype=np.float64) if weights else np.ones_like(t)

    # Normalize weights
    w = w / w.sum()

    if initial_guess is None:
        initial_guess = NSSParameters.default_initial_guess(level=float(np.mean(z_obs)))

    def objective(x):
        p = NSSParameters.from_array(x)
        z_pred = np.array([nss_zero_rate(ti, p) for ti in t])
        return np.sum(w * (z_pred - z_obs)**2)

    result = minimize(
        objective,
        initial_guess.to_array(),
        method=method,
        bounds=NSS_BOUNDS,
        options={'maxiter': 1000, 'ftol': 1e-12}
    )

    # Try global optimization if local fails
    if not result.success or result.fun > 1e-6:
        logger.debug("Local NSS fit ended at %.3e (%s), trying differential evolution", result.fun, result.message)
        result_de = differential_evolution(
            objective,
            NSS_BOUNDS,
            maxiter=500,
            tol=1e-10,
            seed=42
        )
        if result_de.fun < result.fun:
            result = result_de

    logger.info("Fitted NSS curve %s to %d zero rates, weighted error %.3e", name, len(t), result.fun)
    return DiscountCurveNelsonSiegelSvensson(name, result.x, time_scaling, reference_date)


__all__ = [
    "NSSParameters",
    "nss_zero_rate",
    "DiscountCurveNelsonSiegelSvensson",
    "ForwardCurveNelsonSiegelSvensson",
    "fit_nelson_siegel_svensson",
]
