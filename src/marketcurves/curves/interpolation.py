"""
Interpolation kernel for curves.

Provides:
- PiecewiseConstantInterpolator: Left- or right-point constant
- LinearInterpolator: Linear between knots
- CubicSplineInterpolator: Natural cubic spline (C2)
- AkimaInterpolator: Akima C1 sub-spline, optionally with smoothed weights
- HarmonicSplineInterpolator: Harmonic mean C1 sub-spline, optionally with
  monotonic filtering at the boundaries

Each interpolator represents the interior as one cubic polynomial per
interval, coefficients [a, b, c, d] in powers of (x - x_i), and applies the
configured extrapolation outside [x_0, x_{n-1}]:
- CONSTANT: value of the nearest boundary point
- LINEAR: extends the slope of the boundary segment
- DEFAULT: evaluates the polynomial of the adjacent interval
"""

from abc import ABC, abstractmethod
import logging
from typing import Optional, Sequence

import numpy as np

from ..config import ExtrapolationMethod, InterpolationMethod

logger = logging.getLogger(__name__)

# Smoothing of |s_i - s_{i-1}| for the continuous Akima variant
AKIMA_SMOOTHING = 1e-9


class Interpolator(ABC):
    """Abstract base class for curve interpolation."""

    def __init__(self, extrapolation: ExtrapolationMethod = ExtrapolationMethod.CONSTANT):
        self.extrapolation = extrapolation
        self.times: Optional[np.ndarray] = None
        self.values: Optional[np.ndarray] = None
        self.coefficients: Optional[np.ndarray] = None  # Shape: (n-1, 4) for [a, b, c, d]

    def fit(self, times: Sequence[float], values: Sequence[float]) -> "Interpolator":
        """
        Fit the interpolator to data points.

        Args:
            times: Strictly increasing knot times
            values: Values at the knots

        Returns:
            self, fitted
        """
        times = np.asarray(times, dtype=np.float64)
        values = np.asarray(values, dtype=np.float64)
        if len(times) != len(values):
            raise ValueError("Times and values must have same length")
        if len(times) == 0:
            raise ValueError("Need at least 1 point for interpolation")
        if np.any(np.diff(times) <= 0):
            raise ValueError("Times must be strictly increasing")

        self.times = times
        self.values = values
        if len(times) == 1:
            self.coefficients = np.zeros((0, 4))
        else:
            self.coefficients = self._build_coefficients(times, values)
        return self

    @abstractmethod
    def _build_coefficients(self, times: np.ndarray, values: np.ndarray) -> np.ndarray:
        """Polynomial coefficients per interval, shape (n-1, 4)."""

    def interpolate(self, t: float) -> float:
        """
        Interpolate at a single point.

        Args:
            t: Model time

        Returns:
            Interpolated value
        """
        if self.times is None:
            raise RuntimeError("Interpolator not fitted")
        if t != t:
            return float("nan")

        x = self.times
        v = self.values
        n = len(x)
        if n == 1:
            return float(v[0])

        if t < x[0]:
            if self.extrapolation == ExtrapolationMethod.CONSTANT:
                return float(v[0])
            if self.extrapolation == ExtrapolationMethod.LINEAR:
                return float(v[0] + (v[1] - v[0]) / (x[1] - x[0]) * (t - x[0]))
            interval = 0
        elif t > x[-1]:
            if self.extrapolation == ExtrapolationMethod.CONSTANT:
                return float(v[-1])
            if self.extrapolation == ExtrapolationMethod.LINEAR:
                return float(v[-1] + (v[-1] - v[-2]) / (x[-1] - x[-2]) * (t - x[-1]))
            interval = n - 2
        else:
            idx = int(np.searchsorted(x, t, side='left'))
            if x[idx] == t:
                return float(v[idx])
            interval = idx - 1

        dx = t - x[interval]
        a, b, c, d = self.coefficients[interval]
        return float(a + dx * (b + dx * (c + dx * d)))

    def interpolate_many(self, ts: Sequence[float]) -> np.ndarray:
        return np.array([self.interpolate(t) for t in np.asarray(ts, dtype=np.float64).ravel()])

    def __call__(self, t: float) -> float:
        """Convenience method to call interpolate."""
        return self.interpolate(t)


class PiecewiseConstantInterpolator(Interpolator):
    """
    Piecewise constant interpolation.

    The left-point variant holds the value of the interval's left knot (right
    continuous); the right-point variant takes the value of the right knot.
    """

    def __init__(
        self,
        extrapolation: ExtrapolationMethod = ExtrapolationMethod.CONSTANT,
        right_point: bool = False
    ):
        super().__init__(extrapolation)
        self.right_point = right_point

    def _build_coefficients(self, times, values):
        coeffs = np.zeros((len(times) - 1, 4))
        coeffs[:, 0] = values[1:] if self.right_point else values[:-1]
        return coeffs


class LinearInterpolator(Interpolator):
    """Linear interpolation between knot points."""

    def _build_coefficients(self, times, values):
        coeffs = np.zeros((len(times) - 1, 4))
        coeffs[:, 0] = values[:-1]
        coeffs[:, 1] = np.diff(values) / np.diff(times)
        return coeffs


class CubicSplineInterpolator(Interpolator):
    """
    Cubic spline interpolation.

    Uses natural cubic splines (second derivative = 0 at boundaries).
    Provides smooth first and second derivatives. Two points degenerate
    to linear.
    """

    def _build_coefficients(self, times, values):
        n = len(times)
        h = np.diff(times)

        # Build tridiagonal system for second derivatives
        # Natural spline: M[0] = M[n-1] = 0
        A = np.zeros((n, n))
        b = np.zeros(n)

        A[0, 0] = 1.0
        A[n-1, n-1] = 1.0

        for i in range(1, n-1):
            A[i, i-1] = h[i-1]
            A[i, i] = 2 * (h[i-1] + h[i])
            A[i, i+1] = h[i]
            b[i] = 6 * ((values[i+1] - values[i]) / h[i] -
                        (values[i] - values[i-1]) / h[i-1])

        # Solve for second derivatives M
        M = np.linalg.solve(A, b)

        # S_i(x) = a_i + b_i*(x-x_i) + c_i*(x-x_i)^2 + d_i*(x-x_i)^3
        coeffs = np.zeros((n-1, 4))
        for i in range(n-1):
            coeffs[i, 0] = values[i]  # a
            coeffs[i, 1] = (values[i+1] - values[i]) / h[i] - h[i] * (M[i+1] + 2*M[i]) / 6  # b
            coeffs[i, 2] = M[i] / 2  # c
            coeffs[i, 3] = (M[i+1] - M[i]) / (6 * h[i])  # d
        return coeffs


def _hermite_coefficients(values: np.ndarray, step: np.ndarray, slope: np.ndarray,
                          derivative: np.ndarray) -> np.ndarray:
    """Cubic Hermite coefficients per interval from knot derivatives."""
    coeffs = np.zeros((len(step), 4))
    coeffs[:, 0] = values[:-1]
    coeffs[:, 1] = derivative[:-1]
    coeffs[:, 2] = (3 * slope - 2 * derivative[:-1] - derivative[1:]) / step
    coeffs[:, 3] = (derivative[:-1] + derivative[1:] - 2 * slope) / (step * step)
    return coeffs


class AkimaInterpolator(Interpolator):
    """
    Akima sub-spline interpolation (C1).

    Knot derivatives are weighted by the absolute differences of neighbouring
    slopes. The continuous variant smooths the weights as sqrt(d^2 + eps^2) so
    that the curve depends continuously on the knot values. Needs at least
    4 points; with fewer the natural cubic spline is used.
    """

    def __init__(
        self,
        extrapolation: ExtrapolationMethod = ExtrapolationMethod.CONSTANT,
        continuous: bool = False
    ):
        super().__init__(extrapolation)
        self.continuous = continuous

    def _build_coefficients(self, times, values):
        n = len(times)
        if n < 4:
            logger.warning("Akima interpolation needs 4 points, got %d: using cubic spline", n)
            return CubicSplineInterpolator._build_coefficients(self, times, values)

        step = np.diff(times)
        slope = np.diff(values) / step
        diff = np.diff(slope)
        if self.continuous:
            w = np.sqrt(diff * diff + AKIMA_SMOOTHING * AKIMA_SMOOTHING)
        else:
            w = np.abs(diff)

        def weighted(i_left, i_right, w_left, w_right):
            # Derivative at the knot between slope[i_left] and slope[i_right]
            if w_left == 0 and w_right == 0:
                return ((step[i_right] * slope[i_left] + step[i_left] * slope[i_right])
                        / (step[i_left] + step[i_right]))
            return (w_right * slope[i_left] + w_left * slope[i_right]) / (w_right + w_left)

        d = np.zeros(n)
        d[0] = 0.5 * (3 * slope[0] - slope[1])
        d[1] = weighted(0, 1, w[0], w[1])
        d[n-2] = weighted(n-3, n-2, w[n-4], w[n-3])
        d[n-1] = 0.5 * (3 * slope[n-2] - slope[n-3])
        for i in range(2, n-2):
            d[i] = weighted(i-1, i, w[i-2], w[i])

        return _hermite_coefficients(values, step, slope, d)


class HarmonicSplineInterpolator(Interpolator):
    """
    Harmonic spline interpolation (C1 sub-spline).

    Interior knot derivatives are weighted harmonic means of the adjacent
    slopes, zero at local extrema, which preserves monotonicity of the data.
    With fewer than 3 points the interpolation is linear.
    """

    def __init__(
        self,
        extrapolation: ExtrapolationMethod = ExtrapolationMethod.CONSTANT,
        monotonic_filtering: bool = False
    ):
        super().__init__(extrapolation)
        self.monotonic_filtering = monotonic_filtering

    def _build_coefficients(self, times, values):
        n = len(times)
        if n < 3:
            return LinearInterpolator._build_coefficients(self, times, values)

        step = np.diff(times)
        slope = np.diff(values) / step
        double_step = times[2:] - times[:-2]

        d = np.zeros(n)
        d[0] = ((2 * step[0] + step[1]) / double_step[0] * slope[0]
                - step[0] / double_step[0] * slope[1])
        d[n-1] = ((2 * step[n-2] + step[n-3]) / double_step[n-3] * slope[n-2]
                  - step[n-2] / double_step[n-3] * slope[n-3])

        if self.monotonic_filtering:
            d[0] = self._filter_boundary(d[0], slope[0], slope[1])
            d[n-1] = self._filter_boundary(d[n-1], slope[n-2], slope[n-3])

        for i in range(1, n-1):
            if slope[i-1] * slope[i] <= 0:
                d[i] = 0.0
            else:
                weighted_harmonic_mean = (
                    (step[i-1] + 2 * step[i]) / (3 * double_step[i-1] * slope[i-1])
                    + (2 * step[i-1] + step[i]) / (3 * double_step[i-1] * slope[i])
                )
                d[i] = 1.0 / weighted_harmonic_mean

        return _hermite_coefficients(values, step, slope, d)

    @staticmethod
    def _filter_boundary(derivative: float, slope: float, inner_slope: float) -> float:
        if derivative * slope > 0 and slope * inner_slope <= 0 and abs(derivative) < 3 * abs(slope):
            derivative = 3 * slope
        if derivative * slope <= 0:
            derivative = 0.0
        return derivative


def create_interpolator(
    method: InterpolationMethod,
    extrapolation: ExtrapolationMethod = ExtrapolationMethod.CONSTANT
) -> Interpolator:
    """
    Factory function to create an (unfitted) interpolator.

    Args:
        method: Interpolation method, enum member or its name
        extrapolation: Extrapolation method, enum member or its name

    Returns:
        Interpolator instance
    """
    if isinstance(method, str):
        method = InterpolationMethod.from_string(method)
    if isinstance(extrapolation, str):
        extrapolation = ExtrapolationMethod.from_string(extrapolation)

    if method in (InterpolationMethod.PIECEWISE_CONSTANT,
                  InterpolationMethod.PIECEWISE_CONSTANT_LEFTPOINT):
        return PiecewiseConstantInterpolator(extrapolation)
    if method == InterpolationMethod.PIECEWISE_CONSTANT_RIGHTPOINT:
        return PiecewiseConstantInterpolator(extrapolation, right_point=True)
    if method == InterpolationMethod.LINEAR:
        return LinearInterpolator(extrapolation)
    if method == InterpolationMethod.CUBIC_SPLINE:
        return CubicSplineInterpolator(extrapolation)
    if method == InterpolationMethod.AKIMA:
        return AkimaInterpolator(extrapolation)
    if method == InterpolationMethod.AKIMA_CONTINUOUS:
        return AkimaInterpolator(extrapolation, continuous=True)
    if method == InterpolationMethod.HARMONIC_SPLINE:
        return HarmonicSplineInterpolator(extrapolation)
    if method == InterpolationMethod.HARMONIC_SPLINE_WITH_MONOTONIC_FILTERING:
        return HarmonicSplineInterpolator(extrapolation, monotonic_filtering=True)
    raise ValueError(f"Unknown interpolation method: {method}")


__all__ = [
    "InterpolationMethod",
    "ExtrapolationMethod",
    "Interpolator",
    "PiecewiseConstantInterpolator",
    "LinearInterpolator",
    "CubicSplineInterpolator",
    "AkimaInterpolator",
    "HarmonicSplineInterpolator",
    "create_interpolator",
]
