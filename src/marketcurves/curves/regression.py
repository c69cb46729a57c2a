"""
Curve estimation by local linear regression with a discrete kernel.

Given samples (X_i, Y_i) and a partition x_0 < ... < x_n, the estimated
curve is continuous and piecewise linear with knot values c_0, ..., c_n.
Each interval r carries the line through c_r with the interval's slope,
and is fitted to all samples weighted by the kernel at its reference point
rho_r = x_r + w (x_{r+1} - x_r):

    min  sum_i sum_r K((rho_r - X_i) / h) * (Y_i - c_r - s_r (X_i - x_r))^2

with h the bandwidth and s_r = (c_{r+1} - c_r) / (x_{r+1} - x_r). The
minimisation is linear in (c_0, s_0, ..., s_{n-1}) and solved through its
normal equations. The result is interpolated linearly between the knots
with constant extrapolation.

Reference: Beier, Fries (2017), https://ssrn.com/abstract=3073942
"""

from datetime import date
from enum import Enum
import logging
from typing import Optional, Sequence

import numpy as np
from scipy import linalg, stats

from ..config import ExtrapolationMethod, InterpolationConfig, InterpolationEntity, InterpolationMethod
from .cache import LazyCell
from .curve import InterpolatedCurve

logger = logging.getLogger(__name__)


class KernelType(Enum):
    """Kernel density used to weight samples."""
    NORMAL = "normal"
    LAPLACE = "laplace"
    CAUCHY = "cauchy"


_KERNELS = {
    KernelType.NORMAL: stats.norm,
    KernelType.LAPLACE: stats.laplace,
    KernelType.CAUCHY: stats.cauchy,
}


class Partition:
    """
    Sorted knot points with one reference point per interval.

    Attributes:
        points: Knot points, ascending
        weight: Position of each reference point within its interval, in [0, 1]
        interval_lengths: x_{r+1} - x_r
        reference_points: x_r + weight * (x_{r+1} - x_r)
    """

    def __init__(self, points: Sequence[float], weight: float):
        points = np.sort(np.asarray(points, dtype=np.float64).ravel())
        if len(points) < 2:
            raise ValueError("A partition needs at least 2 points")
        if np.any(np.diff(points) <= 0):
            raise ValueError("Partition points must be distinct")
        if not 0.0 <= weight <= 1.0:
            raise ValueError(f"Partition weight must lie in [0, 1], received {weight}")

        self.points = points
        self.weight = weight
        self.interval_lengths = np.diff(points)
        self.reference_points = points[:-1] + weight * self.interval_lengths

    def __len__(self) -> int:
        return len(self.points)


class CurveEstimation:
    """
    Local linear regression of dependent on independent values.

    The regression curve is estimated once, on first request.

    Example:
        >>> x = [0.5, 1.0, 2.0, 3.0]
        >>> estimation = CurveEstimation(None, 1.0, x, [1.0 + 2.0 * v for v in x], [0.0, 1.0, 3.0], 0.5)
        >>> round(estimation.regression_curve().value(2.5), 10)
        6.0
    """

    def __init__(
        self,
        reference_date: Optional[date],
        bandwidth: float,
        independent_values: Sequence[float],
        dependent_values: Sequence[float],
        partition_values: Sequence[float],
        weight: float,
        kernel: KernelType = KernelType.NORMAL,
        name: str = "RegressionCurve"
    ):
        """
        Args:
            reference_date: Date of time 0 of the regression curve
            bandwidth: Kernel bandwidth h
            independent_values: Samples X
            dependent_values: Samples Y
            partition_values: Knot points; must cover the range of X
            weight: Position of the kernel reference point within each interval
            kernel: Kernel density
            name: Name of the regression curve

        Raises:
            ValueError: Invalid bandwidth, samples or partition
        """
        if not bandwidth > 0:
            raise ValueError(f"Bandwidth must be positive, received {bandwidth}")

        self.independent_values = np.asarray(independent_values, dtype=np.float64).ravel()
        self.dependent_values = np.asarray(dependent_values, dtype=np.float64).ravel()
        if len(self.independent_values) != len(self.dependent_values):
            raise ValueError("Independent and dependent values must have same length")
        if len(self.independent_values) == 0:
            raise ValueError("Need at least 1 sample for a regression")

        self.partition = Partition(partition_values, weight)
        if (self.partition.points[0] > self.independent_values.min()
                or self.partition.points[-1] < self.independent_values.max()):
            raise ValueError("Partition must cover the range of the independent values")

        self.reference_date = reference_date
        self.bandwidth = bandwidth
        self.kernel = kernel
        self.name = name
        self._curve: LazyCell[InterpolatedCurve] = LazyCell(self._estimate)

    def regression_curve(self) -> InterpolatedCurve:
        """Piecewise linear curve through the estimated knot values."""
        return self._curve.get()

    def knot_values(self) -> np.ndarray:
        """Estimated curve values at the partition points."""
        return self.regression_curve().values(self.partition.points)

    def _estimate(self) -> InterpolatedCurve:
        partition = self.partition
        knots = partition.points
        lengths = partition.interval_lengths
        x = self.independent_values
        n = len(lengths)

        # weights[i, r]: kernel of sample i at the reference point of interval r
        density = _KERNELS[self.kernel].pdf
        weights = density((partition.reference_points[np.newaxis, :] - x[:, np.newaxis]) / self.bandwidth)

        # design[i, r]: gradient of line r at X_i with respect to (c_0, s_0, ..., s_{n-1}),
        # c_r = c_0 + sum_{q < r} s_q * length_q
        base = np.zeros((n, n + 1))
        base[:, 0] = 1.0
        base[:, 1:] = np.tril(np.tile(lengths, (n, 1)), k=-1)
        design = np.repeat(base[np.newaxis, :, :], len(x), axis=0)
        design[:, np.arange(n), np.arange(n) + 1] = x[:, np.newaxis] - knots[np.newaxis, :-1]

        lhs = np.einsum("ir,irj,irk->jk", weights, design, design)
        rhs = np.einsum("ir,irj,i->j", weights, design, self.dependent_values)
        solution = linalg.solve(lhs, rhs, assume_a="sym")

        values = solution[0] + np.concatenate([[0.0], np.cumsum(solution[1:] * lengths)])
        logger.debug(
            "Estimated %s from %d samples over %d knots (%s kernel, bandwidth %s)",
            self.name, len(x), len(knots), self.kernel.name, self.bandwidth
        )
        return InterpolatedCurve.from_points(
            self.name, knots, values,
            config=InterpolationConfig(
                method=InterpolationMethod.LINEAR,
                extrapolation=ExtrapolationMethod.CONSTANT,
                entity=InterpolationEntity.VALUE
            ),
            reference_date=self.reference_date
        )


__all__ = [
    "KernelType",
    "Partition",
    "CurveEstimation",
]
