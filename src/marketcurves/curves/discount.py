"""
Discount curves.

The discount curve family provides:
- Discount factor P(0,t), with P(0,0) = 1 and P(0,t) = 0 for t < 0
- Zero rate z(t) = -ln(P(0,t)) / t
- Simple forward rate f(t1, t2)

DiscountCurve interpolates discount factors, by default linearly in the
zero rate (LOG_OF_VALUE_PER_TIME). DiscountCurveFromForwardCurve chains the
single-period discount factors implied by a forward curve.
"""

from abc import abstractmethod
from datetime import date
import logging
from typing import TYPE_CHECKING, Optional, Sequence, Union

import numpy as np

from ..config import InterpolationConfig, ZERO_RATE_EPSILON
from ..conventions import CompoundingConvention
from ..exceptions import NonPositiveOffsetError, UnresolvedCurveError
from .curve import Curve, InterpolatedCurve
from .forward import AbstractForwardCurve

if TYPE_CHECKING:
    from ..model import CurveRepository

logger = logging.getLogger(__name__)


class AbstractDiscountCurve(Curve):
    """
    Common discount factor, zero rate and forward rate accessors.

    Subclasses implement _discount_factor for t > 0.
    """

    def value(self, t: float, model: Optional["CurveRepository"] = None) -> float:
        if t < 0:
            return 0.0
        if t == 0:
            return 1.0
        return self._discount_factor(float(t), model)

    @abstractmethod
    def _discount_factor(self, t: float, model: Optional["CurveRepository"]) -> float:
        """Discount factor for t > 0."""

    def discount_factor(self, t: Union[float, date], model: Optional["CurveRepository"] = None) -> float:
        """
        Get discount factor P(0,t).

        Args:
            t: Model time or date
            model: Resolves curves this curve depends on

        Returns:
            Discount factor
        """
        if isinstance(t, date):
            t = self.time_from_date(t)
        return self.value(t, model)

    def discount_factors(self, times: Sequence[float], model: Optional["CurveRepository"] = None) -> np.ndarray:
        return self.values(times, model)

    def zero_rate(
        self,
        t: Union[float, date],
        model: Optional["CurveRepository"] = None,
        compounding: CompoundingConvention = CompoundingConvention.CONTINUOUS
    ) -> float:
        """
        Get zero rate z(t).

        At t = 0 the rate is evaluated at a tiny positive time instead.

        Args:
            t: Model time or date
            model: Resolves curves this curve depends on
            compounding: Compounding convention for output

        Returns:
            Zero rate (default continuously compounded)
        """
        if isinstance(t, date):
            t = self.time_from_date(t)
        if t == 0:
            t = ZERO_RATE_EPSILON

        zr_cont = -np.log(self.value(t, model)) / t

        # Convert to requested compounding
        if compounding == CompoundingConvention.CONTINUOUS:
            return float(zr_cont)
        elif compounding == CompoundingConvention.ANNUAL:
            return float(np.exp(zr_cont) - 1)
        elif compounding == CompoundingConvention.SEMI_ANNUAL:
            return float(2 * (np.exp(zr_cont / 2) - 1))
        elif compounding == CompoundingConvention.QUARTERLY:
            return float(4 * (np.exp(zr_cont / 4) - 1))
        else:
            raise ValueError(f"Unknown compounding: {compounding}")

    def zero_rates(self, times: Sequence[float], model: Optional["CurveRepository"] = None) -> np.ndarray:
        return np.array([self.zero_rate(float(t), model) for t in np.asarray(times, dtype=np.float64).ravel()])

    def forward_rate(self, t1: float, t2: float, model: Optional["CurveRepository"] = None) -> float:
        """Simply compounded forward rate between t1 and t2."""
        if t2 <= t1:
            raise ValueError("t2 must be greater than t1")
        df1 = self.value(t1, model)
        df2 = self.value(t2, model)
        return (df1 / df2 - 1) / (t2 - t1)


class DiscountCurve(AbstractDiscountCurve, InterpolatedCurve):
    """
    Interpolated discount curve.

    Conventions:
        - Times are ACT/365 year fractions from the reference date
        - Default interpolation is linear in the zero rate with constant
          extrapolation
        - A point at t = 0 must be 1.0 and is implied, not stored

    Example:
        >>> curve = DiscountCurve.from_discount_factors("EUR", [1.0, 2.0], [0.95, 0.90])
        >>> round(curve.discount_factor(0.5), 5)
        0.97468
    """

    @classmethod
    def default_config(cls) -> InterpolationConfig:
        return InterpolationConfig.discount()

    def _discount_factor(self, t: float, model: Optional["CurveRepository"]) -> float:
        return InterpolatedCurve.value(self, t, model)

    def values(self, times: Sequence[float], model: Optional["CurveRepository"] = None) -> np.ndarray:
        times = np.asarray(times, dtype=np.float64).ravel()
        dfs = InterpolatedCurve.values(self, times, model)
        return np.where(times < 0, 0.0, np.where(times == 0, 1.0, dfs))

    @classmethod
    def from_discount_factors(
        cls,
        name: str,
        times: Sequence[float],
        discount_factors: Sequence[float],
        is_parameter: Optional[Sequence[bool]] = None,
        config: Optional[InterpolationConfig] = None,
        reference_date: Optional[date] = None
    ) -> "DiscountCurve":
        """
        Build a discount curve from discount factors.

        Points with t > 0 are calibration parameters unless ``is_parameter``
        says otherwise.
        """
        if is_parameter is None:
            is_parameter = [t > 0 for t in times]
        return cls.from_points(
            name, times, discount_factors,
            config=config, is_parameter=is_parameter, reference_date=reference_date
        )

    @classmethod
    def from_zero_rates(
        cls,
        name: str,
        times: Sequence[float],
        zero_rates: Sequence[float],
        is_parameter: Optional[Sequence[bool]] = None,
        config: Optional[InterpolationConfig] = None,
        reference_date: Optional[date] = None
    ) -> "DiscountCurve":
        """Build from continuously compounded zero rates, P = exp(-r t)."""
        times = np.asarray(times, dtype=np.float64)
        dfs = np.exp(-np.asarray(zero_rates, dtype=np.float64) * times)
        return cls.from_discount_factors(name, times, dfs, is_parameter, config, reference_date)

    @classmethod
    def from_annualized_zero_rates(
        cls,
        name: str,
        times: Sequence[float],
        zero_rates: Sequence[float],
        is_parameter: Optional[Sequence[bool]] = None,
        config: Optional[InterpolationConfig] = None,
        reference_date: Optional[date] = None
    ) -> "DiscountCurve":
        """Build from annually compounded zero rates, P = (1 + r)^-t."""
        times = np.asarray(times, dtype=np.float64)
        dfs = np.power(1.0 + np.asarray(zero_rates, dtype=np.float64), -times)
        return cls.from_discount_factors(name, times, dfs, is_parameter, config, reference_date)

    @classmethod
    def from_forward_rates(
        cls,
        name: str,
        tenor: Sequence[float],
        forward_rates: Sequence[float],
        config: Optional[InterpolationConfig] = None,
        reference_date: Optional[date] = None
    ) -> "DiscountCurve":
        """
        Build by chaining simple forward rates over a tenor grid.

        Args:
            name: Curve name
            tenor: Period boundaries T_0 < ... < T_n
            forward_rates: n forward rates, one per period
            config: Interpolation configuration
            reference_date: Date of time 0

        Returns:
            Discount curve with P(T_0) = 1 and P(T_{i+1}) = P(T_i) / (1 + F_i (T_{i+1} - T_i))
        """
        tenor = np.asarray(tenor, dtype=np.float64)
        if len(forward_rates) != len(tenor) - 1:
            raise ValueError("Need one forward rate per tenor period")

        df = 1.0
        dfs = [df]
        for forward, dt in zip(forward_rates, np.diff(tenor)):
            df /= 1.0 + forward * dt
            dfs.append(df)
        return cls.from_discount_factors(name, tenor, dfs, config=config, reference_date=reference_date)

    def bump_parallel(self, bp: float) -> "DiscountCurve":
        """
        Create a new curve with all parameter zero rates shifted.

        Args:
            bp: Bump size in basis points

        Returns:
            New bumped curve
        """
        bump = bp / 10000.0  # Convert bp to decimal
        times = np.array([p.time for p in self._store.parameter_points()])
        return self.with_parameters(self.parameters() * np.exp(-bump * times))


def create_flat_curve(
    name: str,
    rate: float,
    max_tenor_years: float = 30.0,
    reference_date: Optional[date] = None
) -> DiscountCurve:
    """
    Create a flat discount curve.

    Args:
        name: Curve name
        rate: Flat continuously compounded rate
        max_tenor_years: Maximum tenor in years
        reference_date: Date of time 0

    Returns:
        Flat curve
    """
    times = [t for t in [0.25, 0.5, 1, 2, 5, 10, 20] if t < max_tenor_years] + [max_tenor_years]
    return DiscountCurve.from_zero_rates(name, times, [rate] * len(times), reference_date=reference_date)


class DiscountCurveFromForwardCurve(AbstractDiscountCurve):
    """
    Discount curve implied by a forward curve.

        P(T) = prod_i 1 / (1 + F(t_i) * min(o(t_i), T - t_i) * scaling)

    with t_0 = 0 and t_{i+1} = t_i + o(t_i), o being the forward curve's
    payment offset.

    Attributes:
        forward_curve_name: Name of the forward curve, resolved through the model
            unless the curve itself was given
        time_scaling: Scaling applied to each period length
        time_offset: Shift applied to fixing times on the forward curve
    """

    def __init__(
        self,
        forward_curve: Union[str, AbstractForwardCurve],
        time_scaling: float = 1.0,
        time_offset: float = 0.0,
        name: Optional[str] = None,
        reference_date: Optional[date] = None
    ):
        if isinstance(forward_curve, str):
            self.forward_curve_name = forward_curve
            self._forward_curve: Optional[AbstractForwardCurve] = None
        else:
            self.forward_curve_name = forward_curve.name
            self._forward_curve = forward_curve
            if reference_date is None:
                reference_date = forward_curve.reference_date

        super().__init__(
            name if name is not None else f"DiscountCurveFromForwardCurve({self.forward_curve_name})",
            reference_date
        )
        self.time_scaling = time_scaling
        self.time_offset = time_offset

    def _resolve_forward_curve(self, model: Optional["CurveRepository"]) -> AbstractForwardCurve:
        if self._forward_curve is not None:
            return self._forward_curve
        if model is None:
            raise UnresolvedCurveError(self.forward_curve_name, "no model given")
        return model.get_forward_curve(self.forward_curve_name)

    def _discount_factor(self, t: float, model: Optional["CurveRepository"]) -> float:
        forward_curve = self._resolve_forward_curve(model)

        df = 1.0
        time = 0.0
        while time < t:
            fixing_time = time + self.time_offset
            offset = forward_curve.payment_offset(fixing_time)
            if offset <= 0:
                raise NonPositiveOffsetError(
                    f"Forward curve {forward_curve.name} has payment offset {offset} at time {fixing_time}"
                )
            forward = forward_curve.forward(model, fixing_time)
            df /= 1.0 + forward * min(offset, t - time) * self.time_scaling
            time += offset
        return df

    def parameters(self) -> np.ndarray:
        if self._forward_curve is None:
            return np.array([], dtype=np.float64)
        return self._forward_curve.parameters()

    def with_parameters(self, parameters: Sequence[float]) -> "DiscountCurveFromForwardCurve":
        """Parameters of an owned forward curve; a curve referenced by name has none."""
        if self._forward_curve is None:
            return super().with_parameters(parameters)
        new_forward = self._forward_curve.with_parameters(parameters)
        if new_forward is self._forward_curve:
            return self
        return DiscountCurveFromForwardCurve(
            new_forward, self.time_scaling, self.time_offset, self.name, self.reference_date
        )


__all__ = [
    "AbstractDiscountCurve",
    "DiscountCurve",
    "DiscountCurveFromForwardCurve",
    "create_flat_curve",
]
