"""
Forward curves.

A forward curve maps a fixing time T to the simply compounded forward rate
F(T) of the period [T, T + o(T)], o being the payment offset. The offset is
either a fixed year fraction or derived from an offset code (e.g. "3M")
rolled on a business day calendar, memoized per fixing time.

ForwardCurve interpolates one of four entities (ForwardEntity):
- FORWARD: F itself, stored at the fixing time
- FORWARD_TIMES_DISCOUNTFACTOR: F(T) * P(T + o), P from a named discount curve
- ZERO: zero rate z with z(T+o)(T+o) - z(T)T = ln(1 + F o), stored at T + o
- DISCOUNTFACTOR: synthetic discount factor with P(T)/P(T+o) = 1 + F o,
  stored at T + o, anchored at P(0) = 1

ForwardCurveBuilder converts forwards into stored points one at a time. For
ZERO and DISCOUNTFACTOR a fixing past the last point is pinned first, so
that each forward is reproduced exactly by the built curve.
"""

from abc import abstractmethod
import copy
from datetime import date
from enum import Enum
import logging
from typing import TYPE_CHECKING, Dict, Optional, Sequence

import numpy as np

from ..config import InterpolationConfig
from ..conventions import BusinessDayConvention, DayCount, date_from_time, time_from_date, year_fraction
from ..dates import adjusted_date
from ..exceptions import BuilderExhaustedError, UnresolvedCurveError
from .curve import Curve, InterpolatedCurve
from .points import Point, PointStore

if TYPE_CHECKING:
    from ..model import CurveRepository

logger = logging.getLogger(__name__)


class ForwardEntity(Enum):
    """Quantity interpolated by a ForwardCurve."""
    FORWARD = "forward"
    FORWARD_TIMES_DISCOUNTFACTOR = "forward_times_discountfactor"
    ZERO = "zero"
    DISCOUNTFACTOR = "discountfactor"

    @classmethod
    def from_string(cls, s: str) -> "ForwardEntity":
        key = s.strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown forward entity: {s}") from None


class PaymentOffsets:
    """
    Year fraction from fixing time to payment time.

    Either a fixed offset, or the offset code rolled from each fixing date,
    memoized per fixing time.

    Attributes:
        name: Name of the curve the offsets belong to
        reference_date: Date of time 0, required for offset codes
        payment_offset: Fixed offset, None when derived from the code
        payment_offset_code: Offset code from fixing to payment date, e.g. "6M"
        business_day_convention: Roll applied to payment dates
        holidays: Holiday calendar for the roll
    """

    def __init__(
        self,
        name: str,
        reference_date: Optional[date] = None,
        payment_offset: Optional[float] = None,
        payment_offset_code: Optional[str] = None,
        business_day_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        holidays: Optional[set] = None
    ):
        if payment_offset is None and payment_offset_code is None:
            raise ValueError(f"Forward curve {name} needs a payment offset or a payment offset code")
        if payment_offset_code is not None and reference_date is None:
            raise ValueError(f"Forward curve {name} needs a reference date to use offset code {payment_offset_code}")

        self.name = name
        self.reference_date = reference_date
        self.payment_offset = payment_offset
        self.payment_offset_code = payment_offset_code
        self.business_day_convention = business_day_convention
        self.holidays = holidays
        self._memo: Dict[float, float] = {}

    def __call__(self, fixing_time: float) -> float:
        if self.payment_offset is not None:
            return self.payment_offset

        offset = self._memo.get(fixing_time)
        if offset is None:
            fixing_date = date_from_time(self.reference_date, fixing_time)
            payment_date = adjusted_date(
                fixing_date, self.payment_offset_code, self.business_day_convention, self.holidays
            )
            offset = time_from_date(self.reference_date, payment_date) - fixing_time
            logger.debug(
                "Curve %s: payment date %s for fixing %s (offset %.6f)",
                self.name, payment_date, fixing_date, offset
            )
            self._memo[fixing_time] = offset
        return offset

    def __contains__(self, fixing_time: float) -> bool:
        """True once the offset at ``fixing_time`` has been derived."""
        return fixing_time in self._memo


class AbstractForwardCurve(Curve):
    """
    Payment offset bookkeeping and forward accessors shared by forward curves.

    Attributes:
        name: Curve name
        reference_date: Date of time 0, required for offset codes
    """

    def __init__(
        self,
        name: str,
        reference_date: Optional[date] = None,
        payment_offset: Optional[float] = None,
        payment_offset_code: Optional[str] = None,
        business_day_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        holidays: Optional[set] = None
    ):
        super().__init__(name, reference_date)
        self._payment_offsets = PaymentOffsets(
            name, reference_date, payment_offset, payment_offset_code, business_day_convention, holidays
        )

    @property
    def payment_offset_code(self) -> Optional[str]:
        return self._payment_offsets.payment_offset_code

    @property
    def business_day_convention(self) -> BusinessDayConvention:
        return self._payment_offsets.business_day_convention

    @property
    def holidays(self) -> Optional[set]:
        return self._payment_offsets.holidays

    def payment_offset(self, fixing_time: float) -> float:
        """
        Year fraction from fixing time to payment time.

        Args:
            fixing_time: Model time of the fixing

        Returns:
            Payment offset
        """
        return self._payment_offsets(fixing_time)

    @abstractmethod
    def _forward(self, model: Optional["CurveRepository"], fixing_time: float) -> float:
        """Forward for the curve's own payment offset."""

    def forward(
        self,
        model: Optional["CurveRepository"],
        fixing_time: float,
        payment_offset: Optional[float] = None
    ) -> float:
        """
        Forward rate at a fixing time.

        Args:
            model: Resolves curves this curve depends on
            fixing_time: Model time of the fixing
            payment_offset: Period length of the requested forward; defaults
                to the curve's payment offset

        Returns:
            Simply compounded forward rate
        """
        forward = self._forward(model, fixing_time)
        if payment_offset is None:
            return forward

        curve_offset = self.payment_offset(fixing_time)
        if payment_offset != curve_offset:
            logger.warning(
                "Curve %s: forward requested with payment offset %s, curve uses %s",
                self.name, payment_offset, curve_offset
            )
            forward = (np.exp(np.log1p(forward * curve_offset) * payment_offset / curve_offset) - 1.0) / payment_offset
        return float(forward)

    def forwards(self, model: Optional["CurveRepository"], fixing_times: Sequence[float]) -> np.ndarray:
        return np.array([self.forward(model, float(t)) for t in np.asarray(fixing_times, dtype=np.float64).ravel()])

    def value(self, t: float, model: Optional["CurveRepository"] = None) -> float:
        return self.forward(model, float(t))


def _check_forward_entity(name: str, forward_entity: ForwardEntity, discount_curve_name: Optional[str]) -> None:
    if forward_entity == ForwardEntity.FORWARD_TIMES_DISCOUNTFACTOR and discount_curve_name is None:
        raise ValueError(f"Forward curve {name} interpolating {forward_entity.name} needs a discount curve name")


def _discount_factor_at_payment(
    model: Optional["CurveRepository"],
    discount_curve_name: str,
    payment_time: float
) -> float:
    if model is None:
        raise UnresolvedCurveError(discount_curve_name, "no model given")
    return model.get_discount_curve(discount_curve_name).value(payment_time, model)


class ForwardCurve(AbstractForwardCurve):
    """
    Interpolated forward curve.

    Owns an InterpolatedCurve holding the configured ForwardEntity. Default
    interpolation is linear in the entity with constant extrapolation.

    Example:
        >>> curve = ForwardCurve.from_forwards("EURIBOR6M", [0.5, 1.0], [0.02, 0.03], payment_offset=0.5)
        >>> round(curve.forward(None, 0.75), 6)
        0.025
    """

    def __init__(
        self,
        name: str,
        reference_date: Optional[date] = None,
        payment_offset: Optional[float] = None,
        payment_offset_code: Optional[str] = None,
        business_day_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        holidays: Optional[set] = None,
        forward_entity: ForwardEntity = ForwardEntity.FORWARD,
        discount_curve_name: Optional[str] = None,
        config: Optional[InterpolationConfig] = None,
        points: Optional[Sequence[Point]] = None
    ):
        """
        Args:
            points: Points of the stored entity, sorted by time; use
                create_builder() to build them from forwards

        Raises:
            ValueError: Missing payment offset, missing discount curve name
                or no points
        """
        super().__init__(
            name, reference_date, payment_offset, payment_offset_code, business_day_convention, holidays
        )
        _check_forward_entity(name, forward_entity, discount_curve_name)

        self.forward_entity = forward_entity
        self.discount_curve_name = discount_curve_name
        self._curve = InterpolatedCurve(
            name, reference_date, config if config is not None else InterpolationConfig.forward(), points
        )

    @property
    def config(self) -> InterpolationConfig:
        return self._curve.config

    @property
    def interpolated_curve(self) -> InterpolatedCurve:
        """Curve of the stored entity."""
        return self._curve

    @classmethod
    def create_builder(cls, name: str, **kwargs) -> "ForwardCurveBuilder":
        """Empty builder; ``kwargs`` are the constructor's settings (payment offset, entity, config, ...)."""
        return ForwardCurveBuilder(name, **kwargs)

    @classmethod
    def from_forwards(
        cls,
        name: str,
        fixing_times: Sequence[float],
        forwards: Sequence[float],
        model: Optional["CurveRepository"] = None,
        is_parameter: Optional[Sequence[bool]] = None,
        **kwargs
    ) -> "ForwardCurve":
        """
        Build a forward curve from forwards at fixing times.

        Args:
            name: Curve name
            fixing_times: Fixing times, ascending
            forwards: Forward rates
            model: Needed for FORWARD_TIMES_DISCOUNTFACTOR
            is_parameter: Calibration flags, default fixing_time > 0
            **kwargs: Passed to the constructor (payment offset, entity, config, ...)

        Returns:
            Built forward curve
        """
        if len(fixing_times) != len(forwards):
            raise ValueError("Fixing times and forwards must have same length")
        if is_parameter is None:
            is_parameter = [t > 0 for t in fixing_times]

        builder = cls.create_builder(name, **kwargs)
        for t, f, p in zip(fixing_times, forwards, is_parameter):
            builder.add_forward(float(t), float(f), p, model)
        return builder.build()

    @classmethod
    def from_discount_factors(
        cls,
        name: str,
        times: Sequence[float],
        discount_factors: Sequence[float],
        payment_offset: float,
        **kwargs
    ) -> "ForwardCurve":
        """
        Build from the forwards implied between consecutive discount factors.

        A first forward from t = 0 is added when the first time is positive.
        """
        times = np.asarray(times, dtype=np.float64)
        dfs = np.asarray(discount_factors, dtype=np.float64)
        if len(times) != len(dfs):
            raise ValueError("Times and discount factors must have same length")

        fixing_times = []
        forwards = []
        if times[0] > 0:
            fixing_times.append(0.0)
            forwards.append((1.0 / dfs[0] - 1.0) / times[0])
        for i in range(len(times) - 1):
            fixing_times.append(times[i])
            forwards.append((dfs[i] / dfs[i+1] - 1.0) / (times[i+1] - times[i]))

        return cls.from_forwards(name, fixing_times, forwards, payment_offset=payment_offset, **kwargs)

    def _forward(self, model: Optional["CurveRepository"], fixing_time: float) -> float:
        entity = self.forward_entity
        if entity == ForwardEntity.FORWARD:
            return self._curve.value(fixing_time)

        offset = self.payment_offset(fixing_time)
        payment_time = fixing_time + offset

        if entity == ForwardEntity.FORWARD_TIMES_DISCOUNTFACTOR:
            df = _discount_factor_at_payment(model, self.discount_curve_name, payment_time)
            return self._curve.value(fixing_time) / df
        if entity == ForwardEntity.ZERO:
            growth = self._curve.value(payment_time) * payment_time - self._curve.value(fixing_time) * fixing_time
            return float(np.expm1(growth) / offset)
        if entity == ForwardEntity.DISCOUNTFACTOR:
            return (self._curve.value(fixing_time) / self._curve.value(payment_time) - 1.0) / offset
        raise ValueError(f"Unknown forward entity: {entity}")

    def parameters(self) -> np.ndarray:
        """Stored entity values of the parameter points."""
        return self._curve.parameters()

    def with_parameters(self, parameters: Sequence[float]) -> "ForwardCurve":
        new_curve = self._curve.with_parameters(parameters)
        if new_curve is self._curve:
            return self
        return self._with_curve(new_curve)

    def _with_curve(self, curve: InterpolatedCurve) -> "ForwardCurve":
        clone = copy.copy(self)
        clone._curve = curve
        return clone

    def builder(self) -> "ForwardCurveBuilder":
        """Builder seeded with this curve's settings and points."""
        offsets = self._payment_offsets
        return ForwardCurveBuilder(
            self.name, self.reference_date, offsets.payment_offset, offsets.payment_offset_code,
            offsets.business_day_convention, offsets.holidays, self.forward_entity,
            self.discount_curve_name, self.config, self._curve.points()
        )

    def __repr__(self) -> str:
        return (f"ForwardCurve(name={self.name!r}, reference_date={self.reference_date}, "
                f"entity={self.forward_entity.name}, points={len(self._curve)})")


class ForwardCurveBuilder:
    """
    Converts forwards into points of the stored entity.

    Points are collected in a private store; build() creates the
    ForwardCurve once and exhausts the builder.
    """

    def __init__(
        self,
        name: str,
        reference_date: Optional[date] = None,
        payment_offset: Optional[float] = None,
        payment_offset_code: Optional[str] = None,
        business_day_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        holidays: Optional[set] = None,
        forward_entity: ForwardEntity = ForwardEntity.FORWARD,
        discount_curve_name: Optional[str] = None,
        config: Optional[InterpolationConfig] = None,
        points: Sequence[Point] = ()
    ):
        self._payment_offsets = PaymentOffsets(
            name, reference_date, payment_offset, payment_offset_code, business_day_convention, holidays
        )
        _check_forward_entity(name, forward_entity, discount_curve_name)

        self.name = name
        self.reference_date = reference_date
        self.forward_entity = forward_entity
        self.discount_curve_name = discount_curve_name
        self.config = config if config is not None else InterpolationConfig.forward()
        self._store: Optional[PointStore] = PointStore(self.config.entity, points)
        if forward_entity == ForwardEntity.DISCOUNTFACTOR:
            self._store.insert(0.0, 1.0, False)

    def add_forward(
        self,
        fixing_time: float,
        forward: float,
        is_parameter: bool = False,
        model: Optional["CurveRepository"] = None
    ) -> "ForwardCurveBuilder":
        """
        Add a forward given at a fixing time.

        Args:
            fixing_time: Model time of the fixing
            forward: Forward rate for the curve's payment offset
            is_parameter: Whether the stored point is a calibration parameter
            model: Resolves the discount curve for FORWARD_TIMES_DISCOUNTFACTOR

        Raises:
            BuilderExhaustedError: build() was already called
        """
        store = self._require_store()
        entity = self.forward_entity
        if entity == ForwardEntity.FORWARD:
            store.insert(fixing_time, forward, is_parameter)
            return self

        offset = self._payment_offsets(fixing_time)
        payment_time = fixing_time + offset

        if entity == ForwardEntity.FORWARD_TIMES_DISCOUNTFACTOR:
            df = _discount_factor_at_payment(model, self.discount_curve_name, payment_time)
            store.insert(fixing_time, forward * df, is_parameter)
        elif entity == ForwardEntity.ZERO:
            start = self._fixing_value(fixing_time) * fixing_time
            zero = (start + np.log1p(forward * offset)) / payment_time
            store.insert(payment_time, zero, is_parameter)
        elif entity == ForwardEntity.DISCOUNTFACTOR:
            df = self._fixing_value(fixing_time) / (1.0 + forward * offset)
            store.insert(payment_time, df, is_parameter)
        else:
            raise ValueError(f"Unknown forward entity: {entity}")
        return self

    def _fixing_value(self, fixing_time: float) -> float:
        """
        Stored entity at a fixing time, interpolated over the points added so far.

        A fixing beyond the last point is pinned by a non-parameter point, so
        that later forwards leave the value at the fixing unchanged.
        """
        store = self._store
        if len(store) == 0:
            # z(0) * 0 = 0 and P(0) = 1, the latter implied for LOG_OF_VALUE_PER_TIME
            value = 0.0 if self.forward_entity == ForwardEntity.ZERO else 1.0
        else:
            value = InterpolatedCurve(self.name, self.reference_date, self.config, store.points()).value(fixing_time)
        if fixing_time > 0 and (len(store) == 0 or fixing_time > store.times()[-1]):
            store.insert(fixing_time, value, False)
        return value

    def __len__(self) -> int:
        return len(self._require_store())

    def build(self) -> ForwardCurve:
        """
        Create the forward curve.

        Raises:
            BuilderExhaustedError: build() was already called
            ValueError: No forwards were added
        """
        store = self._require_store()
        if len(store) == 0:
            raise ValueError(f"Curve {self.name} has no points")
        self._store = None
        offsets = self._payment_offsets
        return ForwardCurve(
            self.name, self.reference_date, offsets.payment_offset, offsets.payment_offset_code,
            offsets.business_day_convention, offsets.holidays, self.forward_entity,
            self.discount_curve_name, self.config, store.points()
        )

    def _require_store(self) -> PointStore:
        if self._store is None:
            raise BuilderExhaustedError("Builder has already been used to build a curve")
        return self._store


class ForwardCurveFromDiscountCurve(AbstractForwardCurve):
    """
    Forward curve implied by a discount curve.

        F(T) = (P(T + s) / P(T + o + s) - 1) / dcf

    where s is the period offset and dcf is the day count fraction of the
    period, or o * time_scaling without a day count.

    Attributes:
        reference_discount_curve_name: Discount curve resolved through the model
        day_count: Optional day count of the accrual period
        time_scaling: Scaling of the payment offset without a day count
        period_offset: Shift s of the forward period
    """

    def __init__(
        self,
        reference_discount_curve_name: str,
        name: Optional[str] = None,
        reference_date: Optional[date] = None,
        payment_offset: Optional[float] = None,
        payment_offset_code: Optional[str] = None,
        business_day_convention: BusinessDayConvention = BusinessDayConvention.FOLLOWING,
        holidays: Optional[set] = None,
        day_count: Optional[DayCount] = None,
        time_scaling: float = 1.0,
        period_offset: float = 0.0
    ):
        super().__init__(
            name if name is not None else f"ForwardCurveFromDiscountCurve({reference_discount_curve_name})",
            reference_date, payment_offset, payment_offset_code, business_day_convention, holidays
        )
        if day_count is not None and reference_date is None:
            raise ValueError("A day count needs a reference date")
        self.reference_discount_curve_name = reference_discount_curve_name
        self.day_count = day_count
        self.time_scaling = time_scaling
        self.period_offset = period_offset

    def _forward(self, model: Optional["CurveRepository"], fixing_time: float) -> float:
        if model is None:
            raise UnresolvedCurveError(self.reference_discount_curve_name, "no model given")
        discount_curve = model.get_discount_curve(self.reference_discount_curve_name)

        start = fixing_time + self.period_offset
        offset = self.payment_offset(start)
        end = start + offset

        if self.day_count is not None:
            dcf = year_fraction(self.date_from_time(start), self.date_from_time(end), self.day_count)
        else:
            dcf = offset * self.time_scaling

        return (discount_curve.value(start, model) / discount_curve.value(end, model) - 1.0) / dcf


__all__ = [
    "ForwardEntity",
    "PaymentOffsets",
    "AbstractForwardCurve",
    "ForwardCurve",
    "ForwardCurveBuilder",
    "ForwardCurveFromDiscountCurve",
]
