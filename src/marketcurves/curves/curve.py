"""
Curve interface and the interpolated base curve.

The Curve class provides:
- value(t, model) evaluation, optionally resolving other curves by name
- The calibration parameter vector and clones carrying a new vector
- Model time <-> date conversion around an optional reference date

InterpolatedCurve stores points in interpolation entity space and builds
its interpolation kernel lazily. Instances are immutable once built:
points are only added through a CurveBuilder, and with_parameters always
works on an independent copy.
"""

from abc import ABC, abstractmethod
import copy
from datetime import date
import logging
from typing import TYPE_CHECKING, Optional, Sequence, Tuple, Type, Union

import numpy as np

from ..config import InterpolationConfig
from ..conventions import date_from_time, time_from_date
from ..exceptions import ArityMismatchError, BuilderExhaustedError, CurveError
from .cache import EvaluationCache, LazyCell
from .entity import from_entity
from .interpolation import Interpolator, create_interpolator
from .points import Point, PointStore

if TYPE_CHECKING:
    from ..model import CurveRepository

logger = logging.getLogger(__name__)


class Curve(ABC):
    """
    A named function of model time.

    Attributes:
        name: Curve name, used for lookups through a model
        reference_date: Date of time 0, None for time-homogeneous curves
    """

    def __init__(self, name: str, reference_date: Optional[date] = None):
        self.name = name
        self.reference_date = reference_date

    @abstractmethod
    def value(self, t: float, model: Optional["CurveRepository"] = None) -> float:
        """
        Curve value at model time t.

        Args:
            t: Model time (year fraction from the reference date)
            model: Resolves other curves by name, where needed

        Returns:
            Curve value
        """

    def values(self, times: Sequence[float], model: Optional["CurveRepository"] = None) -> np.ndarray:
        """Element-wise value()."""
        return np.array([self.value(float(t), model) for t in np.asarray(times, dtype=np.float64).ravel()])

    def __call__(self, t: float, model: Optional["CurveRepository"] = None) -> float:
        return self.value(t, model)

    def parameters(self) -> np.ndarray:
        """Calibration parameter vector. Curves without free parameters return an empty array."""
        return np.array([], dtype=np.float64)

    def with_parameters(self, parameters: Sequence[float]) -> "Curve":
        """
        Curve carrying ``parameters`` as its calibration vector.

        The receiver is never modified.
        """
        parameters = np.asarray(parameters, dtype=np.float64).ravel()
        if len(parameters) != 0:
            raise ArityMismatchError(0, len(parameters))
        return self

    def builder(self) -> "CurveBuilder":
        """
        Builder seeded with this curve's points.

        Raises:
            CurveError: The curve is not built from points
        """
        raise CurveError(f"{type(self).__name__} {self.name} is not built from points and has no builder")

    def time_from_date(self, d: date) -> float:
        """Model time of a date (ACT/365 from the reference date)."""
        return time_from_date(self._require_reference_date(), d)

    def date_from_time(self, t: float) -> date:
        return date_from_time(self._require_reference_date(), t)

    def _require_reference_date(self) -> date:
        if self.reference_date is None:
            raise ValueError(f"Curve {self.name} has no reference date")
        return self.reference_date

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, reference_date={self.reference_date})"


class InterpolatedCurve(Curve):
    """
    Curve interpolating a sorted set of points.

    Values are interpolated in the space given by ``config.entity`` and
    transformed back on evaluation. Points flagged as parameters form the
    calibration vector, in ascending time order.

    Attributes:
        name: Curve name
        reference_date: Date of time 0
        config: Interpolation method, extrapolation method and entity

    Example:
        >>> curve = (InterpolatedCurve.create_builder("fixings", config=InterpolationConfig.fixings())
        ...          .add_point(0.0, 100.0).add_point(1.0, 102.0).build())
        >>> curve.value(0.5)
        102.0
    """

    def __init__(
        self,
        name: str,
        reference_date: Optional[date] = None,
        config: Optional[InterpolationConfig] = None,
        points: Optional[Sequence[Point]] = None
    ):
        """
        Args:
            name: Curve name
            reference_date: Date of time 0
            config: Interpolation configuration, default_config() if None
            points: Points in entity space, sorted by time

        Raises:
            ValueError: No points given
        """
        super().__init__(name, reference_date)
        self.config = config if config is not None else self.default_config()
        self._store = PointStore(self.config.entity, points)
        if len(self._store) == 0:
            raise ValueError(f"Curve {name} has no points")
        self._init_derived_state()

    @classmethod
    def default_config(cls) -> InterpolationConfig:
        return InterpolationConfig.default()

    @classmethod
    def create_builder(
        cls,
        name: str,
        reference_date: Optional[date] = None,
        config: Optional[InterpolationConfig] = None
    ) -> "CurveBuilder":
        """Empty builder for a curve of this class."""
        return CurveBuilder(cls, name, reference_date, config if config is not None else cls.default_config())

    @classmethod
    def from_points(
        cls,
        name: str,
        times: Sequence[float],
        values: Sequence[float],
        config: Optional[InterpolationConfig] = None,
        is_parameter: Optional[Sequence[bool]] = None,
        reference_date: Optional[date] = None
    ) -> "InterpolatedCurve":
        """
        Build a curve from natural values.

        Args:
            name: Curve name
            times: Model times, any order
            values: Natural values at ``times``
            config: Interpolation configuration
            is_parameter: Calibration flags, default all False
            reference_date: Date of time 0

        Returns:
            Built curve
        """
        if len(times) != len(values):
            raise ValueError("Times and values must have same length")
        if is_parameter is None:
            is_parameter = [False] * len(times)
        if len(is_parameter) != len(times):
            raise ValueError("is_parameter must have same length as times")

        builder = cls.create_builder(name, reference_date, config)
        for t, v, p in zip(times, values, is_parameter):
            builder.add_point(t, v, p)
        return builder.build()

    def _init_derived_state(self) -> None:
        self._kernel: LazyCell[Interpolator] = LazyCell(self._build_kernel)
        self._cache = EvaluationCache()

    def _build_kernel(self) -> Interpolator:
        logger.debug(
            "Building %s kernel for curve %s over %d points",
            self.config.method.name, self.name, len(self._store)
        )
        interpolator = create_interpolator(self.config.method, self.config.extrapolation)
        return interpolator.fit(self._store.times(), self._store.entity_values())

    def value(self, t: float, model: Optional["CurveRepository"] = None) -> float:
        return self._cache.get_or_compute(float(t), self._evaluate)

    def _evaluate(self, t: float) -> float:
        x = self._kernel.get().interpolate(t)
        return float(from_entity(self.config.entity, x, t))

    def values(self, times: Sequence[float], model: Optional["CurveRepository"] = None) -> np.ndarray:
        """Vectorised value(), bypassing the evaluation cache."""
        times = np.asarray(times, dtype=np.float64).ravel()
        x = self._kernel.get().interpolate_many(times)
        return np.asarray(from_entity(self.config.entity, x, times), dtype=np.float64)

    def parameters(self) -> np.ndarray:
        return self._store.parameter_values()

    def with_parameters(self, parameters: Sequence[float]) -> "InterpolatedCurve":
        """
        Independent copy with the parameter points set to ``parameters``.

        Returns the receiver itself when ``parameters`` equals the current
        vector exactly.

        Raises:
            ArityMismatchError: Wrong vector length
        """
        parameters = np.asarray(parameters, dtype=np.float64).ravel()
        current = self.parameters()
        if len(parameters) != len(current):
            raise ArityMismatchError(len(current), len(parameters))
        if np.array_equal(parameters, current):
            return self
        return self._with_store(self._store.with_parameter_values(parameters))

    def _with_store(self, store: PointStore) -> "InterpolatedCurve":
        clone = copy.copy(self)
        clone._store = store
        clone._init_derived_state()
        return clone

    def clone(self) -> "InterpolatedCurve":
        """Structurally independent copy of this curve."""
        return self._with_store(self._store.copy())

    def builder(self) -> "CurveBuilder":
        """Builder seeded with a copy of this curve's points."""
        return CurveBuilder(type(self), self.name, self.reference_date, self.config, self._store.points())

    def points(self) -> Tuple[Point, ...]:
        return self._store.points()

    def times(self) -> np.ndarray:
        return self._store.times()

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        lines = [
            f"{type(self).__name__}(name={self.name!r}, reference_date={self.reference_date}, "
            f"method={self.config.method.name}, extrapolation={self.config.extrapolation.name}, "
            f"entity={self.config.entity.name}, points={len(self._store)})"
        ]
        for p in self._store:
            natural = float(from_entity(self.config.entity, p.value, p.time))
            flag = " *" if p.is_parameter else ""
            lines.append(f"  {p.time:10.6f}  {natural:.10f}{flag}")
        return "\n".join(lines)


class CurveBuilder:
    """
    Collects points for a new interpolated curve.

    add_point calls may be chained; build() creates the curve and
    exhausts the builder.

    Attributes:
        name: Name of the curve to build
        reference_date: Date of time 0
        config: Interpolation configuration
    """

    def __init__(
        self,
        curve_class: Type[InterpolatedCurve],
        name: str,
        reference_date: Optional[date],
        config: InterpolationConfig,
        points: Sequence[Point] = ()
    ):
        self.curve_class = curve_class
        self.name = name
        self.reference_date = reference_date
        self.config = config
        self._store: Optional[PointStore] = PointStore(config.entity, points)

    def add_point(self, t: float, value: float, is_parameter: bool = False) -> "CurveBuilder":
        """
        Add a point given its natural value.

        Raises:
            DuplicatePointError: A different value is already stored at ``t``
            BuilderExhaustedError: build() was already called
        """
        self._require_store().insert(t, value, is_parameter)
        return self

    def add_points(
        self,
        times: Sequence[float],
        values: Sequence[float],
        is_parameter: Union[bool, Sequence[bool]] = False
    ) -> "CurveBuilder":
        if isinstance(is_parameter, bool):
            is_parameter = [is_parameter] * len(times)
        for t, v, p in zip(times, values, is_parameter):
            self.add_point(t, v, p)
        return self

    def __len__(self) -> int:
        return len(self._require_store())

    def build(self) -> InterpolatedCurve:
        """
        Create the curve.

        Raises:
            BuilderExhaustedError: build() was already called
            ValueError: No points were added
        """
        store = self._require_store()
        if len(store) == 0:
            raise ValueError(f"Curve {self.name} has no points")
        self._store = None
        return self.curve_class(self.name, self.reference_date, self.config, store.points())

    def _require_store(self) -> PointStore:
        if self._store is None:
            raise BuilderExhaustedError("Builder has already been used to build a curve")
        return self._store


__all__ = [
    "Curve",
    "InterpolatedCurve",
    "CurveBuilder",
]
