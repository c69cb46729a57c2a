"""
Ordered point storage for interpolated curves.

Points are kept sorted by time and unique by time. Values are stored in
interpolation entity space; the store performs the conversion on insert.
"""

from bisect import bisect_left
from dataclasses import dataclass
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config import InterpolationEntity
from ..exceptions import ArityMismatchError, DuplicatePointError, InvalidAnchorError
from .entity import from_entity, to_entity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Point:
    """A single curve point."""
    time: float  # Model time
    value: float  # Entity space
    is_parameter: bool = False


class PointStore:
    """
    Sorted, time-unique collection of curve points.

    Attributes:
        entity: Interpolation entity used to convert natural values
    """

    def __init__(self, entity: InterpolationEntity, points: Optional[Sequence[Point]] = None):
        self.entity = entity
        self._points: List[Point] = list(points) if points is not None else []
        self._times: List[float] = [p.time for p in self._points]
        if any(t1 >= t2 for t1, t2 in zip(self._times, self._times[1:])):
            raise ValueError("Points must be strictly increasing in time")

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self):
        return iter(self._points)

    def insert(self, time: float, value: float, is_parameter: bool = False) -> bool:
        """
        Insert a point given its natural value.

        Args:
            time: Model time
            value: Natural value, converted to entity space before storing
            is_parameter: Whether the point belongs to the calibration vector

        Returns:
            True if the store changed, False for an identical re-insert or a
            skipped unit anchor

        Raises:
            DuplicatePointError: A point at ``time`` holds a different value
            InvalidAnchorError: Anchor rule of LOG_OF_VALUE_PER_TIME violated
        """
        time = float(time)
        value = float(value)

        if self.entity == InterpolationEntity.LOG_OF_VALUE_PER_TIME and time == 0.0:
            # value(0) = exp(x * 0) = 1 holds without storing the point
            if value == 1.0 and not is_parameter:
                return False
            raise InvalidAnchorError(
                f"Only a non-parameter value of 1.0 is allowed at time 0, received {value}"
                + (" flagged as parameter" if is_parameter else "")
            )

        entity_value = to_entity(self.entity, value, time)

        index = bisect_left(self._times, time)
        if index < len(self._times) and self._times[index] == time:
            existing = self._points[index]
            if existing.value == entity_value:
                return False
            raise DuplicatePointError(time, existing.value, entity_value)

        self._times.insert(index, time)
        self._points.insert(index, Point(time, entity_value, bool(is_parameter)))
        return True

    def find(self, time: float) -> Optional[Point]:
        """Point stored at exactly ``time``, if any."""
        index = bisect_left(self._times, time)
        if index < len(self._times) and self._times[index] == time:
            return self._points[index]
        return None

    def points(self) -> Tuple[Point, ...]:
        return tuple(self._points)

    def times(self) -> np.ndarray:
        return np.array(self._times, dtype=np.float64)

    def entity_values(self) -> np.ndarray:
        return np.array([p.value for p in self._points], dtype=np.float64)

    def parameter_points(self) -> List[Point]:
        return [p for p in self._points if p.is_parameter]

    def parameter_values(self) -> np.ndarray:
        """Natural values of parameter points in ascending time order."""
        params = self.parameter_points()
        if not params:
            return np.array([], dtype=np.float64)
        times = np.array([p.time for p in params])
        values = np.array([p.value for p in params])
        return np.asarray(from_entity(self.entity, values, times), dtype=np.float64)

    def with_parameter_values(self, values: Sequence[float]) -> "PointStore":
        """
        New independent store with parameter points replaced by ``values``.

        Non-parameter points are carried over unchanged.
        """
        values = np.asarray(values, dtype=np.float64).ravel()
        n_params = sum(1 for p in self._points if p.is_parameter)
        if len(values) != n_params:
            raise ArityMismatchError(n_params, len(values))

        new_points = []
        it = iter(values)
        for p in self._points:
            if p.is_parameter:
                v = next(it)
                new_points.append(Point(p.time, to_entity(self.entity, v, p.time), True))
            else:
                new_points.append(p)
        return PointStore(self.entity, new_points)

    def copy(self) -> "PointStore":
        # Points are frozen, so sharing them is safe
        return PointStore(self.entity, self._points)


__all__ = ["Point", "PointStore"]
