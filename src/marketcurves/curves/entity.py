"""
Value transform between a curve's natural values and its interpolation entity.

    VALUE:                  x = v                       v = x
    LOG_OF_VALUE:           x = ln(max(v, 0))           v = exp(x)
    LOG_OF_VALUE_PER_TIME:  x = ln(max(v, 0)) / t       v = exp(x * t)

Under LOG_OF_VALUE_PER_TIME the only value allowed at t = 0 is 1.0, which is
exactly what the inverse transform returns there.
"""

import logging
from typing import Union

import numpy as np

from ..config import InterpolationEntity
from ..exceptions import InvalidAnchorError

logger = logging.getLogger(__name__)

ArrayLike = Union[float, np.ndarray]


def to_entity(entity: InterpolationEntity, value: float, time: float) -> float:
    """
    Convert a natural value at ``time`` into interpolation entity space.

    Args:
        entity: Interpolation entity of the curve
        value: Natural value (e.g. a discount factor)
        time: Model time of the value

    Returns:
        Entity value; -inf for non-positive values under a log entity

    Raises:
        InvalidAnchorError: LOG_OF_VALUE_PER_TIME at time 0 with a value other than 1.0
    """
    if entity == InterpolationEntity.VALUE:
        return float(value)

    if value <= 0.0:
        logger.warning("Non-positive value %s at time %s under %s", value, time, entity.name)

    if entity == InterpolationEntity.LOG_OF_VALUE:
        return _safe_log(value)

    if entity == InterpolationEntity.LOG_OF_VALUE_PER_TIME:
        if time == 0.0:
            raise InvalidAnchorError(
                f"Value at time 0 must be 1.0 for {entity.name}, received {value}"
            )
        return _safe_log(value) / time

    raise ValueError(f"Unknown interpolation entity: {entity}")


def from_entity(entity: InterpolationEntity, x: ArrayLike, time: ArrayLike) -> ArrayLike:
    """Convert entity values back to natural values; accepts scalars or arrays."""
    if entity == InterpolationEntity.VALUE:
        return x
    if entity == InterpolationEntity.LOG_OF_VALUE:
        return np.exp(x)
    if entity == InterpolationEntity.LOG_OF_VALUE_PER_TIME:
        return np.exp(np.multiply(x, time))
    raise ValueError(f"Unknown interpolation entity: {entity}")


def _safe_log(value: float) -> float:
    if value <= 0.0:
        return float("-inf")
    return float(np.log(value))


__all__ = ["InterpolationEntity", "to_entity", "from_entity"]
