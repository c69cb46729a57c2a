"""
Library defaults for curve construction.

Holds the interpolation enumerations, the InterpolationConfig container with
the standard presets per curve type, and the numeric constants shared by
the curve family.
"""

from dataclasses import dataclass
from enum import Enum


# Model time basis (ACT/365 year fractions from the reference date)
DAYS_PER_YEAR = 365.0

# Zero rate at t=0 is evaluated at this time instead
ZERO_RATE_EPSILON = 1e-14

# Maximum number of memoized evaluations held per curve
EVALUATION_CACHE_SIZE = 4096

SEASONAL_MONTHS = 12


class _ParseableEnum(Enum):

    @classmethod
    def from_string(cls, s: str):
        """Parse a member by name, case-insensitive, '-' or ' ' accepted for '_'."""
        key = s.strip().upper().replace("-", "_").replace(" ", "_")
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown {cls.__name__}: {s}") from None


class InterpolationMethod(_ParseableEnum):
    """Interpolation rule applied between stored points."""
    PIECEWISE_CONSTANT = "piecewise_constant"
    PIECEWISE_CONSTANT_LEFTPOINT = "piecewise_constant_leftpoint"
    PIECEWISE_CONSTANT_RIGHTPOINT = "piecewise_constant_rightpoint"
    LINEAR = "linear"
    CUBIC_SPLINE = "cubic_spline"
    AKIMA = "akima"
    AKIMA_CONTINUOUS = "akima_continuous"
    HARMONIC_SPLINE = "harmonic_spline"
    HARMONIC_SPLINE_WITH_MONOTONIC_FILTERING = "harmonic_spline_with_monotonic_filtering"


class ExtrapolationMethod(_ParseableEnum):
    """Rule applied outside the range of stored points."""
    DEFAULT = "default"
    CONSTANT = "constant"
    LINEAR = "linear"


class InterpolationEntity(_ParseableEnum):
    """Space in which curve values are stored and interpolated."""
    VALUE = "value"
    LOG_OF_VALUE = "log_of_value"
    LOG_OF_VALUE_PER_TIME = "log_of_value_per_time"


@dataclass(frozen=True)
class InterpolationConfig:
    """
    Interpolation configuration of a curve, fixed for the curve's lifetime.

    Attributes:
        method: Interpolation rule between points
        extrapolation: Rule outside the point range
        entity: Space in which values are interpolated
    """
    method: InterpolationMethod = InterpolationMethod.CUBIC_SPLINE
    extrapolation: ExtrapolationMethod = ExtrapolationMethod.CONSTANT
    entity: InterpolationEntity = InterpolationEntity.LOG_OF_VALUE

    @classmethod
    def default(cls) -> "InterpolationConfig":
        """Generic interpolated curve."""
        return cls()

    @classmethod
    def discount(cls) -> "InterpolationConfig":
        """Discount curves: linear in zero rate, i.e. log-linear in discount factor per time."""
        return cls(
            method=InterpolationMethod.LINEAR,
            extrapolation=ExtrapolationMethod.CONSTANT,
            entity=InterpolationEntity.LOG_OF_VALUE_PER_TIME
        )

    @classmethod
    def forward(cls) -> "InterpolationConfig":
        """Forward curves: linear in the forward rate."""
        return cls(
            method=InterpolationMethod.LINEAR,
            extrapolation=ExtrapolationMethod.CONSTANT,
            entity=InterpolationEntity.VALUE
        )

    @classmethod
    def fixings(cls) -> "InterpolationConfig":
        """Historical index fixings: between two fixings the later one applies."""
        return cls(
            method=InterpolationMethod.PIECEWISE_CONSTANT_RIGHTPOINT,
            extrapolation=ExtrapolationMethod.CONSTANT,
            entity=InterpolationEntity.VALUE
        )

    @classmethod
    def from_strings(
        cls,
        method: str,
        extrapolation: str = "constant",
        entity: str = "log_of_value"
    ) -> "InterpolationConfig":
        """Build a configuration from enum names, e.g. ("linear", "constant", "value")."""
        return cls(
            method=InterpolationMethod.from_string(method),
            extrapolation=ExtrapolationMethod.from_string(extrapolation),
            entity=InterpolationEntity.from_string(entity)
        )


__all__ = [
    "DAYS_PER_YEAR",
    "ZERO_RATE_EPSILON",
    "EVALUATION_CACHE_SIZE",
    "SEASONAL_MONTHS",
    "InterpolationMethod",
    "ExtrapolationMethod",
    "InterpolationEntity",
    "InterpolationConfig",
]
