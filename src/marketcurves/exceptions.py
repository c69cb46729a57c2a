"""
Error types raised by curve construction, evaluation and calibration.

Every error derives from CurveError and from the builtin exception a caller
would naturally catch for that situation (ValueError, LookupError, ...).
"""


class CurveError(Exception):
    """Base class for all curve errors."""


class DuplicatePointError(CurveError, ValueError):
    """A point already exists at this time with a different value."""

    def __init__(self, time: float, existing: float, received: float):
        self.time = time
        self.existing = existing
        self.received = received
        super().__init__(
            f"Point at time {time} already holds value {existing}, received {received}"
        )


class InvalidAnchorError(CurveError, ValueError):
    """LOG_OF_VALUE_PER_TIME only allows the value 1.0 at time 0."""


class ArityMismatchError(CurveError, ValueError):
    """Calibration vector length differs from the number of parameters."""

    def __init__(self, expected: int, received: int):
        self.expected = expected
        self.received = received
        super().__init__(f"Expected {expected} parameters, received {received}")


class UnresolvedCurveError(CurveError, LookupError):
    """A named curve could not be resolved through the model."""

    def __init__(self, name: str, reason: str = "not found in model"):
        self.name = name
        super().__init__(f"Curve '{name}' could not be resolved: {reason}")


class NonPositiveOffsetError(CurveError, ValueError):
    """A forward curve reported a payment offset <= 0."""


class BuilderExhaustedError(CurveError, RuntimeError):
    """build() was called on a builder that has already been consumed."""


class ConflictingSeasonalitySpecError(CurveError, ValueError):
    """Both explicit seasonal factors and an averaging period were given."""


class MissingBaseFixingError(CurveError, KeyError):
    """The base date implied by the fixing lag is absent from the fixings."""

    def __init__(self, curve_name: str, base_date):
        self.curve_name = curve_name
        self.base_date = base_date
        super().__init__(f"Curve {curve_name} has no index fixing for base date {base_date}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


__all__ = [
    "CurveError",
    "DuplicatePointError",
    "InvalidAnchorError",
    "ArityMismatchError",
    "UnresolvedCurveError",
    "NonPositiveOffsetError",
    "BuilderExhaustedError",
    "ConflictingSeasonalitySpecError",
    "MissingBaseFixingError",
]
