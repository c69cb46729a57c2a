"""
MarketCurves: Discount, Forward and Index Curve Engine

A modular library for:
- Interpolated curves with configurable interpolation, extrapolation and
  interpolation entity
- Discount and forward curves, including Nelson-Siegel-Svensson forms
- Composite curves: products, piecewise splices, seasonality, index
  curves projected from discount curves
- Calibration through immutable parameter clones

Curves are immutable once built and safe to evaluate from many threads.
"""

__version__ = "0.1.0"

# Core modules
from .config import (
    InterpolationConfig,
    InterpolationMethod,
    ExtrapolationMethod,
    InterpolationEntity,
)
from .conventions import DayCount, BusinessDayConvention, CompoundingConvention, year_fraction
from .dates import DateUtils, adjusted_date
from .exceptions import (
    CurveError,
    DuplicatePointError,
    InvalidAnchorError,
    ArityMismatchError,
    UnresolvedCurveError,
    NonPositiveOffsetError,
    BuilderExhaustedError,
    ConflictingSeasonalitySpecError,
    MissingBaseFixingError,
)

# Curves
from .curves import (
    Curve,
    CurveBuilder,
    InterpolatedCurve,
    DiscountCurve,
    DiscountCurveFromForwardCurve,
    ForwardCurve,
    ForwardCurveFromDiscountCurve,
    ForwardEntity,
    DiscountCurveNelsonSiegelSvensson,
    ForwardCurveNelsonSiegelSvensson,
    NSSParameters,
    fit_nelson_siegel_svensson,
    ProductOfCurves,
    DiscountCurveFromProductOfCurves,
    PiecewiseCurve,
    IndexCurveFromDiscountCurve,
    SeasonalCurve,
    CurveEstimation,
    KernelType,
    create_index_curve_with_seasonality,
)

# Model and calibration
from .model import CurveRepository, CurveModel
from .calibration import CurveCalibrator, CalibrationResult

__all__ = [
    "__version__",
    # Core
    "InterpolationConfig",
    "InterpolationMethod",
    "ExtrapolationMethod",
    "InterpolationEntity",
    "DayCount",
    "BusinessDayConvention",
    "CompoundingConvention",
    "year_fraction",
    "DateUtils",
    "adjusted_date",
    # Errors
    "CurveError",
    "DuplicatePointError",
    "InvalidAnchorError",
    "ArityMismatchError",
    "UnresolvedCurveError",
    "NonPositiveOffsetError",
    "BuilderExhaustedError",
    "ConflictingSeasonalitySpecError",
    "MissingBaseFixingError",
    # Curves
    "Curve",
    "CurveBuilder",
    "InterpolatedCurve",
    "DiscountCurve",
    "DiscountCurveFromForwardCurve",
    "ForwardCurve",
    "ForwardCurveFromDiscountCurve",
    "ForwardEntity",
    "DiscountCurveNelsonSiegelSvensson",
    "ForwardCurveNelsonSiegelSvensson",
    "NSSParameters",
    "fit_nelson_siegel_svensson",
    "ProductOfCurves",
    "DiscountCurveFromProductOfCurves",
    "PiecewiseCurve",
    "IndexCurveFromDiscountCurve",
    "SeasonalCurve",
    "CurveEstimation",
    "KernelType",
    "create_index_curve_with_seasonality",
    # Model
    "CurveRepository",
    "CurveModel",
    "CurveCalibrator",
    "CalibrationResult",
]
