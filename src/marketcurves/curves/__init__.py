"""
Curves package - curve construction, evaluation and composition.

Provides:
- InterpolatedCurve: Base curve on sorted points with a lazy interpolation kernel
- DiscountCurve, ForwardCurve: Interpolated discount and forward curves
- Nelson-Siegel-Svensson parametric discount and forward curves
- Composite curves: products, piecewise splices, seasonality, index curves
- create_index_curve_with_seasonality: Index curve factory
"""

from .entity import InterpolationEntity, from_entity, to_entity
from .points import Point, PointStore
from .interpolation import (
    InterpolationMethod,
    ExtrapolationMethod,
    Interpolator,
    PiecewiseConstantInterpolator,
    LinearInterpolator,
    CubicSplineInterpolator,
    AkimaInterpolator,
    HarmonicSplineInterpolator,
    create_interpolator,
)
from .cache import EvaluationCache, LazyCell
from .curve import Curve, CurveBuilder, InterpolatedCurve
from .forward import (
    AbstractForwardCurve,
    ForwardCurve,
    ForwardCurveBuilder,
    ForwardCurveFromDiscountCurve,
    ForwardEntity,
    PaymentOffsets,
)
from .discount import (
    AbstractDiscountCurve,
    DiscountCurve,
    DiscountCurveFromForwardCurve,
    create_flat_curve,
)
from .nss import (
    DiscountCurveNelsonSiegelSvensson,
    ForwardCurveNelsonSiegelSvensson,
    NSSParameters,
    fit_nelson_siegel_svensson,
)
from .composite import (
    DiscountCurveFromProductOfCurves,
    IndexCurveFromDiscountCurve,
    PiecewiseCurve,
    ProductOfCurves,
)
from .regression import CurveEstimation, KernelType, Partition
from .seasonal import SeasonalCurve, compute_seasonal_adjustments, estimate_seasonal_adjustments
from .factory import create_index_curve_with_seasonality

__all__ = [
    "InterpolationEntity",
    "to_entity",
    "from_entity",
    "Point",
    "PointStore",
    "InterpolationMethod",
    "ExtrapolationMethod",
    "Interpolator",
    "PiecewiseConstantInterpolator",
    "LinearInterpolator",
    "CubicSplineInterpolator",
    "AkimaInterpolator",
    "HarmonicSplineInterpolator",
    "create_interpolator",
    "EvaluationCache",
    "LazyCell",
    "Curve",
    "CurveBuilder",
    "InterpolatedCurve",
    "AbstractForwardCurve",
    "ForwardCurve",
    "ForwardCurveBuilder",
    "ForwardCurveFromDiscountCurve",
    "ForwardEntity",
    "PaymentOffsets",
    "AbstractDiscountCurve",
    "DiscountCurve",
    "DiscountCurveFromForwardCurve",
    "create_flat_curve",
    "DiscountCurveNelsonSiegelSvensson",
    "ForwardCurveNelsonSiegelSvensson",
    "NSSParameters",
    "fit_nelson_siegel_svensson",
    "DiscountCurveFromProductOfCurves",
    "IndexCurveFromDiscountCurve",
    "PiecewiseCurve",
    "ProductOfCurves",
    "CurveEstimation",
    "KernelType",
    "Partition",
    "SeasonalCurve",
    "compute_seasonal_adjustments",
    "estimate_seasonal_adjustments",
    "create_index_curve_with_seasonality",
]
