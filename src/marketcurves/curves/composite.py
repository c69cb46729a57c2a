"""
Curves composed from other curves.

Provides:
- ProductOfCurves: pointwise product of constituent curves
- DiscountCurveFromProductOfCurves: product of discount curves, e.g. a
  spread curve on top of a base curve
- PiecewiseCurve: a fixed-part curve on an open interval, a base curve elsewhere
- IndexCurveFromDiscountCurve: I(t) = I(0) / P(t)

Constituents are given either as curves, which the composite owns and
exposes for calibration, or by name, resolved through the model on every
evaluation.
"""

from datetime import date
import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

import numpy as np

from ..exceptions import ArityMismatchError, UnresolvedCurveError
from .curve import Curve
from .discount import AbstractDiscountCurve

if TYPE_CHECKING:
    from ..model import CurveRepository

logger = logging.getLogger(__name__)

CurveOrName = Union[Curve, str]


def _resolve(item: CurveOrName, model: Optional["CurveRepository"], discount: bool = False) -> Curve:
    if isinstance(item, Curve):
        return item
    if model is None:
        raise UnresolvedCurveError(item, "no model given")
    return model.get_discount_curve(item) if discount else model.get_curve(item)


def _split_parameters(curves: Sequence[CurveOrName], parameters: Sequence[float]) -> List[np.ndarray]:
    """Split a concatenated vector into one chunk per owned curve (empty for names)."""
    parameters = np.asarray(parameters, dtype=np.float64).ravel()
    sizes = [len(c.parameters()) if isinstance(c, Curve) else 0 for c in curves]
    if len(parameters) != sum(sizes):
        raise ArityMismatchError(sum(sizes), len(parameters))
    return np.split(parameters, np.cumsum(sizes)[:-1]) if sizes else []


class ProductOfCurves(Curve):
    """
    Curve whose value is the product of its constituents' values.

    Attributes:
        curves: Constituent curves or curve names
    """

    def __init__(
        self,
        curves: Sequence[CurveOrName],
        name: Optional[str] = None,
        reference_date: Optional[date] = None
    ):
        if len(curves) == 0:
            raise ValueError("Need at least one curve")
        if name is None:
            name = "ProductOf(" + ",".join(c.name if isinstance(c, Curve) else c for c in curves) + ")"
        if reference_date is None:
            reference_date = next(
                (c.reference_date for c in curves if isinstance(c, Curve) and c.reference_date is not None),
                None
            )
        super().__init__(name, reference_date)
        self.curves = tuple(curves)

    def _resolve_constituent(self, item: CurveOrName, model: Optional["CurveRepository"]) -> Curve:
        return _resolve(item, model)

    def value(self, t: float, model: Optional["CurveRepository"] = None) -> float:
        result = 1.0
        for item in self.curves:
            result *= self._resolve_constituent(item, model).value(t, model)
        return result

    def parameters(self) -> np.ndarray:
        """Concatenated parameters of the owned constituents."""
        chunks = [c.parameters() for c in self.curves if isinstance(c, Curve)]
        return np.concatenate(chunks) if chunks else np.array([], dtype=np.float64)

    def with_parameters(self, parameters: Sequence[float]) -> "ProductOfCurves":
        chunks = _split_parameters(self.curves, parameters)
        new_curves = [
            c.with_parameters(chunk) if isinstance(c, Curve) else c
            for c, chunk in zip(self.curves, chunks)
        ]
        if all(new is old for new, old in zip(new_curves, self.curves)):
            return self
        return type(self)(new_curves, self.name, self.reference_date)


class DiscountCurveFromProductOfCurves(AbstractDiscountCurve, ProductOfCurves):
    """Discount curve given by the product of discount curves."""

    def _resolve_constituent(self, item: CurveOrName, model: Optional["CurveRepository"]) -> Curve:
        return _resolve(item, model, discount=True)

    def _discount_factor(self, t: float, model: Optional["CurveRepository"]) -> float:
        return ProductOfCurves.value(self, t, model)


class PiecewiseCurve(Curve):
    """
    Curve delegating to a fixed-part curve on (start, end), to a base curve elsewhere.

    Both boundaries are excluded from the fixed part. Calibration parameters
    are those of the base curve.

    Attributes:
        base_curve: Curve used outside the interval
        fixed_part_curve: Curve used strictly inside the interval
        fixed_part_start: Interval start
        fixed_part_end: Interval end
    """

    def __init__(
        self,
        base_curve: Curve,
        fixed_part_curve: Curve,
        fixed_part_start: float = -np.inf,
        fixed_part_end: float = np.inf,
        name: Optional[str] = None
    ):
        super().__init__(name if name is not None else base_curve.name, base_curve.reference_date)
        self.base_curve = base_curve
        self.fixed_part_curve = fixed_part_curve
        self.fixed_part_start = fixed_part_start
        self.fixed_part_end = fixed_part_end

    def value(self, t: float, model: Optional["CurveRepository"] = None) -> float:
        if self.fixed_part_start < t < self.fixed_part_end:
            return self.fixed_part_curve.value(t, model)
        return self.base_curve.value(t, model)

    def parameters(self) -> np.ndarray:
        return self.base_curve.parameters()

    def with_parameters(self, parameters: Sequence[float]) -> "PiecewiseCurve":
        new_base = self.base_curve.with_parameters(parameters)
        if new_base is self.base_curve:
            return self
        return PiecewiseCurve(
            new_base, self.fixed_part_curve, self.fixed_part_start, self.fixed_part_end, self.name
        )


class IndexCurveFromDiscountCurve(Curve):
    """
    Index curve projected by a discount curve.

        I(t) = I(0) / P(t)

    Attributes:
        index_value: Index level at t = 0
        discount_curve: Discount curve, or its name to resolve through the model
    """

    def __init__(
        self,
        name: str,
        index_value: float,
        discount_curve: CurveOrName,
        reference_date: Optional[date] = None
    ):
        if reference_date is None and isinstance(discount_curve, Curve):
            reference_date = discount_curve.reference_date
        super().__init__(name, reference_date)
        self.index_value = index_value
        self.discount_curve = discount_curve

    def value(self, t: float, model: Optional["CurveRepository"] = None) -> float:
        discount_curve = _resolve(self.discount_curve, model, discount=True)
        return self.index_value / discount_curve.value(t, model)

    def parameters(self) -> np.ndarray:
        if isinstance(self.discount_curve, Curve):
            return self.discount_curve.parameters()
        return np.array([], dtype=np.float64)

    def with_parameters(self, parameters: Sequence[float]) -> "IndexCurveFromDiscountCurve":
        if not isinstance(self.discount_curve, Curve):
            return super().with_parameters(parameters)
        new_discount = self.discount_curve.with_parameters(parameters)
        if new_discount is self.discount_curve:
            return self
        return IndexCurveFromDiscountCurve(self.name, self.index_value, new_discount, self.reference_date)


__all__ = [
    "ProductOfCurves",
    "DiscountCurveFromProductOfCurves",
    "PiecewiseCurve",
    "IndexCurveFromDiscountCurve",
]
