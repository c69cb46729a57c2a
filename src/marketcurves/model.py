"""
Curve model: resolution of curves by name.

Derived curves that reference other curves by name resolve them through a
CurveRepository passed to value(). CurveModel is the standard immutable
implementation; calibration works on new models built with
with_parameters, never on the original.
"""

from abc import ABC, abstractmethod
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np

from .curves.curve import Curve
from .curves.discount import AbstractDiscountCurve
from .curves.forward import AbstractForwardCurve
from .exceptions import UnresolvedCurveError

logger = logging.getLogger(__name__)


class CurveRepository(ABC):
    """Resolves curves by name."""

    @abstractmethod
    def get_curve(self, name: str) -> Curve:
        """
        Curve registered under ``name``.

        Raises:
            UnresolvedCurveError: No such curve
        """

    def get_discount_curve(self, name: str) -> AbstractDiscountCurve:
        curve = self.get_curve(name)
        if not isinstance(curve, AbstractDiscountCurve):
            raise UnresolvedCurveError(name, f"{type(curve).__name__} is not a discount curve")
        return curve

    def get_forward_curve(self, name: str) -> AbstractForwardCurve:
        curve = self.get_curve(name)
        if not isinstance(curve, AbstractForwardCurve):
            raise UnresolvedCurveError(name, f"{type(curve).__name__} is not a forward curve")
        return curve


class CurveModel(CurveRepository):
    """
    Immutable collection of named curves.

    A later curve replaces an earlier one of the same name.
    """

    def __init__(self, curves: Iterable[Curve] = ()):
        self._curves: Dict[str, Curve] = {}
        for curve in curves:
            self._curves[curve.name] = curve

    def get_curve(self, name: str) -> Curve:
        curve = self._curves.get(name)
        if curve is None:
            raise UnresolvedCurveError(name)
        return curve

    def __contains__(self, name: str) -> bool:
        return name in self._curves

    def __len__(self) -> int:
        return len(self._curves)

    @property
    def curve_names(self) -> List[str]:
        return list(self._curves)

    def with_curves(self, *curves: Curve) -> "CurveModel":
        """New model with ``curves`` added, replacing curves of the same name."""
        return CurveModel(list(self._curves.values()) + list(curves))

    def parameters(self, names: Optional[Sequence[str]] = None) -> Dict[str, np.ndarray]:
        """Calibration vectors of the named curves (all curves by default)."""
        names = self.curve_names if names is None else names
        return {name: self.get_curve(name).parameters() for name in names}

    def with_parameters(self, parameters: Mapping[str, Sequence[float]]) -> "CurveModel":
        """
        New model with the named curves replaced by clones carrying new parameters.

        Args:
            parameters: Calibration vector per curve name

        Returns:
            New model; curves not named are shared with this model
        """
        replaced = [self.get_curve(name).with_parameters(vector) for name, vector in parameters.items()]
        return self.with_curves(*replaced)

    def __repr__(self) -> str:
        return f"CurveModel(curves={self.curve_names})"


__all__ = ["CurveRepository", "CurveModel"]
