"""
Curve calibration.

Solves for the parameter vectors of selected curves in a model so that a
set of objective functions (model -> residual) vanish, e.g. the
differences between model and market prices of calibration instruments.

Candidate models are only ever built with CurveModel.with_parameters; the
input model and its curves are never modified.
"""

from dataclasses import dataclass, field
import logging
from typing import Callable, Dict, List, Sequence, Union

import numpy as np
from scipy.optimize import least_squares

from .model import CurveModel

logger = logging.getLogger(__name__)

Objective = Callable[[CurveModel], Union[float, Sequence[float]]]


@dataclass
class CalibrationResult:
    """Result of a curve calibration."""
    model: CurveModel
    residual_norm: float
    iterations: int
    success: bool
    message: str
    parameters: Dict[str, np.ndarray] = field(default_factory=dict)


class CurveCalibrator:
    """
    Least-squares calibrator for curve parameters.

    Attributes:
        model: Model holding the curves to calibrate and any curves they depend on
        curve_names: Names of the curves whose parameters are solved for
        objectives: Residual functions evaluated on candidate models
        tolerance: Tolerance on residuals and parameter steps
        max_evaluations: Maximum number of residual evaluations
    """

    def __init__(
        self,
        model: CurveModel,
        curve_names: Sequence[str],
        objectives: Sequence[Objective],
        tolerance: float = 1e-12,
        max_evaluations: int = 1000
    ):
        if not curve_names:
            raise ValueError("Need at least one curve to calibrate")
        if not objectives:
            raise ValueError("Need at least one objective")

        self.model = model
        self.curve_names = list(curve_names)
        self.objectives = list(objectives)
        self.tolerance = tolerance
        self.max_evaluations = max_evaluations

        self._sizes = [len(model.get_curve(name).parameters()) for name in self.curve_names]
        if sum(self._sizes) == 0:
            raise ValueError(f"Curves {self.curve_names} have no calibration parameters")

    def initial_parameters(self) -> np.ndarray:
        """Concatenated parameter vectors of the calibrated curves."""
        return np.concatenate([self.model.get_curve(name).parameters() for name in self.curve_names])

    def _split(self, x: np.ndarray) -> Dict[str, np.ndarray]:
        chunks = np.split(np.asarray(x, dtype=np.float64), np.cumsum(self._sizes)[:-1])
        return dict(zip(self.curve_names, chunks))

    def model_for(self, x: Sequence[float]) -> CurveModel:
        """Candidate model carrying the concatenated parameter vector ``x``."""
        return self.model.with_parameters(self._split(np.asarray(x)))

    def residuals(self, x: Sequence[float]) -> np.ndarray:
        candidate = self.model_for(x)
        values: List[np.ndarray] = [np.atleast_1d(np.asarray(obj(candidate), dtype=np.float64))
                                    for obj in self.objectives]
        residuals = np.concatenate(values)
        logger.debug("Calibration residual norm %.3e", np.linalg.norm(residuals))
        return residuals

    def calibrate(self) -> CalibrationResult:
        """
        Run the solver from the model's current parameters.

        Returns:
            CalibrationResult with the calibrated model
        """
        x0 = self.initial_parameters()
        result = least_squares(
            self.residuals,
            x0,
            xtol=self.tolerance,
            ftol=self.tolerance,
            gtol=self.tolerance,
            max_nfev=self.max_evaluations
        )

        calibrated = self.model_for(result.x)
        residual_norm = float(np.linalg.norm(result.fun))
        logger.info(
            "Calibrated %s with %d parameters: residual norm %.3e after %d evaluations (%s)",
            ", ".join(self.curve_names), len(x0), residual_norm, result.nfev, result.message
        )
        return CalibrationResult(
            model=calibrated,
            residual_norm=residual_norm,
            iterations=int(result.nfev),
            success=bool(result.success),
            message=str(result.message),
            parameters=self._split(result.x)
        )


__all__ = ["CalibrationResult", "CurveCalibrator"]
