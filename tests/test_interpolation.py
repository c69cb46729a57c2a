"""
Unit tests for interpolation module.
"""

import numpy as np
import pytest

from marketcurves.config import ExtrapolationMethod, InterpolationMethod
from marketcurves.curves.interpolation import (
    AkimaInterpolator,
    CubicSplineInterpolator,
    HarmonicSplineInterpolator,
    LinearInterpolator,
    PiecewiseConstantInterpolator,
    create_interpolator,
)


TIMES = [0.5, 1.0, 2.0, 5.0, 10.0]
VALUES = [0.010, 0.014, 0.021, 0.028, 0.031]


class TestKnots:
    """Every method reproduces its knots exactly."""

    @pytest.mark.parametrize("method", list(InterpolationMethod))
    def test_exact_knots(self, method):
        """Test values at knots are returned unchanged."""
        interp = create_interpolator(method).fit(TIMES, VALUES)
        for t, v in zip(TIMES, VALUES):
            assert interp(t) == v

    def test_nan_propagates(self):
        interp = LinearInterpolator().fit(TIMES, VALUES)
        assert np.isnan(interp(float("nan")))

    def test_single_point_is_constant(self):
        """Test a single point gives a constant function."""
        interp = CubicSplineInterpolator().fit([1.0], [0.5])
        assert interp(-3.0) == 0.5
        assert interp(1.0) == 0.5
        assert interp(7.0) == 0.5

    def test_fit_validation(self):
        """Test invalid input is rejected."""
        with pytest.raises(ValueError):
            LinearInterpolator().fit([1.0, 2.0], [1.0])
        with pytest.raises(ValueError):
            LinearInterpolator().fit([], [])
        with pytest.raises(ValueError):
            LinearInterpolator().fit([1.0, 1.0], [1.0, 2.0])

    def test_unfitted(self):
        with pytest.raises(RuntimeError):
            LinearInterpolator().interpolate(1.0)


class TestMethods:
    """Tests for the individual interpolation rules."""

    def test_linear_midpoint(self):
        """Test linear interpolation between knots."""
        interp = LinearInterpolator().fit([1.0, 2.0], [1.0, 3.0])
        assert abs(interp(1.5) - 2.0) < 1e-12
        assert abs(interp(1.25) - 1.5) < 1e-12

    def test_piecewise_constant_left_point(self):
        """Test left-point variant holds the left knot value."""
        interp = PiecewiseConstantInterpolator().fit([0.0, 1.0, 2.0], [1.0, 2.0, 3.0])
        assert interp(0.5) == 1.0
        assert interp(1.999) == 2.0

    def test_piecewise_constant_right_point(self):
        """Test right-point variant takes the right knot value."""
        interp = PiecewiseConstantInterpolator(right_point=True).fit([0.0, 1.0, 2.0], [1.0, 2.0, 3.0])
        assert interp(0.5) == 2.0
        assert interp(1.001) == 3.0

    def test_cubic_spline_two_points_is_linear(self):
        interp = CubicSplineInterpolator().fit([0.0, 2.0], [1.0, 3.0])
        assert abs(interp(0.5) - 1.5) < 1e-12

    def test_cubic_spline_reproduces_line(self):
        """Test natural spline is exact on linear data."""
        t = np.array([0.0, 1.0, 3.0, 4.0, 7.0])
        interp = CubicSplineInterpolator().fit(t, 2.0 * t + 1.0)
        for x in [0.3, 1.7, 3.5, 6.2]:
            assert abs(interp(x) - (2.0 * x + 1.0)) < 1e-12

    @pytest.mark.parametrize("continuous", [False, True])
    def test_akima_reproduces_line(self, continuous):
        """Test Akima is exact on linear data."""
        t = np.array([0.0, 1.0, 2.5, 4.0, 6.0, 9.0])
        interp = AkimaInterpolator(continuous=continuous).fit(t, 0.5 - 0.1 * t)
        for x in [0.37, 2.0, 5.1, 8.8]:
            assert abs(interp(x) - (0.5 - 0.1 * x)) < 1e-12

    def test_akima_falls_back_to_cubic_spline(self):
        """Test Akima with fewer than 4 points uses the natural cubic spline."""
        t = [0.0, 1.0, 3.0]
        v = [1.0, 0.5, 2.0]
        akima = AkimaInterpolator().fit(t, v)
        spline = CubicSplineInterpolator().fit(t, v)
        for x in [0.25, 0.9, 2.2]:
            assert abs(akima(x) - spline(x)) < 1e-14

    def test_harmonic_spline_two_points_is_linear(self):
        interp = HarmonicSplineInterpolator().fit([0.0, 2.0], [1.0, 3.0])
        assert abs(interp(1.0) - 2.0) < 1e-12

    def test_harmonic_spline_filtered_is_monotonic(self):
        """Test monotonic data stays monotonic with boundary filtering."""
        t = [0.0, 1.0, 2.0, 3.0, 4.0]
        v = [0.0, 1.0, 1.5, 3.0, 3.2]
        interp = HarmonicSplineInterpolator(monotonic_filtering=True).fit(t, v)
        grid = np.linspace(0.0, 4.0, 401)
        values = interp.interpolate_many(grid)
        assert np.all(np.diff(values) >= -1e-12)

    def test_harmonic_spline_flat_at_extremum(self):
        """Test interior derivative is zero at a local maximum."""
        interp = HarmonicSplineInterpolator().fit([0.0, 1.0, 2.0], [0.0, 1.0, 0.0])
        assert interp.coefficients[1, 1] == 0.0

    def test_create_from_string(self):
        interp = create_interpolator("harmonic-spline", "linear")
        assert isinstance(interp, HarmonicSplineInterpolator)
        assert interp.extrapolation == ExtrapolationMethod.LINEAR

    def test_create_unknown(self):
        with pytest.raises(ValueError):
            create_interpolator("quintic")


class TestExtrapolation:
    """Tests for extrapolation outside the knot range."""

    def test_constant(self):
        """Test constant extrapolation holds boundary values."""
        interp = LinearInterpolator(ExtrapolationMethod.CONSTANT).fit([1.0, 2.0], [1.0, 3.0])
        assert interp(0.0) == 1.0
        assert interp(5.0) == 3.0

    def test_linear(self):
        """Test linear extrapolation extends the boundary slopes."""
        interp = CubicSplineInterpolator(ExtrapolationMethod.LINEAR).fit([1.0, 2.0, 4.0], [1.0, 3.0, 4.0])
        assert abs(interp(0.0) - (-1.0)) < 1e-12
        assert abs(interp(6.0) - 5.0) < 1e-12

    def test_default_uses_boundary_polynomial(self):
        """Test default extrapolation evaluates the adjacent interval's polynomial."""
        interp = LinearInterpolator(ExtrapolationMethod.DEFAULT).fit([1.0, 2.0, 4.0], [1.0, 3.0, 4.0])
        assert abs(interp(0.5) - 0.0) < 1e-12
        assert abs(interp(6.0) - 5.0) < 1e-12

        pc = PiecewiseConstantInterpolator(ExtrapolationMethod.DEFAULT).fit([1.0, 2.0, 4.0], [1.0, 3.0, 4.0])
        assert pc(10.0) == 3.0
