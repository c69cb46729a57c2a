"""
Unit tests for the curve base classes.
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import date

import numpy as np
import pytest

from marketcurves.config import (
    ExtrapolationMethod,
    InterpolationConfig,
    InterpolationEntity,
    InterpolationMethod,
)
from marketcurves.curves import Curve, CurveBuilder, DiscountCurve, InterpolatedCurve
from marketcurves.exceptions import ArityMismatchError, BuilderExhaustedError, CurveError, DuplicatePointError


@pytest.fixture
def linear_config():
    return InterpolationConfig(
        method=InterpolationMethod.LINEAR,
        extrapolation=ExtrapolationMethod.CONSTANT,
        entity=InterpolationEntity.VALUE
    )


@pytest.fixture
def sample_curve(linear_config):
    """Linear curve with two parameter points."""
    return InterpolatedCurve.from_points(
        "TEST",
        [2.0, 0.5, 1.0],
        [3.0, 1.0, 2.0],
        config=linear_config,
        is_parameter=[True, False, True],
        reference_date=date(2024, 1, 15)
    )


class TestInterpolatedCurve:
    """Tests for InterpolatedCurve."""

    def test_points_sorted(self, sample_curve):
        """Test points are ordered by time whatever the insertion order."""
        assert list(sample_curve.times()) == [0.5, 1.0, 2.0]
        assert len(sample_curve) == 3

    def test_value(self, sample_curve):
        assert abs(sample_curve.value(1.5) - 2.5) < 1e-12
        assert abs(sample_curve(0.75) - 1.5) < 1e-12
        assert sample_curve.value(0.0) == 1.0
        assert sample_curve.value(10.0) == 3.0

    def test_values(self, sample_curve):
        values = sample_curve.values([0.5, 1.5, 2.0])
        assert np.allclose(values, [1.0, 2.5, 3.0])

    def test_values_match_value(self):
        """Test vectorised evaluation agrees with value() inside and outside the points."""
        curve = InterpolatedCurve.from_points("LOG", [0.5, 1.0, 2.0, 5.0], [0.99, 0.98, 0.95, 0.85])
        grid = np.linspace(-1.0, 8.0, 37)
        expected = [curve.value(t) for t in grid]
        assert np.allclose(curve.values(grid), expected, rtol=0.0, atol=1e-15)

    def test_discount_values_match_value(self):
        """Test vectorised discount factors keep the conventions at and before time 0."""
        curve = DiscountCurve.from_zero_rates("OIS", [0.5, 1.0, 5.0], [0.02, 0.025, 0.03])
        grid = [-0.5, 0.0, 0.25, 1.0, 3.0, 10.0]
        values = curve.values(grid)
        assert values[0] == 0.0
        assert values[1] == 1.0
        assert np.allclose(values, [curve.value(t) for t in grid], rtol=0.0, atol=1e-15)

    def test_exact_knots_in_log_space(self):
        """Test knots are reproduced when interpolating the log of values."""
        curve = InterpolatedCurve.from_points("LOG", [0.5, 1.0, 2.0, 5.0], [0.99, 0.98, 0.95, 0.85])
        assert curve.config == InterpolationConfig.default()
        for t, v in [(0.5, 0.99), (1.0, 0.98), (2.0, 0.95), (5.0, 0.85)]:
            assert abs(curve.value(t) - v) < 1e-14

    def test_fixings_config(self):
        """Test right-point piecewise constant interpolation of fixings."""
        curve = (InterpolatedCurve.create_builder("fixings", config=InterpolationConfig.fixings())
                 .add_point(0.0, 100.0).add_point(1.0, 102.0).build())
        assert curve.value(0.5) == 102.0
        assert curve.value(-1.0) == 100.0

    def test_repr(self, sample_curve):
        text = repr(sample_curve)
        assert "TEST" in text
        assert "LINEAR" in text

    def test_dates(self, sample_curve):
        assert sample_curve.time_from_date(date(2025, 1, 14)) == 365 / 365.0
        assert sample_curve.date_from_time(0.5) == date(2024, 7, 15)

    def test_dates_without_reference(self, linear_config):
        curve = InterpolatedCurve.from_points("NOREF", [1.0], [1.0], config=linear_config)
        with pytest.raises(ValueError):
            curve.time_from_date(date(2024, 1, 15))

    def test_from_points_validation(self):
        with pytest.raises(ValueError):
            InterpolatedCurve.from_points("BAD", [1.0, 2.0], [1.0])


class TestParameters:
    """Tests for calibration vectors and clones."""

    def test_parameters(self, sample_curve):
        """Test parameter vector holds flagged points in time order."""
        assert list(sample_curve.parameters()) == [2.0, 3.0]

    def test_round_trip_returns_self(self, sample_curve):
        """Test passing the current vector returns the same instance."""
        assert sample_curve.with_parameters(sample_curve.parameters()) is sample_curve

    def test_with_parameters(self, sample_curve):
        """Test new parameters produce a new curve and leave the receiver unchanged."""
        bumped = sample_curve.with_parameters([2.5, 4.0])

        assert bumped is not sample_curve
        assert list(bumped.parameters()) == [2.5, 4.0]
        assert abs(bumped.value(1.5) - 3.25) < 1e-12
        assert bumped.value(0.5) == 1.0

        assert list(sample_curve.parameters()) == [2.0, 3.0]
        assert abs(sample_curve.value(1.5) - 2.5) < 1e-12

    def test_arity_mismatch(self, sample_curve):
        with pytest.raises(ArityMismatchError):
            sample_curve.with_parameters([1.0])

    def test_clone_independent(self, sample_curve):
        """Test a builder works on a copy of the curve."""
        extended = sample_curve.builder().add_point(3.0, 4.0).build()
        assert len(extended) == 4
        assert len(sample_curve) == 3
        assert sample_curve.value(3.0) == 3.0
        assert extended.value(3.0) == 4.0

    def test_curve_without_parameters(self):
        """Test the base Curve accepts only the empty vector."""

        class Flat(Curve):
            def value(self, t, model=None):
                return 1.0

        curve = Flat("FLAT")
        assert len(curve.parameters()) == 0
        assert curve.with_parameters([]) is curve
        with pytest.raises(ArityMismatchError):
            curve.with_parameters([1.0])
        with pytest.raises(CurveError):
            curve.builder()


class TestCurveBuilder:
    """Tests for CurveBuilder."""

    def test_chaining(self, linear_config):
        builder = InterpolatedCurve.create_builder("B", config=linear_config)
        assert isinstance(builder, CurveBuilder)
        curve = builder.add_point(1.0, 1.0).add_points([2.0, 3.0], [2.0, 3.0], is_parameter=True).build()
        assert list(curve.parameters()) == [2.0, 3.0]

    def test_identical_duplicate_ignored(self, linear_config):
        curve = InterpolatedCurve.create_builder("B", config=linear_config).add_point(1.0, 2.0).add_point(1.0, 2.0).build()
        assert len(curve) == 1

    def test_conflicting_duplicate_raises(self, linear_config):
        builder = InterpolatedCurve.create_builder("B", config=linear_config).add_point(1.0, 2.0)
        with pytest.raises(DuplicatePointError):
            builder.add_point(1.0, 2.5)

    def test_exhausted(self, linear_config):
        """Test a builder can only build once."""
        builder = InterpolatedCurve.create_builder("B", config=linear_config).add_point(1.0, 2.0)
        builder.build()
        with pytest.raises(BuilderExhaustedError):
            builder.build()
        with pytest.raises(BuilderExhaustedError):
            builder.add_point(2.0, 3.0)

    def test_empty_build(self):
        with pytest.raises(ValueError):
            InterpolatedCurve.create_builder("EMPTY").build()

    def test_empty_construction(self):
        """Test curves cannot be constructed without points."""
        with pytest.raises(ValueError):
            InterpolatedCurve("x")
        with pytest.raises(ValueError):
            DiscountCurve("x")

    def test_unsorted_points_rejected(self, sample_curve):
        points = sample_curve.points()
        with pytest.raises(ValueError):
            InterpolatedCurve("x", points=points[::-1])

    def test_builder_keeps_class(self):
        curve = DiscountCurve.from_discount_factors("OIS", [1.0], [0.98])
        extended = curve.builder().add_point(2.0, 0.95, True).build()
        assert isinstance(extended, DiscountCurve)
        assert extended.config == curve.config
        assert np.allclose(extended.parameters(), [0.98, 0.95], rtol=0.0, atol=1e-15)


class TestCaching:
    """Tests for the evaluation cache and thread safety."""

    def test_cache_transparent(self, sample_curve):
        """Test repeated evaluation returns identical results."""
        first = sample_curve.value(1.2345)
        second = sample_curve.value(1.2345)
        assert first == second

    def test_cache_not_shared_with_clone(self, sample_curve):
        sample_curve.value(1.5)
        bumped = sample_curve.with_parameters([2.5, 4.0])
        assert abs(bumped.value(1.5) - 3.25) < 1e-12

    def test_concurrent_evaluation(self):
        """Test concurrent readers on a fresh curve see sequential results."""
        times = [0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0]
        values = [0.999, 0.995, 0.99, 0.97, 0.9, 0.8, 0.5]
        reference = InterpolatedCurve.from_points("REF", times, values)
        grid = np.linspace(0.0, 35.0, 2001)
        expected = [reference.value(t) for t in grid]

        fresh = InterpolatedCurve.from_points("FRESH", times, values)
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(fresh.value, grid))

        assert results == expected
