"""
Unit tests for composite curves.
"""

from datetime import date

import numpy as np
import pytest

from marketcurves.config import ExtrapolationMethod, InterpolationConfig, InterpolationEntity, InterpolationMethod
from marketcurves.curves import (
    DiscountCurve,
    DiscountCurveFromProductOfCurves,
    IndexCurveFromDiscountCurve,
    InterpolatedCurve,
    PiecewiseCurve,
    ProductOfCurves,
)
from marketcurves.exceptions import ArityMismatchError, CurveError, UnresolvedCurveError
from marketcurves.model import CurveModel


@pytest.fixture
def base_curve():
    return DiscountCurve.from_discount_factors("BASE", [1.0, 2.0], [0.99, 0.97])


@pytest.fixture
def spread_curve():
    return DiscountCurve.from_discount_factors("SPREAD", [1.0, 2.0], [0.98, 0.96])


def constant_curve(name, value):
    config = InterpolationConfig(
        method=InterpolationMethod.LINEAR,
        extrapolation=ExtrapolationMethod.CONSTANT,
        entity=InterpolationEntity.VALUE
    )
    return InterpolatedCurve.from_points(name, [0.0], [value], config=config)


class TestProductOfCurves:
    """Tests for ProductOfCurves."""

    def test_product(self, base_curve, spread_curve):
        """Test the value is the product of the constituents."""
        product = ProductOfCurves([base_curve, spread_curve])
        assert abs(product.value(1.0) - 0.9702) < 1e-14
        assert product.name == "ProductOf(BASE,SPREAD)"

    def test_resolved_by_name(self, base_curve, spread_curve):
        product = ProductOfCurves(["BASE", spread_curve], name="P")
        model = CurveModel([base_curve])
        assert abs(product.value(1.0, model) - 0.9702) < 1e-14
        with pytest.raises(UnresolvedCurveError):
            product.value(1.0)

    def test_empty(self):
        with pytest.raises(ValueError):
            ProductOfCurves([])

    def test_no_builder(self, base_curve, spread_curve):
        """Test composites are not built from points."""
        with pytest.raises(CurveError):
            ProductOfCurves([base_curve, spread_curve]).builder()

    def test_parameters(self, base_curve, spread_curve):
        """Test parameters concatenate the owned constituents."""
        product = ProductOfCurves([base_curve, "OTHER", spread_curve])
        assert np.allclose(product.parameters(), [0.99, 0.97, 0.98, 0.96], rtol=0, atol=1e-15)

        bumped = product.with_parameters([0.99, 0.97, 0.97, 0.96])
        assert bumped is not product
        assert bumped.curves[1] == "OTHER"
        assert abs(bumped.curves[2].value(1.0) - 0.97) < 1e-14
        assert abs(product.curves[2].value(1.0) - 0.98) < 1e-14

        assert product.with_parameters(product.parameters()) is product
        with pytest.raises(ArityMismatchError):
            product.with_parameters([0.99])


class TestDiscountCurveFromProductOfCurves:
    """Tests for the product of discount curves."""

    def test_discount_product(self, base_curve, spread_curve):
        curve = DiscountCurveFromProductOfCurves([base_curve, spread_curve], name="EUR-SPREAD")
        assert abs(curve.discount_factor(1.0) - 0.9702) < 1e-14
        assert curve.discount_factor(0.0) == 1.0
        assert curve.discount_factor(-1.0) == 0.0

        zero = curve.zero_rate(2.0)
        assert abs(zero - (base_curve.zero_rate(2.0) + spread_curve.zero_rate(2.0))) < 1e-12

    def test_with_parameters_keeps_type(self, base_curve, spread_curve):
        curve = DiscountCurveFromProductOfCurves([base_curve, spread_curve])
        bumped = curve.with_parameters(curve.parameters() * 0.99)
        assert isinstance(bumped, DiscountCurveFromProductOfCurves)

    def test_named_constituent_must_be_discount_curve(self, base_curve):
        curve = DiscountCurveFromProductOfCurves(["BASE", "FLAT"])
        model = CurveModel([base_curve, constant_curve("FLAT", 1.0)])
        with pytest.raises(UnresolvedCurveError):
            curve.discount_factor(1.0, model)


class TestPiecewiseCurve:
    """Tests for PiecewiseCurve."""

    def test_splice(self):
        """Test the fixed part applies strictly inside its interval."""
        curve = PiecewiseCurve(constant_curve("BASE", 2.0), constant_curve("FIXED", 5.0), 0.0, 1.0)
        assert curve.value(0.5) == 5.0
        assert curve.value(0.0) == 2.0
        assert curve.value(1.0) == 2.0
        assert curve.value(-0.5) == 2.0
        assert curve.value(1.5) == 2.0
        assert curve.name == "BASE"

    def test_default_interval(self):
        curve = PiecewiseCurve(constant_curve("BASE", 2.0), constant_curve("FIXED", 5.0))
        assert curve.value(1e6) == 5.0

    def test_parameters_of_base_curve(self, base_curve):
        curve = PiecewiseCurve(base_curve, constant_curve("FIXED", 5.0), 0.0, 0.5)
        assert np.allclose(curve.parameters(), [0.99, 0.97], rtol=0, atol=1e-15)

        bumped = curve.with_parameters([0.98, 0.97])
        assert abs(bumped.value(1.0) - 0.98) < 1e-14
        assert bumped.value(0.25) == 5.0
        assert curve.with_parameters(curve.parameters()) is curve


class TestIndexCurveFromDiscountCurve:
    """Tests for IndexCurveFromDiscountCurve."""

    def test_index(self, base_curve):
        """Test I(t) = I(0) / P(t)."""
        curve = IndexCurveFromDiscountCurve("CPI", 100.0, base_curve, reference_date=date(2024, 1, 15))
        assert curve.value(0.0) == 100.0
        assert abs(curve.value(1.0) - 100.0 / 0.99) < 1e-12

    def test_resolved_by_name(self, base_curve):
        curve = IndexCurveFromDiscountCurve("CPI", 100.0, "BASE")
        assert abs(curve.value(2.0, CurveModel([base_curve])) - 100.0 / 0.97) < 1e-12
        assert len(curve.parameters()) == 0
        with pytest.raises(UnresolvedCurveError):
            curve.value(2.0)

    def test_parameters(self, base_curve):
        curve = IndexCurveFromDiscountCurve("CPI", 100.0, base_curve)
        assert np.array_equal(curve.parameters(), base_curve.parameters())
        bumped = curve.with_parameters([0.98, 0.97])
        assert abs(bumped.value(1.0) - 100.0 / 0.98) < 1e-12
