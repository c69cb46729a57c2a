#!/usr/bin/env python
"""
MarketCurves Demo Script

This script walks through the main curve types of the library:
1. Build an OIS discount curve and a chained forward curve
2. Fit a Nelson-Siegel-Svensson curve to government zero rates
3. Calibrate discount factors to par targets through the curve model
4. Build an inflation index curve with estimated seasonality
5. Export a curve table

Usage:
    python run_demo.py [--output-dir OUTPUT_DIR] [--verbose]
"""

import argparse
import logging
import math
import sys
from datetime import date
from pathlib import Path
from typing import Dict

import numpy as np
import pandas as pd

# Add src to path for development
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from marketcurves.conventions import CompoundingConvention
from marketcurves.dates import add_months
from marketcurves.curves import (
    DiscountCurve,
    DiscountCurveFromForwardCurve,
    ForwardCurveFromDiscountCurve,
    ProductOfCurves,
    create_index_curve_with_seasonality,
    estimate_seasonal_adjustments,
    fit_nelson_siegel_svensson,
)
from marketcurves.curves.seasonal import MONTH_NAMES
from marketcurves import CurveCalibrator, CurveModel


OIS_ZERO_RATES = {
    0.25: 0.0530,
    0.5: 0.0525,
    1.0: 0.0505,
    2.0: 0.0460,
    5.0: 0.0415,
    10.0: 0.0405,
    30.0: 0.0410,
}

GOVT_ZERO_RATES = {
    0.5: 0.0520,
    1.0: 0.0495,
    2.0: 0.0445,
    3.0: 0.0425,
    5.0: 0.0410,
    7.0: 0.0412,
    10.0: 0.0418,
    20.0: 0.0445,
    30.0: 0.0432,
}


def sample_cpi_fixings(valuation_date: date, years: int = 3) -> Dict[date, float]:
    """Monthly index fixings with a mild seasonal pattern, ending in the valuation month."""
    pattern = 0.0015 * np.sin(2 * np.pi * (np.arange(12) - 2) / 12)
    fixings = {}
    value = 300.0
    start = add_months(date(valuation_date.year, valuation_date.month, 1), -12 * years + 1)
    for k in range(12 * years):
        d = add_months(start, k)
        if k > 0:
            value *= math.exp(0.0025 + pattern[d.month - 1])
        fixings[d] = round(value, 3)
    return fixings


def build_ois_curve(valuation_date: date) -> DiscountCurve:
    """Build OIS discount curve from continuously compounded zero rates."""
    print("\n" + "="*60)
    print("Building OIS Discount Curve")
    print("="*60)

    for tenor, rate in OIS_ZERO_RATES.items():
        print(f"  Added: {tenor:>5.2f}Y @ {rate*100:.3f}%")

    curve = DiscountCurve.from_zero_rates(
        "USD-OIS",
        list(OIS_ZERO_RATES.keys()),
        list(OIS_ZERO_RATES.values()),
        reference_date=valuation_date,
    )
    print(f"\nCurve: {curve!r}")

    print("\nDiscount factors and rates:")
    for tenor in [1.0, 2.0, 5.0, 10.0]:
        df = curve.discount_factor(tenor)
        zr = curve.zero_rate(tenor)
        annual = curve.zero_rate(tenor, compounding=CompoundingConvention.ANNUAL)
        print(f"  {tenor:>5.1f}Y  DF={df:.6f}  Zero={zr*100:.4f}%  Annual={annual*100:.4f}%")

    return curve


def show_derived_curves(model: CurveModel) -> None:
    """Forward rates implied by the OIS curve and the discount curve they imply back."""
    print("\n" + "="*60)
    print("Derived Forward Curves")
    print("="*60)

    forward_3m = ForwardCurveFromDiscountCurve("USD-OIS", name="USD-OIS-3M", payment_offset=0.25)
    chained = DiscountCurveFromForwardCurve(forward_3m)

    print("  Fixing    3M Fwd     Chained DF")
    for t in [0.0, 0.25, 1.0, 2.0, 4.75]:
        fwd = forward_3m.forward(model, t)
        df = chained.value(t + 0.25, model)
        print(f"  {t:>5.2f}Y  {fwd*100:>7.4f}%   {df:.6f}")

    ois = model.get_discount_curve("USD-OIS")
    spread = DiscountCurve.from_zero_rates("SPREAD", [1.0, 10.0], [0.0010, 0.0020])
    risky = ProductOfCurves([ois, spread], name="USD-RISKY")
    print(f"\n  OIS x spread 5Y: {risky.value(5.0):.6f} (OIS {ois.value(5.0):.6f})")


def fit_treasury_curve(valuation_date: date):
    """Fit Nelson-Siegel-Svensson to government zero rates."""
    print("\n" + "="*60)
    print("Fitting Treasury Curve (Nelson-Siegel-Svensson)")
    print("="*60)

    maturities = list(GOVT_ZERO_RATES.keys())
    rates = list(GOVT_ZERO_RATES.values())
    curve = fit_nelson_siegel_svensson("UST", maturities, rates, reference_date=valuation_date)

    p = curve.params
    print(f"  beta0={p.beta0:.5f} beta1={p.beta1:.5f} beta2={p.beta2:.5f} beta3={p.beta3:.5f}")
    print(f"  tau1={p.tau1:.4f} tau2={p.tau2:.4f}")

    print("\n  Tenor   Market    Fitted    Error(bp)")
    for t, z in GOVT_ZERO_RATES.items():
        fitted = curve.zero_rate(t)
        print(f"  {t:>5.1f}Y  {z*100:.4f}%  {fitted*100:.4f}%  {(fitted - z)*1e4:>7.2f}")

    return curve


def calibrate_discount_curve(model: CurveModel) -> CurveModel:
    """Solve OIS discount factors so 1Y and 2Y zero rates hit new targets."""
    print("\n" + "="*60)
    print("Calibrating OIS Curve")
    print("="*60)

    targets = {1.0: 0.0480, 2.0: 0.0440}

    def make_objective(t, target):
        return lambda m: m.get_discount_curve("USD-OIS").zero_rate(t) - target

    objectives = [make_objective(t, z) for t, z in targets.items()]
    calibrator = CurveCalibrator(model, ["USD-OIS"], objectives)
    result = calibrator.calibrate()

    print(f"  Success: {result.success}  Iterations: {result.iterations}")
    print(f"  Residual norm: {result.residual_norm:.3e}")
    curve = result.model.get_discount_curve("USD-OIS")
    for t, z in targets.items():
        print(f"  {t:>4.1f}Y target {z*100:.3f}%  calibrated {curve.zero_rate(t)*100:.5f}%")

    return result.model


def build_index_curve(valuation_date: date):
    """Build a CPI curve with fixings, projected zero rates and seasonality."""
    print("\n" + "="*60)
    print("Building CPI Index Curve with Seasonality")
    print("="*60)

    reference_date = date(valuation_date.year, valuation_date.month, 1)
    fixings = sample_cpi_fixings(valuation_date)
    zero_rates = {add_months(reference_date, 12 * k): 0.025 + 0.001 * k for k in range(1, 6)}

    adjustments = estimate_seasonal_adjustments(fixings, years=2)
    print("  Estimated seasonal adjustments (annualized):")
    for name, adj in zip(MONTH_NAMES, adjustments):
        print(f"    {name.capitalize():<10s} {adj*100:>7.4f}%")

    curve = create_index_curve_with_seasonality(
        "USCPI",
        reference_date,
        fixings,
        zero_rates,
        seasonal_averaging_years=2,
    )

    print("\n  Date         Index")
    for months in [-6, -3, 0, 3, 6, 9, 12, 24]:
        d = add_months(reference_date, months)
        t = (d - reference_date).days / 365.0
        print(f"  {d}  {curve.value(t):.3f}")

    return curve


def curve_table(curve: DiscountCurve, treasury) -> pd.DataFrame:
    """Tabulate discount factors and zero rates on a yearly grid."""
    tenors = np.arange(1.0, 31.0)
    return pd.DataFrame({
        "tenor": tenors,
        "ois_df": curve.discount_factors(tenors),
        "ois_zero": curve.zero_rates(tenors),
        "ust_df": treasury.discount_factors(tenors),
        "ust_zero": treasury.zero_rates(tenors),
    })


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="MarketCurves Demo")
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Output directory for the curve table"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    valuation_date = date(2024, 1, 15)

    print("="*60)
    print("MARKETCURVES DEMO")
    print(f"Valuation Date: {valuation_date}")
    print("="*60)

    ois_curve = build_ois_curve(valuation_date)
    model = CurveModel([ois_curve])
    show_derived_curves(model)

    treasury_curve = fit_treasury_curve(valuation_date)
    calibrate_discount_curve(model)
    build_index_curve(valuation_date)

    table = curve_table(ois_curve, treasury_curve)
    if args.output_dir:
        output_dir = Path(args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / "curves.csv"
        table.to_csv(path, index=False)
        print(f"\nExported curve table to {path}")
    else:
        print("\n" + table.head(10).to_string(index=False))

    print("\n" + "="*60)
    print("DEMO COMPLETE")
    print("="*60)


if __name__ == "__main__":
    main()
