"""Tests for lift helpers used by the dashboard cards and AI prompt."""

import pytest

from src.analysis.lift import conversion_lift, conversion_rate, revenue_lift, rpv_lift
from src.simulator.schemas import VariantResult


def _result(visitors=1000, conversions=50, revenue=5000, rpv=5.0):
    return VariantResult(
        variant_id="x", name="X",
        visitors=visitors, conversions=conversions,
        revenue=revenue, arpu=100, rpv=rpv,
    )


class TestLift:
    def test_rpv_lift(self):
        assert rpv_lift(_result(rpv=6.0), _result(rpv=5.0)) == pytest.approx(20.0)

    def test_rpv_lift_zero_control(self):
        assert rpv_lift(_result(rpv=6.0), _result(rpv=0.0)) == 0.0

    def test_rpv_lift_without_control(self):
        assert rpv_lift(_result(), None) == 0.0

    def test_revenue_lift(self):
        assert revenue_lift(_result(revenue=4000), _result(revenue=5000)) == pytest.approx(-20.0)

    def test_revenue_lift_zero_control(self):
        assert revenue_lift(_result(revenue=4000), _result(revenue=0)) == 0.0

    def test_conversion_rate(self):
        assert conversion_rate(_result(visitors=200, conversions=10)) == pytest.approx(0.05)
        assert conversion_rate(_result(visitors=0, conversions=0)) == 0.0

    def test_conversion_lift(self):
        control = _result(visitors=1000, conversions=40)
        variant = _result(visitors=1000, conversions=60)
        assert conversion_lift(variant, control) == pytest.approx(50.0)

    def test_conversion_lift_zero_control_rate(self):
        assert conversion_lift(_result(), _result(conversions=0)) == 0.0
