"""Relative performance of a variant result against the control result.

All lifts are percentages. A zero baseline has no meaningful lift, so
those cases return 0.0 rather than dividing by zero.
"""

from src.simulator.schemas import VariantResult


def conversion_rate(result: VariantResult) -> float:
    """Conversions per visitor as a fraction (0 when there are no visitors)."""
    if result.visitors == 0:
        return 0.0
    return result.conversions / result.visitors


def rpv_lift(result: VariantResult, control: VariantResult | None) -> float:
    if control is None or control.rpv <= 0:
        return 0.0
    return (result.rpv - control.rpv) / control.rpv * 100


def revenue_lift(result: VariantResult, control: VariantResult | None) -> float:
    if control is None or control.revenue == 0:
        return 0.0
    return (result.revenue - control.revenue) / control.revenue * 100


def conversion_lift(result: VariantResult, control: VariantResult | None) -> float:
    if control is None:
        return 0.0
    control_rate = conversion_rate(control)
    if control_rate == 0:
        return 0.0
    return (conversion_rate(result) - control_rate) / control_rate * 100
