"""Simulation engine that derives comparative revenue metrics per variant.

Each variant flows through the same arithmetic:
  traffic split -> visitors -> conversions -> revenue -> ARPU / RPV

Annual contracts are divided by 12 so every variant is compared on a
monthly-equivalent basis. The engine is a pure function: it never raises,
substitutes zeroed assumptions for unknown variants and guards every
division, so it can be rerun after each edit.
"""

from src.core.logging import get_logger
from src.pricing.variants import BillingCycle, GlobalAssumptions, PricingVariant
from src.simulator.schemas import SimulationOutput, VariantResult

logger = get_logger(__name__)


def run_simulation(
    variants: list[PricingVariant],
    assumptions: GlobalAssumptions,
) -> SimulationOutput:
    """Compute per-variant results and the summed traffic split.

    Results keep the input variant order. Every result matching the maximum
    revenue (resp. RPV) is flagged as leader, provided that maximum is > 0.
    """
    traffic_split_total = 0.0
    results: list[VariantResult] = []

    for variant in variants:
        va = assumptions.for_variant(variant.id)
        traffic_split_total += va.traffic_split
        results.append(_simulate_variant(variant, va.traffic_split, va.conv_rate, assumptions.monthly_traffic))

    if results:
        max_revenue = max(r.revenue for r in results)
        max_rpv = max(r.rpv for r in results)
        for r in results:
            r.is_revenue_leader = max_revenue > 0 and r.revenue == max_revenue
            r.is_rpv_leader = max_rpv > 0 and r.rpv == max_rpv

    logger.debug(
        "Simulated %d variants (traffic=%s, split total=%s)",
        len(results), assumptions.monthly_traffic, traffic_split_total,
    )
    return SimulationOutput(results=results, traffic_split_total=traffic_split_total)


def _simulate_variant(
    variant: PricingVariant,
    traffic_split: float,
    conv_rate: float,
    monthly_traffic: int,
) -> VariantResult:
    visitors = monthly_traffic * (traffic_split / 100)
    conversions = visitors * (conv_rate / 100)

    annual = variant.billing_cycle == BillingCycle.ANNUAL
    raw_revenue = conversions * variant.price
    revenue = raw_revenue / 12 if annual else raw_revenue

    # Price-derived on purpose: identical for every converting variant
    # with the same price and cycle, regardless of volume.
    monthly_price = variant.price / 12 if annual else variant.price
    arpu = monthly_price if conversions > 0 else 0.0
    rpv = revenue / visitors if visitors > 0 else 0.0

    return VariantResult(
        variant_id=variant.id,
        name=variant.name,
        is_control=variant.is_control,
        visitors=visitors,
        conversions=conversions,
        revenue=revenue,
        arpu=arpu,
        rpv=rpv,
    )
