"""CLI entrypoint: run the pricing simulation and print the comparison.

Usage:
    python -m src.simulator.generate
    python -m src.simulator.generate --traffic 50000
    python -m src.simulator.generate --set v2.conv_rate=6.5 --set v3.billing_cycle=Monthly
    python -m src.simulator.generate --json --out reports/simulation.json
    python -m src.simulator.generate --ai   # request an AI analysis
"""

import argparse
import asyncio
import json
import math

from src.analysis.ai import get_ai_analysis
from src.analysis.export import build_report, export_report
from src.analysis.lift import rpv_lift
from src.config.settings import get_settings
from src.core.logging import configure_logging
from src.pricing.variants import (
    BillingCycle,
    GlobalAssumptions,
    PricingVariant,
    default_assumptions,
    default_variants,
    set_monthly_traffic,
    update_assumption,
    update_variant,
)
from src.simulator.engine import run_simulation
from src.simulator.insight import generate_insight
from src.simulator.schemas import SimulationOutput

VARIANT_FIELDS = {"name": str, "price": float, "billing_cycle": BillingCycle, "notes": str}
ASSUMPTION_FIELDS = {"traffic_split": float, "conv_rate": float, "churn_rate": float}
# Inclusive (low, high) bounds; None means unbounded
FIELD_BOUNDS = {
    "price": (0.0, None),
    "traffic_split": (0.0, 100.0),
    "conv_rate": (0.0, 100.0),
    "churn_rate": (0.0, 100.0),
}


def positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid integer {text!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"Monthly traffic must be positive, got {value}")
    return value


def parse_override(text: str) -> tuple[str, str, object]:
    """Parse 'v2.conv_rate=6.5' into ('v2', 'conv_rate', 6.5)."""
    target, sep, raw = text.partition("=")
    variant_id, dot, field_name = target.partition(".")
    if not sep or not dot or not variant_id or not field_name:
        raise argparse.ArgumentTypeError(
            f"Invalid override {text!r}, expected VARIANT.FIELD=VALUE"
        )
    cast = VARIANT_FIELDS.get(field_name) or ASSUMPTION_FIELDS.get(field_name)
    if cast is None:
        known = ", ".join([*VARIANT_FIELDS, *ASSUMPTION_FIELDS])
        raise argparse.ArgumentTypeError(f"Unknown field {field_name!r} (known: {known})")
    try:
        value = cast(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid value {raw!r} for {field_name}")

    if field_name in FIELD_BOUNDS:
        low, high = FIELD_BOUNDS[field_name]
        if not math.isfinite(value):
            raise argparse.ArgumentTypeError(f"Invalid value {raw!r} for {field_name}: must be finite")
        if value < low or (high is not None and value > high):
            limit = f"between {low:g} and {high:g}" if high is not None else f">= {low:g}"
            raise argparse.ArgumentTypeError(f"Invalid value {raw!r} for {field_name}: must be {limit}")
    return variant_id, field_name, value


def apply_overrides(
    variants: list[PricingVariant],
    assumptions: GlobalAssumptions,
    overrides: list[tuple[str, str, object]],
) -> tuple[list[PricingVariant], GlobalAssumptions]:
    for variant_id, field_name, value in overrides:
        if field_name in VARIANT_FIELDS:
            variants = update_variant(variants, variant_id, **{field_name: value})
        else:
            assumptions = update_assumption(assumptions, variant_id, **{field_name: value})
    return variants, assumptions


def format_table(output: SimulationOutput) -> str:
    control = output.control
    lines = [
        f"{'Variant':<18} {'Visitors':>9} {'Conv.':>7} {'Revenue':>12} "
        f"{'ARPU':>9} {'RPV':>7} {'Lift':>7}  Leader"
    ]
    for r in output.results:
        flags = []
        if r.is_revenue_leader:
            flags.append("revenue")
        if r.is_rpv_leader:
            flags.append("rpv")
        lines.append(
            f"{r.name[:18]:<18} {r.visitors:>9,.0f} {r.conversions:>7,.0f} "
            f"{r.revenue:>12,.2f} {r.arpu:>9,.2f} {r.rpv:>7.2f} "
            f"{rpv_lift(r, control):>+6.1f}%  {', '.join(flags)}"
        )
    return "\n".join(lines)


def main(args: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Simulate a pricing experiment")
    parser.add_argument("--traffic", type=positive_int, default=None, help="Total monthly traffic")
    parser.add_argument(
        "--set", dest="overrides", type=parse_override, action="append", default=[],
        metavar="VARIANT.FIELD=VALUE", help="Override a variant field or assumption",
    )
    parser.add_argument("--json", action="store_true", help="Print the JSON report")
    parser.add_argument("--out", type=str, default=None, help="Write the JSON report to a file")
    parser.add_argument("--ai", action="store_true", help="Request an AI analysis")
    opts = parser.parse_args(args)
    if opts.json and opts.ai:
        parser.error("--ai cannot be combined with --json")

    configure_logging(get_settings().log_level)

    variants, assumptions = default_variants(), default_assumptions()
    if opts.traffic is not None:
        assumptions = set_monthly_traffic(assumptions, opts.traffic)
    variants, assumptions = apply_overrides(variants, assumptions, opts.overrides)

    if opts.out:
        export_report(opts.out, variants, assumptions)
        if not opts.json:
            print(f"Report written to {opts.out}")

    if opts.json:
        print(json.dumps(build_report(variants, assumptions), indent=2))
        return

    output = run_simulation(variants, assumptions)
    print(f"Monthly traffic: {assumptions.monthly_traffic:,}")
    print(format_table(output))

    warning = output.split_warning()
    if warning:
        print(f"\nWARNING: {warning}")

    print(f"\nInsight: {generate_insight(output)}")

    if opts.ai:
        analysis = asyncio.run(get_ai_analysis(output, variants, assumptions))
        if analysis is None:
            print("\nAI analysis: no analysis available")
        else:
            print(f"\nAI recommendation: {analysis.recommendation.value}")
            print(f"  {analysis.executive_summary}")
            for pro in analysis.pros:
                print(f"  + {pro}")
            for con in analysis.cons:
                print(f"  - {con}")
            print(f"  Risk: {analysis.risk_assessment}")


if __name__ == "__main__":
    main()
