"""Export a simulation run as a JSON report.

The report bundles the inputs with the derived results so it can be
checked independently (see ci/validate_simulation.py).

Usage:
    python -m src.analysis.export
    python -m src.analysis.export --out reports/simulation.json
"""

import argparse
import json
from dataclasses import asdict
from pathlib import Path

from src.analysis.lift import rpv_lift
from src.pricing.variants import GlobalAssumptions, PricingVariant, default_assumptions, default_variants
from src.simulator.engine import run_simulation
from src.simulator.insight import generate_insight

DEFAULT_REPORT_PATH = "reports/simulation.json"


def build_report(
    variants: list[PricingVariant],
    assumptions: GlobalAssumptions,
) -> dict:
    output = run_simulation(variants, assumptions)
    control = output.control

    results = []
    for r in output.results:
        row = r.model_dump(mode="json")
        row["rpv_lift_pct"] = rpv_lift(r, control)
        results.append(row)

    return {
        "assumptions": {
            "monthly_traffic": assumptions.monthly_traffic,
            "per_variant": [
                asdict(assumptions.for_variant(v.id)) for v in variants
            ],
        },
        "variants": [
            {**asdict(v), "billing_cycle": v.billing_cycle.value} for v in variants
        ],
        "results": results,
        "traffic_split_total": output.traffic_split_total,
        "is_balanced": output.is_balanced,
        "insight": generate_insight(output),
    }


def export_report(
    path: str | Path,
    variants: list[PricingVariant],
    assumptions: GlobalAssumptions,
) -> dict:
    report = build_report(variants, assumptions)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(report, indent=2))
    return report


def main(args: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Export the default simulation report")
    parser.add_argument("--out", default=DEFAULT_REPORT_PATH, help="Output JSON path")
    opts = parser.parse_args(args)

    report = export_report(opts.out, default_variants(), default_assumptions())
    print(f"Exported {len(report['results'])} variant results to {opts.out}")


if __name__ == "__main__":
    main()
