"""CI validation: verify an exported simulation report is complete and sane.

This script is the final gate in CI. It reads the exported report JSON
and asserts structural and arithmetic invariants. If anything is wrong,
it exits non-zero and fails the build.

Usage:
    python ci/validate_simulation.py
    python ci/validate_simulation.py --data reports/simulation.json
"""

import argparse
import json
import sys
from pathlib import Path

REQUIRED_TOP_KEYS = {"assumptions", "variants", "results", "traffic_split_total", "is_balanced", "insight"}
RESULT_FIELDS = {
    "variant_id",
    "name",
    "visitors",
    "conversions",
    "revenue",
    "arpu",
    "rpv",
    "is_revenue_leader",
    "is_rpv_leader",
}
NON_NEGATIVE_FIELDS = ("visitors", "conversions", "revenue", "arpu", "rpv")
BILLING_CYCLES = ("Monthly", "Annual")
TOLERANCE = 1e-6


def _check_leaders(results: list[dict], metric: str, flag: str) -> list[str]:
    errors = []
    best = max(r[metric] for r in results)
    for r in results:
        expected = best > 0 and abs(r[metric] - best) <= TOLERANCE
        if bool(r[flag]) != expected:
            errors.append(
                f"Result {r['variant_id']} has {flag}={r[flag]} "
                f"but {metric}={r[metric]} (max {best})"
            )
    return errors


def validate(data: dict) -> list[str]:
    """Return a list of validation errors (empty = pass)."""
    errors = []

    # --- Top-level structure ---
    for key in sorted(REQUIRED_TOP_KEYS):
        if key not in data:
            errors.append(f"Missing top-level key: {key}")

    if errors:
        return errors  # Can't continue without structure

    # --- Variants ---
    variants = data["variants"]
    if not variants:
        errors.append("variants is empty, nothing was simulated")
        return errors

    ids = [v["id"] for v in variants]
    if len(ids) != len(set(ids)):
        errors.append("Variant ids must be unique")

    controls = [v["id"] for v in variants if v.get("is_control")]
    if len(controls) != 1:
        errors.append(f"Expected exactly one control variant, found {len(controls)}")

    for v in variants:
        if v.get("billing_cycle") not in BILLING_CYCLES:
            errors.append(f"Variant {v['id']} has invalid billing cycle: {v.get('billing_cycle')}")

    # --- Assumptions ---
    assumptions = data["assumptions"]
    if assumptions.get("monthly_traffic", 0) <= 0:
        errors.append("monthly_traffic must be positive")

    splits = {a["variant_id"]: a["traffic_split"] for a in assumptions.get("per_variant", [])}
    split_sum = sum(splits.get(i, 0) for i in ids)
    if abs(split_sum - data["traffic_split_total"]) > TOLERANCE:
        errors.append(
            f"traffic_split_total {data['traffic_split_total']} != sum of splits {split_sum}"
        )
    if data["is_balanced"] != (data["traffic_split_total"] == 100):
        errors.append("is_balanced does not match traffic_split_total")

    # --- Results ---
    results = data["results"]
    if [r.get("variant_id") for r in results] != ids:
        errors.append("Results must follow the variant order one-to-one")
        return errors

    for r in results:
        missing = RESULT_FIELDS - set(r.keys())
        if missing:
            errors.append(f"Result {r.get('variant_id', 'UNKNOWN')} missing fields: {sorted(missing)}")
            continue
        for name in NON_NEGATIVE_FIELDS:
            if r[name] < 0:
                errors.append(f"Result {r['variant_id']} has negative {name}: {r[name]}")
        if r["conversions"] > r["visitors"] + TOLERANCE:
            errors.append(f"Result {r['variant_id']} has more conversions than visitors")

    if errors:
        return errors

    errors.extend(_check_leaders(results, "revenue", "is_revenue_leader"))
    errors.extend(_check_leaders(results, "rpv", "is_rpv_leader"))

    if not data["insight"]:
        errors.append("insight is empty")

    return errors


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate an exported simulation report")
    parser.add_argument(
        "--data",
        default="reports/simulation.json",
        help="Path to exported report JSON",
    )
    opts = parser.parse_args()

    path = Path(opts.data)
    if not path.exists():
        print(f"FAIL: {opts.data} not found. Run 'python -m src.analysis.export' first.")
        sys.exit(1)

    data = json.loads(path.read_text())
    errors = validate(data)

    if errors:
        print(f"FAIL: {len(errors)} validation error(s):")
        for e in errors:
            print(f"  - {e}")
        sys.exit(1)

    results = data["results"]
    print("PASS: Simulation report validated")
    print(f"  Monthly traffic: {data['assumptions']['monthly_traffic']:,}")
    print(f"  Traffic split: {data['traffic_split_total']:g}% ({'balanced' if data['is_balanced'] else 'imbalanced'})")
    for r in results:
        marker = " *" if r["is_rpv_leader"] else ""
        print(f"  {r['name']}: revenue={r['revenue']:,.2f} rpv={r['rpv']:.2f}{marker}")


if __name__ == "__main__":
    main()
