"""Pricing variants and the traffic/conversion assumptions attached to them.

A session holds an ordered list of variants (one control plus test
variants) and a GlobalAssumptions record keyed by variant id. Records are
immutable: every edit replaces one record and returns new collections,
so the simulation can be rerun from scratch after each change.
"""

from dataclasses import dataclass, field, replace
from enum import Enum


class BillingCycle(str, Enum):
    MONTHLY = "Monthly"
    ANNUAL = "Annual"


@dataclass(frozen=True)
class PricingVariant:
    id: str
    name: str
    price: float
    billing_cycle: BillingCycle = BillingCycle.MONTHLY
    notes: str = ""
    is_control: bool = False


@dataclass(frozen=True)
class VariantAssumptions:
    variant_id: str
    traffic_split: float = 0.0  # Percent of monthly traffic (0-100)
    conv_rate: float = 0.0      # Percent of visitors who convert (0-100)
    churn_rate: float = 0.0     # Percent, carried for reference only


@dataclass(frozen=True)
class GlobalAssumptions:
    monthly_traffic: int
    per_variant: dict[str, VariantAssumptions] = field(default_factory=dict)

    def for_variant(self, variant_id: str) -> VariantAssumptions:
        """Assumptions for a variant, or a zeroed default when none exist."""
        return self.per_variant.get(variant_id) or VariantAssumptions(variant_id)


def update_variant(
    variants: list[PricingVariant], variant_id: str, **changes,
) -> list[PricingVariant]:
    """Return a new variant list with one variant's fields replaced."""
    if "id" in changes:
        raise ValueError("Variant id cannot be changed")
    if "billing_cycle" in changes:
        changes["billing_cycle"] = BillingCycle(changes["billing_cycle"])
    return [replace(v, **changes) if v.id == variant_id else v for v in variants]


def update_assumption(
    assumptions: GlobalAssumptions, variant_id: str, **changes,
) -> GlobalAssumptions:
    """Return new assumptions with one variant's entry replaced.

    A variant with no entry yet starts from the zeroed default.
    """
    if "variant_id" in changes:
        raise ValueError("Assumption variant_id cannot be changed")
    current = assumptions.for_variant(variant_id)
    per_variant = dict(assumptions.per_variant)
    per_variant[variant_id] = replace(current, **changes)
    return replace(assumptions, per_variant=per_variant)


def set_monthly_traffic(assumptions: GlobalAssumptions, monthly_traffic: int) -> GlobalAssumptions:
    return replace(assumptions, monthly_traffic=monthly_traffic)


def add_variant(
    variants: list[PricingVariant],
    assumptions: GlobalAssumptions,
    name: str | None = None,
    price: float = 0.0,
    billing_cycle: BillingCycle = BillingCycle.MONTHLY,
) -> tuple[list[PricingVariant], GlobalAssumptions]:
    """Append a test variant with a fresh id and a zero traffic split."""
    taken = {v.id for v in variants}
    n = len(variants) + 1
    while f"v{n}" in taken:
        n += 1
    new_id = f"v{n}"
    variant = PricingVariant(
        id=new_id,
        name=name or f"Test Variant {len(variants)}",
        price=price,
        billing_cycle=billing_cycle,
    )
    per_variant = dict(assumptions.per_variant)
    per_variant[new_id] = VariantAssumptions(new_id)
    return [*variants, variant], replace(assumptions, per_variant=per_variant)


def remove_variant(
    variants: list[PricingVariant],
    assumptions: GlobalAssumptions,
    variant_id: str,
) -> tuple[list[PricingVariant], GlobalAssumptions]:
    per_variant = {k: v for k, v in assumptions.per_variant.items() if k != variant_id}
    return (
        [v for v in variants if v.id != variant_id],
        replace(assumptions, per_variant=per_variant),
    )


def default_variants() -> list[PricingVariant]:
    """Starting variants for a new session."""
    return [
        PricingVariant(
            id="v1", name="Control", price=499,
            billing_cycle=BillingCycle.MONTHLY,
            notes="Current baseline", is_control=True,
        ),
        PricingVariant(
            id="v2", name="Test Variant 1", price=349,
            billing_cycle=BillingCycle.MONTHLY,
            notes="Testing lower price point",
        ),
        PricingVariant(
            id="v3", name="Test Variant 2", price=3990,
            billing_cycle=BillingCycle.ANNUAL,
            notes="Testing annual commitment",
        ),
    ]


def default_assumptions() -> GlobalAssumptions:
    """Starting assumptions matching default_variants()."""
    return GlobalAssumptions(
        monthly_traffic=25000,
        per_variant={
            "v1": VariantAssumptions("v1", traffic_split=34, conv_rate=4.2, churn_rate=5),
            "v2": VariantAssumptions("v2", traffic_split=33, conv_rate=6.1, churn_rate=8),
            "v3": VariantAssumptions("v3", traffic_split=33, conv_rate=2.8, churn_rate=2),
        },
    )
