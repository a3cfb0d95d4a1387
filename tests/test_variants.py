"""Tests for variant records, replace-on-edit helpers and decisions."""

import pytest

from src.pricing.decision import Decision, DecisionStatus, record_decision
from src.pricing.variants import (
    BillingCycle,
    VariantAssumptions,
    add_variant,
    default_assumptions,
    default_variants,
    remove_variant,
    set_monthly_traffic,
    update_assumption,
    update_variant,
)


class TestDefaults:
    def test_default_variants(self):
        variants = default_variants()
        assert [v.id for v in variants] == ["v1", "v2", "v3"]
        assert [v.is_control for v in variants] == [True, False, False]
        assert variants[2].billing_cycle == BillingCycle.ANNUAL

    def test_default_assumptions_cover_every_variant(self):
        assumptions = default_assumptions()
        assert assumptions.monthly_traffic == 25000
        assert set(assumptions.per_variant) == {v.id for v in default_variants()}
        assert sum(a.traffic_split for a in assumptions.per_variant.values()) == 100

    def test_for_variant_defaults_to_zero(self):
        va = default_assumptions().for_variant("missing")
        assert va == VariantAssumptions("missing", 0, 0, 0)


class TestReplaceOnEdit:
    def test_update_variant_replaces_one_record(self):
        before = default_variants()
        after = update_variant(before, "v2", price=299, name="Cheaper")
        assert after[1].price == 299
        assert after[1].name == "Cheaper"
        assert after[1].billing_cycle == before[1].billing_cycle
        assert after[0] is before[0]
        assert before[1].price == 349  # input list untouched

    def test_update_variant_coerces_billing_cycle(self):
        after = update_variant(default_variants(), "v3", billing_cycle="Monthly")
        assert after[2].billing_cycle == BillingCycle.MONTHLY

    def test_update_variant_rejects_id_change(self):
        with pytest.raises(ValueError, match="id cannot be changed"):
            update_variant(default_variants(), "v1", id="v9")

    def test_update_unknown_variant_is_noop(self):
        before = default_variants()
        assert update_variant(before, "nope", price=1) == before

    def test_update_assumption(self):
        before = default_assumptions()
        after = update_assumption(before, "v1", conv_rate=5.5)
        assert after.per_variant["v1"].conv_rate == 5.5
        assert after.per_variant["v1"].traffic_split == 34
        assert before.per_variant["v1"].conv_rate == 4.2

    def test_update_assumption_creates_missing_entry(self):
        after = update_assumption(default_assumptions(), "v4", traffic_split=10)
        assert after.per_variant["v4"] == VariantAssumptions("v4", traffic_split=10)

    def test_set_monthly_traffic(self):
        after = set_monthly_traffic(default_assumptions(), 50000)
        assert after.monthly_traffic == 50000
        assert after.per_variant == default_assumptions().per_variant


class TestAddRemove:
    def test_add_variant(self):
        variants, assumptions = add_variant(default_variants(), default_assumptions(), price=199)
        assert variants[-1].id == "v4"
        assert variants[-1].name == "Test Variant 3"
        assert not variants[-1].is_control
        assert assumptions.per_variant["v4"].traffic_split == 0

    def test_add_variant_skips_taken_ids(self):
        variants, assumptions = remove_variant(default_variants(), default_assumptions(), "v2")
        variants, assumptions = add_variant(variants, assumptions)
        assert [v.id for v in variants] == ["v1", "v3", "v4"]

    def test_remove_variant(self):
        variants, assumptions = remove_variant(default_variants(), default_assumptions(), "v3")
        assert [v.id for v in variants] == ["v1", "v2"]
        assert "v3" not in assumptions.per_variant


class TestDecision:
    def test_record_enum(self):
        d = record_decision(DecisionStatus.SHIP, "  RPV up 15%  ")
        assert d == Decision(DecisionStatus.SHIP, "RPV up 15%")

    def test_record_from_name(self):
        assert record_decision("iterate").status == DecisionStatus.ITERATE

    def test_unknown_status(self):
        with pytest.raises(ValueError, match="Unknown decision status"):
            record_decision("MAYBE")
