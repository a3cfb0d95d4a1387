"""Narrative insight derived from a simulation run.

The insight compares the RPV leader against the control variant and
explains where the leader's efficiency comes from: conversion volume,
ARPU, or both.
"""

from src.analysis.lift import conversion_rate
from src.simulator.schemas import SimulationOutput

AWAITING_INSIGHT = "Awaiting simulation data..."

CONTROL_WINS_INSIGHT = (
    "The Control variant remains the most efficient strategy. Test variants have "
    "not yet demonstrated a significant uplift in Revenue Per Visitor (RPV)."
)

VOLUME_OFFSETS_PRICE = (
    "It improves conversion volume significantly, successfully offsetting "
    "the lower price point/ARPU."
)
ARPU_DESPITE_CONVERSION = (
    "High ARPU is driving the success here, though it comes at the cost of a "
    "lower conversion rate compared to the baseline."
)
EFFICIENT_EXPANSION = (
    "It manages to increase both individual customer value and overall "
    "conversion, a highly efficient expansion strategy."
)


def generate_insight(output: SimulationOutput) -> str:
    """Describe the RPV leader's performance relative to control.

    When the control has zero RPV the lift is undefined, so the sentence
    reports it as unmeasurable instead of printing inf/nan.
    """
    leader = output.rpv_leader
    control = output.control
    if leader is None or control is None:
        return AWAITING_INSIGHT

    if leader.variant_id == control.variant_id:
        return CONTROL_WINS_INSIGHT

    if control.rpv > 0:
        lift = (leader.rpv - control.rpv) / control.rpv * 100
        text = f"{leader.name} is the winner with a {lift:.1f}% efficiency lift over Control."
    else:
        text = f"{leader.name} is the winner with an unmeasurable efficiency lift over Control (Control RPV is zero)."

    conv_diff = (conversion_rate(leader) - conversion_rate(control)) * 100

    if conv_diff > 0 and leader.arpu < control.arpu:
        clause = VOLUME_OFFSETS_PRICE
    elif conv_diff < 0 and leader.arpu > control.arpu:
        clause = ARPU_DESPITE_CONVERSION
    elif conv_diff > 0 and leader.arpu >= control.arpu:
        clause = EFFICIENT_EXPANSION
    else:
        return text

    return f"{text} {clause}"
