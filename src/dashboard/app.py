"""
Streamlit dashboard for the pricing experiment simulator.

Three folds: Setup (traffic + variants), Dashboard (KPIs, RPV chart,
metrics table, insight, AI analysis) and Decision. Every widget edit
replaces one record in session state and the page reruns the simulation.

Run with:
    streamlit run src/dashboard/app.py
"""

import asyncio

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from src.analysis.ai import get_ai_analysis
from src.analysis.lift import rpv_lift
from src.config.settings import get_settings
from src.core.logging import configure_logging
from src.pricing.decision import DecisionStatus, record_decision
from src.pricing.variants import (
    BillingCycle,
    add_variant,
    default_assumptions,
    default_variants,
    remove_variant,
    set_monthly_traffic,
    update_assumption,
    update_variant,
)
from src.simulator.config import DEFAULT_CONFIG
from src.simulator.engine import run_simulation
from src.simulator.insight import generate_insight

settings = get_settings()
configure_logging(settings.log_level)
cfg = DEFAULT_CONFIG

st.set_page_config(page_title=settings.app_name, page_icon="🧭", layout="wide")

# --- Session state ---
if "variants" not in st.session_state:
    st.session_state.variants = default_variants()
    st.session_state.assumptions = default_assumptions()
    st.session_state.decision = None
    st.session_state.ai_analysis = None
    st.session_state.ai_requested = False


def money(value: float, decimals: int = 0) -> str:
    return f"{cfg.currency_symbol}{value:,.{decimals}f}"


def apply_change(variants=None, assumptions=None) -> None:
    """Store edited session records; any AI analysis now describes stale numbers."""
    if variants is not None:
        st.session_state.variants = variants
    if assumptions is not None:
        st.session_state.assumptions = assumptions
    st.session_state.ai_analysis = None
    st.session_state.ai_requested = False


# --- FOLD 1: SETUP ---
st.title(settings.app_name)
st.header("Experiment Setup")
st.caption(
    "Define your baseline and test variants. All calculations normalize to "
    "monthly equivalents for comparative accuracy."
)

assumptions = st.session_state.assumptions
traffic = st.slider(
    "Total Traffic (Monthly)",
    min_value=cfg.min_traffic,
    max_value=cfg.max_traffic,
    step=cfg.traffic_step,
    value=assumptions.monthly_traffic,
    help="Traffic defines the scale of the experiment simulation.",
    key="traffic",
)
if traffic != assumptions.monthly_traffic:
    apply_change(assumptions=set_monthly_traffic(assumptions, traffic))

cols = st.columns(len(st.session_state.variants) or 1)
for i, (col, v) in enumerate(zip(cols, list(st.session_state.variants))):
    va = st.session_state.assumptions.for_variant(v.id)
    with col:
        st.markdown(f"**{'Baseline' if v.is_control else f'Variant {i}'}**")
        name = st.text_input("Name", value=v.name, key=f"name_{v.id}")
        price = st.number_input("Price", min_value=0.0, value=float(v.price), key=f"price_{v.id}")
        cycle = st.selectbox(
            "Cycle",
            [c.value for c in BillingCycle],
            index=[c.value for c in BillingCycle].index(v.billing_cycle.value),
            key=f"cycle_{v.id}",
        )
        notes = st.text_input("Notes", value=v.notes, key=f"notes_{v.id}")
        split = st.slider(
            "Traffic Split (%)", cfg.min_split, cfg.max_split,
            float(va.traffic_split), cfg.split_step, key=f"split_{v.id}",
        )
        # The slider cannot show rates below its minimum; only a moved slider is an edit
        shown_conv = min(max(float(va.conv_rate), cfg.min_conv_rate), cfg.max_conv_rate)
        conv = st.slider(
            "Conv. Rate (%)", cfg.min_conv_rate, cfg.max_conv_rate, shown_conv,
            cfg.conv_rate_step, key=f"conv_{v.id}",
        )

        changes = {
            k: new for k, new, old in (
                ("name", name, v.name),
                ("price", price, v.price),
                ("billing_cycle", cycle, v.billing_cycle.value),
                ("notes", notes, v.notes),
            ) if new != old
        }
        if changes:
            apply_change(variants=update_variant(st.session_state.variants, v.id, **changes))
        edits = {}
        if split != va.traffic_split:
            edits["traffic_split"] = split
        if conv != shown_conv:
            edits["conv_rate"] = conv
        if edits:
            apply_change(assumptions=update_assumption(st.session_state.assumptions, v.id, **edits))

        if not v.is_control and st.button("Remove", key=f"remove_{v.id}"):
            apply_change(*remove_variant(
                st.session_state.variants, st.session_state.assumptions, v.id,
            ))
            st.rerun()

if st.button("Add test variant"):
    apply_change(*add_variant(
        st.session_state.variants, st.session_state.assumptions,
    ))
    st.rerun()

variants = st.session_state.variants
assumptions = st.session_state.assumptions
simulation = run_simulation(variants, assumptions)

# Traffic allocation overview
st.subheader("Traffic Allocation Overview")
if simulation.is_balanced:
    st.success("Balanced")
else:
    st.error(simulation.split_warning())

allocation = go.Figure()
for i, v in enumerate(variants):
    allocation.add_trace(go.Bar(
        x=[assumptions.for_variant(v.id).traffic_split], y=["Split"],
        name=v.name, orientation="h", marker_color=cfg.color_for(i),
    ))
allocation.update_layout(barmode="stack", height=140, margin=dict(l=0, r=0, t=10, b=10))
st.plotly_chart(allocation, width="stretch")

# --- FOLD 2: DASHBOARD ---
st.header("Dashboard")
control = simulation.control
revenue_leader = simulation.revenue_leader

kpi_cols = st.columns(len(simulation.results) or 1)
for col, r in zip(kpi_cols, simulation.results):
    with col:
        label = f"{r.name} (RPV leader)" if r.is_rpv_leader else r.name
        st.metric(label, money(r.revenue), help="Total normalized monthly revenue")
        if revenue_leader is not None and r.variant_id == revenue_leader.variant_id:
            st.caption("Highest monthly revenue")
        lift = rpv_lift(r, control)
        st.metric("Revenue per Visitor (RPV)", money(r.rpv, 2), delta=f"{lift:+.1f}%")
        st.metric("Monthly ARPU", money(r.arpu))

chart = go.Figure(go.Bar(
    x=[r.name for r in simulation.results],
    y=[r.rpv for r in simulation.results],
    marker_color=[cfg.color_for(i) for i in range(len(simulation.results))],
))
chart.update_layout(title="Revenue per Visitor", yaxis_title="RPV", height=360)
st.plotly_chart(chart, width="stretch")

st.info(generate_insight(simulation))

table = pd.DataFrame([
    {
        "Variant": r.name,
        "Visitors": round(r.visitors),
        "Conversions": round(r.conversions),
        "Revenue": money(r.revenue),
        "ARPU": money(r.arpu),
        "RPV": money(r.rpv, 2),
    }
    for r in simulation.results
])
st.dataframe(table, width="stretch", hide_index=True)

if st.button("Generate AI analysis"):
    with st.spinner("Asking the pricing strategist..."):
        st.session_state.ai_analysis = asyncio.run(
            get_ai_analysis(simulation, variants, assumptions)
        )
        st.session_state.ai_requested = True

analysis = st.session_state.ai_analysis
if analysis is not None:
    st.subheader(f"AI Recommendation: {analysis.recommendation.value}")
    st.write(analysis.executive_summary)
    pros_col, cons_col = st.columns(2)
    with pros_col:
        st.markdown("**Pros**")
        for pro in analysis.pros:
            st.markdown(f"- {pro}")
    with cons_col:
        st.markdown("**Cons**")
        for con in analysis.cons:
            st.markdown(f"- {con}")
    st.warning(analysis.risk_assessment)
elif st.session_state.ai_requested:
    st.caption("No analysis available.")

# --- FOLD 3: DECISION ---
st.header("Decision")
status = st.radio(
    "Outcome", [s.value for s in DecisionStatus], horizontal=True, index=None,
)
rationale = st.text_area(
    "Rationale",
    placeholder="Why did we reach this decision? (e.g., Variant 2 showed 15% RPV lift despite higher churn risk...)",
)
if status is not None:
    st.session_state.decision = record_decision(status, rationale)
    st.success(f"Decision recorded: {st.session_state.decision.status.value}")
