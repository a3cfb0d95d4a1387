"""AI analysis of a simulation run via an LLM chat-completions API.

The adapter only reads a snapshot of the simulation output, variants and
assumptions. It runs asynchronously and every failure (missing key,
network error, timeout, malformed reply) degrades to ``None`` so the
dashboard keeps showing the computed metrics. Cancellation of the
awaiting task is left to propagate.
"""

from enum import Enum
from typing import Any, Optional

from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.analysis.lift import conversion_lift, revenue_lift
from src.config.settings import AIConfig, get_settings
from src.core.logging import get_logger
from src.pricing.variants import GlobalAssumptions, PricingVariant
from src.simulator.schemas import SimulationOutput

logger = get_logger(__name__)

SYSTEM_INSTRUCTION = (
    "You are a world-class pricing expert for B2B SaaS. Your goal is to maximize "
    "long-term LTV and market share while balancing short-term revenue goals. "
    "Be critical and evidence-based. If multiple test variants exist, compare "
    "them against each other and the control."
)

RESPONSE_FORMAT_INSTRUCTION = (
    "Respond with a single JSON object with exactly these keys: "
    '"recommendation" (one of "ROLL_OUT", "REJECT", "INCONCLUSIVE"), '
    '"executiveSummary" (a 2-3 sentence overview of the outcome), '
    '"pros" (array of strings), "cons" (array of strings), '
    '"riskAssessment" (potential downsides or things to watch for).'
)


class Recommendation(str, Enum):
    ROLL_OUT = "ROLL_OUT"
    REJECT = "REJECT"
    INCONCLUSIVE = "INCONCLUSIVE"


class AIAnalysis(BaseModel):
    """Structured analysis returned by the model."""
    model_config = ConfigDict(populate_by_name=True)

    recommendation: Recommendation
    executive_summary: str = Field(alias="executiveSummary")
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    risk_assessment: str = Field(alias="riskAssessment")


def build_prompt(
    output: SimulationOutput,
    variants: list[PricingVariant],
    assumptions: GlobalAssumptions,
) -> str:
    """Describe every variant's setup and results relative to control."""
    control = output.control
    by_id = {r.variant_id: r for r in output.results}

    blocks = []
    for v in variants:
        result = by_id.get(v.id)
        rev_lift = revenue_lift(result, control) if result else 0.0
        conv_lift = conversion_lift(result, control) if result else 0.0
        revenue = result.revenue if result else 0.0
        conversions = result.conversions if result else 0.0
        arpu = result.arpu if result else 0.0
        blocks.append(
            f"Variant: {v.name} ({'CONTROL' if v.is_control else 'TEST'})\n"
            f"Price: {v.price:g} / {v.billing_cycle.value}\n"
            f"Notes: {v.notes or 'None'}\n"
            f"Total Revenue: ${revenue:.2f}\n"
            f"Total Conversions: {conversions:.0f}\n"
            f"ARPU: ${arpu:.2f}\n"
            f"Revenue Lift vs Control: {rev_lift:.2f}%\n"
            f"Conversion Lift vs Control: {conv_lift:.2f}%"
        )

    variant_context = "\n\n".join(blocks)
    return (
        "As a Senior Product Manager and Pricing Strategist, analyze the following "
        "A/B/n experiment results and provide a recommendation.\n\n"
        f"EXPERIMENT SETUP & RESULTS:\n{variant_context}\n\n"
        f"Context: The experiment simulation was based on "
        f"{assumptions.monthly_traffic} monthly traffic.\n\n"
        f"{RESPONSE_FORMAT_INSTRUCTION}"
    )


def parse_analysis(content: Optional[str]) -> Optional[AIAnalysis]:
    """Parse the model's JSON reply, returning None when it is unusable."""
    if not content or not content.strip():
        logger.warning("AI analysis reply was empty")
        return None
    try:
        return AIAnalysis.model_validate_json(content.strip())
    except ValidationError as e:
        logger.error("Failed to parse AI response: %s", e)
        return None


def create_client(config: AIConfig) -> Optional[AsyncOpenAI]:
    """Create the async API client, or None when no API key is configured."""
    if not config.enabled or config.api_key is None:
        return None
    return AsyncOpenAI(
        api_key=config.api_key.get_secret_value(),
        base_url=config.base_url,
        timeout=config.timeout,
    )


async def get_ai_analysis(
    output: SimulationOutput,
    variants: list[PricingVariant],
    assumptions: GlobalAssumptions,
    client: Any = None,
    config: Optional[AIConfig] = None,
) -> Optional[AIAnalysis]:
    """Ask the model for a recommendation on the current simulation.

    Returns None ("no analysis available") on any provider or parsing
    failure. ``client`` may be any object exposing the async
    ``chat.completions.create`` call of the openai SDK.
    """
    config = config or get_settings().ai
    if client is None:
        client = create_client(config)
    if client is None:
        logger.info("AI analysis skipped: no API key configured")
        return None

    prompt = build_prompt(output, variants, assumptions)
    try:
        response = await client.chat.completions.create(
            model=config.model_name,
            temperature=config.temperature,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": prompt},
            ],
        )
    except OpenAIError as e:
        logger.error("AI analysis request failed: %s", e)
        return None

    if not response.choices:
        logger.warning("AI analysis reply had no choices")
        return None
    return parse_analysis(response.choices[0].message.content)
