"""Tests for the AI analysis adapter, using a fake async client."""

import asyncio
import json
from types import SimpleNamespace

import httpx
import openai
import pytest
from pydantic import SecretStr

from src.analysis.ai import (
    AIAnalysis,
    Recommendation,
    build_prompt,
    create_client,
    get_ai_analysis,
    parse_analysis,
)
from src.config.settings import AIConfig
from src.pricing.variants import default_assumptions, default_variants, update_variant
from src.simulator.engine import run_simulation

VALID_REPLY = {
    "recommendation": "ROLL_OUT",
    "executiveSummary": "Test Variant 1 lifts RPV over control.",
    "pros": ["Higher conversion"],
    "cons": ["Lower ARPU"],
    "riskAssessment": "Watch churn on the cheaper plan.",
}


class FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeClient:
    def __init__(self, content=None, error=None):
        self.completions = FakeCompletions(content, error)
        self.chat = SimpleNamespace(completions=self.completions)


def _session():
    variants, assumptions = default_variants(), default_assumptions()
    return run_simulation(variants, assumptions), variants, assumptions


def _run(client, config=None):
    output, variants, assumptions = _session()
    return asyncio.run(get_ai_analysis(
        output, variants, assumptions, client=client, config=config or AIConfig(),
    ))


class TestPrompt:
    def test_prompt_describes_every_variant(self):
        prompt = build_prompt(*_session())
        assert "Variant: Control (CONTROL)" in prompt
        assert "Variant: Test Variant 2 (TEST)" in prompt
        assert "Price: 3990 / Annual" in prompt
        assert "Notes: Testing lower price point" in prompt
        assert "25000 monthly traffic" in prompt

    def test_control_has_zero_lift(self):
        prompt = build_prompt(*_session())
        control_block = prompt.split("Variant: Test Variant 1")[0]
        assert "Revenue Lift vs Control: 0.00%" in control_block
        assert "Conversion Lift vs Control: 0.00%" in control_block

    def test_empty_notes_rendered_as_none(self):
        output, variants, assumptions = _session()
        variants = update_variant(variants, "v1", notes="")
        assert "Notes: None" in build_prompt(output, variants, assumptions)


class TestParse:
    def test_valid_reply(self):
        analysis = parse_analysis(json.dumps(VALID_REPLY))
        assert analysis.recommendation == Recommendation.ROLL_OUT
        assert analysis.executive_summary.startswith("Test Variant 1")
        assert analysis.pros == ["Higher conversion"]

    def test_snake_case_keys_accepted(self):
        analysis = AIAnalysis(
            recommendation="REJECT", executive_summary="No.", risk_assessment="None",
        )
        assert analysis.recommendation == Recommendation.REJECT

    @pytest.mark.parametrize("content", [None, "", "   ", "not json", '{"recommendation": "MAYBE"}'])
    def test_unusable_reply(self, content):
        assert parse_analysis(content) is None


class TestGetAnalysis:
    def test_success(self):
        client = FakeClient(json.dumps(VALID_REPLY))
        analysis = _run(client)
        assert analysis.recommendation == Recommendation.ROLL_OUT
        call = client.completions.calls[0]
        assert call["response_format"] == {"type": "json_object"}
        assert call["messages"][0]["role"] == "system"
        assert "EXPERIMENT SETUP & RESULTS" in call["messages"][1]["content"]

    def test_malformed_reply_returns_none(self):
        assert _run(FakeClient("{oops")) is None

    def test_api_error_returns_none(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        assert _run(FakeClient(error=openai.APIConnectionError(request=request))) is None

    def test_no_api_key_skips_call(self):
        config = AIConfig(OPENAI_API_KEY=None)
        assert create_client(config) is None
        output, variants, assumptions = _session()
        assert asyncio.run(get_ai_analysis(output, variants, assumptions, config=config)) is None

    def test_create_client_with_key(self):
        config = AIConfig(OPENAI_API_KEY=SecretStr("sk-test"))
        assert isinstance(create_client(config), openai.AsyncOpenAI)

    def test_cancellation_propagates(self):
        class SlowCompletions:
            async def create(self, **kwargs):
                await asyncio.sleep(10)

        client = SimpleNamespace(chat=SimpleNamespace(completions=SlowCompletions()))
        output, variants, assumptions = _session()

        async def run_and_cancel():
            task = asyncio.create_task(get_ai_analysis(
                output, variants, assumptions, client=client, config=AIConfig(),
            ))
            await asyncio.sleep(0)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            return task.cancelled()

        assert asyncio.run(run_and_cancel()) is True
