import json
import pytest

from artsoul.ai.analyzer import (
    analyze, analyze_with_source, build_prompt, fallback_analysis, parse_analysis,
    SOURCE_AI, SOURCE_FALLBACK,
)
from artsoul.ai.prompts import ANALYSIS_SCHEMA, FALLBACK_PERSONA, FALLBACK_ADVICE
from artsoul.core.exceptions import MalformedResponseError, ServiceUnavailableError
from artsoul.core.models import AIAnalysisResult


@pytest.mark.asyncio
async def test_well_formed_response_is_returned_as_is(school_a, ok_client):
    result = await analyze(school_a, ["design", "tech"], ok_client)

    assert result == AIAnalysisResult(persona="P", whyMatch="W", advice="A")
    assert result.model_dump(by_alias=True) == {"persona": "P", "whyMatch": "W", "advice": "A"}


@pytest.mark.asyncio
async def test_single_request_with_prompt_and_schema(school_a, ok_client):
    await analyze(school_a, ["design", "tech"], ok_client)

    assert len(ok_client.calls) == 1
    prompt, schema = ok_client.calls[0]
    assert school_a.name in prompt
    assert school_a.short_name in prompt
    assert "design, tech" in prompt
    assert schema == ANALYSIS_SCHEMA
    assert set(schema["required"]) == {"persona", "whyMatch", "advice"}


@pytest.mark.asyncio
@pytest.mark.parametrize("behaviour", [
    {"error": ConnectionError("network down")},
    {"error": ServiceUnavailableError("not configured")},
    {"error": RuntimeError("quota exceeded")},
    {"response": None},
    {"response": ""},
    {"response": "   "},
    {"response": "not json at all"},
    {"response": "[1, 2, 3]"},
    {"response": json.dumps({"persona": "P", "advice": "A"})},
    {"response": json.dumps({"persona": "", "whyMatch": "W", "advice": "A"})},
    {"response": json.dumps({"persona": "   ", "whyMatch": "W", "advice": "A"})},
    {"response": json.dumps({"persona": "P", "whyMatch": "\n\t", "advice": "A"})},
    {"response": json.dumps({"persona": 1, "whyMatch": "W", "advice": "A"})},
])
async def test_any_failure_falls_back(school_a, make_ai_client, behaviour):
    client = make_ai_client(**behaviour)
    result, source = await analyze_with_source(school_a, ["design", "tech"], client)

    assert source == SOURCE_FALLBACK
    assert result.persona == FALLBACK_PERSONA
    assert result.advice == FALLBACK_ADVICE
    assert "design" in result.why_match
    assert school_a.short_name in result.why_match
    assert all([result.persona, result.why_match, result.advice])


@pytest.mark.asyncio
async def test_failure_is_logged(school_a, failing_client, caplog):
    with caplog.at_level("ERROR", logger="artsoul.ai.analyzer"):
        await analyze(school_a, ["design"], failing_client)
    assert "network down" in caplog.text


@pytest.mark.asyncio
async def test_ai_source_reported(school_a, ok_client):
    _, source = await analyze_with_source(school_a, ["design"], ok_client)
    assert source == SOURCE_AI


def test_fallback_without_traits(school_b):
    result = fallback_analysis(school_b, [])
    assert "창의적인 성향" in result.why_match
    assert "SchoolB" in result.why_match


def test_fallback_uses_first_trait(school_b):
    result = fallback_analysis(school_b, ["fine_art", "design"])
    assert result.why_match.startswith("당신의 fine_art 성향이 SchoolB의")


def test_parse_analysis_errors():
    with pytest.raises(MalformedResponseError):
        parse_analysis("")
    with pytest.raises(MalformedResponseError):
        parse_analysis("{")
    with pytest.raises(MalformedResponseError):
        parse_analysis(json.dumps({"persona": "P"}))
    with pytest.raises(MalformedResponseError):
        parse_analysis(json.dumps({"persona": " ", "whyMatch": "W", "advice": "A"}))


def test_build_prompt_is_korean(school_a):
    prompt = build_prompt(school_a, ["tech"])
    assert "한국어" in prompt
    assert "persona" in prompt and "whyMatch" in prompt and "advice" in prompt
