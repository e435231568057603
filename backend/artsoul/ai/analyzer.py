import json
import logging
from typing import Sequence, Tuple

from pydantic import ValidationError

from ..core.models import AIAnalysisResult, School
from ..core.exceptions import MalformedResponseError
from .client import StructuredTextClient
from .prompts import (
    ANALYSIS_PROMPT, ANALYSIS_SCHEMA,
    FALLBACK_PERSONA, FALLBACK_WHY_MATCH, FALLBACK_TRAIT, FALLBACK_ADVICE,
)

logger = logging.getLogger(__name__)

SOURCE_AI = "ai"
SOURCE_FALLBACK = "fallback"


def build_prompt(school: School, top_traits: Sequence[str]) -> str:
    return ANALYSIS_PROMPT.format(
        school_name=school.name,
        school_short_name=school.short_name,
        user_traits=", ".join(top_traits),
    )


def parse_analysis(text: str) -> AIAnalysisResult:
    """Parse the service's JSON text into an AIAnalysisResult"""
    if not text or not text.strip():
        raise MalformedResponseError("No response from AI service")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Response is not valid JSON: {e}")

    if not isinstance(data, dict):
        raise MalformedResponseError(f"Expected a JSON object, got {type(data).__name__}")

    try:
        return AIAnalysisResult.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"Response does not match the analysis schema: {e}")


def fallback_analysis(school: School, top_traits: Sequence[str]) -> AIAnalysisResult:
    """Static analysis built from local data only"""
    trait = top_traits[0] if top_traits else FALLBACK_TRAIT
    return AIAnalysisResult(
        persona=FALLBACK_PERSONA,
        why_match=FALLBACK_WHY_MATCH.format(trait=trait, school_short_name=school.short_name),
        advice=FALLBACK_ADVICE,
    )


async def analyze_with_source(
    school: School,
    top_traits: Sequence[str],
    ai_client: StructuredTextClient,
) -> Tuple[AIAnalysisResult, str]:
    """
    Ask the AI service for a persona, rationale and advice

    Exactly one request is made. Any failure (transport error, empty body,
    malformed JSON, schema mismatch) is logged and replaced by the fallback
    record, so this never raises for service problems.

    Returns:
        (analysis, source) where source is "ai" or "fallback"
    """
    prompt = build_prompt(school, top_traits)

    try:
        text = await ai_client.generate_structured(prompt, ANALYSIS_SCHEMA)
        analysis = parse_analysis(text)
        logger.info(f"AI analysis generated for {school.id}: {analysis.persona}")
        return analysis, SOURCE_AI
    except Exception as e:
        logger.error(f"Error fetching AI analysis for {school.id}: {e}", exc_info=True)
        return fallback_analysis(school, top_traits), SOURCE_FALLBACK


async def analyze(
    school: School,
    top_traits: Sequence[str],
    ai_client: StructuredTextClient,
) -> AIAnalysisResult:
    analysis, _ = await analyze_with_source(school, top_traits, ai_client)
    return analysis
