from fastapi import APIRouter, HTTPException, Depends
from functools import lru_cache
from typing import Any, Dict
import logging
import random
from datetime import datetime

from ..core.catalog import Catalog, get_catalog
from ..core.exceptions import InvalidInputError
from ..core.matcher import RandomSource
from ..core.models import QuizResultRequest, School
from ..core.quiz import calculate_result, traits_from_answers
from ..core.utils import trait_labels
from ..ai.client import LangChainStructuredClient, StructuredTextClient
from ..config import settings

logger = logging.getLogger(__name__)

router = APIRouter()

VERSION = "1.0.0"


@lru_cache(maxsize=1)
def get_ai_client() -> StructuredTextClient:
    """Dependency to get the shared AI client"""
    return LangChainStructuredClient(settings)


def get_random_source() -> RandomSource:
    """Dependency to get the matcher's tie-break randomness"""
    return random.random


def _school_data(school: School) -> Dict[str, Any]:
    return {
        "id": school.id,
        "name": school.name,
        "short_name": school.short_name,
        "location": school.location,
        "description": school.description,
        "tags": trait_labels(school.tags),
        "color": school.color,
        "text_color": school.text_color,
        "bg_accent": school.bg_accent,
    }


# QUIZ ENDPOINTS

@router.get("/questions")
async def list_questions(catalog: Catalog = Depends(get_catalog)):
    """Ordered quiz questions; option traits stay on the server"""
    return {
        "questions": [
            {
                "id": q.id,
                "question": q.question,
                "options": [
                    {"index": idx, "text": option.text}
                    for idx, option in enumerate(q.options)
                ],
            }
            for q in catalog.questions
        ],
        "total": len(catalog.questions),
    }


@router.post("/quiz/result")
async def quiz_result(
    request: QuizResultRequest,
    catalog: Catalog = Depends(get_catalog),
    ai_client: StructuredTextClient = Depends(get_ai_client),
    random_source: RandomSource = Depends(get_random_source),
):
    """Score the answers, pick a school and attach the AI analysis"""
    try:
        traits = traits_from_answers(catalog.questions, request.answers)
    except InvalidInputError as e:
        logger.warning(f"Invalid answers: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    result = await calculate_result(
        traits,
        catalog.schools,
        ai_client,
        run_id=request.run_id,
        random_source=random_source,
        tie_break_scale=settings.TIE_BREAK_SCALE,
        top_k=settings.TOP_TRAITS_COUNT,
    )

    logger.info(
        f"Quiz result for run {request.run_id}: {result.school.id} "
        f"(analysis={result.analysis_source})"
    )
    return {
        "run_id": result.run_id,
        "school": _school_data(result.school),
        "top_traits": trait_labels(result.top_traits),
        "tally": {trait.value: count for trait, count in result.tally.items()},
        "analysis": result.analysis.model_dump(by_alias=True),
        "analysis_source": result.analysis_source,
    }


# SCHOOL ENDPOINTS

@router.get("/schools")
async def list_schools(catalog: Catalog = Depends(get_catalog)):
    """School catalog in catalog order"""
    return {
        "schools": [_school_data(s) for s in catalog.schools],
        "total": len(catalog.schools),
    }


@router.get("/schools/{school_id}")
async def get_school(school_id: str, catalog: Catalog = Depends(get_catalog)):
    school = catalog.get_school(school_id)
    if not school:
        raise HTTPException(status_code=404, detail="School not found")
    return _school_data(school)


# MONITORING ENDPOINTS

@router.get("/health")
async def health_check(
    catalog: Catalog = Depends(get_catalog),
    ai_client: StructuredTextClient = Depends(get_ai_client),
):
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "service": "ArtSoul School Matcher",
        "version": VERSION,
        "components": {
            "questions_loaded": len(catalog.questions),
            "schools_loaded": len(catalog.schools),
            "ai_analysis": "operational" if getattr(ai_client, "configured", True) else "fallback_only",
        },
        "configuration": {
            "ai_model": settings.AI_MODEL,
            "ai_enabled": settings.ENABLE_AI,
            "openai_configured": bool(settings.OPENAI_API_KEY),
        },
    }
