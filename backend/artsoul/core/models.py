from typing import Dict, List, Optional
from enum import Enum
from pydantic import BaseModel, Field, field_validator


class Trait(str, Enum):
    """Closed set of creative inclinations collected by the quiz"""
    CONCEPTUAL = "conceptual"
    COMMERCIAL = "commercial"
    FINE_ART = "fine_art"
    DESIGN = "design"
    TECH = "tech"
    FASHION = "fashion"

    @property
    def label(self) -> str:
        return TRAIT_LABELS[self]


TRAIT_LABELS = {
    Trait.CONCEPTUAL: "개념미술",
    Trait.COMMERCIAL: "상업예술",
    Trait.FINE_ART: "순수미술",
    Trait.DESIGN: "디자인",
    Trait.TECH: "테크",
    Trait.FASHION: "패션",
}

# Per-run trait counts, in first-occurrence order
TraitTally = Dict[Trait, int]


class Option(BaseModel):
    """Answer option; choosing it appends all of its traits"""
    text: str
    traits: List[Trait] = Field(default_factory=list)

    class Config:
        frozen = True


class Question(BaseModel):
    """Multiple-choice quiz question"""
    id: int
    question: str
    options: List[Option] = Field(..., min_length=1)

    class Config:
        frozen = True


class School(BaseModel):
    """Catalog entry a quiz run can be matched with"""
    id: str
    name: str
    short_name: str
    location: str
    description: str
    tags: List[Trait] = Field(..., min_length=1)

    # Presentation only, passed through to the front end
    color: str = "bg-gray-900"
    text_color: str = "text-gray-900"
    bg_accent: str = "bg-gray-50"

    class Config:
        frozen = True

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, tags: List[Trait]) -> List[Trait]:
        if len(set(tags)) != len(tags):
            raise ValueError(f"Duplicate tags: {[t.value for t in tags]}")
        return tags


class MatchResult(BaseModel):
    """Outcome of scoring a trait list against the school catalog"""
    best_school: School
    top_traits: List[Trait]
    tally: Dict[Trait, int]
    scores: Dict[str, int]  # raw score per school id, before tie-break


class AIAnalysisResult(BaseModel):
    """Persona, rationale and advice shown on the result screen"""
    persona: str = Field(..., min_length=1)
    why_match: str = Field(..., min_length=1, alias="whyMatch")
    advice: str = Field(..., min_length=1)

    class Config:
        frozen = True
        populate_by_name = True
        str_strip_whitespace = True


class QuizResult(BaseModel):
    """Combined result of one completed quiz run"""
    run_id: Optional[int] = None
    school: School
    top_traits: List[Trait]
    tally: Dict[Trait, int]
    analysis: AIAnalysisResult
    analysis_source: str = "ai"


# API Request/Response Models
class QuizResultRequest(BaseModel):
    """Answers of a finished quiz, one option index per question"""
    answers: List[int] = Field(..., min_length=1)
    run_id: Optional[int] = Field(None, ge=1, description="Caller run id, echoed back")
