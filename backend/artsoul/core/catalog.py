import json
import os
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from .models import Question, School
from .exceptions import InvalidInputError
from ..config import settings

logger = logging.getLogger(__name__)


class Catalog(BaseModel):
    """Questions and schools, loaded once and read-only afterwards"""
    questions: List[Question]
    schools: List[School]

    class Config:
        frozen = True

    def get_school(self, school_id: str) -> Optional[School]:
        return next((s for s in self.schools if s.id == school_id), None)


def _read_json(file_path: str, key: str) -> List[Dict[str, Any]]:
    if not os.path.exists(file_path):
        raise InvalidInputError(f"Catalog file not found: {file_path}")

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidInputError(f"Catalog file {file_path} is not valid JSON: {e}")

    entries = data.get(key) if isinstance(data, dict) else None
    if not entries:
        raise InvalidInputError(f"Catalog file {file_path} has no '{key}'")
    if not isinstance(entries, list):
        raise InvalidInputError(f"'{key}' in {file_path} must be a list, got {type(entries).__name__}")
    return entries


def _entry_id(entry: Any) -> Any:
    return entry.get("id") if isinstance(entry, dict) else entry


def load_questions(file_path: str) -> List[Question]:
    entries = _read_json(file_path, "questions")

    questions = []
    seen_ids = set()
    for q_data in entries:
        try:
            question = Question.model_validate(q_data)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid question {_entry_id(q_data)!r}: {e}")
        if question.id in seen_ids:
            raise InvalidInputError(f"Duplicate question id: {question.id}")
        seen_ids.add(question.id)
        questions.append(question)

    logger.info(f"Successfully loaded {len(questions)} questions")
    return questions


def load_schools(file_path: str) -> List[School]:
    entries = _read_json(file_path, "schools")

    schools = []
    seen_ids = set()
    for s_data in entries:
        try:
            school = School.model_validate(s_data)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid school {_entry_id(s_data)!r}: {e}")
        if school.id in seen_ids:
            raise InvalidInputError(f"Duplicate school id: {school.id}")
        seen_ids.add(school.id)
        schools.append(school)

    logger.info(f"Successfully loaded {len(schools)} schools")
    return schools


def load_catalog(questions_file: str, schools_file: str) -> Catalog:
    return Catalog(
        questions=load_questions(questions_file),
        schools=load_schools(schools_file),
    )


@lru_cache(maxsize=1)
def get_catalog() -> Catalog:
    """Process-wide catalog from the configured data files"""
    return load_catalog(settings.QUESTIONS_FILE, settings.SCHOOLS_FILE)
