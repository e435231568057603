import json
import pytest

from artsoul.core.models import Option, Question, School, Trait


class FakeAIClient:
    """Returns a canned body (or raises) and records every prompt it receives"""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate_structured(self, prompt, schema):
        self.calls.append((prompt, schema))
        if self.error is not None:
            raise self.error
        return self.response


WELL_FORMED = json.dumps({"persona": "P", "whyMatch": "W", "advice": "A"})


@pytest.fixture
def school_a():
    return School(
        id="a",
        name="School A of Design and Technology",
        short_name="SchoolA",
        location="Somewhere",
        description="Design and tech",
        tags=[Trait.DESIGN, Trait.TECH],
    )


@pytest.fixture
def school_b():
    return School(
        id="b",
        name="School B of Fine Art",
        short_name="SchoolB",
        location="Elsewhere",
        description="Fine art",
        tags=[Trait.FINE_ART],
    )


@pytest.fixture
def catalog(school_a, school_b):
    return [school_a, school_b]


@pytest.fixture
def questions():
    return [
        Question(id=1, question="Q1", options=[
            Option(text="design", traits=[Trait.DESIGN]),
            Option(text="fine art", traits=[Trait.FINE_ART]),
        ]),
        Question(id=2, question="Q2", options=[
            Option(text="design and tech", traits=[Trait.DESIGN, Trait.TECH]),
            Option(text="nothing", traits=[]),
        ]),
    ]


@pytest.fixture
def ok_client():
    return FakeAIClient(response=WELL_FORMED)


@pytest.fixture
def failing_client():
    return FakeAIClient(error=ConnectionError("network down"))


@pytest.fixture
def make_ai_client():
    """Factory for fake clients with a given response or error"""
    return FakeAIClient


@pytest.fixture
def zero_random():
    """Random source that never perturbs, so ties go to catalog order"""
    return lambda: 0.0
