import pytest

from artsoul.core.exceptions import InvalidInputError
from artsoul.core.models import Trait
from artsoul.core.quiz import QuizRun, RunSequencer, calculate_result, traits_from_answers


def test_traits_from_answers(questions):
    assert traits_from_answers(questions, [0, 0]) == [Trait.DESIGN, Trait.DESIGN, Trait.TECH]
    assert traits_from_answers(questions, [1, 1]) == [Trait.FINE_ART]


@pytest.mark.parametrize("answers", [[0], [0, 0, 0], [2, 0], [0, -1]])
def test_traits_from_answers_rejects_bad_answers(questions, answers):
    with pytest.raises(InvalidInputError):
        traits_from_answers(questions, answers)


def test_run_accumulates_traits(questions):
    run = QuizRun(1, questions)
    assert run.progress == 50.0
    assert run.current_question.id == 1

    run.answer(0)
    assert run.traits == (Trait.DESIGN,)
    assert run.progress == 100.0
    assert not run.is_complete

    run.answer(0)
    assert run.traits == (Trait.DESIGN, Trait.DESIGN, Trait.TECH)
    assert run.is_complete
    assert len(run.traits) >= len(questions)


def test_run_rejects_answers_after_completion(questions):
    run = QuizRun(1, questions)
    run.answer(1)
    run.answer(1)
    with pytest.raises(InvalidInputError):
        run.answer(0)


def test_run_rejects_out_of_range_option(questions):
    run = QuizRun(1, questions)
    with pytest.raises(InvalidInputError):
        run.answer(5)
    assert run.current_index == 0
    assert run.traits == ()


def test_run_needs_questions():
    with pytest.raises(InvalidInputError):
        QuizRun(1, [])


@pytest.mark.asyncio
async def test_incomplete_run_cannot_calculate(questions, catalog, ok_client):
    run = QuizRun(1, questions)
    run.answer(0)
    with pytest.raises(InvalidInputError):
        await run.calculate_result(catalog, ok_client)
    assert ok_client.calls == []


@pytest.mark.asyncio
async def test_run_result(questions, catalog, school_a, ok_client, zero_random):
    run = QuizRun(7, questions)
    run.answer(0)
    run.answer(0)

    result = await run.calculate_result(catalog, ok_client, random_source=zero_random)

    assert result.run_id == 7
    assert result.school == school_a
    assert result.top_traits == [Trait.DESIGN, Trait.TECH]
    assert result.tally == {Trait.DESIGN: 2, Trait.TECH: 1}
    assert result.analysis.persona == "P"
    assert result.analysis_source == "ai"


@pytest.mark.asyncio
async def test_result_falls_back_when_ai_fails(catalog, school_b, failing_client, zero_random):
    result = await calculate_result([Trait.FINE_ART], catalog, failing_client, random_source=zero_random)

    assert result.school == school_b
    assert result.analysis_source == "fallback"
    assert "fine_art" in result.analysis.why_match


@pytest.mark.asyncio
async def test_stale_results_are_discarded(questions, catalog, ok_client, zero_random):
    sequencer = RunSequencer()

    first = sequencer.start(questions)
    first.answer(0)
    first.answer(0)
    # user retries before the first result arrives
    second = sequencer.start(questions)

    assert second.run_id > first.run_id
    assert not sequencer.is_current(first.run_id)

    stale = await first.calculate_result(catalog, ok_client, random_source=zero_random)
    assert sequencer.accept(stale) is False

    second.answer(1)
    second.answer(1)
    fresh = await second.calculate_result(catalog, ok_client, random_source=zero_random)
    assert sequencer.accept(fresh) is True
