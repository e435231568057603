import itertools
import logging
import random
from typing import List, Optional, Sequence, Tuple

from .models import Question, QuizResult, School, Trait
from .exceptions import InvalidInputError
from .matcher import match, RandomSource, DEFAULT_TIE_BREAK_SCALE, TOP_TRAITS_COUNT
from ..ai.analyzer import analyze_with_source
from ..ai.client import StructuredTextClient

logger = logging.getLogger(__name__)


def _option_traits(question: Question, option_index: int) -> List[Trait]:
    if not 0 <= option_index < len(question.options):
        raise InvalidInputError(
            f"Option {option_index} out of range for question {question.id} "
            f"({len(question.options)} options)"
        )
    return list(question.options[option_index].traits)


def traits_from_answers(questions: Sequence[Question], answers: Sequence[int]) -> List[Trait]:
    """Map one option index per question, in question order, to the collected traits"""
    if len(answers) != len(questions):
        raise InvalidInputError(
            f"Expected {len(questions)} answers, got {len(answers)}"
        )

    traits: List[Trait] = []
    for question, option_index in zip(questions, answers):
        traits.extend(_option_traits(question, option_index))
    return traits


class QuizRun:
    """
    State of a single quiz run, from the first question to the result

    The collected trait list only ever grows; a retry starts a new run.
    """

    def __init__(self, run_id: int, questions: Sequence[Question]):
        if not questions:
            raise InvalidInputError("Question list is empty")
        self.run_id = run_id
        self.questions = list(questions)
        self.current_index = 0
        self._traits: List[Trait] = []

    @property
    def traits(self) -> Tuple[Trait, ...]:
        return tuple(self._traits)

    @property
    def is_complete(self) -> bool:
        return self.current_index >= len(self.questions)

    @property
    def current_question(self) -> Question:
        if self.is_complete:
            raise InvalidInputError(f"Run {self.run_id} has no questions left")
        return self.questions[self.current_index]

    @property
    def progress(self) -> float:
        """Percentage shown for the question on screen"""
        if self.is_complete:
            return 100.0
        return round((self.current_index + 1) / len(self.questions) * 100, 1)

    def answer(self, option_index: int) -> None:
        self.answer_traits(_option_traits(self.current_question, option_index))

    def answer_traits(self, traits: Sequence[Trait]) -> None:
        if self.is_complete:
            raise InvalidInputError(f"Run {self.run_id} is already complete")
        self._traits.extend(traits)
        self.current_index += 1

    async def calculate_result(
        self,
        schools: Sequence[School],
        ai_client: StructuredTextClient,
        random_source: RandomSource = random.random,
        tie_break_scale: float = DEFAULT_TIE_BREAK_SCALE,
        top_k: int = TOP_TRAITS_COUNT,
    ) -> QuizResult:
        if not self.is_complete:
            raise InvalidInputError(
                f"Run {self.run_id} answered {self.current_index}/{len(self.questions)} questions"
            )

        return await calculate_result(
            self._traits, schools, ai_client,
            run_id=self.run_id,
            random_source=random_source,
            tie_break_scale=tie_break_scale,
            top_k=top_k,
        )


async def calculate_result(
    traits: Sequence[Trait],
    schools: Sequence[School],
    ai_client: StructuredTextClient,
    run_id: Optional[int] = None,
    random_source: RandomSource = random.random,
    tie_break_scale: float = DEFAULT_TIE_BREAK_SCALE,
    top_k: int = TOP_TRAITS_COUNT,
) -> QuizResult:
    """Match the traits to a school, then fetch the AI analysis for it"""
    matched = match(traits, schools, random_source, tie_break_scale, top_k)
    analysis, source = await analyze_with_source(
        matched.best_school,
        [t.value for t in matched.top_traits],
        ai_client,
    )

    return QuizResult(
        run_id=run_id,
        school=matched.best_school,
        top_traits=matched.top_traits,
        tally=matched.tally,
        analysis=analysis,
        analysis_source=source,
    )


class RunSequencer:
    """
    Issues increasing run ids so a caller can drop results of superseded runs

    Starting a new run does not cancel an analysis already in flight; its
    result is simply no longer current when it arrives.
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self.current_run_id = 0

    def start(self, questions: Sequence[Question]) -> QuizRun:
        self.current_run_id = next(self._ids)
        logger.info(f"Started quiz run {self.current_run_id}")
        return QuizRun(self.current_run_id, questions)

    def is_current(self, run_id: int) -> bool:
        return run_id == self.current_run_id

    def accept(self, result: QuizResult) -> bool:
        """True if the result belongs to the current run"""
        if not self.is_current(result.run_id):
            logger.info(
                f"Discarding stale result for run {result.run_id} "
                f"(current run is {self.current_run_id})"
            )
            return False
        return True
