import random
import logging
from typing import Callable, Sequence

from .models import MatchResult, School, Trait
from .exceptions import InvalidInputError
from .utils import count_traits, raw_score, top_traits

logger = logging.getLogger(__name__)

RandomSource = Callable[[], float]

DEFAULT_TIE_BREAK_SCALE = 0.1
TOP_TRAITS_COUNT = 3


def match(
    traits: Sequence[Trait],
    catalog: Sequence[School],
    random_source: RandomSource = random.random,
    tie_break_scale: float = DEFAULT_TIE_BREAK_SCALE,
    top_k: int = TOP_TRAITS_COUNT,
) -> MatchResult:
    """
    Pick the best-matching school for a quiz run

    Each school scores the sum of the tally counts of its tags. A random
    perturbation in [0, tie_break_scale) is added before comparing, so exact
    ties are broken randomly instead of by catalog order. With a source that
    always returns 0 the first school in catalog order wins a tie.

    Args:
        traits: Traits collected from the answers, in answer order
        catalog: Ordered school catalog
        random_source: Callable returning a float in [0, 1)
        tie_break_scale: Perturbation magnitude, strictly between 0 and 1
        top_k: Number of top traits to report

    Returns:
        MatchResult with the selected school, top traits, tally and raw scores
    """
    if not catalog:
        raise InvalidInputError("School catalog is empty")
    if not 0.0 < tie_break_scale < 1.0:
        raise InvalidInputError(f"tie_break_scale must be in (0, 1), got {tie_break_scale}")
    if top_k < 1:
        raise InvalidInputError(f"top_k must be at least 1, got {top_k}")

    tally = count_traits(traits)

    best_school = catalog[0]
    max_score = -1.0
    scores = {}

    for school in catalog:
        score = raw_score(tally, school.tags)
        # The tie-break only separates exact ties while scores are integers;
        # a fractional scoring formula would need a smaller perturbation.
        if not isinstance(score, int):
            raise TypeError(f"Non-integer score {score!r} for {school.id}")
        scores[school.id] = score

        perturbed = score + random_source() * tie_break_scale
        if perturbed > max_score:
            max_score = perturbed
            best_school = school

    result = MatchResult(
        best_school=best_school,
        top_traits=top_traits(tally, top_k),
        tally=tally,
        scores=scores,
    )

    logger.info(
        f"Matched {len(traits)} traits to {best_school.id} "
        f"(score={scores[best_school.id]}, top={[t.value for t in result.top_traits]})"
    )
    return result
