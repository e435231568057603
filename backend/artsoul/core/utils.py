from typing import Dict, Iterable, List, Sequence
import logging

from .models import Trait, TraitTally

logger = logging.getLogger(__name__)


def count_traits(traits: Iterable[Trait]) -> TraitTally:
    """
    Count occurrences of each trait

    Args:
        traits: Traits collected over a quiz run, in answer order

    Returns:
        Mapping of trait to count, ordered by first occurrence
    """
    tally: TraitTally = {}
    for trait in traits:
        tally[trait] = tally.get(trait, 0) + 1
    return tally


def raw_score(tally: TraitTally, tags: Sequence[Trait]) -> int:
    """Sum of tally counts over a school's tags (missing tags count 0)"""
    return sum(tally.get(tag, 0) for tag in tags)


def top_traits(tally: TraitTally, limit: int = 3) -> List[Trait]:
    """
    Strongest traits by descending count

    sorted() is stable, so equal counts keep the tally's insertion order.
    """
    ranked = sorted(tally.items(), key=lambda x: x[1], reverse=True)
    return [trait for trait, _ in ranked[:limit]]


def trait_labels(traits: Iterable[Trait]) -> List[Dict[str, str]]:
    """Tag/label pairs for display"""
    return [{"trait": t.value, "label": t.label} for t in traits]
