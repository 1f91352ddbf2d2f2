"""
Utility functions for item text and guess evaluation.
"""

import random
import re
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")

_WS_RE = re.compile(r"\s+")


def normalize_text(value: str) -> str:
    """Collapse whitespace runs, trim and upper-case."""
    return _WS_RE.sub(" ", value).strip().upper()


def normalize_words(words: List[str]) -> List[str]:
    """Normalize a list of item texts."""
    return [normalize_text(w) for w in words]


def shuffled(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a shuffled copy of items."""
    out = list(items)
    (rng or random).shuffle(out)
    return out


def likeness_counts(guess: frozenset, groups: Sequence[frozenset]) -> List[int]:
    """How many guessed texts fall in each group, in group order."""
    return [len(guess & g) for g in groups]


def best_match(guess: frozenset, groups: Sequence[frozenset]) -> tuple[int, int]:
    """
    Index and likeness of the group sharing the most texts with guess.

    Ties go to the first group in order.
    """
    counts = likeness_counts(guess, groups)
    best = max(counts)
    return counts.index(best), best
