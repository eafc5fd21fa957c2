"""
Timestamp matching between ground-truth and comparison series.

Each reference sample is paired with the FIRST comparison sample, in
sequence order, whose timestamp lies within the window (inclusive). This is
not nearest-match: a closer candidate appearing later in the comparison
sequence is skipped. Kept for compatibility with previously published
validation numbers.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Generic, List, Sequence, TypeVar

R = TypeVar("R")
C = TypeVar("C")

DEFAULT_MATCH_WINDOW = timedelta(minutes=30)


@dataclass(frozen=True)
class MatchedPair(Generic[R, C]):
    reference: R
    comparison: C

    @property
    def delta(self) -> timedelta:
        return abs(self.reference.timestamp - self.comparison.timestamp)


def match_timestamps(
    reference: Sequence[Any],
    comparison: Sequence[Any],
    window: timedelta = DEFAULT_MATCH_WINDOW,
) -> List[MatchedPair]:
    """
    Pair samples by timestamp. Both sequences hold objects with a
    ``timestamp`` attribute. Unmatched reference samples are dropped.
    """
    matches = []
    for ref in reference:
        for candidate in comparison:
            if abs(ref.timestamp - candidate.timestamp) <= window:
                matches.append(MatchedPair(ref, candidate))
                break
    return matches
