import os
import random
import sys
from datetime import datetime, timedelta, timezone

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.matching import DEFAULT_MATCH_WINDOW, match_timestamps
from core.models import ComparisonSample

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class _Ref:
    def __init__(self, ts: datetime, label: str = ""):
        self.timestamp = ts
        self.label = label


def _sample(minutes: float, no2: float = 1.0) -> ComparisonSample:
    return ComparisonSample(timestamp=T0 + timedelta(minutes=minutes), no2=no2, o3=1.0)


def test_default_window_is_thirty_minutes():
    assert DEFAULT_MATCH_WINDOW == timedelta(minutes=30)


def test_window_is_inclusive():
    pairs = match_timestamps([_Ref(T0)], [_sample(30)])
    assert len(pairs) == 1
    assert match_timestamps([_Ref(T0)], [_sample(30.01)]) == []


def test_unmatched_references_are_dropped():
    refs = [_Ref(T0, "a"), _Ref(T0 + timedelta(hours=5), "b")]
    pairs = match_timestamps(refs, [_sample(-10)])
    assert [p.reference.label for p in pairs] == ["a"]


def test_first_in_window_beats_closer_later_candidate():
    early = _sample(-25, no2=1.0)
    exact = _sample(0, no2=2.0)
    pairs = match_timestamps([_Ref(T0)], [early, exact])
    assert pairs[0].comparison is early


def test_comparison_sample_can_be_reused():
    refs = [_Ref(T0), _Ref(T0 + timedelta(minutes=10))]
    sat = _sample(5)
    pairs = match_timestamps(refs, [sat])
    assert len(pairs) == 2
    assert all(p.comparison is sat for p in pairs)


def test_custom_window():
    pairs = match_timestamps([_Ref(T0)], [_sample(50)], window=timedelta(hours=1))
    assert len(pairs) == 1


def test_never_exceeds_window_and_is_deterministic():
    rng = random.Random(7)
    for _ in range(50):
        refs = [_Ref(T0 + timedelta(minutes=rng.uniform(0, 600))) for _ in range(20)]
        comp = [_sample(rng.uniform(0, 600)) for _ in range(15)]
        window = timedelta(minutes=rng.choice([5, 15, 30]))

        first = match_timestamps(refs, comp, window)
        second = match_timestamps(refs, comp, window)

        assert all(p.delta <= window for p in first)
        assert [(id(p.reference), id(p.comparison)) for p in first] == [
            (id(p.reference), id(p.comparison)) for p in second
        ]
