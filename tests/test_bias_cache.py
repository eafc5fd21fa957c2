import os
import sys
import threading
from datetime import datetime, timedelta, timezone

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.bias_cache import BiasCorrectionCache
from core.models import BiasCorrection

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _correction(station_id: str, ratio: float = 0.1, at: datetime = T0) -> BiasCorrection:
    return BiasCorrection(station_id=station_id, no2_ratio=ratio, o3_ratio=-ratio, computed_at=at)


def test_get_set_last_writer_wins():
    cache = BiasCorrectionCache()
    assert cache.get("pandora_001") is None

    cache.set(_correction("pandora_001", 0.1))
    cache.set(_correction("pandora_001", 0.2))

    assert len(cache) == 1
    assert cache.get("pandora_001").no2_ratio == 0.2


def test_entries_expire_after_ttl():
    clock = FakeClock(T0)
    cache = BiasCorrectionCache(ttl_seconds=3600, clock=clock)
    cache.set(_correction("pandora_001"))

    clock.now = T0 + timedelta(minutes=59)
    assert cache.get("pandora_001") is not None

    clock.now = T0 + timedelta(hours=1, seconds=1)
    assert cache.get("pandora_001") is None
    assert len(cache) == 0


def test_zero_ttl_never_expires():
    clock = FakeClock(T0 + timedelta(days=365))
    cache = BiasCorrectionCache(ttl_seconds=0, clock=clock)
    cache.set(_correction("pandora_001"))
    assert cache.get("pandora_001") is not None


def test_invalidate_one_and_all():
    cache = BiasCorrectionCache()
    for sid in ("pandora_001", "pandora_002", "pandora_003"):
        cache.set(_correction(sid))

    assert cache.invalidate("pandora_002") == 1
    assert cache.invalidate("pandora_002") == 0
    assert cache.station_ids() == ["pandora_001", "pandora_003"]

    assert cache.invalidate() == 2
    assert len(cache) == 0


def test_concurrent_writers_leave_one_whole_entry_per_station():
    cache = BiasCorrectionCache()
    ratios = [i / 100 for i in range(50)]
    torn = []

    def writer(ratio: float):
        for _ in range(20):
            cache.set(_correction("pandora_004", ratio))
            got = cache.get("pandora_004")
            # Both ratios always come from the same write
            if got.o3_ratio != -got.no2_ratio:
                torn.append(got)

    threads = [threading.Thread(target=writer, args=(r,)) for r in ratios]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert torn == []
    assert len(cache) == 1
    assert cache.get("pandora_004").no2_ratio in ratios
