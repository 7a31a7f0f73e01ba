"""
Semantic test: window range queries are exact and ordered.

Invariant:
list_in_range returns every window of the station overlapping the query
and nothing else, sorted by (start_time, window_id).
"""

from __future__ import annotations

import itertools
import random
from datetime import datetime, timedelta, timezone

from groundstation_scheduler.core.domain.time_range import TimeRange
from groundstation_scheduler.core.events.sinks.null_event_bus import NullEventBus
from groundstation_scheduler.core.store.window_store import WindowStore

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def minutes(n: int) -> datetime:
    return EPOCH + timedelta(minutes=n)


def test_random_windows_match_brute_force() -> None:
    rng = random.Random(20240101)
    store = WindowStore(NullEventBus())

    inserted: dict[str, TimeRange] = {}
    for _ in range(200):
        start = rng.randint(0, 1_000)
        length = rng.randint(1, 120)
        tr = TimeRange.of(minutes(start), minutes(start + length))
        inserted[store.insert("gs-1", tr)] = tr

    # Noise on another station must never leak into gs-1 results.
    store.insert("gs-2", TimeRange.of(minutes(0), minutes(2_000)))

    for _ in range(300):
        q_start = rng.randint(-50, 1_100)
        q_len = rng.randint(1, 200)
        query = TimeRange.of(minutes(q_start), minutes(q_start + q_len))

        got = store.list_in_range("gs-1", query)
        expected = {wid for wid, tr in inserted.items() if tr.overlaps(query)}

        assert {w.window_id for w in got} == expected
        assert all(w.ground_station_id == "gs-1" for w in got)
        keys = [(w.start_time, w.window_id) for w in got]
        assert keys == sorted(keys)


def test_equal_start_times_are_ordered_by_window_id() -> None:
    ids = iter(["uw-" + c * 32 for c in "cab"])
    store = WindowStore(NullEventBus(), id_factory=lambda: next(ids))

    for end in (30, 10, 20):
        store.insert("gs-1", TimeRange.of(minutes(0), minutes(end)))

    got = store.list_in_range("gs-1", TimeRange.of(minutes(0), minutes(60)))

    assert [w.window_id for w in got] == ["uw-" + "a" * 32, "uw-" + "b" * 32, "uw-" + "c" * 32]


def test_overlapping_windows_are_kept_separately() -> None:
    store = WindowStore(NullEventBus())

    first = store.insert("gs-1", TimeRange.of(minutes(0), minutes(30)))
    second = store.insert("gs-1", TimeRange.of(minutes(10), minutes(40)))

    got = store.list_in_range("gs-1", TimeRange.of(minutes(15), minutes(20)))
    assert [w.window_id for w in got] == [first, second]


def test_window_touching_query_end_is_excluded() -> None:
    store = WindowStore(NullEventBus())
    store.insert("gs-1", TimeRange.of(minutes(60), minutes(90)))
    store.insert("gs-1", TimeRange.of(minutes(0), minutes(30)))

    assert store.list_in_range("gs-1", TimeRange.of(minutes(30), minutes(60))) == []


def test_unknown_station_returns_empty() -> None:
    store = WindowStore(NullEventBus())

    assert store.list_in_range("gs-unknown", TimeRange.of(minutes(0), minutes(1))) == []


def test_minted_ids_are_unique() -> None:
    store = WindowStore(NullEventBus())

    ids = [
        store.insert("gs-1", TimeRange.of(minutes(i), minutes(i + 1)))
        for i in itertools.islice(itertools.count(), 50)
    ]
    assert len(set(ids)) == 50
