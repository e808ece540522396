"""Tests for the keyword expansion tracker"""

import threading
from datetime import datetime, timedelta

import pytest

from collector.collector.expansion_tracker import (
    REASON_ALREADY_COLLECTED,
    REASON_CIRCULAR,
    REASON_DEPTH_EXCEEDED,
    ExpansionTracker,
)


class StepClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


def test_fresh_seed_is_allowed():
    tracker = ExpansionTracker()
    decision = tracker.can_expand("캠핑", None, 0, 3)
    assert decision.allowed is True
    assert decision.reason is None


def test_max_depth_reached():
    tracker = ExpansionTracker()
    decision = tracker.can_expand("kw", None, 3, 3)
    assert decision.allowed is False
    assert decision.reason == "max depth reached (3/3)"


def test_already_collected():
    tracker = ExpansionTracker()
    tracker.record_expansion("a", None, 0, ["b"])
    decision = tracker.can_expand("a", None, 0, 5)
    assert decision.allowed is False
    assert decision.reason == REASON_ALREADY_COLLECTED


def test_cycle_is_detected():
    tracker = ExpansionTracker()
    tracker.record_expansion("B", "A", 1, ["C"])
    tracker.record_expansion("C", "B", 2, ["A"])

    decision = tracker.can_expand("A", "C", 0, 5)

    assert decision.allowed is False
    assert decision.reason == REASON_CIRCULAR
    assert tracker.has_circular_reference("A", "C") is True
    assert tracker.has_circular_reference("D", "C") is False


def test_long_ancestor_chain_is_rejected():
    tracker = ExpansionTracker()
    tracker.record_expansion("P3", "P4", 5, ["P2"])
    tracker.record_expansion("P2", "P3", 6, ["P1"])
    tracker.record_expansion("P1", "P2", 7, ["X"])

    decision = tracker.can_expand("X", "P1", 0, 2)

    assert decision.allowed is False
    assert decision.reason == REASON_DEPTH_EXCEEDED
    # The same chain fits when the walk may go further
    assert tracker.can_expand("X", "P1", 0, 10).allowed is True


def test_record_requires_parent_depth_plus_one():
    tracker = ExpansionTracker()
    tracker.record_expansion("a", None, 0, ["b"])
    with pytest.raises(ValueError):
        tracker.record_expansion("b", "a", 3, [])
    entry = tracker.record_expansion("b", "a", 1, ["c"])
    assert entry.depth == 1
    assert entry.parent_keyword == "a"
    assert entry.child_keywords == ["c"]


def test_oldest_entries_are_evicted():
    tracker = ExpansionTracker(max_history=3, now=StepClock())
    for kw in ("a", "b", "c", "d", "e"):
        tracker.record_expansion(kw, None, 0, [])

    assert len(tracker) == 3
    assert not tracker.is_collected("a")
    assert not tracker.is_collected("b")
    assert all(tracker.is_collected(kw) for kw in ("c", "d", "e"))


def test_stats():
    tracker = ExpansionTracker(now=StepClock())
    tracker.record_expansion("a", None, 0, ["b", "c"])
    tracker.record_expansion("b", "a", 1, [])
    tracker.record_expansion("c", "a", 1, [])

    stats = tracker.stats()

    assert stats["total_collected"] == 3
    assert stats["by_depth"] == {0: 1, 1: 2}
    assert [e["keyword"] for e in stats["recent"]] == ["c", "b", "a"]


def test_history_persists_and_clears(tmp_path):
    path = tmp_path / "history.json"
    tracker = ExpansionTracker(path=path)
    tracker.record_expansion("a", None, 0, ["b"])

    reloaded = ExpansionTracker(path=path)
    assert reloaded.get("a").child_keywords == ["b"]

    reloaded.clear()
    assert len(reloaded) == 0
    assert not path.exists()


def test_corrupt_history_starts_empty(tmp_path):
    path = tmp_path / "history.json"
    path.write_text("[{", encoding="utf-8")
    assert len(ExpansionTracker(path=path)) == 0


def test_history_is_shared_safely_between_threads():
    tracker = ExpansionTracker(max_history=200)
    errors: list[str] = []
    done = threading.Event()

    def writer():
        try:
            for i in range(3000):
                tracker.record_expansion(f"kw{i}", None, 0, [f"child{i}"])
                if i % 500 == 499:
                    tracker.clear()
        except Exception as e:
            errors.append(str(e))
        finally:
            done.set()

    thread = threading.Thread(target=writer)
    thread.start()
    while not done.is_set():
        try:
            stats = tracker.stats()
            assert stats["total_collected"] <= 200
            tracker.can_expand("kw1", "kw0", 0, 5)
        except Exception as e:
            errors.append(str(e))
            break
    thread.join()

    assert errors == []
    assert len(tracker) <= 200
