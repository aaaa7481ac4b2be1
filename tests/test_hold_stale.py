from meetsync.aggregator.hold_stale import HoldStaleView
from meetsync.models import DistractionRecord, Status


def _rec(pid: str, total: int = 1) -> DistractionRecord:
    return DistractionRecord(pid, pid.upper(), Status.FOCUSED, total_checks=total)


def test_participant_survives_a_short_gap():
    view = HoldStaleView(3_000)
    view.merge([_rec("a"), _rec("b")], 0)

    for t in range(200, 2_501, 200):
        ids = [p.participant_id for p in view.merge([_rec("b")], t)]
        assert ids == ["a", "b"]


def test_participant_dropped_after_hold_window():
    view = HoldStaleView(3_000)
    view.merge([_rec("a")], 0)

    assert [p.participant_id for p in view.merge([], 3_000)] == ["a"]
    assert view.merge([], 3_001) == []


def test_reappearance_refreshes_the_entry():
    view = HoldStaleView(3_000)
    view.merge([_rec("a", total=1)], 0)
    view.merge([_rec("a", total=5)], 2_900)

    [entry] = view.merge([], 5_000)
    assert entry.total_checks == 5
    assert view.merge([], 5_901) == []
