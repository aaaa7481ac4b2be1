import pytest

from meetsync.errors import ValidationError
from meetsync.models import DistractionRecord, Status, rounded_pct


def _record(pid: str, status: Status, total: int = 0, distracted: int = 0, **kwargs):
    return DistractionRecord(
        participant_id=pid,
        display_name=pid.upper(),
        status=status,
        total_checks=total,
        distracted_checks=distracted,
        **kwargs,
    )


async def test_report_is_a_pure_overwrite(registries):
    await registries.telemetry.report("m1", _record("a", Status.DISTRACTED, 5, 5, peak_distraction_pct=100))
    await registries.telemetry.report("m1", _record("a", Status.FOCUSED, 6, 5, peak_distraction_pct=100))

    view = await registries.telemetry.snapshot("m1")
    [entry] = view.participants
    assert entry.status is Status.FOCUSED
    assert entry.total_checks == 6
    assert entry.distracted_checks == 5


async def test_snapshot_counts_only_detection_statuses(registries):
    await registries.telemetry.report("m1", _record("a", Status.FOCUSED, 4, 1))
    await registries.telemetry.report("m1", _record("b", Status.DISTRACTED, 4, 3))
    await registries.telemetry.report("m1", _record("c", Status.NO_FACE, 4, 2))
    await registries.telemetry.report("m1", _record("d", Status.ERROR))

    view = await registries.telemetry.snapshot("m1")
    assert view.total_count == 2
    assert view.distracted_count == 1
    assert len(view.participants) == 4


async def test_distraction_pct_in_projection(registries):
    await registries.telemetry.report("m1", _record("a", Status.FOCUSED, 3, 1))
    await registries.telemetry.report("m1", _record("b", Status.FOCUSED, 0, 0))
    await registries.telemetry.report("m1", _record("c", Status.DISTRACTED, 8, 1))

    body = (await registries.telemetry.snapshot("m1")).to_dict()
    pct = {p["participantId"]: p["distractionPct"] for p in body["participants"]}
    assert pct == {"a": 33, "b": 0, "c": 13}


@pytest.mark.parametrize(
    "part, whole, expected",
    [(0, 0, 0), (1, 2, 50), (1, 8, 13), (3, 8, 38), (5, 8, 63), (2, 3, 67), (3, 10, 30)],
)
def test_rounded_pct_rounds_halves_up(part, whole, expected):
    assert rounded_pct(part, whole) == expected


async def test_stale_records_expire_with_presence_ttl(registries, clock):
    await registries.telemetry.report("m1", _record("a", Status.FOCUSED, 1, 0))
    clock.advance(10_001)
    view = await registries.telemetry.snapshot("m1")
    assert view.participants == []
    assert view.total_count == 0


async def test_forget_drops_the_participant(registries):
    await registries.telemetry.report("m1", _record("a", Status.DISTRACTED, 1, 1))
    await registries.telemetry.forget("m1", "a")
    assert (await registries.telemetry.snapshot("m1")).participants == []


@pytest.mark.parametrize(
    "record",
    [
        _record("a", Status.FOCUSED, 1, 2),
        _record("a", Status.FOCUSED, -1, 0),
        _record("a", Status.FOCUSED, 1, 0, peak_distraction_pct=101),
        _record("", Status.FOCUSED),
    ],
)
async def test_malformed_report_does_not_mutate(registries, record):
    await registries.telemetry.report("m1", _record("a", Status.FOCUSED, 1, 0))
    with pytest.raises(ValidationError):
        await registries.telemetry.report("m1", record)

    [entry] = (await registries.telemetry.snapshot("m1")).participants
    assert (entry.total_checks, entry.distracted_checks) == (1, 0)
