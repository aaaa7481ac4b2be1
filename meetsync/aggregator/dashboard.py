from dataclasses import dataclass

from meetsync.models import AggregatedView, DistractionRecord, ParticipantRecord

HIGH_DISTRACTION_PCT = 75
MIN_CHECKS_FOR_RANKING = 10


def group_distraction_level(distracted_count: int, total_count: int) -> float:
    """Share of actively detected participants who are distracted, 0..100."""
    if total_count <= 0:
        return 0.0
    return max(0.0, min(100.0, 100.0 * distracted_count / total_count))


def level_band(pct: float) -> str:
    """Colour band for the group gauge."""
    if pct < 30:
        return "low"
    if pct < 60:
        return "medium"
    return "high"


def participant_band(pct: int | None) -> str | None:
    """Colour band for one participant's cumulative percentage."""
    if pct is None:
        return None
    if pct >= HIGH_DISTRACTION_PCT:
        return "high"
    if pct >= 40:
        return "medium"
    return "low"


def highly_distracted(
    view: AggregatedView,
    min_checks: int = MIN_CHECKS_FOR_RANKING,
    threshold: int = HIGH_DISTRACTION_PCT,
) -> list[DistractionRecord]:
    """Participants with enough checks to judge and a high ratio, worst first."""
    ranked = [
        p for p in view.participants
        if p.total_checks >= min_checks and p.distraction_pct >= threshold
    ]
    return sorted(ranked, key=lambda p: p.distraction_pct, reverse=True)


@dataclass
class RosterRow:
    participant: ParticipantRecord
    distraction_pct: int | None
    band: str | None


def roster_rows(
    roster: list[ParticipantRecord], telemetry: list[DistractionRecord]
) -> list[RosterRow]:
    """Join the roster with live telemetry. No record means no data, not 0%."""
    pct_by_id = {r.participant_id: r.distraction_pct for r in telemetry}
    rows = []
    for participant in roster:
        pct = pct_by_id.get(participant.id)
        rows.append(RosterRow(participant, pct, participant_band(pct)))
    return rows


@dataclass
class GroupSummary:
    level: float
    band: str
    highly_distracted: list[DistractionRecord]


def group_summary(view: AggregatedView) -> GroupSummary:
    level = group_distraction_level(view.distracted_count, view.total_count)
    return GroupSummary(level, level_band(level), highly_distracted(view))
