from meetsync.clock import Clock, now_ms
from meetsync.config import settings
from meetsync.errors import ValidationError
from meetsync.models import AggregatedView, DistractionRecord
from meetsync.services.validation import require_id
from meetsync.stores import TelemetryStore


def validate_counters(record: DistractionRecord) -> None:
    if record.total_checks < 0 or record.distracted_checks < 0:
        raise ValidationError("check counters must be non-negative")
    if record.distracted_checks > record.total_checks:
        raise ValidationError("distractedChecks cannot exceed totalChecks")
    if not 0 <= record.peak_distraction_pct <= 100:
        raise ValidationError("peakDistractionPct must be within 0..100")
    if record.peak_distraction_time < 0:
        raise ValidationError("peakDistractionTime must be non-negative")


class TelemetryService:
    """Relay for client-owned distraction counters.

    ``report`` is a pure overwrite of whatever the owning client sends; the
    relay never increments anything itself. Aggregates are recomputed from
    the live records on every ``snapshot``.
    """

    def __init__(
        self,
        store: TelemetryStore,
        ttl_ms: int | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self.store = store
        self.ttl_ms = ttl_ms if ttl_ms is not None else int(settings.presence_ttl_seconds * 1000)
        self.clock = clock

    async def report(self, meeting_id: str, record: DistractionRecord) -> DistractionRecord:
        require_id(meeting_id, "meeting id")
        require_id(record.participant_id, "participant id")
        require_id(record.display_name, "display name")
        validate_counters(record)

        record.last_seen_at = self.clock()
        await self.store.upsert(
            meeting_id, record.participant_id, record.to_dict(), record.last_seen_at
        )
        return record

    async def snapshot(self, meeting_id: str) -> AggregatedView:
        require_id(meeting_id, "meeting id")
        cutoff = self.clock() - self.ttl_ms
        payloads = await self.store.live(meeting_id, cutoff)
        return AggregatedView.from_records([DistractionRecord.from_dict(p) for p in payloads])

    async def forget(self, meeting_id: str, participant_id: str) -> None:
        require_id(meeting_id, "meeting id")
        require_id(participant_id, "participant id")
        await self.store.remove(meeting_id, participant_id)
