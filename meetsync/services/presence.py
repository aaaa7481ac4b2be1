from meetsync.clock import Clock, now_ms
from meetsync.config import settings
from meetsync.models import ParticipantRecord
from meetsync.services.validation import require_id
from meetsync.stores import PresenceStore


class PresenceService:
    """Per-meeting roster with heartbeat liveness.

    The participant's own client is the only writer of its record; the
    registry just keeps the latest push and forgets anyone silent for longer
    than ``ttl_ms``. Expiry happens on read, there is no background sweep.
    """

    def __init__(
        self,
        store: PresenceStore,
        ttl_ms: int | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self.store = store
        self.ttl_ms = ttl_ms if ttl_ms is not None else int(settings.presence_ttl_seconds * 1000)
        self.clock = clock

    async def register_or_heartbeat(
        self, meeting_id: str, record: ParticipantRecord
    ) -> ParticipantRecord:
        """Idempotent upsert. Resets ``last_seen_at`` to now."""
        require_id(meeting_id, "meeting id")
        require_id(record.id, "participant id")
        require_id(record.display_name, "display name")

        record.last_seen_at = self.clock()
        await self.store.upsert(meeting_id, record.id, record.to_dict(), record.last_seen_at)
        return record

    async def list(self, meeting_id: str) -> list[ParticipantRecord]:
        require_id(meeting_id, "meeting id")
        cutoff = self.clock() - self.ttl_ms
        payloads = await self.store.live(meeting_id, cutoff)
        return [ParticipantRecord.from_dict(p) for p in payloads]

    async def remove(self, meeting_id: str, participant_id: str) -> None:
        """Best-effort deletion on leave. The TTL covers a lost call."""
        require_id(meeting_id, "meeting id")
        require_id(participant_id, "participant id")
        await self.store.remove(meeting_id, participant_id)
