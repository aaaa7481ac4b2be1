from typing import Protocol


class RecordStore(Protocol):
    """Per-meeting, per-participant overwrite store with lazy expiry.

    Payloads are plain JSON-able dicts; ``seen_at_ms`` is kept alongside each
    payload and compared against the cutoff on every read.
    """

    async def upsert(
        self, meeting_id: str, key: str, payload: dict, seen_at_ms: int
    ) -> None: ...

    async def live(self, meeting_id: str, cutoff_ms: int) -> list[dict]:
        """Evict entries last seen before *cutoff_ms*, return the rest."""
        ...

    async def remove(self, meeting_id: str, key: str) -> None: ...

    async def ping(self) -> None: ...


class LifecycleStore(Protocol):
    async def is_ended(self, meeting_id: str) -> bool: ...

    async def mark_ended(self, meeting_id: str) -> None: ...

    async def ping(self) -> None: ...


# Presence and telemetry share one shape; the aliases name the role.
PresenceStore = RecordStore
TelemetryStore = RecordStore
