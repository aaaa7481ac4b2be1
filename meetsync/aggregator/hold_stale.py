from meetsync.config import settings
from meetsync.models import DistractionRecord


class HoldStaleView:
    """Local participant list that outlives momentarily empty snapshots.

    A relay read can land on a replica that has not seen a participant's
    latest report. Entries present in a snapshot are refreshed; an entry is
    only dropped once it has been missing from every snapshot for longer
    than ``hold_ms``.
    """

    def __init__(self, hold_ms: int | None = None) -> None:
        self.hold_ms = hold_ms if hold_ms is not None else int(settings.hold_stale_seconds * 1000)
        # participant_id -> (last record, wall-clock ms it was last in a snapshot)
        self._known: dict[str, tuple[DistractionRecord, int]] = {}

    def merge(self, fresh: list[DistractionRecord], now_ms: int) -> list[DistractionRecord]:
        for record in fresh:
            self._known[record.participant_id] = (record, now_ms)

        for pid in [p for p, (_, seen) in self._known.items() if now_ms - seen > self.hold_ms]:
            del self._known[pid]

        return self.participants()

    def participants(self) -> list[DistractionRecord]:
        return [record for record, _ in self._known.values()]

    def clear(self) -> None:
        self._known.clear()
