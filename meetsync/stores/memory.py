import threading


class MemoryRecordStore:
    """Process-local record store. Only correct when one process serves
    every request for a meeting, so it is meant for tests and local runs."""

    def __init__(self) -> None:
        # meeting_id -> key -> (seen_at_ms, payload)
        self._rooms: dict[str, dict[str, tuple[int, dict]]] = {}
        self._lock = threading.Lock()

    async def upsert(
        self, meeting_id: str, key: str, payload: dict, seen_at_ms: int
    ) -> None:
        with self._lock:
            self._rooms.setdefault(meeting_id, {})[key] = (seen_at_ms, dict(payload))

    async def live(self, meeting_id: str, cutoff_ms: int) -> list[dict]:
        with self._lock:
            room = self._rooms.get(meeting_id)
            if not room:
                return []
            for key in [k for k, (seen, _) in room.items() if seen < cutoff_ms]:
                del room[key]
            if not room:
                del self._rooms[meeting_id]
                return []
            return [dict(payload) for _, payload in room.values()]

    async def remove(self, meeting_id: str, key: str) -> None:
        with self._lock:
            room = self._rooms.get(meeting_id)
            if room is not None:
                room.pop(key, None)

    async def ping(self) -> None:
        return None


class MemoryLifecycleStore:
    def __init__(self) -> None:
        self._ended: set[str] = set()
        self._lock = threading.Lock()

    async def is_ended(self, meeting_id: str) -> bool:
        with self._lock:
            return meeting_id in self._ended

    async def mark_ended(self, meeting_id: str) -> None:
        with self._lock:
            self._ended.add(meeting_id)

    async def ping(self) -> None:
        return None
