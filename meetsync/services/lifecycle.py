from meetsync.services.validation import require_id
from meetsync.stores import LifecycleStore


class LifecycleService:
    """Sticky "ended" flag per meeting.

    Host gating happens upstream; this layer trusts any caller, and there is
    deliberately no way to reset the flag.
    """

    def __init__(self, store: LifecycleStore) -> None:
        self.store = store

    async def get(self, meeting_id: str) -> bool:
        """Unknown meetings are simply not ended."""
        require_id(meeting_id, "meeting id")
        return await self.store.is_ended(meeting_id)

    async def mark_ended(self, meeting_id: str) -> bool:
        require_id(meeting_id, "meeting id")
        await self.store.mark_ended(meeting_id)
        return True
