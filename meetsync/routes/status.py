from fastapi import APIRouter, Depends

from meetsync.errors import ValidationError
from meetsync.routes.deps import get_registries, unprocessable
from meetsync.services import Registries

router = APIRouter(prefix="/meetings", tags=["status"])


@router.get("/{meeting_id}/status")
async def get_status(
    meeting_id: str, registries: Registries = Depends(get_registries)
) -> dict:
    try:
        ended = await registries.lifecycle.get(meeting_id)
    except ValidationError as e:
        raise unprocessable(e)
    return {"ended": ended}


@router.post("/{meeting_id}/status")
async def end_meeting(
    meeting_id: str, registries: Registries = Depends(get_registries)
) -> dict:
    """Mark the meeting ended for everyone. Callers are gated as host upstream."""
    try:
        ended = await registries.lifecycle.mark_ended(meeting_id)
    except ValidationError as e:
        raise unprocessable(e)
    return {"ended": ended}
