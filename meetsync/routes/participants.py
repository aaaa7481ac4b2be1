from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from meetsync.errors import ValidationError
from meetsync.models import ParticipantRecord
from meetsync.routes.deps import get_registries, unprocessable
from meetsync.services import Registries

router = APIRouter(prefix="/meetings", tags=["participants"])


# ------------------------------------------------------------------
# Request bodies
# ------------------------------------------------------------------


class ParticipantIn(BaseModel):
    """Heartbeat body. ``lastSeenAt`` is stamped server-side."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(min_length=1)
    display_name: str = Field(min_length=1)
    is_host: bool = False
    is_camera_on: bool = False
    is_mic_on: bool = False

    def to_record(self) -> ParticipantRecord:
        return ParticipantRecord(
            id=self.id,
            display_name=self.display_name,
            is_host=self.is_host,
            is_camera_on=self.is_camera_on,
            is_mic_on=self.is_mic_on,
        )


# ------------------------------------------------------------------
# Presence endpoints
# ------------------------------------------------------------------


@router.get("/{meeting_id}/participants")
async def list_participants(
    meeting_id: str, registries: Registries = Depends(get_registries)
) -> dict:
    try:
        records = await registries.presence.list(meeting_id)
    except ValidationError as e:
        raise unprocessable(e)
    return {"participants": [r.to_dict() for r in records]}


@router.post("/{meeting_id}/participants")
async def heartbeat(
    meeting_id: str,
    body: ParticipantIn,
    registries: Registries = Depends(get_registries),
) -> dict:
    """Register on join, then called on every heartbeat tick."""
    try:
        await registries.presence.register_or_heartbeat(meeting_id, body.to_record())
    except ValidationError as e:
        raise unprocessable(e)
    return {"ok": True}


@router.delete("/{meeting_id}/participants")
async def leave(
    meeting_id: str,
    participant_id: str = Query(alias="participantId", min_length=1),
    registries: Registries = Depends(get_registries),
) -> dict:
    try:
        await registries.presence.remove(meeting_id, participant_id)
    except ValidationError as e:
        raise unprocessable(e)
    return {"ok": True}
