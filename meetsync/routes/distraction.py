from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from meetsync.errors import ValidationError
from meetsync.models import DistractionRecord, Status
from meetsync.routes.deps import get_registries, unprocessable
from meetsync.services import Registries

router = APIRouter(prefix="/meetings", tags=["distraction"])


# ------------------------------------------------------------------
# Request bodies
# ------------------------------------------------------------------


class DistractionReport(BaseModel):
    """Full cumulative snapshot from the participant's own client."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    participant_id: str = Field(min_length=1)
    display_name: str = Field(min_length=1)
    status: Status
    total_checks: int = Field(0, ge=0)
    distracted_checks: int = Field(0, ge=0)
    peak_distraction_pct: int = Field(0, ge=0, le=100)
    peak_distraction_time: int = Field(0, ge=0)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        if isinstance(value, str):
            return Status.parse(value)
        return value

    def to_record(self) -> DistractionRecord:
        return DistractionRecord(
            participant_id=self.participant_id,
            display_name=self.display_name,
            status=self.status,
            total_checks=self.total_checks,
            distracted_checks=self.distracted_checks,
            peak_distraction_pct=self.peak_distraction_pct,
            peak_distraction_time=self.peak_distraction_time,
        )


# ------------------------------------------------------------------
# Telemetry endpoints
# ------------------------------------------------------------------


@router.get("/{meeting_id}/distraction")
async def snapshot(
    meeting_id: str, registries: Registries = Depends(get_registries)
) -> dict:
    """Aggregated view, recomputed from live records on every call."""
    try:
        view = await registries.telemetry.snapshot(meeting_id)
    except ValidationError as e:
        raise unprocessable(e)
    return view.to_dict()


@router.post("/{meeting_id}/distraction")
async def report(
    meeting_id: str,
    body: DistractionReport,
    registries: Registries = Depends(get_registries),
) -> dict:
    """Pure overwrite. The client owns every counter."""
    try:
        await registries.telemetry.report(meeting_id, body.to_record())
    except ValidationError as e:
        raise unprocessable(e)
    return {"ok": True}


@router.delete("/{meeting_id}/distraction")
async def forget(
    meeting_id: str,
    participant_id: str = Query(alias="participantId", min_length=1),
    registries: Registries = Depends(get_registries),
) -> dict:
    try:
        await registries.telemetry.forget(meeting_id, participant_id)
    except ValidationError as e:
        raise unprocessable(e)
    return {"ok": True}
