from dataclasses import dataclass, field
from enum import Enum

from meetsync.errors import ValidationError


class Status(str, Enum):
    FOCUSED = "FOCUSED"
    DISTRACTED = "DISTRACTED"
    NO_FACE = "NO_FACE"
    ERROR = "ERROR"

    @classmethod
    def parse(cls, label: str) -> "Status":
        """Normalize a classifier label. ``"NO FACE"`` maps to ``NO_FACE``."""
        try:
            return cls(label.strip().upper().replace(" ", "_"))
        except (AttributeError, ValueError):
            raise ValidationError(f"Unknown status label: {label!r}") from None

    @property
    def is_detection(self) -> bool:
        """True for outcomes that count toward the distraction ratio."""
        return self in (Status.FOCUSED, Status.DISTRACTED)


def rounded_pct(part: int, whole: int) -> int:
    """``round(100 * part / whole)`` rounding halves up, 0 when *whole* is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


@dataclass
class ParticipantRecord:
    id: str
    display_name: str
    is_host: bool = False
    is_camera_on: bool = False
    is_mic_on: bool = False
    last_seen_at: int = 0  # epoch ms, stamped by the registry

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "isHost": self.is_host,
            "isCameraOn": self.is_camera_on,
            "isMicOn": self.is_mic_on,
            "lastSeenAt": self.last_seen_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ParticipantRecord":
        return cls(
            id=data["id"],
            display_name=data["displayName"],
            is_host=bool(data.get("isHost", False)),
            is_camera_on=bool(data.get("isCameraOn", False)),
            is_mic_on=bool(data.get("isMicOn", False)),
            last_seen_at=int(data.get("lastSeenAt", 0)),
        )


@dataclass
class DistractionRecord:
    participant_id: str
    display_name: str
    status: Status
    total_checks: int = 0
    distracted_checks: int = 0
    peak_distraction_pct: int = 0
    peak_distraction_time: int = 0  # epoch ms, 0 until a peak is reached
    last_seen_at: int = 0  # epoch ms, stamped by the relay

    @property
    def distraction_pct(self) -> int:
        return rounded_pct(self.distracted_checks, self.total_checks)

    def to_dict(self) -> dict:
        return {
            "participantId": self.participant_id,
            "displayName": self.display_name,
            "status": self.status.value,
            "totalChecks": self.total_checks,
            "distractedChecks": self.distracted_checks,
            "peakDistractionPct": self.peak_distraction_pct,
            "peakDistractionTime": self.peak_distraction_time,
            "lastSeenAt": self.last_seen_at,
        }

    def projection(self) -> dict:
        """Per-participant entry of a relay snapshot."""
        return {
            "participantId": self.participant_id,
            "displayName": self.display_name,
            "status": self.status.value,
            "totalChecks": self.total_checks,
            "distractedChecks": self.distracted_checks,
            "distractionPct": self.distraction_pct,
            "peakDistractionPct": self.peak_distraction_pct,
            "peakDistractionTime": self.peak_distraction_time,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DistractionRecord":
        return cls(
            participant_id=data["participantId"],
            display_name=data["displayName"],
            status=Status.parse(data["status"]),
            total_checks=int(data.get("totalChecks", 0)),
            distracted_checks=int(data.get("distractedChecks", 0)),
            peak_distraction_pct=int(data.get("peakDistractionPct", 0)),
            peak_distraction_time=int(data.get("peakDistractionTime", 0)),
            last_seen_at=int(data.get("lastSeenAt", 0)),
        )


@dataclass
class AggregatedView:
    distracted_count: int = 0
    total_count: int = 0
    participants: list[DistractionRecord] = field(default_factory=list)

    @classmethod
    def from_records(cls, records: list[DistractionRecord]) -> "AggregatedView":
        view = cls(participants=list(records))
        for record in records:
            if record.status.is_detection:
                view.total_count += 1
                if record.status is Status.DISTRACTED:
                    view.distracted_count += 1
        return view

    def to_dict(self) -> dict:
        return {
            "distractedCount": self.distracted_count,
            "totalCount": self.total_count,
            "participants": [p.projection() for p in self.participants],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AggregatedView":
        return cls(
            distracted_count=int(data.get("distractedCount", 0)),
            total_count=int(data.get("totalCount", 0)),
            participants=[
                DistractionRecord.from_dict(p) for p in data.get("participants", [])
            ],
        )
