from meetsync.config import settings
from meetsync.models import Status, rounded_pct


class FrameThrottle:
    """Acts on at most one frame per *interval_ms*. Frames in between are
    dropped, not queued."""

    def __init__(self, interval_ms: int | None = None) -> None:
        self.interval_ms = interval_ms if interval_ms is not None else settings.detection_throttle_ms
        self._last: float | None = None

    def ready(self, timestamp_ms: float) -> bool:
        if self._last is not None and timestamp_ms - self._last <= self.interval_ms:
            return False
        self._last = timestamp_ms
        return True


class StatusDebouncer:
    """Hides short runs of ``NO_FACE`` behind the last good detection.

    A single missed face should not flip what everyone else sees. Up to
    ``threshold - 1`` consecutive misses report the last ``FOCUSED`` or
    ``DISTRACTED`` instead; the ``threshold``-th miss onward reports
    ``NO_FACE`` for real until a detection comes back. ``ERROR`` passes
    straight through and leaves the miss counter alone.
    """

    def __init__(self, threshold: int | None = None) -> None:
        self.threshold = threshold if threshold is not None else settings.no_face_miss_threshold
        self.last_good: Status | None = None
        self.misses = 0

    def feed(self, raw: Status) -> Status:
        if raw.is_detection:
            self.last_good = raw
            self.misses = 0
            return raw

        if raw is Status.ERROR:
            return raw

        self.misses = min(self.misses + 1, self.threshold)
        if self.misses < self.threshold and self.last_good is not None:
            return self.last_good
        return Status.NO_FACE

    def reset(self) -> None:
        self.last_good = None
        self.misses = 0


class DistractionCounters:
    """Cumulative per-participant counters, owned by the participant's client.

    The relay only ever stores what this produces, so the invariants live
    here: ``distracted_checks <= total_checks`` and a non-decreasing peak
    whose timestamp marks its first occurrence.
    """

    def __init__(self) -> None:
        self.total_checks = 0
        self.distracted_checks = 0
        self.peak_distraction_pct = 0
        self.peak_distraction_time = 0

    @property
    def current_pct(self) -> int:
        return rounded_pct(self.distracted_checks, self.total_checks)

    def accept(self, status: Status, now_ms: int) -> int:
        """Count one check and return the current distraction percentage."""
        if status.is_detection:
            self.total_checks += 1
            if status is Status.DISTRACTED:
                self.distracted_checks += 1

        pct = self.current_pct
        # a tie keeps the first timestamp
        if pct > self.peak_distraction_pct:
            self.peak_distraction_pct = pct
            self.peak_distraction_time = now_ms
        return pct

    def to_report(self, participant_id: str, display_name: str, status: Status) -> dict:
        """Request body for ``POST /meetings/{id}/distraction``."""
        return {
            "participantId": participant_id,
            "displayName": display_name,
            "status": status.value,
            "totalChecks": self.total_checks,
            "distractedChecks": self.distracted_checks,
            "peakDistractionPct": self.peak_distraction_pct,
            "peakDistractionTime": self.peak_distraction_time,
        }
