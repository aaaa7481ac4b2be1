import asyncio
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol

from meetsync.aggregator.dashboard import GroupSummary, RosterRow, group_summary, roster_rows
from meetsync.aggregator.debounce import DistractionCounters, FrameThrottle, StatusDebouncer
from meetsync.aggregator.hold_stale import HoldStaleView
from meetsync.aggregator.identity import Identity
from meetsync.clients.meeting_client import MeetingClient
from meetsync.clock import Clock, now_ms
from meetsync.config import Settings, settings as default_settings
from meetsync.errors import ClassifierUnavailable, MediaUnavailable, TransientNetworkFailure, ValidationError
from meetsync.models import AggregatedView, ParticipantRecord, Status

logger = logging.getLogger(__name__)


class Classifier(Protocol):
    """Attentiveness classifier. ``initialize`` raises ``ClassifierUnavailable``
    when the model cannot be loaded; ``detect`` returns a status label."""

    def initialize(self) -> None: ...

    def detect(self, frame: Any, timestamp_ms: float) -> str: ...


class Phase(str, Enum):
    IDLE = "idle"
    JOINED = "joined"
    LEFT = "left"
    ENDED = "ended"


class Panel(str, Enum):
    PARTICIPANTS = "participants"
    DASHBOARD = "dashboard"


class MeetingAggregator:
    """One participant's view of a meeting, kept in sync by polling.

    Scheduling model (single event loop, no locks):

    1. **Detection** is driven by the caller's render loop through
       ``on_frame``. Each accepted frame is debounced, counted and handed
       to a single background sender. At most one report is in flight;
       while it is, only the newest pending report is kept, so the relay
       never goes backwards.

    2. **Four timer loops** run as independent ``asyncio`` tasks started by
       ``on_join``: presence heartbeat, roster poll, telemetry poll and
       lifecycle poll. A failed request is logged at DEBUG and simply retried
       on the next tick; a loop never dies on a network error.

    3. **Teardown** is explicit. ``leave`` cancels the loops and sends
       best-effort removals; seeing ``ended`` on a lifecycle poll cancels the
       loops and leaves removal to the registries' TTL.
    """

    def __init__(
        self,
        client: MeetingClient,
        meeting_id: str,
        identity: Identity,
        *,
        is_host: bool = False,
        classifier: Classifier | None = None,
        config: Settings | None = None,
        clock: Clock = now_ms,
    ) -> None:
        config = config or default_settings
        self.client = client
        self.meeting_id = meeting_id
        self.identity = identity
        self.is_host = is_host
        self.classifier = classifier
        self.clock = clock

        self.heartbeat_interval = config.heartbeat_interval_seconds
        self.roster_interval = config.roster_poll_interval_seconds
        self.telemetry_interval = config.telemetry_poll_interval_seconds
        self.lifecycle_interval = config.lifecycle_poll_interval_seconds

        # Local media state, read by every heartbeat
        self.is_camera_on = False
        self.is_mic_on = False
        self.camera_error: MediaUnavailable | None = None
        self.open_panel: Panel | None = None

        # Detection state, only touched from on_frame
        self.throttle = FrameThrottle(config.detection_throttle_ms)
        self.debouncer = StatusDebouncer(config.no_face_miss_threshold)
        self.counters = DistractionCounters()
        self.classifier_ready = False
        self.last_status: Status | None = None

        # Merged server state
        self._roster: list[ParticipantRecord] = []
        self._hold = HoldStaleView(int(config.hold_stale_seconds * 1000))
        self._distracted_count = 0
        self._total_count = 0

        # Lifecycle
        self.phase = Phase.IDLE
        self._loops: list[asyncio.Task] = []
        self._reporter: asyncio.Task | None = None
        self._next_report: dict | None = None
        self._ended_callbacks: list[Callable[[], None]] = []

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def on_meeting_ended(self, fn: Callable[[], None]) -> None:
        """Register a callback fired once when the host ends the meeting."""
        self._ended_callbacks.append(fn)

    async def on_join(self, camera_enabled: bool, mic_enabled: bool) -> None:
        """Register with the roster right away, then start every loop."""
        if self.phase is not Phase.IDLE:
            return
        self.is_camera_on = camera_enabled and self.camera_error is None
        self.is_mic_on = mic_enabled
        self.phase = Phase.JOINED
        self._init_classifier()

        await self.heartbeat()
        self._loops = [
            asyncio.create_task(self._every(self.heartbeat_interval, self.heartbeat, delay_first=True)),
            asyncio.create_task(self._every(self.roster_interval, self.refresh_roster)),
            asyncio.create_task(self._every(self.telemetry_interval, self.refresh_distraction)),
            asyncio.create_task(self._every(self.lifecycle_interval, self.refresh_status)),
        ]

    def on_frame(self, frame: Any, timestamp_ms: float) -> dict | None:
        """Called once per rendered frame. Returns the report sent, if any."""
        if not self._detecting():
            return None

        try:
            raw = Status.parse(self.classifier.detect(frame, timestamp_ms))
        except ValidationError:
            logger.debug("Unrecognized classifier label", exc_info=True)
            raw = Status.ERROR

        if not self.throttle.ready(timestamp_ms):
            return None

        status = self.debouncer.feed(raw)
        self.counters.accept(status, self.clock())
        self.last_status = status

        report = self.counters.to_report(
            self.identity.user_id, self.identity.display_name, status
        )
        self._submit_report(report)
        return report

    async def set_camera(self, on: bool) -> None:
        """Turning the camera off withdraws this participant from telemetry."""
        if on and self.camera_error is not None:
            return
        was_on, self.is_camera_on = self.is_camera_on, on
        if was_on and not on:
            self.debouncer.reset()
            self.last_status = None
            if self.phase is Phase.JOINED:
                await self.drain()
                await self._quietly(
                    self.client.forget(self.meeting_id, self.identity.user_id), "forget"
                )

    def set_mic(self, on: bool) -> None:
        self.is_mic_on = on

    def camera_failed(self, error: MediaUnavailable) -> None:
        """Media acquisition failed: show a placeholder tile, no detection."""
        logger.warning("Camera unavailable: %s", error)
        self.camera_error = error
        self.is_camera_on = False

    def on_toggle_panel(self, kind: Panel | str) -> Panel | None:
        """Open *kind*, or close it if already open. One panel at a time."""
        panel = Panel(kind)
        if panel is Panel.DASHBOARD and not self.is_host:
            return self.open_panel
        self.open_panel = None if self.open_panel is panel else panel
        return self.open_panel

    async def on_end_call(self) -> None:
        """Host: end the meeting for everyone, then leave. Others just leave."""
        if self.phase is not Phase.JOINED:
            return
        if not self.is_host:
            await self.leave()
            return
        await self._quietly(self.client.end_meeting(self.meeting_id), "end meeting")
        await self.leave()
        self.phase = Phase.ENDED

    async def drain(self) -> None:
        """Wait until the latest telemetry report has been sent."""
        if self._reporter is not None:
            await asyncio.gather(self._reporter, return_exceptions=True)

    async def leave(self) -> None:
        """Stop every loop and ask the registries to drop us. Best effort."""
        if self.phase is not Phase.JOINED:
            return
        self.phase = Phase.LEFT
        await self._stop_loops()
        await asyncio.gather(
            self._quietly(self.client.leave(self.meeting_id, self.identity.user_id), "leave"),
            self._quietly(self.client.forget(self.meeting_id, self.identity.user_id), "forget"),
        )

    # ------------------------------------------------------------------
    # Read-only projections
    # ------------------------------------------------------------------

    def presence_list(self) -> list[ParticipantRecord]:
        """Roster with the host first, then alphabetical."""
        return sorted(self._roster, key=lambda p: (not p.is_host, p.display_name.casefold()))

    def distraction_aggregate(self) -> AggregatedView:
        return AggregatedView(
            distracted_count=self._distracted_count,
            total_count=self._total_count,
            participants=self._hold.participants(),
        )

    def participant_rows(self) -> list[RosterRow]:
        """Roster order, each row with its held distraction pct or ``None``."""
        return roster_rows(self.presence_list(), self._hold.participants())

    def dashboard_summary(self) -> GroupSummary | None:
        """Host dashboard numbers; ``None`` for everyone else."""
        if not self.is_host:
            return None
        return group_summary(self.distraction_aggregate())

    def meeting_ended(self) -> bool:
        return self.phase is Phase.ENDED

    # ------------------------------------------------------------------
    # Loop bodies: one request each, never raise on network failure
    # ------------------------------------------------------------------

    async def heartbeat(self) -> None:
        record = ParticipantRecord(
            id=self.identity.user_id,
            display_name=self.identity.display_name,
            is_host=self.is_host,
            is_camera_on=self.is_camera_on,
            is_mic_on=self.is_mic_on,
        )
        await self._quietly(self.client.heartbeat(self.meeting_id, record), "heartbeat")

    async def refresh_roster(self) -> None:
        try:
            self._roster = await self.client.participants(self.meeting_id)
        except TransientNetworkFailure as e:
            logger.debug("Roster poll failed: %s", e)

    async def refresh_distraction(self) -> None:
        try:
            view = await self.client.snapshot(self.meeting_id)
        except TransientNetworkFailure as e:
            logger.debug("Telemetry poll failed: %s", e)
            return
        self._hold.merge(view.participants, self.clock())
        self._distracted_count = view.distracted_count
        self._total_count = view.total_count

    async def refresh_status(self) -> None:
        try:
            ended = await self.client.is_ended(self.meeting_id)
        except TransientNetworkFailure as e:
            logger.debug("Lifecycle poll failed: %s", e)
            return
        if ended and self.phase is Phase.JOINED:
            await self._meeting_ended()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _init_classifier(self) -> None:
        if self.classifier is None or self.classifier_ready:
            return
        try:
            self.classifier.initialize()
        except ClassifierUnavailable as e:
            # presence and lifecycle keep running without detection
            logger.warning("Distraction detection disabled: %s", e)
            return
        self.classifier_ready = True

    def _detecting(self) -> bool:
        return (
            self.phase is Phase.JOINED
            and self.is_camera_on
            and self.classifier_ready
            and self.classifier is not None
        )

    async def _meeting_ended(self) -> None:
        logger.info("Meeting %s ended by host", self.meeting_id)
        self.phase = Phase.ENDED
        await self._stop_loops()
        for fn in self._ended_callbacks:
            try:
                fn()
            except Exception:
                logger.exception("meeting-ended callback failed")

    async def _every(
        self,
        interval: float,
        tick: Callable[[], Awaitable[None]],
        *,
        delay_first: bool = False,
    ) -> None:
        if delay_first:
            await asyncio.sleep(interval)
        while self.phase is Phase.JOINED:
            await tick()
            if self.phase is not Phase.JOINED:
                break
            await asyncio.sleep(interval)

    async def _stop_loops(self) -> None:
        current = asyncio.current_task()
        loops = [t for t in self._loops if t is not current]
        for task in loops:
            task.cancel()
        await asyncio.gather(*loops, return_exceptions=True)
        self._loops = []
        # in-flight reports are single requests; let them finish
        await self.drain()

    async def _quietly(self, request: Awaitable[Any], what: str) -> None:
        try:
            await request
        except TransientNetworkFailure as e:
            logger.debug("%s failed: %s", what, e)

    def _submit_report(self, report: dict) -> None:
        # one POST in flight; a newer report replaces any still waiting
        self._next_report = report
        if self._reporter is None or self._reporter.done():
            self._reporter = asyncio.create_task(self._flush_reports())

    async def _flush_reports(self) -> None:
        while self._next_report is not None:
            report, self._next_report = self._next_report, None
            await self._quietly(self.client.report(self.meeting_id, report), "report")
