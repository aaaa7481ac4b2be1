from contextlib import contextmanager

import httpx

from meetsync.config import settings
from meetsync.errors import TransientNetworkFailure
from meetsync.models import AggregatedView, ParticipantRecord


@contextmanager
def _decoding(what: str):
    """A body that doesn't decode is treated like a failed request."""
    try:
        yield
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise TransientNetworkFailure(f"Malformed {what} response: {e}") from e


class MeetingClient:
    """Async wrapper around the meetsync HTTP API, one coroutine per endpoint.

    Usage::

        client = MeetingClient()                       # api_base_url from env
        await client.heartbeat("m1", record)
        view = await client.snapshot("m1")

        # in-process, against the ASGI app (tests)
        client = MeetingClient(transport=httpx.ASGITransport(app=app))

    Every ``httpx.HTTPError``, non-2xx responses included, surfaces as
    ``TransientNetworkFailure`` so polling loops have one thing to swallow.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=timeout if timeout is not None else settings.request_timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "MeetingClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------
    async def _request(self, method: str, path: str, **kwargs) -> dict:
        try:
            resp = await self._http.request(method, path, **kwargs)
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise TransientNetworkFailure(f"{method} {path} failed: {e}") from e

    # ------------------------------------------------------------------
    # Presence
    # ------------------------------------------------------------------
    async def heartbeat(self, meeting_id: str, record: ParticipantRecord) -> None:
        body = record.to_dict()
        body.pop("lastSeenAt")
        await self._request("POST", f"/meetings/{meeting_id}/participants", json=body)

    async def participants(self, meeting_id: str) -> list[ParticipantRecord]:
        data = await self._request("GET", f"/meetings/{meeting_id}/participants")
        with _decoding("participants"):
            return [ParticipantRecord.from_dict(p) for p in data.get("participants", [])]

    async def leave(self, meeting_id: str, participant_id: str) -> None:
        await self._request(
            "DELETE",
            f"/meetings/{meeting_id}/participants",
            params={"participantId": participant_id},
        )

    # ------------------------------------------------------------------
    # Distraction telemetry
    # ------------------------------------------------------------------
    async def report(self, meeting_id: str, report: dict) -> None:
        await self._request("POST", f"/meetings/{meeting_id}/distraction", json=report)

    async def snapshot(self, meeting_id: str) -> AggregatedView:
        data = await self._request("GET", f"/meetings/{meeting_id}/distraction")
        with _decoding("distraction snapshot"):
            return AggregatedView.from_dict(data)

    async def forget(self, meeting_id: str, participant_id: str) -> None:
        await self._request(
            "DELETE",
            f"/meetings/{meeting_id}/distraction",
            params={"participantId": participant_id},
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def is_ended(self, meeting_id: str) -> bool:
        data = await self._request("GET", f"/meetings/{meeting_id}/status")
        with _decoding("status"):
            return bool(data.get("ended", False))

    async def end_meeting(self, meeting_id: str) -> bool:
        data = await self._request("POST", f"/meetings/{meeting_id}/status")
        with _decoding("status"):
            return bool(data.get("ended", False))
