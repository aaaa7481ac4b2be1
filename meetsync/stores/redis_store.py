import json
import math

import redis.asyncio as redis

# ARGV[1] is the cutoff; a field is deleted only if its stored seenAt is
# still below it when the script runs.
EVICT_STALE = """
local removed = 0
for i = 2, #ARGV do
  local raw = redis.call('HGET', KEYS[1], ARGV[i])
  if raw and cjson.decode(raw)['seenAt'] < tonumber(ARGV[1]) then
    removed = removed + redis.call('HDEL', KEYS[1], ARGV[i])
  end
end
return removed
"""


class RedisRecordStore:
    """Record store on Redis, one hash per meeting.

    ``{namespace}:{meeting_id}`` -> participant id -> ``{"seenAt", "payload"}``.
    The whole hash expires *ttl_seconds* after its last write, so an abandoned
    meeting leaves nothing behind; individual stale fields are dropped lazily
    on read, by a script that rechecks each field server-side.
    """

    def __init__(self, client: redis.Redis, namespace: str, ttl_seconds: float) -> None:
        self._client = client
        self.namespace = namespace
        self.ttl_seconds = max(1, math.ceil(ttl_seconds))
        self._evict_stale = client.register_script(EVICT_STALE)

    def _key(self, meeting_id: str) -> str:
        return f"{self.namespace}:{meeting_id}"

    async def upsert(
        self, meeting_id: str, key: str, payload: dict, seen_at_ms: int
    ) -> None:
        name = self._key(meeting_id)
        value = json.dumps({"seenAt": seen_at_ms, "payload": payload})
        async with self._client.pipeline(transaction=True) as pipe:
            pipe.hset(name, key, value)
            pipe.expire(name, self.ttl_seconds)
            await pipe.execute()

    async def live(self, meeting_id: str, cutoff_ms: int) -> list[dict]:
        name = self._key(meeting_id)
        entries = await self._client.hgetall(name)
        fresh: list[dict] = []
        stale: list[str] = []
        for key, raw in sorted(entries.items()):
            entry = json.loads(raw)
            if entry["seenAt"] < cutoff_ms:
                stale.append(key)
            else:
                fresh.append(entry["payload"])
        if stale:
            await self._evict_stale(keys=[name], args=[cutoff_ms, *stale])
        return fresh

    async def remove(self, meeting_id: str, key: str) -> None:
        await self._client.hdel(self._key(meeting_id), key)

    async def ping(self) -> None:
        await self._client.ping()


class RedisLifecycleStore:
    def __init__(self, client: redis.Redis, namespace: str = "ended") -> None:
        self._client = client
        self.namespace = namespace

    async def is_ended(self, meeting_id: str) -> bool:
        return bool(await self._client.exists(f"{self.namespace}:{meeting_id}"))

    async def mark_ended(self, meeting_id: str) -> None:
        await self._client.set(f"{self.namespace}:{meeting_id}", "1")

    async def ping(self) -> None:
        await self._client.ping()
