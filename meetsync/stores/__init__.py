import logging
from dataclasses import dataclass, field
from typing import Any

from meetsync.config import Settings, settings as default_settings
from meetsync.stores.base import LifecycleStore, PresenceStore, RecordStore, TelemetryStore
from meetsync.stores.memory import MemoryLifecycleStore, MemoryRecordStore

logger = logging.getLogger(__name__)

__all__ = [
    "LifecycleStore",
    "PresenceStore",
    "RecordStore",
    "Stores",
    "TelemetryStore",
    "build_stores",
    "memory_stores",
]


@dataclass
class Stores:
    """The three registry handles, plus whatever owns their connections."""

    presence: PresenceStore
    telemetry: TelemetryStore
    lifecycle: LifecycleStore
    backend: str = "memory"
    _on_connect: list[Any] = field(default_factory=list, repr=False)
    _on_close: list[Any] = field(default_factory=list, repr=False)

    async def connect(self) -> None:
        for hook in self._on_connect:
            await hook()
        logger.info("Registry store connected (backend=%s)", self.backend)

    async def close(self) -> None:
        for hook in self._on_close:
            await hook()
        logger.info("Registry store closed (backend=%s)", self.backend)


def memory_stores() -> Stores:
    """Process-local stores. Single-instance runs and tests only."""
    return Stores(
        presence=MemoryRecordStore(),
        telemetry=MemoryRecordStore(),
        lifecycle=MemoryLifecycleStore(),
        backend="memory",
    )


def build_stores(config: Settings | None = None) -> Stores:
    """Build the store bundle named by ``config.store_backend``."""
    config = config or default_settings
    backend = config.store_backend.lower()

    if backend == "memory":
        return memory_stores()

    if backend == "sqlite":
        from meetsync.database import init_db
        from meetsync.stores.sqlite import SqliteLifecycleStore, SqliteRecordStore

        path = config.sqlite_path
        return Stores(
            presence=SqliteRecordStore("presence", path),
            telemetry=SqliteRecordStore("telemetry", path),
            lifecycle=SqliteLifecycleStore(path),
            backend="sqlite",
            _on_connect=[lambda: init_db(path)],
        )

    if backend == "redis":
        import redis.asyncio as redis

        from meetsync.stores.redis_store import RedisLifecycleStore, RedisRecordStore

        client = redis.from_url(config.redis_url, decode_responses=True)
        ttl = config.presence_ttl_seconds
        return Stores(
            presence=RedisRecordStore(client, "presence", ttl),
            telemetry=RedisRecordStore(client, "telemetry", ttl),
            lifecycle=RedisLifecycleStore(client),
            backend="redis",
            _on_connect=[client.ping],
            _on_close=[client.aclose],
        )

    raise ValueError(f"Unknown store backend: {config.store_backend!r}")
