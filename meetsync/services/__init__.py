from dataclasses import dataclass

from meetsync.clock import Clock, now_ms
from meetsync.services.lifecycle import LifecycleService
from meetsync.services.presence import PresenceService
from meetsync.services.telemetry import TelemetryService
from meetsync.stores import Stores

__all__ = ["LifecycleService", "PresenceService", "Registries", "TelemetryService"]


@dataclass
class Registries:
    presence: PresenceService
    telemetry: TelemetryService
    lifecycle: LifecycleService

    @classmethod
    def from_stores(
        cls, stores: Stores, ttl_ms: int | None = None, clock: Clock = now_ms
    ) -> "Registries":
        return cls(
            presence=PresenceService(stores.presence, ttl_ms=ttl_ms, clock=clock),
            telemetry=TelemetryService(stores.telemetry, ttl_ms=ttl_ms, clock=clock),
            lifecycle=LifecycleService(stores.lifecycle),
        )
