import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from meetsync.clock import Clock, now_ms
from meetsync.config import settings
from meetsync.routes import distraction, health, participants, status
from meetsync.services import Registries
from meetsync.stores import Stores, build_stores


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect the shared registry store on startup, release it on shutdown."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    await app.state.stores.connect()
    yield
    await app.state.stores.close()


def create_app(
    stores: Stores | None = None,
    *,
    ttl_ms: int | None = None,
    clock: Clock = now_ms,
) -> FastAPI:
    """Build the API. *stores* defaults to the backend named in settings."""
    app = FastAPI(
        title="meetsync",
        description="Presence, meeting lifecycle and distraction telemetry relay",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Every browser polls from its own origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.stores = stores or build_stores()
    app.state.registries = Registries.from_stores(app.state.stores, ttl_ms=ttl_ms, clock=clock)

    app.include_router(participants.router)
    app.include_router(distraction.router)
    app.include_router(status.router)
    app.include_router(health.router)
    return app


app = create_app()
