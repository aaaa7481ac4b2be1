import asyncio

import pytest

from meetsync.config import Settings
from meetsync.database import get_async_conn, init_db
from meetsync.services import Registries
from meetsync.stores import build_stores
from meetsync.stores.sqlite import SqliteLifecycleStore, SqliteRecordStore


@pytest.fixture
async def db_path(tmp_path):
    path = str(tmp_path / "meetsync.db")
    await init_db(path)
    return path


async def test_records_are_visible_to_every_handle(db_path):
    # two handles on one file stand in for two worker processes
    writer = SqliteRecordStore("presence", db_path)
    reader = SqliteRecordStore("presence", db_path)

    await writer.upsert("m1", "a", {"id": "a", "displayName": "Ada"}, 1_000)
    await writer.upsert("m1", "a", {"id": "a", "displayName": "Ada L."}, 2_000)

    assert await reader.live("m1", 0) == [{"id": "a", "displayName": "Ada L."}]


async def test_live_evicts_rows_older_than_cutoff(db_path):
    store = SqliteRecordStore("telemetry", db_path)
    await store.upsert("m1", "a", {"n": 1}, 1_000)
    await store.upsert("m1", "b", {"n": 2}, 5_000)

    assert await store.live("m1", 2_000) == [{"n": 2}]
    assert await store.live("m1", 0) == [{"n": 2}]


async def test_reads_do_not_wait_on_a_writer(db_path):
    store = SqliteRecordStore("telemetry", db_path)
    await store.upsert("m1", "a", {"n": 1}, 5_000)

    writer = await get_async_conn(db_path)
    try:
        await writer.execute("BEGIN IMMEDIATE")
        # nothing is stale, so the read never needs the write lock
        assert await asyncio.wait_for(store.live("m1", 1_000), timeout=1) == [{"n": 1}]
    finally:
        await writer.rollback()
        await writer.close()


async def test_eviction_spares_a_row_refreshed_after_the_cutoff(db_path):
    store = SqliteRecordStore("presence", db_path)
    await store.upsert("m1", "a", {"id": "a"}, 1_000)
    await store.upsert("m1", "b", {"id": "b"}, 1_000)
    assert await store.live("m1", 2_000) == []

    await store.upsert("m1", "a", {"id": "a"}, 3_000)
    assert await store.live("m1", 2_000) == [{"id": "a"}]


async def test_namespaces_and_meetings_do_not_mix(db_path):
    presence = SqliteRecordStore("presence", db_path)
    telemetry = SqliteRecordStore("telemetry", db_path)
    await presence.upsert("m1", "a", {"kind": "presence"}, 1_000)
    await telemetry.upsert("m1", "a", {"kind": "telemetry"}, 1_000)
    await presence.upsert("m2", "a", {"kind": "other meeting"}, 1_000)

    assert await presence.live("m1", 0) == [{"kind": "presence"}]
    await presence.remove("m1", "a")
    assert await presence.live("m1", 0) == []
    assert await telemetry.live("m1", 0) == [{"kind": "telemetry"}]


async def test_lifecycle_flag_is_shared_and_sticky(db_path):
    host = SqliteLifecycleStore(db_path)
    guest = SqliteLifecycleStore(db_path)

    assert await guest.is_ended("m1") is False
    await host.mark_ended("m1")
    await host.mark_ended("m1")
    assert await guest.is_ended("m1") is True


async def test_build_stores_wires_the_sqlite_backend(tmp_path):
    config = Settings(store_backend="sqlite", sqlite_path=str(tmp_path / "app.db"))
    stores = build_stores(config)
    await stores.connect()

    registries = Registries.from_stores(stores, ttl_ms=10_000, clock=lambda: 1_000)
    assert await registries.lifecycle.get("m1") is False
    await registries.lifecycle.mark_ended("m1")
    assert await registries.lifecycle.get("m1") is True
    await stores.close()


def test_unknown_backend_is_rejected():
    with pytest.raises(ValueError):
        build_stores(Settings(store_backend="etcd"))
