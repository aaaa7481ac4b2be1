import json

from meetsync.database import get_async_conn


class SqliteRecordStore:
    """Record store on a SQLite file shared by every worker process on the host.

    Rows are namespaced so presence and telemetry share one table.
    """

    def __init__(self, namespace: str, db_path: str | None = None) -> None:
        self.namespace = namespace
        self.db_path = db_path

    async def upsert(
        self, meeting_id: str, key: str, payload: dict, seen_at_ms: int
    ) -> None:
        conn = await get_async_conn(self.db_path)
        try:
            await conn.execute(
                "INSERT OR REPLACE INTO records "
                "(namespace, meeting_id, record_key, payload, seen_at) "
                "VALUES (?, ?, ?, ?, ?)",
                (self.namespace, meeting_id, key, json.dumps(payload), seen_at_ms),
            )
            await conn.commit()
        finally:
            await conn.close()

    async def live(self, meeting_id: str, cutoff_ms: int) -> list[dict]:
        conn = await get_async_conn(self.db_path)
        try:
            rows = await conn.execute(
                "SELECT record_key, payload, seen_at FROM records "
                "WHERE namespace = ? AND meeting_id = ? ORDER BY record_key",
                (self.namespace, meeting_id),
            )
            fresh: list[dict] = []
            stale: list[str] = []
            for row in await rows.fetchall():
                if row["seen_at"] < cutoff_ms:
                    stale.append(row["record_key"])
                else:
                    fresh.append(json.loads(row["payload"]))

            # only take the write lock when there is something to evict
            if stale:
                await conn.executemany(
                    "DELETE FROM records WHERE namespace = ? AND meeting_id = ? "
                    "AND record_key = ? AND seen_at < ?",
                    [(self.namespace, meeting_id, key, cutoff_ms) for key in stale],
                )
                await conn.commit()
            return fresh
        finally:
            await conn.close()

    async def remove(self, meeting_id: str, key: str) -> None:
        conn = await get_async_conn(self.db_path)
        try:
            await conn.execute(
                "DELETE FROM records "
                "WHERE namespace = ? AND meeting_id = ? AND record_key = ?",
                (self.namespace, meeting_id, key),
            )
            await conn.commit()
        finally:
            await conn.close()

    async def ping(self) -> None:
        conn = await get_async_conn(self.db_path)
        try:
            await conn.execute("SELECT 1")
        finally:
            await conn.close()


class SqliteLifecycleStore:
    def __init__(self, db_path: str | None = None) -> None:
        self.db_path = db_path

    async def is_ended(self, meeting_id: str) -> bool:
        conn = await get_async_conn(self.db_path)
        try:
            row = await conn.execute(
                "SELECT 1 FROM ended_meetings WHERE meeting_id = ?", (meeting_id,)
            )
            return await row.fetchone() is not None
        finally:
            await conn.close()

    async def mark_ended(self, meeting_id: str) -> None:
        conn = await get_async_conn(self.db_path)
        try:
            await conn.execute(
                "INSERT OR IGNORE INTO ended_meetings (meeting_id) VALUES (?)",
                (meeting_id,),
            )
            await conn.commit()
        finally:
            await conn.close()

    async def ping(self) -> None:
        conn = await get_async_conn(self.db_path)
        try:
            await conn.execute("SELECT 1")
        finally:
            await conn.close()
